"""sealkey: passphrase-encrypted signing key envelopes."""

__version__ = "0.1.0"
