"""Error types for sealkey primitives.

Every failure in the generate and load pipelines is raised as a subclass of
KeyEnvelopeError. Nothing is retried and nothing is logged here; callers
decide how to report.
"""

from typing import Optional


class KeyEnvelopeError(Exception):
    """Any failure while generating, encoding, decrypting or loading a key.

    Attributes:
        message: What went wrong, safe to show to a user (never key bytes
            or passphrases).
        cause: The cryptography, PyNaCl or callback exception behind it, if any.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class EntropyUnavailable(KeyEnvelopeError):
    """The random source could not supply key material."""


class PassphraseCallbackFailed(KeyEnvelopeError):
    """The passphrase source failed or was cancelled."""


class EncodingError(KeyEnvelopeError):
    """Key material could not be DER or PEM encoded.

    Attributes:
        key_type: Name of the key class that was rejected, if any.
    """

    def __init__(
        self,
        message: str,
        key_type: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.key_type = key_type


class MalformedEnvelope(KeyEnvelopeError):
    """No valid PEM framing was found."""


class UnsupportedEnvelopeType(KeyEnvelopeError):
    """The envelope tag is not the one the caller needs.

    Attributes:
        tag: The tag actually found in the envelope header.
    """

    def __init__(self, message: str, tag: str):
        super().__init__(message)
        self.tag = tag


class DecryptionFailed(KeyEnvelopeError):
    """Wrong passphrase or corrupted ciphertext.

    The two cases are deliberately reported the same way.
    """


class KeyParseError(KeyEnvelopeError):
    """Decrypted bytes are not a valid PKCS#8 private key."""


class UnsupportedKeyType(KeyEnvelopeError):
    """The envelope holds a key of an algorithm we cannot sign with.

    Attributes:
        key_type: Name of the key class found.
    """

    def __init__(self, message: str, key_type: str):
        super().__init__(message)
        self.key_type = key_type


class SignatureVerificationError(KeyEnvelopeError):
    """A signature did not verify against the public key."""


class ConfigurationError(KeyEnvelopeError):
    """Invalid configuration value.

    Attributes:
        field: Optional name of the setting that failed.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
