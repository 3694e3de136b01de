"""Sealkey Constants

PEM envelope tags, annotation keys and scrypt work factors.
"""

from enum import Enum


class PemType(str, Enum):
    """Closed set of envelope tags, mapped to their literal header text."""

    ENCRYPTED_PRIVATE_KEY = "ENCRYPTED COSIGN PRIVATE KEY"
    PUBLIC_KEY = "PUBLIC KEY"
    CERTIFICATE = "CERTIFICATE"

    @classmethod
    def from_label(cls, label: str) -> "PemType":
        """Look up a tag by its literal header text.

        Raises:
            ValueError: If the label is not a recognized tag.
        """
        return cls(label)


# Annotation keys used when an envelope travels inside a signed artifact.
SIGNATURE_ANNOTATION = "dev.cosignproject.cosign/signature"
CERTIFICATE_ANNOTATION = "dev.sigstore.cosign/certificate"
CHAIN_ANNOTATION = "dev.sigstore.cosign/chain"

# Environment variables
PASSWORD_ENV_VAR = "SEALKEY_PASSWORD"
SCRYPT_N_ENV_VAR = "SEALKEY_SCRYPT_N"

# scrypt work factors for new encryptions
SCRYPT_N = 32768
SCRYPT_R = 8
SCRYPT_P = 1
