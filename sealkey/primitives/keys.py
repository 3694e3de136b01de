"""ECDSA P-256 key pair generation.

Produces a fresh private key, encrypts its PKCS#8 encoding under a
passphrase obtained from a callback, and returns the encrypted private
envelope alongside the plain public envelope.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from sealkey.constants import PemType
from sealkey.primitives import encrypted
from sealkey.primitives.encrypted import ScryptParams
from sealkey.primitives.errors import (
    EncodingError,
    EntropyUnavailable,
    KeyEnvelopeError,
    PassphraseCallbackFailed,
)
from sealkey.primitives.pem import encode_pem, key_to_pem

logger = logging.getLogger(__name__)

# Called with confirm=True when the passphrase should be entered twice.
PassFunc = Callable[[bool], bytes]


@dataclass(frozen=True)
class KeyPair:
    """Encoded key pair.

    Attributes:
        private_bytes: ENCRYPTED COSIGN PRIVATE KEY envelope.
        public_bytes: PUBLIC KEY envelope.
    """

    private_bytes: bytes
    public_bytes: bytes


def generate_private_key() -> ec.EllipticCurvePrivateKey:
    """Generate a new ECDSA private key on NIST P-256.

    Raises:
        EntropyUnavailable: If the random source fails.
    """
    try:
        return ec.generate_private_key(ec.SECP256R1())
    except (OSError, RuntimeError) as e:
        raise EntropyUnavailable("generating private key", cause=e) from e


def generate_key_pair(
    pass_func: PassFunc,
    params: Optional[ScryptParams] = None,
) -> KeyPair:
    """Generate a key pair with the private half passphrase-encrypted.

    Args:
        pass_func: Passphrase source, called once with confirm=True.
        params: Optional scrypt work factors for the private key encryption.
            Resolved from the environment before the passphrase is asked for.

    Returns:
        KeyPair with both envelopes.

    Raises:
        EntropyUnavailable: If no key material can be generated.
        EncodingError: If the private key cannot be PKCS#8 encoded.
        PassphraseCallbackFailed: If pass_func fails.
        ConfigurationError: If SEALKEY_SCRYPT_N is invalid.
    """
    if params is None:
        params = ScryptParams.from_env()

    private_key = generate_private_key()

    try:
        der = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (TypeError, ValueError) as e:
        raise EncodingError("x509 encoding private key", cause=e) from e

    password = call_pass_func(pass_func, confirm=True)
    encrypted_bytes = encrypted.encrypt(der, password, params=params)
    private_bytes = encode_pem(PemType.ENCRYPTED_PRIVATE_KEY, encrypted_bytes)

    public_bytes = key_to_pem(private_key.public_key())
    logger.debug("Generated ECDSA P-256 key pair")

    return KeyPair(private_bytes=private_bytes, public_bytes=public_bytes)


def call_pass_func(pass_func: PassFunc, confirm: bool) -> bytes:
    """Invoke a passphrase source, normalizing its result and its failures.

    Raises:
        PassphraseCallbackFailed: If the source raises or returns a non-bytes value.
    """
    try:
        password = pass_func(confirm)
    except KeyEnvelopeError:
        raise
    except Exception as e:
        raise PassphraseCallbackFailed(f"reading passphrase: {e}", cause=e) from e

    if isinstance(password, str):
        return password.encode("utf-8")
    if not isinstance(password, (bytes, bytearray)):
        raise PassphraseCallbackFailed(
            f"passphrase source returned {type(password).__name__}, expected bytes"
        )
    return bytes(password)
