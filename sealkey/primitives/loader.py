"""Load an encrypted private key envelope into a signer.

Each stage runs only if the previous one succeeded:

    decode PEM -> check tag -> decrypt -> parse PKCS#8 -> check key type -> wrap
"""

import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from sealkey.constants import PemType
from sealkey.primitives import encrypted
from sealkey.primitives.errors import KeyParseError, UnsupportedEnvelopeType, UnsupportedKeyType
from sealkey.primitives.keys import PassFunc, call_pass_func
from sealkey.primitives.pem import decode_pem
from sealkey.primitives.signer import ECDSASignerVerifier

logger = logging.getLogger(__name__)


def load_ecdsa_private_key(
    key: Union[bytes, str],
    password: Union[bytes, str],
) -> ECDSASignerVerifier:
    """Decrypt an ENCRYPTED COSIGN PRIVATE KEY envelope.

    Args:
        key: The PEM envelope.
        password: Passphrase the key was encrypted under.

    Returns:
        ECDSASignerVerifier using SHA-256.

    Raises:
        MalformedEnvelope: No valid PEM framing.
        UnsupportedEnvelopeType: The envelope is not an encrypted private key.
        DecryptionFailed: Wrong passphrase or corrupted ciphertext.
        PassphraseCallbackFailed: If password is not bytes or str.
        KeyParseError: Decrypted bytes are not PKCS#8 DER.
        UnsupportedKeyType: The key is not an ECDSA key.
    """
    block = decode_pem(key)
    if block.type is not PemType.ENCRYPTED_PRIVATE_KEY:
        raise UnsupportedEnvelopeType(
            f"unsupported pem type: {block.type.value}", tag=block.type.value
        )

    der = encrypted.decrypt(block.payload, password)

    try:
        private_key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyParseError("parsing private key", cause=e) from e

    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        key_type = type(private_key).__name__
        raise UnsupportedKeyType(f"invalid private key type: {key_type}", key_type=key_type)

    logger.debug("Loaded ECDSA %s private key", private_key.curve.name)
    return ECDSASignerVerifier(private_key, hashes.SHA256())


def load_private_key_with(key: Union[bytes, str], pass_func: PassFunc) -> ECDSASignerVerifier:
    """Like load_ecdsa_private_key, asking pass_func once (confirm=False)."""
    return load_ecdsa_private_key(key, call_pass_func(pass_func, confirm=False))
