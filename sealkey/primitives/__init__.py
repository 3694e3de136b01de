"""Sealkey primitives: key generation, envelope codec, encryption, loading."""

from sealkey.primitives.encrypted import ScryptParams, decrypt, encrypt
from sealkey.primitives.errors import (
    ConfigurationError,
    DecryptionFailed,
    EncodingError,
    EntropyUnavailable,
    KeyEnvelopeError,
    KeyParseError,
    MalformedEnvelope,
    PassphraseCallbackFailed,
    SignatureVerificationError,
    UnsupportedEnvelopeType,
    UnsupportedKeyType,
)
from sealkey.primitives.keys import (
    KeyPair,
    PassFunc,
    generate_key_pair,
    generate_private_key,
)
from sealkey.primitives.loader import load_ecdsa_private_key, load_private_key_with
from sealkey.primitives.pem import (
    PemBlock,
    PublicKeyProvider,
    cert_to_pem,
    decode_pem,
    decode_pem_block,
    decode_pem_chain,
    encode_pem,
    key_to_pem,
    load_certificate,
    load_certificate_chain,
    load_public_key,
    public_key_pem,
)
from sealkey.primitives.signer import ECDSASignerVerifier

__all__ = [
    # Errors
    "KeyEnvelopeError",
    "EntropyUnavailable",
    "PassphraseCallbackFailed",
    "EncodingError",
    "MalformedEnvelope",
    "UnsupportedEnvelopeType",
    "DecryptionFailed",
    "KeyParseError",
    "UnsupportedKeyType",
    "SignatureVerificationError",
    "ConfigurationError",
    # Encryption
    "ScryptParams",
    "encrypt",
    "decrypt",
    # Keys
    "KeyPair",
    "PassFunc",
    "generate_private_key",
    "generate_key_pair",
    # Loading
    "load_ecdsa_private_key",
    "load_private_key_with",
    # PEM
    "PemBlock",
    "PublicKeyProvider",
    "encode_pem",
    "decode_pem",
    "decode_pem_block",
    "decode_pem_chain",
    "key_to_pem",
    "public_key_pem",
    "cert_to_pem",
    "load_public_key",
    "load_certificate",
    "load_certificate_chain",
    # Signing
    "ECDSASignerVerifier",
]
