"""Passphrase-based authenticated encryption.

Ciphertext is a JSON document in the TUF "encrypted" key format: scrypt
derives a 32-byte key from the passphrase and a fresh random salt, and NaCl
secretbox (XSalsa20-Poly1305) seals the plaintext under a fresh random nonce.

    {"kdf": {"name": "scrypt", "params": {"N": 32768, "r": 8, "p": 1}, "salt": "..."},
     "cipher": {"name": "nacl/secretbox", "nonce": "..."},
     "ciphertext": "..."}

Binary fields are standard base64. Decryption failures of any kind (bad
passphrase, tampered bytes, unreadable document) surface as one error type.
"""

import base64
import binascii
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from nacl.exceptions import CryptoError
from nacl.secret import SecretBox

from sealkey.constants import SCRYPT_N, SCRYPT_N_ENV_VAR, SCRYPT_P, SCRYPT_R
from sealkey.primitives.errors import (
    ConfigurationError,
    DecryptionFailed,
    EntropyUnavailable,
    PassphraseCallbackFailed,
)

KDF_NAME = "scrypt"
CIPHER_NAME = "nacl/secretbox"

SALT_SIZE = 32
KEY_SIZE = SecretBox.KEY_SIZE
NONCE_SIZE = SecretBox.NONCE_SIZE

# Upper bounds accepted from stored documents. scrypt uses 128 * N * r bytes
# per lane; the total across p lanes is capped at MAX_MEMORY.
MAX_N = 1 << 20
MAX_R = 32
MAX_P = 16
MAX_MEMORY = 256 * 1024 * 1024

Passphrase = Union[bytes, str]


@dataclass(frozen=True)
class ScryptParams:
    """scrypt work factors.

    Attributes:
        n: CPU/memory cost, a power of two greater than 1.
        r: Block size.
        p: Parallelization.
    """

    n: int = SCRYPT_N
    r: int = SCRYPT_R
    p: int = SCRYPT_P

    def is_valid(self) -> bool:
        """Check the factors are usable and within accepted bounds."""
        return (
            1 < self.n <= MAX_N
            and self.n & (self.n - 1) == 0
            and 1 <= self.r <= MAX_R
            and 1 <= self.p <= MAX_P
            and self.memory_cost() <= MAX_MEMORY
        )

    def memory_cost(self) -> int:
        """Bytes of scratch memory the KDF needs across all lanes."""
        return 128 * self.n * self.r * self.p

    def to_dict(self) -> Dict[str, int]:
        return {"N": self.n, "r": self.r, "p": self.p}

    @classmethod
    def from_env(cls) -> "ScryptParams":
        """Default params, with N overridable through SEALKEY_SCRYPT_N.

        Raises:
            ConfigurationError: If the override is not a valid work factor.
        """
        raw = os.environ.get(SCRYPT_N_ENV_VAR)
        if not raw:
            return cls()
        try:
            params = cls(n=int(raw))
        except ValueError:
            params = None
        if params is None or not params.is_valid():
            raise ConfigurationError(
                f"{SCRYPT_N_ENV_VAR} must be a power of two within the scrypt memory limit, got {raw!r}",
                field=SCRYPT_N_ENV_VAR,
            )
        return params


def _passphrase_bytes(passphrase: Passphrase) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    if isinstance(passphrase, (bytes, bytearray, memoryview)):
        return bytes(passphrase)
    raise PassphraseCallbackFailed(
        f"passphrase must be bytes or str, got {type(passphrase).__name__}"
    )


def _random(size: int) -> bytes:
    try:
        return os.urandom(size)
    except (NotImplementedError, OSError) as e:
        raise EntropyUnavailable("random source unavailable", cause=e) from e


def _derive_key(passphrase: bytes, salt: bytes, params: ScryptParams) -> bytes:
    kdf = Scrypt(salt=salt, length=KEY_SIZE, n=params.n, r=params.r, p=params.p)
    return kdf.derive(passphrase)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encrypt(
    plaintext: bytes,
    passphrase: Passphrase,
    params: Optional[ScryptParams] = None,
) -> bytes:
    """Encrypt plaintext under passphrase.

    Every call draws a new salt and nonce, so equal inputs never produce
    equal output.

    Args:
        plaintext: Bytes to protect.
        passphrase: User passphrase (str is UTF-8 encoded).
        params: scrypt work factors. Defaults to ScryptParams.from_env().

    Returns:
        The JSON document as bytes.

    Raises:
        EntropyUnavailable: If no random bytes can be drawn.
        ConfigurationError: If params are invalid.
        PassphraseCallbackFailed: If passphrase is not bytes or str.
    """
    if params is None:
        params = ScryptParams.from_env()
    elif not params.is_valid():
        raise ConfigurationError(f"invalid scrypt params: {params}")

    salt = _random(SALT_SIZE)
    nonce = _random(NONCE_SIZE)
    key = _derive_key(_passphrase_bytes(passphrase), salt, params)
    sealed = SecretBox(key).encrypt(plaintext, nonce)

    document = {
        "kdf": {"name": KDF_NAME, "params": params.to_dict(), "salt": _b64(salt)},
        "cipher": {"name": CIPHER_NAME, "nonce": _b64(nonce)},
        "ciphertext": _b64(sealed.ciphertext),
    }
    return json.dumps(document, separators=(",", ":")).encode("utf-8")


def decrypt(ciphertext: bytes, passphrase: Passphrase) -> bytes:
    """Decrypt a document produced by encrypt.

    Args:
        ciphertext: The JSON document.
        passphrase: User passphrase.

    Returns:
        The original plaintext.

    Raises:
        DecryptionFailed: Wrong passphrase, tampered or unreadable document.
        PassphraseCallbackFailed: If passphrase is not bytes or str.
    """
    password = _passphrase_bytes(passphrase)
    salt, params, nonce, sealed = _parse_document(ciphertext)
    try:
        key = _derive_key(password, salt, params)
    except (MemoryError, ValueError) as e:
        raise DecryptionFailed("encrypted: key derivation failed", cause=e) from e
    try:
        return SecretBox(key).decrypt(sealed, nonce)
    except CryptoError as e:
        raise DecryptionFailed("encrypted: decryption failed", cause=e) from e


def _parse_document(ciphertext: bytes):
    try:
        document = json.loads(ciphertext)
        kdf: Dict[str, Any] = document["kdf"]
        cipher: Dict[str, Any] = document["cipher"]
        if kdf["name"] != KDF_NAME:
            raise DecryptionFailed(f"encrypted: unknown kdf name {kdf['name']!r}")
        if cipher["name"] != CIPHER_NAME:
            raise DecryptionFailed(f"encrypted: unknown cipher name {cipher['name']!r}")

        raw_params = kdf["params"]
        params = ScryptParams(n=int(raw_params["N"]), r=int(raw_params["r"]), p=int(raw_params["p"]))
        salt = base64.b64decode(kdf["salt"], validate=True)
        nonce = base64.b64decode(cipher["nonce"], validate=True)
        sealed = base64.b64decode(document["ciphertext"], validate=True)
    except DecryptionFailed:
        raise
    except (ValueError, KeyError, TypeError, binascii.Error) as e:
        raise DecryptionFailed(f"encrypted: invalid document: {e}", cause=e) from e

    if not params.is_valid():
        raise DecryptionFailed(f"encrypted: unsupported scrypt params {params.to_dict()}")
    if len(nonce) != NONCE_SIZE:
        raise DecryptionFailed("encrypted: invalid nonce length")
    if len(sealed) < SecretBox.MACBYTES:
        raise DecryptionFailed("encrypted: ciphertext too short")
    return salt, params, nonce, sealed
