"""ECDSA signer/verifier over a loaded private key."""

from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from sealkey.primitives.errors import SignatureVerificationError
from sealkey.primitives.pem import key_to_pem


class ECDSASignerVerifier:
    """Signs and verifies payloads with one ECDSA key and one hash algorithm."""

    def __init__(
        self,
        private_key: ec.EllipticCurvePrivateKey,
        hash_algorithm: Optional[hashes.HashAlgorithm] = None,
    ):
        self._private_key = private_key
        self.hash_algorithm = hash_algorithm or hashes.SHA256()

    def sign(self, payload: bytes) -> bytes:
        """Return a DER-encoded ECDSA signature over payload."""
        return self._private_key.sign(payload, ec.ECDSA(self.hash_algorithm))

    def verify(self, payload: bytes, signature: bytes) -> None:
        """Check signature over payload.

        Raises:
            SignatureVerificationError: If the signature does not match.
        """
        try:
            self.public_key().verify(signature, payload, ec.ECDSA(self.hash_algorithm))
        except InvalidSignature as e:
            raise SignatureVerificationError("invalid signature", cause=e) from e

    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._private_key.public_key()

    def public_key_pem(self) -> bytes:
        """The public key as a PUBLIC KEY envelope."""
        return key_to_pem(self.public_key())

    def __repr__(self) -> str:
        return (
            f"ECDSASignerVerifier(curve={self._private_key.curve.name}, "
            f"hash={self.hash_algorithm.name})"
        )
