"""PEM envelope codec.

Frames key material and certificates as tagged PEM blocks and reads them
back. The tag is validated against the closed PemType vocabulary before any
payload byte is looked at; the payload itself is never interpreted here
beyond base64.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from sealkey.constants import PemType
from sealkey.primitives.errors import (
    EncodingError,
    KeyParseError,
    MalformedEnvelope,
    UnsupportedEnvelopeType,
)

logger = logging.getLogger(__name__)

LINE_LENGTH = 64

_BEGIN_RE = re.compile(rb"^-----BEGIN ([^\r\n]*?)-----[ \t]*\r?$", re.MULTILINE)
_END_RE = re.compile(rb"^-----END ([^\r\n]*?)-----[ \t]*\r?$", re.MULTILINE)


@dataclass(frozen=True)
class PemBlock:
    """A decoded envelope.

    Attributes:
        type: Envelope tag.
        payload: Raw bytes carried by the block.
        headers: Optional RFC 1421 style headers.
    """

    type: PemType
    payload: bytes
    headers: Dict[str, str] = field(default_factory=dict)


class PublicKeyProvider(Protocol):
    """Anything that can hand out a public key."""

    def public_key(self):
        ...


def encode_pem(
    pem_type: Union[PemType, str],
    payload: bytes,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """Wrap payload in a PEM block.

    Output is deterministic: same inputs, same bytes.

    Args:
        pem_type: Envelope tag (enum member or its literal label).
        payload: Bytes to carry.
        headers: Optional headers written after the BEGIN line, sorted by key.

    Returns:
        PEM encoded bytes, newline terminated.

    Raises:
        EncodingError: If pem_type is not a recognized tag.
    """
    try:
        label = PemType(pem_type).value
    except ValueError as e:
        raise EncodingError(f"unknown pem type: {pem_type}", cause=e) from e

    lines = [f"-----BEGIN {label}-----"]
    if headers:
        for key in sorted(headers):
            lines.append(f"{key}: {headers[key]}")
        lines.append("")

    body = base64.b64encode(payload).decode("ascii")
    for i in range(0, len(body), LINE_LENGTH):
        lines.append(body[i:i + LINE_LENGTH])

    lines.append(f"-----END {label}-----")
    return ("\n".join(lines) + "\n").encode("ascii")


def decode_pem_block(data: Union[bytes, str]) -> Tuple[PemBlock, bytes]:
    """Decode the first PEM block in data.

    Text before the BEGIN line is skipped.

    Args:
        data: PEM text.

    Returns:
        Tuple of (block, remaining bytes after the END line).

    Raises:
        MalformedEnvelope: No BEGIN line, missing or mismatched END line,
            or a body that is not valid base64.
        UnsupportedEnvelopeType: Framing is fine but the tag is unknown.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    begin = _BEGIN_RE.search(data)
    if begin is None:
        raise MalformedEnvelope("invalid pem block: no BEGIN line found")

    end = _END_RE.search(data, begin.end())
    if end is None:
        raise MalformedEnvelope("invalid pem block: no END line found")

    label = begin.group(1).decode("ascii", errors="replace")
    end_label = end.group(1).decode("ascii", errors="replace")
    if label != end_label:
        raise MalformedEnvelope(
            f"invalid pem block: BEGIN {label!r} does not match END {end_label!r}"
        )

    try:
        pem_type = PemType.from_label(label)
    except ValueError:
        raise UnsupportedEnvelopeType(f"unsupported pem type: {label}", tag=label) from None

    headers, body_lines = _split_headers(data[begin.end():end.start()])
    try:
        payload = base64.b64decode(b"".join(body_lines), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelope(f"invalid pem block: bad base64 body: {e}", cause=e) from e

    rest = data[end.end():].lstrip(b"\r\n")
    logger.debug("Decoded %s envelope (%d payload bytes)", label, len(payload))
    return PemBlock(type=pem_type, payload=payload, headers=headers), rest


def decode_pem(data: Union[bytes, str]) -> PemBlock:
    """Decode the first PEM block in data. See decode_pem_block."""
    block, _ = decode_pem_block(data)
    return block


def decode_pem_chain(data: Union[bytes, str]) -> List[PemBlock]:
    """Decode every consecutive PEM block in data.

    Raises:
        MalformedEnvelope: If data holds no block at all, or a block is broken.
    """
    blocks = []
    rest = data.encode("utf-8") if isinstance(data, str) else data
    while True:
        block, rest = decode_pem_block(rest)
        blocks.append(block)
        if not rest.strip():
            return blocks


def _split_headers(body: bytes) -> Tuple[Dict[str, str], List[bytes]]:
    """Separate optional 'Key: value' header lines from the base64 body."""
    lines = [line.strip() for line in body.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)

    headers: Dict[str, str] = {}
    if lines and b":" in lines[0]:
        while lines and lines[0]:
            key, sep, value = lines.pop(0).partition(b":")
            if not sep:
                raise MalformedEnvelope("invalid pem block: bad header line")
            headers[key.strip().decode("ascii", errors="replace")] = value.strip().decode(
                "ascii", errors="replace"
            )

    return headers, [line for line in lines if line]


def key_to_pem(public_key) -> bytes:
    """Encode a public key as a PUBLIC KEY envelope (SubjectPublicKeyInfo DER).

    Raises:
        EncodingError: If the object is not a public key cryptography can encode.
    """
    try:
        der = public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (AttributeError, TypeError, ValueError, UnsupportedAlgorithm) as e:
        key_type = type(public_key).__name__
        raise EncodingError(
            f"cannot encode public key of type {key_type}",
            key_type=key_type,
            cause=e,
        ) from e
    return encode_pem(PemType.PUBLIC_KEY, der)


def public_key_pem(provider: PublicKeyProvider) -> bytes:
    """Encode the public key exposed by provider as a PUBLIC KEY envelope."""
    return key_to_pem(provider.public_key())


def cert_to_pem(certificate: Union[x509.Certificate, bytes]) -> bytes:
    """Encode a certificate (object or raw DER) as a CERTIFICATE envelope."""
    if isinstance(certificate, x509.Certificate):
        certificate = certificate.public_bytes(serialization.Encoding.DER)
    return encode_pem(PemType.CERTIFICATE, certificate)


def _expect(block: PemBlock, pem_type: PemType) -> None:
    if block.type is not pem_type:
        raise UnsupportedEnvelopeType(
            f"unsupported pem type: {block.type.value}", tag=block.type.value
        )


def load_public_key(data: Union[bytes, str]):
    """Decode a PUBLIC KEY envelope into a cryptography public key.

    Raises:
        MalformedEnvelope: Bad framing.
        UnsupportedEnvelopeType: Envelope is not a PUBLIC KEY.
        KeyParseError: Payload is not SubjectPublicKeyInfo DER.
    """
    block = decode_pem(data)
    _expect(block, PemType.PUBLIC_KEY)
    try:
        return serialization.load_der_public_key(block.payload)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyParseError(f"parsing public key: {e}", cause=e) from e


def load_certificate(data: Union[bytes, str]) -> x509.Certificate:
    """Decode a CERTIFICATE envelope into an x509.Certificate.

    Raises:
        MalformedEnvelope: Bad framing.
        UnsupportedEnvelopeType: Envelope is not a CERTIFICATE.
        KeyParseError: Payload is not certificate DER.
    """
    return _parse_certificate(decode_pem(data))


def load_certificate_chain(data: Union[bytes, str]) -> List[x509.Certificate]:
    """Decode a run of CERTIFICATE envelopes, in order."""
    return [_parse_certificate(block) for block in decode_pem_chain(data)]


def _parse_certificate(block: PemBlock) -> x509.Certificate:
    _expect(block, PemType.CERTIFICATE)
    try:
        return x509.load_der_x509_certificate(block.payload)
    except ValueError as e:
        raise KeyParseError(f"parsing certificate: {e}", cause=e) from e
