"""Shared fixtures for sealkey tests."""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from sealkey.constants import SCRYPT_N_ENV_VAR, PASSWORD_ENV_VAR


@pytest.fixture(autouse=True)
def _fast_scrypt(monkeypatch):
    """Keep scrypt cheap and the environment clean for every test."""
    monkeypatch.setenv(SCRYPT_N_ENV_VAR, "1024")
    monkeypatch.delenv(PASSWORD_ENV_VAR, raising=False)


@pytest.fixture
def certificate():
    """A throwaway self-signed P-256 certificate."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "sealkey test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
