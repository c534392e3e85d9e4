"""Pytest fixtures for the cryptutil test suite."""

import datetime
from collections.abc import Generator

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from cryptutil import Curve, available_backends, ec_key_generate, get_backend, rsa_key_generate, set_config
from cryptutil.keys import EcKeyPair, RsaKeyPair
from cryptutil.provider import Backend, clear_errors


@pytest.fixture(autouse=True)
def fresh_state() -> Generator[None, None, None]:
    """Reset configuration and this thread's error queue around every test."""
    set_config(None)
    clear_errors()
    yield
    set_config(None)
    clear_errors()


@pytest.fixture(scope="session", params=available_backends())
def backend(request: pytest.FixtureRequest) -> Backend:
    """Every installed provider backend in turn."""
    return get_backend(request.param)


@pytest.fixture(scope="session")
def rsa_pair(backend: Backend) -> RsaKeyPair:
    """A 2048-bit RSA key pair per backend, generated once per session."""
    return rsa_key_generate(2048, backend=backend)


@pytest.fixture(scope="session")
def ec_pair(backend: Backend) -> EcKeyPair:
    """A P-256 key pair per backend, generated once per session."""
    return ec_key_generate(Curve.PRIME256V1, backend=backend)


@pytest.fixture(scope="session")
def certificate() -> x509.Certificate:
    """A self-signed P-256 certificate."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "cryptutil test")])
    now = datetime.datetime.now(datetime.UTC)
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
