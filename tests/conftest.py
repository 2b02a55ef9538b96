"""Root test configuration."""

import logging
from datetime import datetime, timedelta, timezone

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _self_signed_certificate(key) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "checkout.production")])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )


def _key_pem(key) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_certificate(ec_key):
    return _self_signed_certificate(ec_key)


@pytest.fixture
def cert_path(tmp_path, ec_certificate):
    path = tmp_path / "svid.pem"
    path.write_bytes(ec_certificate.public_bytes(serialization.Encoding.PEM))
    return str(path)


@pytest.fixture
def key_path(tmp_path, ec_key):
    path = tmp_path / "svid.key"
    path.write_bytes(_key_pem(ec_key))
    return str(path)


@pytest.fixture
def rsa_key_path(tmp_path, rsa_key):
    path = tmp_path / "rsa.key"
    path.write_bytes(_key_pem(rsa_key))
    return str(path)


@pytest.fixture
def chain_cert_path(tmp_path, ec_certificate, rsa_key):
    """Certificate file holding two PEM blocks."""
    second = _self_signed_certificate(rsa_key)
    path = tmp_path / "chain.pem"
    path.write_bytes(
        ec_certificate.public_bytes(serialization.Encoding.PEM)
        + second.public_bytes(serialization.Encoding.PEM)
    )
    return str(path)
