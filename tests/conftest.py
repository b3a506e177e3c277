"""
Shared pytest fixtures for jwtype tests.
"""

import base64
import datetime
import hashlib

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from jwcrypto import jwk
from jwcrypto.common import base64url_encode

from jwtype import JWT, formats, generate_key


@pytest.fixture(autouse=True)
def restore_formats():
    """Undo any format registered by a test."""
    yield
    formats.reset_formats()


@pytest.fixture
def secret() -> str:
    """Shared HMAC secret."""
    return "correct horse battery staple"


@pytest.fixture(scope="session")
def rsa_key() -> jwk.JWK:
    """RSA private key, generated once per session."""
    return generate_key("RS256")


@pytest.fixture(scope="session")
def ec_key() -> jwk.JWK:
    """P-256 private key, generated once per session."""
    return generate_key("ES256")


@pytest.fixture(scope="session")
def rsa_private_pem(rsa_key) -> str:
    return rsa_key.export_to_pem(private_key=True, password=None).decode("utf-8")


@pytest.fixture(scope="session")
def rsa_public_pem(rsa_key) -> str:
    return rsa_key.export_to_pem().decode("utf-8")


@pytest.fixture(scope="session")
def certificate_der() -> bytes:
    """A self-signed certificate in DER form."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwtype test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def x5c(certificate_der) -> list:
    return [base64.b64encode(certificate_der).decode("ascii")]


@pytest.fixture
def x5t(certificate_der) -> str:
    return base64url_encode(hashlib.sha1(certificate_der).digest())


@pytest.fixture
def sample_claims() -> dict:
    """Claims accepted by the base JWT type."""
    return {
        "iss": "https://issuer.example",
        "sub": "user-1234",
        "aud": "https://api.example",
        "exp": 1999999999,
        "iat": 1700000000,
        "jti": "f6c1e0c2",
    }


@pytest.fixture
def strict_type():
    """Token type with required iss (StringOrURI) and exp (IntDate) claims."""
    return JWT.derive(
        name="Strict",
        registered_claims={
            "iss": {"format": "StringOrURI", "required": True},
            "exp": {"format": "IntDate", "required": True},
        },
        claims=["iss", "exp"],
    )
