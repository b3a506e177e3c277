"""
The base JSON Web Token type.

Every registered header and claim is active; all claims are optional and
only ``alg`` is required in the header. Derive from ``JWT`` (or call
``define``) to build stricter or richer token types.
"""

import time
from typing import Any

from jwtype.config import DEFAULT_ALGORITHMS, DEFAULT_TYP
from jwtype.result import DecodeResult
from jwtype.schema import FieldDescriptor
from jwtype.token import TokenType

REGISTERED_HEADERS = {
    "alg": FieldDescriptor("StringOrURI", required=True, enum=tuple(DEFAULT_ALGORITHMS)),
    "typ": FieldDescriptor("String", default=DEFAULT_TYP),
    "cty": FieldDescriptor("String", enum=("JWT",)),
    "jku": FieldDescriptor("URI"),
    "jwk": FieldDescriptor("JWK"),
    "kid": FieldDescriptor("String"),
    "x5u": FieldDescriptor("URI"),
    "x5c": FieldDescriptor("CertificateOrChain"),
    "x5t": FieldDescriptor("CertificateThumbprint"),
    "crit": FieldDescriptor("ParameterList"),
}

REGISTERED_CLAIMS = {
    "iss": FieldDescriptor("StringOrURI"),
    "sub": FieldDescriptor("StringOrURI"),
    "aud": FieldDescriptor("StringOrURI"),
    "exp": FieldDescriptor("IntDate"),
    "nbf": FieldDescriptor("IntDate"),
    "iat": FieldDescriptor("IntDate"),
    "jti": FieldDescriptor("String"),
}

JWT = TokenType(
    "JWT",
    registered_headers=REGISTERED_HEADERS,
    registered_claims=REGISTERED_CLAIMS,
    algorithms=DEFAULT_ALGORITHMS,
)


def now() -> int:
    """Current time in IntDate form; usable as a default producer."""
    return int(time.time())


def define(**overrides) -> TokenType:
    """Derive a new token type from ``JWT``."""
    return JWT.derive(**overrides)


def decode(token: str, secret: Any = None, skip_verify: bool = False) -> DecodeResult:
    """Decode a compact token as a base ``JWT``."""
    return JWT.decode(token, secret, skip_verify)
