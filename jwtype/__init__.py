"""
jwtype - schema-driven JSON Web Token codec.

Define a family of token types with declarative header and claim schemas,
then construct, encode, decode and verify tokens against them.
"""

__version__ = "0.4.0"

# Token types and instances
from .token import TokenType, Token, derive
from .jwt import JWT, define, decode, now
from .result import DecodeResult, DecodeStatus

# Schema
from .schema import FieldDescriptor, validate
from .formats import register_format, get_format

# Keys
from .keys import generate_key, build_verification_key

# Errors
from .errors import (
    JWTError,
    ConfigurationError,
    ValidationError,
    MalformedTokenError,
    UnverifiedTokenError,
    UnsupportedTokenError,
    InvalidKeyError,
)


__all__ = [
    "__version__",
    # Core
    "TokenType",
    "Token",
    "JWT",
    "derive",
    "define",
    "decode",
    "now",
    "DecodeResult",
    "DecodeStatus",
    # Schema
    "FieldDescriptor",
    "validate",
    "register_format",
    "get_format",
    # Keys
    "generate_key",
    "build_verification_key",
    # Errors
    "JWTError",
    "ConfigurationError",
    "ValidationError",
    "MalformedTokenError",
    "UnverifiedTokenError",
    "UnsupportedTokenError",
    "InvalidKeyError",
]
