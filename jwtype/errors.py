"""
jwtype error hierarchy.

Construction and encoding raise these directly. Decoding never raises for
untrusted input; it carries one of them inside a ``DecodeResult`` instead.
"""

from typing import Optional


class JWTError(Exception):
    """Base class for every jwtype error."""


class ConfigurationError(JWTError):
    """Schema setup is wrong: unknown field, unknown format or unsupported algorithm."""


class ValidationError(JWTError):
    """A header or claim value does not satisfy its descriptor."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class MalformedTokenError(JWTError):
    """The input is not a well-formed compact token."""


class UnverifiedTokenError(JWTError):
    """The token is well-formed but its signature could not be verified."""


class UnsupportedTokenError(JWTError, NotImplementedError):
    """Encrypted (five segment or ``enc``) tokens are not supported."""


class InvalidKeyError(JWTError):
    """Key material cannot be used with the requested algorithm."""
