"""
Typed outcome of decoding a token.

Decoding untrusted input never raises; callers branch on ``status``:

    >>> result = JWT.decode(token, secret)
    >>> if result.status is DecodeStatus.UNVERIFIED:
    ...     result = JWT.decode(token, other_key)
    >>> token = result.unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from jwtype.errors import JWTError

if TYPE_CHECKING:
    from jwtype.token import Token


class DecodeStatus(str, Enum):
    OK = "ok"
    MALFORMED = "malformed"
    UNVERIFIED = "unverified"
    INVALID = "invalid"
    UNSUPPORTED = "unsupported"


@dataclass
class DecodeResult:
    """Result of decoding (and possibly verifying) a compact token."""

    status: DecodeStatus
    """What happened: OK or the kind of failure."""

    token: Optional["Token"] = None
    """The constructed token when status is OK."""

    error: Optional[JWTError] = None
    """The failure when status is not OK."""

    verified: bool = False
    """Whether a signature was actually checked (False for none/skip_verify)."""

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK

    def unwrap(self) -> "Token":
        """Return the token or raise the carried error."""
        if self.ok:
            return self.token
        raise self.error
