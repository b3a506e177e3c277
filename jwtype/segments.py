"""
Compact serialization helpers: splitting tokens and (de)coding JSON segments.
"""

import binascii
import json
import re
from typing import Any, Dict, List

from jwcrypto.common import base64url_decode, base64url_encode, json_encode

from jwtype.errors import MalformedTokenError

SIGNED_SEGMENTS = 3
ENCRYPTED_SEGMENTS = 5

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")


def extract_components(token: Any) -> List[str]:
    """
    Split a compact token into its segments.

    Three segments is a signed or plaintext token, five is the encrypted
    form. Any other count is malformed.
    """
    if not isinstance(token, str):
        raise MalformedTokenError("Malformed JWT")

    components = token.split(".")
    if len(components) not in (SIGNED_SEGMENTS, ENCRYPTED_SEGMENTS):
        raise MalformedTokenError("Malformed JWT")

    return components


def is_base64url(value: str) -> bool:
    """True if ``value`` uses only the unpadded base64url alphabet."""
    return _BASE64URL.fullmatch(value) is not None


def encode_segment(value: Dict[str, Any]) -> str:
    return base64url_encode(json_encode(value))


def decode_segment(segment: str) -> Dict[str, Any]:
    """Decode a base64url JSON object segment."""
    if not is_base64url(segment):
        raise MalformedTokenError("Malformed JWT segment: not base64url")

    try:
        value = json.loads(base64url_decode(segment).decode("utf-8"))
    except (binascii.Error, ValueError, RecursionError) as e:
        raise MalformedTokenError(f"Malformed JWT segment: {e}")

    if not isinstance(value, dict):
        raise MalformedTokenError("Malformed JWT segment: expected a JSON object")

    return value
