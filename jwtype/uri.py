"""
Absolute web URI checks used by the ``URI`` and ``StringOrURI`` formats.

Pure string inspection; nothing here touches the network.
"""

from __future__ import annotations

import re
import urllib.parse

_ILLEGAL_CHARS = re.compile(r"[^a-z0-9:/?#\[\]@!$&'()*+,;=.\-_~%]", re.IGNORECASE)
_BAD_ESCAPE = re.compile(r"%(?![0-9a-f]{2})", re.IGNORECASE)
_SCHEME = re.compile(r"^[a-z][a-z0-9+\-.]*$", re.IGNORECASE)

WEB_SCHEMES = ("http", "https")


def is_uri(value: object) -> bool:
    """True if ``value`` is a syntactically valid absolute URI of any scheme."""
    if not isinstance(value, str) or not value:
        return False

    if _ILLEGAL_CHARS.search(value) or _BAD_ESCAPE.search(value):
        return False

    try:
        parts = urllib.parse.urlsplit(value)
    except ValueError:
        return False

    if not parts.scheme or not _SCHEME.match(parts.scheme):
        return False

    # with an authority the path must be empty or absolute, without one it
    # must not look like an authority
    if parts.netloc:
        return parts.path == "" or parts.path.startswith("/")
    return not parts.path.startswith("//")


def is_web_uri(value: object) -> bool:
    """
    True if ``value`` is an absolute http(s) URI with a host.

    Args:
        value: Candidate value of any type.

    Returns:
        Whether the value can be used as a web URI.
    """
    if not is_uri(value):
        return False

    parts = urllib.parse.urlsplit(value)
    if parts.scheme.lower() not in WEB_SCHEMES:
        return False

    if not parts.hostname:
        return False

    try:
        # raises for non numeric or out of range ports
        parts.port
    except ValueError:
        return False

    return True
