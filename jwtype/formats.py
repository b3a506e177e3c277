"""
jwtype Formats - the process-wide format validator registry.

A format is a named predicate ``(value) -> bool``. Field descriptors refer to
formats by name, so one registry is shared by every token type. Register
custom formats at startup, before any token type validates data:

    >>> from jwtype import formats
    >>> formats.register_format("Scope", lambda v: isinstance(v, str) and " " not in v)
"""

import base64
import binascii
import logging
import math
import threading
from typing import Any, Callable, Dict, List

from cryptography import x509
from jwcrypto import jwk
from jwcrypto.common import JWException, base64url_decode

from jwtype.errors import ConfigurationError
from jwtype.uri import is_web_uri

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]

_registry: Dict[str, Predicate] = {}
_lock = threading.RLock()

PUBLIC_KEY_TYPES = ("RSA", "EC", "OKP")
SHA1_DIGEST_SIZE = 20


# =============================================================================
# Registry
# =============================================================================


def register_format(name: str, predicate: Predicate) -> None:
    """Add or replace the predicate for a format name."""
    if not name or not callable(predicate):
        raise ConfigurationError("a format needs a name and a callable predicate")
    with _lock:
        replaced = is_registered(name)
        _registry[name] = predicate
    logger.debug(f"{'Replaced' if replaced else 'Registered'} format: {name}")


def get_format(name: str) -> Predicate:
    """Return the predicate for ``name`` or raise ConfigurationError."""
    predicate = _registry.get(name)
    if predicate is None:
        raise ConfigurationError(f"{name} is not a recognized format")
    return predicate


def is_registered(name: str) -> bool:
    """True if a predicate is registered under ``name``."""
    return name in _registry


def registered_formats() -> List[str]:
    """Names of all registered formats."""
    with _lock:
        return list(_registry)


# =============================================================================
# Built-in Formats
# =============================================================================


def string_or_uri(value: Any) -> bool:
    """An arbitrary string, or a URI when it contains a colon."""
    if not isinstance(value, str):
        return False
    return ":" not in value or is_web_uri(value)


def string(value: Any) -> bool:
    """A non-empty string."""
    return isinstance(value, str) and value != ""


def string_array(values: Any) -> bool:
    """A list or tuple of strings, possibly empty."""
    if not isinstance(values, (list, tuple)):
        return False
    return all(isinstance(value, str) for value in values)


def int_date(value: Any) -> bool:
    """Seconds since the epoch as a whole number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer()
    return False


def uri(value: Any) -> bool:
    """An absolute http or https URI."""
    return is_web_uri(value)


def public_jwk(value: Any) -> bool:
    """A JSON object describing a public RSA, EC or OKP key."""
    if not isinstance(value, dict):
        return False
    if value.get("kty") not in PUBLIC_KEY_TYPES or "d" in value:
        return False
    try:
        jwk.JWK(**value)
    except (JWException, ValueError, TypeError, KeyError) as e:
        logger.debug(f"Rejected jwk header value: {e}")
        return False
    return True


def certificate_or_chain(values: Any) -> bool:
    """A non-empty ``x5c`` array of base64 (not base64url) DER certificates."""
    if not isinstance(values, list) or not values:
        return False
    for value in values:
        if not isinstance(value, str):
            return False
        try:
            x509.load_der_x509_certificate(base64.b64decode(value, validate=True))
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Rejected x5c entry: {e}")
            return False
    return True


def certificate_thumbprint(value: Any) -> bool:
    """Base64url encoded SHA-1 digest of a DER certificate."""
    if not isinstance(value, str) or not value:
        return False
    try:
        digest = base64url_decode(value)
    except (binascii.Error, ValueError):
        return False
    return len(digest) == SHA1_DIGEST_SIZE


def parameter_list(values: Any) -> bool:
    """A ``crit`` list: non-empty, unique, non-empty strings."""
    if not isinstance(values, list) or not values:
        return False
    if not all(string(value) for value in values):
        return False
    return len(set(values)) == len(values)


BUILTIN_FORMATS: Dict[str, Predicate] = {
    "StringOrURI": string_or_uri,
    "String": string,
    "String*": string_array,
    "IntDate": int_date,
    "URI": uri,
    "JWK": public_jwk,
    "CertificateOrChain": certificate_or_chain,
    "CertificateThumbprint": certificate_thumbprint,
    "ParameterList": parameter_list,
}


def reset_formats() -> None:
    """Drop custom formats and restore the built-in set."""
    with _lock:
        _registry.clear()
        _registry.update(BUILTIN_FORMATS)


reset_formats()
