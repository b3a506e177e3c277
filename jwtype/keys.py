"""
jwtype key material helpers.

Turns caller supplied secrets (shared secrets, PEM, JWK JSON, JWK objects or
raw public key parameters) into ``jwcrypto`` JWK objects for the signing
provider, and generates fresh keys per algorithm.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from jwcrypto import jwk
from jwcrypto.common import JWException, base64url_encode

from jwtype.errors import InvalidKeyError

logger = logging.getLogger(__name__)

EC_CURVES = {
    "ES256": "P-256",
    "ES384": "P-384",
    "ES512": "P-521",
}

RSA_KEY_SIZE = 2048

_PEM_MARKERS = (b"-----BEGIN", b"ssh-rsa", b"ecdsa-sha2-", b"ssh-ed25519")


def key_type_for(algorithm: str) -> Optional[str]:
    """The JWK ``kty`` an algorithm signs with, or None if it uses no key."""
    if not isinstance(algorithm, str):
        return None
    if algorithm.startswith("HS"):
        return "oct"
    if algorithm.startswith(("RS", "PS")):
        return "RSA"
    if algorithm.startswith("ES"):
        return "EC"
    return None


def is_key_parameters(value: Any) -> bool:
    """True for mappings carrying RSA (n, e) or EC (x, y) public members."""
    if not isinstance(value, Mapping):
        return False
    return ("n" in value and "e" in value) or ("x" in value and "y" in value)


def build_verification_key(params: Mapping) -> jwk.JWK:
    """
    Build a public verification key from raw key parameters.

    Args:
        params: RSA ``n``/``e`` or EC ``crv``/``x``/``y`` members, base64url
                encoded as in a JWK.

    Returns:
        The public key as a JWK.

    Raises:
        InvalidKeyError: If the parameters do not describe a usable key.
    """
    if not is_key_parameters(params):
        raise InvalidKeyError("key parameters must carry n/e or x/y members")

    if "n" in params and "e" in params:
        fields = {"kty": "RSA", "n": params["n"], "e": params["e"]}
    else:
        fields = {
            "kty": "EC",
            "crv": params.get("crv", "P-256"),
            "x": params["x"],
            "y": params["y"],
        }

    try:
        return jwk.JWK(**fields)
    except (JWException, ValueError, TypeError, AttributeError) as e:
        raise InvalidKeyError(f"Invalid key parameters: {e}")


def _looks_like_pem(raw: bytes) -> bool:
    return any(marker in raw for marker in _PEM_MARKERS)


def resolve_key(algorithm: str, secret: Any) -> jwk.JWK:
    """
    Resolve a caller secret into a JWK usable with ``algorithm``.

    Strings and bytes are shared secrets for HS* algorithms and PEM or JWK
    JSON for the asymmetric ones. JWK objects and parameter mappings are
    used as they are. The key type must match the algorithm family.

    Raises:
        InvalidKeyError: If the secret cannot be used with the algorithm.
    """
    kty = key_type_for(algorithm)
    if kty is None:
        raise InvalidKeyError(f"{algorithm} does not use a key")

    try:
        if isinstance(secret, jwk.JWK):
            key = secret
        elif isinstance(secret, Mapping):
            key = jwk.JWK(**dict(secret))
        elif isinstance(secret, (str, bytes)):
            raw = secret.encode("utf-8") if isinstance(secret, str) else secret
            if not raw:
                raise InvalidKeyError("secret must not be empty")
            if kty == "oct":
                if _looks_like_pem(raw):
                    raise InvalidKeyError(
                        "an asymmetric key or certificate must not be used as an HMAC secret"
                    )
                key = jwk.JWK(kty="oct", k=base64url_encode(raw))
            elif raw.lstrip().startswith(b"{"):
                key = jwk.JWK.from_json(raw)
            else:
                key = jwk.JWK.from_pem(raw)
        else:
            raise InvalidKeyError(f"unsupported secret type: {type(secret).__name__}")
    except (JWException, ValueError, TypeError, AttributeError) as e:
        raise InvalidKeyError(f"Invalid key for {algorithm}: {e}")

    if key.get("kty") != kty:
        raise InvalidKeyError(f"{algorithm} requires a {kty} key, got {key.get('kty')}")

    return key


def generate_key(algorithm: str) -> jwk.JWK:
    """
    Generate a fresh key for an algorithm.

    HMAC keys match the hash size, RSA keys are 2048 bits and EC keys use
    the curve the algorithm names.
    """
    kty = key_type_for(algorithm)
    if kty == "oct" and algorithm[2:].isdigit():
        return jwk.JWK.generate(kty="oct", size=int(algorithm[2:]))
    if kty == "RSA":
        return jwk.JWK.generate(kty="RSA", size=RSA_KEY_SIZE)
    if kty == "EC" and algorithm in EC_CURVES:
        return jwk.JWK.generate(kty="EC", crv=EC_CURVES[algorithm])
    raise InvalidKeyError(f"cannot generate a key for {algorithm}")
