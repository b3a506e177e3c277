"""
jwtype Algorithms - signing and verification of the token signing input.

HS* MACs are computed with ``cryptography`` on the raw secret bytes, the
other algorithms use the ``jwcrypto`` JWA implementations. Signatures are
base64url encoded without padding; the ``none`` algorithm signs with the
empty string.
"""

import binascii
import logging
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from jwcrypto.common import JWException, base64url_decode, base64url_encode
from jwcrypto.jwa import JWA

from jwtype.errors import ConfigurationError, InvalidKeyError
from jwtype.keys import resolve_key
from jwtype.segments import is_base64url

logger = logging.getLogger(__name__)

NONE = "none"

SIGNING_ALGORITHMS = (
    NONE,
    "HS256",
    "HS384",
    "HS512",
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "ES256",
    "ES384",
    "ES512",
)

HMAC_HASHES = {
    "HS256": hashes.SHA256,
    "HS384": hashes.SHA384,
    "HS512": hashes.SHA512,
}


def is_supported(algorithm: Any) -> bool:
    return algorithm in SIGNING_ALGORITHMS


def _hmac(algorithm: str, key, signing_input: str) -> hmac.HMAC:
    # any secret length is accepted, short passphrases included
    raw = base64url_decode(key.export(as_dict=True)["k"])
    mac = hmac.HMAC(raw, HMAC_HASHES[algorithm]())
    mac.update(signing_input.encode("utf-8"))
    return mac


def sign(algorithm: str, signing_input: str, secret: Any = None) -> str:
    """
    Sign ``header.payload`` with ``algorithm``.

    Args:
        algorithm: A name from SIGNING_ALGORITHMS.
        signing_input: The dot-joined base64url header and payload.
        secret: Shared secret, PEM, JWK JSON, JWK object or JWK parameters.

    Returns:
        The base64url signature, empty for ``none``.

    Raises:
        ConfigurationError: If the algorithm is not supported.
        InvalidKeyError: If the secret cannot sign with this algorithm.
    """
    if not is_supported(algorithm):
        raise ConfigurationError(f"{algorithm} is not a supported algorithm")
    if algorithm == NONE:
        return ""

    key = resolve_key(algorithm, secret)
    try:
        if algorithm in HMAC_HASHES:
            signature = _hmac(algorithm, key, signing_input).finalize()
        else:
            signature = JWA.signing_alg(algorithm).sign(key, signing_input.encode("utf-8"))
    except (JWException, ValueError, TypeError) as e:
        raise InvalidKeyError(f"Cannot sign with {algorithm}: {e}")

    return base64url_encode(signature)


def verify(algorithm: str, signing_input: str, signature: str, secret: Any = None) -> bool:
    """
    Check a signature. Never raises for untrusted input.

    Returns:
        True only if the signature is valid for the secret.
    """
    if not is_supported(algorithm):
        logger.debug(f"Unsupported algorithm: {algorithm}")
        return False
    if algorithm == NONE:
        return signature == ""
    if not isinstance(signature, str) or not signature or not is_base64url(signature):
        return False

    try:
        key = resolve_key(algorithm, secret)
        if algorithm in HMAC_HASHES:
            _hmac(algorithm, key, signing_input).verify(base64url_decode(signature))
        else:
            JWA.signing_alg(algorithm).verify(
                key, signing_input.encode("utf-8"), base64url_decode(signature)
            )
    except InvalidSignature:
        logger.debug(f"{algorithm} signature mismatch")
        return False
    except InvalidKeyError as e:
        logger.debug(f"Unusable verification key: {e}")
        return False
    except (JWException, binascii.Error, ValueError, TypeError) as e:
        logger.debug(f"{algorithm} verification error: {e}")
        return False
    except Exception as e:
        logger.debug(f"Unexpected {algorithm} verification error: {e}")
        return False

    return True
