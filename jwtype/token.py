"""
jwtype Token - token types, derivation, and the encode/decode pipelines.

A ``TokenType`` is an explicit record: two schema registries (headers and
claims), the ordered active field lists, the accepted algorithms and an
optional pre-seeded header. Types are derived from one another by copying
that record and applying overrides, so a derived type never shares a
registry with its base.

Example:
    >>> from jwtype import JWT
    >>> IDToken = JWT.derive(
    ...     name="IDToken",
    ...     registered_claims={"nonce": {"format": "String"}},
    ...     claims=["iss", "sub", "aud", "exp", "iat", "nonce"],
    ... )
    >>> token = IDToken({"iss": "https://issuer.example", "exp": 1999999999}, {"alg": "HS256"})
    >>> compact = token.encode("secret")
    >>> IDToken.decode(compact, "secret").unwrap().payload["iss"]
    'https://issuer.example'
"""

import copy
import dataclasses
import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from jwcrypto import jwk

from jwtype import algorithms
from jwtype.config import DEFAULT_ALGORITHMS
from jwtype.errors import (
    ConfigurationError,
    InvalidKeyError,
    MalformedTokenError,
    UnsupportedTokenError,
    UnverifiedTokenError,
    ValidationError,
)
from jwtype.keys import build_verification_key, is_key_parameters
from jwtype.result import DecodeResult, DecodeStatus
from jwtype.schema import Registry, as_descriptor, as_registry, validate
from jwtype.segments import ENCRYPTED_SEGMENTS, decode_segment, encode_segment, extract_components

logger = logging.getLogger(__name__)


class TokenType:
    """
    A family member: schema registries, active fields and algorithms.

    Instances are built by calling the type, ``JWT(payload, header)``, or by
    decoding, ``JWT.decode(compact, secret)``.
    """

    def __init__(
        self,
        name: str,
        registered_headers: Optional[Mapping] = None,
        registered_claims: Optional[Mapping] = None,
        headers: Optional[Iterable[str]] = None,
        claims: Optional[Iterable[str]] = None,
        algorithms: Optional[Iterable[str]] = None,
        parent: Optional["TokenType"] = None,
    ):
        self.name = name
        self.registered_headers: Registry = as_registry(registered_headers)
        self.registered_claims: Registry = as_registry(registered_claims)
        self.headers: List[str] = list(self.registered_headers if headers is None else headers)
        self.claims: List[str] = list(self.registered_claims if claims is None else claims)
        self.algorithms: List[str] = list(DEFAULT_ALGORITHMS if algorithms is None else algorithms)
        self.parent = parent

        # shared default header, set by derive(header=...)
        self.header: Optional[Dict[str, Any]] = None
        self.header_b64u: Optional[str] = None

        self._lock = threading.RLock()
        self._check()

    def __repr__(self) -> str:
        if self.parent is None:
            return f"<TokenType {self.name}>"
        return f"<TokenType {self.name} derived from {self.parent.name}>"

    def __call__(self, payload=None, header=None, signature=None) -> "Token":
        return Token(self, payload, header, signature)

    def _check(self) -> None:
        for name in self.headers:
            if name not in self.registered_headers:
                raise ConfigurationError(f"{name} is not recognized")
        for name in self.claims:
            if name not in self.registered_claims:
                raise ConfigurationError(f"{name} is not recognized")
        for algorithm in self.algorithms:
            if not algorithms.is_supported(algorithm):
                raise ConfigurationError(f"{algorithm} is not a supported algorithm")

    # -------------------------------------------------------------------------
    # Schema mutation
    # -------------------------------------------------------------------------

    def register_header(self, name: str, descriptor, active: bool = True) -> None:
        """Add or replace a header descriptor on this type only."""
        with self._lock:
            self.registered_headers[name] = as_descriptor(descriptor)
            if active and name not in self.headers:
                self.headers.append(name)

    def register_claim(self, name: str, descriptor, active: bool = True) -> None:
        """Add or replace a claim descriptor on this type only."""
        with self._lock:
            self.registered_claims[name] = as_descriptor(descriptor)
            if active and name not in self.claims:
                self.claims.append(name)

    def preset_header(self, header: Mapping) -> None:
        """Validate ``header`` and use it for every instance built without one."""
        with self._lock:
            self.header = validate(self.headers, self.registered_headers, header)
            self.header_b64u = encode_segment(self.header)

    # -------------------------------------------------------------------------
    # Derivation
    # -------------------------------------------------------------------------

    def derive(
        self,
        name: Optional[str] = None,
        registered_headers: Optional[Mapping] = None,
        registered_claims: Optional[Mapping] = None,
        headers: Optional[Iterable[str]] = None,
        claims: Optional[Iterable[str]] = None,
        header: Optional[Mapping] = None,
        algorithms: Optional[Iterable[str]] = None,
    ) -> "TokenType":
        """
        Create a new token type from this one.

        Args:
            name: Name of the new type.
            registered_headers: Header descriptors to add or replace, per key.
            registered_claims: Claim descriptors to add or replace, per key.
            headers: Active header names, replacing the inherited list.
            claims: Active claim names, replacing the inherited list.
            header: Default header shared by every instance of the new type.
            algorithms: Accepted algorithms, replacing the inherited list.
                        The ``alg`` enumeration follows unless ``alg`` is
                        itself in registered_headers.

        Returns:
            The new TokenType. This type is left untouched.
        """
        with self._lock:
            own_headers = copy.deepcopy(self.registered_headers)
            own_claims = copy.deepcopy(self.registered_claims)
            active_headers = list(self.headers)
            active_claims = list(self.claims)
            own_algorithms = list(self.algorithms)
            preset = copy.deepcopy(self.header)
            preset_b64u = self.header_b64u

        header_overrides = as_registry(registered_headers)
        own_headers.update(header_overrides)
        own_claims.update(as_registry(registered_claims))

        if algorithms is not None:
            own_algorithms = list(algorithms)
            if "alg" in own_headers and "alg" not in header_overrides:
                own_headers["alg"] = dataclasses.replace(
                    own_headers["alg"], enum=tuple(own_algorithms)
                )

        child = TokenType(
            name or self.name,
            own_headers,
            own_claims,
            headers=active_headers if headers is None else headers,
            claims=active_claims if claims is None else claims,
            algorithms=own_algorithms,
            parent=self,
        )
        child.header, child.header_b64u = preset, preset_b64u

        if header is not None:
            child.preset_header(header)

        logger.debug(f"Derived token type {child.name} from {self.name}")
        return child

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def decode(self, token: str, secret: Any = None, skip_verify: bool = False) -> DecodeResult:
        """
        Decode, and unless told otherwise verify, a compact token.

        Args:
            token: The compact serialization.
            secret: Shared secret, PEM or JWK JSON string, JWK object, or raw
                    public key parameters (RSA n/e, EC x/y).
            skip_verify: Return the payload without checking the signature,
                         e.g. to read ``iss`` before choosing a key.

        Returns:
            A DecodeResult. Only ConfigurationError is ever raised.
        """
        try:
            segments = extract_components(token)
            header = decode_segment(segments[0])
        except MalformedTokenError as e:
            logger.debug(f"Rejected token: {e}")
            return DecodeResult(DecodeStatus.MALFORMED, error=e)

        if len(segments) == ENCRYPTED_SEGMENTS or "enc" in header:
            return DecodeResult(
                DecodeStatus.UNSUPPORTED,
                error=UnsupportedTokenError("encrypted tokens are not supported"),
            )

        try:
            payload = decode_segment(segments[1])
        except MalformedTokenError as e:
            logger.debug(f"Rejected token: {e}")
            return DecodeResult(DecodeStatus.MALFORMED, error=e)

        algorithm = header.get("alg")
        if algorithm is None:
            return DecodeResult(
                DecodeStatus.INVALID, error=ValidationError("alg is a required value", field="alg")
            )
        if algorithm not in self.algorithms:
            logger.debug(f"Rejected token: algorithm {algorithm!r} not accepted by {self.name}")
            return DecodeResult(
                DecodeStatus.INVALID,
                error=ValidationError("alg must be an enumerated value", field="alg"),
            )

        verified = False
        if algorithm != algorithms.NONE and not skip_verify:
            if not self._verify(segments, algorithm, secret):
                return DecodeResult(
                    DecodeStatus.UNVERIFIED,
                    error=UnverifiedTokenError("signature verification failed"),
                )
            verified = True

        try:
            instance = self(payload, header, segments[2])
        except ValidationError as e:
            logger.debug(f"Rejected token: {e}")
            return DecodeResult(DecodeStatus.INVALID, error=e)

        # the wire header is kept verbatim, it is what the signature covers
        instance.header_b64u = segments[0]
        return DecodeResult(DecodeStatus.OK, token=instance, verified=verified)

    def _verify(self, segments: List[str], algorithm: str, secret: Any) -> bool:
        signing_input = f"{segments[0]}.{segments[1]}"

        if isinstance(secret, (str, bytes, jwk.JWK)):
            return algorithms.verify(algorithm, signing_input, segments[2], secret)

        if is_key_parameters(secret):
            try:
                key = build_verification_key(secret)
            except InvalidKeyError as e:
                logger.debug(f"Unusable key parameters: {e}")
                return False
            return algorithms.verify(algorithm, signing_input, segments[2], key)

        logger.debug(f"Unrecognized secret type: {type(secret).__name__}")
        return False


def derive(base: TokenType, **overrides) -> TokenType:
    """Functional form of ``TokenType.derive``."""
    return base.derive(**overrides)


class Token:
    """A validated token: header, payload, signature and the header encoding."""

    def __init__(self, token_type: TokenType, payload=None, header=None, signature=None):
        self.token_type = token_type
        self.header: Optional[Dict[str, Any]] = None
        self.header_b64u: Optional[str] = None
        self.payload: Dict[str, Any] = {}

        self.initialize_payload(payload)
        self.initialize_header(header)
        self.signature = signature

    def __repr__(self) -> str:
        return f"<Token {self.token_type.name} header={self.header!r} payload={self.payload!r}>"

    def initialize_header(self, header: Optional[Mapping] = None) -> None:
        # keep an existing or pre-seeded header unless a new one is given
        if header is None:
            if self.header is not None:
                return
            if self.token_type.header is not None:
                self.header = copy.deepcopy(self.token_type.header)
                self.header_b64u = self.token_type.header_b64u
                return

        token_type = self.token_type
        self.header = validate(token_type.headers, token_type.registered_headers, header)
        self.header_b64u = encode_segment(self.header)

    def initialize_payload(self, payload: Optional[Mapping] = None) -> None:
        token_type = self.token_type
        self.payload = validate(token_type.claims, token_type.registered_claims, payload)

    def encode(self, secret: Any = None) -> str:
        """
        Serialize to the compact form, signing with ``secret``.

        Raises:
            ValidationError: The header carries no algorithm.
            UnsupportedTokenError: The header declares encryption.
            InvalidKeyError: The secret cannot sign with the header algorithm.
        """
        algorithm = self.header.get("alg")
        if algorithm is None:
            raise ValidationError("alg is a required value", field="alg")

        payload_b64u = encode_segment(self.payload)
        signing_input = f"{self.header_b64u}.{payload_b64u}"

        if algorithm == algorithms.NONE:
            signature = ""
        elif "enc" in self.header:
            raise UnsupportedTokenError("encrypted tokens are not supported")
        else:
            signature = algorithms.sign(algorithm, signing_input, secret)

        self.signature = signature
        return f"{signing_input}.{signature}"
