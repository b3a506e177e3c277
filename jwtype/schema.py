"""
jwtype Schema - field descriptors and the validation traversal.

A schema registry maps a header or claim name to a ``FieldDescriptor``.
``validate`` walks an ordered list of active field names against a registry
and builds the validated mapping, failing on the first violation.
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from jwtype import formats
from jwtype.errors import ConfigurationError, ValidationError

Registry = Dict[str, "FieldDescriptor"]


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Validation rule for one header or claim.

    Attributes:
        format: Name of a registered format.
        required: Whether a value must be present after defaults apply.
        default: Value used when the field is absent, or a zero-argument
                 callable producing one (called once per validation).
                 Plain values are copied for each token.
        enum: Allowed values, if restricted.
        source: Alternate key to read the value from before the field name.
    """

    format: str
    required: bool = False
    default: Any = None
    enum: Optional[Tuple[Any, ...]] = None
    source: Optional[str] = None

    def __post_init__(self):
        if self.enum is not None and not isinstance(self.enum, tuple):
            object.__setattr__(self, "enum", tuple(self.enum))

    @classmethod
    def from_dict(cls, data: Mapping) -> "FieldDescriptor":
        """Build a descriptor from ``{"format": ..., "from": ...}`` style dicts."""
        if "format" not in data:
            raise ConfigurationError("field descriptor requires a format")
        return cls(
            format=data["format"],
            required=bool(data.get("required", False)),
            default=data.get("default"),
            enum=data.get("enum"),
            source=data.get("from", data.get("source")),
        )

    def default_value(self) -> Any:
        if callable(self.default):
            return self.default()
        return copy.deepcopy(self.default)


def as_descriptor(value: Any) -> FieldDescriptor:
    """Accept a descriptor or its dict spelling."""
    if isinstance(value, FieldDescriptor):
        return value
    if isinstance(value, Mapping):
        return FieldDescriptor.from_dict(value)
    raise ConfigurationError(f"cannot use {value!r} as a field descriptor")


def as_registry(entries: Optional[Mapping]) -> Registry:
    return {name: as_descriptor(data) for name, data in (entries or {}).items()}


# =============================================================================
# Assertions
# =============================================================================


def assert_presence(key: str, value: Any, descriptor: FieldDescriptor) -> bool:
    if descriptor.required and value is None:
        raise ValidationError(f"{key} is a required value", field=key)
    return True


def assert_format(key: str, value: Any, descriptor: FieldDescriptor) -> bool:
    predicate = formats.get_format(descriptor.format)
    if not predicate(value):
        raise ValidationError(f"{key} must conform to {descriptor.format} format", field=key)
    return True


def assert_enumerated(key: str, value: Any, descriptor: FieldDescriptor) -> bool:
    if descriptor.enum is not None and value not in descriptor.enum:
        raise ValidationError(f"{key} must be an enumerated value", field=key)
    return True


# =============================================================================
# Traversal
# =============================================================================


def read_value(key: str, descriptor: FieldDescriptor, source: Mapping) -> Any:
    """Read a field, preferring the descriptor's alternate source key."""
    if descriptor.source is not None and source.get(descriptor.source) is not None:
        return source[descriptor.source]
    return source.get(key)


def assign_valid(key: str, descriptor: FieldDescriptor, source: Mapping, target: Dict) -> None:
    value = read_value(key, descriptor, source)

    if value is None:
        value = descriptor.default_value()

    assert_presence(key, value, descriptor)

    if value is not None:
        assert_format(key, value, descriptor)
        assert_enumerated(key, value, descriptor)
        target[key] = value


def validate(keys: Iterable[str], registry: Mapping, source: Optional[Mapping]) -> Dict[str, Any]:
    """
    Validate ``source`` against the named descriptors of ``registry``.

    Args:
        keys: Active field names, validated in order.
        registry: Field name to FieldDescriptor mapping.
        source: Raw header or payload. ``None`` yields an empty mapping so
                initialization can be deferred.

    Returns:
        The validated mapping, keyed by field name.

    Raises:
        ConfigurationError: A key or format is not registered.
        ValidationError: The first value that violates its descriptor.
    """
    target: Dict[str, Any] = {}
    if source is None:
        return target

    if not isinstance(source, Mapping):
        raise ValidationError(f"expected a JSON object, got {type(source).__name__}")

    for key in keys:
        descriptor = registry.get(key)
        if descriptor is None:
            raise ConfigurationError(f"{key} is not recognized")
        assign_valid(key, descriptor, source, target)

    return target
