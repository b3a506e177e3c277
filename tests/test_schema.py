"""
Unit tests for field descriptors and the validation traversal.
"""

import dataclasses
import itertools

import pytest

from jwtype import ConfigurationError, FieldDescriptor, ValidationError, validate
from jwtype.schema import as_descriptor


class TestFieldDescriptor:
    """Tests for FieldDescriptor construction."""

    def test_from_dict_reads_from_key(self):
        """The dict spelling uses 'from' for the alternate source key."""
        descriptor = FieldDescriptor.from_dict(
            {"format": "String", "required": True, "enum": ["a", "b"], "from": "issuer"}
        )
        assert descriptor.format == "String"
        assert descriptor.required is True
        assert descriptor.enum == ("a", "b")
        assert descriptor.source == "issuer"

    def test_from_dict_requires_format(self):
        with pytest.raises(ConfigurationError):
            FieldDescriptor.from_dict({"required": True})

    def test_descriptors_are_immutable(self):
        descriptor = FieldDescriptor("String")
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.required = True

    def test_as_descriptor_rejects_other_values(self):
        with pytest.raises(ConfigurationError):
            as_descriptor("String")

    def test_default_producer_called_each_time(self):
        counter = itertools.count()
        descriptor = FieldDescriptor("IntDate", default=lambda: next(counter))
        assert descriptor.default_value() == 0
        assert descriptor.default_value() == 1


class TestValidate:
    """Tests for validate()."""

    registry = {
        "iss": FieldDescriptor("StringOrURI", required=True),
        "exp": FieldDescriptor("IntDate", required=True),
        "typ": FieldDescriptor("String", default="JWT"),
        "cty": FieldDescriptor("String", enum=("JWT",)),
    }

    def test_valid_source(self):
        target = validate(["iss", "exp"], self.registry, {"iss": "https://issuer.example", "exp": 1999999999})
        assert target == {"iss": "https://issuer.example", "exp": 1999999999}

    def test_only_active_fields_are_copied(self):
        """Keys outside the active list are dropped."""
        target = validate(["iss"], self.registry, {"iss": "joe", "exp": 1, "extra": True})
        assert target == {"iss": "joe"}

    def test_missing_required_value(self):
        with pytest.raises(ValidationError, match="iss is a required value") as info:
            validate(["iss", "exp"], self.registry, {"exp": 1999999999})
        assert info.value.field == "iss"

    def test_format_mismatch(self):
        with pytest.raises(ValidationError, match="iss must conform to StringOrURI format"):
            validate(["iss"], self.registry, {"iss": "not a uri but has: colon"})

    def test_enumeration(self):
        with pytest.raises(ValidationError, match="cty must be an enumerated value"):
            validate(["cty"], self.registry, {"cty": "JOSE"})
        assert validate(["cty"], self.registry, {"cty": "JWT"}) == {"cty": "JWT"}

    def test_default_applied_when_absent(self):
        assert validate(["typ"], self.registry, {}) == {"typ": "JWT"}
        assert validate(["typ"], self.registry, {"typ": "at+jwt"}) == {"typ": "at+jwt"}

    def test_null_counts_as_absent(self):
        assert validate(["typ"], self.registry, {"typ": None}) == {"typ": "JWT"}
        with pytest.raises(ValidationError):
            validate(["exp"], self.registry, {"exp": None})

    def test_falsy_values_are_present(self):
        """0 satisfies a required IntDate; "" is present and fails String."""
        assert validate(["exp"], self.registry, {"exp": 0}) == {"exp": 0}
        with pytest.raises(ValidationError, match="must conform to String format"):
            validate(["typ"], self.registry, {"typ": ""})

    def test_first_violation_wins(self):
        with pytest.raises(ValidationError) as info:
            validate(["iss", "exp"], self.registry, {"iss": 5, "exp": "soon"})
        assert info.value.field == "iss"

    def test_unregistered_field_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="nope is not recognized"):
            validate(["iss", "nope"], self.registry, {"iss": "joe"})

    def test_unregistered_format_is_configuration_error(self):
        registry = {"scope": FieldDescriptor("Scope")}
        # only consulted once a value is present
        assert validate(["scope"], registry, {}) == {}
        with pytest.raises(ConfigurationError, match="Scope is not a recognized format"):
            validate(["scope"], registry, {"scope": "read"})

    def test_absent_source_is_noop(self):
        """A missing source yields an empty mapping, even with required fields."""
        assert validate(["iss", "exp"], self.registry, None) == {}

    def test_non_mapping_source(self):
        with pytest.raises(ValidationError):
            validate(["iss"], self.registry, ["iss"])

    def test_alternate_source_key(self):
        """Values are read from 'from' first and stored under the field name."""
        registry = {"iss": FieldDescriptor("String", source="issuer")}

        assert validate(["iss"], registry, {"issuer": "a", "iss": "b"}) == {"iss": "a"}
        assert validate(["iss"], registry, {"iss": "b"}) == {"iss": "b"}

    def test_default_producer_is_fresh(self):
        counter = itertools.count(100)
        registry = {"iat": FieldDescriptor("IntDate", default=lambda: next(counter))}

        assert validate(["iat"], registry, {}) == {"iat": 100}
        assert validate(["iat"], registry, {}) == {"iat": 101}
        assert validate(["iat"], registry, {"iat": 5}) == {"iat": 5}

    def test_mutable_default_is_copied(self):
        """Each validation gets its own copy of a plain default."""
        descriptor = FieldDescriptor("String*", default=[])
        registry = {"scopes": descriptor}

        first = validate(["scopes"], registry, {})
        first["scopes"].append("admin")

        assert validate(["scopes"], registry, {}) == {"scopes": []}
        assert descriptor.default == []
