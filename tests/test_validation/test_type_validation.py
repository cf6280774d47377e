"""
Tests for simple type validation: primitives, arrays, dates.
"""

import datetime
import json
import typing

import pytest
from hypothesis import given, strategies as st

from typechecker.settings import ValidatorSettings
from typechecker.validation import (
    Rule,
    SchemaRegistry,
    ValidationError,
    ValidationErrorType,
    validate,
)


PRIMITIVE_CASES = st.one_of(
    st.text().map(lambda value: (value, str)),
    st.integers().map(lambda value: (value, int)),
    st.booleans().map(lambda value: (value, bool)),
    st.floats(allow_nan=False).map(lambda value: (value, float)),
)


class TestPrimitiveValidation:
    """Tests for str/int/float/bool/dict/object."""

    def test_valid_string(self):
        assert validate("foo", str) == "foo"

    def test_string_is_not_integer(self):
        with pytest.raises(ValidationError) as exc_info:
            validate("foo", int)
        error = exc_info.value
        assert str(error) == 'Expecting integer, received string "foo"'
        assert error.error_type is ValidationErrorType.INVALID_TYPE
        assert error.field is None
        assert error.path == []

    def test_integer_is_not_string(self):
        with pytest.raises(ValidationError, match="Expecting string, received integer 3"):
            validate(3, str)

    def test_float_accepts_integer(self):
        assert validate(3, float) == 3
        assert validate(2.5, float) == 2.5

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError, match="Expecting integer, received boolean true"):
            validate(True, int)
        with pytest.raises(ValidationError, match="Expecting number, received boolean false"):
            validate(False, float)

    def test_none_is_not_a_string(self):
        with pytest.raises(ValidationError, match="Expecting string, received null null"):
            validate(None, str)

    def test_dict(self):
        value = {"a": 1}
        assert validate(value, dict) is value
        with pytest.raises(ValidationError, match=r"Expecting object, received array \[1\]"):
            validate([1], dict)

    def test_object_accepts_anything(self):
        for value in ("foo", 3, None, [1], {"a": 1}):
            assert validate(value, object) is value

    def test_non_class_expected_type_disables_validation(self):
        assert validate("foo", {}) == "foo"
        assert validate(3, None) == 3
        assert validate([1], "str") == [1]

    def test_any_disables_validation(self):
        assert validate(3, typing.Any) == 3

    def test_unregistered_class_uses_isinstance(self):
        class Plain:
            pass

        plain = Plain()
        assert validate(plain, Plain) is plain
        with pytest.raises(ValidationError, match="Expecting Plain, received integer 3"):
            validate(3, Plain)

    @given(PRIMITIVE_CASES)
    def test_matching_kind_returns_value_unchanged(self, case):
        value, kind = case
        assert validate(value, kind) is value

    @given(st.text(max_size=15))
    def test_string_rejected_as_integer_quotes_value(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate(value, int)
        assert exc_info.value.error_type is ValidationErrorType.INVALID_TYPE
        assert json.dumps(value) in str(exc_info.value)

    @given(st.integers(min_value=-10**12, max_value=10**12))
    def test_integer_rejected_as_string_quotes_value(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate(value, str)
        assert json.dumps(value) in str(exc_info.value)


class TestArrayValidation:
    """Tests for list/tuple validation."""

    def test_number_is_not_array(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(3, list)
        assert str(exc_info.value) == "Expecting array, received integer 3"
        assert exc_info.value.error_type is ValidationErrorType.INVALID_TYPE

    def test_string_is_not_array(self):
        with pytest.raises(ValidationError, match="Expecting array"):
            validate("abc", list)

    def test_unchecked_items(self):
        value = ["foo", 3]
        result = validate(value, list)
        assert result == ["foo", 3]
        assert result is not value

    def test_checked_items(self):
        assert validate(["a", "b"], list, str) == ["a", "b"]

    def test_invalid_item_reports_index(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(["foo"], list, int)
        error = exc_info.value
        assert str(error) == '[0]: Expecting integer, received string "foo"'
        assert error.field == "[0]"
        assert error.error_type is ValidationErrorType.INVALID_TYPE

    def test_first_invalid_item_wins(self):
        with pytest.raises(ValidationError) as exc_info:
            validate([1, "a", "b"], list, int)
        assert exc_info.value.field == "[1]"

    def test_tuple_input_accepted(self):
        assert validate(("a", "b"), list, str) == ["a", "b"]

    def test_tuple_expected_type_returns_tuple(self):
        assert validate(["a"], tuple, str) == ("a",)


class TestDateValidation:
    """Tests for date/datetime validation."""

    def test_number_is_not_date(self):
        with pytest.raises(ValidationError, match="Expecting date, received integer 3"):
            validate(3, datetime.datetime)

    def test_valid_datetime(self):
        now = datetime.datetime.now()
        assert validate(now, datetime.datetime) is now

    def test_datetime_is_a_date(self):
        now = datetime.datetime.now()
        assert validate(now, datetime.date) is now

    def test_invalid_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(float("nan"), datetime.datetime)
        assert str(exc_info.value) == "Expecting date, received number NaN"
        assert exc_info.value.error_type is ValidationErrorType.INVALID_TYPE

    def test_iso_string_is_not_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate("2024-01-01", datetime.date)
        assert exc_info.value.error_type is ValidationErrorType.INVALID_TYPE


class TestMessageTruncation:
    """Serialized values in messages are bounded."""

    def test_long_value_truncated(self):
        settings = ValidatorSettings(max_value_length=20)
        with pytest.raises(ValidationError) as exc_info:
            validate("x" * 500, int, settings=settings)
        assert str(exc_info.value) == 'Expecting integer, received string "' + "x" * 16 + "..."

    def test_short_value_kept(self):
        settings = ValidatorSettings(max_value_length=20)
        with pytest.raises(ValidationError) as exc_info:
            validate("abc", int, settings=settings)
        assert str(exc_info.value).endswith('"abc"')


class Node:
    pass


class TestDepthGuard:
    """Self-referencing schemas are bounded by max_depth."""

    @pytest.fixture
    def registry(self):
        registry = SchemaRegistry()
        registry.register(Node, "children", Rule(expected_type=list, array_type=Node, required=False))
        return registry

    @staticmethod
    def nested(levels):
        value = {}
        for _ in range(levels):
            value = {"children": [value]}
        return value

    def test_moderate_nesting_validates(self, registry):
        result = validate(self.nested(5), Node, registry=registry)
        assert isinstance(result, Node)
        assert isinstance(result.children[0], Node)

    def test_too_deep_nesting_fails(self, registry):
        settings = ValidatorSettings(max_depth=5)
        with pytest.raises(ValidationError) as exc_info:
            validate(self.nested(10), Node, registry=registry, settings=settings)
        error = exc_info.value
        assert error.error_type is ValidationErrorType.INVALID_TYPE
        assert "Maximum validation depth of 5 exceeded" in str(error)
        assert str(error).startswith("children[0].children[0].children[0]")

    def test_interpreter_limit_reported_as_validation_error(self, registry):
        settings = ValidatorSettings(max_depth=10000)
        with pytest.raises(ValidationError) as exc_info:
            validate(self.nested(600), Node, registry=registry, settings=settings)
        assert exc_info.value.error_type is ValidationErrorType.INVALID_TYPE
        assert str(exc_info.value) == "Maximum validation depth exceeded"
