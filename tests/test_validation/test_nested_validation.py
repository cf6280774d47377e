"""
Tests for nested object validation, inheritance and pass-through keys.
"""

import datetime
from typing import List, Optional

import pytest

from typechecker import check_field, checked, register_field
from typechecker.validation import ValidationError, ValidationErrorType, validate


@checked
class Bar:
    description: str = check_field()
    # Invalid type, validation is skipped for this field
    description2: str = check_field(type={})
    # Invalid item type, items are not checked
    description3: List[str] = check_field(array_type={})


@checked
class Foo:
    name: str = check_field()
    age: int = check_field(required=False)
    hobbies: List[str] = check_field(nullable=True)
    bar: Bar = check_field()
    bars: List[Bar] = check_field(required=False)
    date: Optional[datetime.datetime] = check_field(required=False)


@checked
class Y:
    name: str = check_field(required=False)
    test: bool = check_field(required=False)
    test2: int = check_field(required=False)


@checked
class Parent:
    property1: str = check_field()


@checked
class A(Parent):
    property2: str = check_field()


class NoOwnFields(Parent):
    pass


@checked
class Holder:
    item: A = check_field()


@checked
class Person:
    first: str = check_field()

    @property
    def display(self):
        return self.first.upper()


class SlottedPerson:
    __slots__ = ("first",)


register_field(SlottedPerson, "first", str)


def error_of(value, expected_type, array_type=None) -> ValidationError:
    with pytest.raises(ValidationError) as exc_info:
        validate(value, expected_type, array_type)
    return exc_info.value


class TestNestedObjects:
    """Walks through progressively fixed input."""

    def test_missing_required_field(self):
        error = error_of({}, Foo)
        assert str(error) == "name: Field is required"
        assert error.error_type is ValidationErrorType.MISSING_FIELD
        assert error.field == "name"

    def test_blank_instance_input(self):
        assert str(error_of(Foo(), Foo)) == "name: Field is required"

    def test_invalid_array_items(self):
        error = error_of({"name": "Name", "hobbies": [3, 4]}, Foo)
        assert str(error) == "hobbies[0]: Expecting string, received integer 3"
        assert error.field == "hobbies[0]"
        assert error.error_type is ValidationErrorType.INVALID_TYPE

    def test_nullable_field_set_to_none(self):
        result = validate({"name": "n", "hobbies": None, "bar": {"description": "d"}}, Foo)
        assert "hobbies" in vars(result)
        assert result.hobbies is None

    def test_non_nullable_field(self):
        error = error_of({"name": "Name", "hobbies": None, "bar": None}, Foo)
        assert str(error) == "bar: Field can't be null"
        assert error.error_type is ValidationErrorType.NULL_VALUE

    def test_missing_field_on_nested_object(self):
        bar = {"description": "Description", "description2": 3}
        error = error_of({"name": "Name", "hobbies": None, "bar": bar}, Foo)
        assert str(error) == "bar.description3: Field is required"
        assert error.field == "description3"
        assert error.path == ["bar", "description3"]

    def test_unchecked_fields_pass(self):
        bar = {"description": "Description", "description2": 3, "description3": [3, 4]}
        result = validate({"name": "Name", "hobbies": None, "bar": bar}, Foo)
        assert isinstance(result, Foo)
        assert isinstance(result.bar, Bar)
        assert result.bar.description2 == 3
        assert result.bar.description3 == [3, 4]
        assert result.hobbies is None

    def test_invalid_item_in_array_of_objects(self):
        bar = {"description": "Description", "description3": []}
        error = error_of(
            {"name": "Name", "hobbies": [], "bar": bar, "bars": [bar, {"description": 4}]}, Foo
        )
        assert str(error) == "bars[1].description: Expecting string, received integer 4"
        assert error.field == "description"
        assert error.path == ["bars[1]", "description"]

    def test_nested_date(self):
        bar = {"description": "d", "description3": []}
        error = error_of({"name": "n", "hobbies": [], "bar": bar, "date": "2024-01-01"}, Foo)
        assert error.field == "date"
        assert str(error).startswith("date: Expecting date")

    def test_input_must_be_an_object(self):
        assert str(error_of(None, Y)) == "Expecting an instance of Y, received null"
        assert str(error_of("abc", Y)) == 'Expecting an instance of Y, received "abc"'
        assert str(error_of([1], Y)) == "Expecting an instance of Y, received [1]"

    def test_required_fields_checked_before_object_shape(self):
        assert str(error_of(None, Foo)) == "name: Field is required"

    def test_result_matches_input(self):
        result = validate({"test": False, "test2": 0}, Y)
        assert vars(result) == {"test": False, "test2": 0}

    def test_attribute_input(self):
        bar = Bar()
        bar.description = "d"
        bar.description3 = ["x"]
        result = validate(bar, Bar)
        assert result is not bar
        assert vars(result) == {"description": "d", "description3": ["x"]}


class TestInstances:
    """Validated objects are instances of the expected class."""

    def test_object_instance(self):
        assert isinstance(validate({}, Y), Y)

    def test_array_of_objects(self):
        result = validate([{}], list, Y)
        assert isinstance(result[0], Y)

    def test_array_of_objects_error_path(self):
        error = error_of([{"description": "a", "description3": []}, {"description": 4}], list, Bar)
        assert str(error) == "[1].description: Expecting string, received integer 4"
        assert error.field == "description"


class TestPassThrough:
    """Undeclared keys are copied verbatim."""

    def test_read_only_property_not_overwritten(self):
        result = validate({"first": "ada", "display": "x", "other": 1}, Person)
        assert result.display == "ADA"
        assert result.other == 1

    def test_slots_class_keeps_declared_fields(self):
        result = validate({"first": "ada", "other": 1}, SlottedPerson)
        assert result.first == "ada"
        assert not hasattr(result, "other")

    def test_extra_keys_copied(self):
        extra = {"k": [1, 2]}
        result = validate({"name": "x", "extra": extra, "count": 3}, Y)
        assert result.extra is extra
        assert result.count == 3

    def test_reserved_keys_not_copied(self):
        result = validate({"__class__": "evil", "__dict__": {}, "ok": 1}, Y)
        assert type(result) is Y
        assert vars(result) == {"ok": 1}

    def test_non_string_keys_not_copied(self):
        result = validate({1: "one", "two": 2}, Y)
        assert vars(result) == {"two": 2}


class TestInheritance:
    """Parent fields are validated before child fields."""

    def test_parent_field_first(self):
        error = error_of({}, A)
        assert str(error) == "property1: Field is required"

    def test_child_field_next(self):
        assert str(error_of({"property1": "foo"}, A)) == "property2: Field is required"

    def test_valid_child(self):
        result = validate({"property1": "foo", "property2": "bar", "other": 1}, A)
        assert isinstance(result, A)
        assert vars(result) == {"property1": "foo", "property2": "bar", "other": 1}

    def test_parent_entry_does_not_include_child_fields(self):
        result = validate({"property1": "foo"}, Parent)
        assert type(result) is Parent

    def test_subclass_without_own_fields(self):
        assert str(error_of({}, NoOwnFields)) == "property1: Field is required"
        result = validate({"property1": "foo", "x": 1}, NoOwnFields)
        assert isinstance(result, NoOwnFields)
        assert result.x == 1

    def test_inherited_field_path(self):
        error = error_of({"item": {"property1": 3}}, Holder)
        assert str(error) == "item.property1: Expecting string, received integer 3"
