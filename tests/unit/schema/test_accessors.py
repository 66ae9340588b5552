"""Unit tests for synthesized key accessors."""

from __future__ import annotations

import pytest

from docmapper.document import Document
from docmapper.schema import KeyAttribute, RawKeyAttribute, is_accessor_safe, is_present, key


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [("name", True), ("_id", True), ("a1_b", True), ("2bad", False), ("x-y", False), ("class", False), ("", False)],
)
def test_is_accessor_safe(name: str, expected: bool) -> None:
    assert is_accessor_safe(name) is expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), (False, False), ("  ", False), ([], False), ({}, False), ("Ada", True), (0, True), ([0], True)],
)
def test_is_present(value: object, expected: bool) -> None:
    assert is_present(value) is expected


@pytest.mark.unit
def test_declared_key_gets_read_write_raw_and_presence() -> None:
    """A safe key name should expose all four capabilities."""

    class Person(Document):
        age = key(int)

    person = Person()
    person.age = "42"

    assert isinstance(Person.__dict__["age"], KeyAttribute)
    assert isinstance(Person.__dict__["age_before_typecast"], RawKeyAttribute)
    assert person.age == 42
    assert person.age_before_typecast == "42"
    assert person.present("age") is True
    assert Person.accessor_table().names() == ["_id", "age"]


@pytest.mark.unit
def test_raw_accessor_is_read_only() -> None:
    class Person(Document):
        age = key(int)

    person = Person()

    with pytest.raises(AttributeError):
        person.age_before_typecast = "1"


@pytest.mark.unit
def test_invalid_name_degrades_to_map_style_access() -> None:
    """A key named 2bad should register without any named accessor."""

    class Odd(Document):
        pass

    Odd.declare_key("2bad", int)
    odd = Odd()
    odd.set("2bad", "7")

    assert Odd.has_key("2bad")
    assert odd.get("2bad") == 7
    assert odd["2bad"] == 7
    assert "2bad" not in Odd.accessor_table()
    assert not hasattr(Odd, "2bad")


@pytest.mark.unit
def test_accessor_never_shadows_existing_attribute() -> None:
    """Keys named like existing methods keep the method; the table still works."""

    class Inventory(Document):
        pass

    Inventory.declare_key("keys", list)
    inventory = Inventory()
    inventory.set("keys", "front-door")

    assert callable(Inventory.keys)
    assert "keys" in Inventory.accessor_table()
    assert inventory.get("keys") == ["front-door"]


@pytest.mark.unit
def test_redeclaring_key_keeps_single_descriptor() -> None:
    """Synthesis should be idempotent for repeated declarations."""

    class Person(Document):
        name = key(str)

    descriptor = Person.__dict__["name"]
    Person.declare_key("name", str, required=True)

    assert Person.__dict__["name"] is descriptor
    assert Person.lookup_key("name").options.required is True


@pytest.mark.unit
def test_class_body_key_never_shadows_inherited_members() -> None:
    """Keys named like mapped-class members stay reachable map-style only."""

    class Page(Document):
        schema = key(str)
        attributes = key(dict)
        title = key(str)

    page = Page(schema="v2", attributes={"lang": "en"}, title="Home")

    assert Page.has_key("schema")
    assert page.get("schema") == "v2"
    assert page["attributes"] == {"lang": "en"}
    assert Page.schema().key_names() == ["_id", "schema", "attributes", "title"]
    assert "schema" not in Page.__dict__
    assert page.attributes["title"] == "Home"
    assert page.as_document()["schema"] == "v2"
