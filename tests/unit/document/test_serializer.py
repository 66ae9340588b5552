"""Unit tests for document serialization and polymorphic loading."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from docmapper.config import DiscriminatorMode, MapperConfig, configure
from docmapper.document import Document, from_document, to_document
from docmapper.schema import key, type_name


class Employee(Document):
    name = key(str)
    salary = key(Decimal)
    hired = key(date)
    skills = key(set, typecast=str)


class Manager(Employee):
    reports = key(int)


class Contractor(Document):
    name = key(str)


def _use_config(payload: dict[str, object]) -> None:
    configure(MapperConfig.model_validate(payload))


@pytest.mark.unit
def test_round_trip_preserves_attributes() -> None:
    """Loading a serialized instance should reproduce its attributes."""
    employee = Employee(
        name="Ada", salary="1200.50", hired=date(2020, 1, 6), skills=["math"]
    )

    loaded = Employee.load(employee.as_document())

    assert loaded.attributes == employee.attributes
    assert loaded == employee


@pytest.mark.unit
def test_document_uses_schema_order_and_document_forms() -> None:
    employee = Employee(
        name="Ada", salary=Decimal("10.5"), hired=date(2020, 1, 6), skills={"x"}
    )

    document = employee.as_document()

    assert list(document) == ["_id", "name", "salary", "hired", "skills"]
    assert document["salary"] == "10.5"
    assert document["hired"] == datetime(2020, 1, 6, tzinfo=UTC)
    assert document["skills"] == ["x"]


@pytest.mark.unit
def test_loaded_instance_is_not_new_and_gets_no_identifier() -> None:
    """Loading should bypass construction side effects."""
    loaded = Employee.load({"name": "Ada"})

    assert loaded.is_new is False
    assert loaded.is_persisted is True
    assert loaded.id is None


@pytest.mark.unit
def test_subclass_instances_record_discriminator() -> None:
    """Classes below their hierarchy root should write _type."""
    manager = Manager(name="Grace", reports="3")

    assert manager.as_document()["_type"] == type_name(Manager)
    assert "_type" not in Employee(name="Ada").as_document()


@pytest.mark.unit
def test_load_resolves_discriminator_to_subclass() -> None:
    document = Manager(name="Grace", reports=3).as_document()

    loaded = Employee.load(document)

    assert type(loaded) is Manager
    assert loaded.reports == 3
    assert loaded.discriminator == type_name(Manager)


@pytest.mark.unit
def test_unknown_discriminator_falls_back_to_expected_type() -> None:
    """An unresolvable _type should load as the expected class and be kept."""
    document = {"_id": str(uuid4()), "name": "Ada", "_type": "gone.Missing"}

    loaded = Employee.load(document)

    assert type(loaded) is Employee
    assert loaded.name == "Ada"
    assert loaded.as_document()["_type"] == "gone.Missing"
    assert not Employee.has_key("_type")


@pytest.mark.unit
def test_discriminator_outside_hierarchy_falls_back() -> None:
    """A _type naming an unrelated class should not change the loaded class."""
    loaded = Employee.load({"name": "Ada", "_type": type_name(Contractor)})

    assert type(loaded) is Employee


@pytest.mark.unit
def test_discriminator_mode_always_and_never() -> None:
    _use_config({"serialization": {"discriminator_mode": DiscriminatorMode.ALWAYS}})
    assert Employee(name="Ada").as_document()["_type"] == type_name(Employee)

    _use_config({"serialization": {"discriminator_mode": DiscriminatorMode.NEVER}})
    assert "_type" not in Manager(name="Grace").as_document()


@pytest.mark.unit
def test_custom_discriminator_field() -> None:
    _use_config({"serialization": {"discriminator_field": "kind"}})

    document = Manager(name="Grace").as_document()
    loaded = Employee.load(document)

    assert document["kind"] == type_name(Manager)
    assert "_type" not in document
    assert type(loaded) is Manager


@pytest.mark.unit
@pytest.mark.parametrize("document", [None, "not a document", 42])
def test_load_without_mapping_returns_none(document: object) -> None:
    assert Employee.load(document) is None


@pytest.mark.unit
def test_module_level_conversion_helpers() -> None:
    employee = Employee(name="Ada")

    assert from_document(Employee, None) is None
    assert from_document(Employee, employee) is employee
    assert from_document(Employee, {"name": "Bo"}).name == "Bo"
    assert to_document(None) is None
    assert to_document({"a": 1}) == {"a": 1}
    assert to_document(employee) == employee.as_document()


@pytest.mark.unit
def test_non_string_discriminator_is_echoed_unchanged() -> None:
    """A loaded _type keeps its original value through a round trip."""
    loaded = Employee.load({"name": "Ada", "_type": 7})

    assert type(loaded) is Employee
    assert loaded.discriminator == 7
    assert loaded.as_document()["_type"] == 7
