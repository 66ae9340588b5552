"""Unit tests for the process-wide type registry."""

from __future__ import annotations

import pytest

from docmapper.errors import MapperError, MapperErrorCode
from docmapper.schema import TypeRegistry, type_name


@pytest.fixture
def registry() -> TypeRegistry:
    return TypeRegistry()


@pytest.mark.unit
def test_key_declared_after_subclass_reaches_subclass(registry: TypeRegistry) -> None:
    """Declaring on a base after the subclass exists should propagate down."""

    class Base:
        pass

    class Child(Base):
        pass

    class Grandchild(Child):
        pass

    for cls in (Base, Child, Grandchild):
        registry.register_type(cls)

    registry.declare_key(Base, "name", str)

    assert registry.schema(Child).has_key("name")
    assert registry.schema(Grandchild).has_key("name")
    assert "name" in registry.accessors(Grandchild)


@pytest.mark.unit
def test_key_declared_before_subclass_is_inherited(registry: TypeRegistry) -> None:
    """A subclass created later should be seeded with the parent's keys."""

    class Base:
        pass

    registry.register_type(Base)
    registry.declare_key(Base, "name", str, required=True)

    class Child(Base):
        pass

    registry.register_type(Child)

    assert registry.schema(Child).has_key("name")
    assert [rule.field for rule in registry.rules(Child)] == ["name"]


@pytest.mark.unit
def test_subclass_keys_do_not_leak_upwards(registry: TypeRegistry) -> None:
    class Base:
        pass

    class Child(Base):
        pass

    registry.register_type(Base)
    registry.register_type(Child)

    registry.declare_key(Child, "extra", int)

    assert not registry.schema(Base).has_key("extra")
    assert registry.descendants(Base) == [Child]


@pytest.mark.unit
def test_index_requests_skip_embeddable_keys(registry: TypeRegistry) -> None:
    """Only non-embeddable keys with index=True should request an index."""

    class Inline:
        @classmethod
        def embeddable(cls) -> bool:
            return True

    class Owner:
        pass

    registry.register_type(Owner)
    registry.declare_key(Owner, "email", str, index=True)
    registry.declare_key(Owner, "inline", Inline, index=True)
    registry.declare_key(Owner, "note", str)

    assert registry.schema(Owner).index_requests() == ["email"]


@pytest.mark.unit
def test_resolve_skips_abstract_classes(registry: TypeRegistry) -> None:
    """Abstract bases should neither resolve nor act as hierarchy roots."""

    class Framework:
        pass

    class Root(Framework):
        pass

    class Leaf(Root):
        pass

    registry.register_type(Framework, abstract=True)
    registry.register_type(Root)
    registry.register_type(Leaf)

    assert registry.resolve(type_name(Framework)) is None
    assert registry.resolve(type_name(Leaf)) is Leaf
    assert registry.hierarchy_root(Leaf) is Root
    assert registry.hierarchy_root(Root) is Root


@pytest.mark.unit
def test_unregistered_class_raises_unknown_type(registry: TypeRegistry) -> None:
    class Stranger:
        pass

    with pytest.raises(MapperError) as exc_info:
        registry.schema(Stranger)

    assert exc_info.value.code == MapperErrorCode.UNKNOWN_TYPE
    assert registry.is_registered(Stranger) is False


@pytest.mark.unit
def test_invalid_length_option_leaves_registry_untouched(
    registry: TypeRegistry,
) -> None:
    """A rejected declaration should not register the key."""

    class Owner:
        pass

    registry.register_type(Owner)

    with pytest.raises(MapperError):
        registry.declare_key(Owner, "code", str, length=[1, 2])

    assert not registry.schema(Owner).has_key("code")
    assert len(registry.rules(Owner)) == 0
