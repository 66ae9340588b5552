"""Conversion between mapped instances and untyped documents."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from docmapper.config import DiscriminatorMode, SerializationSettings, current_config
from docmapper.schema import TYPE_REGISTRY

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def serialize(instance: Any) -> dict[str, Any]:
    """Serialize an instance to its document form.

    Keys come first in schema order, then populated embedded associations,
    then the discriminator field when one is recorded.

    Args:
        instance: Mapped instance.

    Returns:
        Document mapping.
    """
    settings = current_config().serialization
    schema = TYPE_REGISTRY.schema(type(instance))
    document: dict[str, Any] = {}
    for declared in schema.all_keys():
        document[declared.name] = declared.to_document(instance.get(declared.name))
    for association in schema.associations():
        held = association.stored(instance)
        if held is None:
            continue
        if association.is_singular():
            document[association.name] = held.as_document()
        else:
            document[association.name] = [item.as_document() for item in held]
    discriminator = _discriminator_for(instance, settings)
    if discriminator is not None:
        document[settings.discriminator_field] = discriminator
    return document


def _discriminator_for(instance: Any, settings: SerializationSettings) -> Any:
    cls = type(instance)
    if TYPE_REGISTRY.schema(cls).has_key(settings.discriminator_field):
        return None
    # A loaded discriminator is echoed so unresolved names survive a round trip.
    if instance.discriminator is not None:
        return instance.discriminator
    mode = settings.discriminator_mode
    if mode == DiscriminatorMode.NEVER:
        return None
    if mode == DiscriminatorMode.ALWAYS or TYPE_REGISTRY.hierarchy_root(cls) is not cls:
        return TYPE_REGISTRY.entry(cls).type_name
    return None


def resolve_type(expected: type[T], document: Mapping[str, Any]) -> type[T]:
    """Resolve the concrete class named by a document's discriminator.

    Unknown names, and names of classes outside ``expected``'s hierarchy,
    fall back to ``expected``.

    Args:
        expected: Statically expected class.
        document: Stored document.

    Returns:
        Class to instantiate.
    """
    field = current_config().serialization.discriminator_field
    name = document.get(field)
    if name is None or not str(name).strip():
        return expected
    resolved = TYPE_REGISTRY.resolve(str(name).strip())
    if resolved is None or not issubclass(resolved, expected):
        _LOGGER.debug(
            "Unresolvable %s %r; loading as %s", field, name, expected.__qualname__
        )
        return expected
    return resolved


def deserialize(expected: type[T], document: Any) -> T | None:
    """Load a document as an instance of ``expected`` or the subclass it names.

    The instance is created without running its constructor, so no identifier
    is generated and it is not marked new.

    Args:
        expected: Statically expected class.
        document: Stored document, or None.

    Returns:
        Loaded instance, or None when there is no document.
    """
    if document is None:
        return None
    if not isinstance(document, Mapping):
        _LOGGER.debug(
            "Cannot load %s from %s", expected.__qualname__, type(document).__name__
        )
        return None
    concrete = resolve_type(expected, document)
    instance = concrete.__new__(concrete)
    return instance._initialize_from_document(document)


def from_document(expected: type[T], value: Any) -> T | None:
    """Return ``value`` as an ``expected`` instance, loading it when needed."""
    if value is None:
        return None
    if isinstance(value, expected):
        return value
    return deserialize(expected, value)


def to_document(value: Any) -> dict[str, Any] | None:
    """Return the document form of an instance; mappings pass through."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    if not callable(getattr(value, "as_document", None)):
        return None
    return value.as_document()
