"""Embedded associations: mapped instances stored inline in a parent document."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class EmbeddedAssociation:
    """Descriptor holding one (singular) or many embedded instances.

    Values assigned as mappings are loaded through the target class, so a
    stored ``_type`` selects the concrete subclass.
    """

    def __init__(self, target: type, *, singular: bool, name: str | None = None) -> None:
        """Create association.

        Args:
            target: Mapped class of the embedded instances.
            singular: True for a to-one association, False for to-many.
            name: Association name; set from the class attribute when omitted.
        """
        self.target = target
        self.singular = singular
        self.name = name or ""

    def __set_name__(self, owner: type, name: str) -> None:
        if not self.name:
            self.name = name

    def is_singular(self) -> bool:
        return self.singular

    def stored(self, instance: Any) -> Any:
        """Return the slot value without initializing it."""
        return instance._store.associations.get(self.name)

    def read(self, instance: Any) -> Any:
        """Return the held instance(s); a to-many slot starts as an empty list."""
        slots = instance._store.associations
        if self.singular:
            return slots.get(self.name)
        return slots.setdefault(self.name, [])

    def write(self, instance: Any, value: Any) -> None:
        """Store instance(s), loading mappings and linking them to ``instance``."""
        slots = instance._store.associations
        if self.singular:
            slots[self.name] = self._embed(instance, value)
            return
        if value is None:
            items: Iterable[Any] = []
        elif isinstance(value, Mapping) or not isinstance(value, Iterable):
            items = [value]
        else:
            items = value
        embedded = (self._embed(instance, item) for item in items)
        slots[self.name] = [item for item in embedded if item is not None]

    def _embed(self, instance: Any, value: Any) -> Any:
        if value is None:
            return None
        document = self.target.from_document(value)
        if document is not None:
            document._attach_parent(instance)
        return document

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self.read(instance)

    def __set__(self, instance: Any, value: Any) -> None:
        self.write(instance, value)

    def __repr__(self) -> str:
        kind = "one" if self.singular else "many"
        return f"EmbeddedAssociation({self.name!r}, {kind}, {self.target.__name__})"


def embeds_one(target: type) -> Any:
    """Declare a to-one embedded association in a mapped class body."""
    return EmbeddedAssociation(target, singular=True)


def embeds_many(target: type) -> Any:
    """Declare a to-many embedded association in a mapped class body."""
    return EmbeddedAssociation(target, singular=False)
