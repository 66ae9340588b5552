"""Process-wide registry of mapped classes and their schemas.

Lifecycle: entries are populated while classes and keys are declared (the
bootstrap phase) and then read continuously. Every mutation takes the
registry lock; reads of a stable registry do not need it.
"""

from __future__ import annotations

import inspect
import logging
import threading
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from docmapper.errors import MapperError, MapperErrorCode
from docmapper.schema.accessors import AccessorSynthesizer, AccessorTable
from docmapper.schema.key import Key
from docmapper.schema.registry import SchemaRegistry
from docmapper.schema.validations import RuleSet, ValidationBinder

if TYPE_CHECKING:
    from docmapper.document.associations import EmbeddedAssociation

_LOGGER = logging.getLogger(__name__)


@dataclass
class TypeEntry:
    """Registry state owned by one mapped class."""

    schema: SchemaRegistry
    accessors: AccessorTable
    rules: RuleSet
    parent: type | None
    abstract: bool
    type_name: str
    descendants: weakref.WeakSet[type] = field(default_factory=weakref.WeakSet)


def type_name(cls: type) -> str:
    """Return the fully-qualified discriminator name of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


class TypeRegistry:
    """Maps mapped classes to their schema state and discriminator names."""

    def __init__(self, *, synthesizer: AccessorSynthesizer | None = None) -> None:
        """Create empty registry.

        Args:
            synthesizer: Accessor synthesizer; defaults to the standard one.
        """
        self._lock = threading.RLock()
        self._synthesizer = synthesizer or AccessorSynthesizer()
        self._entries: weakref.WeakKeyDictionary[type, TypeEntry] = (
            weakref.WeakKeyDictionary()
        )
        self._by_name: weakref.WeakValueDictionary[str, type] = (
            weakref.WeakValueDictionary()
        )

    def register_type(self, cls: type, *, abstract: bool = False) -> TypeEntry:
        """Register a newly created class, seeding its state from its parent.

        Args:
            cls: New mapped class.
            abstract: Whether the class is a base that is never stored as a
                concrete type.

        Returns:
            The new registry entry.
        """
        with self._lock:
            parent = self._mapped_parent(cls)
            parent_entry = self._entries.get(parent) if parent is not None else None
            if parent_entry is None:
                schema, accessors, rules = SchemaRegistry(), AccessorTable(), RuleSet()
            else:
                schema = parent_entry.schema.copy()
                accessors = parent_entry.accessors.copy()
                rules = parent_entry.rules.copy()
            entry = TypeEntry(
                schema=schema,
                accessors=accessors,
                rules=rules,
                parent=parent,
                abstract=abstract,
                type_name=type_name(cls),
            )
            self._entries[cls] = entry
            if parent_entry is not None:
                parent_entry.descendants.add(cls)
            if not abstract:
                self._by_name[entry.type_name] = cls
            _LOGGER.debug(
                "Registered %s with %d inherited keys", entry.type_name, len(schema)
            )
            return entry

    def _mapped_parent(self, cls: type) -> type | None:
        for base in cls.__mro__[1:]:
            if base in self._entries:
                return base
        return None

    def entry(self, cls: type) -> TypeEntry:
        """Return the entry of a registered class.

        Raises:
            MapperError: If the class is not mapped.
        """
        entry = self._entries.get(cls)
        if entry is None:
            raise MapperError(
                MapperErrorCode.UNKNOWN_TYPE,
                f"Error: '{type_name(cls)}' is not a mapped class.",
                data={"type": type_name(cls)},
            )
        return entry

    def is_registered(self, cls: type) -> bool:
        return cls in self._entries

    def schema(self, cls: type) -> SchemaRegistry:
        return self.entry(cls).schema

    def accessors(self, cls: type) -> AccessorTable:
        return self.entry(cls).accessors

    def rules(self, cls: type) -> RuleSet:
        return self.entry(cls).rules

    def descendants(self, cls: type) -> list[type]:
        """Return the direct mapped subclasses currently alive."""
        return list(self.entry(cls).descendants)

    def hierarchy_root(self, cls: type) -> type:
        """Return the topmost non-abstract mapped ancestor of ``cls``."""
        root = cls
        parent = self.entry(cls).parent
        while parent is not None:
            parent_entry = self.entry(parent)
            if parent_entry.abstract:
                break
            root = parent
            parent = parent_entry.parent
        return root

    def resolve(self, name: str) -> type | None:
        """Resolve a discriminator name to a registered concrete class."""
        return self._by_name.get(name)

    def declare_key(
        self, cls: type, name: object, type_: Any = None, **options: Any
    ) -> Key:
        """Declare a key on ``cls`` and on every class descending from it.

        Stores the key, synthesizes accessors, records an index request and
        binds validations, then repeats the declaration on each existing
        direct subclass (which repeat it on theirs).

        Args:
            cls: Mapped class.
            name: Key name.
            type_: Declared type, or None for untyped.
            **options: Key options.

        Returns:
            The key stored on ``cls``.

        Raises:
            MapperError: If the key name or options are misconfigured.
        """
        with self._lock:
            entry = self.entry(cls)
            declared = entry.schema.declare_key(name, type_, **options)
            self._synthesizer.synthesize(cls, entry.accessors, declared)
            if declared.options.index and not declared.embeddable():
                entry.schema.request_index(declared.name)
            ValidationBinder(entry.rules).bind(declared)
            _LOGGER.debug("Declared key %r on %s", declared.name, entry.type_name)
            for descendant in list(entry.descendants):
                self.declare_key(descendant, name, type_, **options)
            return declared

    def declare_association(self, cls: type, association: EmbeddedAssociation) -> None:
        """Declare an embedded association on ``cls`` and its descendants."""
        with self._lock:
            entry = self.entry(cls)
            entry.schema.declare_association(association)
            if inspect.getattr_static(cls, association.name, None) is not association:
                setattr(cls, association.name, association)
            for descendant in list(entry.descendants):
                self.declare_association(descendant, association)


TYPE_REGISTRY = TypeRegistry()
