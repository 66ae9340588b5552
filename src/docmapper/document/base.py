"""Mapped document classes and the per-instance attribute protocol."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any, Self

from docmapper.coercion import (
    IDENTIFIER_KEY,
    IDENTIFIER_TYPE,
    generate_id,
    to_identifier,
)
from docmapper.config import current_config
from docmapper.document import serializer
from docmapper.document.associations import EmbeddedAssociation
from docmapper.document.store import AttributeStore
from docmapper.schema import (
    TYPE_REGISTRY,
    AccessorTable,
    Key,
    KeyDeclaration,
    SchemaRegistry,
    ValidationRule,
    canonical_key_name,
    is_present,
)

_LOGGER = logging.getLogger(__name__)


class MappedObject:
    """Base for classes whose attributes map to document keys.

    Subclassing registers the class, seeds its schema from its parent and
    declares the keys and embedded associations listed in the class body.
    """

    _store: AttributeStore

    def __init_subclass__(cls, *, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        entry = TYPE_REGISTRY.register_type(cls, abstract=abstract)
        if entry.parent is None:
            TYPE_REGISTRY.declare_key(cls, IDENTIFIER_KEY, IDENTIFIER_TYPE)
        # Through the registry: a class-body key may shadow the classmethods.
        for name, attribute in list(vars(cls).items()):
            if isinstance(attribute, KeyDeclaration):
                TYPE_REGISTRY.declare_key(
                    cls, name, attribute.type, **attribute.options
                )
            elif isinstance(attribute, EmbeddedAssociation):
                TYPE_REGISTRY.declare_association(cls, attribute)

    def __init__(self, attrs: Mapping[str, Any] | None = None, /, **fields: Any) -> None:
        """Create a new, unsaved instance.

        A fresh identifier is generated unless ``id`` or ``_id`` is supplied
        (even as None) or the identifier key cannot default.

        Args:
            attrs: Initial attribute mapping.
            **fields: Further attributes; override ``attrs``.
        """
        merged = {**(attrs or {}), **fields}
        self._store = AttributeStore(is_new=True)
        self._default_id_value(merged)
        self.assign(merged)

    # Schema declaration

    @classmethod
    def declare_key(cls, name: object, type_: Any = None, **options: Any) -> Key:
        """Declare a key on this class and every class descending from it."""
        return TYPE_REGISTRY.declare_key(cls, name, type_, **options)

    @classmethod
    def declare_association(cls, association: EmbeddedAssociation) -> None:
        TYPE_REGISTRY.declare_association(cls, association)

    @classmethod
    def schema(cls) -> SchemaRegistry:
        return TYPE_REGISTRY.schema(cls)

    @classmethod
    def accessor_table(cls) -> AccessorTable:
        return TYPE_REGISTRY.accessors(cls)

    @classmethod
    def validation_rules(cls) -> list[ValidationRule]:
        return TYPE_REGISTRY.rules(cls).rules()

    @classmethod
    def has_key(cls, name: object) -> bool:
        return cls.schema().has_key(name)

    @classmethod
    def lookup_key(cls, name: object) -> Key | None:
        return cls.schema().lookup(name)

    @classmethod
    def keys(cls) -> dict[str, Key]:
        return {declared.name: declared for declared in cls.schema().all_keys()}

    @classmethod
    def key_names(cls) -> list[str]:
        return cls.schema().key_names()

    @classmethod
    def embedded_keys(cls) -> list[Key]:
        return cls.schema().embedded_keys()

    @classmethod
    def non_embedded_keys(cls) -> list[Key]:
        return cls.schema().non_embedded_keys()

    @classmethod
    def object_id_keys(cls) -> list[str]:
        return cls.schema().object_id_keys()

    @classmethod
    def object_id_key(cls, name: object) -> bool:
        return canonical_key_name(name) in cls.object_id_keys()

    @classmethod
    def using_object_id(cls) -> bool:
        return cls.object_id_key(IDENTIFIER_KEY)

    @classmethod
    def can_default_id(cls) -> bool:
        identifier = cls.lookup_key(IDENTIFIER_KEY)
        return identifier is not None and identifier.can_default_id()

    @classmethod
    def embeddable(cls) -> bool:
        return False

    # Document conversion

    @classmethod
    def load(cls, document: Mapping[str, Any] | None) -> Self | None:
        """Load a stored document, honouring its ``_type`` discriminator."""
        return serializer.deserialize(cls, document)

    @classmethod
    def from_document(cls, value: Any) -> Self | None:
        return serializer.from_document(cls, value)

    @classmethod
    def to_document(cls, value: Any) -> dict[str, Any] | None:
        return serializer.to_document(value)

    def as_document(self) -> dict[str, Any]:
        """Return this instance's document form."""
        return serializer.serialize(self)

    def _initialize_from_document(self, document: Mapping[str, Any]) -> Self:
        self._store = AttributeStore(is_new=False)
        self._load_from_document(document)
        return self

    def _load_from_document(self, document: Mapping[str, Any]) -> None:
        if not document:
            return
        discriminator_field = current_config().serialization.discriminator_field
        for name, value in document.items():
            canonical = canonical_key_name(name)
            if not canonical:
                _LOGGER.debug(
                    "Skipping blank field name %r loading %s",
                    name,
                    type(self).__qualname__,
                )
                continue
            declared = self.has_key(canonical)
            if canonical == discriminator_field and not declared:
                self._store.discriminator = value
                continue
            writer = self._writer_for(canonical)
            if writer is not None and not declared:
                writer(value)
            else:
                self.set(canonical, value)

    # Attribute access

    @property
    def id(self) -> Any:
        return self.get(IDENTIFIER_KEY)

    @id.setter
    def id(self, value: Any) -> None:
        if self.using_object_id():
            value = to_identifier(value)
        self.set(IDENTIFIER_KEY, value)

    @property
    def attributes(self) -> dict[str, Any]:
        """Return typed values of every key in schema order."""
        return {name: self.get(name) for name in self.key_names()}

    def get(self, name: object) -> Any:
        """Read a key through its accessor, or directly when it has none."""
        canonical = canonical_key_name(name)
        accessors = self.accessor_table().get(canonical)
        if accessors is not None:
            return accessors.read(self)
        return self._read_key(canonical)

    def set(self, name: object, value: Any) -> None:
        """Write a key, declaring an untyped key first when it is unknown."""
        canonical = canonical_key_name(name)
        if not self.has_key(canonical):
            writer = self._writer_for(canonical)
            if writer is not None:
                writer(value)
                return
            type(self).declare_key(canonical)
        self._write_key(canonical, value)

    __getitem__ = get
    __setitem__ = set

    def present(self, name: object) -> bool:
        """Return whether the key currently reads as a non-blank value."""
        canonical = canonical_key_name(name)
        accessors = self.accessor_table().get(canonical)
        if accessors is not None:
            return accessors.present(self)
        return is_present(self._read_key(canonical))

    def assign(self, attrs: Mapping[str, Any] | None) -> None:
        """Bulk-assign attributes, preferring each name's writer."""
        if not attrs:
            return
        for name, value in attrs.items():
            canonical = canonical_key_name(name)
            if not canonical:
                _LOGGER.debug("Skipping blank attribute name %r", name)
                continue
            writer = self._writer_for(canonical)
            if writer is not None:
                writer(value)
            else:
                self.set(canonical, value)

    def _writer_for(self, name: str) -> Callable[[Any], None] | None:
        accessors = self.accessor_table().get(name)
        if accessors is not None:
            return partial(accessors.write, self)
        attribute = inspect.getattr_static(type(self), name, None)
        if isinstance(attribute, property) and attribute.fset is not None:
            return partial(setattr, self, name)
        if isinstance(attribute, EmbeddedAssociation):
            return partial(attribute.write, self)
        return None

    def _default_id_value(self, attrs: Mapping[str, Any]) -> None:
        supplied = {canonical_key_name(name) for name in attrs}
        if "id" in supplied or IDENTIFIER_KEY in supplied:
            return
        if self.can_default_id():
            self._write_key(IDENTIFIER_KEY, generate_id())

    def _read_key(self, name: str) -> Any:
        declared = self.lookup_key(name)
        if declared is None:
            return None
        value = declared.get(self._store.values.get(declared.name))
        self._set_parent_document(declared, value)
        self._store.values[declared.name] = value
        return value

    def _read_key_before_typecast(self, name: str) -> Any:
        return self._store.raw.get(canonical_key_name(name))

    def _write_key(self, name: str, value: Any) -> None:
        declared = self.lookup_key(name)
        if declared is None:
            declared = type(self).declare_key(name)
        self._set_parent_document(declared, value)
        self._store.write(declared.name, value, declared.set(value))

    def _set_parent_document(self, declared: Key, value: Any) -> None:
        if declared.embeddable() and isinstance(value, declared.type):
            value._attach_parent(self)

    def _attach_parent(self, parent: Any) -> None:
        self._store.parent_document = parent

    # Lifecycle

    @property
    def parent_document(self) -> Any:
        return self._store.parent_document

    @property
    def discriminator(self) -> Any:
        """Return the ``_type`` value this instance was loaded with, if any."""
        return self._store.discriminator

    @property
    def is_new(self) -> bool:
        return self._store.is_new

    @property
    def is_destroyed(self) -> bool:
        return self._store.is_destroyed

    @property
    def is_persisted(self) -> bool:
        return self._store.is_persisted

    def mark_persisted(self) -> None:
        """Record a successful save by the persistence collaborator."""
        self._store.is_new = False

    def mark_destroyed(self) -> None:
        self._store.is_destroyed = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappedObject) or type(other) is not type(self):
            return NotImplemented
        if self.id is None:
            return other is self
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self.attributes.items())
        return f"<{type(self).__name__} {fields}>"


class Document(MappedObject, abstract=True):
    """Root class for top-level stored documents."""


class EmbeddedDocument(MappedObject, abstract=True):
    """Root class for documents stored inline inside another document."""

    @classmethod
    def embeddable(cls) -> bool:
        return True
