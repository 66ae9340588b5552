"""Per-class schema: ordered key descriptors, embedded associations, index requests."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from docmapper.coercion import is_identifier_type
from docmapper.schema.key import Key, canonical_key_name

if TYPE_CHECKING:
    from docmapper.document.associations import EmbeddedAssociation


class SchemaRegistry:
    """Ordered name -> Key mapping for one mapped class.

    Lookups canonicalize names, so string and enum spellings resolve to the
    same descriptor. Insertion order is serialization order.
    """

    def __init__(
        self,
        keys: Iterable[Key] = (),
        associations: Iterable[EmbeddedAssociation] = (),
        indexes: Iterable[str] = (),
    ) -> None:
        """Create schema, optionally seeded from another schema's contents."""
        self._keys: dict[str, Key] = {item.name: item for item in keys}
        self._associations: dict[str, EmbeddedAssociation] = {
            association.name: association for association in associations
        }
        self._indexes: list[str] = list(dict.fromkeys(indexes))

    def declare_key(self, name: object, type_: Any = None, **options: Any) -> Key:
        """Build and store a key; an existing key of that name is replaced in place.

        Args:
            name: Key name.
            type_: Declared type, or None for untyped.
            **options: Key options.

        Returns:
            Stored key descriptor.
        """
        return self.store(Key.build(name, type_, **options))

    def store(self, key: Key) -> Key:
        self._keys[key.name] = key
        return key

    def lookup(self, name: object) -> Key | None:
        return self._keys.get(canonical_key_name(name))

    def has_key(self, name: object) -> bool:
        return canonical_key_name(name) in self._keys

    def all_keys(self) -> list[Key]:
        return list(self._keys.values())

    def key_names(self) -> list[str]:
        return list(self._keys)

    def embedded_keys(self) -> list[Key]:
        return [item for item in self._keys.values() if item.embeddable()]

    def non_embedded_keys(self) -> list[Key]:
        return [item for item in self._keys.values() if not item.embeddable()]

    def object_id_keys(self) -> list[str]:
        """Return names of keys typed as the identifier type."""
        return [name for name, item in self._keys.items() if is_identifier_type(item.type)]

    def declare_association(self, association: EmbeddedAssociation) -> None:
        self._associations[association.name] = association

    def lookup_association(self, name: object) -> EmbeddedAssociation | None:
        return self._associations.get(canonical_key_name(name))

    def associations(self) -> list[EmbeddedAssociation]:
        return list(self._associations.values())

    def request_index(self, name: str) -> None:
        """Record that ``name`` should be indexed by the persistence layer."""
        if name not in self._indexes:
            self._indexes.append(name)

    def index_requests(self) -> list[str]:
        return list(self._indexes)

    def copy(self) -> SchemaRegistry:
        """Return an independent copy sharing the immutable descriptors."""
        return SchemaRegistry(
            self._keys.values(), self._associations.values(), self._indexes
        )

    def __contains__(self, name: object) -> bool:
        return self.has_key(name)

    def __iter__(self) -> Iterator[Key]:
        return iter(self.all_keys())

    def __len__(self) -> int:
        return len(self._keys)
