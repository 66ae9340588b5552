"""Per-instance attribute storage and lifecycle flags."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any


@dataclass
class AttributeStore:
    """Typed values, raw (pre-coercion) values and lifecycle of one instance.

    The parent document is a weak back-reference: it never keeps the parent
    alive and is only used for lookups.
    """

    values: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)
    associations: dict[str, Any] = field(default_factory=dict)
    is_new: bool = True
    is_destroyed: bool = False
    discriminator: Any = None
    _parent_ref: weakref.ReferenceType[Any] | None = field(
        default=None, init=False, repr=False
    )

    @property
    def parent_document(self) -> Any:
        """Return the parent document, or None when unset or collected."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent_document.setter
    def parent_document(self, parent: Any) -> None:
        self._parent_ref = None if parent is None else weakref.ref(parent)

    @property
    def is_persisted(self) -> bool:
        return not self.is_new and not self.is_destroyed

    def write(self, name: str, raw: Any, typed: Any) -> None:
        """Record an assignment: raw input and its coerced form."""
        self.raw[name] = raw
        self.values[name] = typed
