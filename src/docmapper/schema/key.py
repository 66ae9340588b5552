"""Key descriptors: one named, typed field of a mapped class."""

from __future__ import annotations

import copy
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docmapper.coercion import CoercionEngine, default_engine, is_identifier_type
from docmapper.errors import MapperError, MapperErrorCode
from docmapper.schema.validations import length_policy


def canonical_key_name(name: object) -> str:
    """Canonicalize a key name for registry lookups.

    Args:
        name: String, enum member or other name-like value.

    Returns:
        Trimmed string form.
    """
    if isinstance(name, Enum):
        name = name.value
    return str(name).strip()


class KeyOptions(BaseModel):
    """Declared key options. Unrecognized options are kept as extras."""

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    required: bool = False
    unique: bool = False
    numeric: bool = False
    format: re.Pattern[str] | None = None
    in_: Any = Field(default=None, alias="in")
    not_in: Any = None
    length: Any = None
    index: bool = False
    default: Any = None
    typecast: Any = None


class Key(BaseModel):
    """Immutable description of one declared field."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    type: Any = None
    options: KeyOptions = KeyOptions()

    @classmethod
    def build(cls, name: object, type_: Any = None, **options: Any) -> Key:
        """Build a key, failing loudly on misconfigured options.

        Args:
            name: Key name; canonicalized.
            type_: Declared type, or None for untyped.
            **options: Key options (``in`` may be spelled ``in_``).

        Returns:
            New key descriptor.

        Raises:
            MapperError: If the name is empty or an option is malformed.
        """
        canonical = canonical_key_name(name)
        if not canonical:
            raise MapperError(
                MapperErrorCode.INVALID_KEY_NAME,
                "Error: key name must be non-empty.",
                data={"key": str(name)},
            )
        try:
            key_options = KeyOptions.model_validate(options)
        except ValidationError as exc:
            raise MapperError(
                MapperErrorCode.INVALID_KEY_OPTION,
                f"Error: invalid options for key '{canonical}'.",
                data={"key": canonical, "validation_errors": exc.errors()},
            ) from exc
        if key_options.length is not None:
            length_policy(key_options.length, key=canonical)
        return cls(name=canonical, type=type_, options=key_options)

    def embeddable(self) -> bool:
        """Return whether the declared type embeds inline documents."""
        embeddable = getattr(self.type, "embeddable", None)
        return callable(embeddable) and bool(embeddable())

    def number(self) -> bool:
        return self.type in (int, float)

    def can_default_id(self) -> bool:
        """Return whether a fresh identifier can be generated for this key."""
        return is_identifier_type(self.type)

    def default_value(self) -> Any:
        """Return a fresh default value; callables are invoked, others deep-copied."""
        default = self.options.default
        if callable(default):
            return default()
        return copy.deepcopy(default)

    def get(self, value: Any, *, engine: CoercionEngine | None = None) -> Any:
        """Re-derive the typed value from what is stored.

        Args:
            value: Stored value.
            engine: Coercion engine; defaults to the process engine.

        Returns:
            Typed value, or the default when nothing is stored.
        """
        if value is None and self.options.default is not None:
            return self.default_value()
        return (engine or default_engine()).to_typed(value, self.type)

    def set(self, value: Any, *, engine: CoercionEngine | None = None) -> Any:
        """Coerce an assigned value to the declared type."""
        engine = engine or default_engine()
        typed = engine.to_typed(value, self.type)
        typecast = self.options.typecast
        if typecast is not None and isinstance(typed, (list, set)):
            items = [engine.to_typed(item, typecast) for item in typed]
            return set(items) if isinstance(typed, set) else items
        return typed

    def to_document(self, value: Any, *, engine: CoercionEngine | None = None) -> Any:
        """Convert a typed value to document form."""
        engine = engine or default_engine()
        typecast = self.options.typecast
        if typecast is not None and isinstance(value, (list, set)):
            return [engine.to_document(item, typecast) for item in value]
        return engine.to_document(value, self.type)


class KeyDeclaration:
    """Class-body placeholder turned into a declared key at class creation."""

    def __init__(self, type_: Any = None, **options: Any) -> None:
        self.type = type_
        self.options = options
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"KeyDeclaration(name={self.name!r}, type={self.type!r})"


def key(type_: Any = None, **options: Any) -> Any:
    """Declare a key in a mapped class body.

    Example::

        class Person(Document):
            name = key(str, required=True)
    """
    return KeyDeclaration(type_, **options)
