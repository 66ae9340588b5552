"""Synthesized per-key accessor capabilities."""

from __future__ import annotations

import inspect
import keyword
import logging
import re
from collections.abc import Callable, Mapping, Sized
from dataclasses import dataclass
from typing import Any, Final

from docmapper.schema.key import Key, KeyDeclaration

_LOGGER = logging.getLogger(__name__)

_ACCESSOR_NAME: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
RAW_SUFFIX: Final[str] = "_before_typecast"


def is_accessor_safe(name: str) -> bool:
    """Return whether ``name`` can be bound as a Python attribute."""
    return bool(_ACCESSOR_NAME.fullmatch(name)) and not keyword.iskeyword(name)


def is_present(value: Any) -> bool:
    """Return whether a value counts as present (not None, blank or empty)."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Sized):
        return len(value) > 0
    return True


@dataclass(frozen=True)
class KeyAccessors:
    """The four capabilities bound to one key name."""

    name: str
    read: Callable[[Any], Any]
    read_raw: Callable[[Any], Any]
    write: Callable[[Any, Any], None]
    present: Callable[[Any], bool]


class AccessorTable:
    """Per-class capability table keyed by key name."""

    def __init__(self, accessors: Mapping[str, KeyAccessors] | None = None) -> None:
        self._accessors: dict[str, KeyAccessors] = dict(accessors or {})

    def install(self, accessors: KeyAccessors) -> None:
        """Install capabilities, replacing any bound to the same name."""
        self._accessors[accessors.name] = accessors

    def get(self, name: str) -> KeyAccessors | None:
        return self._accessors.get(name)

    def names(self) -> list[str]:
        return list(self._accessors)

    def copy(self) -> AccessorTable:
        return AccessorTable(self._accessors)

    def __contains__(self, name: object) -> bool:
        return name in self._accessors


class KeyAttribute:
    """Data descriptor resolving reads and writes through the accessor table."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.accessor_table().get(self.name).read(instance)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.accessor_table().get(self.name).write(instance, value)

    def __repr__(self) -> str:
        return f"KeyAttribute({self.name!r})"


class RawKeyAttribute:
    """Read-only descriptor returning the last pre-coercion value of a key."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.accessor_table().get(self.name).read_raw(instance)

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(f"{self.name}{RAW_SUFFIX} is read-only")


class AccessorSynthesizer:
    """Builds accessor capabilities for declared keys."""

    def synthesize(
        self, owner: type, table: AccessorTable, key: Key
    ) -> KeyAccessors | None:
        """Install read, read-raw, write and presence capabilities for ``key``.

        Keys whose names are not accessor safe are skipped and stay reachable
        through map-style access only.

        Args:
            owner: Mapped class owning the key.
            table: Owner's capability table.
            key: Declared key.

        Returns:
            Installed capabilities, or None when skipped.
        """
        name = key.name
        if not is_accessor_safe(name):
            _LOGGER.debug(
                "Key %r on %s has no accessors (map-style access only)",
                name,
                owner.__qualname__,
            )
            return None
        accessors = KeyAccessors(
            name=name,
            read=lambda instance: instance._read_key(name),
            read_raw=lambda instance: instance._read_key_before_typecast(name),
            write=lambda instance, value: instance._write_key(name, value),
            present=lambda instance: is_present(instance._read_key(name)),
        )
        table.install(accessors)
        _install_attribute(owner, name, KeyAttribute(name))
        _install_attribute(owner, f"{name}{RAW_SUFFIX}", RawKeyAttribute(name))
        return accessors


def _install_attribute(owner: type, attribute: str, descriptor: Any) -> None:
    # Never shadow methods or properties the class already defines.
    existing = inspect.getattr_static(owner, attribute, None)
    if isinstance(existing, (KeyAttribute, RawKeyAttribute)):
        return
    if isinstance(existing, KeyDeclaration):
        # A class-body key named like an inherited member keeps the member.
        inherited = _inherited_attribute(owner, attribute)
        if inherited is not None and not isinstance(
            inherited, (KeyAttribute, RawKeyAttribute)
        ):
            delattr(owner, attribute)
            _LOGGER.debug(
                "Key %r on %s shadows an inherited attribute; map-style access only",
                attribute,
                owner.__qualname__,
            )
            return
    elif existing is not None:
        _LOGGER.debug(
            "Attribute %r already defined on %s; accessor not installed",
            attribute,
            owner.__qualname__,
        )
        return
    setattr(owner, attribute, descriptor)


def _inherited_attribute(owner: type, attribute: str) -> Any:
    for base in owner.__mro__[1:]:
        if attribute in vars(base):
            return vars(base)[attribute]
    return None
