"""Canonical document identifier generation and conversion."""

from __future__ import annotations

from typing import Any, Final
from uuid import UUID, uuid4

IDENTIFIER_KEY: Final[str] = "_id"
IDENTIFIER_TYPE: Final[type[UUID]] = UUID


def generate_id() -> UUID:
    """Return a fresh unique document identifier."""
    return uuid4()


def is_identifier_type(type_: Any) -> bool:
    """Return whether ``type_`` is the distinguished identifier type."""
    return type_ is IDENTIFIER_TYPE


def to_identifier(value: Any) -> UUID | None:
    """Convert an arbitrary representation to canonical identifier form.

    Accepts identifiers, their string or 16-byte forms and blanks. Anything
    that does not parse becomes ``None``.

    Args:
        value: Candidate identifier representation.

    Returns:
        Canonical identifier, or ``None`` for blank or malformed input.
    """
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return UUID(text)
        except ValueError:
            return None
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return UUID(bytes=bytes(value))
    return None
