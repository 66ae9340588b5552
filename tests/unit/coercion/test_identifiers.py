"""Unit tests for document identifier helpers."""

from __future__ import annotations

from uuid import UUID

import pytest

from docmapper.coercion import (
    IDENTIFIER_TYPE,
    generate_id,
    is_identifier_type,
    to_identifier,
)


@pytest.mark.unit
def test_generate_id_returns_distinct_identifiers() -> None:
    """Every generated identifier should be fresh."""
    first, second = generate_id(), generate_id()

    assert isinstance(first, IDENTIFIER_TYPE)
    assert first != second


@pytest.mark.unit
def test_to_identifier_accepts_canonical_representations() -> None:
    """Identifiers, their strings and 16-byte forms should all convert."""
    identifier = generate_id()

    assert to_identifier(identifier) is identifier
    assert to_identifier(f"  {identifier}  ") == identifier
    assert to_identifier(identifier.bytes) == identifier


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "   ", "not-an-id", b"short", 12])
def test_to_identifier_maps_blank_and_malformed_to_none(value: object) -> None:
    """Blank or unparseable values should become None."""
    assert to_identifier(value) is None


@pytest.mark.unit
def test_is_identifier_type_only_matches_identifier_type() -> None:
    assert is_identifier_type(UUID) is True
    assert is_identifier_type(str) is False
    assert is_identifier_type(None) is False
