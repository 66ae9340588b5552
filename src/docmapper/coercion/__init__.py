"""Type coercion between document values and declared key types."""

from docmapper.coercion.engine import (
    UNTYPED,
    CoercionEngine,
    Coercer,
    default_engine,
)
from docmapper.coercion.identifiers import (
    IDENTIFIER_KEY,
    IDENTIFIER_TYPE,
    generate_id,
    is_identifier_type,
    to_identifier,
)

__all__ = [
    "IDENTIFIER_KEY",
    "IDENTIFIER_TYPE",
    "UNTYPED",
    "CoercionEngine",
    "Coercer",
    "default_engine",
    "generate_id",
    "is_identifier_type",
    "to_identifier",
]
