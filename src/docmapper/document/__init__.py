"""Mapped documents, attribute storage and document serialization."""

from docmapper.document.associations import (
    EmbeddedAssociation,
    embeds_many,
    embeds_one,
)
from docmapper.document.base import Document, EmbeddedDocument, MappedObject
from docmapper.document.serializer import (
    deserialize,
    from_document,
    resolve_type,
    serialize,
    to_document,
)
from docmapper.document.store import AttributeStore

__all__ = [
    "AttributeStore",
    "Document",
    "EmbeddedAssociation",
    "EmbeddedDocument",
    "MappedObject",
    "deserialize",
    "embeds_many",
    "embeds_one",
    "from_document",
    "resolve_type",
    "serialize",
    "to_document",
]
