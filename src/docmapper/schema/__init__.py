"""Schema declaration: keys, per-class registries, accessors and validations."""

from docmapper.schema.accessors import (
    RAW_SUFFIX,
    AccessorSynthesizer,
    AccessorTable,
    KeyAccessors,
    KeyAttribute,
    RawKeyAttribute,
    is_accessor_safe,
    is_present,
)
from docmapper.schema.key import (
    Key,
    KeyDeclaration,
    KeyOptions,
    canonical_key_name,
    key,
)
from docmapper.schema.registry import SchemaRegistry
from docmapper.schema.type_registry import (
    TYPE_REGISTRY,
    TypeEntry,
    TypeRegistry,
    type_name,
)
from docmapper.schema.validations import (
    RuleKind,
    RuleSet,
    ValidationBinder,
    ValidationCollaborator,
    ValidationRule,
    length_policy,
)

__all__ = [
    "RAW_SUFFIX",
    "TYPE_REGISTRY",
    "AccessorSynthesizer",
    "AccessorTable",
    "Key",
    "KeyAccessors",
    "KeyAttribute",
    "KeyDeclaration",
    "KeyOptions",
    "RawKeyAttribute",
    "RuleKind",
    "RuleSet",
    "SchemaRegistry",
    "TypeEntry",
    "TypeRegistry",
    "ValidationBinder",
    "ValidationCollaborator",
    "ValidationRule",
    "canonical_key_name",
    "is_accessor_safe",
    "is_present",
    "key",
    "length_policy",
    "type_name",
]
