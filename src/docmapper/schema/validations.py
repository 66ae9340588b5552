"""Validation-rule registration derived from key options.

Rules are only registered here. Executing them belongs to the validation
collaborator the host application plugs in.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from docmapper.errors import MapperError, MapperErrorCode

if TYPE_CHECKING:
    from docmapper.schema.key import Key


class RuleKind(StrEnum):
    """Supported validation rule families."""

    PRESENCE = "presence"
    UNIQUENESS = "uniqueness"
    NUMERICALITY = "numericality"
    FORMAT = "format"
    INCLUSION = "inclusion"
    EXCLUSION = "exclusion"
    LENGTH = "length"


class ValidationRule(BaseModel):
    """One registered rule attached to a field."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: RuleKind
    field: str = Field(min_length=1)
    options: dict[str, Any] = Field(default_factory=dict)


class ValidationCollaborator(Protocol):
    """Registration surface of the external validation engine."""

    def register_presence(self, field: str) -> None:
        """Register a presence rule."""

    def register_uniqueness(self, field: str) -> None:
        """Register a uniqueness rule."""

    def register_numeric(self, field: str, integer_only: bool) -> None:
        """Register a numeric rule."""

    def register_format(self, field: str, pattern: Any) -> None:
        """Register a pattern-match rule."""

    def register_inclusion(self, field: str, within: Any) -> None:
        """Register a set-membership rule."""

    def register_exclusion(self, field: str, within: Any) -> None:
        """Register a set-exclusion rule."""

    def register_length(self, field: str, policy: Mapping[str, Any]) -> None:
        """Register a length rule."""


def length_policy(value: Any, *, key: str = "") -> dict[str, Any]:
    """Translate a ``length`` key option into a length-rule policy.

    Args:
        value: Option value: a bound, a range, or a mapping of rule options.
        key: Key name, for diagnostics.

    Returns:
        Length policy mapping.

    Raises:
        MapperError: If the option has none of the supported shapes.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return {"minimum": 0, "maximum": value}
    if isinstance(value, range):
        return {"within": value}
    if isinstance(value, Mapping):
        return dict(value)
    raise MapperError(
        MapperErrorCode.INVALID_KEY_OPTION,
        f"Error: unsupported length option for key '{key}'.",
        data={"key": key, "length": repr(value)},
    )


class RuleSet:
    """Recording collaborator keeping one rule per (kind, field)."""

    def __init__(self, rules: Iterable[ValidationRule] = ()) -> None:
        """Create rule set.

        Args:
            rules: Initial rules, e.g. copied from a parent class.
        """
        self._rules: dict[tuple[RuleKind, str], ValidationRule] = {}
        for rule in rules:
            self.add(rule)

    def add(self, rule: ValidationRule) -> None:
        """Add rule, replacing one of the same kind on the same field."""
        self._rules[(rule.kind, rule.field)] = rule

    def register_presence(self, field: str) -> None:
        self.add(ValidationRule(kind=RuleKind.PRESENCE, field=field))

    def register_uniqueness(self, field: str) -> None:
        self.add(ValidationRule(kind=RuleKind.UNIQUENESS, field=field))

    def register_numeric(self, field: str, integer_only: bool) -> None:
        options = {"only_integer": True} if integer_only else {}
        self.add(
            ValidationRule(kind=RuleKind.NUMERICALITY, field=field, options=options)
        )

    def register_format(self, field: str, pattern: Any) -> None:
        self.add(
            ValidationRule(kind=RuleKind.FORMAT, field=field, options={"with": pattern})
        )

    def register_inclusion(self, field: str, within: Any) -> None:
        self.add(
            ValidationRule(
                kind=RuleKind.INCLUSION, field=field, options={"within": within}
            )
        )

    def register_exclusion(self, field: str, within: Any) -> None:
        self.add(
            ValidationRule(
                kind=RuleKind.EXCLUSION, field=field, options={"within": within}
            )
        )

    def register_length(self, field: str, policy: Mapping[str, Any]) -> None:
        self.add(
            ValidationRule(kind=RuleKind.LENGTH, field=field, options=dict(policy))
        )

    def rules(self) -> list[ValidationRule]:
        """Return all rules in registration order."""
        return list(self._rules.values())

    def rules_for(self, field: str) -> list[ValidationRule]:
        """Return rules attached to one field."""
        return [rule for rule in self._rules.values() if rule.field == field]

    def copy(self) -> RuleSet:
        """Return an independent copy."""
        return RuleSet(self._rules.values())

    def __iter__(self) -> Iterator[ValidationRule]:
        return iter(self.rules())

    def __len__(self) -> int:
        return len(self._rules)


class ValidationBinder:
    """Derives rule registrations from one key's options."""

    def __init__(self, collaborator: ValidationCollaborator) -> None:
        """Create binder.

        Args:
            collaborator: Receiver of rule registrations.
        """
        self._collaborator = collaborator

    def bind(self, key: Key) -> None:
        """Register every rule the key's options ask for.

        Args:
            key: Declared key.

        Raises:
            MapperError: If the ``length`` option is malformed.
        """
        options = key.options
        field = key.name
        if options.required:
            self._collaborator.register_presence(field)
        if options.unique:
            self._collaborator.register_uniqueness(field)
        if options.numeric:
            self._collaborator.register_numeric(field, key.type is int)
        if options.format is not None:
            self._collaborator.register_format(field, options.format)
        if options.in_ is not None:
            self._collaborator.register_inclusion(field, options.in_)
        if options.not_in is not None:
            self._collaborator.register_exclusion(field, options.not_in)
        if options.length is not None:
            self._collaborator.register_length(
                field, length_policy(options.length, key=field)
            )
