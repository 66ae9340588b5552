"""Two-way coercion between document values and declared key types."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Final
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError
from pydantic_core import PydanticSerializationError

from docmapper.coercion.identifiers import to_identifier
from docmapper.config import CoercionSettings, current_config
from docmapper.errors import MapperError

_LOGGER = logging.getLogger(__name__)

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "t", "1", "yes", "y", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset(
    {"false", "f", "0", "no", "n", "off"}
)

# Malformed input raises one of these inside a coercer; the engine maps them
# to the coercer's empty value.
_COERCION_ERRORS: Final[tuple[type[Exception], ...]] = (
    TypeError,
    ValueError,
    ArithmeticError,
    ValidationError,
    PydanticSerializationError,
    MapperError,
)


def _none() -> None:
    return None


@dataclass(frozen=True)
class Coercer:
    """Pair of conversions for one declared type."""

    to_typed: Callable[[Any], Any]
    to_document: Callable[[Any], Any]
    empty: Callable[[], Any] = _none


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _identity(value: Any) -> Any:
    return value


def _string_to_typed(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _integer_to_typed(value: Any) -> int | None:
    if _is_blank(value):
        return None
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (float, Decimal)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return int(float(text))
    return None


def _float_to_typed(value: Any) -> float | None:
    if _is_blank(value):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    return None


def _boolean_to_typed(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if _is_blank(value):
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return None
    if isinstance(value, (int, float, Decimal)):
        if value == 1:
            return True
        if value == 0:
            return False
    return None


def _decimal_to_typed(value: Any) -> Decimal | None:
    if _is_blank(value):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        return Decimal(value.strip())
    return None


def _decimal_to_document(value: Any) -> str | None:
    typed = _decimal_to_typed(value)
    return None if typed is None else str(typed)


def _datetime_to_typed(value: Any) -> datetime | None:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        moment = datetime.fromisoformat(value.strip())
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        moment = datetime.fromtimestamp(value, tz=UTC)
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    else:
        moment = moment.astimezone(UTC)
    # Document stores keep millisecond precision.
    return moment.replace(microsecond=(moment.microsecond // 1000) * 1000)


def _date_to_typed(value: Any) -> date | None:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text).date()
    return None


def _date_to_document(value: Any) -> datetime | None:
    typed = _date_to_typed(value)
    if typed is None:
        return None
    return datetime(typed.year, typed.month, typed.day, tzinfo=UTC)


def _list_to_typed(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def _list_to_document(value: Any) -> list[Any]:
    return list(_list_to_typed(value))


def _dict_to_typed(value: Any) -> dict[Any, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _dict_to_document(value: Any) -> dict[str, Any]:
    return {str(name): item for name, item in _dict_to_typed(value).items()}


def _set_to_typed(value: Any) -> set[Any]:
    if value is None:
        return set()
    if isinstance(value, set):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        return {value}
    if isinstance(value, Iterable):
        return set(value)
    return {value}


def _set_to_document(value: Any) -> list[Any]:
    return list(_set_to_typed(value))


def _binary_to_typed(value: Any) -> bytes | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return None


UNTYPED: Final[Coercer] = Coercer(to_typed=_identity, to_document=_identity)

_BUILTIN_COERCERS: Final[dict[Any, Coercer]] = {
    str: Coercer(_string_to_typed, _string_to_typed),
    int: Coercer(_integer_to_typed, _integer_to_typed),
    float: Coercer(_float_to_typed, _float_to_typed),
    bool: Coercer(_boolean_to_typed, _boolean_to_typed),
    Decimal: Coercer(_decimal_to_typed, _decimal_to_document),
    datetime: Coercer(_datetime_to_typed, _datetime_to_typed),
    date: Coercer(_date_to_typed, _date_to_document),
    list: Coercer(_list_to_typed, _list_to_document, empty=list),
    dict: Coercer(_dict_to_typed, _dict_to_document, empty=dict),
    set: Coercer(_set_to_typed, _set_to_document, empty=set),
    bytes: Coercer(_binary_to_typed, _binary_to_typed),
    UUID: Coercer(to_identifier, to_identifier),
}


def _enum_coercer(enum_type: type[Enum]) -> Coercer:
    def to_typed(value: Any) -> Enum | None:
        if _is_blank(value):
            return None
        if isinstance(value, enum_type):
            return value
        try:
            return enum_type(value)
        except ValueError:
            if isinstance(value, str) and value in enum_type.__members__:
                return enum_type[value]
            return None

    def to_document(value: Any) -> Any:
        typed = to_typed(value)
        return None if typed is None else typed.value

    return Coercer(to_typed, to_document)


def _protocol_coercer(custom_type: Any) -> Coercer:
    """Coercer for types exposing ``from_document``/``to_document`` classmethods."""

    def to_typed(value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, custom_type):
            return value
        return custom_type.from_document(value)

    def to_document(value: Any) -> Any:
        if value is None:
            return None
        return custom_type.to_document(value)

    return Coercer(to_typed, to_document)


def _instance_coercer(declared: type) -> Coercer:
    def to_typed(value: Any) -> Any:
        return value if isinstance(value, declared) else None

    return Coercer(to_typed, _identity)


def _adapter_coercer(annotation: Any) -> Coercer:
    """Coercer backed by a pydantic TypeAdapter for arbitrary annotations."""
    try:
        adapter = TypeAdapter(annotation)
    except PydanticSchemaGenerationError:
        if isinstance(annotation, type):
            return _instance_coercer(annotation)
        return UNTYPED

    def to_typed(value: Any) -> Any:
        if value is None:
            return None
        return adapter.validate_python(value)

    def to_document(value: Any) -> Any:
        if value is None:
            return None
        return adapter.dump_python(value)

    return Coercer(to_typed, to_document)


def _is_protocol_type(candidate: Any) -> bool:
    return callable(getattr(candidate, "from_document", None)) and callable(
        getattr(candidate, "to_document", None)
    )


class CoercionEngine:
    """Total, idempotent conversions between raw values and declared types."""

    def __init__(self, *, settings: CoercionSettings | None = None) -> None:
        """Create engine seeded with built-in coercers.

        Args:
            settings: Optional fixed settings; defaults to the process config.
        """
        self._settings = settings
        self._lock = threading.Lock()
        self._coercers: dict[Any, Coercer] = dict(_BUILTIN_COERCERS)

    def register(self, type_: Any, coercer: Coercer) -> None:
        """Register or replace the coercer for ``type_``."""
        with self._lock:
            self._coercers[type_] = coercer

    def coercer_for(self, type_: Any) -> Coercer:
        """Resolve the coercer for a declared type.

        Resolution order: untyped, exact registration, enum, custom document
        protocol, registered base class, pydantic TypeAdapter.

        Args:
            type_: Declared key type or annotation.

        Returns:
            Coercer for the type.
        """
        if type_ is None or type_ is object or type_ is Any:
            return UNTYPED
        try:
            registered = self._coercers.get(type_)
        except TypeError:
            return _adapter_coercer(type_)
        if registered is not None:
            return registered
        coercer = self._derive(type_)
        with self._lock:
            self._coercers.setdefault(type_, coercer)
        return coercer

    def _derive(self, type_: Any) -> Coercer:
        if isinstance(type_, type):
            if issubclass(type_, Enum):
                return _enum_coercer(type_)
            if _is_protocol_type(type_):
                return _protocol_coercer(type_)
            for base in type_.__mro__[1:]:
                if base is not object and base in _BUILTIN_COERCERS:
                    return _BUILTIN_COERCERS[base]
        return _adapter_coercer(type_)

    def to_typed(self, value: Any, type_: Any) -> Any:
        """Convert a raw value to the declared type, never raising.

        Args:
            value: Raw input value.
            type_: Declared key type.

        Returns:
            Typed value, or the type's empty value for malformed input.
        """
        coercer = self.coercer_for(type_)
        try:
            typed = coercer.to_typed(value)
        except _COERCION_ERRORS as exc:
            self._log_lossy(value, type_, exc)
            return coercer.empty()
        if typed is None and not _is_blank(value):
            self._log_lossy(value, type_, None)
        return typed

    def to_document(self, value: Any, type_: Any) -> Any:
        """Convert a typed value to document form, never raising.

        Args:
            value: Typed (or raw) value.
            type_: Declared key type.

        Returns:
            Document-form value.
        """
        coercer = self.coercer_for(type_)
        try:
            return coercer.to_document(value)
        except _COERCION_ERRORS as exc:
            self._log_lossy(value, type_, exc)
            return coercer.empty()

    def to_identifier(self, value: Any) -> UUID | None:
        """Convert any identifier representation to canonical form."""
        return to_identifier(value)

    def _log_lossy(self, value: Any, type_: Any, exc: Exception | None) -> None:
        settings = self._settings or current_config().coercion
        if not settings.log_lossy:
            return
        _LOGGER.debug(
            "Lossy coercion of %r to %s%s",
            value,
            getattr(type_, "__name__", type_),
            f": {exc}" if exc is not None else "",
        )


_DEFAULT_ENGINE = CoercionEngine()


def default_engine() -> CoercionEngine:
    """Return the process-wide coercion engine."""
    return _DEFAULT_ENGINE
