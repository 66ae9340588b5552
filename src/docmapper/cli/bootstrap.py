"""CLI bootstrap helpers: logging, target import and document input."""

from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml
from rich.logging import RichHandler

from docmapper.document import MappedObject
from docmapper.errors import MapperError, MapperErrorCode

_LOGGING_CONFIGURED = False


def configure_logging(*, verbose: bool = False) -> None:
    """Configure Rich-backed logging once for CLI commands."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def import_target(target: str) -> type[MappedObject]:
    """Import a mapped class from ``package.module:ClassName``.

    Args:
        target: Import path of the class.

    Returns:
        The mapped class.

    Raises:
        MapperError: If the target cannot be imported or is not mapped.
    """
    module_name, _, attribute_path = target.partition(":")
    if not module_name or not attribute_path:
        raise MapperError(
            MapperErrorCode.UNKNOWN_TYPE,
            f"Error: target '{target}' must look like 'package.module:ClassName'.",
            data={"target": target},
        )
    try:
        resolved: Any = importlib.import_module(module_name)
        for part in attribute_path.split("."):
            resolved = getattr(resolved, part)
    except (ImportError, AttributeError) as exc:
        raise MapperError(
            MapperErrorCode.UNKNOWN_TYPE,
            f"Error: cannot import '{target}': {exc}",
            data={"target": target},
        ) from exc
    if not isinstance(resolved, type) or not issubclass(resolved, MappedObject):
        raise MapperError(
            MapperErrorCode.UNKNOWN_TYPE,
            f"Error: '{target}' is not a mapped document class.",
            data={"target": target},
        )
    return resolved


def read_document(path: Path) -> dict[str, Any]:
    """Read one document from a JSON or YAML file.

    Args:
        path: Document file path.

    Returns:
        Parsed document mapping.

    Raises:
        MapperError: If the file cannot be decoded or is not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MapperError(
            MapperErrorCode.INVALID_DOCUMENT,
            f"Error: cannot read document '{path}': {exc}",
            data={"path": str(path)},
        ) from exc
    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(raw)
        else:
            payload = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MapperError(
            MapperErrorCode.INVALID_DOCUMENT,
            f"Error: invalid document '{path}': {exc}",
            data={"path": str(path)},
        ) from exc
    if not isinstance(payload, dict):
        raise MapperError(
            MapperErrorCode.INVALID_DOCUMENT,
            f"Error: document '{path}' must be an object.",
            data={"path": str(path)},
        )
    return payload
