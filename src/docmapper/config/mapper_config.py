"""Mapper config models and loading helpers."""

from __future__ import annotations

import json
import threading
from enum import StrEnum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class DiscriminatorMode(StrEnum):
    """When the serializer records the concrete type of an instance."""

    SUBCLASSES = "subclasses"
    ALWAYS = "always"
    NEVER = "never"


class SerializationSettings(BaseModel):
    """Document serialization configuration."""

    model_config = ConfigDict(extra="forbid")

    discriminator_field: str = Field(default="_type", min_length=1)
    discriminator_mode: DiscriminatorMode = DiscriminatorMode.SUBCLASSES


class CoercionSettings(BaseModel):
    """Type coercion configuration."""

    model_config = ConfigDict(extra="forbid")

    log_lossy: bool = True


class MapperConfig(BaseModel):
    """Root mapper configuration model."""

    model_config = ConfigDict(extra="forbid")

    serialization: SerializationSettings = SerializationSettings()
    coercion: CoercionSettings = CoercionSettings()


class MapperConfigError(RuntimeError):
    """Raised when mapper config cannot be decoded or validated."""


_CONFIG_LOCK = threading.Lock()
_CURRENT_CONFIG = MapperConfig()


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode mapper config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        MapperConfigError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MapperConfigError(f"Invalid mapper config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise MapperConfigError(f"Invalid mapper config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise MapperConfigError("Invalid mapper config payload: root must be an object")
    return payload


def load_mapper_config(path: Path) -> MapperConfig:
    """Load mapper config from disk, defaulting when missing.

    Args:
        path: Config file path.

    Returns:
        Parsed config payload, or defaults when file does not exist.

    Raises:
        MapperConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return MapperConfig()
    payload = _decode_config_payload(path)
    try:
        return MapperConfig.model_validate(payload)
    except ValidationError as exc:
        raise MapperConfigError(f"Invalid mapper config payload: {exc}") from exc


def configure(config: MapperConfig) -> MapperConfig:
    """Install process-wide mapper config.

    Args:
        config: Config to install.

    Returns:
        The previously installed config.
    """
    global _CURRENT_CONFIG  # noqa: PLW0603
    with _CONFIG_LOCK:
        previous = _CURRENT_CONFIG
        _CURRENT_CONFIG = config
    return previous


def current_config() -> MapperConfig:
    """Return the process-wide mapper config."""
    return _CURRENT_CONFIG
