"""Mapper configuration loading."""

from docmapper.config.mapper_config import (
    CoercionSettings,
    DiscriminatorMode,
    MapperConfig,
    MapperConfigError,
    SerializationSettings,
    configure,
    current_config,
    load_mapper_config,
)

__all__ = [
    "CoercionSettings",
    "DiscriminatorMode",
    "MapperConfig",
    "MapperConfigError",
    "SerializationSettings",
    "configure",
    "current_config",
    "load_mapper_config",
]
