"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator

import pytest

from docmapper.config import MapperConfig, configure


@pytest.fixture(autouse=True)
def default_mapper_config() -> Iterator[MapperConfig]:
    """Install default mapper config for each test and restore the previous one."""
    config = MapperConfig()
    previous = configure(config)
    yield config
    configure(previous)
