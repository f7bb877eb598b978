"""Shared fixtures."""

from __future__ import annotations

import pytest

from custom_components.carnet.api import CarNetAccountConfig


@pytest.fixture
def carnet_config() -> CarNetAccountConfig:
    """Account configuration of an Audi in Germany."""
    return CarNetAccountConfig(
        user="user@example.com",
        password="secret",
        brand="Audi",
        country="DE",
        vin="WAUZZZF21LN046449",
        spin="1234",
    )
