"""Pytest configuration and shared fixtures for vscreen tests."""

import logging

import pytest

from vscreen.core.config import ENV_OVERRIDES, VscreenConfig
from vscreen.core.layout import LayoutEngine
from vscreen.core.modes import ModeRegistry
from vscreen.core.pool import OutputPool

from tests.fixtures.fake_backend import FakeDisplayBackend


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the user's config file and VSCREEN_* variables out of tests."""
    monkeypatch.setenv("VSCREEN_CONFIG", str(tmp_path / "config.json"))
    for var in ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
    yield
    # setup_logging() attaches a handler bound to the test's stderr
    logging.getLogger("vscreen").handlers.clear()


@pytest.fixture
def config() -> VscreenConfig:
    """Default configuration with the pool sized from the backend."""
    return VscreenConfig()


@pytest.fixture
def backend() -> FakeDisplayBackend:
    """Four idle virtual outputs and no physical display."""
    return FakeDisplayBackend(virtual_outputs=4)


@pytest.fixture
def laptop_backend() -> FakeDisplayBackend:
    """Four idle virtual outputs next to an active 1920x1080 eDP-1 panel."""
    fake = FakeDisplayBackend(virtual_outputs=4)
    fake.add_physical("eDP-1", "1920x1080+0+0")
    return fake


@pytest.fixture
def pool(backend, config) -> OutputPool:
    return OutputPool(backend, config)


@pytest.fixture
def registry(backend, config) -> ModeRegistry:
    return ModeRegistry(backend, config)


@pytest.fixture
def layout(pool, backend) -> LayoutEngine:
    return LayoutEngine(pool, backend)
