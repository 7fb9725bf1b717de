"""Root pytest configuration for all tests."""

from __future__ import annotations

import pytest

from blockforge.config import Config, reset_config
from blockforge.session import EditingSession, StaticBlockRegistry
from tests.utils import FakeStore

# asyncio_mode is also set in pyproject.toml
pytest_plugins = ("pytest_asyncio",)

BLOCK_DEFAULTS = {
    "heading": {"settings": {"text": "Add your heading here", "level": 2}},
    "paragraph": {"settings": {"text": "Add your paragraph text here."}},
    "container": {"settings": {"maxWidth": "1200px"}, "children": []},
    "row": {"settings": {"display": "flex", "flexDirection": "row"}, "children": []},
}


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Keep the cached global config from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def registry() -> StaticBlockRegistry:
    return StaticBlockRegistry(BLOCK_DEFAULTS)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def session(config: Config, registry: StaticBlockRegistry, store: FakeStore) -> EditingSession:
    return EditingSession(store=store, registry=registry, config=config)
