"""
Shared fixtures for adversarial tests.

Provides a full application wired to the in-memory store, with account
setup helpers for race condition and credential probing tests.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryKeyValueStore
from src.api.main import create_app
from src.config.settings import Settings
from src.domain.accounts import AccountRepository
from src.domain.models import DeviceKey

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create test client running the app lifespan (in-memory store)."""
    with TestClient(create_app(Settings(_env_file=None, store_backend="memory"))) as client:
        yield client


@pytest.fixture
def app_store(client: TestClient) -> InMemoryKeyValueStore:
    """The store the running app uses."""
    return client.app.state.store


@pytest.fixture
def create_account(app_store: InMemoryKeyValueStore):
    """Helper to create an active account with (device_name, key) pairs."""

    def _create(email: str, *keys: tuple[str, str]) -> None:
        repo = AccountRepository(store=app_store)
        for device_name, key in keys:
            repo.merge_key(DeviceKey(email, device_name, key))

    return _create
