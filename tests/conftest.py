"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory key-value store
- Domain services wired to that store
- A synchronous executor and mock email sender for activation emails
"""

from concurrent.futures import Executor, Future
from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryKeyValueStore
from src.domain.accounts import AccountRepository
from src.domain.activation import ActivationService, TokenIssuer
from src.domain.authentication import AuthenticationGate
from src.domain.data import DataService
from src.domain.models import DeviceKey


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread so tests can inspect it at once."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


def token_from_link(link: str) -> str:
    """Extract the activation token from an activation link."""
    return link.rsplit("/", 1)[1]


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def email_sender() -> Mock:
    return Mock()


@pytest.fixture
def accounts(store: InMemoryKeyValueStore) -> AccountRepository:
    return AccountRepository(store=store)


@pytest.fixture
def issuer(store: InMemoryKeyValueStore, email_sender: Mock) -> TokenIssuer:
    return TokenIssuer(store=store, email_sender=email_sender, executor=ImmediateExecutor())


@pytest.fixture
def activation(store: InMemoryKeyValueStore, accounts: AccountRepository) -> ActivationService:
    return ActivationService(store=store, accounts=accounts)


@pytest.fixture
def gate(accounts: AccountRepository) -> AuthenticationGate:
    return AuthenticationGate(accounts=accounts)


@pytest.fixture
def data_service(store: InMemoryKeyValueStore) -> DataService:
    return DataService(store=store)


@pytest.fixture
def request_token(issuer: TokenIssuer, email_sender: Mock):
    """Request a key and return (device_key, token) taken from the emailed link."""

    def _request(email: str, device_name: str) -> tuple[DeviceKey, str]:
        device_key = issuer.request_key(email, device_name, host="padlock.test")
        link = email_sender.send_activation_email.call_args[0][1]
        return device_key, token_from_link(link)

    return _request
