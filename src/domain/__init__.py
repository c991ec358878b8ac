"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account, device key and data blob logic of the
sync service. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .accounts import AccountRepository
from .activation import ActivationService, TokenIssuer
from .authentication import AuthenticationGate, parse_auth_header
from .data import DataService
from .exceptions import (
    AuthenticationFailed,
    ConcurrentUpdateError,
    DataNotFound,
    MailError,
    MalformedAuthHeader,
    NotFoundError,
    PadlockError,
    StorageError,
    TokenNotValid,
    ValidationError,
)
from .models import Account, DeviceKey, generate_uuid
from .ports import EmailSender, KeyValueStore, Namespace

__all__ = [
    "Account",
    "AccountRepository",
    "ActivationService",
    "AuthenticationFailed",
    "AuthenticationGate",
    "ConcurrentUpdateError",
    "DataNotFound",
    "DataService",
    "DeviceKey",
    "EmailSender",
    "KeyValueStore",
    "MailError",
    "MalformedAuthHeader",
    "Namespace",
    "NotFoundError",
    "PadlockError",
    "StorageError",
    "TokenIssuer",
    "TokenNotValid",
    "ValidationError",
    "generate_uuid",
    "parse_auth_header",
]
