"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol

from .models import DeviceKey


class Namespace(str, Enum):
    """
    Logical namespaces of the key-value store.

    - DATA: opaque blob per email
    - AUTH: serialized Account per email
    - PENDING: serialized, not yet activated DeviceKey per activation token

    Engines may keep these as prefixes of one keyspace or as separate stores.
    """

    DATA = "data"
    AUTH = "auth"
    PENDING = "pending"


class KeyValueStore(Protocol):
    """
    Port interface for byte-oriented key-value persistence.

    Every operation is atomic for a single key only; there are no
    multi-key transactions. Implementations must be safe for concurrent
    use and raise StorageError on any I/O failure.
    """

    def get(self, namespace: Namespace, key: bytes) -> bytes | None:
        """
        Read the value stored under key.

        Returns:
            Stored bytes, or None if the key is absent
        """
        ...

    def put(self, namespace: Namespace, key: bytes, value: bytes) -> None:
        """Store value under key, overwriting any previous value."""
        ...

    def delete(self, namespace: Namespace, key: bytes) -> None:
        """Remove key. Deleting an absent key is not an error."""
        ...

    def compare_and_put(
        self, namespace: Namespace, key: bytes, expected: bytes | None, value: bytes
    ) -> bool:
        """
        Atomically replace the value under key if it still equals expected.

        Args:
            namespace: Store namespace
            key: Record key
            expected: Value read earlier, or None if the key must be absent
            value: New value to store

        Returns:
            True if the write happened, False if the current value differs
        """
        ...

    def ping(self) -> None:
        """Check the engine is reachable. Raises StorageError otherwise."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_activation_email(self, device_key: DeviceKey, activation_link: str) -> None:
        """
        Send the activation link for a device key to its email address.

        Args:
            device_key: The pending key (its email is the recipient)
            activation_link: Absolute URL that activates the key

        Raises:
            MailError: If delivery fails
        """
        ...
