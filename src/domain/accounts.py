"""
Account repository - Accounts persisted in the AUTH namespace.

The store only guarantees single-key atomicity, so merging a new device
key into an account uses optimistic concurrency: read the raw record,
merge, bump the version, and write back with compare_and_put against the
exact bytes that were read. A conflicting writer makes the write fail and
the merge is retried on a fresh read.
"""

import logging
from dataclasses import dataclass

from .exceptions import ConcurrentUpdateError, StorageError
from .models import Account, DeviceKey
from .ports import KeyValueStore, Namespace

logger = logging.getLogger(__name__)


@dataclass
class AccountRepository:
    """Loads, saves and merges accounts keyed by email."""

    store: KeyValueStore
    max_attempts: int = 16

    def load(self, email: str) -> Account | None:
        """
        Fetch the account for email.

        Returns:
            The Account, or None if no account exists

        Raises:
            StorageError: On read failure or an undecodable record
        """
        raw = self.store.get(Namespace.AUTH, email.encode())
        if raw is None:
            return None
        return self._decode(email, raw)

    def save(self, account: Account) -> Account:
        """
        Write the account if nobody changed it since it was loaded.

        The stored version must still equal account.version (no record at
        all for a new account at version 0). On success the version is
        bumped and the written account returned.

        Raises:
            ConcurrentUpdateError: If the stored record moved on
            StorageError: On read/write failure
        """
        record_key = account.email.encode()
        raw = self.store.get(Namespace.AUTH, record_key)
        stored_version = 0 if raw is None else self._decode(account.email, raw).version
        if stored_version != account.version:
            raise ConcurrentUpdateError(
                f"account {account.email} is at version {stored_version}, "
                f"not {account.version}"
            )

        account.version += 1
        if not self.store.compare_and_put(Namespace.AUTH, record_key, raw, account.to_json()):
            account.version -= 1
            raise ConcurrentUpdateError(f"account {account.email} changed during save")
        return account

    def merge_key(self, device_key: DeviceKey) -> Account:
        """
        Add device_key to its account, creating the account if needed.

        Any key already registered for the same device name is replaced.
        Merging the same DeviceKey twice leaves the keys unchanged.

        Raises:
            ConcurrentUpdateError: If every attempt lost a write race
            StorageError: On read/write failure
        """
        record_key = device_key.email.encode()

        for attempt in range(1, self.max_attempts + 1):
            raw = self.store.get(Namespace.AUTH, record_key)
            if raw is None:
                account = Account(email=device_key.email)
            else:
                account = self._decode(device_key.email, raw)

            account.set_key(device_key)
            account.version += 1

            if self.store.compare_and_put(Namespace.AUTH, record_key, raw, account.to_json()):
                return account

            logger.info(
                "Account %s changed during merge, retrying (attempt %d/%d)",
                device_key.email,
                attempt,
                self.max_attempts,
            )

        raise ConcurrentUpdateError(
            f"account {device_key.email} kept changing after {self.max_attempts} attempts"
        )

    def _decode(self, email: str, raw: bytes) -> Account:
        try:
            return Account.from_json(raw)
        except ValueError as e:
            logger.error("Corrupt account record for %s: %s", email, e)
            raise StorageError(f"corrupt account record for {email}") from e
