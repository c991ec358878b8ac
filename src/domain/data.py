"""
Data service - Opaque blob storage per account.

The blob is never inspected. Writes replace it in full (last write wins).
"""

from dataclasses import dataclass

from .exceptions import DataNotFound
from .models import Account
from .ports import KeyValueStore, Namespace


@dataclass
class DataService:
    """Reads and writes the data blob of an authenticated account."""

    store: KeyValueStore

    def get(self, account: Account) -> bytes:
        """
        Return the stored blob verbatim.

        Raises:
            DataNotFound: If nothing has been stored for the account
            StorageError: On read failure
        """
        data = self.store.get(Namespace.DATA, account.email.encode())
        if data is None:
            raise DataNotFound(account.email)
        return data

    def put(self, account: Account, data: bytes) -> bytes:
        """Overwrite the blob and return the stored bytes."""
        self.store.put(Namespace.DATA, account.email.encode(), data)
        return data
