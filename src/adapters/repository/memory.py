"""
In-memory key-value store adapter - Implements KeyValueStore protocol.

Keeps all namespaces in one dict guarded by a lock. Used for development
and tests; data is lost when the process exits.
"""

import threading

from src.domain.ports import Namespace


class InMemoryKeyValueStore:
    """
    Implements KeyValueStore protocol with a lock-protected dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._data: dict[tuple[Namespace, bytes], bytes] = {}
        self._lock = threading.Lock()

    def get(self, namespace: Namespace, key: bytes) -> bytes | None:
        with self._lock:
            return self._data.get((namespace, bytes(key)))

    def put(self, namespace: Namespace, key: bytes, value: bytes) -> None:
        with self._lock:
            self._data[(namespace, bytes(key))] = bytes(value)

    def delete(self, namespace: Namespace, key: bytes) -> None:
        with self._lock:
            self._data.pop((namespace, bytes(key)), None)

    def compare_and_put(
        self, namespace: Namespace, key: bytes, expected: bytes | None, value: bytes
    ) -> bool:
        with self._lock:
            if self._data.get((namespace, bytes(key))) != expected:
                return False
            self._data[(namespace, bytes(key))] = bytes(value)
            return True

    def ping(self) -> None:
        return None

    def keys(self, namespace: Namespace) -> list[bytes]:
        """List keys of a namespace (inspection helper for tests and tooling)."""
        with self._lock:
            return [k for ns, k in self._data if ns == namespace]
