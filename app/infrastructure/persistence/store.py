"""Key-value store interface and in-memory implementation.

The delivery core persists small JSON-like records (device registrations,
circuit breaker snapshots, enrichment budget) through this narrow
get/put/delete/scan interface so the backing store can be swapped.
"""

import copy
import threading
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple


class KeyValueStore(Protocol):
    """Narrow persistence interface.

    Items are plain dicts of JSON-compatible values. Implementations raise
    on backend failure; a missing key is not a failure.
    """

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def put(self, key: str, item: Dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def scan(self) -> Iterator[Tuple[str, Dict[str, Any]]]: ...


class InMemoryKeyValueStore:
    """Process-local KeyValueStore.

    Suitable for tests and single-instance deployments. Items are copied on
    the way in and out so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._items: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            item = self._items.get(key)
            return copy.deepcopy(item) if item is not None else None

    def put(self, key: str, item: Dict[str, Any]) -> None:
        with self._lock:
            self._items[key] = copy.deepcopy(item)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def scan(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            snapshot = copy.deepcopy(self._items)
        yield from snapshot.items()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
