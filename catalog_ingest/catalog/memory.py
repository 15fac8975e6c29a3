"""
In-memory catalog used for dry runs and tests.
"""

import itertools
import threading
from collections.abc import Iterable, Sequence

from catalog_ingest.core.errors import ReconciliationError
from catalog_ingest.core.models import ExistingItemRef, ItemUpdateRequest, ItemUpsertRequest

from .base import DEFAULT_MAX_BATCH_SIZE, check_batch_size


class InMemoryCatalog:
    """
    Dict-backed catalog keyed by federated id.

    Creating an id that already exists raises, mirroring the duplicate
    check of the real service. Failures can be injected per call kind
    with fail_on(), optionally only for calls touching given federated ids.
    """

    def __init__(self, max_batch_size: int = DEFAULT_MAX_BATCH_SIZE):
        self.max_batch_size = max_batch_size
        self.items: dict[str, ItemUpsertRequest] = {}
        self.internal_ids: dict[str, str] = {}
        self.calls: list[tuple[str, int]] = []
        self._failures: dict[str, tuple[str, set[str] | None]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def fail_on(self, operation: str, message: str, federated_ids: Iterable[str] | None = None) -> None:
        """
        Make the next matching calls of an operation raise.

        Args:
            operation: "lookup", "create" or "update"
            message: Error message to raise with
            federated_ids: Only fail calls touching one of these ids
        """
        self._failures[operation] = (message, set(federated_ids) if federated_ids is not None else None)

    def clear_failures(self) -> None:
        self._failures.clear()

    def _maybe_fail(self, operation: str, federated_ids: Iterable[str]) -> None:
        failure = self._failures.get(operation)
        if failure is None:
            return
        message, only_ids = failure
        if only_ids is None or only_ids.intersection(federated_ids):
            raise ReconciliationError(message, details={"operation": operation})

    def lookup_by_federated_ids(self, federated_ids: Iterable[str]) -> list[ExistingItemRef]:
        ids = list(federated_ids)
        with self._lock:
            self.calls.append(("lookup", len(ids)))
            self._maybe_fail("lookup", ids)
            return [
                ExistingItemRef(federated_id=fid, internal_id=self.internal_ids[fid])
                for fid in ids
                if fid in self.internal_ids
            ]

    def create_batch(self, items: Sequence[ItemUpsertRequest]) -> list[str]:
        check_batch_size(items, self.max_batch_size)
        with self._lock:
            self.calls.append(("create", len(items)))
            self._maybe_fail("create", [item.federated_id for item in items])
            duplicates = [item.federated_id for item in items if item.federated_id in self.items]
            if duplicates:
                raise ReconciliationError(
                    f"Items already exist: {', '.join(duplicates)}",
                    details={"duplicates": duplicates},
                )
            created = []
            for item in items:
                internal_id = f"item-{next(self._ids)}"
                self.items[item.federated_id] = item
                self.internal_ids[item.federated_id] = internal_id
                created.append(internal_id)
            return created

    def update_batch(self, items: Sequence[ItemUpdateRequest]) -> list[str]:
        check_batch_size(items, self.max_batch_size)
        with self._lock:
            self.calls.append(("update", len(items)))
            self._maybe_fail("update", [item.federated_id for item in items])
            for item in items:
                if self.internal_ids.get(item.federated_id) != item.internal_id:
                    raise ReconciliationError(f"Unknown item id: {item.internal_id}")
            for item in items:
                self.items[item.federated_id] = ItemUpsertRequest(
                    **item.model_dump(exclude={"internal_id"})
                )
            return [item.internal_id for item in items]
