"""
Lookup-then-create-or-update reconciliation of one chunk.
"""

import time
from collections.abc import Sequence
from concurrent.futures import Executor

from catalog_ingest.catalog.base import CatalogClient, check_batch_size
from catalog_ingest.core.errors import PreconditionError
from catalog_ingest.core.models import (
    BatchError,
    ChunkResult,
    ExistingItemRef,
    ItemUpdateRequest,
    ItemUpsertRequest,
)
from catalog_ingest.observability.logger import get_logger

logger = get_logger(__name__)


class ChunkReconciler:
    """
    Upserts one chunk against the catalog.

    The chunk is looked up once by federated id, then split into items to
    create and items to update. Both calls may run concurrently. Re-running
    a chunk after a partial success is safe: items that now exist are
    routed to update.
    """

    def __init__(self, catalog: CatalogClient, max_batch_size: int | None = None):
        self.catalog = catalog
        self.max_batch_size = max_batch_size or catalog.max_batch_size

    def partition(
        self,
        chunk: Sequence[ItemUpsertRequest],
        existing: Sequence[ExistingItemRef],
    ) -> tuple[list[ItemUpsertRequest], list[ItemUpdateRequest]]:
        """Split a chunk into (to_create, to_update) using a lookup result."""
        internal_ids = {ref.federated_id: ref.internal_id for ref in existing}
        to_create: list[ItemUpsertRequest] = []
        to_update: list[ItemUpdateRequest] = []
        for item in chunk:
            internal_id = internal_ids.get(item.federated_id)
            if internal_id:
                to_update.append(ItemUpdateRequest.from_request(item, internal_id))
            else:
                to_create.append(item)
        return to_create, to_update

    def reconcile(
        self,
        chunk: Sequence[ItemUpsertRequest],
        executor: Executor | None = None,
    ) -> None:
        """
        Reconcile a chunk, raising on any failure.

        Args:
            chunk: Items of one chunk
            executor: When given and both calls are needed, the create call
                runs on it while the update call runs in the current thread

        Raises:
            PreconditionError: If the chunk exceeds the catalog batch limit
            Exception: Whatever the catalog client raised
        """
        check_batch_size(chunk, self.max_batch_size)

        existing = self.catalog.lookup_by_federated_ids(
            list(dict.fromkeys(item.federated_id for item in chunk))
        )
        to_create, to_update = self.partition(chunk, existing)

        if to_create and to_update and executor is not None:
            create_future = executor.submit(self.catalog.create_batch, to_create)
            update_error = None
            try:
                self.catalog.update_batch(to_update)
            except Exception as e:
                update_error = e
            # No call may outlive the chunk; a create error is reported first
            create_error = create_future.exception()
            if create_error is not None:
                raise create_error
            if update_error is not None:
                raise update_error
            return

        if to_create:
            self.catalog.create_batch(to_create)
        if to_update:
            self.catalog.update_batch(to_update)

    def run(
        self,
        batch_id: str,
        chunk_index: int,
        chunk: Sequence[ItemUpsertRequest],
        executor: Executor | None = None,
    ) -> ChunkResult:
        """
        Reconcile a chunk and report its outcome instead of raising.

        A failure marks every item of the chunk as failed with the same
        error message.
        """
        started = time.monotonic()
        try:
            self.reconcile(chunk, executor)
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            log = logger.error if isinstance(e, PreconditionError) else logger.warning
            log(
                f"Chunk {chunk_index} of batch {batch_id} failed: {message}",
                extra={
                    "batch_id": batch_id,
                    "chunk_index": chunk_index,
                    "chunk_items": len(chunk),
                    "error_type": e.__class__.__name__,
                },
            )
            return ChunkResult(
                batch_id=batch_id,
                chunk_index=chunk_index,
                status="failed",
                failed_items=len(chunk),
                errors=[
                    BatchError(item_federated_id=item.federated_id, message=message)
                    for item in chunk
                ],
                processing_time_ms=_elapsed_ms(started),
            )

        return ChunkResult(
            batch_id=batch_id,
            chunk_index=chunk_index,
            status="success",
            processed_items=len(chunk),
            processing_time_ms=_elapsed_ms(started),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
