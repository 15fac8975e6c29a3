"""
Batch reconciliation pipeline orchestration.

Coordinates the flow: parse → transform → resolve families → chunk →
reconcile each chunk against the catalog → aggregate → finalize status.
"""

import secrets
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from catalog_ingest.batch.chunk_reconciler import ChunkReconciler
from catalog_ingest.batch.chunking import chunk_items
from catalog_ingest.batch.readers import RowReader
from catalog_ingest.catalog.base import CatalogClient
from catalog_ingest.config.settings import PipelineSettings
from catalog_ingest.core.errors import NotFoundError, PreconditionError
from catalog_ingest.core.models import (
    Batch,
    BatchError,
    BatchProcessingResult,
    BatchStatus,
    ChunkJob,
    ChunkResult,
    ItemUpsertRequest,
)
from catalog_ingest.core.status import check_transition, derive_status
from catalog_ingest.core.transform import FamilyResolver, ItemTransformer
from catalog_ingest.observability.logger import get_logger, log_operation
from catalog_ingest.store.base import BatchStore

logger = get_logger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_batch_id() -> str:
    """Time-based id with a random base36 suffix, e.g. batch_1731801600000_k3j9x."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"batch_{int(time.time() * 1000)}_{suffix}"


class BatchReconciler:
    """
    Drives one ingestion batch end to end.

    Flow:
    1. Persist a pending batch record
    2. Parse raw input into rows (a parse failure fails the batch)
    3. Transform rows and backfill missing families
    4. Record the item total and move to processing
    5. Reconcile chunks on a bounded thread pool; chunk failures are
       recorded and never abort sibling chunks
    6. Persist final counts, errors and status exactly once

    All aggregation happens on the calling thread as chunk results
    complete, so counters are never shared between workers.
    """

    def __init__(
        self,
        row_reader: RowReader,
        catalog: CatalogClient,
        store: BatchStore,
        settings: PipelineSettings | None = None,
        dispatcher: Any = None,
    ):
        """
        Initialize reconciler.

        Args:
            row_reader: Row validation collaborator
            catalog: Catalog client
            store: Batch status store
            settings: Pipeline settings (defaults apply when omitted)
            dispatcher: Optional ChunkDispatcher used by enqueue_batch

        Raises:
            PreconditionError: If the configured chunk size exceeds the
                catalog's batch limit
        """
        self.settings = settings or PipelineSettings()
        self.row_reader = row_reader
        self.catalog = catalog
        self.store = store
        self.dispatcher = dispatcher

        if self.settings.chunk_size > catalog.max_batch_size:
            raise PreconditionError(
                f"Chunk size {self.settings.chunk_size} exceeds catalog batch limit "
                f"{catalog.max_batch_size}"
            )

        self.chunk_size = self.settings.chunk_size
        self.max_workers = self.settings.max_workers
        self.transformer = ItemTransformer()
        self.resolver = FamilyResolver()
        self.chunk_reconciler = ChunkReconciler(catalog, self.chunk_size)

    def process_batch(
        self,
        raw: Any,
        cancel_event: threading.Event | None = None,
    ) -> BatchProcessingResult:
        """
        Process one batch of raw input completely.

        Args:
            raw: Input accepted by the row reader (CSV text for CSVRowReader)
            cancel_event: When set, chunks not yet started are skipped and
                the batch is finalized from the chunks that did complete

        Returns:
            BatchProcessingResult mirroring the final persisted batch

        Raises:
            ParseError: If the input cannot be parsed (batch marked failed)
            Exception: If the initial batch record cannot be persisted
        """
        batch = self._create_batch()

        with log_operation("Processing batch", logger=logger, batch_id=batch.id):
            try:
                items = self._prepare_items(batch.id, raw)
                chunks = chunk_items(items, self.chunk_size)
                logger.info(
                    f"Reconciling {len(items)} items in {len(chunks)} chunks",
                    extra={"batch_id": batch.id, "max_workers": self.max_workers},
                )
                results = self._reconcile_chunks(batch.id, chunks, cancel_event)
                final = self._finalize(batch.id, len(items), len(chunks), results)
            except Exception as e:
                self._mark_failed(batch.id, e)
                raise

        return BatchProcessingResult.from_batch(final)

    def enqueue_batch(self, raw: Any) -> BatchProcessingResult:
        """
        Prepare a batch and publish one ChunkJob per chunk instead of
        reconciling in-process. The batch is left in processing; workers
        finalize it through record_chunk_result.
        """
        if self.dispatcher is None:
            raise PreconditionError("No chunk dispatcher configured")

        batch = self._create_batch()
        try:
            items = self._prepare_items(batch.id, raw)
            jobs = [
                ChunkJob(batch_id=batch.id, chunk_index=index, items=chunk)
                for index, chunk in enumerate(chunk_items(items, self.chunk_size))
            ]
            if not jobs:
                return BatchProcessingResult.from_batch(self._finalize(batch.id, 0, 0, []))
            message_ids = self.dispatcher.publish_many(jobs)
        except Exception as e:
            self._mark_failed(batch.id, e)
            raise

        logger.info(
            f"Published {len(message_ids)} chunk jobs for batch {batch.id}",
            extra={"batch_id": batch.id},
        )
        return BatchProcessingResult.from_batch(self.get_batch(batch.id))

    def record_chunk_result(self, result: ChunkResult) -> Batch:
        """
        Fold a worker's chunk result into its batch, finalizing the batch
        when the last outstanding chunk is recorded.
        """
        batch, recorded = self.store.record_chunk_result(result)
        if not recorded:
            reason = f"batch is {batch.status.value}" if batch.status.is_terminal else "already recorded"
            logger.info(
                f"Chunk {result.chunk_index} of batch {result.batch_id} not recorded: {reason}",
                extra={"batch_id": result.batch_id, "chunk_index": result.chunk_index},
            )
            return batch

        done = batch.processed_items + batch.failed_items
        if done < batch.total_items or batch.status.is_terminal:
            return batch

        status = derive_status(batch.processed_items, batch.failed_items, batch.total_items)
        check_transition(batch.status, status)
        logger.info(
            f"Batch {batch.id} finished: {status.value}",
            extra={"batch_id": batch.id, "processed": batch.processed_items, "failed": batch.failed_items},
        )
        return self.store.update(batch.id, status=status)

    def get_batch_status(self, batch_id: str) -> Batch | None:
        return self.store.get_by_id(batch_id)

    def get_batch(self, batch_id: str) -> Batch:
        batch = self.store.get_by_id(batch_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)
        return batch

    def _create_batch(self) -> Batch:
        # Nothing reaches the catalog without a persisted batch record
        batch = self.store.save(Batch.new(generate_batch_id()))
        logger.info(f"Created batch {batch.id}", extra={"batch_id": batch.id})
        return batch

    def _prepare_items(self, batch_id: str, raw: Any) -> list[ItemUpsertRequest]:
        rows = self.row_reader.parse(raw)
        logger.info(f"Parsed {len(rows)} rows", extra={"batch_id": batch_id})

        items = self.resolver.ensure_families_exist(self.transformer.transform_all(rows), rows)

        self.store.update(batch_id, total_items=len(items), status=BatchStatus.PROCESSING)
        return items

    def _reconcile_chunks(
        self,
        batch_id: str,
        chunks: Sequence[Sequence[ItemUpsertRequest]],
        cancel_event: threading.Event | None,
    ) -> list[ChunkResult]:
        if not chunks:
            return []

        workers = min(self.max_workers, len(chunks))

        def run(index: int, chunk: Sequence[ItemUpsertRequest]) -> ChunkResult | None:
            if cancel_event is not None and cancel_event.is_set():
                return None
            return self.chunk_reconciler.run(batch_id, index, chunk, call_pool)

        results: list[ChunkResult] = []
        # Separate pools: a chunk blocks on its create call, so sharing one
        # pool could starve it
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chunk") as chunk_pool, \
                ThreadPoolExecutor(max_workers=workers, thread_name_prefix="catalog-call") as call_pool:
            futures = [chunk_pool.submit(run, index, chunk) for index, chunk in enumerate(chunks)]
            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    results.append(result)

        return sorted(results, key=lambda r: r.chunk_index)

    def _finalize(
        self,
        batch_id: str,
        total: int,
        chunk_count: int,
        results: list[ChunkResult],
    ) -> Batch:
        processed = sum(r.processed_items for r in results)
        failed = sum(r.failed_items for r in results)
        errors: list[BatchError] = [error for r in results for error in r.errors]

        skipped = chunk_count - len(results)
        if skipped:
            message = (
                f"Batch cancelled: {total - processed - failed} items in "
                f"{skipped} chunks were not reconciled"
            )
            logger.warning(message, extra={"batch_id": batch_id})
            errors.append(BatchError.for_batch(message))

        status = derive_status(processed, failed, total)
        check_transition(BatchStatus.PROCESSING, status)

        final = self.store.update(
            batch_id,
            status=status,
            processed_items=processed,
            failed_items=failed,
            errors=errors,
        )
        logger.info(
            f"Batch {batch_id} finished: {status.value}",
            extra={"batch_id": batch_id, "processed": processed, "failed": failed, "total": total},
        )
        return final

    def _mark_failed(self, batch_id: str, error: Exception) -> None:
        """Best-effort transition to failed after a batch-fatal error."""
        message = getattr(error, "message", None) or str(error) or error.__class__.__name__
        try:
            current = self.store.get_by_id(batch_id)
            if current is None or current.status.is_terminal:
                return
            self.store.update(
                batch_id,
                status=BatchStatus.FAILED,
                errors=[*current.errors, BatchError.for_batch(message)],
            )
        except Exception as store_error:
            logger.error(
                f"Could not mark batch {batch_id} as failed: {store_error}",
                extra={"batch_id": batch_id},
            )
