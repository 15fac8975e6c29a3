"""
Unit tests for the in-memory batch store.
"""

import pytest

from catalog_ingest.core.errors import NotFoundError
from catalog_ingest.core.models import Batch, BatchError, BatchStatus, ChunkResult


def _result(batch_id, chunk_index=0, processed=0, failed=0, errors=()):
    return ChunkResult(
        batch_id=batch_id,
        chunk_index=chunk_index,
        status="failed" if failed else "success",
        processed_items=processed,
        failed_items=failed,
        errors=list(errors),
    )


class TestInMemoryBatchStore:
    """Tests for InMemoryBatchStore"""

    def test_returned_records_are_copies(self, store):
        store.save(Batch.new("b1"))
        fetched = store.get_by_id("b1")
        fetched.errors.append(BatchError.for_batch("local only"))
        assert store.get_by_id("b1").errors == []

    def test_update_refreshes_updated_at(self, store):
        saved = store.save(Batch.new("b1"))
        updated = store.update("b1", total_items=3, status=BatchStatus.PROCESSING)
        assert updated.updated_at >= saved.updated_at
        assert updated.created_at == saved.created_at

    def test_update_validates_counts(self, store):
        store.save(Batch.new("b1"))
        with pytest.raises(ValueError):
            store.update("b1", processed_items=1)
        assert store.get_by_id("b1").processed_items == 0

    def test_update_missing_batch(self, store):
        with pytest.raises(NotFoundError):
            store.update("missing", status=BatchStatus.FAILED)

    def test_chunk_result_recorded_once(self, store):
        store.save(Batch.new("b1"))
        store.update("b1", total_items=4, status=BatchStatus.PROCESSING)
        result = _result("b1", failed=2, errors=[BatchError(item_federated_id="a", message="x")])

        batch, recorded = store.record_chunk_result(result)
        again, recorded_again = store.record_chunk_result(result)

        assert (recorded, recorded_again) == (True, False)
        assert batch.failed_items == 2
        assert again.failed_items == 2
        assert len(again.errors) == 1

    @pytest.mark.parametrize(
        "status", [BatchStatus.FAILED, BatchStatus.COMPLETED, BatchStatus.PARTIAL]
    )
    def test_terminal_batch_ignores_chunk_results(self, store, status):
        store.save(Batch.new("b1"))
        before = store.update("b1", total_items=10, status=status)

        batch, recorded = store.record_chunk_result(_result("b1", processed=10))

        assert recorded is False
        assert batch == before
        assert store.get_by_id("b1").processed_items == 0
