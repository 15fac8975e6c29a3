"""
Integration tests for the PostgreSQL batch store.

Requires Docker (testcontainers PostgreSQL).
"""

import pytest

from catalog_ingest.batch import BatchReconciler
from catalog_ingest.batch.readers import CSVRowReader
from catalog_ingest.core.errors import NotFoundError
from catalog_ingest.core.models import Batch, BatchError, BatchStatus, ChunkResult
from catalog_ingest.store import PostgresBatchStore


@pytest.fixture
def pg_store(db_pool) -> PostgresBatchStore:
    return PostgresBatchStore(db_pool)


@pytest.mark.integration
class TestPostgresBatchStore:
    """Tests for PostgresBatchStore"""

    def test_save_and_get(self, pg_store):
        saved = pg_store.save(Batch.new("batch_1_abcdef"))

        fetched = pg_store.get_by_id("batch_1_abcdef")
        assert fetched == saved
        assert fetched.status == BatchStatus.PENDING
        assert fetched.errors == []

    def test_save_is_idempotent(self, pg_store):
        batch = Batch.new("batch_2_abcdef")
        pg_store.save(batch)
        pg_store.save(batch)
        count = pg_store.pool.execute_query("SELECT COUNT(*) AS n FROM ingest_batch")[0]["n"]
        assert count == 1

    def test_get_missing(self, pg_store):
        assert pg_store.get_by_id("nope") is None

    def test_update_keeps_error_order(self, pg_store):
        pg_store.save(Batch.new("batch_3_abcdef"))
        errors = [
            BatchError(item_federated_id="opt2", message="first"),
            BatchError(item_federated_id="opt1", message="second"),
        ]

        updated = pg_store.update(
            "batch_3_abcdef",
            status=BatchStatus.PARTIAL,
            total_items=3,
            processed_items=1,
            failed_items=2,
            errors=errors,
        )

        assert updated.status == BatchStatus.PARTIAL
        assert [e.message for e in pg_store.get_by_id("batch_3_abcdef").errors] == ["first", "second"]
        assert updated.updated_at >= updated.created_at

    def test_update_rejects_bad_counts(self, pg_store):
        pg_store.save(Batch.new("batch_4_abcdef"))
        with pytest.raises(ValueError):
            pg_store.update("batch_4_abcdef", processed_items=5)
        assert pg_store.get_by_id("batch_4_abcdef").processed_items == 0

    def test_update_unknown_field(self, pg_store):
        pg_store.save(Batch.new("batch_5_abcdef"))
        with pytest.raises(ValueError, match="created_at"):
            pg_store.update("batch_5_abcdef", created_at=None)

    def test_update_missing_batch(self, pg_store):
        with pytest.raises(NotFoundError):
            pg_store.update("missing", status=BatchStatus.FAILED)

    def test_chunk_result_recorded_once(self, pg_store):
        pg_store.save(Batch.new("batch_6_abcdef"))
        pg_store.update("batch_6_abcdef", total_items=4, status=BatchStatus.PROCESSING)
        result = ChunkResult(
            batch_id="batch_6_abcdef",
            chunk_index=0,
            status="failed",
            failed_items=2,
            errors=[BatchError(item_federated_id="a", message="x"), BatchError(item_federated_id="b", message="x")],
        )

        batch, recorded = pg_store.record_chunk_result(result)
        again, recorded_again = pg_store.record_chunk_result(result)

        assert recorded is True
        assert recorded_again is False
        assert batch.failed_items == 2
        assert again.failed_items == 2
        assert len(again.errors) == 2

    def test_terminal_batch_ignores_chunk_results(self, pg_store):
        pg_store.save(Batch.new("batch_7_abcdef"))
        before = pg_store.update("batch_7_abcdef", total_items=10, status=BatchStatus.FAILED)

        batch, recorded = pg_store.record_chunk_result(
            ChunkResult(batch_id="batch_7_abcdef", chunk_index=0, status="success", processed_items=10)
        )

        assert recorded is False
        assert batch == before
        assert pg_store.get_by_id("batch_7_abcdef").processed_items == 0
        chunks = pg_store.pool.execute_query("SELECT COUNT(*) AS n FROM ingest_batch_chunk")[0]["n"]
        assert chunks == 0


@pytest.mark.integration
def test_reconciler_persists_to_postgres(pg_store, catalog, settings, csv_factory):
    """Full batch against the in-memory catalog with status kept in PostgreSQL"""
    reconciler = BatchReconciler(CSVRowReader(), catalog, pg_store, settings=settings)
    catalog.fail_on("create", "catalog unavailable", federated_ids=["opt3"])

    result = reconciler.process_batch(csv_factory([
        ("fam1", "", "Family", "D"),
        ("fam1", "opt1", "Small", "D"),
        ("fam1", "opt3", "Large", "D"),
    ]))

    stored = pg_store.get_by_id(result.batch_id)
    assert stored.status == BatchStatus.FAILED
    assert stored.failed_items == 3
    assert {e.item_federated_id for e in stored.errors} == {"fam1", "opt1", "opt3"}
