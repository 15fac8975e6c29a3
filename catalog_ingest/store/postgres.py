"""
PostgreSQL-backed batch status store.

Schema lives in docker/init-db.sql (tables ingest_batch and
ingest_batch_chunk). Errors are kept as a JSONB array in insertion order.
"""

from typing import Any

from psycopg.types.json import Jsonb

from catalog_ingest.core.errors import NotFoundError
from catalog_ingest.core.models import Batch, BatchError, BatchStatus, ChunkResult, utc_now
from catalog_ingest.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

_UPDATABLE = {
    "status", "total_items", "processed_items", "failed_items", "updated_at", "errors",
}


class PostgresBatchStore:
    """
    Batch store on the ingest_batch table.

    save() is an idempotent upsert so a redelivered job can re-save safely.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize store.

        Args:
            pool: Open database connection pool
        """
        self.pool = pool

    def save(self, batch: Batch) -> Batch:
        query = """
            INSERT INTO ingest_batch (
                id, status, total_items, processed_items, failed_items,
                created_at, updated_at, errors
            )
            VALUES (
                %(id)s, %(status)s, %(total_items)s, %(processed_items)s, %(failed_items)s,
                %(created_at)s, %(updated_at)s, %(errors)s
            )
            ON CONFLICT (id) DO UPDATE SET
                status = EXCLUDED.status,
                total_items = EXCLUDED.total_items,
                processed_items = EXCLUDED.processed_items,
                failed_items = EXCLUDED.failed_items,
                updated_at = EXCLUDED.updated_at,
                errors = EXCLUDED.errors
            RETURNING *
        """
        rows = self.pool.execute_query(query, self._to_params(batch))
        return self._from_row(rows[0])

    def get_by_id(self, batch_id: str) -> Batch | None:
        rows = self.pool.execute_query("SELECT * FROM ingest_batch WHERE id = %s", (batch_id,))
        return self._from_row(rows[0]) if rows else None

    def update(self, batch_id: str, **fields: Any) -> Batch:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update batch fields: {', '.join(sorted(unknown))}")

        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    current = self._select_for_update(cur, batch_id)
                    fields.setdefault("updated_at", utc_now())
                    # Validates the counts invariant before anything is written
                    updated = Batch.model_validate({**current.model_dump(), **fields})
                    stored = self._write(cur, updated, sorted(fields))

        logger.debug(f"Updated batch {batch_id}: {', '.join(sorted(fields))}")
        return stored

    def record_chunk_result(self, result: ChunkResult) -> tuple[Batch, bool]:
        with self.pool.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    current = self._select_for_update(cur, result.batch_id)
                    if current.status.is_terminal:
                        return current, False
                    cur.execute(
                        """
                        INSERT INTO ingest_batch_chunk (batch_id, chunk_index, status, recorded_at)
                        VALUES (%s, %s, %s, %s)
                        ON CONFLICT (batch_id, chunk_index) DO NOTHING
                        RETURNING chunk_index
                        """,
                        (result.batch_id, result.chunk_index, result.status, utc_now()),
                    )
                    if cur.fetchone() is None:
                        return current, False

                    updated = Batch.model_validate({
                        **current.model_dump(),
                        "processed_items": current.processed_items + result.processed_items,
                        "failed_items": current.failed_items + result.failed_items,
                        "errors": [*current.errors, *result.errors],
                        "updated_at": utc_now(),
                    })
                    stored = self._write(
                        cur, updated, ["errors", "failed_items", "processed_items", "updated_at"]
                    )
        return stored, True

    def _select_for_update(self, cur, batch_id: str) -> Batch:
        cur.execute("SELECT * FROM ingest_batch WHERE id = %s FOR UPDATE", (batch_id,))
        row = cur.fetchone()
        if row is None:
            raise NotFoundError("Batch", batch_id)
        return self._from_row(row)

    def _write(self, cur, batch: Batch, field_names: list[str]) -> Batch:
        assignments = ", ".join(f"{name} = %({name})s" for name in field_names)
        cur.execute(
            f"UPDATE ingest_batch SET {assignments} WHERE id = %(id)s RETURNING *",
            self._to_params(batch),
        )
        return self._from_row(cur.fetchone())

    @staticmethod
    def _to_params(batch: Batch) -> dict[str, Any]:
        return {
            "id": batch.id,
            "status": batch.status.value,
            "total_items": batch.total_items,
            "processed_items": batch.processed_items,
            "failed_items": batch.failed_items,
            "created_at": batch.created_at,
            "updated_at": batch.updated_at,
            "errors": Jsonb([error.model_dump(mode="json") for error in batch.errors]),
        }

    @staticmethod
    def _from_row(row: dict[str, Any]) -> Batch:
        return Batch(
            id=row["id"],
            status=BatchStatus(row["status"]),
            total_items=row["total_items"],
            processed_items=row["processed_items"],
            failed_items=row["failed_items"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            errors=[BatchError.model_validate(error) for error in row["errors"] or []],
        )
