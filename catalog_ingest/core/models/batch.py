"""
Batch models tracking one ingestion run and its outcome.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator

BATCH_ERROR_ID = "batch"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BatchStatus(str, Enum):
    """Lifecycle states of a batch. The last three are terminal."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.PARTIAL)


class BatchError(BaseModel):
    """
    One failure entry recorded against a batch.

    A whole-chunk failure yields one entry per item of the chunk; a
    whole-batch failure uses the sentinel id "batch".
    """

    item_federated_id: str
    message: str
    timestamp: datetime = Field(default_factory=utc_now)

    @classmethod
    def for_batch(cls, message: str) -> "BatchError":
        return cls(item_federated_id=BATCH_ERROR_ID, message=message)

    class Config:
        frozen = True


class Batch(BaseModel):
    """
    Persistent status record of one ingestion batch.

    Attributes:
        id: Batch identifier
        status: Current lifecycle state
        total_items: Items in the batch once known (0 while pending)
        processed_items: Items reconciled successfully
        failed_items: Items whose chunk failed
        created_at: Creation time (UTC)
        updated_at: Last update time (UTC)
        errors: Ordered failure entries, append-only
    """

    id: str = Field(..., min_length=1)
    status: BatchStatus = BatchStatus.PENDING
    total_items: int = Field(0, ge=0)
    processed_items: int = Field(0, ge=0)
    failed_items: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    errors: list[BatchError] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_counts(self):
        """processed + failed never exceeds total."""
        if self.processed_items + self.failed_items > self.total_items:
            raise ValueError(
                f"processed_items ({self.processed_items}) + failed_items "
                f"({self.failed_items}) exceeds total_items ({self.total_items})"
            )
        return self

    @classmethod
    def new(cls, batch_id: str) -> "Batch":
        now = utc_now()
        return cls(id=batch_id, created_at=now, updated_at=now)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "batch_1731801600000_k3j9x",
                "status": "partial",
                "total_items": 150,
                "processed_items": 100,
                "failed_items": 50,
                "errors": [
                    {"item_federated_id": "opt101", "message": "catalog unavailable"}
                ],
            }
        }


class BatchProcessingResult(BaseModel):
    """Outcome returned to the caller, mirroring the final persisted batch."""

    batch_id: str
    status: BatchStatus
    total_items: int
    processed_items: int
    failed_items: int
    errors: list[BatchError] = Field(default_factory=list)

    @classmethod
    def from_batch(cls, batch: Batch) -> "BatchProcessingResult":
        return cls(
            batch_id=batch.id,
            status=batch.status,
            total_items=batch.total_items,
            processed_items=batch.processed_items,
            failed_items=batch.failed_items,
            errors=list(batch.errors),
        )
