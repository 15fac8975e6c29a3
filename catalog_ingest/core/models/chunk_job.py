"""
Messages exchanged when chunks are fanned out to workers.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from .batch import BatchError, utc_now
from .item import ItemUpsertRequest


class ChunkJob(BaseModel):
    """
    One chunk-processing job as carried by the dispatch queue.

    Delivery is at-least-once; retry_count is bumped on every redelivery.
    """

    batch_id: str = Field(..., min_length=1)
    chunk_index: int = Field(..., ge=0)
    items: list[ItemUpsertRequest] = Field(..., min_length=1)
    retry_count: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def job_key(self) -> str:
        return f"{self.batch_id}-{self.chunk_index}"


class ChunkResult(BaseModel):
    """Outcome of reconciling one chunk."""

    batch_id: str
    chunk_index: int
    status: Literal["success", "failed"]
    processed_items: int = Field(0, ge=0)
    failed_items: int = Field(0, ge=0)
    errors: list[BatchError] = Field(default_factory=list)
    processing_time_ms: int = Field(0, ge=0)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"
