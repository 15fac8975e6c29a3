"""
Core data models for the catalog ingestion pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .batch import (
    BATCH_ERROR_ID,
    Batch,
    BatchError,
    BatchProcessingResult,
    BatchStatus,
    utc_now,
)
from .chunk_job import ChunkJob, ChunkResult
from .item import ExistingItemRef, ItemRole, ItemUpdateRequest, ItemUpsertRequest
from .row import Row

__all__ = [
    "BATCH_ERROR_ID",
    "Batch",
    "BatchError",
    "BatchProcessingResult",
    "BatchStatus",
    "ChunkJob",
    "ChunkResult",
    "ExistingItemRef",
    "ItemRole",
    "ItemUpdateRequest",
    "ItemUpsertRequest",
    "Row",
    "utc_now",
]
