"""
Batch reconciliation: chunking, per-chunk upserts and batch orchestration.
"""

from .chunk_reconciler import ChunkReconciler
from .chunking import chunk_items
from .dispatch import (
    ChunkDispatcher,
    ChunkJobProcessor,
    InMemoryChunkQueue,
    decode_job,
    encode_job,
    run_worker,
)
from .reconciler import BatchReconciler, generate_batch_id

__all__ = [
    "BatchReconciler",
    "ChunkDispatcher",
    "ChunkJobProcessor",
    "ChunkReconciler",
    "InMemoryChunkQueue",
    "decode_job",
    "encode_job",
    "run_worker",
    "chunk_items",
    "generate_batch_id",
]
