"""
Chunk fan-out to workers.

Chunk jobs travel as JSON messages with at-least-once delivery. A worker
reconciles the chunk, asks for redelivery while attempts remain, and
otherwise folds the result into the batch through the reconciler.
"""

import queue
import threading
import uuid
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from catalog_ingest.core.errors import DomainError
from catalog_ingest.core.models import ChunkJob, ChunkResult
from catalog_ingest.observability.logger import get_logger

from .reconciler import BatchReconciler

logger = get_logger(__name__)

INVALID_MESSAGE_CODE = "INVALID_CHUNK_MESSAGE"


def encode_job(job: ChunkJob) -> str:
    return job.model_dump_json()


def decode_job(body: str | bytes, message_id: str | None = None) -> ChunkJob:
    """
    Parse a queue message body into a ChunkJob.

    Raises:
        DomainError: With code INVALID_CHUNK_MESSAGE for malformed bodies
    """
    try:
        return ChunkJob.model_validate_json(body)
    except PydanticValidationError as e:
        raise DomainError(
            f"Invalid chunk message format: {e.error_count()} errors",
            code=INVALID_MESSAGE_CODE,
            details={"message_id": message_id, "errors": e.errors(include_url=False)},
        ) from e


@runtime_checkable
class ChunkDispatcher(Protocol):
    """Publishes chunk jobs to workers."""

    def publish(self, job: ChunkJob) -> str:
        """Publish one job and return its message id."""
        ...

    def publish_many(self, jobs: Sequence[ChunkJob]) -> list[str]:
        ...


class InMemoryChunkQueue:
    """
    Thread-safe in-process queue implementing ChunkDispatcher.

    Messages are stored encoded, as a broker would hold them.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue[tuple[str, str]] = queue.Queue(maxsize=maxsize)
        self.published = 0
        self.redelivered = 0
        self._lock = threading.Lock()

    def publish(self, job: ChunkJob) -> str:
        message_id = uuid.uuid4().hex
        self._queue.put((message_id, encode_job(job)))
        with self._lock:
            self.published += 1
        logger.debug(
            f"Published chunk {job.chunk_index} of batch {job.batch_id}",
            extra={"batch_id": job.batch_id, "chunk_index": job.chunk_index, "message_id": message_id},
        )
        return message_id

    def publish_many(self, jobs: Sequence[ChunkJob]) -> list[str]:
        return [self.publish(job) for job in jobs]

    def receive(self, timeout: float | None = None) -> tuple[str, ChunkJob] | None:
        """Return the next (message_id, job), or None if the queue stays empty."""
        try:
            message_id, body = self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait()
        except queue.Empty:
            return None
        return message_id, decode_job(body, message_id)

    def redeliver(self, job: ChunkJob) -> str:
        with self._lock:
            self.redelivered += 1
        return self.publish(job.model_copy(update={"retry_count": job.retry_count + 1}))

    def __len__(self) -> int:
        return self._queue.qsize()


class ChunkJobProcessor:
    """
    Worker-side handling of one chunk job.

    process() only reconciles; handle() also applies the retry policy and
    records the final outcome. Both are safe to re-run for the same job.
    """

    def __init__(
        self,
        reconciler: BatchReconciler,
        chunk_queue: InMemoryChunkQueue | None = None,
        max_attempts: int = 3,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.reconciler = reconciler
        self.chunk_queue = chunk_queue
        self.max_attempts = max_attempts

    def process(self, job: ChunkJob) -> ChunkResult:
        return self.reconciler.chunk_reconciler.run(job.batch_id, job.chunk_index, job.items)

    def handle(self, job: ChunkJob) -> ChunkResult:
        result = self.process(job)

        if not result.succeeded and self.chunk_queue is not None and job.retry_count + 1 < self.max_attempts:
            logger.warning(
                f"Retrying chunk {job.chunk_index} of batch {job.batch_id}",
                extra={"batch_id": job.batch_id, "chunk_index": job.chunk_index, "retry_count": job.retry_count},
            )
            self.chunk_queue.redeliver(job)
            return result

        self.reconciler.record_chunk_result(result)
        return result


def run_worker(
    chunk_queue: InMemoryChunkQueue,
    processor: ChunkJobProcessor,
    stop_event: threading.Event | None = None,
    poll_timeout: float | None = None,
) -> int:
    """
    Consume jobs until the queue is drained or stop_event is set.

    Malformed messages are logged and dropped.

    Returns:
        Number of jobs handled
    """
    handled = 0
    while stop_event is None or not stop_event.is_set():
        try:
            received = chunk_queue.receive(timeout=poll_timeout)
        except DomainError as e:
            logger.error(f"Dropping malformed chunk message: {e.message}", extra={"code": e.code})
            continue
        if received is None:
            break
        _, job = received
        processor.handle(job)
        handled += 1
    return handled
