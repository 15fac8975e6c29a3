"""
Batch status state machine.
"""

from .errors import InvalidTransitionError
from .models import BatchStatus

_ALLOWED_TRANSITIONS = {
    BatchStatus.PENDING: {BatchStatus.PROCESSING, BatchStatus.FAILED},
    BatchStatus.PROCESSING: {BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.PARTIAL},
}


def derive_status(processed: int, failed: int, total: int) -> BatchStatus:
    """
    Derive the terminal status of a batch from its counts.

    Completed when nothing failed, Failed when nothing was processed and
    something failed, Partial otherwise. A batch whose counts do not add up
    to its total (interrupted run) is never reported as Completed.

    Args:
        processed: Items reconciled successfully
        failed: Items whose chunk failed
        total: Items in the batch

    Returns:
        Terminal BatchStatus
    """
    if processed < 0 or failed < 0 or total < 0:
        raise ValueError("Batch counts must be non-negative")
    if processed + failed > total:
        raise ValueError(
            f"processed ({processed}) + failed ({failed}) exceeds total ({total})"
        )

    if processed + failed < total:
        if processed == 0 and failed > 0:
            return BatchStatus.FAILED
        return BatchStatus.PARTIAL
    if failed == 0:
        return BatchStatus.COMPLETED
    if processed == 0:
        return BatchStatus.FAILED
    return BatchStatus.PARTIAL


def check_transition(current: BatchStatus, target: BatchStatus) -> None:
    """
    Raise InvalidTransitionError unless current -> target is allowed.

    Re-applying the same non-terminal state is accepted.
    """
    if current == target and not current.is_terminal:
        return
    if target not in _ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(
            f"Cannot move batch from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )
