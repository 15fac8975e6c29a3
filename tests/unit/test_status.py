"""
Unit tests for batch status derivation and transitions.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from catalog_ingest.core.errors import InvalidTransitionError
from catalog_ingest.core.models import BatchStatus
from catalog_ingest.core.status import check_transition, derive_status


class TestDeriveStatus:
    """Tests for derive_status"""

    def test_all_processed_is_completed(self):
        assert derive_status(processed=5, failed=0, total=5) == BatchStatus.COMPLETED

    def test_all_failed_is_failed(self):
        assert derive_status(processed=0, failed=5, total=5) == BatchStatus.FAILED

    def test_mixed_is_partial(self):
        assert derive_status(processed=3, failed=2, total=5) == BatchStatus.PARTIAL

    def test_incomplete_batch_is_never_completed(self):
        assert derive_status(processed=3, failed=0, total=5) == BatchStatus.PARTIAL
        assert derive_status(processed=0, failed=0, total=5) == BatchStatus.PARTIAL
        assert derive_status(processed=0, failed=2, total=5) == BatchStatus.FAILED

    def test_counts_over_total_rejected(self):
        with pytest.raises(ValueError):
            derive_status(processed=4, failed=2, total=5)

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            derive_status(processed=-1, failed=0, total=0)

    @given(st.integers(min_value=0, max_value=10_000), st.integers(min_value=0, max_value=10_000))
    def test_complete_batches(self, processed, failed):
        status = derive_status(processed, failed, processed + failed)
        assert status.is_terminal
        if failed == 0:
            assert status == BatchStatus.COMPLETED
        elif processed == 0:
            assert status == BatchStatus.FAILED
        else:
            assert status == BatchStatus.PARTIAL


class TestTransitions:
    """Tests for check_transition"""

    @pytest.mark.parametrize("target", [BatchStatus.PROCESSING, BatchStatus.FAILED])
    def test_pending_transitions(self, target):
        check_transition(BatchStatus.PENDING, target)

    @pytest.mark.parametrize(
        "target", [BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.PARTIAL]
    )
    def test_processing_transitions(self, target):
        check_transition(BatchStatus.PROCESSING, target)

    @pytest.mark.parametrize(
        "current", [BatchStatus.COMPLETED, BatchStatus.FAILED, BatchStatus.PARTIAL]
    )
    def test_terminal_states_are_final(self, current):
        for target in BatchStatus:
            with pytest.raises(InvalidTransitionError):
                check_transition(current, target)

    def test_pending_cannot_complete_directly(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_transition(BatchStatus.PENDING, BatchStatus.COMPLETED)
        assert exc_info.value.code == "INVALID_TRANSITION"
