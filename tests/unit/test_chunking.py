"""
Unit tests for chunk partitioning.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from catalog_ingest.batch.chunking import chunk_items


class TestChunkItems:
    """Tests for chunk_items"""

    def test_150_items_make_two_chunks(self):
        chunks = chunk_items(list(range(150)), 100)
        assert [len(c) for c in chunks] == [100, 50]

    def test_exact_multiple(self):
        assert [len(c) for c in chunk_items(list(range(200)), 100)] == [100, 100]

    def test_empty_input(self):
        assert chunk_items([], 100) == []

    def test_non_positive_size_rejected(self):
        with pytest.raises(ValueError):
            chunk_items([1, 2], 0)

    @given(st.lists(st.integers(), max_size=500), st.integers(min_value=1, max_value=120))
    def test_chunks_cover_input_in_order(self, items, size):
        chunks = chunk_items(items, size)
        assert [x for chunk in chunks for x in chunk] == items
        assert all(0 < len(chunk) <= size for chunk in chunks)
        assert all(len(chunk) == size for chunk in chunks[:-1])
