"""
Partitioning of item sequences into bounded chunks.
"""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def chunk_items(items: Sequence[T], chunk_size: int) -> list[list[T]]:
    """
    Split items into contiguous chunks of at most chunk_size.

    Concatenating the chunks yields the input; only the last chunk may be
    shorter than chunk_size.

    Args:
        items: Ordered items
        chunk_size: Maximum chunk length (the catalog batch limit)

    Returns:
        List of chunks in input order

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]
