"""
Batch status stores.
"""

from .base import BatchStore
from .connection import DatabaseConnectionPool
from .memory import InMemoryBatchStore
from .postgres import PostgresBatchStore

__all__ = [
    "BatchStore",
    "DatabaseConnectionPool",
    "InMemoryBatchStore",
    "PostgresBatchStore",
]
