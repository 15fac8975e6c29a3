"""
External catalog service clients.
"""

from .base import DEFAULT_MAX_BATCH_SIZE, CatalogClient, check_batch_size
from .http_client import HttpCatalogClient
from .memory import InMemoryCatalog

__all__ = [
    "CatalogClient",
    "DEFAULT_MAX_BATCH_SIZE",
    "HttpCatalogClient",
    "InMemoryCatalog",
    "check_batch_size",
]
