"""
Catalog ingestion pipeline: CSV family/option rows reconciled against a catalog service.
"""

__version__ = "0.1.0"
