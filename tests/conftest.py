"""
Pytest configuration and fixtures for catalog-ingest tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from typing import Generator

import psycopg
import pytest

from catalog_ingest.batch import BatchReconciler
from catalog_ingest.batch.readers import CSVRowReader
from catalog_ingest.catalog import InMemoryCatalog
from catalog_ingest.config import PipelineSettings
from catalog_ingest.store import InMemoryBatchStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# PIPELINE FIXTURES
# =======================

@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Empty in-memory catalog with the default batch limit"""
    return InMemoryCatalog()


@pytest.fixture
def store() -> InMemoryBatchStore:
    """Empty in-memory batch store"""
    return InMemoryBatchStore()


@pytest.fixture
def settings() -> PipelineSettings:
    """Default settings with a small worker pool"""
    return PipelineSettings(chunk_size=100, max_workers=2)


@pytest.fixture
def reconciler(catalog, store, settings) -> BatchReconciler:
    """BatchReconciler wired to in-memory collaborators"""
    return BatchReconciler(CSVRowReader(), catalog, store, settings=settings)


def make_csv(rows: list[tuple[str, str, str, str]]) -> str:
    """
    Build CSV text from (family, option, title, details) tuples

    An empty option string leaves the optionFederatedId cell blank.
    """
    lines = ["familyFederatedId,optionFederatedId,title,details"]
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines) + "\n"


@pytest.fixture
def csv_factory():
    return make_csv


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance with initialized database
    """
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_ingest",
        password="test_password",
        dbname="test_catalog_ingest",
        driver=None,
    ) as postgres:
        init_sql_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "docker",
            "init-db.sql"
        )

        with open(init_sql_path, "r") as f:
            init_sql = f.read()

        with psycopg.connect(postgres.get_connection_url()) as conn:
            with conn.cursor() as cur:
                cur.execute(init_sql)
            conn.commit()

        yield postgres


@pytest.fixture(scope="function")
def db_pool(postgres_container) -> Generator:
    """
    Open a connection pool against the container and clean tables first

    Yields:
        Open DatabaseConnectionPool
    """
    from catalog_ingest.store import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_catalog_ingest",
        user="test_ingest",
        password="test_password",
    )
    pool.open()
    pool.execute_command("TRUNCATE TABLE ingest_batch CASCADE")

    yield pool

    pool.close()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")
