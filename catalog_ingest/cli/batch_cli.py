"""
Command-line interface for catalog ingestion.

Usage:
    catalog-ingest process --input <file.csv> [options]
    catalog-ingest status --batch-id <id> [db options]
"""

import argparse
import sys
import threading
from pathlib import Path

from catalog_ingest.batch import (
    BatchReconciler,
    ChunkJobProcessor,
    InMemoryChunkQueue,
    run_worker,
)
from catalog_ingest.batch.readers import CSVRowReader
from catalog_ingest.catalog import HttpCatalogClient, InMemoryCatalog
from catalog_ingest.config import PipelineSettings, load_settings
from catalog_ingest.core.errors import DomainError, NotFoundError
from catalog_ingest.core.models import BatchStatus
from catalog_ingest.observability.logger import configure_logging, get_logger
from catalog_ingest.store import DatabaseConnectionPool, InMemoryBatchStore, PostgresBatchStore
from catalog_ingest.utils.validation import InputValidationError, validate_batch_id, validate_file_path

logger = get_logger(__name__)

EXIT_CODES = {
    BatchStatus.COMPLETED: 0,
    BatchStatus.FAILED: 1,
    BatchStatus.PARTIAL: 2,
    BatchStatus.PROCESSING: 0,
    BatchStatus.PENDING: 0,
}


def _open_pool(args) -> DatabaseConnectionPool:
    pool = DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )
    pool.open()
    return pool


def _load_settings(args) -> PipelineSettings:
    settings = load_settings(
        args.config,
        overrides={
            "chunk_size": getattr(args, "chunk_size", None),
            "max_workers": getattr(args, "workers", None),
            "catalog_base_url": getattr(args, "catalog_url", None),
            "log_level": args.log_level,
        },
    )
    configure_logging(settings.log_level, settings.log_format)
    return settings


def process_command(args) -> int:
    """
    Execute the process command.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    settings = _load_settings(args)

    try:
        input_path = Path(validate_file_path(args.input, "--input"))
    except InputValidationError as e:
        logger.error(str(e))
        return 1
    if not input_path.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    # Decoded by the reader
    raw = input_path.read_bytes()

    pool = None
    catalog = None
    try:
        if args.dry_run:
            logger.info("DRY RUN MODE: using in-memory catalog and status store")
            catalog = InMemoryCatalog(max_batch_size=settings.chunk_size)
            store = InMemoryBatchStore()
        else:
            catalog = HttpCatalogClient(
                settings.catalog_base_url,
                token=settings.catalog_token,
                timeout=settings.catalog_timeout,
            )
            pool = _open_pool(args)
            store = PostgresBatchStore(pool)

        chunk_queue = InMemoryChunkQueue() if args.enqueue else None
        reconciler = BatchReconciler(
            CSVRowReader(delimiter=args.delimiter),
            catalog,
            store,
            settings=settings,
            dispatcher=chunk_queue,
        )

        if chunk_queue is not None:
            result = reconciler.enqueue_batch(raw)
            processor = ChunkJobProcessor(reconciler, chunk_queue, max_attempts=args.max_attempts)
            _drain(chunk_queue, processor, settings.max_workers)
            batch = reconciler.get_batch(result.batch_id)
            status = batch.status
            print(batch.model_dump_json(indent=2))
        else:
            result = reconciler.process_batch(raw)
            status = result.status
            print(result.model_dump_json(indent=2))

        return EXIT_CODES[status]

    except DomainError as e:
        logger.error(f"Batch processing failed: {e.message}", extra={"code": e.code})
        return 1
    except Exception as e:
        logger.error(f"Error during batch processing: {e}", exc_info=True)
        return 1
    finally:
        if isinstance(catalog, HttpCatalogClient):
            catalog.close()
        if pool is not None:
            pool.close()


def _drain(chunk_queue: InMemoryChunkQueue, processor: ChunkJobProcessor, workers: int) -> None:
    """Run local worker threads until the queue is empty."""
    threads = [
        threading.Thread(target=run_worker, args=(chunk_queue, processor), name=f"worker-{n}")
        for n in range(workers)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def status_command(args) -> int:
    """Print the stored status record of a batch."""
    _load_settings(args)
    try:
        batch_id = validate_batch_id(args.batch_id, "--batch-id")
    except InputValidationError as e:
        logger.error(str(e))
        return 1

    pool = _open_pool(args)
    try:
        store = PostgresBatchStore(pool)
        batch = store.get_by_id(batch_id)
        if batch is None:
            raise NotFoundError("Batch", batch_id)
        print(batch.model_dump_json(indent=2))
        return 0
    except NotFoundError as e:
        logger.error(e.message)
        return 1
    finally:
        pool.close()


def _add_db_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db-host", default=None, help="Database host (default: DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, default=None, help="Database port (default: DB_PORT or 5432)")
    parser.add_argument("--db-name", default=None, help="Database name (default: DB_NAME)")
    parser.add_argument("--db-user", default=None, help="Database user (default: DB_USER)")
    parser.add_argument("--db-password", default=None, help="Database password (default: DB_PASSWORD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-ingest",
        description="Reconcile family/option CSV files against the catalog service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reconcile a CSV file against the catalog
  catalog-ingest process --input data/products.csv

  # Validate and reconcile against an in-memory catalog only
  catalog-ingest process --input data/products.csv --dry-run

  # Fan chunks out to local workers through the chunk queue
  catalog-ingest process --input data/products.csv --enqueue --workers 8

  # Show a stored batch
  catalog-ingest status --batch-id batch_1731801600000_k3j9x
        """
    )
    parser.add_argument("--config", default=None, help="Path to YAML settings file")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Process a CSV file")
    process_parser.add_argument("--input", required=True, help="Path to input CSV file")
    process_parser.add_argument("--delimiter", default=",", help="CSV field delimiter (default: ,)")
    process_parser.add_argument("--chunk-size", type=int, default=None, help="Items per catalog call")
    process_parser.add_argument("--workers", type=int, default=None, help="Concurrent chunks")
    process_parser.add_argument("--catalog-url", default=None, help="Catalog service base URL")
    process_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use an in-memory catalog and status store",
    )
    process_parser.add_argument(
        "--enqueue",
        action="store_true",
        help="Publish chunks to the chunk queue and drain it with local workers",
    )
    process_parser.add_argument(
        "--max-attempts",
        type=int,
        default=3,
        help="Delivery attempts per chunk job with --enqueue (default: 3)",
    )
    _add_db_arguments(process_parser)

    status_parser = subparsers.add_parser("status", help="Show a batch status record")
    status_parser.add_argument("--batch-id", required=True, help="Batch identifier")
    _add_db_arguments(status_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {"process": process_command, "status": status_command}
    try:
        return commands[args.command](args)
    except (FileNotFoundError, ValueError) as e:
        # Settings problems surface before any batch is created
        logger.error(f"Configuration error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
