"""
Command-line interface for client file ingestion.

Usage:
    client-ingest process --input <file_path> [options]
    python -m src.cli.ingest_cli process --input <file_path> [options]
"""

import argparse
import sys

from dotenv import load_dotenv

from src.core.config import load_config
from src.core.errors import ConfigurationError, InputFileNotFoundError
from src.ingest.pipeline import IngestionPipeline
from src.observability.logger import get_logger, setup_logger
from src.observability.metrics import MetricsCollector, start_metrics_server
from src.warehouse.client_repository import PostgresClientRepository
from src.warehouse.connection import DatabaseConnectionPool
from src.warehouse.repository import InMemoryClientRepository


logger = get_logger(__name__)


def process_command(args) -> int:
    """
    Execute one ingestion run.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    try:
        config = load_config(
            args.config,
            input_file=args.input,
            batch_size=args.batch_size,
        )
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.metrics_port:
        start_metrics_server(args.metrics_port)
        logger.info(f"Prometheus metrics exposed on port {args.metrics_port}")

    pool = None
    if args.dry_run:
        logger.info("DRY RUN MODE: records are kept in memory, nothing is written to the database")
        repository = InMemoryClientRepository()
    else:
        logger.info("Initializing database connection...")
        try:
            pool = DatabaseConnectionPool(
                host=args.db_host,
                port=args.db_port,
                database=args.db_name,
                user=args.db_user,
                password=args.db_password,
            )
            pool.open()
        except Exception as e:
            logger.error(f"Could not connect to the database: {e}", exc_info=True)
            return 1
        repository = PostgresClientRepository(pool)

    try:
        pipeline = IngestionPipeline(
            repository=repository,
            config=config,
            metrics=MetricsCollector(),
        )
        summary = pipeline.process_file()
    except InputFileNotFoundError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Error during ingestion: {e}", exc_info=True)
        return 1
    finally:
        if pool is not None:
            pool.close()

    logger.info("=" * 60)
    logger.info("PROCESSING COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Lines read: {summary.total_lines}")
    logger.info(f"Records persisted: {summary.processed_records}")
    logger.info(f"Records with errors: {summary.error_records}")
    logger.info(f"  rejected lines: {summary.rejected_lines}")
    logger.info(f"  duplicates in batch: {summary.internal_duplicates}")
    logger.info(f"  duplicates in database: {summary.storage_duplicates}")
    logger.info(f"  failed saves: {summary.failed_saves}")
    logger.info("=" * 60)

    if args.dry_run:
        logger.info("DRY RUN: No data was written to the database")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="client-ingest",
        description="Client flat file ingestion pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest a client file
  client-ingest process --input data/CLIENTES_IN_0425.dat

  # Use a bigger batch and a YAML configuration
  client-ingest process --input data/clients.dat --batch-size 1000 --config config/pipeline.yaml

  # Dry run (validate and deduplicate, don't write)
  client-ingest process --input data/clients.dat --dry-run
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Ingest a client file")
    process_parser.add_argument(
        "--input",
        default=None,
        help="Path to input file (default: pipeline.input_file from config)"
    )
    process_parser.add_argument(
        "--config",
        default=None,
        help="Path to pipeline YAML configuration file"
    )
    process_parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Records per batch (default: 200)"
    )
    process_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and deduplicate without writing to database"
    )
    process_parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port"
    )
    process_parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or INFO)"
    )

    # Database connection arguments (None falls back to DB_* env vars)
    process_parser.add_argument("--db-host", default=None, help="Database host")
    process_parser.add_argument("--db-port", type=int, default=None, help="Database port")
    process_parser.add_argument("--db-name", default=None, help="Database name")
    process_parser.add_argument("--db-user", default=None, help="Database user")
    process_parser.add_argument("--db-password", default=None, help="Database password")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.log_level:
        setup_logger(level=args.log_level)

    if args.command == "process":
        sys.exit(process_command(args))


if __name__ == "__main__":
    main()
