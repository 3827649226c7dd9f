"""
Main entry point for the transaction import service.

`serve` starts the FastAPI server, `import` loads a CSV file from the
command line.
"""
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import Dict, List

# Add project root to Python path for module imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

from core.config import get_settings
from core.db import get_db
from core.exceptions import TransactionImportException
from core.logger import setup_logger
from core.repositories import CategoryRepository, TransactionRepository
from core.schema import Transaction
from services.import_service import ImportTransactionsService

logger = setup_logger(__name__)


def serve(args) -> None:
    """Start the API server."""
    settings = get_settings()
    get_db().init_db()

    import uvicorn
    from app.api import app

    logger.info(f"Starting {settings.app_name}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Database: {settings.database_path}")
    logger.info(f"Upload Storage: {settings.temp_storage_path}")
    logger.info(f"Starting server on {settings.host}:{settings.port}")

    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower()
    )


def count_by_type(transactions: List[Transaction]) -> Dict[str, int]:
    """Number of transactions per type."""
    counts: Dict[str, int] = {}
    for transaction in transactions:
        counts[transaction.type] = counts.get(transaction.type, 0) + 1
    return counts


def import_file(args) -> None:
    """Import a CSV file and print a short summary."""
    db = get_db()
    db.init_db()
    service = ImportTransactionsService(CategoryRepository(db), TransactionRepository(db), db)

    result = service.import_file(args.path)
    counts = count_by_type(result.transactions)

    print(f"Imported {len(result.transactions)} transactions from {args.path}")
    for kind, count in sorted(counts.items()):
        print(f"  {kind}: {count}")
    print(f"New categories: {len(result.created_categories)}")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Transaction import service")
    subparsers = parser.add_subparsers(title="commands", dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", type=str, help="Host to bind (defaults to HOST)")
    serve_parser.add_argument("--port", type=int, help="Port to bind (defaults to PORT)")
    serve_parser.set_defaults(func=serve)

    import_parser = subparsers.add_parser("import", help="Import a CSV file; the file is deleted afterwards")
    import_parser.add_argument("path", type=str, help="Path to a title,type,value,category CSV file")
    import_parser.set_defaults(func=import_file)

    return parser


def main(argv=None):
    """Main application entry point."""
    _env_file = PROJECT_ROOT / ".env"
    if _env_file.exists():
        load_dotenv(_env_file)

    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        sys.exit(2)

    try:
        args.func(args)

    except TransactionImportException as e:
        logger.error(f"{e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
