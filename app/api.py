"""
FastAPI routes for transactions and CSV import.
Clean API layer following separation of concerns principle.
"""
import asyncio
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, File, HTTPException, Response, UploadFile

from core.config import get_settings
from core.db import get_db
from core.exceptions import (
    DataNotFoundError,
    FileProcessingError,
    ParsingError,
    TransactionImportException,
    ValidationError,
)
from core.logger import setup_logger
from core.repositories import CategoryRepository, TransactionRepository
from core.schema import (
    Balance,
    ImportResponse,
    Transaction,
    TransactionCreate,
    TransactionListResponse,
)
from services.import_service import ImportTransactionsService
from services.transaction_service import TransactionService

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables before serving requests."""
    get_db().init_db()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Transaction Import Service",
    description="Store financial transactions and import them from CSV files",
    version="1.0.0"
)


def get_transaction_service() -> TransactionService:
    db = get_db()
    return TransactionService(CategoryRepository(db), TransactionRepository(db), db)


def get_import_service() -> ImportTransactionsService:
    db = get_db()
    return ImportTransactionsService(CategoryRepository(db), TransactionRepository(db), db)


def to_http_exception(error: TransactionImportException) -> HTTPException:
    """Map domain errors onto HTTP status codes."""
    if isinstance(error, DataNotFoundError):
        status_code = 404
    elif isinstance(error, (ParsingError, ValidationError)):
        status_code = 400
    else:
        status_code = 500
    return HTTPException(
        status_code=status_code,
        detail={"message": error.message, "details": error.details}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "transaction_import",
        "version": "1.0.0"
    }


@app.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(service: TransactionService = Depends(get_transaction_service)):
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, service.list_transactions)


@app.get("/transactions/balance", response_model=Balance)
async def get_balance(service: TransactionService = Depends(get_transaction_service)):
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, service.get_balance)


@app.post("/transactions", response_model=Transaction, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service)
):
    loop = asyncio.get_event_loop()
    try:
        return await loop.run_in_executor(None, service.create_transaction, data)
    except TransactionImportException as e:
        logger.warning(f"Rejected transaction {data.title!r}: {e.message}")
        raise to_http_exception(e)


@app.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    service: TransactionService = Depends(get_transaction_service)
):
    loop = asyncio.get_event_loop()
    try:
        await loop.run_in_executor(None, service.delete_transaction, transaction_id)
    except TransactionImportException as e:
        raise to_http_exception(e)
    return Response(status_code=204)


def validate_file_extension(filename: str) -> None:
    """
    Validate file has correct extension.

    Args:
        filename: Name of file to validate

    Raises:
        HTTPException: If file extension is invalid
    """
    if not filename or not filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {filename}. Only .csv is supported."
        )


@app.post("/transactions/import", response_model=ImportResponse)
async def import_transactions(
    file: UploadFile = File(...),
    service: ImportTransactionsService = Depends(get_import_service)
):
    """
    Accept a CSV upload and import it.

    The uploaded copy is removed by the import on success and cleaned
    up here on failure.
    """
    settings = get_settings()
    logger.info(f"Received import file: {file.filename}")
    validate_file_extension(file.filename)

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Limit is {settings.max_upload_size_mb} MB."
        )

    upload_path = Path(settings.temp_storage_path) / f"{uuid.uuid4()}_{Path(file.filename).name}"

    try:
        upload_path.parent.mkdir(parents=True, exist_ok=True)
        with open(upload_path, "wb") as f:
            f.write(content)

        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(None, service.import_file, str(upload_path))

        return ImportResponse(
            imported=len(result.transactions),
            categories_created=len(result.created_categories),
            transactions=result.transactions
        )

    except TransactionImportException as e:
        logger.error(f"Import of {file.filename} failed: {e.message}")
        raise to_http_exception(e)

    except OSError as e:
        logger.error(f"Failed to store upload {file.filename}: {e}", exc_info=True)
        raise to_http_exception(
            FileProcessingError("Failed to store uploaded file", details={"error": str(e)})
        )

    finally:
        try:
            if upload_path.exists():
                upload_path.unlink()
                logger.debug(f"Cleaned up: {upload_path}")
        except OSError as cleanup_error:
            logger.warning(f"Failed to cleanup {upload_path}: {cleanup_error}")
