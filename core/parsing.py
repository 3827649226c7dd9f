"""
CSV file parsing for transaction imports.
Expected layout: title,type,value,category with a header on the first line.
"""
from pathlib import Path
from typing import Any, List

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import DataNotFoundError, FileProcessingError, ParsingError, ValidationError
from core.logger import setup_logger
from core.schema import CsvTransaction

logger = setup_logger(__name__)

CSV_COLUMNS: List[str] = ["title", "type", "value", "category"]
REQUIRED_COLUMNS: List[str] = ["title", "type", "value"]


def clean_cell(value: Any) -> str:
    """Return a trimmed string for a raw cell; missing cells become ''."""
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def read_csv_frame(
    file_path: str,
    from_line: int = 2,
    encoding: str = "utf-8",
    delimiter: str = ","
) -> pd.DataFrame:
    """
    Read the raw CSV as strings with exactly the expected four columns.

    Args:
        file_path: Path to CSV file
        from_line: 1-based line number of the first data row
        encoding: File encoding
        delimiter: Field delimiter

    Returns:
        DataFrame with columns title, type, value, category (cells untrimmed)
    """
    # Width is pinned to the four columns: short rows are padded by pandas,
    # wider rows are cut back by the bad-line handler
    try:
        return pd.read_csv(
            file_path,
            header=None,
            names=CSV_COLUMNS,
            index_col=False,
            skiprows=from_line - 1,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            sep=delimiter,
            encoding=encoding,
            engine="python",
            on_bad_lines=lambda cells: cells[:len(CSV_COLUMNS)],
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=CSV_COLUMNS)


def parse_csv_file(
    file_path: str,
    from_line: int = 2,
    encoding: str = "utf-8",
    delimiter: str = ","
) -> List[CsvTransaction]:
    """
    Parse a transactions CSV file into validated rows.

    Rows with an empty title, type or value are skipped. An empty category
    label is kept as ''.

    Args:
        file_path: Path to CSV file
        from_line: 1-based line number of the first data row (2 skips the header)
        encoding: File encoding
        delimiter: Field delimiter

    Returns:
        List of accepted rows in file order

    Raises:
        DataNotFoundError: If file doesn't exist
        FileProcessingError: If file cannot be read
        ParsingError: If the CSV structure is invalid
        ValidationError: If an accepted row has an unknown type or non-numeric value
    """
    path = Path(file_path)
    if not path.is_file():
        raise DataNotFoundError(
            f"File not found: {file_path}",
            details={"file_path": str(file_path)}
        )

    logger.info(f"Parsing transactions from {path.name} (from_line={from_line})")

    try:
        df = read_csv_frame(str(path), from_line=from_line, encoding=encoding, delimiter=delimiter)
    except OSError as e:
        raise FileProcessingError(
            f"Cannot read file: {path.name}",
            details={"file_path": str(file_path), "error": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to parse {file_path}: {str(e)}")
        raise ParsingError(
            "Invalid CSV format for transactions",
            details={"file_path": str(file_path), "error": str(e)}
        )

    rows: List[CsvTransaction] = []
    skipped = 0
    for position, raw in enumerate(df.itertuples(index=False)):
        row_number = from_line + position
        cells = {column: clean_cell(cell) for column, cell in zip(CSV_COLUMNS, raw)}

        if not all(cells[column] for column in REQUIRED_COLUMNS):
            logger.debug(f"Skipping incomplete row {row_number}: {cells}")
            skipped += 1
            continue

        try:
            rows.append(CsvTransaction(**cells))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid transaction on row {row_number}",
                details={
                    "file_path": str(file_path),
                    "row": row_number,
                    "errors": [err["msg"] for err in e.errors()],
                }
            )

    logger.info(f"Accepted {len(rows)} rows from {path.name} ({skipped} skipped)")
    return rows


def collect_category_titles(rows: List[CsvTransaction]) -> List[str]:
    """Category label of every row, in row order, duplicates included."""
    return [row.category for row in rows]
