"""
Spreadsheet parser for import uploads.

Turns an uploaded CSV or Excel file into a list of source records
(one dict per row, keyed by the file's column headers). Every cell is
read as text; numeric and flag conversion happens later, per field,
in services.row_transform_service.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import PurePath
from typing import Any, Iterable, Optional
import structlog

import pandas as pd

from exceptions import FileParseError

logger = structlog.get_logger(__name__)

CSV_EXTENSIONS = {".csv", ".txt"}
EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}

# Tried in order for CSV files
CSV_ENCODINGS = ("utf-8-sig", "latin-1")


@dataclass
class ParsedUpload:
    """Result of parsing an upload."""
    filename: str
    columns: list[str] = field(default_factory=list)
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.records)


def parse_upload(filename: str, content: bytes) -> ParsedUpload:
    """
    Parse an uploaded spreadsheet.

    Args:
        filename: Original filename; its extension selects the reader
        content: Raw file bytes

    Returns:
        ParsedUpload with header columns and one record per data row

    Raises:
        FileParseError: Unsupported extension, unreadable or empty file
    """
    extension = PurePath(filename or "").suffix.lower()
    logger.info("parsing_upload", filename=filename, extension=extension, size=len(content))

    if not content:
        raise FileParseError("File is empty", details={"filename": filename})

    if extension in CSV_EXTENSIONS:
        df = _read_csv(filename, content)
    elif extension in EXCEL_EXTENSIONS:
        df = _read_excel(filename, content)
    else:
        raise FileParseError(
            f"Unsupported file type: {extension or 'none'}",
            details={
                "filename": filename,
                "supported": sorted(CSV_EXTENSIONS | EXCEL_EXTENSIONS),
            },
        )

    df.columns = [str(col).strip() for col in df.columns]
    df = df.fillna("")

    # Drop rows where every cell is blank (trailing rows in Excel exports)
    if len(df) > 0:
        blank = df.apply(lambda row: all(str(v).strip() == "" for v in row), axis=1)
        df = df[~blank]

    records = df.to_dict(orient="records")
    parsed = ParsedUpload(filename=filename, columns=list(df.columns), records=records)

    logger.info(
        "upload_parsed",
        filename=filename,
        columns=len(parsed.columns),
        rows=parsed.row_count,
    )
    return parsed


def _read_csv(filename: str, content: bytes) -> pd.DataFrame:
    """Read CSV with delimiter sniffing, falling back through encodings."""
    last_error: Optional[Exception] = None

    for encoding in CSV_ENCODINGS:
        try:
            return pd.read_csv(
                BytesIO(content),
                sep=None,
                engine="python",
                dtype=str,
                keep_default_na=False,
                encoding=encoding,
            )
        except UnicodeDecodeError as e:
            last_error = e
            continue
        except Exception as e:
            last_error = e
            break

    logger.error("csv_read_failed", filename=filename, error=str(last_error))
    raise FileParseError(
        "Failed to read CSV file",
        details={"filename": filename, "original_error": str(last_error)},
    )


def _read_excel(filename: str, content: bytes) -> pd.DataFrame:
    """Read the first sheet of an Excel workbook."""
    try:
        return pd.read_excel(
            BytesIO(content),
            sheet_name=0,
            engine="openpyxl",
            dtype=str,
            keep_default_na=False,
        )
    except Exception as e:
        logger.error("excel_read_failed", filename=filename, error=str(e))
        raise FileParseError(
            "Failed to read Excel file",
            details={"filename": filename, "original_error": str(e)},
        )


def collect_columns(records: Iterable[dict[str, Any]]) -> list[str]:
    """Union of record keys, in first-seen order."""
    columns: dict[str, None] = {}
    for record in records:
        for key in record:
            columns.setdefault(key, None)
    return list(columns)
