"""
CSV Loading

Reads the customer-feedback CSV into summarized FeedbackRecords.

Any problem with the file is fatal: a missing file, a header without the
expected columns, or a single malformed row aborts the whole load. Partial
data would silently skew the embeddings built from it.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from pydantic import ValidationError

from feedback_rag.ingestion.summarizer import summarize_records
from feedback_rag.types.records import CSV_COLUMNS, FeedbackRecord

logger = logging.getLogger(__name__)


class CSVFormatError(ValueError):
    """The CSV header does not match the feedback record columns."""


class RecordParseError(ValueError):
    """A data row could not be converted into a FeedbackRecord."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"Line {line_number}: {message}")


def _check_header(fieldnames: list[str] | None, path: Path) -> None:
    if not fieldnames:
        raise CSVFormatError(f"{path} has no header row")
    present = {name.strip() for name in fieldnames}
    missing = [column for column in CSV_COLUMNS if column not in present]
    if missing:
        raise CSVFormatError(f"{path} is missing columns: {', '.join(missing)}")


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"])
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def parse_rows(reader: csv.DictReader, path: Path) -> list[FeedbackRecord]:
    """
    Validate every data row of an open DictReader.

    Raises:
        CSVFormatError: Header is missing required columns
        RecordParseError: First malformed row (with its line number)
    """
    _check_header(reader.fieldnames, path)

    records: list[FeedbackRecord] = []
    for row in reader:
        if None in row:
            raise RecordParseError(reader.line_num, "row has more fields than the header")
        cleaned = {
            key.strip(): value.strip() if isinstance(value, str) else value
            for key, value in row.items()
        }
        try:
            records.append(FeedbackRecord.model_validate(cleaned))
        except ValidationError as e:
            raise RecordParseError(reader.line_num, _describe(e)) from e
    return records


def load_feedback_records(path: str | Path) -> list[FeedbackRecord]:
    """
    Load and summarize all records from a feedback CSV.

    Args:
        path: CSV file with CustomerID, Age, Gender, ... SatisfactionScore columns

    Returns:
        Records in file order, each with profile_summary populated

    Raises:
        FileNotFoundError: If the file doesn't exist
        CSVFormatError: If the header is malformed or the file is not UTF-8
        RecordParseError: If any row is malformed or unreadable as CSV
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Feedback data not found: {path}")

    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        try:
            records = parse_rows(reader, path)
        except UnicodeDecodeError as e:
            raise CSVFormatError(
                f"{path} is not valid UTF-8 text (byte offset {e.start})"
            ) from e
        except csv.Error as e:
            raise RecordParseError(reader.line_num, str(e)) from e

    logger.info(f"Loaded {len(records)} customer records from {path}")
    return summarize_records(records)
