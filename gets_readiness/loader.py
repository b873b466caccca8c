"""
Row loading for uploaded invoice exports.

Turns CSV or JSON text into the list of row mappings the analyzer works
on. CSV cells that look numeric are converted to numbers, and only the
first MAX_ROWS rows are kept.
"""

import csv
import io
import json
import math
import re
from pathlib import Path
from typing import Any, Optional

from .config import MAX_ROWS, MAX_UPLOAD_SIZE_MB, logger
from .rows import NUMERIC_TEXT


INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


class RowLoadError(ValueError):
    """Raised when uploaded content cannot be turned into rows."""


# ============================================================================
# Format Detection
# ============================================================================

def looks_like_json(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith("[") or stripped.startswith("{")


def looks_like_csv(text: str, filename: Optional[str] = None) -> bool:
    """CSV if named so, or if the first line is comma separated."""
    if filename and filename.lower().endswith(".csv"):
        return True
    stripped = text.strip()
    return "," in stripped.split("\n", 1)[0]


# ============================================================================
# Parsing
# ============================================================================

def coerce_cell(value: Optional[str]) -> Any:
    """Convert a numeric-looking CSV cell to int or float; keep others as text."""
    if value is None:
        return ""
    text = value.strip()
    if not text:
        return value
    if INTEGER_TEXT.fullmatch(text):
        return int(text)
    if not NUMERIC_TEXT.fullmatch(text):
        return value
    number = float(text)
    return number if math.isfinite(number) else value


def parse_csv(text: str) -> list[dict[str, Any]]:
    """Parse CSV text with a header row into row dicts."""
    reader = csv.DictReader(io.StringIO(text.strip()))
    if not reader.fieldnames:
        raise RowLoadError("CSV content has no header row")

    rows = []
    try:
        for record in reader:
            row = {key: coerce_cell(value) for key, value in record.items() if key is not None}
            if any(value != "" for value in row.values()):
                rows.append(row)
    except csv.Error as e:
        raise RowLoadError(f"CSV parsing failed: {e}") from e
    return rows


def parse_json(text: str) -> list[dict[str, Any]]:
    """Parse a JSON array of objects, or a single object, into row dicts."""
    parsed = json.loads(text)
    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        raise RowLoadError("JSON content must be an object or an array of objects")
    for index, row in enumerate(parsed, start=1):
        if not isinstance(row, dict):
            raise RowLoadError(f"JSON entry {index} is not an object")
    return parsed


def parse_rows(text: str, filename: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Parse uploaded text as JSON or CSV.

    JSON is tried first unless the content is clearly CSV; JSON that fails
    to parse falls back to CSV when it looks tabular.

    Args:
        text: Uploaded file content
        filename: Original file name, used as a format hint

    Returns:
        At most MAX_ROWS row dicts

    Raises:
        RowLoadError: If the content is neither valid JSON nor CSV
    """
    if not text or not text.strip():
        raise RowLoadError("Upload is empty")

    is_json = looks_like_json(text)
    is_csv = not is_json and looks_like_csv(text, filename)

    if is_csv:
        logger.info(f"Parsing {filename or 'upload'} as CSV")
        rows = parse_csv(text)
    else:
        try:
            rows = parse_json(text)
            logger.info(f"Parsed {filename or 'upload'} as JSON")
        except json.JSONDecodeError as e:
            if "," in text and "\n" in text.strip():
                logger.info("JSON parsing failed, trying CSV")
                rows = parse_csv(text)
            else:
                raise RowLoadError(f"Invalid JSON format: {e}") from e

    if len(rows) > MAX_ROWS:
        logger.info(f"Truncating {len(rows)} rows to the first {MAX_ROWS}")
    return rows[:MAX_ROWS]


def load_rows(path: Path) -> list[dict[str, Any]]:
    """
    Read and parse an invoice export from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        RowLoadError: If the file is too large or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    max_size = MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if path.stat().st_size > max_size:
        raise RowLoadError(f"File too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.")

    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise RowLoadError(f"File is not UTF-8 text: {e}") from e

    return parse_rows(text, path.name)
