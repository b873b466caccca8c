"""
Helpers for reading heterogeneous invoice rows.

Uploaded rows come in two shapes: flat rows carrying one implicit line,
and nested rows holding their line items in a ``lines`` list. Rows are
normalized once into InvoiceRecord objects so the mapper, the rule
validator and the scorer all walk them the same way.

Value helpers never raise: anything that is not usable as the requested
kind of value is reported as absent (``None``).
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence


Row = Mapping[str, Any]

# Plain ASCII decimal or exponent notation; no digit separators
NUMERIC_TEXT = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")

LINES_KEY = "lines"
LINE_FIELD_PREFIX = "lines[]."


@dataclass(frozen=True)
class InvoiceRecord:
    """
    A row in uniform shape.

    Attributes:
        position: 1-based index of the row in the upload
        header: The row itself
        nested: True if the row carries a ``lines`` list
        line_items: Line item mappings; the row itself for flat rows
    """
    position: int
    header: Row
    nested: bool
    line_items: tuple[Row, ...] = field(default_factory=tuple)


def to_records(rows: Iterable[Any]) -> list[InvoiceRecord]:
    """Normalize rows into InvoiceRecord objects, skipping non-mapping entries."""
    records: list[InvoiceRecord] = []
    for position, row in enumerate(rows or [], start=1):
        if not isinstance(row, Mapping):
            continue
        lines = row.get(LINES_KEY)
        if isinstance(lines, (list, tuple)):
            items = tuple(line for line in lines if isinstance(line, Mapping))
            records.append(InvoiceRecord(position, row, True, items))
        else:
            records.append(InvoiceRecord(position, row, False, (row,)))
    return records


# ============================================================================
# Value Helpers
# ============================================================================

def is_blank(value: Any) -> bool:
    """True for ``None`` and the empty string."""
    return value is None or (isinstance(value, str) and value == "")


def as_number(value: Any) -> Optional[float]:
    """
    Interpret a value as a finite number.

    Accepts ints, floats and numeric strings (surrounding whitespace is
    ignored). Booleans, blanks, containers, NaN, infinities and number
    spellings such as ``1_000`` or non-ASCII digits are absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not NUMERIC_TEXT.fullmatch(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def as_text(value: Any) -> Optional[str]:
    """
    Interpret a scalar value as text.

    Strings are returned as-is and numbers in their usual textual form
    (ingestion turns numeric-looking cells such as tax numbers into
    numbers). Booleans, containers, NaN and infinities are absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return None


def resolve(
    row: Any,
    aliases: Sequence[str],
    coerce: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """
    Look up the first usable value among ``aliases``.

    Aliases are tried in order. A value is usable when it is present and
    not ``None`` and, if ``coerce`` is given, coerces to something other
    than ``None``. Returns the (coerced) value, or ``None`` when no alias
    yields one.
    """
    if not isinstance(row, Mapping):
        return None
    for alias in aliases:
        value = row.get(alias)
        if value is None:
            continue
        if coerce is not None:
            value = coerce(value)
            if value is None:
                continue
        return value
    return None


def resolve_number(row: Any, aliases: Sequence[str]) -> Optional[float]:
    return resolve(row, aliases, as_number)


def resolve_text(row: Any, aliases: Sequence[str]) -> Optional[str]:
    return resolve(row, aliases, as_text)


# ============================================================================
# Field Discovery
# ============================================================================

def collect_field_names(records: Iterable[InvoiceRecord]) -> list[str]:
    """
    Get every field name present in the data, once each, in first-seen order.

    Line item keys of nested rows are reported as ``lines[].<key>``.
    """
    names: dict[str, None] = {}
    for record in records:
        for key in record.header:
            names.setdefault(str(key), None)
        if record.nested:
            for line in record.line_items:
                for key in line:
                    names.setdefault(f"{LINE_FIELD_PREFIX}{key}", None)
    return list(names)


def sample_values(records: Iterable[InvoiceRecord], field_name: str, limit: int) -> list[Any]:
    """
    Collect up to ``limit`` non-blank values of a data field.

    ``lines[].`` fields are sampled from the first line item of each
    nested row.
    """
    samples: list[Any] = []
    is_line_field = field_name.startswith(LINE_FIELD_PREFIX)
    key = field_name[len(LINE_FIELD_PREFIX):] if is_line_field else field_name

    for record in records:
        if len(samples) >= limit:
            break
        if is_line_field:
            if not record.nested or not record.line_items:
                continue
            value = record.line_items[0].get(key)
        else:
            value = record.header.get(key)
        if not is_blank(value):
            samples.append(value)
    return samples


def count_lines(records: Iterable[InvoiceRecord]) -> int:
    """Count line items; a flat row counts as one line."""
    return sum(len(record.line_items) if record.nested else 1 for record in records)
