"""
Field mapper for measuring GETS coverage.

Matches the field names found in uploaded rows against the GETS catalogue:
- Exact matches after name normalization
- Close matches by edit-distance similarity or name containment,
  gated on the data field's inferred value type
- Everything else is reported as missing
"""

import re
from typing import Any, Iterable, Optional, Sequence

from .config import (
    CLOSE_MATCH_THRESHOLD,
    CONTAINMENT_CONFIDENCE,
    TYPE_SAMPLE_SIZE,
    logger,
)
from .gets_schema import GETS_SCHEMA
from .rows import InvoiceRecord, as_number, collect_field_names, sample_values, to_records
from .schemas import CoverageResult, FieldMapping, FieldType, SchemaField
from .scoring import round_half_up


BRACKET_SEGMENT = re.compile(r"\[.*?\]")
SEPARATORS = re.compile(r"[_\s\-.]")
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Inferred value types each declared GETS type accepts
COMPATIBLE_TYPES: dict[FieldType, frozenset[str]] = {
    FieldType.STRING: frozenset({"string", "text"}),
    FieldType.NUMBER: frozenset({"number", "integer", "float", "decimal"}),
    FieldType.DATE: frozenset({"date", "datetime", "string"}),
    FieldType.ENUM: frozenset({"string", "text"}),
}


# ============================================================================
# Name Comparison
# ============================================================================

def normalize_field_name(name: str) -> str:
    """
    Reduce a field name to its comparable form.

    Lower-cases, drops bracket segments such as ``[]`` and removes
    separators, so ``seller.trn`` and ``Seller_TRN`` both become
    ``sellertrn``.
    """
    return SEPARATORS.sub("", BRACKET_SEGMENT.sub("", name.lower()))


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(min(
                current[j - 1] + 1,
                previous[j] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity in [0, 1]; two empty strings are identical."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def names_overlap(a: str, b: str) -> bool:
    """True if one normalized name contains the other; an empty name is contained in any."""
    return a in b or b in a


# ============================================================================
# Type Inference
# ============================================================================

def infer_field_type(values: Iterable[Any]) -> str:
    """
    Infer a data field's type from sample values.

    Blank values are ignored. All numeric → "number"; otherwise any
    ``YYYY-MM-DD`` string → "date"; otherwise (or with no samples) "string".
    """
    samples = [v for v in values if v is not None and v != ""][:TYPE_SAMPLE_SIZE]
    if not samples:
        return "string"
    if all(as_number(v) is not None for v in samples):
        return "number"
    if any(isinstance(v, str) and ISO_DATE.match(v) for v in samples):
        return "date"
    return "string"


def are_types_compatible(declared: FieldType, inferred: str) -> bool:
    return inferred in COMPATIBLE_TYPES.get(declared, frozenset())


# ============================================================================
# Mapping
# ============================================================================

def _best_candidate(
    field: SchemaField,
    normalized_target: str,
    candidates: Sequence[tuple[str, str]],
    inferred_types: dict[str, str],
) -> Optional[FieldMapping]:
    best: Optional[FieldMapping] = None

    for name, normalized in candidates:
        if not are_types_compatible(field.type, inferred_types[name]):
            continue
        confidence = similarity(normalized_target, normalized)
        if names_overlap(normalized_target, normalized):
            confidence = max(confidence, CONTAINMENT_CONFIDENCE)
        # Ties are judged against the stored, already rounded confidence
        if best is None or confidence > best.confidence:
            best = FieldMapping(
                target=field.path,
                candidate=name,
                confidence=round_half_up(confidence, 2),
            )
    return best


def map_fields(
    rows: Iterable[Any],
    schema: Sequence[SchemaField] = GETS_SCHEMA,
) -> CoverageResult:
    """
    Classify every schema field as matched, close or missing.

    Args:
        rows: Parsed invoice rows, flat or with nested ``lines``
        schema: Canonical fields to measure against (defaults to GETS v0.1)

    Returns:
        CoverageResult in which each schema path appears exactly once
    """
    records: list[InvoiceRecord] = to_records(rows)
    if not records:
        return CoverageResult(matched=[], close=[], missing=[f.path for f in schema])

    data_fields = collect_field_names(records)
    candidates = [(name, normalize_field_name(name)) for name in data_fields]
    exact = {normalized for _, normalized in candidates}
    inferred_types = {
        name: infer_field_type(sample_values(records, name, TYPE_SAMPLE_SIZE))
        for name in data_fields
    }

    matched: list[str] = []
    close: list[FieldMapping] = []
    missing: list[str] = []

    for field in schema:
        normalized_target = normalize_field_name(field.path)
        if normalized_target in exact:
            matched.append(field.path)
            continue

        best = _best_candidate(field, normalized_target, candidates, inferred_types)
        if best is not None and best.confidence > CLOSE_MATCH_THRESHOLD:
            close.append(best)
        else:
            missing.append(field.path)

    logger.debug(
        f"Mapped {len(data_fields)} data fields: {len(matched)} matched, "
        f"{len(close)} close, {len(missing)} missing"
    )
    return CoverageResult(matched=matched, close=close, missing=missing)
