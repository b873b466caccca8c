"""
Readiness scoring.

Combines the field mapper's coverage, the rule findings, raw data quality
and the posture questionnaire into four category scores and one weighted
overall score, each an integer between 0 and 100.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Sequence, Union

from .config import (
    DATA_SCORE_ROW_LIMIT,
    DEFAULT_FIELD_WEIGHT,
    FIELD_PREFIX_WEIGHTS,
    READINESS_LEVELS,
    SCORE_WEIGHTS,
)
from .gets_schema import GETS_SCHEMA, required_fields
from .rows import as_number, is_blank, to_records
from .schemas import CoverageResult, Questionnaire, RuleFinding, SchemaField, Scores


DATE_LIKE_VALUE = re.compile(r"^(\d{4}-\d{2}-\d{2}|\d{4}/\d{2}/\d{2})")
NUMERIC_NAME_HINTS = ("total", "amount", "price", "qty")


def round_half_up(value: float, ndigits: int = 0) -> Union[int, float]:
    """
    Round to ``ndigits`` decimals with halves going up (2.5 -> 3).

    Unlike the built-in ``round`` there is no rounding half to even.
    """
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5)
    if ndigits == 0:
        return int(rounded)
    return rounded / factor


def _clamp(score: int) -> int:
    return max(0, min(100, score))


# ============================================================================
# Category Scores
# ============================================================================

def _slot_is_valid(name: str, value: Any) -> bool:
    if is_blank(value):
        return False
    if "date" in name or "Date" in name:
        return isinstance(value, str) and bool(DATE_LIKE_VALUE.match(value))
    if any(hint in name for hint in NUMERIC_NAME_HINTS):
        return as_number(value) is not None
    return True


def calculate_data_score(rows: Sequence[Any]) -> int:
    """
    Share of populated, plausibly typed field slots in the first rows.

    Header fields named like dates must hold a ``YYYY-MM-DD`` or
    ``YYYY/MM/DD`` string, and fields named like amounts must be numeric.
    Line item fields only need to be non-blank.
    """
    records = to_records(list(rows or [])[:DATA_SCORE_ROW_LIMIT])
    total = 0
    successful = 0

    for record in records:
        for name, value in record.header.items():
            total += 1
            if _slot_is_valid(str(name), value):
                successful += 1
        if record.nested:
            for line in record.line_items:
                for value in line.values():
                    total += 1
                    if not is_blank(value):
                        successful += 1

    if total == 0:
        return 0
    return _clamp(round_half_up(successful / total * 100))


def field_weight(path: str) -> float:
    """Coverage weight of a schema path; the first matching prefix wins."""
    for prefix, weight in FIELD_PREFIX_WEIGHTS:
        if path.startswith(prefix):
            return weight
    return DEFAULT_FIELD_WEIGHT


def calculate_coverage_score(
    coverage: CoverageResult,
    schema: Sequence[SchemaField] = GETS_SCHEMA,
) -> int:
    """
    Weighted share of required schema fields found in the data.

    Exact matches earn their full weight, close matches their weight
    scaled by confidence.
    """
    required = required_fields(schema)
    if not required:
        return 100

    matched = set(coverage.matched)
    total_weight = 0.0
    earned = 0.0

    for field in required:
        weight = field_weight(field.path)
        total_weight += weight
        if field.path in matched:
            earned += weight
            continue
        close = coverage.close_match(field.path)
        if close is not None:
            earned += weight * close.confidence

    return _clamp(round_half_up(earned / total_weight * 100))


def calculate_rules_score(rule_findings: Sequence[RuleFinding]) -> int:
    """Share of passed rules."""
    if not rule_findings:
        return 0
    passed = sum(1 for finding in rule_findings if finding.ok)
    return _clamp(round_half_up(passed / len(rule_findings) * 100))


def calculate_posture_score(questionnaire: Union[Questionnaire, Mapping, None]) -> int:
    """Share of positive questionnaire answers."""
    if questionnaire is None:
        questionnaire = Questionnaire()
    elif isinstance(questionnaire, Mapping):
        questionnaire = Questionnaire.model_validate(questionnaire)

    answers = [questionnaire.webhooks, questionnaire.sandbox_env, questionnaire.retries]
    positive = sum(1 for answer in answers if answer)
    return _clamp(round_half_up(positive / len(answers) * 100))


# ============================================================================
# Overall Score
# ============================================================================

def calculate_scores(
    rows: Sequence[Any],
    coverage: CoverageResult,
    rule_findings: Sequence[RuleFinding],
    questionnaire: Union[Questionnaire, Mapping, None],
    schema: Sequence[SchemaField] = GETS_SCHEMA,
) -> Scores:
    """
    Calculate all category scores and the overall readiness score.

    Args:
        rows: Parsed invoice rows
        coverage: Field mapper output for the same rows
        rule_findings: Rule validator output for the same rows
        questionnaire: Posture answers; missing answers count as ``False``
        schema: Catalogue the coverage was measured against

    Returns:
        Scores with the overall score rounded once from the weighted sum
    """
    data = calculate_data_score(rows)
    coverage_score = calculate_coverage_score(coverage, schema)
    rules = calculate_rules_score(rule_findings)
    posture = calculate_posture_score(questionnaire)

    overall = round_half_up(
        data * SCORE_WEIGHTS["data"]
        + coverage_score * SCORE_WEIGHTS["coverage"]
        + rules * SCORE_WEIGHTS["rules"]
        + posture * SCORE_WEIGHTS["posture"]
    )

    return Scores(
        data=data,
        coverage=coverage_score,
        rules=rules,
        posture=posture,
        overall=_clamp(overall),
    )


def readiness_label(overall: int) -> str:
    """Map an overall score to High, Medium or Low."""
    for threshold, label in READINESS_LEVELS:
        if overall >= threshold:
            return label
    return READINESS_LEVELS[-1][1]
