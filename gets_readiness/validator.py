"""
Validation engine for GETS business rules.

Runs every registered rule over a row set and collects one finding per
rule, in registry order.
"""

from typing import Any, Iterable, Optional, Sequence

from .config import logger
from .rules import VALIDATION_RULES, ValidationRule
from .rows import to_records
from .schemas import RuleFinding


def validate_rules(
    rows: Iterable[Any],
    rules: Optional[Sequence[ValidationRule]] = None,
) -> list[RuleFinding]:
    """
    Validate rows against all business rules.

    Every rule runs regardless of earlier failures, so the result always
    holds one finding per rule in registry order. Empty input passes
    every rule.

    Args:
        rows: Parsed invoice rows, flat or with nested ``lines``
        rules: Optional rules to apply (defaults to VALIDATION_RULES)

    Returns:
        List of RuleFinding, one per rule
    """
    if rules is None:
        rules = VALIDATION_RULES

    records = to_records(rows)
    findings = [rule.check(records) for rule in rules]

    failed = [f.rule for f in findings if not f.ok]
    logger.debug(f"Checked {len(records)} rows against {len(rules)} rules, failed: {failed or 'none'}")

    return findings


def failed_rules(findings: Iterable[RuleFinding]) -> list[RuleFinding]:
    """Get the findings that did not pass."""
    return [finding for finding in findings if not finding.ok]
