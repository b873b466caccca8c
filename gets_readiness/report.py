"""
Readiness report assembly.

This module runs the field mapper, the rule validator and the scorer over
one upload and folds their results into a ReadinessReport together with a
human-readable gaps list.
"""

import time
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Sequence, Union

from .config import MAX_ROWS, RuleName, logger
from .mapper import map_fields
from .rows import count_lines, to_records
from .schemas import (
    CoverageResult,
    Questionnaire,
    ReadinessReport,
    ReportMeta,
    RuleFinding,
)
from .scoring import calculate_scores, readiness_label
from .validator import validate_rules


def describe_failure(finding: RuleFinding) -> str:
    """Gap message for a failed rule."""
    if finding.rule == RuleName.CURRENCY_ALLOWED.value:
        return f"Invalid currency {finding.value}"
    if finding.rule == RuleName.DATE_ISO.value:
        return f"Invalid date format: {finding.value}"
    if finding.rule == RuleName.LINE_MATH.value:
        return f"Line math error on row {finding.example_line}"
    if finding.rule == RuleName.TOTALS_BALANCE.value:
        return "Total balance calculation error"
    if finding.rule == RuleName.TRN_PRESENT.value:
        return "Missing TRN information"
    return f"Rule {finding.rule} failed"


def derive_gaps(coverage: CoverageResult, rule_findings: Iterable[RuleFinding]) -> list[str]:
    """
    List what stands between the data and GETS readiness.

    Missing fields come first in schema order, then failed rules in rule
    order.
    """
    gaps = [f"Missing {path}" for path in coverage.missing]
    gaps.extend(describe_failure(f) for f in rule_findings if not f.ok)
    return gaps


def analyze_rows(
    rows: Sequence[Any],
    questionnaire: Union[Questionnaire, Mapping, None] = None,
    country: Optional[str] = None,
    erp: Optional[str] = None,
) -> ReadinessReport:
    """
    Analyse a batch of invoice rows for GETS readiness.

    Only the first MAX_ROWS rows are analysed.

    Args:
        rows: Parsed invoice rows, flat or with nested ``lines``
        questionnaire: Posture answers
        country: Country the invoices were issued in, if known
        erp: Source ERP system, if known

    Returns:
        ReadinessReport with scores, coverage, rule findings and gaps
    """
    if questionnaire is None:
        questionnaire = Questionnaire()
    elif isinstance(questionnaire, Mapping):
        questionnaire = Questionnaire.model_validate(questionnaire)

    rows = list(rows)[:MAX_ROWS]
    logger.info(f"Analysing {len(rows)} rows for GETS readiness")
    started = time.perf_counter()

    coverage = map_fields(rows)
    rule_findings = validate_rules(rows)
    scores = calculate_scores(rows, coverage, rule_findings, questionnaire)

    report = ReadinessReport(
        scores=scores,
        readiness=readiness_label(scores.overall),
        coverage=coverage,
        rule_findings=rule_findings,
        gaps=derive_gaps(coverage, rule_findings),
        meta=ReportMeta(
            rows_parsed=len(rows),
            lines_total=count_lines(to_records(rows)),
            country=country or "Unknown",
            erp=erp or "Unknown",
        ),
    )

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"Analysis completed in {elapsed_ms:.1f}ms: overall {scores.overall} ({report.readiness})"
    )
    return report


def format_report_text(report: ReadinessReport) -> str:
    """
    Format a ReadinessReport as human-readable text for CLI output.

    Args:
        report: ReadinessReport to format

    Returns:
        Formatted string for display
    """
    scores = report.scores
    lines = [
        "=" * 50,
        "GETS READINESS REPORT",
        "=" * 50,
        f"Overall score:   {scores.overall} ({report.readiness})",
        f"  Data:          {scores.data}",
        f"  Coverage:      {scores.coverage}",
        f"  Rules:         {scores.rules}",
        f"  Posture:       {scores.posture}",
        "",
        f"Rows parsed:     {report.meta.rows_parsed}",
        f"Lines total:     {report.meta.lines_total}",
        "",
        f"Fields matched:  {len(report.coverage.matched)}",
        f"Close matches:   {len(report.coverage.close)}",
        f"Fields missing:  {len(report.coverage.missing)}",
        "",
    ]

    if report.coverage.close:
        lines.append("Close Matches:")
        lines.append("-" * 40)
        for mapping in report.coverage.close:
            lines.append(f"  {mapping.target} <- {mapping.candidate} ({mapping.confidence:.2f})")
        lines.append("")

    lines.append("Rules:")
    lines.append("-" * 40)
    for finding in report.rule_findings:
        lines.append(f"  [{'PASS' if finding.ok else 'FAIL'}] {finding.rule}")
    lines.append("")

    if report.gaps:
        lines.append("Gaps:")
        lines.append("-" * 40)
        for gap in report.gaps:
            lines.append(f"  - {gap}")
        lines.append("")

    lines.append("=" * 50)

    return "\n".join(lines)
