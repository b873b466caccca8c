"""
Tests for the scoring module.
"""

import pytest

from gets_readiness.gets_schema import GETS_SCHEMA, required_fields
from gets_readiness.schemas import (
    CoverageResult,
    FieldMapping,
    FieldType,
    Questionnaire,
    RuleFinding,
    SchemaField,
)
from gets_readiness.scoring import (
    calculate_coverage_score,
    calculate_data_score,
    calculate_posture_score,
    calculate_rules_score,
    calculate_scores,
    field_weight,
    readiness_label,
    round_half_up,
)


RULES = ["TOTALS_BALANCE", "LINE_MATH", "DATE_ISO", "CURRENCY_ALLOWED", "TRN_PRESENT"]


def _findings(passed: int) -> list[RuleFinding]:
    return [RuleFinding(rule=name, ok=i < passed) for i, name in enumerate(RULES)]


# ============================================================================
# Rounding
# ============================================================================

class TestRoundHalfUp:
    """Tests for half-up rounding."""

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(66.5) == 67

    def test_returns_int(self):
        assert isinstance(round_half_up(12.2), int)

    def test_decimals(self):
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(0.5625, 2) == 0.56


# ============================================================================
# Category Scores
# ============================================================================

class TestDataScore:
    """Tests for the data quality score."""

    def test_no_rows(self):
        assert calculate_data_score([]) == 0

    def test_rows_without_fields(self):
        assert calculate_data_score([{}, {}]) == 0

    def test_mixed_slots(self):
        row = {"inv_no": "1", "issue_date": "2024-01-15", "total": "abc", "note": ""}
        assert calculate_data_score([row]) == 50

    def test_date_formats(self):
        assert calculate_data_score([{"issue_date": "2024/01/15"}]) == 100
        assert calculate_data_score([{"issue_date": "15/01/2024"}]) == 0
        assert calculate_data_score([{"dueDate": 20240115}]) == 0

    def test_numeric_names(self):
        assert calculate_data_score([{"vat_amount": "5.00", "unit_price": 10}]) == 100
        assert calculate_data_score([{"qty": "two"}]) == 0

    def test_nested_lines_only_need_values(self):
        row = {"lines": [{"qty": "", "line_total": "n/a"}]}
        # header "lines" slot plus two line slots, one of them blank
        assert calculate_data_score([row]) == 67

    def test_only_first_200_rows(self):
        rows = [{"a": "x"}] * 200 + [{"a": ""}] * 50
        assert calculate_data_score(rows) == 100


class TestCoverageScore:
    """Tests for the weighted coverage score."""

    def test_close_match_example(self):
        schema = [SchemaField(path="invoice.total_incl_vat", type=FieldType.NUMBER, required=True)]
        coverage = CoverageResult(
            close=[FieldMapping(target="invoice.total_incl_vat", candidate="grand", confidence=0.75)]
        )
        assert calculate_coverage_score(coverage, schema) == 75

    def test_all_matched(self):
        coverage = CoverageResult(matched=[f.path for f in GETS_SCHEMA])
        assert calculate_coverage_score(coverage) == 100

    def test_all_missing(self):
        coverage = CoverageResult(missing=[f.path for f in GETS_SCHEMA])
        assert calculate_coverage_score(coverage) == 0

    def test_no_required_fields(self):
        schema = [SchemaField(path="invoice.note", type=FieldType.STRING, required=False)]
        assert calculate_coverage_score(CoverageResult(), schema) == 100

    def test_optional_fields_ignored(self):
        optional = [f.path for f in GETS_SCHEMA if not f.required]
        coverage = CoverageResult(matched=optional)
        assert calculate_coverage_score(coverage) == 0

    def test_prefix_weights(self):
        assert field_weight("invoice.id") == 1.2
        assert field_weight("seller.trn") == 1.1
        assert field_weight("buyer.name") == 1.1
        assert field_weight("lines[].qty") == 1.0
        assert field_weight("other") == 1.0

    def test_weighted_share(self):
        schema = [
            SchemaField(path="invoice.id", type=FieldType.STRING, required=True),
            SchemaField(path="lines[].qty", type=FieldType.NUMBER, required=True),
        ]
        coverage = CoverageResult(matched=["invoice.id"], missing=["lines[].qty"])
        # 1.2 / 2.2
        assert calculate_coverage_score(coverage, schema) == 55


class TestRulesScore:
    """Tests for the rules score."""

    def test_share_passed(self):
        assert calculate_rules_score(_findings(5)) == 100
        assert calculate_rules_score(_findings(3)) == 60
        assert calculate_rules_score(_findings(0)) == 0

    def test_empty_findings(self):
        assert calculate_rules_score([]) == 0


class TestPostureScore:
    """Tests for the questionnaire posture score."""

    def test_all_yes(self):
        assert calculate_posture_score(Questionnaire(webhooks=True, sandbox_env=True, retries=True)) == 100

    def test_two_of_three(self):
        assert calculate_posture_score(Questionnaire(webhooks=True, retries=True)) == 67

    def test_absent_counts_as_no(self):
        assert calculate_posture_score({"webhooks": True}) == 33
        assert calculate_posture_score({"webhooks": True, "retries": None}) == 33
        assert calculate_posture_score(None) == 0


# ============================================================================
# Overall Score
# ============================================================================

class TestCalculateScores:
    """Tests for calculate_scores."""

    def test_everything_missing_scores_zero(self):
        coverage = CoverageResult(missing=[f.path for f in required_fields()])
        scores = calculate_scores([], coverage, _findings(0), Questionnaire())
        assert scores.data == 0
        assert scores.coverage == 0
        assert scores.rules == 0
        assert scores.posture == 0
        assert scores.overall == 0

    def test_weighted_overall(self):
        schema = [
            SchemaField(path="lines[].qty", type=FieldType.NUMBER, required=True),
            SchemaField(path="lines[].unit_price", type=FieldType.NUMBER, required=True),
        ]
        coverage = CoverageResult(matched=["lines[].qty"], missing=["lines[].unit_price"])
        scores = calculate_scores([{"a": "x"}], coverage, _findings(3), Questionnaire(webhooks=True), schema)
        assert (scores.data, scores.coverage, scores.rules, scores.posture) == (100, 50, 60, 33)
        # 25 + 17.5 + 18 + 3.3 = 63.8
        assert scores.overall == 64

    def test_perfect(self):
        coverage = CoverageResult(matched=[f.path for f in GETS_SCHEMA])
        questionnaire = Questionnaire(webhooks=True, sandbox_env=True, retries=True)
        scores = calculate_scores([{"inv_no": "1"}], coverage, _findings(5), questionnaire)
        assert scores.overall == 100

    def test_scores_within_bounds(self):
        coverage = CoverageResult(close=[FieldMapping(target="invoice.id", candidate="id", confidence=0.99)])
        scores = calculate_scores([{"x": None}], coverage, _findings(1), {"sandbox_env": True})
        for value in scores.model_dump().values():
            assert isinstance(value, int)
            assert 0 <= value <= 100

    def test_idempotent(self):
        rows = [{"issue_date": "2024-01-15", "total": 5}]
        coverage = CoverageResult(matched=["invoice.id"])
        first = calculate_scores(rows, coverage, _findings(4), Questionnaire(retries=True))
        second = calculate_scores(rows, coverage, _findings(4), Questionnaire(retries=True))
        assert first == second


class TestReadinessLabel:
    """Tests for the readiness label."""

    @pytest.mark.parametrize(
        "overall,label",
        [(100, "High"), (80, "High"), (79, "Medium"), (60, "Medium"), (59, "Low"), (0, "Low")],
    )
    def test_thresholds(self, overall, label):
        assert readiness_label(overall) == label
