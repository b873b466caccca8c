"""
Pydantic models for readiness analysis inputs and results.

This module defines the core data structures used throughout the analyzer:
- SchemaField for entries of the canonical GETS catalogue
- CoverageResult and FieldMapping for the field mapper
- RuleFinding for the business rule validator
- Questionnaire and Scores for the scorer
- ReadinessReport bundling everything for a single analysis
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class FieldType(str, Enum):
    """Declared value types of GETS fields."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    ENUM = "enum"


class SchemaField(BaseModel):
    """
    A single canonical GETS field.

    Attributes:
        path: Dotted path, with ``lines[].`` marking line item fields
        type: Declared value type
        required: Whether the field counts towards the coverage score
    """
    path: str = Field(..., min_length=1, description="Canonical field path (e.g., invoice.issue_date)")
    type: FieldType = Field(..., description="Declared value type")
    required: bool = Field(False, description="Whether the field is mandatory in GETS")

    model_config = {"frozen": True}


class FieldMapping(BaseModel):
    """A plausible but non-exact pairing of a schema field with a data field."""
    target: str = Field(..., description="Schema path being matched")
    candidate: str = Field(..., description="Data field name proposed for the schema path")
    confidence: float = Field(..., ge=0, le=1, description="Match confidence rounded to 2 decimals")


class CoverageResult(BaseModel):
    """
    Classification of every schema field against the uploaded data.

    Each schema path appears in exactly one of ``matched``, ``close``
    (as a FieldMapping target) or ``missing``.
    """
    matched: list[str] = Field(default_factory=list, description="Schema paths with an exact name match")
    close: list[FieldMapping] = Field(default_factory=list, description="Best non-exact candidates above threshold")
    missing: list[str] = Field(default_factory=list, description="Schema paths with no acceptable candidate")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "matched": ["invoice.currency", "seller.trn"],
                    "close": [
                        {"target": "invoice.issue_date", "candidate": "issue_date", "confidence": 0.8}
                    ],
                    "missing": ["buyer.address"],
                }
            ]
        }
    }

    def close_match(self, path: str) -> Optional[FieldMapping]:
        """Return the close match recorded for ``path``, if any."""
        for mapping in self.close:
            if mapping.target == path:
                return mapping
        return None


class RuleFinding(BaseModel):
    """
    Outcome of one business rule over the whole row set.

    Diagnostic fields are only populated by the rules that report them
    and are omitted from serialized output when unset.
    """
    rule: str = Field(..., description="Rule identifier (e.g., LINE_MATH)")
    ok: bool = Field(..., description="True if no row violated the rule")
    example_line: Optional[int] = Field(
        None, alias="exampleLine", description="1-based row index of the first violation"
    )
    expected: Optional[float] = Field(None, description="Value the rule calculated")
    got: Optional[float] = Field(None, description="Value stated in the data")
    value: Optional[str] = Field(None, description="Offending raw value")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {"rule": "LINE_MATH", "ok": False, "exampleLine": 1, "expected": 20, "got": 21}
            ]
        },
    }


class Questionnaire(BaseModel):
    """Self-reported integration posture. Absent answers count as ``False``."""
    webhooks: bool = Field(False, description="Can receive status webhooks")
    sandbox_env: bool = Field(False, description="Has a sandbox environment for testing")
    retries: bool = Field(False, description="Retries failed submissions")

    @field_validator("webhooks", "sandbox_env", "retries", mode="before")
    @classmethod
    def none_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class Scores(BaseModel):
    """Category scores and the weighted overall readiness score."""
    data: int = Field(..., ge=0, le=100, description="Data quality score")
    coverage: int = Field(..., ge=0, le=100, description="Weighted GETS field coverage")
    rules: int = Field(..., ge=0, le=100, description="Share of business rules passed")
    posture: int = Field(..., ge=0, le=100, description="Questionnaire posture score")
    overall: int = Field(..., ge=0, le=100, description="Weighted overall readiness")


class ReportMeta(BaseModel):
    """Descriptive facts about the analysed upload."""
    rows_parsed: int = Field(..., ge=0, alias="rowsParsed")
    lines_total: int = Field(..., ge=0, alias="linesTotal")
    country: str = Field("Unknown")
    erp: str = Field("Unknown")

    model_config = {"populate_by_name": True}


class ReadinessReport(BaseModel):
    """
    Complete result of one readiness analysis.

    This is the primary output format of the CLI and the API.
    """
    scores: Scores
    readiness: str = Field(..., description="High, Medium or Low")
    coverage: CoverageResult
    rule_findings: list[RuleFinding] = Field(..., alias="ruleFindings")
    gaps: list[str] = Field(default_factory=list, description="Human-readable list of what blocks readiness")
    meta: ReportMeta

    model_config = {"populate_by_name": True}

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys and without unset diagnostics."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# API Request Models
# ============================================================================

class AnalyzeRequest(BaseModel):
    """Request body for the /analyze endpoint."""
    rows: list[dict[str, Any]] = Field(..., description="Parsed invoice rows, flat or with nested lines")
    questionnaire: Questionnaire = Field(default_factory=Questionnaire)
    country: str = Field("", description="Country the invoices are issued in")
    erp: str = Field("", description="Source ERP system")

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "rows": [{
                    "inv_no": "INV-001",
                    "issue_date": "2024-01-15",
                    "currency": "AED",
                    "seller_trn": "100234567800003",
                    "buyer_trn": "100987654300003",
                    "total_excl_vat": 100,
                    "vat_amount": 5,
                    "total_incl_vat": 105,
                }],
                "questionnaire": {"webhooks": True, "sandbox_env": False, "retries": True},
                "country": "AE",
                "erp": "SAP",
            }]
        }
    }
