"""
GETS Readiness Analyzer

A Python service that scores how ready a batch of invoice records is for
the GETS e-invoicing data format, based on field coverage, data quality,
business rules and integration posture.
"""

__version__ = "0.1.0"
__author__ = "GETS Readiness Team"

from .schemas import CoverageResult, FieldMapping, Questionnaire, ReadinessReport, RuleFinding, Scores
from .mapper import map_fields
from .validator import validate_rules
from .scoring import calculate_scores
from .report import analyze_rows

__all__ = [
    "CoverageResult",
    "FieldMapping",
    "Questionnaire",
    "ReadinessReport",
    "RuleFinding",
    "Scores",
    "map_fields",
    "validate_rules",
    "calculate_scores",
    "analyze_rows",
]
