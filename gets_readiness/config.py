"""
Configuration constants and enums for the GETS Readiness Analyzer.
"""

import logging
import os
from enum import Enum
from typing import Final

# ============================================================================
# Allowed Currencies
# ============================================================================

ALLOWED_CURRENCIES: Final[tuple[str, ...]] = (
    "AED",  # UAE Dirham
    "SAR",  # Saudi Riyal
    "MYR",  # Malaysian Ringgit
    "USD",  # US Dollar
)

# ============================================================================
# Validation Tolerances
# ============================================================================

# Tolerance for floating-point amount comparisons (e.g., net + vat ≈ gross)
AMOUNT_TOLERANCE: Final[float] = float(os.getenv("AMOUNT_TOLERANCE", "0.01"))

# ============================================================================
# Field Mapping
# ============================================================================

# A candidate must score strictly above this to count as a close match
CLOSE_MATCH_THRESHOLD: Final[float] = 0.6

# Floor applied when one normalized name contains the other
CONTAINMENT_CONFIDENCE: Final[float] = 0.8

# Non-blank values inspected when inferring a data field's type
TYPE_SAMPLE_SIZE: Final[int] = 10

# ============================================================================
# Row Limits
# ============================================================================

# Rows kept from an upload before analysis
MAX_ROWS: Final[int] = int(os.getenv("MAX_ROWS", "200"))

# Rows inspected by the data quality score
DATA_SCORE_ROW_LIMIT: Final[int] = 200

# ============================================================================
# Scoring Weights
# ============================================================================

SCORE_WEIGHTS: Final[dict[str, float]] = {
    "data": 0.25,
    "coverage": 0.35,
    "rules": 0.30,
    "posture": 0.10,
}

# First matching prefix wins; unmatched paths weigh 1.0
FIELD_PREFIX_WEIGHTS: Final[tuple[tuple[str, float], ...]] = (
    ("invoice.", 1.2),
    ("seller.", 1.1),
    ("buyer.", 1.1),
    ("lines[].", 1.0),
)

DEFAULT_FIELD_WEIGHT: Final[float] = 1.0

# Lower bounds for the readiness label, highest first
READINESS_LEVELS: Final[tuple[tuple[int, str], ...]] = (
    (80, "High"),
    (60, "Medium"),
    (0, "Low"),
)

# ============================================================================
# Rule Names
# ============================================================================

class RuleName(str, Enum):
    """Identifiers of the business rules, in evaluation order."""
    TOTALS_BALANCE = "TOTALS_BALANCE"
    LINE_MATH = "LINE_MATH"
    DATE_ISO = "DATE_ISO"
    CURRENCY_ALLOWED = "CURRENCY_ALLOWED"
    TRN_PRESENT = "TRN_PRESENT"


# ============================================================================
# API Configuration
# ============================================================================

API_HOST: Final[str] = os.getenv("API_HOST", "0.0.0.0")
API_PORT: Final[int] = int(os.getenv("API_PORT", "8000"))
MAX_UPLOAD_SIZE_MB: Final[int] = int(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("gets_readiness")


logger = setup_logging()
