"""
Business rules for GETS readiness.

Five fixed rules, each scanning the whole row set and reporting a single
RuleFinding:
- TOTALS_BALANCE: net + VAT equals gross
- LINE_MATH: qty x unit price equals line total
- DATE_ISO: issue dates are written as YYYY-MM-DD
- CURRENCY_ALLOWED: currency is one of the GETS currencies
- TRN_PRESENT: seller and buyer tax registration numbers are filled in

Rows lacking the values a rule needs are skipped, not failed. Each rule
stops at its first violation.
"""

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from .config import ALLOWED_CURRENCIES, AMOUNT_TOLERANCE, RuleName
from .rows import InvoiceRecord, resolve_number, resolve_text
from .schemas import RuleFinding


# Type alias for rule check functions
RuleCheckFn = Callable[[Sequence[InvoiceRecord]], RuleFinding]


@dataclass(frozen=True)
class ValidationRule:
    """
    Represents a single business rule.

    Attributes:
        name: Rule identifier reported in findings
        description: Human-readable description of the rule
        check: Function that runs the rule over all records
    """
    name: RuleName
    description: str
    check: RuleCheckFn


# ============================================================================
# Field Aliases
# ============================================================================

TOTAL_EXCL_VAT_ALIASES = ("total_excl_vat", "totalNet", "invoice.total_excl_vat")
VAT_AMOUNT_ALIASES = ("vat_amount", "vat", "invoice.vat_amount")
TOTAL_INCL_VAT_ALIASES = ("total_incl_vat", "grandTotal", "invoice.total_incl_vat")

QTY_ALIASES = ("qty", "lineQty", "quantity")
UNIT_PRICE_ALIASES = ("unit_price", "linePrice", "price")
LINE_TOTAL_ALIASES = ("line_total", "lineTotal", "total")

ISSUE_DATE_ALIASES = ("issue_date", "date", "issued_on", "invoice.issue_date")
CURRENCY_ALIASES = ("currency", "curr", "invoice.currency")

SELLER_TRN_ALIASES = ("seller_trn", "sellerTax", "seller.trn")
BUYER_TRN_ALIASES = ("buyer_trn", "buyerTax", "buyer.trn")

# Shape only: month 01-12 and day 01-31, anything may follow
ISO_DATE_PREFIX = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])")


# ============================================================================
# Rules
# ============================================================================

def check_totals_balance(records: Sequence[InvoiceRecord]) -> RuleFinding:
    """
    total_excl_vat + vat_amount should equal total_incl_vat.

    Rows missing any of the three amounts are skipped.
    """
    for record in records:
        net = resolve_number(record.header, TOTAL_EXCL_VAT_ALIASES)
        vat = resolve_number(record.header, VAT_AMOUNT_ALIASES)
        gross = resolve_number(record.header, TOTAL_INCL_VAT_ALIASES)
        if net is None or vat is None or gross is None:
            continue
        if abs(net + vat - gross) > AMOUNT_TOLERANCE:
            return RuleFinding(rule=RuleName.TOTALS_BALANCE.value, ok=False)
    return RuleFinding(rule=RuleName.TOTALS_BALANCE.value, ok=True)


def check_line_math(records: Sequence[InvoiceRecord]) -> RuleFinding:
    """
    Each line's qty × unit_price should equal its line_total.

    The first violation is reported with the 1-based row it was found in.
    """
    for record in records:
        for line in record.line_items:
            qty = resolve_number(line, QTY_ALIASES)
            unit_price = resolve_number(line, UNIT_PRICE_ALIASES)
            line_total = resolve_number(line, LINE_TOTAL_ALIASES)
            if qty is None or unit_price is None or line_total is None:
                continue
            expected = qty * unit_price
            if abs(expected - line_total) > AMOUNT_TOLERANCE:
                return RuleFinding(
                    rule=RuleName.LINE_MATH.value,
                    ok=False,
                    example_line=record.position,
                    expected=expected,
                    got=line_total,
                )
    return RuleFinding(rule=RuleName.LINE_MATH.value, ok=True)


def check_date_iso(records: Sequence[InvoiceRecord]) -> RuleFinding:
    """Issue dates must start with a YYYY-MM-DD date."""
    for record in records:
        issue_date = resolve_text(record.header, ISSUE_DATE_ALIASES)
        if issue_date and not ISO_DATE_PREFIX.match(issue_date):
            return RuleFinding(rule=RuleName.DATE_ISO.value, ok=False, value=issue_date)
    return RuleFinding(rule=RuleName.DATE_ISO.value, ok=True)


def check_currency_allowed(records: Sequence[InvoiceRecord]) -> RuleFinding:
    """Currency, case-insensitively, must be one of the allowed GETS currencies."""
    for record in records:
        currency = resolve_text(record.header, CURRENCY_ALIASES)
        if currency and currency.upper() not in ALLOWED_CURRENCIES:
            return RuleFinding(rule=RuleName.CURRENCY_ALLOWED.value, ok=False, value=currency)
    return RuleFinding(rule=RuleName.CURRENCY_ALLOWED.value, ok=True)


def check_trn_present(records: Sequence[InvoiceRecord]) -> RuleFinding:
    """
    Every row needs both a seller and a buyer TRN.

    Unlike the other rules a missing value is a violation here.
    """
    for record in records:
        seller_trn = resolve_text(record.header, SELLER_TRN_ALIASES)
        buyer_trn = resolve_text(record.header, BUYER_TRN_ALIASES)
        if not seller_trn or not seller_trn.strip() or not buyer_trn or not buyer_trn.strip():
            return RuleFinding(rule=RuleName.TRN_PRESENT.value, ok=False)
    return RuleFinding(rule=RuleName.TRN_PRESENT.value, ok=True)


# ============================================================================
# Rule Registry
# ============================================================================

# All business rules in reporting order
VALIDATION_RULES: tuple[ValidationRule, ...] = (
    ValidationRule(
        name=RuleName.TOTALS_BALANCE,
        description="total_excl_vat + vat_amount should equal total_incl_vat (±0.01)",
        check=check_totals_balance,
    ),
    ValidationRule(
        name=RuleName.LINE_MATH,
        description="qty × unit_price should equal line_total (±0.01)",
        check=check_line_math,
    ),
    ValidationRule(
        name=RuleName.DATE_ISO,
        description="Issue date must be formatted as YYYY-MM-DD",
        check=check_date_iso,
    ),
    ValidationRule(
        name=RuleName.CURRENCY_ALLOWED,
        description=f"Currency must be one of {', '.join(ALLOWED_CURRENCIES)}",
        check=check_currency_allowed,
    ),
    ValidationRule(
        name=RuleName.TRN_PRESENT,
        description="Seller and buyer TRN must both be present",
        check=check_trn_present,
    ),
)


def get_rule_descriptions() -> dict[str, str]:
    """Get a mapping of rule names to their descriptions."""
    return {rule.name.value: rule.description for rule in VALIDATION_RULES}
