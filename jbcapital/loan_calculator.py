"""
Loan Cost Calculator for JB Capital
===================================
Turns principal, term and a fixed annual rate into a full quote:
  - Amortized monthly instalment
  - Total interest
  - Fee schedule (initiation fee, monthly service fee, credit-life insurance)
  - Total cost of credit
  - Month-by-month repayment schedule
"""

import logging
import math
from datetime import date
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


# ─── Pricing Rules ──────────────────────────────────────────────────────────

DEFAULT_INTEREST_RATE = 28.75      # annual, percent

INITIATION_FEE_BASE = 1050.0
INITIATION_FEE_RATE = 0.0175       # × principal
INITIATION_FEE_CAP = 5000.0

MONTHLY_SERVICE_FEE = 69.0
MONTHLY_INSURANCE_RATE = 0.00175   # credit-life, × principal per month

# Calculator widget bounds
CALCULATOR_MIN_AMOUNT = 1000
CALCULATOR_MAX_AMOUNT = 100000
CALCULATOR_AMOUNT_STEP = 1000
CALCULATOR_MIN_TERM = 1
CALCULATOR_MAX_TERM = 4

QUOTE_FIELDS = (
    "monthly_payment", "total_interest", "initiation_fee",
    "monthly_service_fee", "monthly_insurance", "total_service_fee",
    "total_insurance_fee", "total_monthly_payment", "total_repayment",
)

MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


# ─── Fee Schedule ───────────────────────────────────────────────────────────

def calculate_initiation_fee(principal: float) -> float:
    """Once-off origination fee, capped."""
    return min(INITIATION_FEE_BASE + INITIATION_FEE_RATE * principal,
               INITIATION_FEE_CAP)


def calculate_monthly_insurance(principal: float) -> float:
    return MONTHLY_INSURANCE_RATE * principal


# ─── Amortization ───────────────────────────────────────────────────────────

def calculate_monthly_payment(principal: float, annual_rate: float,
                              term_months: int) -> float:
    """
    Standard amortizing payment: P × x × r / (x − 1), x = (1+r)^n.
    Falls back to straight-line P / n for a zero rate.
    """
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / term_months
    growth = math.pow(1 + monthly_rate, term_months)
    # Rates too small to register in 1 + r amortize like a zero rate
    if growth == 1:
        return principal / term_months
    return principal * growth * monthly_rate / (growth - 1)


def calculate_loan_quote(principal: float, term_months: int,
                         annual_rate: float = DEFAULT_INTEREST_RATE) -> Dict:
    """
    Full cost-of-credit quote. Pure and idempotent.

    Terms below one month are rejected up front with a zeroed quote; any
    remaining non-finite figure (NaN / inf) is clamped to 0 for display.
    """
    quote = {
        "principal": principal,
        "term_months": term_months,
        "annual_interest_rate": annual_rate,
    }

    if term_months is None or term_months < 1:
        logger.warning(f"Rejected loan quote with term of {term_months} months")
        quote.update({field: 0.0 for field in QUOTE_FIELDS})
        return quote

    try:
        monthly_payment = calculate_monthly_payment(principal, annual_rate, term_months)
    except (ZeroDivisionError, OverflowError):
        monthly_payment = float("nan")

    initiation_fee = calculate_initiation_fee(principal)
    monthly_insurance = calculate_monthly_insurance(principal)
    total_service_fee = MONTHLY_SERVICE_FEE * term_months
    total_insurance_fee = monthly_insurance * term_months
    total_interest = monthly_payment * term_months - principal
    total_repayment = (monthly_payment * term_months + initiation_fee +
                       total_service_fee + total_insurance_fee)

    quote.update({
        "monthly_payment": _finite_or_zero(monthly_payment),
        "total_interest": _finite_or_zero(total_interest),
        "initiation_fee": _finite_or_zero(initiation_fee),
        "monthly_service_fee": MONTHLY_SERVICE_FEE,
        "monthly_insurance": _finite_or_zero(monthly_insurance),
        "total_service_fee": _finite_or_zero(total_service_fee),
        "total_insurance_fee": _finite_or_zero(total_insurance_fee),
        "total_monthly_payment": _finite_or_zero(
            monthly_payment + MONTHLY_SERVICE_FEE + monthly_insurance),
        "total_repayment": _finite_or_zero(total_repayment),
    })
    return quote


# ─── Repayment Schedule ─────────────────────────────────────────────────────

def generate_repayment_schedule(principal: float, annual_rate: float,
                                term_months: int,
                                start: Optional[date] = None) -> List[Dict]:
    """
    Month-by-month schedule. The first instalment falls in the month after
    ``start`` (defaults to today). The initiation fee is charged with the
    first instalment.
    """
    if principal <= 0 or term_months is None or term_months < 1:
        return []
    if start is None:
        start = date.today()

    quote = calculate_loan_quote(principal, term_months, annual_rate)
    payment = quote["monthly_payment"]
    r = annual_rate / (12 * 100)
    balance = principal
    schedule = []

    for i in range(term_months):
        interest_component = balance * r
        principal_component = payment - interest_component
        balance = max(balance - principal_component, 0)

        month_offset = start.month + i  # first instalment next month
        month_idx = month_offset % 12
        year = start.year + month_offset // 12

        fees = quote["monthly_service_fee"] + quote["monthly_insurance"]
        if i == 0:
            fees += quote["initiation_fee"]

        schedule.append({
            "month": f"{MONTHS[month_idx]} {year}",
            "instalment": round(payment, 2),
            "principal": round(principal_component, 2),
            "interest": round(interest_component, 2),
            "fees": round(fees, 2),
            "total_due": round(payment + fees, 2),
            "balance": round(balance, 2),
        })

    return schedule


# ─── Presentation Helpers ───────────────────────────────────────────────────

def get_cost_breakdown(quote: Dict) -> List[Dict]:
    """Principal / interest / fees slices for the repayment pie chart."""
    fees = (quote.get("initiation_fee", 0) + quote.get("total_service_fee", 0) +
            quote.get("total_insurance_fee", 0))
    return [
        {"name": "Principal", "value": quote.get("principal", 0), "color": "#0066cc"},
        {"name": "Interest", "value": quote.get("total_interest", 0), "color": "#9333ea"},
        {"name": "Fees", "value": fees, "color": "#22c55e"},
    ]


def format_currency(amount: float, decimals: int = 2) -> str:
    """Rand display, e.g. R25,000.00 (negative as -R1,200.00)."""
    amount = _finite_or_zero(float(amount or 0))
    sign = "-" if amount < 0 else ""
    return f"{sign}R{abs(amount):,.{decimals}f}"
