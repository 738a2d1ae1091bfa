"""
Quick eligibility assessment shown on the Eligibility page.

Scores an applicant 0–100 from credit score, debt-to-income and employment,
then estimates an affordable loan and an indicative rate band.
"""

import math
from typing import Dict


MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850
MIN_LOAN_AMOUNT = 1000
MAX_LOAN_AMOUNT = 1000000
MIN_TERM_YEARS = 1
MAX_TERM_YEARS = 30

# Score component weights (sum to 100)
CREDIT_WEIGHT = 50
DTI_WEIGHT = 30
EMPLOYMENT_WEIGHT = 20

DTI_CAP = 0.5
AFFORDABILITY_RATIO = 0.28   # share of annual income available for debt

EMPLOYMENT_FACTORS = {
    "employed": 1.0,
    "self-employed": 0.9,
    "retired": 0.8,
}
DEFAULT_EMPLOYMENT_FACTOR = 0.5

# (score must exceed, indicative annual rate %)
RATE_BANDS = [
    (80, 4.5),
    (70, 5.5),
    (60, 6.5),
    (50, 8.0),
    (40, 10.0),
]
FALLBACK_RATE = 12.0


def _validate_inputs(annual_income, credit_score, monthly_debt,
                     loan_amount, loan_term_years) -> Dict[str, str]:
    errors = {}
    if annual_income < 0:
        errors["annual_income"] = "Income cannot be negative"
    if not MIN_CREDIT_SCORE <= credit_score <= MAX_CREDIT_SCORE:
        errors["credit_score"] = (f"Credit score must be between "
                                  f"{MIN_CREDIT_SCORE} and {MAX_CREDIT_SCORE}")
    if monthly_debt < 0:
        errors["monthly_debt"] = "Monthly debt cannot be negative"
    if not MIN_LOAN_AMOUNT <= loan_amount <= MAX_LOAN_AMOUNT:
        errors["loan_amount"] = "Loan amount must be between R1,000 and R1,000,000"
    if not MIN_TERM_YEARS <= loan_term_years <= MAX_TERM_YEARS:
        errors["loan_term_years"] = (f"Loan term must be between "
                                     f"{MIN_TERM_YEARS} and {MAX_TERM_YEARS} years")
    return errors


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up."""
    return int(math.floor(value + 0.5))


def get_indicative_rate(score: int) -> float:
    for threshold, rate in RATE_BANDS:
        if score > threshold:
            return rate
    return FALLBACK_RATE


def check_eligibility(annual_income: float, credit_score: int,
                      monthly_debt: float, employment_status: str,
                      loan_amount: float, loan_term_years: int) -> Dict:
    """
    Returns:
        Dict with eligibility_score (0–100), max_loan_amount, interest_rate,
        debt_to_income and whether the requested amount fits, or
        ``{"eligible": False, "errors": {...}}`` on out-of-range input.
    """
    errors = _validate_inputs(annual_income, credit_score, monthly_debt,
                              loan_amount, loan_term_years)
    if errors:
        return {"eligible": False, "errors": errors}

    # No income counts as the worst debt position
    dti = (monthly_debt * 12) / annual_income if annual_income > 0 else DTI_CAP
    credit_pct = (credit_score - MIN_CREDIT_SCORE) / (MAX_CREDIT_SCORE - MIN_CREDIT_SCORE)
    employment_factor = EMPLOYMENT_FACTORS.get(employment_status, DEFAULT_EMPLOYMENT_FACTOR)

    raw = (credit_pct * CREDIT_WEIGHT +
           (1 - min(DTI_CAP, dti) / DTI_CAP) * DTI_WEIGHT +
           employment_factor * EMPLOYMENT_WEIGHT)
    score = min(100, max(0, round_half_up(raw)))

    term_multiplier = loan_term_years / 2 if loan_term_years < 10 else 5
    max_loan = max(0, round_half_up((annual_income * AFFORDABILITY_RATIO - monthly_debt * 12)
                            * term_multiplier))

    return {
        "eligible": loan_amount <= max_loan,
        "eligibility_score": score,
        "max_loan_amount": max_loan,
        "interest_rate": get_indicative_rate(score),
        "debt_to_income": round(dti, 4),
        "requested_amount": loan_amount,
        "errors": {},
    }
