"""
Demo Application Generator for JB Capital
Generates realistic loan application records for the admin dashboard.
"""

from datetime import datetime, timedelta

import numpy as np

from jbcapital.id_validator import compute_check_digit
from jbcapital.loan_calculator import calculate_loan_quote

# ── Configuration ───────────────────────────────────────────────────────────
NUM_APPLICATIONS = 40
FIRST_NAMES = ["Thabo", "Lerato", "Sipho", "Naledi", "Johan", "Anika", "Kagiso",
               "Zanele", "Pieter", "Ayesha", "Mandla", "Precious", "Ruan", "Nomsa"]
LAST_NAMES = ["Mokoena", "Naidoo", "van der Merwe", "Dlamini", "Botha", "Khumalo",
              "Pillay", "Nkosi", "Smith", "Mahlangu", "Jacobs", "Ndlovu"]
PURPOSES = ["personal", "auto", "education", "business", "debt_consolidation", "home", "other"]
EMPLOYMENT = ["employed", "self-employed", "unemployed", "retired"]
STATUSES = ["Pending", "Under Review", "Approved", "Rejected"]


def _id_number(birth: datetime, male: bool, citizen: bool) -> str:
    """Valid 13-digit SA ID for the given birth date."""
    sequence = np.random.randint(5000, 10000) if male else np.random.randint(0, 5000)
    first_twelve = f"{birth:%y%m%d}{sequence:04d}{0 if citizen else 1}8"
    return first_twelve + str(compute_check_digit(first_twelve))


def _credit_profile(profile: str) -> dict:
    """Credit score, DTI and employment history by risk profile."""
    if profile == "good":
        return {"credit_score": int(np.random.randint(700, 851)),
                "dti": round(float(np.random.uniform(0.05, 0.30)), 4),
                "years_employed": round(float(np.random.uniform(2, 15)), 1)}
    if profile == "moderate":
        return {"credit_score": int(np.random.randint(600, 700)),
                "dti": round(float(np.random.uniform(0.25, 0.45)), 4),
                "years_employed": round(float(np.random.uniform(1, 6)), 1)}
    return {"credit_score": int(np.random.randint(300, 620)),
            "dti": round(float(np.random.uniform(0.40, 0.70)), 4),
            "years_employed": round(float(np.random.uniform(0, 2)), 1)}


def generate_applications(n: int = NUM_APPLICATIONS, seed: int = 42) -> list:
    """Generate n demo application records (same shape as a submitted application)."""
    np.random.seed(seed)
    now = datetime(2025, 6, 30)
    records = []
    for i in range(n):
        profile = np.random.choice(["good", "moderate", "risky"], p=[0.45, 0.32, 0.23])
        credit = _credit_profile(profile)

        birth = datetime(1960, 1, 1) + timedelta(days=int(np.random.randint(0, 365 * 44)))
        male = bool(np.random.rand() < 0.5)
        income = float(np.random.randint(8, 60) * 1000)
        amount = float(np.random.randint(1, 101) * 1000)
        term = int(np.random.randint(1, 5))

        if profile == "good":
            status = np.random.choice(STATUSES, p=[0.25, 0.15, 0.50, 0.10])
        elif profile == "moderate":
            status = np.random.choice(STATUSES, p=[0.35, 0.30, 0.20, 0.15])
        else:
            status = np.random.choice(STATUSES, p=[0.30, 0.20, 0.05, 0.45])

        records.append({
            "id": f"APP-DEMO{i + 1:04d}",
            "user_id": f"USR-DEMO{i + 1:04d}",
            "applicant_name": f"{np.random.choice(FIRST_NAMES)} {np.random.choice(LAST_NAMES)}",
            "id_number": _id_number(birth, male, citizen=bool(np.random.rand() < 0.9)),
            "status": str(status),
            "created_at": (now - timedelta(days=int(np.random.randint(0, 180)))).isoformat(),
            "loan_amount": amount,
            "loan_term": term,
            "loan_purpose": str(np.random.choice(PURPOSES)),
            "employment_status": str(np.random.choice(EMPLOYMENT, p=[0.70, 0.15, 0.05, 0.10])),
            "years_employed": credit["years_employed"],
            "monthly_income": income,
            "credit_score": credit["credit_score"],
            "monthly_debt": round(income * credit["dti"], 2),
            "debt_to_income_ratio": credit["dti"],
            "existing_loans": bool(np.random.rand() < (0.25 if profile == "good" else 0.6)),
            "bankruptcies": bool(profile == "risky" and np.random.rand() < 0.2),
            "loan_calculation": calculate_loan_quote(amount, term),
            "documents": {},
        })
    return records

