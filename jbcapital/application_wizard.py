"""
Multi-step loan application wizard.

Holds the form data collected so far and the current step. Each step is
validated with application_schema before it is merged; the final step turns
the collected data into an application record for the admin dashboard.
"""

import logging
import secrets
from datetime import datetime
from typing import Dict, List, Optional

from jbcapital.application_schema import (
    EXPENSE_FIELDS, MAX_LOAN_TERM, parse_step, validate_step,
)
from jbcapital.documents import get_missing_required_documents
from jbcapital.id_validator import parse_id_number
from jbcapital.loan_calculator import DEFAULT_INTEREST_RATE, calculate_loan_quote

logger = logging.getLogger(__name__)


STEPS = [
    ("personal", "Personal Information"),
    ("employment", "Employment"),
    ("financial", "Financial Information"),
    ("loan_details", "Loan Details"),
    ("documents", "Document Upload"),
    ("review", "Review & Submit"),
]
TOTAL_STEPS = len(STEPS)

DEFAULT_FORM_DATA = {
    # Personal
    "first_name": "",
    "last_name": "",
    "id_number": "",
    "phone": "",
    "email": "",
    "password": "",
    "confirm_password": "",
    "address": "",
    "suburb": "",
    "city": "",
    "province": "",
    "postal_code": "",
    # Employment
    "employment_status": "employed",
    "employer_name": "",
    "job_title": "",
    "years_employed": 0,
    "monthly_income": 0,
    # Financial
    "credit_score": 0,
    "existing_loans": False,
    "existing_loan_amount": 0,
    "monthly_debt": 0,
    "rent_mortgage": 0,
    "car_payment": 0,
    "groceries": 0,
    "utilities": 0,
    "insurance": 0,
    "other_expenses": 0,
    "savings": 0,
    "bank_name": "",
    "account_type": "cheque",
    "banking_period": 0,
    # Loan details
    "loan_amount": 0,
    "loan_purpose": "personal",
    "loan_term": 0,
    # Documents
    "documents_uploaded": False,
    "uploaded_documents": {},
}


def generate_random_id(prefix: str) -> str:
    """PREFIX-XXXXXXXX with 8 random upper-case hex characters."""
    return f"{prefix}-{secrets.token_hex(4).upper()}"


class ApplicationWizard:
    """Form state for one applicant working through the six steps."""

    def __init__(self, form_data: Optional[Dict] = None):
        self.form_data = {**DEFAULT_FORM_DATA, **(form_data or {})}
        self.current_step = 1

    # ── Navigation ──────────────────────────────────────────────────────
    @property
    def is_last_step(self) -> bool:
        return self.current_step == TOTAL_STEPS

    @property
    def progress(self) -> float:
        return self.current_step / TOTAL_STEPS * 100

    @property
    def step_key(self) -> str:
        return STEPS[self.current_step - 1][0]

    def next_step(self):
        if self.current_step < TOTAL_STEPS:
            self.current_step += 1

    def prev_step(self):
        if self.current_step > 1:
            self.current_step -= 1

    def go_to_step(self, step: int):
        if 1 <= step <= TOTAL_STEPS:
            self.current_step = step

    # ── Data ────────────────────────────────────────────────────────────
    def update_form_data(self, data: Dict):
        self.form_data.update(data)

    def set_initial_form_data(self, data: Dict):
        self.form_data = {**DEFAULT_FORM_DATA, **data}

    def prefill_from_quote(self, quote: Optional[Dict]):
        """Carry the calculator's last quote into the loan-details step."""
        if not quote:
            return
        term = min(int(quote.get("term_months") or 0), MAX_LOAN_TERM)
        self.form_data["loan_amount"] = quote.get("principal", 0)
        self.form_data["loan_term"] = term
        self.form_data["loan_calculation"] = calculate_loan_quote(
            quote.get("principal", 0), term,
            quote.get("annual_interest_rate", DEFAULT_INTEREST_RATE))

    def submit_step(self, step_key: str, data: Dict) -> Dict[str, str]:
        """
        Validate and merge one step. On success the wizard advances and an
        empty dict is returned; otherwise field errors, and the step stays.
        """
        if step_key == "documents":
            uploaded = data.get("uploaded_documents", {})
            missing = get_missing_required_documents(uploaded)
            if missing:
                return {"uploaded_documents":
                        f"Please upload the following required documents: {', '.join(missing)}"}
            self.update_form_data({"uploaded_documents": uploaded,
                                   "documents_uploaded": True})
            self.next_step()
            return {}

        errors = validate_step(step_key, data)
        if errors:
            return errors

        cleaned = parse_step(step_key, data).model_dump()
        self.update_form_data(cleaned)
        if step_key == "personal":
            decoded = parse_id_number(cleaned["id_number"])
            if decoded:
                self.update_form_data({
                    "date_of_birth": decoded["iso_date"],
                    "gender": decoded["gender"],
                    "age": decoded["age"],
                })
        elif step_key == "financial":
            self.form_data["total_monthly_expenses"] = sum(
                float(self.form_data.get(name) or 0) for name in EXPENSE_FIELDS)
        elif step_key == "loan_details":
            self.form_data["loan_calculation"] = calculate_loan_quote(
                cleaned["loan_amount"], cleaned["loan_term"])

        self.next_step()
        return {}

    def get_incomplete_steps(self) -> List[str]:
        """Titles of steps whose data does not currently validate."""
        incomplete = []
        for key, title in STEPS:
            if key == "review":
                continue
            if key == "documents":
                if get_missing_required_documents(self.form_data.get("uploaded_documents", {})):
                    incomplete.append(title)
            elif validate_step(key, self.form_data):
                incomplete.append(title)
        return incomplete

    # ── Submission ──────────────────────────────────────────────────────
    def build_application(self, user_id: Optional[str] = None) -> Dict:
        """
        Application record for the admin dashboard.

        Raises:
            ValueError: if any step is incomplete.
        """
        incomplete = self.get_incomplete_steps()
        if incomplete:
            raise ValueError(f"Application incomplete: {', '.join(incomplete)}")

        fd = self.form_data
        income = float(fd.get("monthly_income") or 0)
        monthly_debt = float(fd.get("monthly_debt") or 0)
        quote = fd.get("loan_calculation") or calculate_loan_quote(
            float(fd["loan_amount"]), int(fd["loan_term"]))

        application = {
            "id": generate_random_id("APP"),
            "user_id": user_id,
            "applicant_name": f"{fd['first_name']} {fd['last_name']}".strip(),
            "id_number": fd["id_number"],
            "email": fd["email"],
            "phone": fd["phone"],
            "status": "Pending",
            "created_at": datetime.now().isoformat(timespec="seconds"),
            "loan_amount": float(fd["loan_amount"]),
            "loan_term": int(fd["loan_term"]),
            "loan_purpose": fd["loan_purpose"],
            "employment_status": fd["employment_status"],
            "years_employed": float(fd.get("years_employed") or 0),
            "monthly_income": income,
            "credit_score": int(fd.get("credit_score") or 0),
            "monthly_debt": monthly_debt,
            "debt_to_income_ratio": round(monthly_debt / income, 4) if income > 0 else None,
            "existing_loans": bool(fd.get("existing_loans")),
            "bankruptcies": False,
            "loan_calculation": quote,
            "documents": {k: list(v) for k, v in fd.get("uploaded_documents", {}).items()},
        }
        logger.info(f"Application {application['id']} built for "
                    f"{application['applicant_name']} (R{application['loan_amount']:,.0f})")
        return application
