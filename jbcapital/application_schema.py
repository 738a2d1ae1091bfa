"""
Field validation for the loan application wizard.

One pydantic model per wizard step. ``validate_step`` turns pydantic errors
into a flat ``{field: message}`` dict the Streamlit form can show inline.
"""

from typing import Dict, Literal, Optional

from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError, field_validator,
    model_validator,
)

from jbcapital.id_validator import validate_id_number


EMPLOYMENT_STATUSES = ("employed", "self-employed", "unemployed", "retired")
EMPLOYMENT_TYPES = ("full-time", "part-time", "contract", "temporary", "other")

LOAN_PURPOSES = {
    "home": "Home Purchase or Refinance",
    "auto": "Vehicle Finance",
    "education": "Education",
    "personal": "Personal Loan",
    "business": "Business Loan",
    "debt_consolidation": "Debt Consolidation",
    "other": "Other",
}

PROVINCES = [
    "Eastern Cape", "Free State", "Gauteng", "KwaZulu-Natal", "Limpopo",
    "Mpumalanga", "North West", "Northern Cape", "Western Cape",
]

MIN_LOAN_AMOUNT = 1000
MAX_LOAN_AMOUNT = 1000000
MIN_LOAN_TERM = 1
MAX_LOAN_TERM = 4

EXPENSE_FIELDS = (
    "rent_mortgage", "car_payment", "groceries", "utilities",
    "insurance", "other_expenses",
)


class _StepModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class PersonalInfo(_StepModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    id_number: str
    phone: str = Field(pattern=r"^0\d{9}$")
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=8)
    address: str = Field(min_length=5)
    suburb: Optional[str] = None
    city: str = Field(min_length=2)
    province: str = Field(min_length=2)
    postal_code: str = Field(pattern=r"^\d{4}$")

    @field_validator("id_number")
    @classmethod
    def check_id_number(cls, value: str) -> str:
        verdict = validate_id_number(value)
        if not verdict["valid"]:
            raise ValueError(verdict["message"])
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class EmploymentInfo(_StepModel):
    employment_status: Literal["employed", "self-employed", "unemployed", "retired"]
    employer_name: Optional[str] = None
    job_title: Optional[str] = None
    years_employed: float = Field(default=0, ge=0)
    monthly_income: float = Field(ge=0)
    payment_date: Optional[str] = None
    employment_type: Optional[
        Literal["full-time", "part-time", "contract", "temporary", "other"]] = None
    employment_sector: Optional[str] = None

    @field_validator("employer_name", "job_title")
    @classmethod
    def blank_or_two_chars(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 2:
            raise ValueError("must be at least 2 characters")
        return value or None


class FinancialInfo(_StepModel):
    credit_score: int = Field(ge=300, le=850)
    existing_loans: bool = False
    existing_loan_amount: float = Field(default=0, ge=0)
    monthly_debt: float = Field(default=0, ge=0)
    rent_mortgage: float = Field(default=0, ge=0)
    car_payment: float = Field(default=0, ge=0)
    groceries: float = Field(default=0, ge=0)
    utilities: float = Field(default=0, ge=0)
    insurance: float = Field(default=0, ge=0)
    other_expenses: float = Field(default=0, ge=0)
    savings: float = Field(default=0, ge=0)
    bank_name: Optional[str] = None
    account_type: Optional[str] = None
    banking_period: float = Field(default=0, ge=0)

    @property
    def total_monthly_expenses(self) -> float:
        return sum(getattr(self, name) for name in EXPENSE_FIELDS)


class LoanDetails(_StepModel):
    loan_amount: float = Field(ge=MIN_LOAN_AMOUNT, le=MAX_LOAN_AMOUNT)
    loan_purpose: Literal["home", "auto", "education", "personal", "business",
                          "debt_consolidation", "other"]
    loan_term: int = Field(ge=MIN_LOAN_TERM, le=MAX_LOAN_TERM)
    loan_reason: Optional[str] = None
    requested_disbursement_date: Optional[str] = None
    collateral: bool = False
    collateral_type: Optional[str] = None
    collateral_value: float = Field(default=0, ge=0)


STEP_MODELS = {
    "personal": PersonalInfo,
    "employment": EmploymentInfo,
    "financial": FinancialInfo,
    "loan_details": LoanDetails,
}


def _error_message(error: Dict) -> str:
    message = error["msg"]
    # pydantic prefixes messages raised from validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


def validate_step(step_key: str, data: Dict) -> Dict[str, str]:
    """
    Validate one wizard step. Returns ``{}`` when valid, otherwise the first
    error per field. Model-level errors (password mismatch) are reported on
    ``confirm_password``.
    """
    model = STEP_MODELS[step_key]
    try:
        model.model_validate(data)
    except ValidationError as e:
        errors = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "confirm_password"
            errors.setdefault(field, _error_message(error))
        return errors
    return {}


def parse_step(step_key: str, data: Dict) -> BaseModel:
    """Validated model for a step; raises pydantic ValidationError."""
    return STEP_MODELS[step_key].model_validate(data)
