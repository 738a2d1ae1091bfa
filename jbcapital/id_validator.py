"""
South African ID Number Validator for JB Capital
================================================
Validates a 13-digit SA identity number and decodes:
  - Date of birth (YYMMDD)
  - Gender (sequence 0000–4999 female, 5000–9999 male)
  - Citizenship (0 = SA citizen, 1 = permanent resident)
  - Legal-age eligibility (18+)
  - Luhn-style check digit

Layout: YYMMDD SSSS C A Z
"""

import calendar
from datetime import date
from typing import Dict, Optional


# ─── Rules ──────────────────────────────────────────────────────────────────

ID_LENGTH = 13
MINIMUM_AGE = 18

# Two-digit years 00..CENTURY_CUTOFF resolve to the 2000s, the rest to the 1900s.
# Fixed boundary; applicants born after 2023 resolve to the 1900s unless
# century_cutoff is raised.
CENTURY_CUTOFF = 23

# Leap reference year so that 29 February passes the day-of-month check
REFERENCE_LEAP_YEAR = 2000

FEMALE_MAX_SEQUENCE = 4999

CITIZENSHIP_CODES = {
    "0": ("citizen", "SA Citizen"),
    "1": ("permanent_resident", "Permanent Resident"),
}


def _result(valid: bool, message: str, **decoded) -> Dict:
    result = {
        "valid": valid,
        "message": message,
        "gender": None,
        "citizenship": None,
        "birth_date": None,
        "age": None,
    }
    result.update(decoded)
    return result


def _format_birth_date(value: date) -> str:
    return value.strftime("%d %B %Y")


def _resolve_century(year: int, century_cutoff: int) -> int:
    return year + (2000 if year <= century_cutoff else 1900)


def _birth_date(birth_year: int, month: int, day: int) -> date:
    """29 February in a non-leap year rolls over to 1 March."""
    if month == 2 and day == 29 and not calendar.isleap(birth_year):
        return date(birth_year, 3, 1)
    return date(birth_year, month, day)


# ─── Checksum ───────────────────────────────────────────────────────────────

def compute_check_digit(first_twelve: str) -> int:
    """
    Luhn variant: walk from the digit next to the check digit back to the
    first, doubling every other digit (starting with that neighbour) and
    folding doubled values above 9.
    """
    total = 0
    double = True
    for ch in reversed(first_twelve):
        digit = int(ch)
        if double:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        double = not double
    return (10 - (total % 10)) % 10


# ─── Validation ─────────────────────────────────────────────────────────────

def validate_id_number(id_number: str, today: Optional[date] = None,
                       century_cutoff: int = CENTURY_CUTOFF) -> Dict:
    """
    Validate an SA ID number.

    Never raises: every input yields a dict with ``valid`` and a
    user-displayable ``message``. Decoded attributes (gender, citizenship,
    birth_date, age) are filled in as far as validation got.

    The day is checked against a leap year, so 29 February is accepted for
    any birth year. When the resolved year is not a leap year, birth_date
    rolls over to 1 March of that year; age uses the resolved year only.
    """
    if today is None:
        today = date.today()
    id_number = id_number if isinstance(id_number, str) else ""

    if not id_number or not all(ch in "0123456789" for ch in id_number):
        return _result(False, "ID number must contain only digits")

    if len(id_number) != ID_LENGTH:
        return _result(
            False,
            f"ID number must be exactly {ID_LENGTH} digits "
            f"(currently {len(id_number)} digits)",
        )

    year = int(id_number[0:2])
    month = int(id_number[2:4])
    day = int(id_number[4:6])

    if month < 1 or month > 12:
        return _result(
            False,
            f"Invalid birth month '{month}' in ID number (must be between 01-12)",
        )

    days_in_month = calendar.monthrange(REFERENCE_LEAP_YEAR, month)[1]
    if day < 1 or day > days_in_month:
        return _result(
            False,
            f"Invalid birth day '{day}' for month {month} "
            f"(must be between 01-{days_in_month:02d})",
        )

    sequence = int(id_number[6:10])
    if sequence < 0 or sequence > 9999:
        return _result(False, "Gender sequence must be between 0000 and 9999")
    gender = "female" if sequence <= FEMALE_MAX_SEQUENCE else "male"

    citizenship_digit = id_number[10]
    if citizenship_digit not in CITIZENSHIP_CODES:
        return _result(
            False,
            "Citizenship digit must be 0 (SA citizen) or 1 (permanent resident)",
            gender=gender,
        )
    citizenship, citizenship_label = CITIZENSHIP_CODES[citizenship_digit]

    birth_year = _resolve_century(year, century_cutoff)
    birth_date = _birth_date(birth_year, month, day)
    age = today.year - birth_year

    birthday_ahead = (month, day) > (today.month, today.day)
    if age < MINIMUM_AGE or (age == MINIMUM_AGE and birthday_ahead):
        return _result(
            False,
            f"Applicant must be {MINIMUM_AGE} years or older "
            f"(birth date: {_format_birth_date(birth_date)}, current age: {age} years)",
            gender=gender, citizenship=citizenship,
            birth_date=birth_date, age=age,
        )

    expected = compute_check_digit(id_number[:12])
    actual = int(id_number[12])
    if expected != actual:
        return _result(
            False,
            f"Invalid ID number checksum (expected check digit {expected}, got {actual})",
            gender=gender, citizenship=citizenship,
            birth_date=birth_date, age=age,
        )

    return _result(
        True,
        f"Valid SA ID number ({gender.capitalize()}, {citizenship_label})",
        gender=gender, citizenship=citizenship,
        birth_date=birth_date, age=age,
    )


# ─── Decoding for form pre-fill ─────────────────────────────────────────────

def parse_id_number(id_number: str, today: Optional[date] = None,
                    century_cutoff: int = CENTURY_CUTOFF) -> Optional[Dict]:
    """
    Extract birth date, exact age, gender and citizenship from a
    structurally valid ID (digits, length, month and day in range).
    Returns None otherwise.

    Unlike validate_id_number this does not enforce age or checksum and
    computes the age to the day, for display on the application form.
    """
    if today is None:
        today = date.today()
    if not isinstance(id_number, str) or len(id_number) != ID_LENGTH \
            or not id_number.isdigit():
        return None

    birth_year = _resolve_century(int(id_number[0:2]), century_cutoff)
    month = int(id_number[2:4])
    day = int(id_number[4:6])
    if not 1 <= month <= 12:
        return None
    if not 1 <= day <= calendar.monthrange(REFERENCE_LEAP_YEAR, month)[1]:
        return None
    birth_date = _birth_date(birth_year, month, day)

    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1

    citizenship = CITIZENSHIP_CODES.get(id_number[10], (None, "Unknown"))[1]

    return {
        "birth_date": birth_date,
        "formatted_birth_date": _format_birth_date(birth_date),
        "iso_date": birth_date.isoformat(),
        "age": age,
        "gender": "Female" if int(id_number[6:10]) <= FEMALE_MAX_SEQUENCE else "Male",
        "citizenship": citizenship,
    }
