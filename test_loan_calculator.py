"""
Test Suite for the Loan Cost Calculator
=======================================
Amortized payment, fee schedule, total cost of credit, term guard,
non-finite clamping, repayment schedule and currency formatting.
"""

import sys, os
sys.path.insert(0, os.path.dirname(__file__))

import math
from datetime import date

from jbcapital.loan_calculator import (
    calculate_loan_quote, calculate_initiation_fee, calculate_monthly_payment,
    generate_repayment_schedule, get_cost_breakdown, format_currency,
    DEFAULT_INTEREST_RATE, MONTHLY_SERVICE_FEE, QUOTE_FIELDS,
)

EPS = 1e-9


def test_reference_quote():
    """R25,000 over 3 months at 28.75%."""
    quote = calculate_loan_quote(25000, 3, 28.75)

    r = 28.75 / 100 / 12
    x = math.pow(1 + r, 3)
    monthly = 25000 * x * r / (x - 1)
    assert abs(quote["monthly_payment"] - monthly) < EPS
    assert 8600 < quote["monthly_payment"] < 8750, quote["monthly_payment"]

    assert quote["initiation_fee"] == 1487.5
    assert quote["monthly_service_fee"] == 69
    assert abs(quote["monthly_insurance"] - 43.75) < EPS
    assert abs(quote["total_interest"] - (monthly * 3 - 25000)) < EPS

    expected_total = monthly * 3 + 1487.5 + 69 * 3 + 0.00175 * 25000 * 3
    assert abs(quote["total_repayment"] - expected_total) < EPS
    assert abs(quote["total_monthly_payment"] - (monthly + 69 + 43.75)) < EPS
    print("  ✓ Reference quote: PASS")


def test_default_rate():
    assert DEFAULT_INTEREST_RATE == 28.75
    assert calculate_loan_quote(10000, 3) == calculate_loan_quote(10000, 3, 28.75)
    print("  ✓ Default rate: PASS")


def test_initiation_fee_cap():
    assert calculate_initiation_fee(25000) == 1487.5
    assert calculate_initiation_fee(1000000) == 5000
    assert calculate_loan_quote(1000000, 3)["initiation_fee"] == 5000
    # Cap reached around R225,714
    assert calculate_initiation_fee(225000) < 5000
    assert calculate_initiation_fee(226000) == 5000
    print("  ✓ Initiation fee cap: PASS")


def test_monotonic_in_principal():
    previous = None
    for principal in [1000, 5000, 25000, 100000, 500000, 1000000]:
        quote = calculate_loan_quote(principal, 4, 28.75)
        if previous:
            assert quote["monthly_payment"] > previous["monthly_payment"]
            assert quote["total_repayment"] > previous["total_repayment"]
        previous = quote
    print("  ✓ Monotonic in principal: PASS")


def test_zero_rate():
    quote = calculate_loan_quote(12000, 4, 0)
    assert quote["monthly_payment"] == 3000.0
    assert quote["total_interest"] == 0.0
    assert calculate_monthly_payment(12000, 0, 4) == 3000.0

    # Rate below float resolution: no division by zero, fees kept
    tiny = calculate_loan_quote(12000, 4, 1e-14)
    assert tiny["monthly_payment"] == 3000.0
    expected = 12000 + tiny["initiation_fee"] + 69 * 4 + 0.00175 * 12000 * 4
    assert abs(tiny["total_repayment"] - expected) < 1e-6
    assert tiny["total_repayment"] > 12000
    print("  ✓ Zero rate: PASS")


def test_term_guard():
    """Terms below one month give a zeroed quote instead of NaN."""
    for term in [0, -3]:
        quote = calculate_loan_quote(10000, term, 28.75)
        for field in QUOTE_FIELDS:
            assert quote[field] == 0.0, (term, field, quote[field])
        assert quote["principal"] == 10000
    print("  ✓ Term guard: PASS")


def test_non_finite_clamped():
    """Overflowing growth factor degrades to a visible zero."""
    quote = calculate_loan_quote(10000, 10 ** 6, 28.75)
    assert quote["monthly_payment"] == 0.0
    assert quote["total_interest"] == 0.0
    assert quote["total_repayment"] == 0.0
    for field in QUOTE_FIELDS:
        assert math.isfinite(quote[field])
    print("  ✓ Non-finite clamp: PASS")


def test_quote_idempotent():
    assert calculate_loan_quote(37000, 2, 28.75) == calculate_loan_quote(37000, 2, 28.75)
    print("  ✓ Idempotence: PASS")


def test_repayment_schedule():
    schedule = generate_repayment_schedule(25000, 28.75, 3, start=date(2026, 10, 19))
    assert [row["month"] for row in schedule] == ["Nov 2026", "Dec 2026", "Jan 2027"]
    assert abs(schedule[-1]["balance"]) < 0.01
    assert abs(sum(row["principal"] for row in schedule) - 25000) < 0.05

    # Initiation fee rides on the first instalment
    assert schedule[0]["fees"] == round(1487.5 + MONTHLY_SERVICE_FEE + 43.75, 2)
    assert schedule[1]["fees"] == round(MONTHLY_SERVICE_FEE + 43.75, 2)

    # Interest falls as the balance is paid down
    assert schedule[0]["interest"] > schedule[1]["interest"] > schedule[2]["interest"]

    assert generate_repayment_schedule(0, 28.75, 3) == []
    assert generate_repayment_schedule(25000, 28.75, 0) == []
    print("  ✓ Repayment schedule: PASS")


def test_cost_breakdown():
    quote = calculate_loan_quote(25000, 3, 28.75)
    slices = get_cost_breakdown(quote)
    assert [s["name"] for s in slices] == ["Principal", "Interest", "Fees"]
    assert abs(sum(s["value"] for s in slices) - quote["total_repayment"]) < 1e-6
    print("  ✓ Cost breakdown: PASS")


def test_format_currency():
    assert format_currency(25000) == "R25,000.00"
    assert format_currency(1500.4, 0) == "R1,500"
    assert format_currency(-1200) == "-R1,200.00"
    assert format_currency(float("nan")) == "R0.00"
    assert format_currency(None) == "R0.00"
    print("  ✓ Currency formatting: PASS")


if __name__ == "__main__":
    print("=" * 60)
    print("Loan Cost Calculator — Test Suite")
    print("=" * 60)

    tests = [
        test_reference_quote,
        test_default_rate,
        test_initiation_fee_cap,
        test_monotonic_in_principal,
        test_zero_rate,
        test_term_guard,
        test_non_finite_clamped,
        test_quote_idempotent,
        test_repayment_schedule,
        test_cost_breakdown,
        test_format_currency,
    ]

    passed = 0
    failed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"  ✗ {test.__name__}: FAIL — {e}")
            failed += 1

    print()
    print("=" * 60)
    if failed == 0:
        print(f"✅ ALL {passed} TESTS PASSED!")
    else:
        print(f"❌ {failed} FAILED, {passed} passed")
    print("=" * 60)
