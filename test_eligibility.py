"""
Test Suite for the Quick Eligibility Check
"""

import sys, os
sys.path.insert(0, os.path.dirname(__file__))

from jbcapital.eligibility import check_eligibility, get_indicative_rate, round_half_up


def test_declined_for_affordability():
    """Good score but debt already exceeds the affordable share of income."""
    result = check_eligibility(50000, 700, 1500, "employed", 25000, 5)
    assert result["errors"] == {}
    assert result["eligibility_score"] == 65
    assert result["interest_rate"] == 6.5
    assert result["max_loan_amount"] == 0
    assert result["debt_to_income"] == 0.36
    assert not result["eligible"]
    print("  ✓ Affordability decline: PASS")


def test_strong_applicant():
    result = check_eligibility(600000, 800, 0, "employed", 100000, 12)
    assert result["eligibility_score"] == 95
    assert result["interest_rate"] == 4.5
    # Terms of 10+ years use a fixed multiplier of 5
    assert result["max_loan_amount"] == 840000
    assert result["eligible"]
    print("  ✓ Strong applicant: PASS")


def test_employment_factor():
    base = dict(annual_income=300000, credit_score=650, monthly_debt=2000,
                loan_amount=50000, loan_term_years=3)
    scores = [check_eligibility(employment_status=status, **base)["eligibility_score"]
              for status in ["employed", "self-employed", "retired", "unemployed"]]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] - scores[3] == 10
    print("  ✓ Employment factor: PASS")


def test_zero_income():
    result = check_eligibility(0, 850, 0, "employed", 1000, 1)
    assert result["debt_to_income"] == 0.5
    assert result["eligibility_score"] == 70
    assert result["max_loan_amount"] == 0
    assert not result["eligible"]
    print("  ✓ Zero income: PASS")


def test_half_scores_round_up():
    assert round_half_up(48.5) == 49
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(-4.79) == -5

    # Minimum credit score, DTI 0.025 and employed: raw score 48.5
    result = check_eligibility(12000, 300, 25, "employed", 1000, 5)
    assert result["eligibility_score"] == 49
    print("  ✓ Half scores round up: PASS")


def test_invalid_inputs():
    result = check_eligibility(-1, 200, -5, "employed", 500, 40)
    assert not result["eligible"]
    assert set(result["errors"]) == {"annual_income", "credit_score", "monthly_debt",
                                     "loan_amount", "loan_term_years"}
    assert "eligibility_score" not in result
    print("  ✓ Invalid inputs: PASS")


def test_rate_bands():
    assert get_indicative_rate(100) == 4.5
    assert get_indicative_rate(81) == 4.5
    assert get_indicative_rate(80) == 5.5
    assert get_indicative_rate(61) == 6.5
    assert get_indicative_rate(51) == 8.0
    assert get_indicative_rate(41) == 10.0
    assert get_indicative_rate(40) == 12.0
    assert get_indicative_rate(0) == 12.0
    print("  ✓ Rate bands: PASS")


if __name__ == "__main__":
    print("=" * 60)
    print("Eligibility Check — Test Suite")
    print("=" * 60)

    tests = [
        test_declined_for_affordability,
        test_strong_applicant,
        test_employment_factor,
        test_zero_income,
        test_half_scores_round_up,
        test_invalid_inputs,
        test_rate_bands,
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
