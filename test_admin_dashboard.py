"""
Test Suite for the Admin Dashboard
==================================
Overview statistics, risk assessment, the notification center and the
demo application generator.
"""

import sys, os
sys.path.insert(0, os.path.dirname(__file__))

from datetime import date

from jbcapital.admin_analytics import (
    get_overview_stats, get_status_distribution, set_application_status,
    classify_risk, get_risk_distribution, get_risk_factors, get_risk_trend,
    get_high_risk_applications, get_average_risk_score,
    APPLICATION_STATUSES, DEMO_STATUS_DATA,
)
from jbcapital.notifications import (
    NotificationCenter, notify_application_submitted, notify_status_change,
)
from jbcapital.id_validator import validate_id_number
from jbcapital.demo_applications import generate_applications


def _app(app_id, status="Pending", credit_score=700, dti=0.2, years=3.0,
         bankruptcies=False, existing_loans=False, amount=10000.0):
    return {
        "id": app_id,
        "applicant_name": f"Applicant {app_id}",
        "status": status,
        "loan_amount": amount,
        "loan_term": 3,
        "credit_score": credit_score,
        "debt_to_income_ratio": dti,
        "years_employed": years,
        "bankruptcies": bankruptcies,
        "existing_loans": existing_loans,
    }


# ─── Overview ───────────────────────────────────────────────────────────────

def test_overview_stats():
    apps = [_app("A1", "Approved"), _app("A2", "Approved"), _app("A3", "Rejected"),
            _app("A4", "Pending"), _app("A5", "Under Review")]
    stats = get_overview_stats(apps)
    assert stats["total"] == 5
    assert stats["approved"] == 2
    assert stats["rejected"] == 1
    assert stats["pending"] == 2
    assert stats["approval_rate"] == 67
    assert stats["total_requested"] == 50000.0

    one_in_eight = [_app("B0", "Approved")] + [_app(f"B{i}", "Rejected") for i in range(1, 8)]
    assert get_overview_stats(one_in_eight)["approval_rate"] == 13

    empty = get_overview_stats([])
    assert empty["total"] == 0 and empty["approval_rate"] == 0
    print("  ✓ Overview stats: PASS")


def test_status_distribution():
    demo = get_status_distribution([])
    assert {d["name"]: d["value"] for d in demo} == DEMO_STATUS_DATA

    live = get_status_distribution([_app("A1", "Approved"), _app("A2", "Approved")])
    assert [d["name"] for d in live] == APPLICATION_STATUSES
    assert {d["name"]: d["value"] for d in live}["Approved"] == 2
    assert {d["name"]: d["value"] for d in live}["Pending"] == 0
    print("  ✓ Status distribution: PASS")


def test_set_application_status():
    apps = [_app("A1"), _app("A2")]
    updated = set_application_status(apps, "A2", "Approved")
    assert updated["status"] == "Approved"
    assert apps[1]["status"] == "Approved"
    assert set_application_status(apps, "NOPE", "Approved") is None
    try:
        set_application_status(apps, "A1", "Archived")
        assert False, "expected ValueError"
    except ValueError:
        pass
    print("  ✓ Status update: PASS")


# ─── Risk ───────────────────────────────────────────────────────────────────

def test_classify_risk():
    assert classify_risk(850) == "Low"
    assert classify_risk(700) == "Low"
    assert classify_risk(699) == "Medium"
    assert classify_risk(600) == "Medium"
    assert classify_risk(599) == "High"
    assert classify_risk(0) is None
    print("  ✓ Risk classification: PASS")


def test_risk_distribution():
    demo = get_risk_distribution([])
    assert [d["value"] for d in demo] == [45, 30, 25]
    assert [d["percent"] for d in demo] == [45, 30, 25]

    apps = [_app(f"A{i}", credit_score=score)
            for i, score in enumerate([720, 780, 650, 610, 550, 500])]
    live = get_risk_distribution(apps)
    assert [d["name"] for d in live] == ["Low Risk", "Medium Risk", "High Risk"]
    assert [d["value"] for d in live] == [2, 2, 2]
    assert sum(d["percent"] for d in live) == 99
    print("  ✓ Risk distribution: PASS")


def test_risk_factors():
    apps = [
        _app("A1", credit_score=600, dti=0.5, years=1.0, bankruptcies=True),
        _app("A2", credit_score=700, dti=0.3, years=5.0, existing_loans=True),
        _app("A3", credit_score=640, dti=0.45, years=3.0),
        _app("A4", credit_score=800, dti=0.1, years=10.0),
        _app("A5", credit_score=720, dti=0.2, years=0.5, existing_loans=True),
    ]
    counts = {f["name"]: f["count"] for f in get_risk_factors(apps)}
    assert counts == {
        "Low Credit Score": 2,
        "High DTI Ratio": 2,
        "Limited Employment": 2,
        "Bankruptcies": 1,
        "Existing Loan Burden": 2,
    }

    # Too few applications: padded with illustrative figures
    padded = {f["name"]: f["count"] for f in get_risk_factors(apps[:1])}
    assert padded["High DTI Ratio"] == 42
    print("  ✓ Risk factors: PASS")


def test_high_risk_applications():
    apps = [
        _app("A1", credit_score=600, bankruptcies=True),
        _app("A2", credit_score=750),
        _app("A3", dti=0.5, existing_loans=True),
        _app("A4", years=0.5),
    ]
    flagged = get_high_risk_applications(apps)
    assert [f["id"] for f in flagged] == ["A1", "A3", "A4"]
    assert flagged[0]["risk_factors"] == ["Low Credit Score", "Past Bankruptcy"]
    assert flagged[1]["risk_factors"] == ["High Debt-to-Income", "Multiple Existing Loans"]
    assert flagged[2]["risk_factors"] == ["Limited Employment History"]

    many = [_app(f"R{i}", credit_score=500) for i in range(8)]
    assert len(get_high_risk_applications(many)) == 5
    assert len(get_high_risk_applications(many, limit=3)) == 3
    print("  ✓ High-risk shortlist: PASS")


def test_average_risk_score():
    assert get_average_risk_score([]) == 50
    assert get_average_risk_score([_app("A1", credit_score=0)]) == 0
    assert get_average_risk_score([_app("A1", credit_score=850)]) == 0
    assert get_average_risk_score([_app("A1", credit_score=300)]) == 100
    assert get_average_risk_score([_app("A1", credit_score=300),
                                   _app("A2", credit_score=850)]) == 50
    # Per-application risks 0 and 1 average to 0.5, which rounds up
    assert get_average_risk_score([_app("A1", credit_score=850),
                                   _app("A2", credit_score=845)]) == 1
    print("  ✓ Average risk score: PASS")


def test_risk_trend():
    trend = get_risk_trend(date(2026, 3, 15))
    assert [t["month"] for t in trend] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert trend[0]["High Risk"] == 25 and trend[0]["Low Risk"] == 45
    assert trend[-1]["Low Risk"] == 63 and trend[-1]["Medium Risk"] == 30
    assert trend[-1]["High Risk"] < trend[0]["High Risk"]
    print("  ✓ Risk trend: PASS")


# ─── Notifications ──────────────────────────────────────────────────────────

def test_notification_center():
    center = NotificationCenter()
    first = center.add_notification("Welcome", "Dashboard ready")
    second = center.add_notification("Docs", "New upload", type="document",
                                     importance="low", user_id="USR-1")
    assert center.notifications[0] is second
    assert first["id"].startswith("NTF-")
    assert center.unread_count == 2

    assert center.mark_as_read(first["id"])
    assert not center.mark_as_read("NTF-MISSING")
    assert center.unread_count == 1

    assert center.filter(type="document") == [second]
    assert center.filter(unread_only=True) == [second]
    assert center.get_by_user("USR-2") == [first]
    assert len(center.get_by_user("USR-1")) == 2

    center.mark_all_as_read()
    assert center.unread_count == 0
    center.clear()
    assert center.notifications == []

    try:
        center.add_notification("Bad", "x", importance="urgent")
        assert False, "expected ValueError"
    except ValueError:
        pass
    print("  ✓ Notification center: PASS")


def test_notification_settings():
    center = NotificationCenter()
    center.update_settings(sound_volume=3, sound_enabled=False)
    assert center.settings["sound_volume"] == 1.0
    assert center.settings["sound_enabled"] is False
    center.update_settings(sound_volume=-1)
    assert center.settings["sound_volume"] == 0.0
    try:
        center.update_settings(sms_enabled=True)
        assert False, "expected ValueError"
    except ValueError:
        pass
    print("  ✓ Notification settings: PASS")


def test_application_notifications():
    center = NotificationCenter()
    app = {**_app("APP-1234ABCD"), "user_id": "USR-9", "loan_amount": 25000.0}
    submitted = notify_application_submitted(center, app)
    assert submitted["type"] == "application" and submitted["importance"] == "high"
    assert "R25,000" in submitted["message"]

    app["status"] = "Under Review"
    changed = notify_status_change(center, app)
    assert changed["importance"] == "medium"
    assert changed["user_id"] == "USR-9"
    assert changed["data"]["status"] == "Under Review"
    print("  ✓ Application notifications: PASS")


# ─── Demo data ──────────────────────────────────────────────────────────────

def test_demo_applications():
    apps = generate_applications(n=25, seed=3)
    assert len(apps) == 25
    assert apps == generate_applications(n=25, seed=3)
    for app in apps:
        assert app["status"] in APPLICATION_STATUSES
        assert 300 <= app["credit_score"] <= 850
        assert 1 <= app["loan_term"] <= 4
        verdict = validate_id_number(app["id_number"], today=date(2026, 10, 19))
        assert verdict["valid"], (app["id_number"], verdict["message"])

    stats = get_overview_stats(apps)
    assert stats["total"] == 25
    assert stats["approved"] + stats["rejected"] + stats["pending"] == 25
    print("  ✓ Demo applications: PASS")


def test_only_jbcapital_is_installed():
    """The demo generator ships inside jbcapital; data/ holds scripts only."""
    root = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(root, "pyproject.toml")) as f:
        packaging = f.read()
    assert 'packages = ["jbcapital"]' in packaging
    assert generate_applications.__module__ == "jbcapital.demo_applications"
    assert not os.path.exists(os.path.join(root, "data", "__init__.py"))
    print("  ✓ Installed packages: PASS")


if __name__ == "__main__":
    print("=" * 60)
    print("Admin Dashboard — Test Suite")
    print("=" * 60)

    tests = [
        test_overview_stats,
        test_status_distribution,
        test_set_application_status,
        test_classify_risk,
        test_risk_distribution,
        test_risk_factors,
        test_high_risk_applications,
        test_average_risk_score,
        test_risk_trend,
        test_notification_center,
        test_notification_settings,
        test_application_notifications,
        test_demo_applications,
        test_only_jbcapital_is_installed,
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
