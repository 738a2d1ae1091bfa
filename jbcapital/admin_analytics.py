"""
Admin Dashboard Analytics for JB Capital
========================================
Live statistics over the in-memory application list:
  - Applications overview (status counts, approval rate)
  - Risk distribution by credit score band
  - Risk factor counts & high-risk application shortlist
  - Average risk score

Charts fall back to demo figures while there are too few applications to
draw something meaningful.
"""

import math
from datetime import date
from typing import Dict, List, Optional

import numpy as np
import pandas as pd


# ─── Status Model ───────────────────────────────────────────────────────────

APPLICATION_STATUSES = ["Pending", "Under Review", "Approved", "Rejected"]
FINAL_STATUSES = ("Approved", "Rejected")

STATUS_COLORS = {
    "Pending": "#F59E0B",
    "Approved": "#10B981",
    "Rejected": "#EF4444",
    "Under Review": "#3B82F6",
}

# ─── Risk Bands ─────────────────────────────────────────────────────────────

RISK_LEVELS = {
    "Low": {"min_score": 700, "color": "#10B981"},
    "Medium": {"min_score": 600, "color": "#F59E0B"},
    "High": {"min_score": 1, "color": "#EF4444"},
}

MIN_APPLICATIONS_FOR_LIVE_CHARTS = 5

# ─── Demo Series (shown until enough live data exists) ──────────────────────

DEMO_STATUS_DATA = {"Pending": 42, "Approved": 25, "Rejected": 18, "Under Review": 15}
DEMO_RISK_DISTRIBUTION = {"Low": 45, "Medium": 30, "High": 25}
DEMO_RISK_FACTORS = {
    "Low Credit Score": 28,
    "High DTI Ratio": 42,
    "Limited Employment": 35,
    "Bankruptcies": 12,
    "Existing Loan Burden": 38,
}
DEMO_APPLICATION_VOLUME = [
    {"name": "Mon", "value": 12},
    {"name": "Tue", "value": 19},
    {"name": "Wed", "value": 15},
    {"name": "Thu", "value": 22},
    {"name": "Fri", "value": 28},
    {"name": "Sat", "value": 14},
    {"name": "Sun", "value": 8},
]
DEMO_APPROVAL_TREND = [
    {"name": "Jan", "approval": 68, "rejection": 32},
    {"name": "Feb", "approval": 72, "rejection": 28},
    {"name": "Mar", "approval": 65, "rejection": 35},
    {"name": "Apr", "approval": 70, "rejection": 30},
    {"name": "May", "approval": 75, "rejection": 25},
    {"name": "Jun", "approval": 82, "rejection": 18},
]

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

FRAME_COLUMNS = {
    "id": "",
    "applicant_name": "Unknown Applicant",
    "status": "Pending",
    "loan_amount": 0.0,
    "credit_score": 0,
    "debt_to_income_ratio": 0.0,
    "years_employed": 0.0,
    "existing_loans": False,
    "bankruptcies": False,
    "created_at": None,
}


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def applications_frame(applications: List[Dict]) -> pd.DataFrame:
    """Normalize application records into a DataFrame; missing values → defaults."""
    df = pd.DataFrame(applications, columns=list(FRAME_COLUMNS))
    for col, default in FRAME_COLUMNS.items():
        if default is not None:
            df[col] = df[col].fillna(default)
    df["credit_score"] = df["credit_score"].astype(int)
    df["debt_to_income_ratio"] = df["debt_to_income_ratio"].astype(float)
    df["existing_loans"] = df["existing_loans"].astype(bool)
    df["bankruptcies"] = df["bankruptcies"].astype(bool)
    return df


# ─── Overview ───────────────────────────────────────────────────────────────

def get_overview_stats(applications: List[Dict]) -> Dict:
    df = applications_frame(applications)
    total = len(df)
    approved = int((df["status"] == "Approved").sum())
    rejected = int((df["status"] == "Rejected").sum())
    pending = int((~df["status"].isin(FINAL_STATUSES)).sum())
    decided = approved + rejected
    approval_rate = _round_half_up(approved / decided * 100) if total and decided else 0

    return {
        "total": total,
        "pending": pending,
        "approved": approved,
        "rejected": rejected,
        "approval_rate": approval_rate,
        "total_requested": float(df["loan_amount"].sum()),
    }


def get_status_distribution(applications: List[Dict]) -> List[Dict]:
    if not applications:
        counts = DEMO_STATUS_DATA
    else:
        df = applications_frame(applications)
        counts = df["status"].value_counts().to_dict()
    return [
        {"name": status, "value": int(counts.get(status, 0)),
         "color": STATUS_COLORS[status]}
        for status in APPLICATION_STATUSES
    ]


def set_application_status(applications: List[Dict], app_id: str,
                           status: str) -> Optional[Dict]:
    """Update one application in place; returns it, or None if not found."""
    if status not in APPLICATION_STATUSES:
        raise ValueError(f"Unknown application status '{status}'")
    for app in applications:
        if app.get("id") == app_id:
            app["status"] = status
            return app
    return None


# ─── Risk Assessment ────────────────────────────────────────────────────────

def classify_risk(credit_score: int) -> Optional[str]:
    """Low ≥ 700, Medium ≥ 600, High > 0; None when no score is on file."""
    for level, band in RISK_LEVELS.items():
        if credit_score >= band["min_score"]:
            return level
    return None


def get_risk_distribution(applications: List[Dict]) -> List[Dict]:
    df = applications_frame(applications)
    levels = df["credit_score"].map(classify_risk).dropna()
    counts = {level: int((levels == level).sum()) for level in RISK_LEVELS}

    if sum(counts.values()) < MIN_APPLICATIONS_FOR_LIVE_CHARTS:
        counts = {level: max(counts[level], DEMO_RISK_DISTRIBUTION[level])
                  for level in RISK_LEVELS}

    total = sum(counts.values()) or 1
    return [
        {"name": f"{level} Risk", "value": counts[level],
         "color": RISK_LEVELS[level]["color"],
         "percent": _round_half_up(counts[level] / total * 100)}
        for level in RISK_LEVELS
    ]


def get_risk_factors(applications: List[Dict]) -> List[Dict]:
    df = applications_frame(applications)
    counts = {
        "Low Credit Score": int((df["credit_score"] < 650).sum()),
        "High DTI Ratio": int((df["debt_to_income_ratio"] > 0.40).sum()),
        "Limited Employment": int((df["years_employed"] < 2).sum()),
        "Bankruptcies": int(df["bankruptcies"].sum()),
        "Existing Loan Burden": int(df["existing_loans"].sum()),
    }
    if len(df) < MIN_APPLICATIONS_FOR_LIVE_CHARTS:
        counts = {name: max(count, DEMO_RISK_FACTORS[name])
                  for name, count in counts.items()}
    return [{"name": name, "count": count} for name, count in counts.items()]


def get_risk_trend(today: Optional[date] = None) -> List[Dict]:
    """
    Six-month illustrative trend ending in the current month: high risk
    easing, low risk growing, medium oscillating around 30.
    """
    if today is None:
        today = date.today()
    current = today.month - 1
    trend = []
    for i in range(5, -1, -1):
        factor = (5 - i) / 5
        trend.append({
            "month": MONTHS[(current - i) % 12],
            "High Risk": _round_half_up(25 * (1 - factor * 0.3)),
            "Medium Risk": 30 + _round_half_up(math.sin(i) * 5),
            "Low Risk": _round_half_up(45 * (1 + factor * 0.4)),
        })
    return trend


def _risk_factor_labels(row: pd.Series) -> List[str]:
    factors = []
    if row["credit_score"] < 620:
        factors.append("Low Credit Score")
    if row["debt_to_income_ratio"] > 0.45:
        factors.append("High Debt-to-Income")
    if row["years_employed"] < 1:
        factors.append("Limited Employment History")
    if row["bankruptcies"]:
        factors.append("Past Bankruptcy")
    if row["existing_loans"]:
        factors.append("Multiple Existing Loans")
    return factors


def get_high_risk_applications(applications: List[Dict], limit: int = 5) -> List[Dict]:
    df = applications_frame(applications)
    mask = ((df["credit_score"] < 620) |
            (df["debt_to_income_ratio"] > 0.45) |
            (df["years_employed"] < 1))
    flagged = df[mask].head(limit)
    return [
        {
            "id": row["id"],
            "applicant": row["applicant_name"],
            "credit_score": int(row["credit_score"]),
            "risk_factors": _risk_factor_labels(row),
            "status": row["status"],
        }
        for _, row in flagged.iterrows()
    ]


def get_average_risk_score(applications: List[Dict]) -> int:
    """Mean risk 0–100 over scored applications (850 → 0, 300 → 100)."""
    if not applications:
        return 50
    scores = applications_frame(applications)["credit_score"]
    scores = scores[scores > 0]
    if scores.empty:
        return 0
    risk = np.clip(np.floor(100 - (scores - 300) / 550 * 100 + 0.5), 0, 100)
    return _round_half_up(risk.mean())
