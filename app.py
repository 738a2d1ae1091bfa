"""
JB Capital — Loan Origination
Main Streamlit Application
"""

import os
import sys

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

# Add project root to path
sys.path.insert(0, os.path.dirname(__file__))

from jbcapital.loan_calculator import (
    calculate_loan_quote, generate_repayment_schedule, get_cost_breakdown,
    format_currency, DEFAULT_INTEREST_RATE, CALCULATOR_MIN_AMOUNT,
    CALCULATOR_MAX_AMOUNT, CALCULATOR_AMOUNT_STEP, CALCULATOR_MIN_TERM,
    CALCULATOR_MAX_TERM,
)
from jbcapital.quote_storage import (
    save_loan_calculator_data, get_loan_calculator_data, clear_loan_calculator_data,
)
from jbcapital.application_schema import (
    LOAN_PURPOSES, PROVINCES, EMPLOYMENT_STATUSES, EMPLOYMENT_TYPES,
    MIN_LOAN_AMOUNT, MAX_LOAN_AMOUNT, MIN_LOAN_TERM, MAX_LOAN_TERM,
)
from jbcapital.application_wizard import ApplicationWizard, STEPS, TOTAL_STEPS
from jbcapital.documents import (
    REQUIRED_DOCUMENTS, validate_upload, get_upload_progress, format_file_size,
)
from jbcapital.id_validator import validate_id_number
from jbcapital.eligibility import check_eligibility
from jbcapital.admin_analytics import (
    get_overview_stats, get_status_distribution, get_risk_distribution,
    get_risk_factors, get_risk_trend, get_high_risk_applications,
    get_average_risk_score, set_application_status, classify_risk,
    applications_frame, APPLICATION_STATUSES, DEMO_APPLICATION_VOLUME,
    DEMO_APPROVAL_TREND,
)
from jbcapital.notifications import (
    NotificationCenter, notify_application_submitted, notify_status_change,
    NOTIFICATION_TYPES,
)

# ─── Page Config ────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="JB Capital — Personal Loans",
    page_icon="R",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
.block-container { padding-top: 1.5rem; }
.brand-text { font-size: 1.4rem; font-weight: 800; color: #0066cc; }
.brand-sub { font-size: 0.75rem; color: #64748b; }
.metric-card {
    background: #ffffff; border: 1px solid #e2e8f0; border-radius: 12px;
    padding: 16px 20px; margin-bottom: 12px;
}
.metric-label { font-size: 0.8rem; color: #64748b; }
.metric-value { font-size: 1.5rem; font-weight: 700; color: #0f172a; }
.field-error { color: #ef4444; font-size: 0.8rem; }
</style>
""", unsafe_allow_html=True)


# ─── Data Loading ───────────────────────────────────────────────────────────
@st.cache_data
def load_demo_applications():
    from jbcapital.demo_applications import generate_applications
    return generate_applications()


def init_state():
    if "current_page" not in st.session_state:
        st.session_state.current_page = "Calculator"
    if "applications" not in st.session_state:
        st.session_state.applications = []
    if "notifications" not in st.session_state:
        st.session_state.notifications = NotificationCenter()
    if "wizard" not in st.session_state:
        st.session_state.wizard = ApplicationWizard()
    if "step_errors" not in st.session_state:
        st.session_state.step_errors = {}


# ─── Helpers ────────────────────────────────────────────────────────────────
def metric_card(label, value):
    st.markdown(f"""
    <div class="metric-card">
        <div class="metric-label">{label}</div>
        <div class="metric-value">{value}</div>
    </div>
    """, unsafe_allow_html=True)


def create_breakdown_pie(quote):
    slices = get_cost_breakdown(quote)
    fig = go.Figure(go.Pie(
        labels=[s["name"] for s in slices],
        values=[s["value"] for s in slices],
        marker={"colors": [s["color"] for s in slices]},
        hole=0.6,
        sort=False,
    ))
    fig.update_layout(
        height=280, margin={"l": 10, "r": 10, "t": 10, "b": 10},
        annotations=[{"text": f"<b>{format_currency(quote['total_repayment'], 0)}</b>"
                              "<br>Total Repayment",
                      "showarrow": False, "font": {"size": 14}}],
    )
    return fig


def show_errors(errors, field):
    if field in errors:
        st.markdown(f'<div class="field-error">{errors[field]}</div>', unsafe_allow_html=True)


def quote_breakdown(quote):
    rows = [
        ("Principal Amount", format_currency(quote["principal"])),
        (f"Total Interest ({quote['annual_interest_rate']}%)", format_currency(quote["total_interest"])),
        ("Initiation Fee", format_currency(quote["initiation_fee"])),
        ("Monthly Service Fee", f"{format_currency(quote['monthly_service_fee'])}/month"),
        ("Credit-Life Insurance", f"{format_currency(quote['monthly_insurance'])}/month"),
        ("Total Monthly Payment", format_currency(quote["total_monthly_payment"])),
        ("Total Cost of Credit", format_currency(quote["total_repayment"])),
    ]
    st.table(pd.DataFrame(rows, columns=["Item", "Amount"]).set_index("Item"))


# ════════════════════════════════════════════════════════════════════════════
# PAGE: LOAN CALCULATOR
# ════════════════════════════════════════════════════════════════════════════
def page_calculator():
    st.subheader("Loan Calculator")
    st.caption(f"{DEFAULT_INTEREST_RATE}% annual interest rate")

    left, right = st.columns(2)
    with left:
        amount = st.slider("Loan Amount (R)", CALCULATOR_MIN_AMOUNT, CALCULATOR_MAX_AMOUNT,
                           10000, CALCULATOR_AMOUNT_STEP)
        term = st.slider("Loan Duration (Months)", CALCULATOR_MIN_TERM, CALCULATOR_MAX_TERM, 3)
        quote = calculate_loan_quote(amount, term)

        with st.expander("View Cost Breakdown"):
            quote_breakdown(quote)
            schedule = generate_repayment_schedule(amount, DEFAULT_INTEREST_RATE, term)
            st.dataframe(pd.DataFrame(schedule), use_container_width=True, hide_index=True)

        if st.button("Apply Now", type="primary", use_container_width=True):
            save_loan_calculator_data(st.session_state, quote)
            st.session_state.wizard.prefill_from_quote(quote)
            st.session_state.current_page = "Apply"
            st.rerun()

    with right:
        st.plotly_chart(create_breakdown_pie(quote), use_container_width=True)
        c1, c2 = st.columns(2)
        with c1:
            metric_card("Monthly Payment", format_currency(quote["total_monthly_payment"]))
        with c2:
            metric_card("Total Interest", format_currency(quote["total_interest"]))


# ════════════════════════════════════════════════════════════════════════════
# PAGE: APPLICATION WIZARD
# ════════════════════════════════════════════════════════════════════════════
def _step_personal(wizard, errors):
    fd = wizard.form_data
    with st.form("personal"):
        c1, c2 = st.columns(2)
        data = {
            "first_name": c1.text_input("First Name", fd["first_name"]),
            "last_name": c2.text_input("Last Name", fd["last_name"]),
            "id_number": c1.text_input("SA ID Number", fd["id_number"], max_chars=13),
            "phone": c2.text_input("Phone Number", fd["phone"], placeholder="0821234567"),
            "email": c1.text_input("Email", fd["email"]),
            "password": c1.text_input("Password", fd["password"], type="password"),
            "confirm_password": c2.text_input("Confirm Password", fd["confirm_password"],
                                              type="password"),
            "address": c1.text_input("Street Address", fd["address"]),
            "suburb": c2.text_input("Suburb", fd["suburb"]),
            "city": c1.text_input("City", fd["city"]),
            "province": c2.selectbox("Province", PROVINCES,
                                     index=PROVINCES.index(fd["province"])
                                     if fd["province"] in PROVINCES else 2),
            "postal_code": c1.text_input("Postal Code", fd["postal_code"], max_chars=4),
        }
        terms = st.checkbox("I accept the terms and conditions")
        submitted = st.form_submit_button("Continue")
    for field in [*data, "terms"]:
        show_errors(errors, field)
    if data["id_number"]:
        verdict = validate_id_number(data["id_number"])
        (st.success if verdict["valid"] else st.warning)(verdict["message"])
    if submitted:
        if not terms:
            return {"terms": "Please accept the terms and conditions"}
        return wizard.submit_step("personal", data)
    return None


def _step_employment(wizard, errors):
    fd = wizard.form_data
    with st.form("employment"):
        c1, c2 = st.columns(2)
        data = {
            "employment_status": c1.selectbox("Employment Status", EMPLOYMENT_STATUSES,
                                              index=EMPLOYMENT_STATUSES.index(fd["employment_status"])),
            "employment_type": c2.selectbox("Employment Type", EMPLOYMENT_TYPES),
            "employer_name": c1.text_input("Employer Name", fd["employer_name"]),
            "job_title": c2.text_input("Job Title", fd["job_title"]),
            "years_employed": c1.number_input("Years Employed", 0.0, 60.0,
                                              float(fd["years_employed"]), 0.5),
            "monthly_income": c2.number_input("Monthly Income (R)", 0.0, None,
                                              float(fd["monthly_income"]), 500.0),
            "payment_date": c1.text_input("Salary Payment Date", fd.get("payment_date") or ""),
            "employment_sector": c2.text_input("Sector", fd.get("employment_sector") or ""),
        }
        submitted = st.form_submit_button("Continue")
    for field in data:
        show_errors(errors, field)
    return wizard.submit_step("employment", data) if submitted else None


def _step_financial(wizard, errors):
    fd = wizard.form_data
    with st.form("financial"):
        c1, c2, c3 = st.columns(3)
        data = {
            "credit_score": c1.number_input("Credit Score", 0, 850, int(fd["credit_score"])),
            "existing_loans": c2.checkbox("I have existing loans", fd["existing_loans"]),
            "existing_loan_amount": c3.number_input("Existing Loan Amount (R)", 0.0, None,
                                                    float(fd["existing_loan_amount"])),
            "monthly_debt": c1.number_input("Monthly Debt Repayments (R)", 0.0, None,
                                            float(fd["monthly_debt"])),
            "rent_mortgage": c2.number_input("Rent / Mortgage (R)", 0.0, None, float(fd["rent_mortgage"])),
            "car_payment": c3.number_input("Car Payment (R)", 0.0, None, float(fd["car_payment"])),
            "groceries": c1.number_input("Groceries (R)", 0.0, None, float(fd["groceries"])),
            "utilities": c2.number_input("Utilities (R)", 0.0, None, float(fd["utilities"])),
            "insurance": c3.number_input("Insurance (R)", 0.0, None, float(fd["insurance"])),
            "other_expenses": c1.number_input("Other Expenses (R)", 0.0, None, float(fd["other_expenses"])),
            "savings": c2.number_input("Savings (R)", 0.0, None, float(fd["savings"])),
            "bank_name": c3.text_input("Bank Name", fd["bank_name"]),
            "account_type": c1.selectbox("Account Type", ["cheque", "savings", "transmission"]),
            "banking_period": c2.number_input("Years with Bank", 0.0, 80.0, float(fd["banking_period"])),
        }
        submitted = st.form_submit_button("Continue")
    for field in data:
        show_errors(errors, field)
    return wizard.submit_step("financial", data) if submitted else None


def _step_loan_details(wizard, errors):
    fd = wizard.form_data
    purposes = list(LOAN_PURPOSES)
    amount = st.number_input("Loan Amount (R)", float(MIN_LOAN_AMOUNT), float(MAX_LOAN_AMOUNT),
                             float(max(fd["loan_amount"], MIN_LOAN_AMOUNT)), 1000.0)
    term = st.slider("Loan Term (Months)", MIN_LOAN_TERM, MAX_LOAN_TERM,
                     int(min(max(fd["loan_term"], MIN_LOAN_TERM), MAX_LOAN_TERM)))
    purpose = st.selectbox("Loan Purpose", purposes,
                           index=purposes.index(fd["loan_purpose"]),
                           format_func=LOAN_PURPOSES.get)
    reason = st.text_area("Reason for Loan", fd.get("loan_reason") or "")

    quote = calculate_loan_quote(amount, term)
    c1, c2 = st.columns(2)
    with c1:
        quote_breakdown(quote)
    with c2:
        st.plotly_chart(create_breakdown_pie(quote), use_container_width=True)

    for field in ("loan_amount", "loan_term", "loan_purpose"):
        show_errors(errors, field)
    if st.button("Continue", type="primary"):
        return wizard.submit_step("loan_details", {
            "loan_amount": amount, "loan_term": term,
            "loan_purpose": purpose, "loan_reason": reason,
        })
    return None


def _step_documents(wizard, errors):
    uploaded = dict(wizard.form_data.get("uploaded_documents") or {})
    st.progress(get_upload_progress(uploaded) / 100)
    for key, spec in REQUIRED_DOCUMENTS.items():
        label = f"{spec['name']}{' *' if spec['required'] else ''}"
        files = st.file_uploader(label, type=[e.lstrip(".") for e in spec["accepted"]],
                                 accept_multiple_files=True, key=f"doc_{key}",
                                 help=spec["description"])
        accepted = []
        for f in files or []:
            verdict = validate_upload(key, f.name, f.size)
            if verdict["valid"]:
                accepted.append(f.name)
                st.caption(f"✓ {f.name} ({format_file_size(f.size)})")
            else:
                st.warning(verdict["message"])
        if accepted:
            uploaded[key] = accepted
    show_errors(errors, "uploaded_documents")
    if st.button("Continue", type="primary"):
        return wizard.submit_step("documents", {"uploaded_documents": uploaded})
    return None


def _step_review(wizard, errors):
    fd = wizard.form_data
    st.markdown("#### Applicant")
    st.write(f"**{fd['first_name']} {fd['last_name']}** · ID {fd['id_number']} · "
             f"{fd.get('gender', '')} · born {fd.get('date_of_birth', '')}")
    st.write(f"{fd['email']} · {fd['phone']} · {fd['address']}, {fd['city']}, "
             f"{fd['province']} {fd['postal_code']}")
    st.markdown("#### Loan")
    if fd.get("loan_calculation"):
        quote_breakdown(fd["loan_calculation"])
    st.markdown("#### Documents")
    for key, names in (fd.get("uploaded_documents") or {}).items():
        st.write(f"{REQUIRED_DOCUMENTS[key]['name']}: {', '.join(names)}")

    confirm = st.checkbox("I confirm that the information provided is correct")
    if st.button("Submit Application", type="primary", disabled=not confirm):
        try:
            application = wizard.build_application()
        except ValueError as e:
            st.error(str(e))
            return None
        st.session_state.applications.append(application)
        notify_application_submitted(st.session_state.notifications, application)
        clear_loan_calculator_data(st.session_state)
        st.session_state.wizard = ApplicationWizard()
        st.success(f"Application {application['id']} submitted. We'll be in touch shortly.")
    return None


STEP_RENDERERS = {
    "personal": _step_personal,
    "employment": _step_employment,
    "financial": _step_financial,
    "loan_details": _step_loan_details,
    "documents": _step_documents,
    "review": _step_review,
}


def page_apply():
    wizard = st.session_state.wizard
    if wizard.form_data.get("loan_term", 0) == 0:
        wizard.prefill_from_quote(get_loan_calculator_data(st.session_state))

    st.subheader("Loan Application")
    st.progress(wizard.progress / 100)
    st.caption(f"Step {wizard.current_step} of {TOTAL_STEPS}: {STEPS[wizard.current_step - 1][1]}")

    errors = st.session_state.step_errors
    result = STEP_RENDERERS[wizard.step_key](wizard, errors)
    if result is not None:
        st.session_state.step_errors = result
        st.rerun()

    if wizard.current_step > 1 and st.button("Back"):
        wizard.prev_step()
        st.session_state.step_errors = {}
        st.rerun()


# ════════════════════════════════════════════════════════════════════════════
# PAGE: ELIGIBILITY
# ════════════════════════════════════════════════════════════════════════════
def page_eligibility():
    st.subheader("Check Your Eligibility")
    with st.form("eligibility"):
        c1, c2 = st.columns(2)
        annual_income = c1.number_input("Annual Income (R)", 0.0, None, 50000.0, 1000.0)
        credit_score = c2.number_input("Credit Score", 300, 850, 700)
        monthly_debt = c1.number_input("Monthly Debt (R)", 0.0, None, 1500.0, 100.0)
        status = c2.selectbox("Employment Status", EMPLOYMENT_STATUSES)
        amount = c1.number_input("Loan Amount (R)", 1000.0, 1000000.0, 25000.0, 1000.0)
        term = c2.number_input("Loan Term (Years)", 1, 30, 5)
        submitted = st.form_submit_button("Check Eligibility")
    if not submitted:
        return

    result = check_eligibility(annual_income, credit_score, monthly_debt, status, amount, term)
    if result["errors"]:
        for message in result["errors"].values():
            st.error(message)
        return
    c1, c2, c3 = st.columns(3)
    with c1:
        metric_card("Eligibility Score", f"{result['eligibility_score']}/100")
    with c2:
        metric_card("Maximum Loan", format_currency(result["max_loan_amount"], 0))
    with c3:
        metric_card("Indicative Rate", f"{result['interest_rate']}%")
    if result["eligible"]:
        st.success("The amount you asked for is within your estimated limit.")
    else:
        st.warning("The amount you asked for exceeds your estimated limit.")


# ════════════════════════════════════════════════════════════════════════════
# PAGE: ADMIN DASHBOARD
# ════════════════════════════════════════════════════════════════════════════
def _admin_overview(applications):
    stats = get_overview_stats(applications)
    cols = st.columns(4)
    for col, (label, value) in zip(cols, [
        ("Total Applications", stats["total"]),
        ("Pending", stats["pending"]),
        ("Approved", stats["approved"]),
        ("Approval Rate", f"{stats['approval_rate']}%"),
    ]):
        with col:
            metric_card(label, value)

    c1, c2 = st.columns(2)
    with c1:
        dist = get_status_distribution(applications)
        fig = px.pie(pd.DataFrame(dist), names="name", values="value", hole=0.5,
                     color="name", color_discrete_map={d["name"]: d["color"] for d in dist})
        fig.update_layout(height=300, margin={"t": 30, "b": 10}, title="Applications by Status")
        st.plotly_chart(fig, use_container_width=True)
    with c2:
        fig = px.bar(pd.DataFrame(DEMO_APPLICATION_VOLUME), x="name", y="value",
                     title="Weekly Application Volume")
        fig.update_layout(height=300, margin={"t": 30, "b": 10})
        st.plotly_chart(fig, use_container_width=True)

    trend = pd.DataFrame(DEMO_APPROVAL_TREND)
    fig = px.line(trend, x="name", y=["approval", "rejection"], title="Approval Trend (%)")
    fig.update_layout(height=300, margin={"t": 30, "b": 10})
    st.plotly_chart(fig, use_container_width=True)

    if not applications:
        st.info("No applications yet.")
        return
    df = applications_frame(applications)
    df["risk"] = df["credit_score"].map(classify_risk)
    st.dataframe(df[["id", "applicant_name", "loan_amount", "status", "credit_score",
                     "risk", "created_at"]], use_container_width=True, hide_index=True)

    with st.form("status_update"):
        c1, c2 = st.columns(2)
        app_id = c1.selectbox("Application", df["id"].tolist())
        status = c2.selectbox("New Status", APPLICATION_STATUSES)
        if st.form_submit_button("Update Status"):
            app = set_application_status(applications, app_id, status)
            if app:
                notify_status_change(st.session_state.notifications, app)
                st.rerun()


def _admin_risk(applications):
    c1, c2 = st.columns([1, 2])
    with c1:
        metric_card("Average Risk Score", f"{get_average_risk_score(applications)}/100")
        dist = get_risk_distribution(applications)
        fig = px.pie(pd.DataFrame(dist), names="name", values="value", hole=0.5,
                     color="name", color_discrete_map={d["name"]: d["color"] for d in dist})
        fig.update_layout(height=280, margin={"t": 10, "b": 10})
        st.plotly_chart(fig, use_container_width=True)
    with c2:
        factors = pd.DataFrame(get_risk_factors(applications))
        fig = px.bar(factors, x="count", y="name", orientation="h", title="Risk Factors")
        fig.update_layout(height=280, margin={"t": 30, "b": 10})
        st.plotly_chart(fig, use_container_width=True)

    trend = pd.DataFrame(get_risk_trend())
    fig = px.line(trend, x="month", y=["High Risk", "Medium Risk", "Low Risk"],
                  title="Risk Trend (6 months)")
    fig.update_layout(height=300, margin={"t": 30, "b": 10})
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("#### High-Risk Applications")
    high_risk = get_high_risk_applications(applications)
    if not high_risk:
        st.info("No high-risk applications.")
    for app in high_risk:
        st.write(f"**{app['id']}** · {app['applicant']} · score {app['credit_score']} · "
                 f"{app['status']} · {', '.join(app['risk_factors'])}")


def _admin_notifications():
    center = st.session_state.notifications
    c1, c2, c3 = st.columns([2, 1, 1])
    type_filter = c1.selectbox("Type", ["all", *NOTIFICATION_TYPES])
    if c2.button("Mark all as read"):
        center.mark_all_as_read()
        st.rerun()
    if c3.button("Clear"):
        center.clear()
        st.rerun()

    st.caption(f"{center.unread_count} unread")
    for n in center.filter(type=None if type_filter == "all" else type_filter):
        marker = "" if n["read"] else "🔵 "
        with st.expander(f"{marker}{n['title']} · {n['date']}"):
            st.write(n["message"])
            if not n["read"] and st.button("Mark as read", key=f"read_{n['id']}"):
                center.mark_as_read(n["id"])
                st.rerun()

    with st.expander("Notification settings"):
        settings = center.settings
        center.update_settings(
            sound_enabled=st.toggle("Sound", settings["sound_enabled"]),
            browser_notifications_enabled=st.toggle(
                "Browser notifications", settings["browser_notifications_enabled"]),
            email_notifications_enabled=st.toggle(
                "Email notifications", settings["email_notifications_enabled"]),
            sound_volume=st.slider("Volume", 0.0, 1.0, settings["sound_volume"]),
        )
        if st.button("Send test notification"):
            center.add_notification("Test notification",
                                    "This is a test notification to check your settings")
            st.rerun()


def page_admin():
    st.subheader("Admin Dashboard")
    applications = st.session_state.applications
    if not applications and st.button("Load demo applications"):
        applications.extend(dict(a) for a in load_demo_applications())
        st.rerun()

    overview_tab, risk_tab, notify_tab = st.tabs(["Overview", "Risk Assessment", "Notifications"])
    with overview_tab:
        _admin_overview(applications)
    with risk_tab:
        _admin_risk(applications)
    with notify_tab:
        _admin_notifications()


PAGES = {
    "Calculator": page_calculator,
    "Apply": page_apply,
    "Eligibility": page_eligibility,
    "Admin": page_admin,
}


def main():
    init_state()

    # ── Top Navigation Bar ───────────────────────────────────────────────
    brand_col, nav_col = st.columns([1.2, 4.8])
    with brand_col:
        st.markdown("""
        <div class="brand-text">JB Capital</div>
        <div class="brand-sub">Personal Loans</div>
        """, unsafe_allow_html=True)
    with nav_col:
        btn_cols = st.columns(len(PAGES))
        for i, label in enumerate(PAGES):
            with btn_cols[i]:
                kind = "primary" if st.session_state.current_page == label else "secondary"
                if st.button(label, key=f"nav_{i}", type=kind, use_container_width=True):
                    st.session_state.current_page = label
                    st.rerun()
    st.divider()

    PAGES[st.session_state.current_page]()


if __name__ == "__main__":
    main()
