"""Dashboard: summary counters and department spending per month."""
from datetime import date

import httpx
import streamlit as st

from scm_frontend.api import error_message
from scm_frontend.resources import dashboard_summary, department_spending, pivot_department_spending
from scm_frontend.state import get_client

SUMMARY_METRICS = (
    ("total_requests", "Total requests"),
    ("pending_requests", "Pending"),
    ("approved_requests", "Approved"),
    ("rejected_requests", "Rejected"),
)


def render_dashboard():
    st.header("Dashboard")
    client = get_client()

    try:
        summary = dashboard_summary(client)
    except httpx.HTTPError as e:
        st.error(f"Failed to load dashboard: {error_message(e)}")
        summary = {}

    if summary:
        cols = st.columns(len(SUMMARY_METRICS))
        for col, (key, label) in zip(cols, SUMMARY_METRICS):
            col.metric(label, summary.get(key, 0))

    st.subheader("Department spending")
    this_year = date.today().year
    year = st.selectbox("Year", options=list(range(this_year, this_year - 5, -1)), index=0)

    try:
        rows = department_spending(client, year)
    except httpx.HTTPError as e:
        st.warning(f"Could not load department spending: {error_message(e)}")
        return

    chart, departments = pivot_department_spending(rows)
    if not chart:
        st.info("No spending recorded for this year.")
        return

    st.bar_chart(chart, x="month", y=departments, stack=True)
