"""Supplier evaluation list. Scores come from the backend and are only displayed."""
import httpx
import streamlit as st

from scm_frontend.api import error_message
from scm_frontend.resources import format_score, supplier_evaluations
from scm_frontend.state import get_client

SCORE_COLUMNS = (
    ("price_score", "Price"),
    ("safety_score", "Safety"),
    ("value_score", "Value"),
    ("jci_score", "Compliance"),
    ("delivery_score", "Delivery"),
    ("composite_score", "Composite"),
)


def evaluation_rows(evaluations):
    """Flatten evaluations into display rows."""
    rows = []
    for evaluation in evaluations:
        row = {"Supplier": evaluation.get("supplier_name") or "-"}
        for key, label in SCORE_COLUMNS:
            row[label] = format_score(evaluation.get(key))
        rows.append(row)
    return rows


def render_supplier_evaluations():
    st.header("Supplier evaluations")
    search = st.text_input("Search supplier", key="supplier_search")

    params = {"search": search.strip()} if search.strip() else {}
    try:
        evaluations = supplier_evaluations(get_client()).list(params)
    except httpx.HTTPError as e:
        st.error(f"Failed to load supplier evaluations: {error_message(e)}")
        return

    if not evaluations:
        st.info("No supplier evaluations yet.")
        return
    st.dataframe(evaluation_rows(evaluations), use_container_width=True, hide_index=True)
