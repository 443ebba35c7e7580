"""Admin tools: approval reassignment, user deactivation, audit logs."""
import httpx
from pydantic import ValidationError
import streamlit as st

from scm_frontend.api import error_message
from scm_frontend.models import DeactivateUserRequest
from scm_frontend.resources import admin_logs, deactivate_user_by_email, reassign_approvals
from scm_frontend.state import get_client

ADMIN_ROLES = ("admin", "scm")


def render_admin_tools():
    """Only SCM and admin users get here; others see a notice."""
    role = (st.session_state.user or {}).get("role", "")
    if role not in ADMIN_ROLES:
        st.warning("Access denied: only SCM or Admin can access this page.")
        return

    st.header("Admin tools")
    client = get_client()

    st.subheader("Reassign pending approvals")
    if st.button("Reassign approvals", key="reassign_btn"):
        try:
            with st.spinner("Reassigning..."):
                resp = reassign_approvals(client)
            st.success(resp.get("message", "Reassignment completed."))
            if resp.get("data"):
                st.json(resp["data"])
        except httpx.HTTPError as e:
            st.error(error_message(e, "Failed to trigger reassignment."))

    st.subheader("Deactivate user")
    with st.form("deactivate_form", clear_on_submit=True):
        email = st.text_input("User email", key="deactivate_email")
        submitted = st.form_submit_button("Deactivate")
    if submitted:
        try:
            payload = DeactivateUserRequest(email=email.strip())
            resp = deactivate_user_by_email(client, payload.email)
            st.success(resp.get("message", "User deactivated."))
        except ValidationError:
            st.error("Enter a valid user email to deactivate.")
        except httpx.HTTPError as e:
            st.error(error_message(e, "Failed to deactivate user."))

    st.subheader("Logs")
    if st.button("Fetch logs", key="logs_btn"):
        try:
            logs = admin_logs(client)
        except httpx.HTTPError as e:
            st.error(error_message(e, "Failed to fetch logs."))
            return
        if logs:
            st.dataframe(logs, use_container_width=True)
        else:
            st.info("No logs found.")
