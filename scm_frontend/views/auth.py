"""Auth page rendering (login + account request)."""
import httpx
from pydantic import ValidationError
import streamlit as st

from scm_frontend.api import error_message
from scm_frontend.models import RegisterRequest
from scm_frontend.resources import submit_register_request
from scm_frontend.state import HOME_ROUTE, SessionTokenStore, get_client, navigate


def show_auth_page():
    """Full-page Login / Request access, shown when there is no stored token."""
    st.title("SCM Portal")
    st.caption("Procurement requests, approvals and sourcing events")

    tabs = st.tabs(["Login", "Request access"])

    # ----- Login tab -----
    with tabs[0]:
        st.subheader("Sign in")
        with st.form("login_form", clear_on_submit=False):
            login_email = st.text_input("Work email", key="login_email")
            login_password = st.text_input("Password", type="password", key="login_password")
            login_submitted = st.form_submit_button("Sign in")
        if login_submitted:
            try:
                data = get_client().post("/auth/login", {"email": login_email, "password": login_password}) or {}
                # backend returns {"token": ..., "user": {...}}; older builds use access_token
                token = data.get("token") or data.get("access_token")
                if not token:
                    st.error("Login failed: no token in response")
                else:
                    SessionTokenStore().set(token)
                    st.session_state.user = data.get("user")
                    navigate(HOME_ROUTE)
                    st.toast("Login successful", icon="\U00002705")
                    st.rerun()
            except httpx.HTTPStatusError as he:
                st.error(f"Login failed: {error_message(he, 'Invalid email or password')}")
            except httpx.RequestError as ne:
                st.error(f"Login error: {error_message(ne)}")

    # ----- Request access tab -----
    with tabs[1]:
        st.subheader("Request an account")
        st.caption("An administrator reviews every request before the account is activated.")
        with st.form("register_request_form", clear_on_submit=False):
            reg_name = st.text_input("Full name", key="reg_name")
            reg_email = st.text_input("Work email", key="reg_email")
            reg_password = st.text_input("Password", type="password", key="reg_password")
            reg_confirm = st.text_input("Confirm password", type="password", key="reg_confirm")
            reg_submitted = st.form_submit_button("Submit request")
        if reg_submitted:
            if reg_password != reg_confirm:
                st.error("Passwords do not match.")
                return
            try:
                payload = RegisterRequest(name=reg_name, email=reg_email, password=reg_password)
                resp = submit_register_request(get_client(), payload.model_dump())
                st.success((resp or {}).get("message", "Request submitted. You will be notified once approved."))
            except ValidationError as ve:
                st.error(f"Invalid request: {ve.errors()[0].get('msg', ve)}")
            except httpx.HTTPError as he:
                st.error(f"Request failed: {error_message(he)}")
