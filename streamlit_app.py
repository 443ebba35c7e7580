import streamlit as st

from scm_frontend.config import LOGIN_ROUTE
from scm_frontend.logging_config import setup_logging
from scm_frontend.state import (
    SessionTokenStore,
    ensure_base_state,
    get_settings,
    logout,
)
from scm_frontend.views.admin_tools import render_admin_tools
from scm_frontend.views.auth import show_auth_page
from scm_frontend.views.dashboard import render_dashboard
from scm_frontend.views.supplier_evaluations import render_supplier_evaluations

PAGES = {
    "Dashboard": render_dashboard,
    "Supplier evaluations": render_supplier_evaluations,
    "Admin tools": render_admin_tools,
}

# ---------- Layout + main app ----------

st.set_page_config(
    page_title="SCM Portal",
    page_icon=":package:",
    layout="wide",
)

if "logging_ready" not in st.session_state:
    setup_logging()
    st.session_state.logging_ready = True

ensure_base_state()
get_settings()

# No token (never logged in, or cleared after a 401) -> login page only
if not SessionTokenStore().get() or st.session_state.route == LOGIN_ROUTE:
    show_auth_page()
    st.stop()

# ---------- Sidebar: navigation + account ----------
with st.sidebar:
    st.header("SCM Portal")
    user = st.session_state.user or {}
    if user.get("email"):
        st.write(f"**{user['email']}**")
        st.caption(f"Role: {user.get('role', 'user')}")
    page = st.radio("Go to", list(PAGES), key="page")
    st.markdown("---")
    st.caption(f"API: {get_settings().base.api_base or '(relative)'}")
    if st.button("Logout", key="logout_btn"):
        logout()
        st.toast("Logged out", icon="✅")
        st.rerun()

PAGES[page]()

# A call above may have hit a 401 and cleared the token
if st.session_state.route == LOGIN_ROUTE:
    st.rerun()
