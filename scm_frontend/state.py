"""Helpers to manage Streamlit session state in one place."""
import logging
from typing import Optional

import streamlit as st

from scm_frontend.api import ApiClient, create_client
from scm_frontend.config import LOGIN_ROUTE, TOKEN_KEY, load_settings
from scm_frontend.models import BrowserLocation, ClientSettings

log = logging.getLogger("scm_frontend.state")

HOME_ROUTE = "/"


def ensure_base_state():
    """Ensure the base auth/navigation keys are present."""
    if "route" not in st.session_state:
        st.session_state.route = HOME_ROUTE
    if "user" not in st.session_state:
        st.session_state.user = None  # {"id": ..., "email": ..., "role": ...}
    if TOKEN_KEY not in st.session_state:
        st.session_state[TOKEN_KEY] = None


class SessionTokenStore:
    """Bearer token kept in the Streamlit session (one per browser tab)."""

    def __init__(self, key: str = TOKEN_KEY):
        self.key = key

    def get(self) -> Optional[str]:
        return st.session_state.get(self.key)

    def set(self, token: str) -> None:
        st.session_state[self.key] = token

    def clear(self) -> None:
        if self.key in st.session_state:
            del st.session_state[self.key]


def navigate(route: str) -> None:
    """Picked up by streamlit_app.py on the next run."""
    st.session_state.route = route


def current_location() -> Optional[BrowserLocation]:
    """
    Rebuild the page origin from the request headers of this session.
    Behind a reverse proxy the X-Forwarded-* headers describe what the browser sees.
    The visitor controls these headers; load_settings() drops hosts outside TRUSTED_HOSTS.
    """
    headers = st.context.headers
    host = headers.get("X-Forwarded-Host") or headers.get("Host")
    if not host:
        return None
    scheme = headers.get("X-Forwarded-Proto") or "http"
    host = host.split(",")[0].strip()
    scheme = scheme.split(",")[0].strip()
    return BrowserLocation.from_origin(f"{scheme}://{host}")


def get_settings() -> ClientSettings:
    """Client settings are resolved once per session and never change afterwards."""
    if "client_settings" not in st.session_state:
        location = current_location()
        if location is None:
            log.debug("No request headers, resolving API base for localhost")
        st.session_state.client_settings = load_settings(location)
    return st.session_state.client_settings


def get_client() -> ApiClient:
    if "api_client" not in st.session_state:
        st.session_state.api_client = create_client(get_settings(), SessionTokenStore(), navigate)
    return st.session_state.api_client


def close_client() -> None:
    client = st.session_state.pop("api_client", None)
    if client is not None:
        client.close()


def logout():
    """Forget the token and user, close the session's HTTP client, then show the login page."""
    SessionTokenStore().clear()
    st.session_state.user = None
    close_client()
    navigate(LOGIN_ROUTE)
