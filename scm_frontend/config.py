"""
App-level configuration.
Values come from environment variables (or a .env file next to the app) so the
same build can point at a local backend, a reverse-proxied gateway or an
absolute API host.
"""
import logging
import os
from typing import FrozenSet, Iterable, Mapping, Optional

from dotenv import load_dotenv

from scm_frontend.base_url import resolve_base_configuration
from scm_frontend.models import BrowserLocation, ClientSettings

load_dotenv()

log = logging.getLogger("scm_frontend.config")

# API base: absolute URL ("https://gw.example.com/scm") or a path prefix ("/api-gateway").
# API_BASE_URL is the legacy name; the first variable that is set wins, even if empty.
API_BASE_ENV_VARS = ("API_BASE", "API_BASE_URL")

# Page hosts whose Host / X-Forwarded-Host headers may pick the backend,
# comma separated: "portal.acme.com,*.acme.com". Empty means none.
TRUSTED_HOSTS_ENV_VAR = "TRUSTED_HOSTS"

REQUEST_TIMEOUT = 15.0  # seconds, every call
LOCAL_BACKEND_PORT = 5000  # backend port for localhost / *.local pages

# Auth
TOKEN_KEY = "token"
LOGIN_ROUTE = "/login"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")

# Used when the app runs outside a browser session (scripts, tests)
# and when the page host is not trusted
DEFAULT_LOCATION = BrowserLocation.from_origin("http://localhost")


def read_configured_base(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the first API base variable that is present, or an empty string."""
    env = os.environ if environ is None else environ
    for name in API_BASE_ENV_VARS:
        if name in env:
            return env[name]
    return ""


def read_trusted_hosts(environ: Optional[Mapping[str, str]] = None) -> FrozenSet[str]:
    env = os.environ if environ is None else environ
    raw = env.get(TRUSTED_HOSTS_ENV_VAR, "")
    return frozenset(host.strip().lower() for host in raw.split(",") if host.strip())


def is_trusted_host(hostname: str, trusted: Iterable[str]) -> bool:
    """Exact match, or ``*.example.com`` for any subdomain of example.com."""
    hostname = (hostname or "").lower()
    if not hostname:
        return False
    for pattern in trusted:
        if pattern.startswith("*."):
            if hostname.endswith(pattern[1:]):
                return True
        elif hostname == pattern:
            return True
    return False


def load_settings(
    location: Optional[BrowserLocation] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientSettings:
    """
    Build the immutable client settings for one browser session.

    The page location is rebuilt from request headers the visitor controls,
    so it only picks the backend when its host is listed in TRUSTED_HOSTS.
    """
    if location is not None and not is_trusted_host(location.hostname, read_trusted_hosts(environ)):
        log.info("Page host %r is not in %s, ignoring it", location.hostname, TRUSTED_HOSTS_ENV_VAR)
        location = None

    base = resolve_base_configuration(
        read_configured_base(environ),
        location or DEFAULT_LOCATION,
        local_port=LOCAL_BACKEND_PORT,
    )
    return ClientSettings(
        base=base,
        timeout=REQUEST_TIMEOUT,
        token_key=TOKEN_KEY,
        login_route=LOGIN_ROUTE,
    )
