"""
Resolve where API requests are sent.

Three deployment shapes are supported:

- an absolute backend URL, optionally with a path (``https://gw.example.com/scm/v2``);
- a relative path prefix when the API is reverse-proxied under the page's own
  domain (``/api-gateway``);
- nothing configured, in which case the backend is discovered from the page
  hostname (local port 5000, bare IP, the ``api.`` sibling of the site).

The configured value always wins over the browser-derived origin. The path
prefix only ever comes from configuration.
"""
import logging
import re
from typing import Optional
from urllib.parse import urlsplit

import tldextract

from scm_frontend.models import BaseConfiguration, BrowserCandidates, BrowserLocation

log = logging.getLogger("scm_frontend.base_url")

# Public Suffix List snapshot bundled with tldextract: no network fetch, no disk cache
_split_domain = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())

ABSOLUTE_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
IPV4_RE = re.compile(r"^(\d+\.){3}\d+$")

LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})
DEFAULT_LOCAL_PORT = 5000
DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_configured_base(value: Optional[str]) -> str:
    """Trim whitespace and every trailing slash so paths join predictably."""
    return (value or "").strip().rstrip("/")


def is_absolute_url(value: str) -> bool:
    return bool(ABSOLUTE_URL_RE.match(value or ""))


def _clean_prefix(path: str) -> str:
    """Exactly one leading slash, no trailing slash, or empty."""
    stripped = path.strip("/")
    return f"/{stripped}" if stripped else ""


def _host_literal(hostname: str) -> str:
    return f"[{hostname}]" if ":" in hostname else hostname


def _split_absolute(value: str) -> BaseConfiguration:
    """Split an absolute URL into origin + path prefix. Raises ValueError when malformed."""
    parts = urlsplit(value)
    if any(ch.isspace() for ch in parts.netloc):
        raise ValueError("whitespace in host")
    hostname = parts.hostname
    if not hostname:
        raise ValueError("missing host")

    scheme = parts.scheme.lower()
    port = parts.port  # raises ValueError for non-numeric or out-of-range ports
    host = _host_literal(hostname)
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"

    return BaseConfiguration(origin=f"{scheme}://{host}", path_prefix=_clean_prefix(parts.path))


def build_base_configuration(configured: Optional[str]) -> BaseConfiguration:
    """Turn the configured API base into an origin and/or a path prefix."""
    value = normalize_configured_base(configured)
    if not value:
        return BaseConfiguration()

    if is_absolute_url(value):
        try:
            return _split_absolute(value)
        except ValueError as exc:
            log.warning("Invalid absolute API base %r (%s), using it verbatim", value, exc)
            return BaseConfiguration(origin=value)

    return BaseConfiguration(path_prefix=_clean_prefix(value))


def resolve_browser_candidates(
    location: Optional[BrowserLocation],
    local_port: int = DEFAULT_LOCAL_PORT,
) -> BrowserCandidates:
    """
    Guess the backend origin from the page location.

    Order matters: local hosts first, then IP literals, then hosts that are
    already the API, and finally the ``api.`` sibling of the page domain.
    """
    if location is None:
        return BrowserCandidates()

    scheme = location.scheme
    hostname = location.hostname

    if hostname in LOCAL_HOSTS or hostname.endswith(".local"):
        local_backend = f"{scheme}://{_host_literal(hostname)}:{local_port}"
        return BrowserCandidates(primary=local_backend, fallback=local_backend)

    if IPV4_RE.match(hostname) or ":" in hostname:
        direct_host = f"{scheme}://{_host_literal(hostname)}"
        return BrowserCandidates(primary=direct_host, fallback=direct_host)

    if hostname.startswith("api."):
        return BrowserCandidates(primary=location.origin, fallback=location.origin)

    return BrowserCandidates(primary=f"{scheme}://{api_hostname(hostname)}", fallback=location.origin)


def api_hostname(hostname: str) -> str:
    """
    The API sibling of a site hostname.

    The API lives directly under the registrable domain, looked up in the
    Public Suffix List: ``www.example.com``, ``example.com`` and
    ``portal.example.com`` all become ``api.example.com``, while
    ``acme.co.uk`` becomes ``api.acme.co.uk``. Hosts under a suffix the list
    does not know (``intranet``, ``build.corp``) only lose a ``www.`` prefix.
    """
    parts = _split_domain(hostname)
    if parts.domain and parts.suffix:
        return f"api.{parts.domain}.{parts.suffix}"
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return f"api.{hostname}"


def resolve_base_configuration(
    configured: Optional[str],
    location: Optional[BrowserLocation],
    local_port: int = DEFAULT_LOCAL_PORT,
) -> BaseConfiguration:
    """Configured origin if any, else the browser-derived primary candidate."""
    base = build_base_configuration(configured)
    if base.origin is not None:
        return base

    # candidates.fallback is informational; nothing retries against it
    candidates = resolve_browser_candidates(location, local_port)
    return BaseConfiguration(origin=candidates.primary or None, path_prefix=base.path_prefix)


def rewrite_request_path(url: str, path_prefix: str) -> str:
    """
    Prepend ``path_prefix`` to a relative request URL.

    Absolute URLs are left alone, and a path that already sits under the
    prefix is not prefixed again, so applying this twice is harmless.
    """
    if not path_prefix or is_absolute_url(url):
        return url

    normalized = url if url.startswith("/") else f"/{url}"
    if normalized == path_prefix or normalized.startswith(f"{path_prefix}/"):
        return normalized
    return f"{path_prefix}{normalized}"
