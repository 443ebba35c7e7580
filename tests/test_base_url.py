"""Tests for API base resolution and request path rewriting."""
import logging
from urllib.parse import urlsplit

import pytest

from scm_frontend.base_url import (
    api_hostname,
    build_base_configuration,
    is_absolute_url,
    normalize_configured_base,
    resolve_base_configuration,
    resolve_browser_candidates,
    rewrite_request_path,
)
from scm_frontend.models import BaseConfiguration, BrowserLocation


def loc(origin):
    return BrowserLocation.from_origin(origin)


class TestNormalize:
    def test_strips_trailing_slashes(self):
        assert normalize_configured_base("https://gw.acme.com///") == "https://gw.acme.com"

    def test_none_is_empty(self):
        assert normalize_configured_base(None) == ""

    def test_strips_whitespace(self):
        assert normalize_configured_base("  /api-gateway/ ") == "/api-gateway"


class TestIsAbsoluteUrl:
    @pytest.mark.parametrize("value", ["https://a.com", "http://a", "git+ssh://host/x"])
    def test_absolute(self, value):
        assert is_absolute_url(value)

    @pytest.mark.parametrize("value", ["/api", "api", "a.com/x", "", "//cdn.acme.com"])
    def test_not_absolute(self, value):
        assert not is_absolute_url(value)


class TestBuildBaseConfiguration:
    @pytest.mark.parametrize("value", [None, "", "   ", "/", "///"])
    def test_nothing_configured(self, value):
        assert build_base_configuration(value) == BaseConfiguration(origin=None, path_prefix="")

    def test_gateway_url_with_path(self):
        base = build_base_configuration("https://gateway.acme.com/scm/v2/")
        assert base.origin == "https://gateway.acme.com"
        assert base.path_prefix == "/scm/v2"

    def test_absolute_url_without_path(self):
        base = build_base_configuration("https://api.acme.com")
        assert base.origin == "https://api.acme.com"
        assert base.path_prefix == ""

    def test_non_default_port_kept(self):
        assert build_base_configuration("http://backend:8080/api").origin == "http://backend:8080"

    def test_default_port_dropped(self):
        assert build_base_configuration("https://gw.acme.com:443/api").origin == "https://gw.acme.com"

    def test_userinfo_dropped(self):
        assert build_base_configuration("https://user:pw@gw.acme.com/x").origin == "https://gw.acme.com"

    def test_ipv6_host_bracketed(self):
        assert build_base_configuration("http://[::1]:5000").origin == "http://[::1]:5000"

    @pytest.mark.parametrize(
        "value",
        [
            "https://gateway.acme.com/scm/v2/",
            "https://gw.acme.com:8443/scm?tenant=1#top",
            "http://10.1.2.3/api/",
            "https://GW.Acme.com/a/b/c?x=y",
            "https://gw.acme.com#frag",
        ],
    )
    def test_origin_has_no_path_query_or_fragment(self, value):
        origin = build_base_configuration(value).origin
        parts = urlsplit(origin)
        assert parts.path == ""
        assert parts.query == ""
        assert parts.fragment == ""
        assert not origin.endswith("/")

    def test_query_not_part_of_prefix(self):
        assert build_base_configuration("https://gw.acme.com:8443/scm?tenant=1#top").path_prefix == "/scm"

    @pytest.mark.parametrize(
        "value",
        ["/api-gateway", "api-gateway", "//api-gateway", "api-gateway///", "///api-gateway//"],
    )
    def test_relative_prefix_has_single_leading_slash(self, value):
        base = build_base_configuration(value)
        assert base.origin is None
        assert base.path_prefix == "/api-gateway"

    @pytest.mark.parametrize("value", ["/a/b/", "a/b", "//a/b//"])
    def test_nested_relative_prefix(self, value):
        prefix = build_base_configuration(value).path_prefix
        assert prefix == "/a/b"
        assert prefix.startswith("/") and not prefix.startswith("//")
        assert not prefix.endswith("/")

    @pytest.mark.parametrize("value", ["http://[::1", "https://gw.acme.com:99999/api", "http://:8080/api"])
    def test_malformed_absolute_url_falls_back_to_raw_string(self, value, caplog):
        with caplog.at_level(logging.WARNING, logger="scm_frontend.base_url"):
            base = build_base_configuration(value)
        assert base.origin == value
        assert base.path_prefix == ""
        assert "Invalid absolute API base" in caplog.text


class TestResolveBrowserCandidates:
    @pytest.mark.parametrize(
        "origin, expected",
        [
            ("http://localhost:3000", "http://localhost:5000"),
            ("http://localhost", "http://localhost:5000"),
            ("http://127.0.0.1:8501", "http://127.0.0.1:5000"),
            ("https://foo.local:8443", "https://foo.local:5000"),
            ("http://[::1]:3000", "http://[::1]:5000"),
        ],
    )
    def test_local_hosts_use_backend_port(self, origin, expected):
        candidates = resolve_browser_candidates(loc(origin))
        assert candidates.primary == expected
        assert candidates.fallback == expected

    def test_local_port_override(self):
        assert resolve_browser_candidates(loc("http://localhost:3000"), local_port=8000).primary == "http://localhost:8000"

    def test_ipv4_keeps_host_without_port(self):
        assert resolve_browser_candidates(loc("http://10.0.0.5:8501")).primary == "http://10.0.0.5"

    def test_ipv6_keeps_host(self):
        assert resolve_browser_candidates(loc("http://[fe80::1]:8501")).primary == "http://[fe80::1]"

    def test_api_host_used_as_is(self):
        candidates = resolve_browser_candidates(loc("https://api.example.com"))
        assert candidates.primary == "https://api.example.com"
        assert candidates.fallback == "https://api.example.com"

    def test_www_host_becomes_api_host(self):
        candidates = resolve_browser_candidates(loc("https://www.example.com"))
        assert candidates.primary == "https://api.example.com"
        assert candidates.fallback == "https://www.example.com"

    def test_site_subdomain_swapped_for_api(self):
        candidates = resolve_browser_candidates(loc("https://portal.acme.com"))
        assert candidates.primary == "https://api.acme.com"
        assert candidates.fallback == "https://portal.acme.com"

    def test_protocol_preserved(self):
        assert resolve_browser_candidates(loc("http://www.example.com")).primary == "http://api.example.com"

    def test_no_location(self):
        candidates = resolve_browser_candidates(None)
        assert candidates.primary == ""
        assert candidates.fallback == ""


class TestApiHostname:
    @pytest.mark.parametrize(
        "hostname, expected",
        [
            ("example.com", "api.example.com"),
            ("www.example.com", "api.example.com"),
            ("www.portal.acme.com", "api.acme.com"),
            ("portal.acme.com", "api.acme.com"),
            ("acme.co.uk", "api.acme.co.uk"),
            ("www.acme.co.uk", "api.acme.co.uk"),
            ("portal.acme.co.uk", "api.acme.co.uk"),
            ("intranet", "api.intranet"),
            ("www.build.corp", "api.build.corp"),
        ],
    )
    def test_api_sibling(self, hostname, expected):
        assert api_hostname(hostname) == expected


class TestResolveBaseConfiguration:
    def test_configuration_wins_over_browser(self):
        base = resolve_base_configuration("https://gateway.acme.com/scm/v2/", loc("https://portal.acme.com"))
        assert base == BaseConfiguration(origin="https://gateway.acme.com", path_prefix="/scm/v2")

    def test_unset_uses_browser_primary(self):
        base = resolve_base_configuration("", loc("https://portal.acme.com"))
        assert base.origin == "https://api.acme.com"
        assert base.path_prefix == ""

    def test_multi_label_suffix_keeps_registrable_domain(self):
        base = resolve_base_configuration("", loc("https://acme.co.uk"))
        assert base.origin == "https://api.acme.co.uk"

    def test_relative_prefix_combined_with_browser_origin(self):
        base = resolve_base_configuration("/api-gateway/", loc("https://www.acme.com"))
        assert base.origin == "https://api.acme.com"
        assert base.path_prefix == "/api-gateway"

    def test_malformed_configuration_still_wins(self):
        base = resolve_base_configuration("http://:8080", loc("https://www.acme.com"))
        assert base.origin == "http://:8080"

    def test_nothing_known(self):
        assert resolve_base_configuration(None, None) == BaseConfiguration()

    def test_api_base(self):
        base = resolve_base_configuration("https://gateway.acme.com/scm/v2", None)
        assert base.api_base == "https://gateway.acme.com/scm/v2"

    def test_configuration_is_immutable(self):
        base = resolve_base_configuration("/x", None)
        with pytest.raises(Exception):
            base.path_prefix = "/y"


class TestRewriteRequestPath:
    def test_prefix_prepended(self):
        assert rewrite_request_path("/api/users", "/scm/v2") == "/scm/v2/api/users"

    def test_leading_slash_added(self):
        assert rewrite_request_path("api/users", "/scm/v2") == "/scm/v2/api/users"

    def test_already_prefixed_left_alone(self):
        assert rewrite_request_path("/scm/v2/api/users", "/scm/v2") == "/scm/v2/api/users"

    def test_prefix_itself_left_alone(self):
        assert rewrite_request_path("/scm/v2", "/scm/v2") == "/scm/v2"

    def test_similar_segment_still_prefixed(self):
        assert rewrite_request_path("/scm/v2x/users", "/scm/v2") == "/scm/v2/scm/v2x/users"

    def test_query_string_kept(self):
        assert rewrite_request_path("/api/users?active=1", "/scm") == "/scm/api/users?active=1"

    def test_absolute_url_untouched(self):
        assert rewrite_request_path("https://files.acme.com/a.pdf", "/scm") == "https://files.acme.com/a.pdf"

    def test_no_prefix_untouched(self):
        assert rewrite_request_path("api/users", "") == "api/users"

    @pytest.mark.parametrize("path", ["/api/users", "api/users", "", "/", "/scm/v2", "/scm/v2/x", "https://a.com/x"])
    @pytest.mark.parametrize("prefix", ["", "/scm/v2", "/api-gateway"])
    def test_idempotent(self, path, prefix):
        once = rewrite_request_path(path, prefix)
        assert rewrite_request_path(once, prefix) == once
