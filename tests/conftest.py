"""
Shared pytest fixtures for the SCM frontend test suite.

Clients run against httpx.MockTransport handlers, so no backend is needed.
"""
import httpx
import pytest

from scm_frontend.api import MemoryTokenStore, create_async_client, create_client
from scm_frontend.models import BaseConfiguration, ClientSettings


@pytest.fixture
def settings():
    """Gateway deployment: absolute origin plus a path prefix."""
    return ClientSettings(
        base=BaseConfiguration(origin="https://gateway.acme.com", path_prefix="/scm/v2"),
    )


@pytest.fixture
def tokens():
    return MemoryTokenStore("abc123")


@pytest.fixture
def navigations():
    """Routes the client asked to navigate to, in order."""
    return []


@pytest.fixture
def make_client(settings, tokens, navigations):
    """Build an ApiClient whose requests are answered by `handler`."""
    clients = []

    def _make(handler, client_settings=None):
        client = create_client(
            client_settings or settings,
            tokens,
            navigations.append,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def make_async_client(settings, tokens, navigations):
    def _make(handler):
        return create_async_client(
            settings,
            tokens,
            navigations.append,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def recorder():
    """Handler factory that records requests and replies with a canned response."""

    class Recorder:
        def __init__(self):
            self.requests = []

        def reply(self, status=200, **kwargs):
            def handler(request):
                self.requests.append(request)
                return httpx.Response(status, **kwargs)

            return handler

        @property
        def last(self):
            return self.requests[-1]

    return Recorder()
