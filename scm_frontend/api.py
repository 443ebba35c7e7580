"""
HTTP client for the SCM backend.

Every call goes through the same steps:

- relative URLs get the configured path prefix (once);
- a JSON content type and the bearer token, when one is stored, are attached;
- non-2xx responses raise ``httpx.HTTPStatusError``. A 401 first clears the
  stored token and sends the user to the login route;
- transport failures are logged and re-raised as ``httpx.RequestError``;
- cancelled async calls propagate ``asyncio.CancelledError`` untouched.

Nothing is retried.
"""
import asyncio
import logging
from typing import Any, Callable, Optional, Protocol, Tuple

import httpx

from scm_frontend.base_url import rewrite_request_path
from scm_frontend.models import ClientSettings

log = logging.getLogger("scm_frontend.api")

JSON_CONTENT_TYPE = "application/json"
NETWORK_ERROR_MESSAGE = "Network or server error. Please try again."

Navigator = Callable[[str], None]


class TokenStore(Protocol):
    """Where the bearer token lives (session state, memory, ...)."""

    def get(self) -> Optional[str]: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Keeps the token on the instance. Used by scripts and tests."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


def _response_message(response: httpx.Response) -> Optional[str]:
    """Pull the human message out of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    return None


def error_message(exc: BaseException, default: str = "Request failed.") -> str:
    """Text to show the user for a failed call."""
    if isinstance(exc, httpx.HTTPStatusError):
        return _response_message(exc.response) or default
    if isinstance(exc, httpx.RequestError):
        return NETWORK_ERROR_MESSAGE
    return str(exc) or default


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


class _ClientBase:
    """Request/response handling shared by the sync and async clients."""

    def __init__(
        self,
        settings: ClientSettings,
        tokens: TokenStore,
        navigate: Optional[Navigator] = None,
    ):
        self.settings = settings
        self.tokens = tokens
        self.navigate = navigate

    def url_for(self, path: str) -> str:
        return rewrite_request_path(path, self.settings.base.path_prefix)

    def _headers(self, extra: Optional[dict] = None, multipart: bool = False) -> dict:
        # multipart bodies need httpx to set the boundary itself
        headers = {} if multipart else {"Content-Type": JSON_CONTENT_TYPE}
        token = self.tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    def _on_status_error(self, exc: httpx.HTTPStatusError) -> None:
        response = exc.response
        status = response.status_code
        if status == 401:
            log.warning("Unauthorized, token may be expired")
            self.tokens.clear()
            if self.navigate is not None:
                self.navigate(self.settings.login_route)

        log.error(
            "%s: %s",
            status,
            _response_message(response) or response.reason_phrase,
            extra={"method": exc.request.method, "url": str(exc.request.url), "status": status},
        )

    def _on_transport_error(self, exc: httpx.RequestError) -> None:
        try:
            method, url = exc.request.method, str(exc.request.url)
        except RuntimeError:  # no request attached
            method, url = None, None
        log.error("Network or server error: %s", exc, extra={"method": method, "url": url})


class ApiClient(_ClientBase):
    """Blocking client, the one Streamlit pages use."""

    def __init__(
        self,
        settings: ClientSettings,
        tokens: TokenStore,
        navigate: Optional[Navigator] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(settings, tokens, navigate)
        self._http = httpx.Client(
            base_url=settings.base.origin or "",
            timeout=settings.timeout,
            transport=transport,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        files: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        url = self.url_for(path)
        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                files=files,
                headers=self._headers(headers, multipart=files is not None),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._on_status_error(exc)
            raise
        except httpx.RequestError as exc:
            self._on_transport_error(exc)
            raise
        return response

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return _decode(self.request("GET", path, params=params))

    def post(self, path: str, payload: Any = None) -> Any:
        return _decode(self.request("POST", path, json=payload))

    def put(self, path: str, payload: Any = None) -> Any:
        return _decode(self.request("PUT", path, json=payload))

    def patch(self, path: str, payload: Any = None) -> Any:
        return _decode(self.request("PATCH", path, json=payload))

    def delete(self, path: str) -> Any:
        return _decode(self.request("DELETE", path))

    def upload(
        self,
        path: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        field: str = "file",
    ) -> Any:
        """Multipart upload of a single file."""
        files = {field: (filename, content, content_type or "application/octet-stream")}
        return _decode(self.request("POST", path, files=files))

    def download(self, path: str, params: Optional[dict] = None) -> Tuple[bytes, str]:
        """Raw bytes plus the content type the server reported."""
        response = self.request("GET", path, params=params)
        return response.content, response.headers.get("content-type", "application/octet-stream")

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class AsyncApiClient(_ClientBase):
    """Same contract as ApiClient on top of httpx.AsyncClient."""

    def __init__(
        self,
        settings: ClientSettings,
        tokens: TokenStore,
        navigate: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings, tokens, navigate)
        self._http = httpx.AsyncClient(
            base_url=settings.base.origin or "",
            timeout=settings.timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        files: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        url = self.url_for(path)
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                files=files,
                headers=self._headers(headers, multipart=files is not None),
            )
            response.raise_for_status()
        except asyncio.CancelledError:
            log.debug("Request canceled: %s %s", method, url)
            raise
        except httpx.HTTPStatusError as exc:
            self._on_status_error(exc)
            raise
        except httpx.RequestError as exc:
            self._on_transport_error(exc)
            raise
        return response

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return _decode(await self.request("GET", path, params=params))

    async def post(self, path: str, payload: Any = None) -> Any:
        return _decode(await self.request("POST", path, json=payload))

    async def put(self, path: str, payload: Any = None) -> Any:
        return _decode(await self.request("PUT", path, json=payload))

    async def patch(self, path: str, payload: Any = None) -> Any:
        return _decode(await self.request("PATCH", path, json=payload))

    async def delete(self, path: str) -> Any:
        return _decode(await self.request("DELETE", path))

    async def upload(
        self,
        path: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
        field: str = "file",
    ) -> Any:
        files = {field: (filename, content, content_type or "application/octet-stream")}
        return _decode(await self.request("POST", path, files=files))

    async def download(self, path: str, params: Optional[dict] = None) -> Tuple[bytes, str]:
        response = await self.request("GET", path, params=params)
        return response.content, response.headers.get("content-type", "application/octet-stream")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


def create_client(
    settings: ClientSettings,
    tokens: TokenStore,
    navigate: Optional[Navigator] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ApiClient:
    log.info("API base: %s", settings.base.api_base or "(relative)")
    return ApiClient(settings, tokens, navigate, transport=transport)


def create_async_client(
    settings: ClientSettings,
    tokens: TokenStore,
    navigate: Optional[Navigator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncApiClient:
    return AsyncApiClient(settings, tokens, navigate, transport=transport)
