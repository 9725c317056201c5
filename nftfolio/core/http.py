"""
Portfolio backend HTTP client helpers.

Every request goes through `ApiClient.request`, which:
- sends the session cookie jar along (credentials included)
- sets a JSON content-type only when a payload is present
- turns non-2xx responses into `ApiError` subclasses

Error pages served as HTML (proxies, crashed upstreams) are detected and
rejected before anything tries to parse them as JSON.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)

UnauthorizedPolicy = Literal["raise", "none"]

_HTML_PREFIXES = ("<!doctype", "<html")


# Backend failures are explicit and separable from other runtime errors.
class ApiError(RuntimeError):
    pass


class ApiTransportError(ApiError):
    """
    The request never produced a response (DNS, refused connection, timeout).
    """


class ApiStatusError(ApiError):
    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.message = message or body or f"HTTP {status_code}"
        super().__init__(f"{status_code}: {self.message}")


class UpstreamPageError(ApiError):
    """
    The backend answered with an HTML document instead of JSON.
    """

    def __init__(self, status_code: int, snippet: str) -> None:
        self.status_code = status_code
        self.snippet = snippet
        super().__init__(f"{status_code}: HTML error page returned")


class MalformedResponseError(ApiError):
    pass


def is_html_document(text: str) -> bool:
    return (text or "").lstrip().lower().startswith(_HTML_PREFIXES)


def _server_message(body: str) -> str | None:
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for field in ("message", "detail", "error"):
        value = data.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def raise_for_status(resp: httpx.Response) -> None:
    """
    Raise the matching `ApiError` for a non-success response.
    """
    if resp.is_success:
        return None

    body = resp.text
    if is_html_document(body):
        logger.error(
            "api_html_error_page status=%s snippet=%r",
            resp.status_code,
            body.strip()[:100],
        )
        raise UpstreamPageError(resp.status_code, body.strip()[:100])

    # Avoid dumping huge bodies; keep a small snippet.
    raise ApiStatusError(
        resp.status_code,
        body[:500],
        _server_message(body) or body.strip()[:500] or resp.reason_phrase or None,
    )


def read_json(resp: httpx.Response) -> Any:
    """
    Parse a successful response body.

    Empty bodies become None. HTML is rejected even on a 2xx status.
    """
    text = resp.text
    if not text.strip():
        return None

    if is_html_document(text):
        logger.error("api_html_instead_of_json status=%s", resp.status_code)
        raise UpstreamPageError(resp.status_code, text.strip()[:100])

    try:
        return json.loads(text)
    except ValueError as e:
        raise MalformedResponseError("Failed to parse response data") from e


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ApiError("API base URL is empty.")
    return base_url.rstrip("/")


class ApiClient:
    """
    Thin wrapper around one long-lived `httpx.AsyncClient`.

    The underlying client keeps the cookie jar, so a session cookie set by
    the login endpoint is sent on every later request.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=_normalize_base_url(base_url),
            timeout=timeout_s,
            transport=transport,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        data: Any = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Issue a request and return the raw response once it is known to be ok.
        """
        method = method.upper()
        headers = {"Content-Type": "application/json"} if data is not None else {}
        content = json.dumps(data) if data is not None else None

        try:
            resp = await self._client.request(
                method,
                path,
                content=content,
                headers=headers,
                params=_clean_params(params),
            )
        except httpx.HTTPError as e:
            logger.error("api_request_failed method=%s path=%s error=%s", method, path, e)
            raise ApiTransportError(f"{method} {path} failed: {e}") from e

        logger.info("api_request method=%s path=%s status=%s", method, path, resp.status_code)
        if resp.status_code == 401:
            logger.warning("api_unauthorized method=%s path=%s", method, path)

        raise_for_status(resp)
        return resp

    async def get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        on_unauthorized: UnauthorizedPolicy = "raise",
    ) -> Any:
        """
        GET `path` and parse the body.

        With `on_unauthorized="none"` a 401 resolves to None instead of raising.
        """
        try:
            resp = await self.request("GET", path, params=params)
        except (ApiStatusError, UpstreamPageError) as e:
            if on_unauthorized == "none" and e.status_code == 401:
                return None
            raise
        return read_json(resp)

    async def send_json(self, method: str, path: str, data: Any = None) -> Any:
        resp = await self.request(method, path, data)
        return read_json(resp)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {k: v for (k, v) in params.items() if v is not None}
