# =============================================================================
# lib/gateway.py - HTTP Gateway
# =============================================================================
# Thin async wrapper around httpx for talking to the NEXO backend.
#
# The gateway only does transport:
# - sends JSON with the standard headers (and a bearer token when given)
# - returns the decoded body of 2xx responses, untouched
# - turns non-2xx responses into ApiError using the backend's error envelope
# - turns connectivity failures into TransportError
#
# Interpreting 2xx bodies is lib/normalizer.py's job.
#
# Usage:
#   async with HttpGateway() as gateway:
#       body = await gateway.request("POST", "/auth/login", json={...})
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ApiError, TransportError

logger = logging.getLogger(__name__)

# Request/response fields never written to the debug trace
REDACTED_FIELDS = frozenset({"password", "token", "accessToken", "access_token"})

# Keep traced bodies readable
MAX_TRACE_CHARS = 2000


def _redact(body: Any) -> Any:
    if isinstance(body, dict):
        return {
            key: "***" if key in REDACTED_FIELDS else _redact(value)
            for key, value in body.items()
        }
    if isinstance(body, list):
        return [_redact(item) for item in body]
    return body


def _trace(body: Any) -> str:
    text = json.dumps(_redact(body), ensure_ascii=False, default=str)
    if len(text) > MAX_TRACE_CHARS:
        return text[:MAX_TRACE_CHARS] + "..."
    return text


def decode_body(response: httpx.Response) -> Any:
    """
    Decode a response body.

    Empty bodies (e.g. 204) decode as {}. Bodies that aren't JSON are
    returned as text so the caller can still decide what to do with them.
    """
    if not response.content or not response.content.strip():
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


def error_from_response(status_code: int, body: Any) -> ApiError:
    """
    Build an ApiError from a non-2xx body.

    Expected envelope: {statusCode?, message: string | string[], error?}.
    Falls back to "Request failed (<status>)." when the envelope carries no
    usable message.
    """
    if isinstance(body, dict):
        raw = body.get("message")
        if isinstance(raw, str):
            messages = [raw] if raw else []
        elif isinstance(raw, list):
            messages = [item for item in raw if isinstance(item, str) and item]
        else:
            messages = []

        if messages:
            code = body.get("statusCode")
            error_type = body.get("error")
            return ApiError(
                status_code=code if isinstance(code, int) and not isinstance(code, bool) else status_code,
                messages=messages,
                error_type=error_type if isinstance(error_type, str) else None,
            )

    return ApiError.for_status(status_code)


class HttpGateway:
    """
    Async HTTP gateway for the NEXO backend.

    One gateway owns one httpx.AsyncClient; close it with `aclose()` or use
    the gateway as an async context manager.

    Example:
        gateway = HttpGateway(base_url="https://api.example.com")
        body = await gateway.request("GET", "/profiles", params={"page": 1}, token=token)
        await gateway.aclose()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Backend base URL (defaults to settings)
            timeout: Per-request timeout in seconds (defaults to settings)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """
        Send one request and return the decoded 2xx body.

        Args:
            method: HTTP method
            path: Path relative to the base URL (leading slash optional)
            json: JSON body
            params: Query parameters
            token: Bearer token for authorized endpoints

        Returns:
            Decoded JSON body ({} when empty, text when not JSON)

        Raises:
            TransportError: No response received
            ApiError: Status outside 200-299
        """
        path = path if path.startswith("/") else f"/{path}"
        headers = {"Authorization": f"Bearer {token}"} if token else None
        url = f"{self.base_url}{path}"

        if settings.DEBUG:
            logger.debug(f"-> {method} {url} params={params} body={_trace(json)}")

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise TransportError(url, repr(e)) from e

        body = decode_body(response)

        if settings.DEBUG:
            logger.debug(f"<- {response.status_code} {method} {url} body={_trace(body)}")

        if not response.is_success:
            error = error_from_response(response.status_code, body)
            logger.info(f"{method} {path} returned {response.status_code}: {error.user_message}")
            raise error

        return body
