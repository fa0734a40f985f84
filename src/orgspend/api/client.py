"""Async HTTP client for the usage-tracker backend."""

from __future__ import annotations

import logging
from typing import Any, Self

import httpx

from orgspend.models.errors import NOT_FOUND, ApiError

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class ApiClientError(Exception):
    """Non-2xx response, HTML instead of JSON, or a transport failure."""

    def __init__(
        self,
        status: int,
        message: str,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.code = code
        self.details = details

    def to_api_error(self) -> ApiError:
        return ApiError(
            status=self.status, message=self.message, code=self.code, details=self.details
        )


def clean_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Stringify query values, dropping ``None``."""
    if not params:
        return {}
    return {key: str(value) for key, value in params.items() if value is not None}


class ApiClient:
    """Thin wrapper over :class:`httpx.AsyncClient` returning decoded JSON."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=_JSON_HEADERS,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self._request("POST", endpoint, params=params, json=data)

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, endpoint, params=clean_params(params), json=json
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise ApiClientError(
                0, str(exc) or "Network error occurred", "NETWORK_ERROR", {"error": repr(exc)}
            ) from exc
        return _handle_response(response)


def _handle_response(response: httpx.Response) -> Any:
    if not response.is_success:
        message = f"HTTP {response.status_code}: {response.reason_phrase}"
        details: Any = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = str(body.get("message") or message)
            details = body
        logger.warning("%s %s -> %s", response.request.method, response.request.url, message)
        raise ApiClientError(response.status_code, message, str(response.status_code), details)

    if "application/json" in response.headers.get("content-type", ""):
        return response.json()

    text = response.text
    stripped = text.lstrip()
    if stripped.startswith("<!DOCTYPE html>") or stripped.startswith("<html"):
        raise ApiClientError(
            NOT_FOUND,
            "API endpoint returned HTML instead of JSON - endpoint may not exist",
            "HTML_RESPONSE",
            {"response_text": text[:200]},
        )
    return text
