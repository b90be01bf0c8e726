"""PagerDuty REST API connection over httpx, with a fixed middleware chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, tzinfo
from typing import TYPE_CHECKING, Any

import httpx

from pager_duty.config import API_BASE, DEFAULT_API_VERSION, DEFAULT_TIMEOUT
from pager_duty.connection._http import AsyncHttpTransport, HttpTransport
from pager_duty.connection.errors import (
    ApiError,
    CallerInputError,
    DecodeError,
    ErrorKind,
    NotFoundError,
    PagerDutyError,
)
from pager_duty.connection.middleware import (
    HttpRequest,
    HttpResult,
    build_request_stages,
    build_response_stages,
    run_request_stages,
    run_response_stages,
)
from pager_duty.connection.params import Page

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pager_duty.connection.times import Document

__all__ = [
    "ApiError",
    "AsyncConnection",
    "CallerInputError",
    "ClientConfig",
    "Connection",
    "DecodeError",
    "ErrorKind",
    "NotFoundError",
    "Page",
    "PagerDutyError",
]


@dataclass(frozen=True)
class ClientConfig:
    token: str = field(repr=False)
    api_version: int = DEFAULT_API_VERSION
    timezone: tzinfo = UTC
    base_url: str = API_BASE


def normalize_path(path: str) -> str:
    """Strip one leading slash so the path stays relative to the base URL."""
    if httpx.URL(path).is_absolute_url:
        raise CallerInputError(f"path must be relative to the API base, got {path!r}", path)
    return path[1:] if path.startswith("/") else path


class _BaseConnection:
    def __init__(
        self,
        token: str,
        api_version: int = DEFAULT_API_VERSION,
        *,
        timezone: tzinfo = UTC,
        base_url: str = API_BASE,
    ) -> None:
        self.config = ClientConfig(token=token, api_version=api_version, timezone=timezone, base_url=base_url)
        self._request_stages = build_request_stages(token)
        self._response_stages = build_response_stages(timezone)

    @property
    def api_version(self) -> int:
        return self.config.api_version

    def _prepare(self, method: str, path: str, options: Mapping[str, Any] | None) -> HttpRequest:
        request = HttpRequest(method=method, path=normalize_path(path), params=dict(options or {}))
        return run_request_stages(self._request_stages, request)

    def _finish(self, request: HttpRequest, response: httpx.Response) -> Document:
        result = run_response_stages(self._response_stages, HttpResult(request=request, response=response))
        return result.document

    @staticmethod
    def _paginate(options: Mapping[str, Any] | None) -> dict[str, Any]:
        # paginate anything being fetched, offset/limit isn't intuitive
        page, remaining = Page.from_options(options)
        return {**remaining, **page.to_query()}


class Connection(_BaseConnection):
    """Synchronous connection to the PagerDuty API.

    Usage::

        with Connection(token) as pd:
            users = pd.get("users", {"page": 2})["users"]
    """

    def __init__(
        self,
        token: str,
        api_version: int = DEFAULT_API_VERSION,
        *,
        timezone: tzinfo = UTC,
        base_url: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(token, api_version, timezone=timezone, base_url=base_url)
        self._http = HttpTransport(base_url, timeout=timeout, transport=transport)

    def get(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return self.run_request("GET", path, self._paginate(options))

    def put(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return self.run_request("PUT", path, options)

    def post(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return self.run_request("POST", path, options)

    def delete(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return self.run_request("DELETE", path, options)

    def run_request(self, method: str, path: str, options: Mapping[str, Any] | None = None) -> Document:
        request = self._prepare(method, path, options)
        return self._finish(request, self._http.send(request))

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class AsyncConnection(_BaseConnection):
    """``Connection`` for asyncio code; the stages are shared, only the transport awaits."""

    def __init__(
        self,
        token: str,
        api_version: int = DEFAULT_API_VERSION,
        *,
        timezone: tzinfo = UTC,
        base_url: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(token, api_version, timezone=timezone, base_url=base_url)
        self._http = AsyncHttpTransport(base_url, timeout=timeout, transport=transport)

    async def get(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return await self.run_request("GET", path, self._paginate(options))

    async def put(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return await self.run_request("PUT", path, options)

    async def post(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return await self.run_request("POST", path, options)

    async def delete(self, path: str, options: Mapping[str, Any] | None = None) -> Document:
        return await self.run_request("DELETE", path, options)

    async def run_request(self, method: str, path: str, options: Mapping[str, Any] | None = None) -> Document:
        request = self._prepare(method, path, options)
        return self._finish(request, await self._http.send(request))

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> AsyncConnection:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()
