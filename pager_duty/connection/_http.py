"""HTTP transport layer wrapping httpx."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from pager_duty.connection.errors import CallerInputError

if TYPE_CHECKING:
    from pager_duty.connection.middleware import HttpRequest

logger = logging.getLogger(__name__)


def _isoformat(value: Any) -> Any:
    """Dates and times go over the wire as ISO-8601 strings."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _query_value(value: Any) -> Any:
    if not isinstance(value, str) and hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _encode_query(params: dict[str, Any]) -> list[tuple[str, Any]]:
    """Encode list values as repeated ``key[]`` pairs (``statuses[]=a&statuses[]=b``)."""
    query: list[tuple[str, Any]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            query.extend((f"{key}[]", _query_value(item)) for item in value)
        else:
            query.append((key, _query_value(value)))
    return query


def _request_kwargs(request: HttpRequest) -> dict[str, Any]:
    """GET options go in the query string, everything else in a JSON body."""
    kwargs: dict[str, Any] = {"headers": request.headers}
    if request.method == "GET":
        kwargs["params"] = _encode_query(request.params)
    elif request.params:
        try:
            kwargs["content"] = json.dumps(request.params, default=_isoformat)
        except (TypeError, ValueError) as e:
            raise CallerInputError(f"can't encode {request.method} body: {e}", request.params) from e
        kwargs["headers"] = {**request.headers, "Content-Type": "application/json"}
    return kwargs


class HttpTransport:
    def __init__(self, base_url: str, timeout: float = 30.0, transport: httpx.BaseTransport | None = None) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        logger.debug("transport ready: %s", base_url)

    def send(self, request: HttpRequest) -> httpx.Response:
        logger.debug("%s %s", request.method, request.path)
        try:
            return self._client.request(request.method, request.path, **_request_kwargs(request))
        except httpx.RequestError as e:
            logger.error("%s %s connection failed: %s", request.method, request.path, e)
            raise

    def close(self) -> None:
        self._client.close()
        logger.debug("transport closed")


class AsyncHttpTransport:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        logger.debug("async transport ready: %s", base_url)

    async def send(self, request: HttpRequest) -> httpx.Response:
        logger.debug("%s %s", request.method, request.path)
        try:
            return await self._client.request(request.method, request.path, **_request_kwargs(request))
        except httpx.RequestError as e:
            logger.error("%s %s connection failed: %s", request.method, request.path, e)
            raise

    async def aclose(self) -> None:
        await self._client.aclose()
        logger.debug("async transport closed")
