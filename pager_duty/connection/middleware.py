"""Request and response stages run around every API call.

Request stages take and return an ``HttpRequest``; response stages take and
return an ``HttpResult``. ``build_request_stages`` and
``build_response_stages`` give the fixed order used by the connections.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import tzinfo
from functools import partial
from typing import TYPE_CHECKING, Any

from pager_duty.connection.errors import ApiError, DecodeError, NotFoundError
from pager_duty.connection.times import Document, convert_time_parameters, parse_times

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201, 204})


@dataclass(frozen=True)
class HttpRequest:
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class HttpResult:
    request: HttpRequest
    response: httpx.Response
    document: Document = None

    @property
    def url(self) -> str:
        return str(self.response.request.url)


RequestStage = Callable[[HttpRequest], HttpRequest]
ResponseStage = Callable[[HttpResult], HttpResult]


# ── request stages ────────────────────────────────────────────────────


def token_auth(token: str, request: HttpRequest) -> HttpRequest:
    return replace(request, headers={**request.headers, "Authorization": f'Token token="{token}"'})


def convert_time_params(request: HttpRequest) -> HttpRequest:
    return replace(request, params=convert_time_parameters(request.params))


# ── response stages ───────────────────────────────────────────────────


def _error_payload(response: httpx.Response) -> Any:
    """The body's ``error`` field, or None if the body has no usable one."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None


def raise_on_error_status(result: HttpResult) -> HttpResult:
    status = result.response.status_code
    if status in SUCCESS_STATUSES:
        return result

    logger.error("%s %s → %d: %s", result.request.method, result.url, status, result.response.text[:200])
    if status == 404:
        raise NotFoundError(result.url)
    raise ApiError(result.url, status, _error_payload(result.response))


def decode_json(result: HttpResult) -> HttpResult:
    if not result.response.content:
        return result
    try:
        document = result.response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(result.url, result.response.text) from e
    return replace(result, document=document)


def parse_time_strings(tz: tzinfo, result: HttpResult) -> HttpResult:
    # 204 bodies are returned as decoded, without time parsing
    if result.document is None or result.response.status_code == 204:
        return result
    return replace(result, document=parse_times(result.document, tz))


# ── chains ────────────────────────────────────────────────────────────


def build_request_stages(token: str) -> tuple[RequestStage, ...]:
    return (
        partial(token_auth, token),
        convert_time_params,
    )


def build_response_stages(tz: tzinfo) -> tuple[ResponseStage, ...]:
    return (
        raise_on_error_status,
        decode_json,
        partial(parse_time_strings, tz),
    )


def run_request_stages(stages: tuple[RequestStage, ...], request: HttpRequest) -> HttpRequest:
    for stage in stages:
        request = stage(request)
    return request


def run_response_stages(stages: tuple[ResponseStage, ...], result: HttpResult) -> HttpResult:
    for stage in stages:
        result = stage(result)
    return result
