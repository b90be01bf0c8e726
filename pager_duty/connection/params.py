"""Pagination parameters for GET requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pager_duty.config import DEFAULT_LIMIT, DEFAULT_PAGE
from pager_duty.connection.errors import CallerInputError

if TYPE_CHECKING:
    from collections.abc import Mapping


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CallerInputError(f"{name} must be an integer, got {value!r}", value) from e


@dataclass(frozen=True)
class Page:
    """A 1-based page number and page size, sent as offset/limit."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_query(self) -> dict[str, int]:
        return {"offset": self.offset, "limit": self.limit}

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> tuple[Page, dict[str, Any]]:
        """Split ``page``/``limit`` out of ``options``.

        Returns the page and a copy of the remaining options; the input mapping
        is left untouched.
        """
        remaining = dict(options or {})
        page = remaining.pop("page", None)
        limit = remaining.pop("limit", None)
        return (
            cls(
                page=DEFAULT_PAGE if page is None else _to_int("page", page),
                limit=DEFAULT_LIMIT if limit is None else _to_int("limit", limit),
            ),
            remaining,
        )
