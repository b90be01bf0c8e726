"""Timestamp conversion between ISO-8601 wire strings and ``datetime``.

Outbound, ``since``/``until`` request parameters are serialized with
``isoformat()``. Inbound, decoded response documents are walked and known
timestamp fields are replaced in place with aware ``datetime`` values:

- every key in ``OBJECT_KEYS`` found as a mapping has its ``TIME_KEYS`` parsed
- every plural form in ``COLLECTION_KEYS`` found as a list has each element
  parsed, then each element's ``NESTED_COLLECTION_KEYS`` lists, recursively
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, tzinfo
from typing import Any

from pager_duty.connection.errors import CallerInputError, DecodeError

logger = logging.getLogger(__name__)

# Decoded JSON: object, array or scalar
Document = dict[str, "Document"] | list["Document"] | str | int | float | bool | None

PARAMETER_TIME_KEYS = ("since", "until")

TIME_KEYS = (
    "at",
    "created_at",
    "created_on",
    "end",
    "end_time",
    "last_incident_timestamp",
    "last_status_change_on",
    "rotation_virtual_start",
    "start",
    "started_at",
    "start_time",
)

OBJECT_KEYS = (
    "alert",
    "entry",
    "incident",
    "log_entry",
    "maintenance_window",
    "note",
    "override",
    "service",
)

# Singular object key -> collection key
COLLECTION_KEYS = {
    "alert": "alerts",
    "entry": "entries",
    "incident": "incidents",
    "log_entry": "log_entries",
    "maintenance_window": "maintenance_windows",
    "note": "notes",
    "override": "overrides",
    "service": "services",
}

NESTED_COLLECTION_KEYS = (
    "acknowledgers",
    "assigned_to",
    "pending_actions",
)


def convert_time_parameters(params: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``params`` with date/time ``since``/``until`` as ISO-8601."""
    converted = dict(params)
    for key in PARAMETER_TIME_KEYS:
        value = converted.get(key)
        if value is not None and not isinstance(value, str) and hasattr(value, "isoformat"):
            converted[key] = value.isoformat()
    return converted


def parse_timestamp(value: str, tz: tzinfo = UTC) -> datetime:
    """Parse an ISO-8601 string into a ``datetime`` in ``tz``.

    Naive timestamps are taken to be in ``tz`` already.
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def parse_object_times(obj: dict[str, Document], tz: tzinfo = UTC) -> None:
    for key in TIME_KEYS:
        value = obj.get(key)
        if not value or not isinstance(value, str):
            continue
        try:
            obj[key] = parse_timestamp(value, tz)
        except ValueError as e:
            raise DecodeError(None, value, reason=f"bad timestamp in {key!r}") from e


def parse_collection_times(collection: list[Document], tz: tzinfo = UTC) -> None:
    for obj in collection:
        if not isinstance(obj, dict):
            continue
        parse_object_times(obj, tz)

        for key in NESTED_COLLECTION_KEYS:
            nested = obj.get(key)
            if isinstance(nested, list):
                parse_collection_times(nested, tz)


def parse_times(document: Document, tz: tzinfo = UTC) -> Document:
    """Hydrate timestamp fields of a decoded response, in place.

    Returns the same document. Raises ``CallerInputError`` if the document is
    not a JSON object.
    """
    if not isinstance(document, dict):
        raise CallerInputError(f"can't parse times of {type(document).__name__}: {document!r}", document)

    for key in OBJECT_KEYS:
        obj = document.get(key)
        if isinstance(obj, dict):
            parse_object_times(obj, tz)

        collection = document.get(COLLECTION_KEYS[key])
        if isinstance(collection, list):
            logger.debug("parsing times of %d %s", len(collection), COLLECTION_KEYS[key])
            parse_collection_times(collection, tz)

    return document
