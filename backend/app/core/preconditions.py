"""
HTTP precondition helpers.

A record's version travels as an entity tag (``ETag: "7"``) and comes
back on updates in ``If-Match``.
"""

import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

from fastapi import Response

from backend.app.core.exceptions import InvalidPreconditionError, PreconditionRequiredError
from backend.app.domain.records.store import MAX_INTEGER, RecordSnapshot

# "7", W/"7" or a bare 7
_ETAG_PATTERN = re.compile(r'^(?:W/)?"(\d+)"$|^(\d+)$')


def format_etag(version: int) -> str:
    return f'"{version}"'


def format_last_modified(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as an HTTP date; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def parse_if_match(header: Optional[str]) -> int:
    """
    Extract the base version from an If-Match header.

    Raises:
        PreconditionRequiredError: Header missing or blank
        InvalidPreconditionError: Wildcard, tag list, non-version tag or
            a version no record can have
    """
    if header is None or not header.strip():
        raise PreconditionRequiredError()

    match = _ETAG_PATTERN.match(header.strip())
    if not match:
        raise InvalidPreconditionError(header)

    version = int(match.group(1) or match.group(2))
    if version > MAX_INTEGER:
        raise InvalidPreconditionError(header)
    return version


def set_version_headers(response: Response, snapshot: RecordSnapshot) -> None:
    response.headers["ETag"] = format_etag(snapshot.version)
    last_modified = format_last_modified(snapshot.updated_at)
    if last_modified:
        response.headers["Last-Modified"] = last_modified
