"""Conversion of opaque wire identifiers into the store's native key type."""
from __future__ import annotations

import uuid
from typing import Any

from domain.common.exceptions import InvalidIdentifierException


def parse_identifier(value: Any, *, field: str = "id") -> uuid.UUID:
    """Return ``value`` as a UUID or raise InvalidIdentifierException."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentifierException(value, field=field)
    try:
        return uuid.UUID(value.strip())
    except ValueError as exc:
        raise InvalidIdentifierException(value, field=field) from exc
