"""
Request helpers.

Parse JSON bodies, path and query parameters into domain values.
Invalid input raises ValidationError, which the error middleware turns
into a 400 response.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.events import EventPublisher
from app.utils.exceptions import ValidationError
from app.validators import validate_amount, validate_timestamp


SESSION_MAKER = web.AppKey("session_maker", async_sessionmaker[AsyncSession])
PUBLISHER = web.AppKey("publisher", EventPublisher)

OPERATOR_HEADER = "X-Operator"


def get_session(request: web.Request) -> AsyncSession:
    """Session opened for this request."""
    return request["session"]


def get_publisher(request: web.Request) -> EventPublisher:
    """Event publisher of the application."""
    return request.app[PUBLISHER]


def get_operator(request: web.Request) -> str | None:
    """Operator handle from the X-Operator header."""
    operator = request.headers.get(OPERATOR_HEADER, "").strip()
    return operator or None


async def read_json(request: web.Request) -> dict[str, Any]:
    """
    Read a JSON object body; an empty body is an empty object.

    Raises:
        ValidationError: Body is not a JSON object
    """
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON body: {e.msg}") from e
    if not isinstance(body, dict):
        raise ValidationError("JSON body must be an object")
    return body


def path_id(request: web.Request, name: str = "id") -> int:
    """Integer path parameter (routes constrain it to digits)."""
    return int(request.match_info[name])


def require_int(body: dict[str, Any], field: str) -> int:
    """
    Required integer field.

    Raises:
        ValidationError: Missing or not an integer
    """
    value = body.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        raise ValidationError(f"{field} must be an integer")
    return value


def optional_int(body: dict[str, Any], field: str) -> int | None:
    """Optional integer field."""
    if body.get(field) is None:
        return None
    return require_int(body, field)


def require_amount(
    body: dict[str, Any], field: str = "amount", allow_zero: bool = False
) -> Decimal:
    """
    Required non-negative monetary field with at most 2 decimals.

    Raises:
        ValidationError: Invalid amount
    """
    is_valid, amount, error = validate_amount(body.get(field), allow_zero=allow_zero)
    if not is_valid:
        raise ValidationError(f"{field}: {error}")
    return amount


def require_balance(body: dict[str, Any], field: str) -> Decimal:
    """Required monetary field that may be zero or negative."""
    is_valid, amount, error = validate_amount(
        body.get(field), min_val=Decimal("-1e12"), allow_zero=True
    )
    if not is_valid:
        raise ValidationError(f"{field}: {error}")
    return amount


def require_timestamp(body: dict[str, Any], field: str) -> datetime:
    """
    Required ISO-8601 timestamp field.

    Raises:
        ValidationError: Missing or unparseable
    """
    value = body.get(field)
    is_valid, parsed, error = validate_timestamp(value if isinstance(value, str) else None)
    if not is_valid:
        raise ValidationError(f"{field}: {error}")
    return parsed


def optional_str(body: dict[str, Any], field: str) -> str | None:
    """Optional string field, stripped; empty becomes None."""
    value = body.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip() or None


def query_limit(request: web.Request, default: int) -> int:
    """
    limit query parameter.

    Raises:
        ValidationError: Not a positive integer
    """
    raw = request.query.get("limit")
    if raw is None:
        return default
    if not raw.isdigit() or int(raw) < 1:
        raise ValidationError("limit must be a positive integer")
    return int(raw)
