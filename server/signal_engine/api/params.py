"""
Query parameter parsing for the HTTP API.

Every helper raises InvalidInputError (-> 400) for values it cannot use.
"""
from __future__ import annotations

from typing import Optional

from aiohttp import web

from signal_engine.core.types import InvalidInputError


def get_str(request: web.Request, name: str, default: str = "") -> str:
    value = request.query.get(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def require_str(request: web.Request, name: str) -> str:
    value = get_str(request, name)
    if not value:
        raise InvalidInputError(f"Missing required parameter: {name}", field=name)
    return value


def get_int(
    request: web.Request,
    name: str,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    raw = get_str(request, name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInputError(f"{name} must be an integer", field=name, value=raw) from None
    _check_bounds(name, value, minimum, maximum)
    return value


def get_float(
    request: web.Request,
    name: str,
    default: float,
    minimum: Optional[float] = None,
) -> float:
    raw = get_str(request, name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInputError(f"{name} must be a number", field=name, value=raw) from None
    _check_bounds(name, value, minimum, None)
    return value


def get_list(request: web.Request, name: str) -> list[str]:
    """Comma-separated values, stripped, empties dropped."""
    raw = request.query.get(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def _check_bounds(name, value, minimum, maximum) -> None:
    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum}", field=name, value=value)
    if maximum is not None and value > maximum:
        raise InvalidInputError(f"{name} must be <= {maximum}", field=name, value=value)
