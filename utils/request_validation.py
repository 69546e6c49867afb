"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if allow_empty and not req.content_length and not req.data:
        return {}

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=False)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None


def parse_int(value: object, field: str) -> int:
    """Coerce a JSON or query value to ``int`` or raise a 400 error."""

    if isinstance(value, bool):
        raise BadRequest(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be an integer.") from None
