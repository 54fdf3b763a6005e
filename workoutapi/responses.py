"""JSON responses and the error type that request handlers raise."""

from __future__ import annotations

import json
import logging
import math
import struct
import uuid
from typing import Any, Optional

from werkzeug.wrappers import Response

log = logging.getLogger(__name__)

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class ApiError(Exception):
    """A failure that is answered with a JSON error body and a status code."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _single(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _number(value: float) -> Any:
    """Render a stored single-precision number in its shortest form."""
    if not math.isfinite(value):
        raise ValueError(f"unsupported value: {value!r}")
    try:
        single = _single(value)
    except OverflowError:
        return value
    text = repr(single)
    for digits in range(1, 10):
        candidate = f"{single:.{digits}g}"
        if _single(float(candidate)) == single:
            text = candidate
            break
    number = float(text)
    if number.is_integer() and abs(number) < 1e21:
        return int(number)
    return number


def _plain(payload: Any) -> Any:
    if hasattr(payload, "to_dict"):
        return _plain(payload.to_dict())
    if isinstance(payload, dict):
        return {str(key): _plain(value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [_plain(item) for item in payload]
    if isinstance(payload, uuid.UUID):
        return str(payload)
    if isinstance(payload, float):
        return _number(payload)
    return payload


def _encode(payload: Any) -> bytes:
    text = json.dumps(
        _plain(payload), separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )
    for char, escape in _ESCAPES.items():
        text = text.replace(char, escape)
    return text.encode("utf-8")


def json_response(status: int, payload: Any) -> Response:
    """Answer with ``payload`` encoded as compact JSON."""
    try:
        body = _encode(payload)
    except (TypeError, ValueError) as exc:
        log.error("Error marshalling JSON: %s", exc)
        body = b""
    return Response(body, status=status, content_type="application/json")


def error_response(
    status: int, message: str, error: Optional[BaseException] = None
) -> Response:
    """Log the failure and answer with ``{"error": message}``."""
    if error is not None:
        log.error("%s", error)
    if status > 499:
        log.error("Responding with 5XX error: %s", message)
    return json_response(status, {"error": message})