# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Content codecs shared by request and response.

- ``parse_body``: decode a buffered request body by its Content-Type
- ``json_dumps`` / ``json_loads``: orjson based JSON codec
- ``create_etag``: weak entity tag from body bytes

Body decoding by base media type::

    application/json                   -> JSON value ({} for an empty body)
    application/octet-stream           -> bytes, unchanged
    application/x-www-form-urlencoded  -> dict (same shape as request.query)
    text/plain                         -> str
    anything else / no content-type    -> None
"""

from __future__ import annotations

import base64
import hashlib
import json as stdlib_json
from typing import Any

import orjson

from .datastructures import parse_media_type, parse_query_string
from .exceptions import ApiError

__all__ = ["parse_body", "json_dumps", "json_loads", "create_etag"]


def json_dumps(value: Any) -> str:
    """
    Serialize to compact JSON text. Non-string dict keys are stringified.

    Values orjson rejects (integers beyond 64 bits) go through stdlib json.
    """
    try:
        return orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
    except orjson.JSONEncodeError:
        return stdlib_json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def json_loads(text: str | bytes) -> Any:
    """Strict JSON parsing (no NaN/Infinity). Raises orjson.JSONDecodeError."""
    return orjson.loads(text)


def parse_body(content_type: str | None, body: bytes) -> Any:
    """
    Decode a request body according to its Content-Type.

    Args:
        content_type: Raw Content-Type header value, or None.
        body: Buffered body bytes.

    Raises:
        ApiError: 400 "Invalid JSON" for a malformed JSON body.
        ValueError: If the Content-Type header itself is malformed.
    """
    if not content_type:
        return None

    media_type = parse_media_type(content_type).type

    if media_type == "application/json":
        text = body.decode("utf-8", errors="replace")
        if not text:
            return {}
        try:
            return json_loads(text)
        except orjson.JSONDecodeError as e:
            raise ApiError(400, "Invalid JSON") from e

    if media_type == "application/octet-stream":
        return body

    if media_type == "application/x-www-form-urlencoded":
        return parse_query_string(body.decode("utf-8", errors="replace"))

    if media_type == "text/plain":
        return body.decode("utf-8", errors="replace")

    return None


def create_etag(chunk: bytes | str, encoding: str | None = None) -> str:
    """
    Compute a weak ETag from body content.

    Format is ``W/"<byte length in hex>-<first 27 chars of base64 SHA-1>"``.

    Args:
        chunk: Body bytes, or text to encode with ``encoding`` (default utf-8).

    Example:
        >>> create_etag(b"")
        'W/"0-2jmj7l5rSw0yVb/vlWAYkK/YBwk"'
    """
    data = chunk if isinstance(chunk, bytes) else chunk.encode(encoding or "utf-8")
    digest = base64.b64encode(hashlib.sha1(data).digest()).decode("ascii")[:27]
    return f'W/"{len(data):x}-{digest}"'
