# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Media type (Content-Type) parsing and formatting per RFC 7231.

Purpose
=======
The request decorator branches on the base type of the request
``content-type``; the response writer injects ``charset=utf-8`` into the
response ``content-type`` while preserving every other parameter.

Parsing Schema::

    'Text/HTML; Charset="UTF-8"; q=1'
                        ↓
                parse_media_type
                        ↓
    MediaType(type="text/html", parameters={"charset": "UTF-8", "q": "1"})
                        ↓
                format_media_type  (parameters sorted by name)
                        ↓
    'text/html; charset=UTF-8; q=1'

Definition::

    class MediaType:
        type: str                      # lowercase "type/subtype"
        parameters: dict[str, str]     # lowercase names, unquoted values

    def parse_media_type(header: str) -> MediaType
    def format_media_type(media_type: MediaType) -> str
    def set_charset(header: str, charset: str) -> str

Errors
======
Malformed input raises ``ValueError`` ("invalid media type", "invalid
parameter format", ...). Header values are produced by clients or handlers,
so a malformed value is surfaced rather than guessed at.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = ["MediaType", "parse_media_type", "format_media_type", "set_charset"]

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"

# "; name=value" with value a token or a quoted-string
_PARAM_RE = re.compile(
    r"; *(" + _TOKEN + r") *= *"
    r'("(?:[\x0b\x20\x21\x23-\x5b\x5d-\x7e\x80-\xff]|\\[\x0b\x20-\xff])*"|' + _TOKEN + r") *"
)
_TYPE_RE = re.compile(r"^" + _TOKEN + r"/" + _TOKEN + r"$")
_TOKEN_RE = re.compile(r"^" + _TOKEN + r"$")
_TEXT_RE = re.compile(r"^[\x0b\x20-\x7e\x80-\xff]+$")
_QUOTED_ESCAPE_RE = re.compile(r"\\([\x0b\x20-\xff])")
_QUOTE_RE = re.compile(r'([\\"])')


@dataclass
class MediaType:
    """Parsed media type: base type plus parameters."""

    type: str
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def charset(self) -> str | None:
        """The charset parameter, if present."""
        return self.parameters.get("charset")


def parse_media_type(header: str) -> MediaType:
    """
    Parse a Content-Type header value.

    Args:
        header: Header value, e.g. ``"application/json; charset=utf-8"``.

    Returns:
        MediaType with lowercase type and parameter names.

    Raises:
        ValueError: If the type or a parameter is malformed.
    """
    index = header.find(";")
    base = header[:index].strip() if index != -1 else header.strip()

    if not _TYPE_RE.match(base):
        raise ValueError(f"invalid media type: {header!r}")

    media_type = MediaType(type=base.lower())
    if index == -1:
        return media_type

    while True:
        match = _PARAM_RE.match(header, index)
        if match is None:
            break
        index = match.end()
        name = match.group(1).lower()
        value = match.group(2)
        if value.startswith('"'):
            value = _QUOTED_ESCAPE_RE.sub(r"\1", value[1:-1])
        media_type.parameters[name] = value

    if index != len(header):
        raise ValueError(f"invalid parameter format: {header!r}")

    return media_type


def _quote(value: str) -> str:
    if _TOKEN_RE.match(value):
        return value
    if value and not _TEXT_RE.match(value):
        raise ValueError(f"invalid parameter value: {value!r}")
    return '"' + _QUOTE_RE.sub(r"\\\1", value) + '"'


def format_media_type(media_type: MediaType) -> str:
    """
    Format a MediaType back into a header value.

    Parameters are emitted sorted by name; values that are not tokens are
    quoted.

    Raises:
        ValueError: If the type, a parameter name or a value is invalid.
    """
    if not _TYPE_RE.match(media_type.type):
        raise ValueError(f"invalid media type: {media_type.type!r}")

    result = media_type.type
    for name in sorted(media_type.parameters):
        if not _TOKEN_RE.match(name):
            raise ValueError(f"invalid parameter name: {name!r}")
        result += f"; {name}={_quote(media_type.parameters[name])}"
    return result


def set_charset(header: str, charset: str) -> str:
    """
    Return ``header`` with its charset parameter set to ``charset``.

    Example:
        >>> set_charset("text/html", "utf-8")
        'text/html; charset=utf-8'
        >>> set_charset("application/json; charset=latin1", "utf-8")
        'application/json; charset=utf-8'
    """
    media_type = parse_media_type(header)
    media_type.parameters["charset"] = charset
    return format_media_type(media_type)
