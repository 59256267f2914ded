# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Cookie header decoding.

Parsing Schema::

    'session=abc123; theme="dark"; name=J%C3%B6rg; session=ignored'
                        ↓
                parse_cookie
                        ↓
    {"session": "abc123", "theme": "dark", "name": "Jörg"}

Rules:
- pairs are separated by ``;``; a pair without ``=`` is skipped
- names and values are stripped of surrounding whitespace
- a double-quoted value is unquoted
- values are percent-decoded; a value that does not decode is kept as-is
- the first occurrence of a name wins
"""

from __future__ import annotations

from urllib.parse import unquote

__all__ = ["parse_cookie"]


def _decode(value: str) -> str:
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def parse_cookie(header: str) -> dict[str, str]:
    """
    Parse a Cookie header value into a dict.

    Args:
        header: Cookie header, possibly several headers joined with ``;``.

    Returns:
        Dict of cookie name to decoded value, in order of first occurrence.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.partition("=")
        if not sep:
            continue
        name = name.strip()
        if name in cookies:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]
        cookies[name] = _decode(value)
    return cookies
