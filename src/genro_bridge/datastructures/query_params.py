# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Query string and form-urlencoded decoding.

Purpose
=======
Query parameters are case-sensitive (unlike headers). Uses
``urllib.parse.parse_qsl`` for parsing, which handles URL decoding and ``+``
as space automatically.

The same decoder serves the request query and
``application/x-www-form-urlencoded`` bodies, so both produce the same shape:
an insertion-ordered dict where a key seen once maps to a string and a
repeated key maps to the list of its values.

Parsing Schema::

    Query string: "name=john&tags=python&tags=web&empty=&flag"
                        ↓
                urllib.parse.parse_qsl(keep_blank_values=True)
                        ↓
    [("name", "john"), ("tags", "python"), ("tags", "web"),
     ("empty", ""), ("flag", "")]
                        ↓
    {"name": "john", "tags": ["python", "web"], "empty": "", "flag": ""}

Definition::

    def parse_query_string(query_string: bytes | str) -> dict[str, str | list[str]]
    def query_from_url(url: str | None) -> dict[str, str | list[str]]

Design Notes
============
- Empty values are preserved (``?key=`` and ``?key`` → ``""``)
- A fragment (``#...``) is never part of the query
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

__all__ = ["parse_query_string", "query_from_url"]


def parse_query_string(query_string: bytes | str) -> dict[str, str | list[str]]:
    """
    Decode a query string into a dict.

    Args:
        query_string: The query string (bytes are decoded as Latin-1).

    Returns:
        Dict mapping each key to a string, or to a list when repeated.

    Example:
        >>> parse_query_string("a=1&b=2&a=3")
        {'a': ['1', '3'], 'b': '2'}
    """
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    result: dict[str, str | list[str]] = {}
    for key, value in parse_qsl(query_string, keep_blank_values=True):
        current = result.get(key)
        if current is None:
            result[key] = value
        elif isinstance(current, list):
            current.append(value)
        else:
            result[key] = [current, value]
    return result


def query_from_url(url: str | None) -> dict[str, str | list[str]]:
    """
    Decode the query section of a request URL (path plus query).

    Args:
        url: Request URL such as ``/api/items?page=2``. None means ``/``.

    Example:
        >>> query_from_url("/search?q=hello+world")
        {'q': 'hello world'}
    """
    return parse_query_string(urlsplit(url or "/").query)
