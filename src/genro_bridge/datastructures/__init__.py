# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Data structures and string-format decoders for the bridge.

Mapping from raw HTTP data to genro-bridge structures::

    Raw Data                                 genro-bridge
    ─────────────────                        ──────────────────
    scope["headers"] = [(b"...", b"...")]  →  MutableHeaders (case-insensitive)
    "/path?a=1&a=2"                        →  {"a": ["1", "2"]}   (query_from_url)
    "a=1&b=2" form body                    →  {"a": "1", "b": "2"} (parse_query_string)
    "text/html; charset=utf-8"             →  MediaType(type, parameters)
    "a=1; b=2" cookie header               →  {"a": "1", "b": "2"} (parse_cookie)

Public Exports
==============
::

    from genro_bridge.datastructures import (
        MediaType,
        MutableHeaders,
        format_media_type,
        headers_from_scope,
        parse_cookie,
        parse_media_type,
        parse_query_string,
        query_from_url,
        set_charset,
    )
"""

from .cookies import parse_cookie
from .headers import MutableHeaders, headers_from_scope
from .media_type import MediaType, format_media_type, parse_media_type, set_charset
from .query_params import parse_query_string, query_from_url

__all__ = [
    "MediaType",
    "MutableHeaders",
    "format_media_type",
    "headers_from_scope",
    "parse_cookie",
    "parse_media_type",
    "parse_query_string",
    "query_from_url",
    "set_charset",
]
