# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Case-insensitive, mutable HTTP headers with multi-value support.

Purpose
=======
HTTP header names are case-insensitive per RFC 7230 and the same header can
appear multiple times (e.g., Cookie, Set-Cookie). ASGI provides headers as
``list[tuple[bytes, bytes]]`` with Latin-1 encoding.

Both sides of the bridge mutate headers: the dispatcher strips the bridge
identifier from the request before the handler sees it, and the response
helpers set, rewrite and remove headers while serializing.

This module provides:
- ``MutableHeaders``: case-insensitive header collection with mutation
- ``headers_from_scope()``: Factory to create MutableHeaders from ASGI scope

Processing Schema::

    Input ASGI (bytes, case-preserving):
    [(b"Content-Type", b"application/json"), (b"X-Custom", b"value")]
                        ↓
                Normalization
                        ↓
    Internal storage (str, lowercase names):
    [("content-type", "application/json"), ("x-custom", "value")]
                        ↓
    headers.get("CONTENT-TYPE") → "application/json"
    headers["content-length"] = "3"        # replaces all values
    headers.remove("transfer-encoding")    # no error if absent
    headers.raw()                          # back to ASGI bytes

Definition::

    class MutableHeaders:
        __slots__ = ("_headers",)

        def __init__(self, raw_headers: Iterable[tuple[bytes | str, bytes | str]] = ()) -> None
        def get(self, key: str, default: str | None = None) -> str | None
        def getlist(self, key: str) -> list[str]
        def append(self, key: str, value: str) -> None
        def remove(self, key: str) -> None
        def pop_all(self, key: str) -> list[str]
        def keys(self) -> list[str]
        def values(self) -> list[str]
        def items(self) -> list[tuple[str, str]]
        def as_dict(self) -> dict[str, str | list[str]]
        def raw(self) -> list[tuple[bytes, bytes]]
        def __getitem__ / __setitem__ / __delitem__ / __contains__ / __iter__ / __len__

    def headers_from_scope(scope: Mapping[str, Any]) -> MutableHeaders

Design Notes
============
- Names normalized to lowercase, values preserved as-is
- Order of first insertion is preserved; ``__setitem__`` keeps the position
  of the first existing entry
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Iterator

__all__ = ["MutableHeaders", "headers_from_scope"]


def _to_str(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return value


class MutableHeaders:
    """
    Case-insensitive HTTP headers with multi-value support and mutation.

    Example:
        >>> headers = MutableHeaders([(b"Content-Type", b"text/html")])
        >>> headers.get("content-type")
        'text/html'
        >>> headers["Content-Length"] = "3"
        >>> headers.raw()
        [(b'content-type', b'text/html'), (b'content-length', b'3')]

        # Multi-value headers
        >>> headers = MutableHeaders([(b"cookie", b"a=1"), (b"cookie", b"b=2")])
        >>> headers.getlist("cookie")
        ['a=1', 'b=2']
    """

    __slots__ = ("_headers",)

    def __init__(
        self, raw_headers: Iterable[tuple[bytes | str, bytes | str]] = ()
    ) -> None:
        """
        Initialize headers from (name, value) pairs.

        Args:
            raw_headers: Pairs from an ASGI scope (bytes, decoded as Latin-1)
                         or already decoded strings. Names are lowercased.
        """
        self._headers: list[tuple[str, str]] = [
            (_to_str(name).lower(), _to_str(value)) for name, value in raw_headers
        ]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get the first value for a header (case-insensitive)."""
        key_lower = key.lower()
        for name, value in self._headers:
            if name == key_lower:
                return value
        return default

    def getlist(self, key: str) -> list[str]:
        """Get all values for a header (case-insensitive), empty list if absent."""
        key_lower = key.lower()
        return [value for name, value in self._headers if name == key_lower]

    def append(self, key: str, value: str) -> None:
        """Add a value without touching existing entries."""
        self._headers.append((key.lower(), value))

    def remove(self, key: str) -> None:
        """Remove all values for a header. Absent headers are ignored."""
        key_lower = key.lower()
        self._headers = [(n, v) for n, v in self._headers if n != key_lower]

    def pop_all(self, key: str) -> list[str]:
        """Remove a header and return all its values."""
        values = self.getlist(key)
        self.remove(key)
        return values

    def keys(self) -> list[str]:
        """Return unique header names (lowercase) in order of first occurrence."""
        seen: set[str] = set()
        result: list[str] = []
        for name, _ in self._headers:
            if name not in seen:
                seen.add(name)
                result.append(name)
        return result

    def values(self) -> list[str]:
        """Return all header values, including duplicates."""
        return [value for _, value in self._headers]

    def items(self) -> list[tuple[str, str]]:
        """Return all (name, value) pairs, including duplicates."""
        return list(self._headers)

    def as_dict(self) -> dict[str, str | list[str]]:
        """Return headers as dict. Repeated names map to a list of values."""
        result: dict[str, str | list[str]] = {}
        for name in self.keys():
            values = self.getlist(name)
            result[name] = values[0] if len(values) == 1 else values
        return result

    def raw(self) -> list[tuple[bytes, bytes]]:
        """Return headers as ASGI (name, value) byte tuples."""
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: str) -> None:
        """Set a header, replacing every existing value in place."""
        key_lower = key.lower()
        for index, (name, _) in enumerate(self._headers):
            if name == key_lower:
                self._headers[index] = (key_lower, value)
                self._headers = self._headers[: index + 1] + [
                    (n, v) for n, v in self._headers[index + 1 :] if n != key_lower
                ]
                return
        self._headers.append((key_lower, value))

    def __delitem__(self, key: str) -> None:
        if key not in self:
            raise KeyError(key)
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        """Return total number of header entries (including duplicates)."""
        return len(self._headers)

    def __repr__(self) -> str:
        return f"MutableHeaders({self._headers!r})"


def headers_from_scope(scope: Mapping[str, Any]) -> MutableHeaders:
    """
    Create MutableHeaders from an ASGI scope.

    Returns empty headers if "headers" is not in scope.

    Example:
        >>> scope = {"type": "http", "headers": [(b"host", b"example.com")]}
        >>> headers_from_scope(scope).get("host")
        'example.com'
    """
    return MutableHeaders(scope.get("headers", []))
