# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Bridge request: an ASGI HTTP request decorated with lazy properties.

The dispatcher wraps the ASGI scope in a BridgeRequest, then calls
``decorate(body)`` with the body bytes buffered by the bridge. Decoration
binds three lazy fields, each computed on first read and cached:

    cookies  -> dict[str, str]               from the Cookie header(s)
    query    -> dict[str, str | list[str]]   from the query section of url
    body     -> Any                          from the buffered body by Content-Type

Once read, a field keeps returning the same object. Handlers may also
assign to them (``req.body = {...}``) to override the parsed value.

Example:
    request = BridgeRequest(scope, receive)
    request.decorate(event.body)
    request.query      # parsed now
    request.query      # cached
    request.body       # may raise ApiError(400, "Invalid JSON")
"""

from __future__ import annotations

from typing import Any

from .content import parse_body
from .datastructures import MutableHeaders, headers_from_scope, parse_cookie, query_from_url
from .lazy import LazyProperty, bind_lazy
from .types import Receive, Scope

__all__ = ["BridgeRequest"]


class BridgeRequest:
    """HTTP request adapter wrapping ASGI scope, with lazy decoded fields."""

    __slots__ = ("_scope", "_receive", "_headers", "_lazy")

    cookies = LazyProperty()
    query = LazyProperty()
    body = LazyProperty()

    def __init__(self, scope: Scope, receive: Receive | None = None) -> None:
        self._scope = scope
        self._receive = receive
        self._headers = headers_from_scope(scope)
        self._lazy: dict[str, Any] = {}

    def decorate(self, body: bytes) -> None:
        """Bind the lazy cookies, query and body fields."""
        bind_lazy(self, "cookies", self._parse_cookies)
        bind_lazy(self, "query", self._parse_query)
        bind_lazy(self, "body", lambda: parse_body(self._headers.get("content-type"), body))

    def _parse_cookies(self) -> dict[str, str]:
        values = self._headers.getlist("cookie")
        if not values:
            return {}
        return parse_cookie(";".join(values))

    def _parse_query(self) -> dict[str, str | list[str]]:
        return query_from_url(self.url)

    def pop_header(self, name: str) -> list[str]:
        """Remove a header from the request (and its scope), returning its values."""
        values = self._headers.pop_all(name)
        if values:
            name_bytes = name.lower().encode("latin-1")
            self._scope["headers"] = [
                (key, value)
                for key, value in self._scope.get("headers", [])
                if key.lower() != name_bytes
            ]
        return values

    @property
    def method(self) -> str:
        return str(self._scope.get("method", "GET")).upper()

    @property
    def path(self) -> str:
        return str(self._scope.get("path", "/"))

    @property
    def url(self) -> str:
        """Request target as received: path plus query string."""
        raw_path = self._scope.get("raw_path")
        target = raw_path.decode("latin-1") if raw_path else self.path
        query_string = self._scope.get("query_string", b"")
        if query_string:
            target += f"?{query_string.decode('latin-1')}"
        return target

    @property
    def headers(self) -> MutableHeaders:
        """Request headers (case-insensitive)."""
        return self._headers

    @property
    def scope(self) -> Scope:
        """Raw ASGI scope dict."""
        return self._scope

    @property
    def receive(self) -> Receive | None:
        """Raw ASGI receive callable (the unread request stream)."""
        return self._receive

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} method={self.method} url={self.url!r}>"
