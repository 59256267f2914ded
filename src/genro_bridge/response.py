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
HTTP response with chained helpers for bridge handlers.

The response is created by the dispatcher next to its BridgeRequest. The
handler configures it and terminates it exactly once; the dispatcher then
flushes the buffered result through ASGI ``send``::

    response = BridgeResponse(request)
    await handler(request, response)       # calls response.send(...) etc.
    await response.flush(send)

Helper Methods
==============
status(code)
    Set the status code. Returns the response for chaining.

redirect(url) / redirect(status_code, url)
    Write status (default 307) and Location header, then end. Raises
    TypeError unless the arguments resolve to (int, str).

send(body)
    Serialize and end. By type of body:
    - str: default content-type text/html
    - None: same as ""
    - bytes: default content-type application/octet-stream
    - bool, int, float, other objects: delegated to json()
    Text is sent as UTF-8 and the content-type gets charset=utf-8.
    Sets content-length and a weak etag (unless already set).
    Status 204/304 strip content-type, content-length, transfer-encoding
    and the body. HEAD requests get headers only.

json(value)
    Serialize with orjson, default content-type
    "application/json; charset=utf-8", then send() the text.

Primitives
==========
get_header / set_header / remove_header / has_header / write_head / end,
plus ``flush(send)`` for the ASGI side and ``send_error()`` for error replies.

Example:
    >>> res.status(201).json({"id": 42})
    >>> res.redirect("/login")
    >>> res.send(b"\\x00\\x01")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .content import create_etag, json_dumps
from .datastructures import MutableHeaders, set_charset
from .types import Send

if TYPE_CHECKING:
    from .request import BridgeRequest

__all__ = ["BridgeResponse", "send_error"]

# Text shorter than this gets its byte length computed directly; longer text
# is encoded once and sent as bytes.
SMALL_CHUNK_LENGTH = 1000

REDIRECT_USAGE = (
    "Invalid redirect arguments. Please use a single argument URL, "
    "e.g. res.redirect('/destination') or use a status code and URL, "
    "e.g. res.redirect(307, '/destination')."
)

HeaderValue = str | int | list[str]


class BridgeResponse:
    """
    Buffered HTTP response with Express-style helpers.

    Attributes:
        request: The BridgeRequest this response answers.
        status_code: HTTP status code (default 200).
        status_message: Optional reason phrase set by send_error().
        headers: Mutable, case-insensitive response headers.
    """

    __slots__ = ("request", "status_code", "status_message", "headers", "_body", "_finished")

    def __init__(self, request: BridgeRequest | None = None) -> None:
        self.request = request
        self.status_code = 200
        self.status_message: str | None = None
        self.headers = MutableHeaders()
        self._body = b""
        self._finished = False

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        """True once end() was called."""
        return self._finished

    @property
    def body(self) -> bytes:
        """Body bytes passed to end()."""
        return self._body

    def get_header(self, name: str) -> str | list[str] | None:
        """Return a header value, a list for repeated headers, or None."""
        values = self.headers.getlist(name)
        if not values:
            return None
        return values[0] if len(values) == 1 else values

    def set_header(self, name: str, value: HeaderValue) -> BridgeResponse:
        """Set a header, replacing existing values. Lists set repeated headers."""
        if isinstance(value, list):
            self.headers.remove(name)
            for item in value:
                self.headers.append(name, str(item))
        else:
            self.headers[name] = str(value)
        return self

    def remove_header(self, name: str) -> None:
        self.headers.remove(name)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def write_head(
        self, status_code: int, headers: Mapping[str, HeaderValue] | None = None
    ) -> BridgeResponse:
        """Set status code and headers in one call."""
        self.status_code = status_code
        for name, value in (headers or {}).items():
            self.set_header(name, value)
        return self

    def end(self, chunk: bytes | str | None = None, encoding: str | None = None) -> BridgeResponse:
        """
        Terminate the response with an optional final chunk.

        Raises:
            RuntimeError: If the response was already ended.
        """
        if self._finished:
            raise RuntimeError("Response already ended")
        if chunk is None:
            self._body = b""
        elif isinstance(chunk, str):
            self._body = chunk.encode(encoding or "utf-8")
        else:
            self._body = bytes(chunk)
        self._finished = True
        return self

    async def flush(self, send: Send) -> None:
        """Send the ended response as ASGI http.response.start/body messages."""
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.headers.raw(),
            }
        )
        await send({"type": "http.response.body", "body": self._body})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def status(self, status_code: int) -> BridgeResponse:
        """Set the status code. Returns self for chaining."""
        self.status_code = status_code
        return self

    def redirect(self, status_or_url: int | str, url: str | None = None) -> BridgeResponse:
        """
        Redirect to ``url`` and end the response.

        Args:
            status_or_url: URL (status defaults to 307) or status code.
            url: Target URL when the first argument is a status code.

        Raises:
            TypeError: If arguments do not resolve to (int, str).
        """
        if isinstance(status_or_url, str):
            url = status_or_url
            status_or_url = 307
        if (
            not isinstance(status_or_url, int)
            or isinstance(status_or_url, bool)
            or not isinstance(url, str)
        ):
            raise TypeError(REDIRECT_USAGE)
        self.write_head(status_or_url, {"Location": url}).end()
        return self

    def send(self, body: Any = None) -> BridgeResponse:
        """Serialize ``body`` and end the response. See module docstring."""
        chunk: Any = "" if body is None else body
        encoding: str | None = None

        if isinstance(chunk, str):
            if not self.get_header("content-type"):
                self.set_header("content-type", "text/html")
        elif isinstance(chunk, (bytes, bytearray, memoryview)):
            chunk = bytes(chunk)
            if not self.get_header("content-type"):
                self.set_header("content-type", "application/octet-stream")
        elif not callable(chunk):
            # bool, int, float, dict, list and other objects
            return self.json(chunk)

        # write strings in utf-8
        if isinstance(chunk, str):
            encoding = "utf-8"
            content_type = self.get_header("content-type")
            if isinstance(content_type, str):
                self.set_header("content-type", set_charset(content_type, "utf-8"))

        # content-length
        length: int | None = None
        if isinstance(chunk, bytes):
            length = len(chunk)
        elif isinstance(chunk, str):
            if len(chunk) < SMALL_CHUNK_LENGTH:
                length = len(chunk.encode("utf-8"))
            else:
                chunk = chunk.encode("utf-8")
                length = len(chunk)
                encoding = None
        else:
            raise TypeError(
                "`body` is not a valid string, object, boolean, number, or bytes"
            )
        self.set_header("content-length", length)

        # etag
        if not self.get_header("etag"):
            etag = create_etag(chunk, encoding)
            if etag:
                self.set_header("etag", etag)

        # strip irrelevant headers
        if self.status_code in (204, 304):
            self.remove_header("content-type")
            self.remove_header("content-length")
            self.remove_header("transfer-encoding")
            chunk = ""

        if self.request is not None and self.request.method == "HEAD":
            return self.end()
        if encoding:
            return self.end(chunk, encoding)
        return self.end(chunk)

    def json(self, value: Any) -> BridgeResponse:
        """Serialize ``value`` as JSON and send it."""
        body = json_dumps(value)
        if not self.get_header("content-type"):
            self.set_header("content-type", "application/json; charset=utf-8")
        return self.send(body)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} status={self.status_code} "
            f"finished={self._finished}>"
        )


def send_error(res: BridgeResponse, status_code: int, message: str) -> BridgeResponse:
    """
    End ``res`` as an error: status code and reason phrase, no body.

    ASGI has no reason phrase field; ``status_message`` is kept on the
    response for logging and tests.
    """
    res.status_code = status_code
    res.status_message = message
    return res.end()
