# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Connection bridge: correlates inbound connections with buffered events.

The host receives an invocation event (method, path, headers, body), queues
it under a fresh identifier and forwards the request to the ASGI app with
the identifier in the ``x-now-bridge-request-id`` header. The dispatcher
reads the header and consumes the event to obtain the buffered body.

Flow::

    payload ──normalize_event──> BridgeEvent
                                     │ queue_event
                                     ▼
    events = {"1": BridgeEvent}  ◄── consume_event("1")   (pops: single use)
                                     ▲
    scope headers: x-now-bridge-request-id: 1 ──> Dispatcher

Served over HTTP, ``queue_connection`` does the host side for every inbound
connection: it buffers the body, queues the event and returns the scope
with the identifier header attached.

A consumed identifier is gone: a second ``consume_event`` for it raises
EventNotFoundError, exactly like an identifier that was never queued.
"""

from __future__ import annotations

import base64
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from .datastructures import MutableHeaders
from .exceptions import EventNotFoundError
from .types import ASGIApp, Message, Payload, Receive, Scope

__all__ = ["BRIDGE_REQUEST_ID_HEADER", "Bridge", "BridgeEvent", "normalize_event"]

BRIDGE_REQUEST_ID_HEADER = "x-now-bridge-request-id"

logger = logging.getLogger("genro_bridge.bridge")


@dataclass
class BridgeEvent:
    """A buffered request: transport metadata plus the raw body."""

    method: str = "GET"
    path: str = "/"
    headers: dict[str, str | list[str]] = field(default_factory=dict)
    body: bytes = b""
    request_id: str | None = None


def _decode_body(body: Any, encoding: str | None) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if encoding == "base64":
        return base64.b64decode(str(body))
    if encoding in (None, "utf8", "utf-8"):
        return str(body).encode("utf-8")
    raise ValueError(f"unknown body encoding {encoding!r}")


def normalize_event(payload: Payload) -> BridgeEvent:
    """
    Build a BridgeEvent from a host payload.

    Args:
        payload: Mapping with "method", "path", "headers", "body" and an
                 optional "encoding" ("base64"; otherwise body is UTF-8 text).

    Raises:
        ValueError: For an unknown body encoding.
    """
    headers = {
        str(name).lower(): value
        for name, value in (payload.get("headers") or {}).items()
    }
    return BridgeEvent(
        method=str(payload.get("method") or "GET").upper(),
        path=str(payload.get("path") or "/"),
        headers=headers,
        body=_decode_body(payload.get("body"), payload.get("encoding")),
    )


class Bridge:
    """
    In-memory event store with single-consumption lookup.

    Example:
        >>> bridge = Bridge()
        >>> request_id = bridge.queue_event(BridgeEvent(body=b"hi"))
        >>> bridge.consume_event(request_id).body
        b'hi'
        >>> bridge.consume_event(request_id)
        Traceback (most recent call last):
        ...
        genro_bridge.exceptions.EventNotFoundError: Internal Server Error
    """

    __slots__ = ("_events", "_seed")

    def __init__(self) -> None:
        self._events: dict[str, BridgeEvent] = {}
        self._seed = itertools.count(1)

    def queue_event(self, event: BridgeEvent) -> str:
        """Store ``event`` under a new identifier and return the identifier."""
        request_id = str(next(self._seed))
        event.request_id = request_id
        self._events[request_id] = event
        return request_id

    def consume_event(self, request_id: str) -> BridgeEvent:
        """
        Remove and return the event for ``request_id``.

        Raises:
            EventNotFoundError: Unknown or already consumed identifier.
        """
        event = self._events.pop(request_id, None)
        if event is None:
            raise EventNotFoundError(request_id)
        return event

    def __len__(self) -> int:
        """Number of events waiting to be consumed."""
        return len(self._events)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._events

    async def queue_connection(self, scope: Scope, receive: Receive) -> Scope:
        """
        Buffer an inbound HTTP connection as an event.

        Reads the whole request body from ``receive``, queues it, and returns
        a copy of ``scope`` whose headers carry the new identifier. Any
        identifier header sent by the client is dropped.
        """
        chunks: list[bytes] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break

        id_header = BRIDGE_REQUEST_ID_HEADER.encode("latin-1")
        raw_headers = [
            (name, value)
            for name, value in scope.get("headers", [])
            if name.lower() != id_header
        ]
        raw_path = scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else str(scope.get("path", "/"))
        query_string = scope.get("query_string", b"")
        if query_string:
            path += f"?{query_string.decode('latin-1')}"

        event = BridgeEvent(
            method=str(scope.get("method", "GET")).upper(),
            path=path,
            headers=MutableHeaders(raw_headers).as_dict(),
            body=b"".join(chunks),
        )
        request_id = self.queue_event(event)
        logger.debug(f"Queued {event.method} {event.path} as request {request_id}")
        return {**scope, "headers": [*raw_headers, (id_header, request_id.encode("latin-1"))]}

    async def invoke(self, app: ASGIApp, payload: Payload) -> dict[str, Any]:
        """
        Queue a host payload and run it through ``app`` in process.

        Returns:
            {"statusCode": int, "headers": dict, "body": base64 str,
             "encoding": "base64"}
        """
        event = normalize_event(payload)
        request_id = self.queue_event(event)

        raw_path, _, query = event.path.partition("?")
        raw_headers: list[tuple[bytes, bytes]] = []
        for name, value in event.headers.items():
            if name == BRIDGE_REQUEST_ID_HEADER:
                continue
            for item in value if isinstance(value, list) else [value]:
                raw_headers.append((name.encode("latin-1"), str(item).encode("latin-1")))
        raw_headers.append(
            (BRIDGE_REQUEST_ID_HEADER.encode("latin-1"), request_id.encode("latin-1"))
        )

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": event.method,
            "scheme": "http",
            "path": unquote(raw_path),
            "raw_path": raw_path.encode("latin-1"),
            "query_string": query.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "client": None,
            "server": None,
        }

        body_sent = False

        async def receive() -> Message:
            nonlocal body_sent
            if body_sent:
                return {"type": "http.disconnect"}
            body_sent = True
            return {"type": "http.request", "body": event.body, "more_body": False}

        status_code = 500
        response_headers = MutableHeaders()
        chunks: list[bytes] = []

        async def send(message: Message) -> None:
            nonlocal status_code, response_headers
            if message["type"] == "http.response.start":
                status_code = message["status"]
                response_headers = MutableHeaders(message.get("headers", []))
            elif message["type"] == "http.response.body":
                chunks.append(message.get("body", b""))

        logger.debug(f"Invoking {event.method} {event.path} as request {request_id}")
        await app(scope, receive, send)

        return {
            "statusCode": status_code,
            "headers": response_headers.as_dict(),
            "body": base64.b64encode(b"".join(chunks)).decode("ascii"),
            "encoding": "base64",
        }
