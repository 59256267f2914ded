# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the connection bridge."""

from __future__ import annotations

import base64
from typing import Any

import pytest

from genro_bridge.bridge import BRIDGE_REQUEST_ID_HEADER, Bridge, BridgeEvent, normalize_event
from genro_bridge.exceptions import ApiError, EventNotFoundError


class TestNormalizeEvent:
    """Tests for normalize_event."""

    def test_defaults(self) -> None:
        event = normalize_event({})
        assert event.method == "GET"
        assert event.path == "/"
        assert event.headers == {}
        assert event.body == b""
        assert event.request_id is None

    def test_method_uppercased(self) -> None:
        assert normalize_event({"method": "post"}).method == "POST"

    def test_header_names_lowercased(self) -> None:
        event = normalize_event({"headers": {"Content-Type": "text/plain"}})
        assert event.headers == {"content-type": "text/plain"}

    def test_base64_body(self) -> None:
        payload = {"body": base64.b64encode(b"\x00\x01").decode(), "encoding": "base64"}
        assert normalize_event(payload).body == b"\x00\x01"

    def test_text_body(self) -> None:
        assert normalize_event({"body": "héllo"}).body == "héllo".encode()

    def test_bytes_body(self) -> None:
        assert normalize_event({"body": b"raw", "encoding": "base64"}).body == b"raw"

    def test_unknown_encoding(self) -> None:
        with pytest.raises(ValueError, match="unknown body encoding"):
            normalize_event({"body": "x", "encoding": "rot13"})


class TestBridgeStore:
    """Tests for queue_event / consume_event."""

    def test_queue_assigns_increasing_ids(self) -> None:
        bridge = Bridge()
        first = bridge.queue_event(BridgeEvent())
        second = bridge.queue_event(BridgeEvent())
        assert (first, second) == ("1", "2")
        assert len(bridge) == 2

    def test_queue_sets_request_id(self) -> None:
        bridge = Bridge()
        event = BridgeEvent()
        request_id = bridge.queue_event(event)
        assert event.request_id == request_id
        assert request_id in bridge

    def test_consume_returns_event(self) -> None:
        bridge = Bridge()
        event = BridgeEvent(body=b"hi")
        request_id = bridge.queue_event(event)
        assert bridge.consume_event(request_id) is event
        assert request_id not in bridge

    def test_consume_twice_fails(self) -> None:
        bridge = Bridge()
        request_id = bridge.queue_event(BridgeEvent())
        bridge.consume_event(request_id)
        with pytest.raises(EventNotFoundError) as exc_info:
            bridge.consume_event(request_id)
        assert exc_info.value.request_id == request_id

    def test_consume_unknown(self) -> None:
        with pytest.raises(ApiError) as exc_info:
            Bridge().consume_event("42")
        assert exc_info.value.status_code == 500


class RecordingApp:
    """ASGI app recording scope and body, answering with a fixed response."""

    def __init__(self, status: int = 200, body: bytes = b"ok") -> None:
        self.status = status
        self.body = body
        self.scope: dict[str, Any] | None = None
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, scope: Any, receive: Any, send: Any) -> None:
        self.scope = scope
        self.messages.append(await receive())
        self.messages.append(await receive())
        await send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": [(b"x-a", b"1"), (b"set-cookie", b"a=1"), (b"set-cookie", b"b=2")],
            }
        )
        await send({"type": "http.response.body", "body": self.body})


class TestBridgeInvoke:
    """Tests for Bridge.invoke."""

    @pytest.mark.asyncio
    async def test_scope(self) -> None:
        app = RecordingApp()
        await Bridge().invoke(
            app,
            {"method": "get", "path": "/a%20b?x=1&y=2", "headers": {"Host": "example.com"}},
        )
        assert app.scope is not None
        assert app.scope["type"] == "http"
        assert app.scope["method"] == "GET"
        assert app.scope["path"] == "/a b"
        assert app.scope["raw_path"] == b"/a%20b"
        assert app.scope["query_string"] == b"x=1&y=2"
        assert (b"host", b"example.com") in app.scope["headers"]
        assert (BRIDGE_REQUEST_ID_HEADER.encode(), b"1") in app.scope["headers"]

    @pytest.mark.asyncio
    async def test_list_header_values(self) -> None:
        app = RecordingApp()
        await Bridge().invoke(app, {"headers": {"cookie": ["a=1", "b=2"]}})
        assert app.scope is not None
        cookies = [value for name, value in app.scope["headers"] if name == b"cookie"]
        assert cookies == [b"a=1", b"b=2"]

    @pytest.mark.asyncio
    async def test_receive_body_then_disconnect(self) -> None:
        app = RecordingApp()
        await Bridge().invoke(app, {"method": "POST", "body": "payload"})
        assert app.messages == [
            {"type": "http.request", "body": b"payload", "more_body": False},
            {"type": "http.disconnect"},
        ]

    @pytest.mark.asyncio
    async def test_result(self) -> None:
        result = await Bridge().invoke(RecordingApp(status=201, body=b"created"), {})
        assert result["statusCode"] == 201
        assert result["headers"] == {"x-a": "1", "set-cookie": ["a=1", "b=2"]}
        assert base64.b64decode(result["body"]) == b"created"
        assert result["encoding"] == "base64"

    @pytest.mark.asyncio
    async def test_event_left_for_dispatcher(self) -> None:
        bridge = Bridge()
        await bridge.invoke(RecordingApp(), {})
        # the recording app never consumed its event
        assert "1" in bridge

    @pytest.mark.asyncio
    async def test_no_response_gives_500(self) -> None:
        async def silent(scope: Any, receive: Any, send: Any) -> None:
            pass

        result = await Bridge().invoke(silent, {})
        assert result["statusCode"] == 500
        assert result["body"] == ""

    @pytest.mark.asyncio
    async def test_payload_id_header_replaced(self) -> None:
        app = RecordingApp()
        await Bridge().invoke(app, {"headers": {BRIDGE_REQUEST_ID_HEADER: "99"}})
        assert app.scope is not None
        ids = [value for name, value in app.scope["headers"] if name == BRIDGE_REQUEST_ID_HEADER.encode()]
        assert ids == [b"1"]


def make_receive(*messages: dict[str, Any]) -> Any:
    queue = list(messages)

    async def receive() -> dict[str, Any]:
        return queue.pop(0) if queue else {"type": "http.disconnect"}

    return receive


class TestQueueConnection:
    """Tests for Bridge.queue_connection."""

    @pytest.mark.asyncio
    async def test_buffers_chunked_body(self) -> None:
        bridge = Bridge()
        scope = {
            "type": "http",
            "method": "post",
            "path": "/items",
            "query_string": b"a=1",
            "headers": [(b"content-type", b"text/plain")],
        }
        receive = make_receive(
            {"type": "http.request", "body": b"hel", "more_body": True},
            {"type": "http.request", "body": b"lo", "more_body": False},
        )
        queued = await bridge.queue_connection(scope, receive)
        event = bridge.consume_event("1")
        assert event.body == b"hello"
        assert event.method == "POST"
        assert event.path == "/items?a=1"
        assert event.headers == {"content-type": "text/plain"}
        assert queued["headers"][-1] == (BRIDGE_REQUEST_ID_HEADER.encode(), b"1")
        assert queued["path"] == "/items"
        assert scope["headers"] == [(b"content-type", b"text/plain")]

    @pytest.mark.asyncio
    async def test_client_id_header_dropped(self) -> None:
        bridge = Bridge()
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": [(BRIDGE_REQUEST_ID_HEADER.encode(), b"42")],
        }
        queued = await bridge.queue_connection(scope, make_receive())
        assert queued["headers"] == [(BRIDGE_REQUEST_ID_HEADER.encode(), b"1")]
        assert "42" not in bridge

    @pytest.mark.asyncio
    async def test_disconnect_ends_body(self) -> None:
        bridge = Bridge()
        scope = {"type": "http", "method": "GET", "path": "/", "headers": []}
        await bridge.queue_connection(scope, make_receive())
        assert bridge.consume_event("1").body == b""
