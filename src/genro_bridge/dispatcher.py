# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Dispatcher - runs one bridged HTTP connection through the user handler.

Per connection:
1. Strip the ``x-now-bridge-request-id`` header from the request
2. Require exactly one identifier, else ApiError(500, "Internal Server Error")
3. Consume the buffered event from the Bridge
4. Decorate the request with lazy cookies/query/body
5. Await the handler (sync or async) with (request, response)
6. Flush the response through ASGI send

Request flow:
    scope → BridgeRequest → pop_header(id) → bridge.consume_event(id)
         → request.decorate(event.body)
         → handler(request, response)
         → response.flush(send)

Fatal policy:
    There is no per-request recovery. An exception escaping any step is
    logged and handed to ``on_fatal``; nothing more is sent for that
    connection. The default ``terminate_process`` ends the process: one
    process serves one request, and a failed request leaves it in an
    unknown state.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from smartasync import smartasync

from .bridge import BRIDGE_REQUEST_ID_HEADER
from .exceptions import ApiError
from .request import BridgeRequest
from .response import BridgeResponse

if TYPE_CHECKING:
    from .bridge import Bridge
    from .types import FatalHook, Handler, Receive, Scope, Send

__all__ = ["Dispatcher", "terminate_process"]

logger = logging.getLogger("genro_bridge.dispatcher")


def terminate_process(exc: BaseException, exit_code: int = 1) -> None:
    """Flush logging and exit the process immediately."""
    logging.shutdown()
    os._exit(exit_code)


class Dispatcher:
    """ASGI app dispatching bridged connections to a single handler."""

    __slots__ = ("handler", "bridge", "on_fatal")

    def __init__(
        self,
        handler: Handler,
        bridge: Bridge,
        on_fatal: FatalHook | None = None,
    ) -> None:
        self.handler = handler
        self.bridge = bridge
        self.on_fatal: FatalHook = on_fatal or terminate_process

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise ValueError(f"Unsupported scope type: {scope['type']!r}")

        request = BridgeRequest(scope, receive)
        response = BridgeResponse(request)

        try:
            request_ids = request.pop_header(BRIDGE_REQUEST_ID_HEADER)
            if len(request_ids) != 1:
                raise ApiError(500, "Internal Server Error")

            event = self.bridge.consume_event(request_ids[0])
            request.decorate(event.body)
        except Exception as e:
            logger.error(f"Error while handling {request.url}: {e}")
            self.on_fatal(e)
            return

        try:
            await smartasync(self.handler)(request, response)
        except Exception as e:
            logger.exception(f"Error from API Route {request.url}")
            self.on_fatal(e)
            return

        try:
            if not response.finished:
                logger.warning(f"Handler for {request.url} returned without ending the response")
                response.end()
            await response.flush(send)
        except Exception as e:
            logger.error(f"Error while handling {request.url}: {e}")
            self.on_fatal(e)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
