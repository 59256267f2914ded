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

"""BridgeServer - wires config, handler, bridge and dispatcher together.

Usage:
    server = BridgeServer("myapp.api:handler")
    server.run()  # Starts uvicorn

    # or in process, from the host side:
    result = await server.invoke({"method": "GET", "path": "/?x=1"})

Architecture:
    ASGI Server (uvicorn) → BridgeServer.__call__ → Bridge.queue_connection
                          → Dispatcher → handler
    Host event → BridgeServer.invoke → Bridge.invoke → Dispatcher → handler
"""

from __future__ import annotations

import functools
import importlib
import logging
from typing import Any

from .bridge import Bridge
from .dispatcher import Dispatcher, terminate_process
from .server_config import BridgeConfig
from .types import FatalHook, Handler, Payload, Receive, Scope, Send

__all__ = ["BridgeServer", "load_handler"]


def load_handler(path: str) -> Handler:
    """
    Import a handler from ``"package.module:attr"``.

    Without ``:attr`` the module attribute ``handler`` is used.

    Raises:
        ImportError: Module cannot be imported.
        AttributeError: Attribute not found.
        TypeError: Attribute is not callable.
    """
    module_name, _, attr_path = path.partition(":")
    target: Any = importlib.import_module(module_name)
    for attr in (attr_path or "handler").split("."):
        target = getattr(target, attr)
    if not callable(target):
        raise TypeError(f"Handler {path!r} is not callable")
    handler: Handler = target
    return handler


class BridgeServer:
    """
    ASGI entry point serving a single handler through the bridge.

    Attributes:
        config: BridgeConfig with host, port, log level and exit code.
        handler: The user handler.
        bridge: Bridge holding buffered events.
        dispatcher: Dispatcher running connections through the handler.
        logger: Server logger instance.
    """

    __slots__ = ("config", "handler", "bridge", "dispatcher", "logger")

    def __init__(
        self,
        handler: Handler | str | None = None,
        host: str | None = None,
        port: int | None = None,
        log_level: str | None = None,
        exit_code: int | None = None,
        argv: list[str] | None = None,
        on_fatal: FatalHook | None = None,
    ) -> None:
        handler_path = handler if isinstance(handler, str) else None
        self.config = BridgeConfig(handler_path, host, port, log_level, exit_code, argv)
        self.logger = logging.getLogger("genro_bridge.server")

        if handler is not None and not isinstance(handler, str):
            self.handler: Handler = handler
        elif self.config.handler:
            self.handler = load_handler(self.config.handler)
        else:
            raise ValueError("No handler configured: pass a callable or 'module:attr'")

        self.bridge = Bridge()
        self.dispatcher = Dispatcher(
            self.handler,
            self.bridge,
            on_fatal or functools.partial(terminate_process, exit_code=self.config.exit_code),
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface. Each inbound HTTP connection is queued, then dispatched."""
        if scope["type"] == "http":
            scope = await self.bridge.queue_connection(scope, receive)
        await self.dispatcher(scope, receive, send)

    async def invoke(self, payload: Payload) -> dict[str, Any]:
        """Run a host event through the dispatcher in process."""
        return await self.bridge.invoke(self.dispatcher, payload)

    def run(self) -> None:
        """Run the server using Uvicorn."""
        import uvicorn

        host = self.config.host
        port = self.config.port
        self.logger.info(f"Starting server on {host}:{port}")
        uvicorn.run(self, host=host, port=port, log_level=self.config.log_level.lower())

    def __repr__(self) -> str:
        name = getattr(self.handler, "__qualname__", repr(self.handler))
        return f"BridgeServer(handler={name!r})"
