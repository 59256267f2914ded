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

"""genro-bridge - Express-style request/response helpers over a request bridge.

Main components:
    BridgeServer: ASGI entry point, loads the handler, serves via uvicorn
    Dispatcher: Per-connection loop (bridge id, decoration, fatal policy)
    Bridge: Buffered events keyed by request id, consumed once
    BridgeRequest: Request with lazy cookies, query and body
    BridgeResponse: Response with status, redirect, send and json

Usage:
    from genro_bridge import BridgeServer

    def handler(req, res):
        res.status(200).json({"hello": req.query.get("name", "world")})

    BridgeServer(handler).run()
"""

__version__ = "0.1.0"

from .bridge import BRIDGE_REQUEST_ID_HEADER, Bridge, BridgeEvent, normalize_event
from .content import create_etag, parse_body
from .datastructures import (
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
from .dispatcher import Dispatcher, terminate_process
from .exceptions import ApiError, EventNotFoundError
from .lazy import Lazy, LazyProperty, bind_lazy
from .request import BridgeRequest
from .response import BridgeResponse, send_error
from .server import BridgeServer, load_handler
from .server_config import BridgeConfig
from .types import ASGIApp, FatalHook, Handler, Message, Payload, Receive, Scope, Send

__all__ = [
    # Server integration
    "BridgeServer",
    "BridgeConfig",
    "Dispatcher",
    "load_handler",
    "terminate_process",
    # Bridge
    "BRIDGE_REQUEST_ID_HEADER",
    "Bridge",
    "BridgeEvent",
    "normalize_event",
    # Request/Response
    "BridgeRequest",
    "BridgeResponse",
    "send_error",
    # Lazy fields
    "Lazy",
    "LazyProperty",
    "bind_lazy",
    # Decoders
    "MediaType",
    "MutableHeaders",
    "create_etag",
    "format_media_type",
    "headers_from_scope",
    "parse_body",
    "parse_cookie",
    "parse_media_type",
    "parse_query_string",
    "query_from_url",
    "set_charset",
    # Exceptions
    "ApiError",
    "EventNotFoundError",
    # Types
    "ASGIApp",
    "FatalHook",
    "Handler",
    "Message",
    "Payload",
    "Receive",
    "Scope",
    "Send",
]
