# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Type definitions for genro-bridge.

ASGI Types
==========
The bridge speaks plain ASGI on the server side. ``Scope`` and ``Message``
stay generic mappings: servers attach extensions (``raw_path``, ``state``)
and real validation happens in Request/Response classes.

Handler Types
=============
Handler : Callable[[BridgeRequest, BridgeResponse], Any]
    A user handler receives the decorated request/response pair. It may be
    a plain function or a coroutine function; the dispatcher awaits either.

FatalHook : Callable[[BaseException], None]
    Called once by the dispatcher when a request fails with no recovery.
    The default terminates the process.

Payload : Mapping[str, Any]
    A host event as received by ``Bridge.invoke`` / ``normalize_event``::

        {"method": "POST", "path": "/api?x=1",
         "headers": {"content-type": "application/json"},
         "body": "eyJhIjoxfQ==", "encoding": "base64"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, MutableMapping

if TYPE_CHECKING:
    from .request import BridgeRequest
    from .response import BridgeResponse

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp", "Handler", "FatalHook", "Payload"]

# ASGI Scope - connection metadata
Scope = MutableMapping[str, Any]

# ASGI Message - sent/received data
Message = MutableMapping[str, Any]

# ASGI Receive - callable to receive messages
Receive = Callable[[], Awaitable[Message]]

# ASGI Send - callable to send messages
Send = Callable[[Message], Awaitable[None]]

# ASGI Application - the main callable
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

# User handler - sync or async
Handler = Callable[["BridgeRequest", "BridgeResponse"], Any]

# Fatal failure hook
FatalHook = Callable[[BaseException], None]

# Host event payload
Payload = Mapping[str, Any]
