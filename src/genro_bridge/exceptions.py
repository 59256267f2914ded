# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for genro-bridge error handling.

Module Structure
----------------
Two exception classes:

1. ApiError - An error carrying an HTTP status code and message
2. EventNotFoundError - The bridge has no event for a request identifier

Error Kinds
-----------
- Client errors (4xx ApiError): raised by request decoders, e.g. a malformed
  JSON body gives ``ApiError(400, "Invalid JSON")``. They are surfaced to the
  handler reading the property, never sent by the decoder itself. The handler
  may convert them with ``send_error(res, exc.status_code, exc.message)``.
- Protocol errors (5xx ApiError, EventNotFoundError): a missing or invalid
  bridge identifier. The dispatcher treats them as fatal.

Argument contract violations in the response helpers (bad redirect
arguments, unsupported ``send`` body) are plain ``TypeError``, not ApiError.

Example:
    >>> try:
    ...     data = req.body
    ... except ApiError as e:
    ...     send_error(res, e.status_code, e.message)
"""

__all__ = ["ApiError", "EventNotFoundError"]


class ApiError(Exception):
    """
    Error with HTTP status code and message.

    Attributes:
        status_code: HTTP status code (4xx or 5xx, not validated)
        message: Error message, also returned by ``str()``

    Example:
        >>> raise ApiError(400, "Invalid JSON")
    """

    def __init__(self, status_code: int, message: str = "") -> None:
        """
        Initialize API error.

        Args:
            status_code: HTTP status code
            message: Error message (default: "")
        """
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


class EventNotFoundError(ApiError):
    """No queued event for a request identifier (unknown or already consumed)."""

    def __init__(self, request_id: str) -> None:
        super().__init__(500, "Internal Server Error")
        self.request_id = request_id

    def __repr__(self) -> str:
        return f"EventNotFoundError(request_id={self.request_id!r})"
