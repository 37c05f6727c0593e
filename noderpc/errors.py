"""Error types raised by the node RPC client.

Every failure reaching a caller is an RPCClientError. The concrete kind
tells the caller what went wrong:

    TransportError  the node could not be reached (or the call was cancelled)
    RPCError        the node answered and rejected the request
    DecodeError     the node answered with something unintelligible
    EncodeError     the request could not be serialized
"""

from __future__ import annotations

from typing import Any


class RPCClientError(Exception):
    """Base class for all client errors."""


class EncodeError(RPCClientError):
    """Request parameters could not be serialized to JSON."""


class TransportError(RPCClientError):
    """The HTTP exchange failed (connect, timeout, DNS, body read)."""


class OperationCancelledError(TransportError):
    """The caller's cancellation event fired before the call completed."""


class DecodeError(RPCClientError):
    """The response body was not valid JSON or had an unexpected shape."""


class RPCError(RPCClientError):
    """A well-formed response carrying a non-zero JSON-RPC error code."""

    def __init__(
        self,
        code: int,
        message: str,
        method: str = "",
        data: Any = None,
    ) -> None:
        super().__init__(code, message, method)
        self.code = code
        self.message = message
        self.method = method
        self.data = data

    def __str__(self) -> str:
        return f"{self.method} RPC error {self.code}: {self.message}"


class ConnectionProbeError(RPCClientError):
    """The connection probe exhausted its attempts."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"failed to connect after {attempts} attempts: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error
