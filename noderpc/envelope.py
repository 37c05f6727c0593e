"""JSON-RPC 2.0 envelope encoding, HTTP exchange and response decoding."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

import httpx

from noderpc.config import CONNECT_TIMEOUT
from noderpc.errors import (
    DecodeError,
    EncodeError,
    OperationCancelledError,
    RPCError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSONRPC_VERSION = "2.0"

# One logical request per HTTP exchange, so the id is never used to match
# responses.
REQUEST_ID = 1

_HEADERS = {"Content-Type": "application/json"}

# How often a waiting caller checks its cancel event.
_CANCEL_POLL_INTERVAL = 0.02


@dataclass(frozen=True)
class Request:
    method: str
    params: tuple = ()
    jsonrpc: str = JSONRPC_VERSION
    id: int = REQUEST_ID

    def to_json(self) -> dict:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": list(self.params),
        }


@dataclass(frozen=True)
class Response(Generic[T]):
    result: T | None = None
    error: RPCError | None = None

    def unwrap(self) -> T:
        """Return the result, or raise the RPC error if one is present."""
        if self.error is not None:
            raise self.error
        return self.result  # type: ignore[return-value]


def encode_request(request: Request) -> bytes:
    try:
        return json.dumps(request.to_json(), allow_nan=False).encode()
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"failed to marshal {request.method} request: {exc}") from exc


def decode_response(
    body: bytes,
    method: str,
    parse: Callable[[Any], T],
) -> Response[T]:
    """Decode a response body into a Response.

    A non-zero error code always wins over a result, and the result is
    only handed to parse when there is no error.
    """
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"failed to decode {method} response: {exc}") from exc
    if not isinstance(payload, dict):
        raise DecodeError(f"failed to decode {method} response: not a JSON object")

    error = payload.get("error")
    if error is not None:
        if not isinstance(error, dict):
            raise DecodeError(f"failed to decode {method} response: malformed error")
        code = error.get("code", 0)
        if isinstance(code, bool) or not isinstance(code, int):
            raise DecodeError(f"failed to decode {method} response: malformed error code")
        if code != 0:
            message = error.get("message", "")
            return Response(
                error=RPCError(code, str(message), method, error.get("data"))
            )

    if "result" not in payload:
        raise DecodeError(f"failed to decode {method} response: missing result")
    try:
        return Response(result=parse(payload["result"]))
    except DecodeError as exc:
        raise DecodeError(f"failed to decode {method} response: {exc}") from exc


def _check_cancelled(cancel: threading.Event | None, method: str) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError(f"{method} RPC call cancelled")


def call_timeout(timeout: float) -> httpx.Timeout:
    """Per-call deadline that keeps the transport's connect bound."""
    return httpx.Timeout(timeout, connect=min(CONNECT_TIMEOUT, timeout))


def _exchange(
    http: httpx.Client,
    request: httpx.Request,
    method: str,
    cancel: threading.Event | None,
) -> bytes:
    resp = http.send(request, stream=True)
    try:
        chunks = []
        for chunk in resp.iter_bytes():
            _check_cancelled(cancel, method)
            chunks.append(chunk)
        return b"".join(chunks)
    finally:
        resp.close()


def _exchange_cancellable(
    http: httpx.Client,
    request: httpx.Request,
    method: str,
    cancel: threading.Event,
) -> bytes:
    """Run the exchange on a worker thread and give up as soon as cancel fires.

    An abandoned worker finishes in the background, bounded by the
    transport timeout, and closes its own response.
    """
    done = threading.Event()
    outcome: dict[str, Any] = {}

    def run() -> None:
        try:
            outcome["body"] = _exchange(http, request, method, cancel)
        except Exception as exc:
            outcome["error"] = exc
        finally:
            done.set()

    threading.Thread(target=run, name=f"rpc-{method}", daemon=True).start()
    while not done.wait(_CANCEL_POLL_INTERVAL):
        _check_cancelled(cancel, method)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["body"]


def invoke(
    http: httpx.Client,
    url: str,
    method: str,
    params: Sequence[Any],
    parse: Callable[[Any], T],
    *,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
    log: logging.Logger | None = None,
) -> T:
    """Perform one JSON-RPC call and return its decoded result.

    Raises EncodeError, TransportError (OperationCancelledError when the
    cancel event fires), DecodeError or RPCError. Nothing is retried.
    """
    log = log or logger
    request = Request(method, tuple(params))
    body = encode_request(request)
    log.debug(
        "Making RPC request to %s: %s",
        url,
        body.decode(),
        extra={"method": method, "body": body.decode()},
    )

    _check_cancelled(cancel, method)
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = call_timeout(timeout)
    http_request = http.build_request(
        "POST", url, content=body, headers=_HEADERS, **kwargs
    )

    start = time.monotonic()
    try:
        if cancel is None:
            raw = _exchange(http, http_request, method, None)
        else:
            raw = _exchange_cancellable(http, http_request, method, cancel)
    except httpx.HTTPError as exc:
        log.error("RPC request failed: %s", exc, extra={"method": method})
        raise TransportError(f"{method} RPC call failed: {exc}") from exc

    duration_ms = int((time.monotonic() - start) * 1000)
    log.debug(
        "RPC request completed: method=%s duration_ms=%d",
        method,
        duration_ms,
        extra={"method": method, "duration_ms": duration_ms},
    )
    log.debug(
        "RPC response: %s",
        raw.decode(errors="replace"),
        extra={"method": method, "body": raw.decode(errors="replace")},
    )

    return decode_response(raw, method, parse).unwrap()
