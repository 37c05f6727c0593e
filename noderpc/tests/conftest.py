"""Shared fixtures: an in-process fake node behind httpx.MockTransport."""

import json
from typing import Any, Callable

import httpx
import pytest

from noderpc.client import Client

RPC_URL = "http://node.test:8899"


class FakeNode:
    """Answers JSON-RPC requests from a per-method table and records them."""

    def __init__(self) -> None:
        self.requests: list[dict] = []
        self.raw_requests: list[httpx.Request] = []
        self._handlers: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def result(self, method: str, result: Any) -> None:
        self._handlers[method] = lambda req: httpx.Response(
            200, json={"jsonrpc": "2.0", "id": 1, "result": result}
        )

    def error(self, method: str, code: int, message: str, status: int = 200) -> None:
        self._handlers[method] = lambda req: httpx.Response(
            status,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}},
        )

    def body(self, method: str, content: bytes) -> None:
        self._handlers[method] = lambda req: httpx.Response(200, content=content)

    def handle(self, method: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handlers[method] = handler

    def calls(self, method: str) -> int:
        return sum(1 for r in self.requests if r["method"] == method)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.read())
        self.requests.append(payload)
        self.raw_requests.append(request)
        return self._handlers[payload["method"]](request)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http(node: FakeNode):
    with httpx.Client(transport=httpx.MockTransport(node)) as c:
        yield c


@pytest.fixture
def client(http: httpx.Client, clock: FakeClock) -> Client:
    return Client(RPC_URL, http_client=http, cache_ttl=60.0, clock=clock)
