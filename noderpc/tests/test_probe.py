"""Connection probe backoff and cancellation tests."""

import threading
import time

import httpx
import pytest

from noderpc.errors import (
    ConnectionProbeError,
    OperationCancelledError,
    RPCError,
    TransportError,
)
from noderpc.probe import probe_with_backoff


class RecordingEvent(threading.Event):
    """Cancellation event that never fires and records requested waits."""

    def __init__(self) -> None:
        super().__init__()
        self.waits: list[float] = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        return False


def _refused(request):
    raise httpx.ConnectError("connection refused")


class TestProbeWithBackoff:
    def test_success_first_attempt(self):
        cancel = RecordingEvent()
        calls = []
        probe_with_backoff(lambda: calls.append(1), 3, 2.0, cancel)
        assert calls == [1]
        assert cancel.waits == []

    def test_backoff_doubles_and_skips_final_wait(self):
        cancel = RecordingEvent()
        attempts = []

        def attempt():
            attempts.append(1)
            raise TransportError("connection refused")

        with pytest.raises(ConnectionProbeError) as exc_info:
            probe_with_backoff(attempt, 3, 2.0, cancel)
        assert len(attempts) == 3
        assert cancel.waits == [2.0, 4.0]
        assert exc_info.value.attempts == 3
        assert "3 attempts" in str(exc_info.value)
        assert isinstance(exc_info.value.last_error, TransportError)
        assert exc_info.value.__cause__ is exc_info.value.last_error

    def test_reports_last_error(self):
        errors = iter([TransportError("first"), RPCError(-32005, "second", "getVersion")])

        def attempt():
            raise next(errors)

        with pytest.raises(ConnectionProbeError) as exc_info:
            probe_with_backoff(attempt, 2, 0.5, RecordingEvent())
        assert isinstance(exc_info.value.last_error, RPCError)
        assert "second" in str(exc_info.value)

    def test_recovers_after_failure(self):
        cancel = RecordingEvent()
        outcomes = iter([TransportError("down"), None])

        def attempt():
            err = next(outcomes)
            if err is not None:
                raise err

        probe_with_backoff(attempt, 3, 2.0, cancel)
        assert cancel.waits == [2.0]

    def test_cancel_during_wait_returns_promptly(self):
        cancel = threading.Event()

        def attempt():
            raise TransportError("down")

        timer = threading.Timer(0.05, cancel.set)
        timer.start()
        start = time.monotonic()
        try:
            with pytest.raises(OperationCancelledError):
                probe_with_backoff(attempt, 3, 10.0, cancel)
        finally:
            timer.cancel()
        assert time.monotonic() - start < 2.0

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            probe_with_backoff(lambda: None, 0, 2.0)

    def test_logs_each_failed_attempt(self, caplog):
        def attempt():
            raise TransportError("down")

        with caplog.at_level("WARNING", logger="noderpc.probe"):
            with pytest.raises(ConnectionProbeError):
                probe_with_backoff(attempt, 2, 1.0, RecordingEvent())
        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "Connection attempt 1/2 failed: down",
            "Connection attempt 2/2 failed: down",
        ]


class TestClientTestConnection:
    def test_reachable(self, node, client):
        node.result("getVersion", {"solana-core": "1.18.22", "feature-set": 3469865029})
        client.test_connection(cancel=RecordingEvent())
        assert node.calls("getVersion") == 1

    def test_unreachable_after_three_attempts(self, node, client):
        node.handle("getVersion", _refused)
        cancel = RecordingEvent()
        with pytest.raises(ConnectionProbeError, match="failed to connect after 3 attempts"):
            client.test_connection(cancel=cancel)
        assert node.calls("getVersion") == 3
        assert cancel.waits == [2.0, 4.0]

    def test_success_populates_version_cache(self, node, client):
        node.result("getVersion", {"solana-core": "2.0.1"})
        client.test_connection(cancel=RecordingEvent())
        assert client.get_version() == "2.0.1"
        assert node.calls("getVersion") == 1

    def test_cancelled_before_first_attempt(self, node, client):
        node.result("getVersion", {"solana-core": "2.0.1"})
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelledError):
            client.test_connection(cancel=cancel)
        assert node.calls("getVersion") == 0
