"""Bounded exponential-backoff reachability probe."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from noderpc.errors import (
    ConnectionProbeError,
    OperationCancelledError,
    RPCClientError,
)

logger = logging.getLogger(__name__)


def probe_with_backoff(
    attempt: Callable[[], object],
    max_attempts: int,
    initial_delay: float,
    cancel: threading.Event | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Call attempt until it succeeds or max_attempts calls have failed.

    The delay between attempts starts at initial_delay and doubles after
    every wait. There is no wait after the final attempt. The wait returns
    early, raising OperationCancelledError, once cancel is set.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    log = log or logger
    cancel = cancel or threading.Event()

    delay = initial_delay
    last_err: RPCClientError | None = None
    for i in range(max_attempts):
        try:
            attempt()
            return
        except OperationCancelledError:
            raise
        except RPCClientError as exc:
            last_err = exc
            log.warning("Connection attempt %d/%d failed: %s", i + 1, max_attempts, exc)

        if i < max_attempts - 1:
            if cancel.wait(delay):
                raise OperationCancelledError(
                    f"connection probe cancelled after {i + 1} attempts"
                )
            delay *= 2

    assert last_err is not None
    raise ConnectionProbeError(max_attempts, last_err) from last_err
