"""RPC client for querying node status."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Sequence, TypeVar

import httpx

from noderpc.cache import CacheSlot
from noderpc.config import (
    DEFAULT_CACHE_TTL,
    DEFAULT_HTTP_TIMEOUT,
    PROBE_INITIAL_DELAY,
    PROBE_MAX_ATTEMPTS,
    RPC_URLS,
)
from noderpc.envelope import invoke
from noderpc.probe import probe_with_backoff
from noderpc.state import (
    Commitment,
    EpochInfo,
    VersionInfo,
    parse_int,
    parse_optional_int,
    parse_str,
)
from noderpc.transport import new_http_client

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Client:
    """Read-only client for node version, health, epoch and slot queries.

    A single instance is meant to be shared by every thread of the
    process. Version and health results are cached for cache_ttl seconds;
    every other method goes to the node on each call.
    """

    def __init__(
        self,
        rpc_url: str,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        http_client: httpx.Client | None = None,
        log: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rpc_url = rpc_url
        self.http_timeout = http_timeout
        self._owns_http = http_client is None
        self._http = http_client or new_http_client(http_timeout)
        self._log = log or logger
        self._version_cache: CacheSlot[str] = CacheSlot(cache_ttl, clock)
        self._health_cache: CacheSlot[str] = CacheSlot(cache_ttl, clock)

    @classmethod
    def from_env(cls, env: str, **kwargs: Any) -> Client:
        """Create a client configured for the given environment.

        Args:
            env: Environment name ("mainnet-beta", "testnet", "devnet", "localnet")
        """
        return cls(RPC_URLS[env], **kwargs)

    @classmethod
    def mainnet_beta(cls) -> Client:
        return cls.from_env("mainnet-beta")

    @classmethod
    def testnet(cls) -> Client:
        return cls.from_env("testnet")

    @classmethod
    def devnet(cls) -> Client:
        return cls.from_env("devnet")

    @classmethod
    def localnet(cls) -> Client:
        return cls.from_env("localnet")

    def close(self) -> None:
        """Release the connection pool if this client created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Connectivity --

    def test_connection(
        self,
        cancel: threading.Event | None = None,
        max_attempts: int = PROBE_MAX_ATTEMPTS,
        initial_delay: float = PROBE_INITIAL_DELAY,
    ) -> None:
        """Check the node is reachable by fetching its version.

        Retries with exponential backoff and raises ConnectionProbeError
        once max_attempts have failed, or OperationCancelledError if
        cancel is set while waiting.
        """
        probe_with_backoff(
            lambda: self.get_version(cancel=cancel),
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            cancel=cancel,
            log=self._log,
        )

    # -- Core RPC methods --

    def get_block_time(
        self,
        slot: int,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int | None:
        """Return the block's unix timestamp, or None if the node has none."""
        return self._call("getBlockTime", [slot], parse_optional_int, cancel, timeout)

    def get_epoch_info(
        self,
        commitment: Commitment | str = Commitment.FINALIZED,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> EpochInfo:
        config = {"commitment": str(commitment)}
        return self._call("getEpochInfo", [config], EpochInfo.from_json, cancel, timeout)

    def get_version(
        self,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> str:
        version, hit = self._version_cache.get_or_refresh(
            lambda: self._call(
                "getVersion", [], VersionInfo.from_json, cancel, timeout
            ).solana_core
        )
        if hit:
            self._log.debug("Version returned from cache")
        return version

    def get_health(
        self,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> str:
        health, hit = self._health_cache.get_or_refresh(
            lambda: self._call("getHealth", [], parse_str, cancel, timeout)
        )
        if hit:
            self._log.debug("Health status returned from cache")
        return health

    def get_minimum_ledger_slot(
        self,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int:
        return self._call("minimumLedgerSlot", [], parse_int, cancel, timeout)

    def get_first_available_block(
        self,
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> int:
        return self._call("getFirstAvailableBlock", [], parse_int, cancel, timeout)

    def invalidate_cache(self) -> None:
        """Drop cached version and health so the next read hits the node."""
        self._version_cache.invalidate()
        self._health_cache.invalidate()

    # -- Internal helpers --

    def _call(
        self,
        method: str,
        params: Sequence[Any],
        parse: Callable[[Any], T],
        cancel: threading.Event | None,
        timeout: float | None,
    ) -> T:
        return invoke(
            self._http,
            self.rpc_url,
            method,
            params,
            parse,
            timeout=timeout,
            cancel=cancel,
            log=self._log,
        )
