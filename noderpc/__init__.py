from noderpc.cache import CachedValue, CacheSlot, ReadWriteLock
from noderpc.client import Client
from noderpc.config import (
    DEFAULT_CACHE_TTL,
    DEFAULT_HTTP_TIMEOUT,
    RPC_URLS,
)
from noderpc.envelope import (
    Request,
    Response,
    decode_response,
    encode_request,
    invoke,
)
from noderpc.errors import (
    ConnectionProbeError,
    DecodeError,
    EncodeError,
    OperationCancelledError,
    RPCClientError,
    RPCError,
    TransportError,
)
from noderpc.probe import probe_with_backoff
from noderpc.state import (
    LAMPORTS_PER_SOL,
    Commitment,
    EpochInfo,
    VersionInfo,
)
from noderpc.transport import new_http_client

__all__ = [
    "Client",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_HTTP_TIMEOUT",
    "RPC_URLS",
    "CachedValue",
    "CacheSlot",
    "ReadWriteLock",
    "Request",
    "Response",
    "decode_response",
    "encode_request",
    "invoke",
    "ConnectionProbeError",
    "DecodeError",
    "EncodeError",
    "OperationCancelledError",
    "RPCClientError",
    "RPCError",
    "TransportError",
    "probe_with_backoff",
    "LAMPORTS_PER_SOL",
    "Commitment",
    "EpochInfo",
    "VersionInfo",
    "new_http_client",
]
