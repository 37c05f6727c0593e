"""Network and client configuration for the node RPC client."""

RPC_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "localnet": "http://localhost:8899",
}

DEFAULT_HTTP_TIMEOUT = 30.0

# Version and health are cached for one minute.
DEFAULT_CACHE_TTL = 60.0

CONNECT_TIMEOUT = 5.0
KEEPALIVE_EXPIRY = 90.0
MAX_IDLE_CONNECTIONS = 100

PROBE_MAX_ATTEMPTS = 3
PROBE_INITIAL_DELAY = 2.0
