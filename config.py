"""Configuration for outcome-token ledger analytics."""

import os

# GraphQL query service (Hasura)
GQL_ENDPOINT = os.environ.get(
    "HASURA_GQL_ENDPOINT",
    os.environ.get("NEXT_PUBLIC_HASURA_GQL_ENDPOINT", "http://localhost:8080/v1/graphql"),
)
HASURA_ADMIN_SECRET = os.environ.get("HASURA_ADMIN_SECRET", "")

# Rate limiting
RATE_LIMIT_REQUESTS_PER_SECOND = float(os.environ.get("GQL_RATE_LIMIT", "10"))
RATE_LIMIT_BURST = 20

# Pagination
PAGE_SIZE = 1000  # rows per GraphQL page; tuning only, never changes results

# Retry / backoff (transport only; the paginator never retries)
MAX_RETRIES = 5
BACKOFF_BASE = 1.0  # seconds
BACKOFF_FACTOR = 2.0
REQUEST_TIMEOUT = 30  # seconds

# Chain RPC (settlement-currency balances)
RPC_URL = os.environ.get("RPC_URL", os.environ.get("NEXT_PUBLIC_RPC_URL", "https://bsc-dataseed.binance.org"))
RPC_RATE_LIMIT = float(os.environ.get("RPC_RATE_LIMIT", "5.0"))
RPC_BURST = 5
RPC_MAX_RETRIES = 3
COLLATERAL_ADDRESS = os.environ.get(
    "COLLATERAL_ADDRESS", "0x63c8e89a56f2C4e4ad5Ec26228621Fa04c33E4F0")
BALANCE_BATCH_SIZE = 500  # addresses per JSON-RPC batch

# Decimal scales (deployment contract, not read from chain)
POSITION_DECIMALS = 18  # outcome tokens
COLLATERAL_DECIMALS = 6  # settlement currency

# Market metrics
LIQUIDITY_MODE = os.environ.get("LIQUIDITY_MODE", "absolute")  # "absolute" or "signed"
METRICS_BATCH_SIZE = 500  # markets per concurrent batch
METRICS_MAX_WORKERS = int(os.environ.get("METRICS_MAX_WORKERS", "8"))

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
OUTPUT_DIR = os.path.join(BASE_DIR, "output")
