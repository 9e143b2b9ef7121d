"""Rate-limited GraphQL client with retry logic."""

import logging
import threading
import time
from typing import Any, Dict, Optional

import requests

import config

logger = logging.getLogger(__name__)


class QueryError(RuntimeError):
    """The query service answered, but not with usable data."""


class GraphQLClient:
    """GraphQL-over-HTTP client with token-bucket rate limiting and exponential backoff.

    One instance is created by the caller and shared by every operation that
    needs the query service. The token bucket is lock-guarded so the market
    metrics worker threads can share a client.
    """

    def __init__(
        self,
        endpoint: str = config.GQL_ENDPOINT,
        admin_secret: Optional[str] = config.HASURA_ADMIN_SECRET,
        requests_per_second: float = config.RATE_LIMIT_REQUESTS_PER_SECOND,
        burst: int = config.RATE_LIMIT_BURST,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.rps = requests_per_second
        self.burst = burst
        self.tokens = float(burst)
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "OutcomeLedgerAnalytics/1.0",
        })
        if admin_secret:
            self.session.headers["x-hasura-admin-secret"] = admin_secret

    def _refill_tokens(self):
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.burst, self.tokens + elapsed * self.rps)
        self.last_refill = now

    def _wait_for_token(self):
        with self._lock:
            self._refill_tokens()
            if self.tokens < 1.0:
                wait_time = (1.0 - self.tokens) / self.rps
                time.sleep(wait_time)
                self._refill_tokens()
            self.tokens -= 1.0

    def query(self, document: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST a GraphQL document and return its ``data`` object.

        Raises QueryError when the service reports GraphQL errors, and the
        last transport exception once retries are exhausted.
        """
        payload = {"query": document, "variables": variables or {}}

        last_exception: Optional[Exception] = None
        for attempt in range(config.MAX_RETRIES):
            self._wait_for_token()
            try:
                resp = self.session.post(self.endpoint, json=payload, timeout=config.REQUEST_TIMEOUT)

                if resp.status_code == 429:
                    wait = config.BACKOFF_BASE * (config.BACKOFF_FACTOR ** attempt)
                    logger.debug("Rate limited by query service, sleeping %.1fs", wait)
                    time.sleep(wait)
                    continue

                resp.raise_for_status()
                body = resp.json()

            except requests.exceptions.HTTPError as e:
                if resp.status_code in (500, 502, 503, 504):
                    last_exception = e
                    wait = config.BACKOFF_BASE * (config.BACKOFF_FACTOR ** attempt)
                    time.sleep(wait)
                    continue
                raise
            except requests.exceptions.RequestException as e:
                last_exception = e
                wait = config.BACKOFF_BASE * (config.BACKOFF_FACTOR ** attempt)
                time.sleep(wait)
                continue

            if not isinstance(body, dict):
                raise QueryError(f"Unexpected response body from {self.endpoint}: {body!r}")
            if body.get("errors"):
                messages = "; ".join(str(err.get("message", err)) for err in body["errors"])
                raise QueryError(f"GraphQL errors: {messages}")
            data = body.get("data")
            if not isinstance(data, dict):
                raise QueryError(f"Response from {self.endpoint} has no data object")
            return data

        raise last_exception or RuntimeError(
            f"Failed after {config.MAX_RETRIES} retries: {self.endpoint}")
