"""Settlement-currency balance reads: ERC-20 ``balanceOf`` over JSON-RPC.

Single reads go through ``eth_call``; leaderboard-sized reads are sent as one
JSON-RPC batch per ``config.BALANCE_BATCH_SIZE`` addresses. Balances come back
as raw integers scaled by ``config.COLLATERAL_DECIMALS``.
"""

import threading
import time
from typing import Dict, List, Optional

import requests

import config

# keccak256("balanceOf(address)")[:4]
BALANCE_OF_SELECTOR = "0x70a08231"


def _hex_to_int(h: str) -> int:
    """Convert hex string (with or without 0x) to int."""
    if not isinstance(h, str):
        raise ValueError(f"Expected a hex string, got {h!r}")
    if not h or h == "0x":
        return 0
    return int(h, 16)


def _pad_address(addr: str) -> str:
    """Left-pad a 20-byte address to a 32-byte ABI word (no 0x prefix)."""
    addr = addr.lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    return addr.zfill(64)


def encode_balance_of(address: str) -> str:
    """Calldata for ``balanceOf(address)``."""
    return BALANCE_OF_SELECTOR + _pad_address(address)


def to_units(raw: int, decimals: int) -> float:
    """Scale a raw integer amount down to human units."""
    return raw / (10 ** decimals)


class BalanceReader:
    """Minimal JSON-RPC client with token-bucket rate limiting and retry."""

    def __init__(
        self,
        url: str = config.RPC_URL,
        token_address: str = config.COLLATERAL_ADDRESS,
        rps: float = config.RPC_RATE_LIMIT,
        burst: int = config.RPC_BURST,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.token_address = token_address
        self.rps = rps
        self.burst = burst
        self.tokens = float(burst)
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
        })
        self._req_id = 0

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

    def _next_id(self) -> int:
        self._req_id += 1
        return self._req_id

    def _post(self, payload):
        """POST a JSON-RPC payload (single or batch) with retry and backoff."""
        last_exception = None
        for attempt in range(config.RPC_MAX_RETRIES):
            self._wait_for_token()
            try:
                resp = self.session.post(self.url, json=payload, timeout=config.REQUEST_TIMEOUT)

                if resp.status_code == 429:
                    wait = config.BACKOFF_BASE * (config.BACKOFF_FACTOR ** attempt)
                    time.sleep(wait)
                    continue

                resp.raise_for_status()
                return resp.json()

            except requests.exceptions.RequestException as e:
                last_exception = e
                wait = config.BACKOFF_BASE * (config.BACKOFF_FACTOR ** attempt)
                time.sleep(wait)
                continue

        raise last_exception or RuntimeError(
            f"RPC call failed after {config.RPC_MAX_RETRIES} retries")

    def _balance_call(self, address: str) -> dict:
        return {
            "jsonrpc": "2.0",
            "method": "eth_call",
            "params": [
                {"to": self.token_address, "data": encode_balance_of(address)},
                "latest",
            ],
            "id": self._next_id(),
        }

    def get_balance(self, address: str) -> int:
        """Raw settlement-currency balance of one address."""
        data = self._post(self._balance_call(address))
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected RPC response: {data!r}")
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return _hex_to_int(data.get("result") or "0x")

    def get_balances(self, addresses: List[str]) -> Dict[str, Optional[int]]:
        """Raw balances for many addresses as one JSON-RPC batch.

        Addresses whose individual call errored or came back malformed map
        to None; a failure of the whole batch raises.
        """
        if not addresses:
            return {}

        calls = [self._balance_call(address) for address in addresses]
        id_to_address = {call["id"]: address for call, address in zip(calls, addresses)}

        data = self._post(calls)
        if not isinstance(data, list):
            raise RuntimeError(f"RPC batch error: {data}")

        balances: Dict[str, Optional[int]] = {address: None for address in addresses}
        for item in data:
            if not isinstance(item, dict):
                continue
            address = id_to_address.get(item.get("id"))
            if address is None or "error" in item:
                continue
            try:
                balances[address] = _hex_to_int(item.get("result") or "0x")
            except ValueError:
                continue
        return balances
