"""Three-level leaderboard structures: user → market → token.

Which leaf rule applies depends on the report:

* PnL:       user and user/market levels accumulate; the token level is
             overwritten, since each (user, market, token) appears once.
* Volume:    (volume, quantity) pairs accumulate at every level, one
             contribution per ledger row.
* Portfolio: user level only.

Keys are lower-cased addresses. Human-unit values are plain float sums.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, NamedTuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")

USER = "user"
MARKET = "market"
TOKEN = "token"
GRANULARITIES = (USER, MARKET, TOKEN)


def get_or_create(mapping: Dict[K, V], key: K, default_factory: Callable[[], V]) -> V:
    """Return ``mapping[key]``, inserting ``default_factory()`` first if missing."""
    if key not in mapping:
        mapping[key] = default_factory()
    return mapping[key]


def granularity_depth(granularity: str) -> int:
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity {granularity!r}, expected one of {GRANULARITIES}")
    return GRANULARITIES.index(granularity) + 1


class VolumeQuantity(NamedTuple):
    volume: float
    quantity: float


ZERO_VOLUME_QUANTITY = VolumeQuantity(0.0, 0.0)


def _plus(a: VolumeQuantity, b: VolumeQuantity) -> VolumeQuantity:
    return VolumeQuantity(a.volume + b.volume, a.quantity + b.quantity)


@dataclass
class Leaderboard:
    granularity: str = TOKEN
    user_to_stats: Dict[str, object] = field(default_factory=dict)
    user_to_market_to_stats: Dict[str, Dict[str, object]] = field(default_factory=dict)
    user_to_market_to_token_to_stats: Dict[str, Dict[str, Dict[str, object]]] = field(default_factory=dict)

    def __post_init__(self):
        self.depth = granularity_depth(self.granularity)

    def __len__(self) -> int:
        return len(self.user_to_stats)

    def market_stats(self, user: str) -> Dict[str, object]:
        return get_or_create(self.user_to_market_to_stats, user, dict)

    def token_stats(self, user: str, market: str) -> Dict[str, object]:
        market_to_token = get_or_create(self.user_to_market_to_token_to_stats, user, dict)
        return get_or_create(market_to_token, market, dict)


# --- PnL ---

def add_pnl(board: Leaderboard, user: str, market: str, token_id: str, pnl: float):
    board.user_to_stats[user] = board.user_to_stats.get(user, 0.0) + pnl

    if board.depth >= 2:
        market_to_stats = board.market_stats(user)
        market_to_stats[market] = market_to_stats.get(market, 0.0) + pnl

    if board.depth >= 3:
        board.token_stats(user, market)[token_id] = pnl


# --- Volume / quantity ---

def add_volume(board: Leaderboard, user: str, market: str, token_id: str,
               volume: float, quantity: float):
    amount = VolumeQuantity(volume, quantity)
    board.user_to_stats[user] = _plus(board.user_to_stats.get(user, ZERO_VOLUME_QUANTITY), amount)

    if board.depth >= 2:
        market_to_stats = board.market_stats(user)
        market_to_stats[market] = _plus(market_to_stats.get(market, ZERO_VOLUME_QUANTITY), amount)

    if board.depth >= 3:
        token_to_stats = board.token_stats(user, market)
        token_to_stats[token_id] = _plus(token_to_stats.get(token_id, ZERO_VOLUME_QUANTITY), amount)


# --- Portfolio ---

def add_value(board: Leaderboard, user: str, value: float):
    board.user_to_stats[user] = board.user_to_stats.get(user, 0.0) + value
