"""Data models for outcome-token ledger analytics."""

from dataclasses import dataclass, field
from typing import List, Optional


def is_winning_token(token_id: str, answer: int) -> bool:
    """A token wins when its bitmask intersects the answer bitmask."""
    return (int(token_id) & int(answer)) != 0


@dataclass
class ClaimRecord:
    user_address: str
    market_address: str
    token_id: str  # outcome bitmask as decimal string
    quantity: int  # raw units, exact
    block_timestamp: str = ""
    collateral: Optional[str] = None
    id: Optional[str] = None


@dataclass
class LatestPosition:
    """Newest ledger row of one (user, market, token) group."""
    user_address: str
    market_address: str
    token_id: str
    quantity: float  # current_quantity_hmr, human units
    delta_quantity: int  # raw signed delta of the newest event
    realized_pnl: float
    block_timestamp: str = ""
    event_type: str = ""
    answer: Optional[int] = None  # resolution bitmask, None while unresolved
    marginal_price: Optional[float] = None
    payout: Optional[float] = None  # payout per unit, resolved markets only
    payout_raw: Optional[str] = None  # payout_hmr exactly as served

    @property
    def is_resolved(self) -> bool:
        return self.answer is not None

    @property
    def is_winning(self) -> bool:
        return self.is_resolved and is_winning_token(self.token_id, self.answer)


@dataclass
class WalletPosition:
    """One row of the single-wallet positions view."""
    market_address: str
    token_id: str
    quantity: float
    current_price: float
    value: float  # current_price * quantity
    realized_pnl: float
    block_timestamp: str
    event_type: str
    is_resolved: bool
    is_winning: bool
    payout_hmr: Optional[str] = None


@dataclass
class OutcomeTokenMetrics:
    token_id: str
    price: float
    total_supply: float
    market_address: str
    payoff: float = 0.0  # (liquidity / supply) / price


@dataclass
class MarketMetrics:
    market_address: str
    question_id: str
    title: str
    description: str
    total_liquidity: float
    liquidity_mode: str
    outcome_tokens: List[OutcomeTokenMetrics] = field(default_factory=list)


@dataclass
class MarketInfo:
    market_address: str
    block_timestamp: Optional[str] = None
    created_at: Optional[str] = None
    question_text: Optional[str] = None
