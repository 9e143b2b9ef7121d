"""Per-market metrics for unresolved markets: liquidity, token supply, payoff.

Liquidity has two named interpretations and one is applied per run:

* ``absolute``: Σ|Δcollateral| over non-finalise rows (turnover, ≥ 0)
* ``signed``:   ΣΔcollateral over non-finalise rows (net capital inflow)

Markets are independent, so they are computed concurrently in bounded
batches. Each market's own paginated fetches stay sequential and build only
local state.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from tqdm import tqdm

import config
from analyzers.positions import LatestPositionResolver
from collectors import queries
from collectors.paginator import fetch_all, fetch_pages
from storage.models import MarketMetrics, OutcomeTokenMetrics

logger = logging.getLogger(__name__)

ABSOLUTE = "absolute"
SIGNED = "signed"
LIQUIDITY_MODES = (ABSOLUTE, SIGNED)


def check_liquidity_mode(mode: str) -> str:
    if mode not in LIQUIDITY_MODES:
        raise ValueError(f"Unknown liquidity mode {mode!r}, expected one of {LIQUIDITY_MODES}")
    return mode


def market_liquidity(client, market_address: str, mode: str = ABSOLUTE,
                     page_size: int = config.PAGE_SIZE) -> float:
    """Sum of collateral deltas over the market's non-finalise ledger rows."""
    check_liquidity_mode(mode)
    total = 0.0
    for page in fetch_pages(client, queries.GET_MARKET_LIQUIDITY, "ledger",
                            {"marketAddress": market_address}, page_size):
        for raw in page:
            delta = float(raw.get("delta_collateral_hmr") or 0)
            total += abs(delta) if mode == ABSOLUTE else delta
    return total


def token_supply(client, market_address: str, token_id: str,
                 page_size: int = config.PAGE_SIZE) -> float:
    """Outstanding supply: Σ over users of their latest held quantity."""
    resolver = LatestPositionResolver()
    pages = fetch_pages(client, queries.GET_MARKET_TOKEN_SUPPLY, "ledger",
                        {"marketAddress": market_address, "tokenId": token_id}, page_size)
    scoped = (
        [dict(raw, market_address=market_address, token_id=token_id) for raw in page]
        for page in pages
    )
    return sum(position.quantity for position in resolver.resolve(scoped))


def payoff_ratio(liquidity: float, supply: float, price: float) -> float:
    """(liquidity ÷ supply) ÷ price, or 0 unless supply and price are positive."""
    if supply > 0 and price > 0:
        return (liquidity / supply) / price
    return 0.0


def build_market_metrics(client, question: dict, mode: str = ABSOLUTE,
                         page_size: int = config.PAGE_SIZE) -> MarketMetrics:
    """Metrics of one unresolved question/market row."""
    market_address = question["market_address"]
    liquidity = market_liquidity(client, market_address, mode, page_size)

    outcome_tokens: List[OutcomeTokenMetrics] = []
    for outcome in question.get("outcomes") or []:
        stats = outcome.get("outcome_stats") or []
        price = float((stats[0].get("marginal_price_hmr") if stats else None) or 0)
        token_id = str(outcome["token_id"])
        supply = token_supply(client, market_address, token_id, page_size)

        outcome_tokens.append(OutcomeTokenMetrics(
            token_id=token_id,
            price=price,
            total_supply=supply,
            market_address=market_address,
            payoff=payoff_ratio(liquidity, supply, price),
        ))

    return MarketMetrics(
        market_address=market_address,
        question_id=str(question.get("id", "")),
        title=question.get("title") or "Untitled Market",
        description=question.get("description") or "",
        total_liquidity=liquidity,
        liquidity_mode=mode,
        outcome_tokens=outcome_tokens,
    )


def get_markets_with_metrics(
    client,
    page_size: int = config.PAGE_SIZE,
    liquidity_mode: Optional[str] = None,
    max_workers: int = config.METRICS_MAX_WORKERS,
    batch_size: int = config.METRICS_BATCH_SIZE,
    progress: bool = False,
) -> List[MarketMetrics]:
    """Liquidity, prices and supply for every unresolved market, in catalog order."""
    mode = check_liquidity_mode(liquidity_mode or config.LIQUIDITY_MODE)
    questions = fetch_all(client, queries.GET_UNRESOLVED_MARKETS, "question", page_size=page_size)
    logger.info("%d unresolved markets, liquidity mode %s", len(questions), mode)

    def _build(question: dict) -> MarketMetrics:
        return build_market_metrics(client, question, mode, page_size)

    batches = [questions[i:i + batch_size] for i in range(0, len(questions), batch_size)]
    markets: List[MarketMetrics] = []

    for batch in tqdm(batches, desc="Market metrics", unit=" batch", disable=not progress):
        if max_workers <= 1:
            markets.extend(_build(q) for q in batch)
            continue
        with ThreadPoolExecutor(max_workers=min(max_workers, len(batch))) as executor:
            markets.extend(executor.map(_build, batch))

    return markets
