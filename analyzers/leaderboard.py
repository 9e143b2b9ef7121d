"""Global leaderboards: traded volume/quantity, realized PnL, portfolio value.

Each builder is a full re-scan of the ledger. Volume and PnL fill up to three
granularities (user, user/market, user/market/token); portfolio is per user
only, since position value plus cash does not split by market.
"""

import logging
from typing import List, Optional

import requests

import config
from analyzers.aggregation import (
    TOKEN,
    USER,
    Leaderboard,
    add_pnl,
    add_value,
    add_volume,
)
from analyzers.claims import collect_claims
from analyzers.positions import LatestPositionResolver
from analyzers.valuation import value_position
from collectors import queries
from collectors.balance_reader import BalanceReader, to_units
from collectors.paginator import fetch_pages

logger = logging.getLogger(__name__)


def build_volume_leaderboard(
    client,
    page_size: int = config.PAGE_SIZE,
    granularity: str = TOKEN,
    progress: bool = False,
) -> Leaderboard:
    """Cumulative traded volume (|Δcollateral|) and quantity (|Δquantity|) per user.

    Every non-finalise ledger row contributes once to each level it reaches.
    """
    board = Leaderboard(granularity)
    total = 0

    for page in fetch_pages(client, queries.GET_TRADES, "ledger", page_size=page_size,
                            progress=progress, desc="Fetching trades"):
        for raw in page:
            add_volume(
                board,
                raw["user_address"].lower(),
                raw["market_address"].lower(),
                str(raw["token_id"]),
                volume=abs(float(raw.get("delta_collateral_hmr") or 0)),
                quantity=abs(float(raw.get("delta_quantity_hmr") or 0)),
            )
        total += len(page)

    logger.info("Volume leaderboard: %d ledger entries, %d users", total, len(board))
    return board


def build_pnl_leaderboard(
    client,
    page_size: int = config.PAGE_SIZE,
    granularity: str = TOKEN,
    strict: bool = False,
    progress: bool = False,
) -> Leaderboard:
    """Realized PnL per user from each (user, market, token)'s latest ledger row."""
    board = Leaderboard(granularity)
    resolver = LatestPositionResolver(strict=strict)
    pages = fetch_pages(client, queries.GET_LAST_POSITION_PNL, "ledger", page_size=page_size,
                        progress=progress, desc="Fetching latest positions")

    for position in resolver.resolve(pages):
        add_pnl(board, position.user_address, position.market_address,
                position.token_id, position.realized_pnl)

    logger.info("PnL leaderboard: %d positions, %d users", len(resolver), len(board))
    return board


def add_cash_balances(
    board: Leaderboard,
    balance_reader: BalanceReader,
    batch_size: int = config.BALANCE_BATCH_SIZE,
    decimals: int = config.COLLATERAL_DECIMALS,
) -> int:
    """Add each user's settlement-currency balance to their portfolio.

    Read failures degrade to a zero cash contribution for the affected
    addresses. Returns the number of balances added.
    """
    users: List[str] = list(board.user_to_stats)
    added = 0

    for i in range(0, len(users), batch_size):
        batch = users[i:i + batch_size]
        try:
            balances = balance_reader.get_balances(batch)
        except (requests.exceptions.RequestException, RuntimeError, ValueError) as e:
            logger.warning("Balance batch of %d addresses failed (%s), counting 0 cash", len(batch), e)
            continue

        for user in batch:
            raw = balances.get(user)
            if raw is None:
                logger.warning("Failed to fetch cash balance for %s, counting 0", user)
                continue
            add_value(board, user, to_units(raw, decimals))
            added += 1

    return added


def build_portfolio_leaderboard(
    client,
    balance_reader: Optional[BalanceReader] = None,
    page_size: int = config.PAGE_SIZE,
    granularity: str = USER,
    strict: bool = False,
    progress: bool = False,
    balance_batch_size: int = config.BALANCE_BATCH_SIZE,
) -> Leaderboard:
    """Portfolio value per user: unclaimed/marked position value plus cash.

    Without a balance reader only position value is counted.
    """
    if granularity != USER:
        raise ValueError("Portfolio leaderboard only supports per-user granularity")

    board = Leaderboard(USER)
    claims = collect_claims(client, queries.GET_MARKET_CLAIMS, page_size=page_size, progress=progress)

    resolver = LatestPositionResolver(strict=strict)
    pages = fetch_pages(client, queries.GET_LAST_POSITION, "ledger", page_size=page_size,
                        progress=progress, desc="Fetching latest positions")
    for position in resolver.resolve(pages):
        add_value(board, position.user_address, value_position(position, claims))

    logger.info("Portfolio leaderboard: %d positions, %d users", len(resolver), len(board))

    if balance_reader is not None:
        added = add_cash_balances(board, balance_reader, balance_batch_size)
        logger.info("%d cash balances added", added)

    return board
