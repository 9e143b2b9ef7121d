"""Single-wallet portfolio value and position list."""

import logging
import re
from typing import List, Optional

import requests

import config
from analyzers.claims import collect_claims
from analyzers.positions import LatestPositionResolver
from analyzers.valuation import value_position
from collectors import queries
from collectors.balance_reader import BalanceReader, to_units
from collectors.paginator import fetch_pages
from storage.models import WalletPosition

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def normalize_wallet(address: str) -> str:
    """Validate an EVM address and lower-case it for ledger comparisons."""
    if not isinstance(address, str) or not ADDRESS_RE.match(address):
        raise ValueError(f"Invalid wallet address format: {address!r}")
    return address.lower()


def get_wallet_portfolio(
    client,
    wallet: str,
    balance_reader: Optional[BalanceReader] = None,
    page_size: int = config.PAGE_SIZE,
    strict: bool = False,
) -> float:
    """Portfolio value of one wallet.

    Sum of (a) unclaimed payout on resolved winning positions, (b) marked
    value of unresolved positions and (c) settlement-currency cash. A failed
    cash read counts as zero cash; a failed ledger or claim fetch raises.
    """
    wallet = normalize_wallet(wallet)
    variables = {"userAddress": wallet}

    claims = collect_claims(client, queries.GET_MARKET_CLAIMS_BY_WALLET, variables, page_size)

    portfolio = 0.0
    resolver = LatestPositionResolver(strict=strict)
    pages = fetch_pages(client, queries.GET_LAST_POSITION_BY_WALLET, "ledger", variables, page_size)
    for position in resolver.resolve(pages):
        portfolio += value_position(position, claims)

    logger.info("Wallet %s: %d positions valued at %.2f", wallet, len(resolver), portfolio)

    if balance_reader is not None:
        try:
            raw = balance_reader.get_balance(wallet)
        except (requests.exceptions.RequestException, RuntimeError, ValueError) as e:
            logger.warning("Failed to fetch cash balance for %s: %s", wallet, e)
        else:
            portfolio += to_units(raw, config.COLLATERAL_DECIMALS)

    return portfolio


def get_wallet_positions(
    client,
    wallet: str,
    page_size: int = config.PAGE_SIZE,
    strict: bool = False,
) -> List[WalletPosition]:
    """Non-zero-quantity latest positions of one wallet, for detail display.

    ``value`` is the latest marginal price times quantity, whatever the
    market's resolution state.
    """
    wallet = normalize_wallet(wallet)
    positions: List[WalletPosition] = []

    resolver = LatestPositionResolver(strict=strict)
    pages = fetch_pages(client, queries.GET_LAST_POSITION_BY_WALLET, "ledger",
                        {"userAddress": wallet}, page_size)
    for position in resolver.resolve(pages):
        if position.quantity == 0:
            continue
        price = position.marginal_price or 0.0
        positions.append(WalletPosition(
            market_address=position.market_address,
            token_id=position.token_id,
            quantity=position.quantity,
            current_price=price,
            value=price * position.quantity,
            realized_pnl=position.realized_pnl,
            block_timestamp=position.block_timestamp,
            event_type=position.event_type,
            is_resolved=position.is_resolved,
            is_winning=position.is_winning,
            payout_hmr=position.payout_raw,
        ))

    return positions
