"""Market catalog: every distinct market seen on the ledger."""

from typing import List, Set

import config
from collectors import queries
from collectors.paginator import fetch_pages
from storage.models import MarketInfo


def _parse_market(raw: dict) -> MarketInfo:
    question = raw.get("question") or {}
    return MarketInfo(
        market_address=raw["market_address"],
        block_timestamp=raw.get("block_timestamp"),
        created_at=question.get("created_at"),
        question_text=question.get("question_text"),
    )


def get_all_markets(client, page_size: int = config.PAGE_SIZE) -> List[MarketInfo]:
    """Distinct markets with their newest ledger timestamp and question text.

    ``distinct_on`` already yields one row per market; addresses are also
    deduplicated case-insensitively here.
    """
    markets: List[MarketInfo] = []
    seen: Set[str] = set()

    for page in fetch_pages(client, queries.GET_ALL_MARKETS, "ledger", page_size=page_size):
        for raw in page:
            key = raw["market_address"].lower()
            if key in seen:
                continue
            seen.add(key)
            markets.append(_parse_market(raw))

    return markets


def get_new_markets(client, after_timestamp: str,
                    page_size: int = config.PAGE_SIZE) -> List[MarketInfo]:
    """Markets whose timestamp (ledger, else question creation) sorts after ``after_timestamp``.

    Timestamps are compared as ISO-8601 strings.
    """
    new_markets = []
    for market in get_all_markets(client, page_size):
        market_time = market.block_timestamp or market.created_at
        if market_time and market_time > after_timestamp:
            new_markets.append(market)
    return new_markets
