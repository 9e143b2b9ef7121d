"""Latest-position resolution over the distinct-latest ledger view.

The query layer owns "distinct on" semantics: pages arrive ordered
(user, market, token, block_timestamp desc), or (market, token,
block_timestamp desc) for one wallet, so the first row of each group is its
newest. The resolver keeps that first row for the whole fetch and never
merges rows across pages. A later row for a group that was already emitted
is dropped; when that row is *newer* the upstream ordering was violated and
the resolver says so (or raises when strict).
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from storage.models import LatestPosition

logger = logging.getLogger(__name__)

GroupKey = Tuple[str, str, str]


class LedgerOrderError(RuntimeError):
    """A newer row arrived for a group whose latest row was already chosen."""


def _to_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _timestamp_key(value) -> pd.Timestamp:
    """Comparable timestamp for epoch numbers and ISO-8601 strings alike."""
    try:
        return pd.Timestamp(float(value), unit="s", tz="UTC")
    except (TypeError, ValueError):
        ts = pd.Timestamp(value)
        if ts is not pd.NaT and ts.tzinfo is None:
            ts = ts.tz_localize("UTC")
        return ts


def latest_outcome_stat(raw: dict) -> dict:
    """Newest outcome_stats snapshot of a ledger row, or {} when absent."""
    stats = (raw.get("outcome") or {}).get("outcome_stats") or []
    return stats[0] if stats else {}


def resolution_answer(raw: dict) -> Optional[int]:
    """Answer bitmask of the row's question, None while unresolved."""
    resolves = (raw.get("question") or {}).get("question_resolves") or []
    if not resolves or resolves[0].get("answer") is None:
        return None
    return int(resolves[0]["answer"])


def parse_position(raw: dict) -> LatestPosition:
    """Convert a distinct-latest ledger row to a LatestPosition."""
    stat = latest_outcome_stat(raw)
    return LatestPosition(
        user_address=(raw.get("user_address") or "").lower(),
        market_address=raw["market_address"].lower(),
        token_id=str(raw["token_id"]),
        quantity=float(raw.get("current_quantity_hmr") or 0),
        delta_quantity=int(raw.get("delta_quantity") or 0),
        realized_pnl=float(raw.get("realized_pnl_hmr") or 0),
        block_timestamp=raw.get("block_timestamp") or "",
        event_type=raw.get("event_type") or "",
        answer=resolution_answer(raw),
        marginal_price=_to_float(stat.get("marginal_price_hmr")),
        payout=_to_float(stat.get("payout_hmr")),
        payout_raw=stat.get("payout_hmr"),
    )


class LatestPositionResolver:
    """Emits one LatestPosition per distinct (user, market, token)."""

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.chosen: Dict[GroupKey, str] = {}  # group -> timestamp of emitted row
        self.dropped = 0

    def __len__(self) -> int:
        return len(self.chosen)

    def _drop(self, key: GroupKey, position: LatestPosition):
        self.dropped += 1
        chosen_ts = self.chosen[key]
        if _timestamp_key(position.block_timestamp) > _timestamp_key(chosen_ts):
            msg = (f"Ledger row for {key} at {position.block_timestamp} is newer than "
                   f"the row already chosen at {chosen_ts}; upstream ordering violated")
            if self.strict:
                raise LedgerOrderError(msg)
            logger.warning(msg)
        else:
            logger.debug("Dropped older ledger row for %s at %s", key, position.block_timestamp)

    def resolve_page(self, rows: Iterable[dict]) -> List[LatestPosition]:
        positions: List[LatestPosition] = []
        for raw in rows:
            position = parse_position(raw)
            key = (position.user_address, position.market_address, position.token_id)
            if key in self.chosen:
                self._drop(key, position)
                continue
            self.chosen[key] = position.block_timestamp
            positions.append(position)
        return positions

    def resolve(self, pages: Iterable[List[dict]]) -> Iterator[LatestPosition]:
        """Resolve page by page, folding each page before the next is fetched."""
        for page in pages:
            yield from self.resolve_page(page)
