"""Claim reconciliation: total redeemed quantity per (user, market, token).

Claims are cumulative redemptions, not snapshots, so every claim for a key is
summed. Quantities stay Python ints end to end: they are raw token units that
can exceed what a float represents exactly.
"""

import logging
from typing import Any, Dict, Iterable, Optional

import config
from collectors.paginator import fetch_pages
from storage.models import ClaimRecord

logger = logging.getLogger(__name__)


def build_claim_key(user: str, market: str, token_id: str) -> str:
    """``user-market-token``; addresses and token ids never contain a hyphen."""
    return f"{user.lower()}-{market.lower()}-{token_id}"


def parse_claim(raw: dict) -> ClaimRecord:
    """Convert a market_claim row to a ClaimRecord."""
    return ClaimRecord(
        user_address=raw["user_address"].lower(),
        market_address=raw["market_address"].lower(),
        token_id=str(raw["token_id"]),
        quantity=int(raw["quantity"]),
        block_timestamp=raw.get("block_timestamp") or "",
        collateral=raw.get("collateral"),
        id=raw.get("id"),
    )


class ClaimReconciler:
    """Accumulates claimed raw quantities across pages of claim rows."""

    def __init__(self):
        self.claims: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.claims)

    def add(self, claim: ClaimRecord):
        if claim.quantity <= 0:
            return
        key = build_claim_key(claim.user_address, claim.market_address, claim.token_id)
        self.claims[key] = self.claims.get(key, 0) + claim.quantity

    def add_rows(self, rows: Iterable[dict]):
        for raw in rows:
            self.add(parse_claim(raw))

    def claimed(self, user: str, market: str, token_id: str) -> int:
        return self.claims.get(build_claim_key(user, market, token_id), 0)


def collect_claims(client, document: str, variables: Optional[Dict[str, Any]] = None,
                   page_size: int = config.PAGE_SIZE, progress: bool = False) -> ClaimReconciler:
    """Fetch every claim row of ``document`` and reconcile them."""
    reconciler = ClaimReconciler()
    for page in fetch_pages(client, document, "market_claim", variables, page_size,
                            progress=progress, desc="Fetching claims"):
        reconciler.add_rows(page)
    logger.info("%d claim keys reconciled", len(reconciler))
    return reconciler
