"""Position valuation by market resolution state.

Unresolved markets are marked to market (price × quantity, floats). Resolved
markets are worth only what is still claimable on winning tokens, computed in
raw integer units and converted to human units as the last step:

    gross     = -delta_quantity   (closure at resolution is a negative delta)
    remaining = gross - claimed
    value     = payout_per_unit × remaining / 10**POSITION_DECIMALS
"""

import logging

import config
from analyzers.claims import ClaimReconciler
from storage.models import LatestPosition

logger = logging.getLogger(__name__)


def mark_to_market(position: LatestPosition) -> float:
    """Value of an unresolved position at its latest marginal price."""
    if position.marginal_price is None:
        logger.debug("No price snapshot for %s/%s, valuing at 0",
                     position.market_address, position.token_id)
        return 0.0
    return position.marginal_price * position.quantity


def remaining_entitlement(position: LatestPosition, claims: ClaimReconciler) -> int:
    """Raw units still claimable on a resolved position, clamped at 0."""
    gross = -position.delta_quantity
    claimed = claims.claimed(position.user_address, position.market_address, position.token_id)
    if gross < 0:
        logger.warning(
            "No closing delta on latest row for %s/%s/%s (delta=%d), clamping to 0",
            position.user_address, position.market_address, position.token_id,
            position.delta_quantity)
        return 0
    remaining = gross - claimed
    if remaining < 0:
        logger.warning(
            "Claims exceed entitlement for %s/%s/%s (gross=%d claimed=%d), clamping to 0",
            position.user_address, position.market_address, position.token_id, gross, claimed)
        return 0
    return remaining


def resolved_value(position: LatestPosition, claims: ClaimReconciler,
                   decimals: int = config.POSITION_DECIMALS) -> float:
    """Unclaimed payout of a resolved position; 0 for losing tokens."""
    if not position.is_winning:
        return 0.0

    remaining = remaining_entitlement(position, claims)
    if remaining <= 0:
        return 0.0

    if position.payout is None:
        logger.debug("No payout snapshot for %s/%s, valuing at 0",
                     position.market_address, position.token_id)
        return 0.0
    return position.payout * (remaining / 10 ** decimals)


def value_position(position: LatestPosition, claims: ClaimReconciler,
                   decimals: int = config.POSITION_DECIMALS) -> float:
    """Current value of a latest position given its market's resolution state."""
    if position.is_resolved:
        return resolved_value(position, claims, decimals)
    return mark_to_market(position)
