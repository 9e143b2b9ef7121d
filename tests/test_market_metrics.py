"""Unit tests for unresolved-market metrics."""

import pytest

from analyzers.market_metrics import (
    ABSOLUTE,
    SIGNED,
    get_markets_with_metrics,
    market_liquidity,
    payoff_ratio,
    token_supply,
)
from collectors import queries
from ledger_rows import ALICE, BOB, CAROL, MARKET_A, MARKET_B, position_row


def _liquidity_row(market, delta, event_type="trade"):
    return {"market_address": market, "event_type": event_type, "delta_collateral_hmr": str(delta)}


def _outcome(token_id, price=None):
    stats = [] if price is None else [{"marginal_price_hmr": str(price),
                                       "block_timestamp": "2024-03-01T00:00:00+00:00"}]
    return {"token_id": token_id, "outcome_stats": stats}


@pytest.fixture
def markets(gql):
    gql.serve(queries.GET_UNRESOLVED_MARKETS, "question", [
        {"id": 7, "market_address": MARKET_A, "title": "Will it rain?", "description": "Rain by Friday",
         "outcomes": [_outcome("1", 0.25), _outcome("2", 0.75), _outcome("4")]},
        {"id": 8, "market_address": MARKET_B, "title": None, "description": None, "outcomes": []},
    ])
    gql.serve(queries.GET_MARKET_LIQUIDITY, "ledger", [
        _liquidity_row(MARKET_A, 10.0),
        _liquidity_row(MARKET_A, -4.0),
        _liquidity_row(MARKET_A, 6.0),
        _liquidity_row(MARKET_A, -100.0, event_type="finalise"),
    ], where=lambda row: row["event_type"] != "finalise")
    return gql.serve(queries.GET_MARKET_TOKEN_SUPPLY, "ledger", [
        position_row(ALICE, MARKET_A, "1", quantity=30, ts="2024-03-05T00:00:00+00:00"),
        position_row(ALICE, MARKET_A, "1", quantity=999, ts="2024-03-01T00:00:00+00:00"),
        position_row(BOB, MARKET_A, "1", quantity=10),
        position_row(CAROL, MARKET_A, "1", quantity=0),
        position_row(ALICE, MARKET_A, "2", quantity=40),
    ])


def test_absolute_liquidity_sums_magnitudes(markets) -> None:
    assert market_liquidity(markets, MARKET_A, ABSOLUTE, page_size=2) == pytest.approx(20.0)


def test_signed_liquidity_is_net_inflow(markets) -> None:
    assert market_liquidity(markets, MARKET_A, SIGNED) == pytest.approx(12.0)


def test_unknown_liquidity_mode_is_rejected(markets) -> None:
    with pytest.raises(ValueError):
        market_liquidity(markets, MARKET_A, "gross")
    with pytest.raises(ValueError):
        get_markets_with_metrics(markets, liquidity_mode="gross")


def test_supply_counts_each_users_latest_quantity_once(markets) -> None:
    assert token_supply(markets, MARKET_A, "1", page_size=2) == pytest.approx(40.0)
    assert token_supply(markets, MARKET_A, "2") == pytest.approx(40.0)
    assert token_supply(markets, MARKET_B, "1") == 0


@pytest.mark.parametrize("liquidity,supply,price,expected", [
    (20.0, 40.0, 0.25, 2.0),
    (20.0, 0.0, 0.25, 0.0),
    (20.0, 40.0, 0.0, 0.0),
    (0.0, 40.0, 0.5, 0.0),
])
def test_payoff_ratio(liquidity, supply, price, expected) -> None:
    assert payoff_ratio(liquidity, supply, price) == pytest.approx(expected)


def test_markets_with_metrics(markets) -> None:
    rain, untitled = get_markets_with_metrics(markets, page_size=2, liquidity_mode=ABSOLUTE)

    assert rain.market_address == MARKET_A
    assert rain.question_id == "7"
    assert rain.title == "Will it rain?"
    assert rain.total_liquidity == pytest.approx(20.0)
    assert rain.liquidity_mode == ABSOLUTE

    yes, no, unpriced = rain.outcome_tokens
    assert (yes.token_id, yes.price, yes.total_supply) == ("1", 0.25, 40.0)
    assert yes.payoff == pytest.approx(2.0)
    assert no.payoff == pytest.approx(20.0 / 40.0 / 0.75)
    assert unpriced.price == 0 and unpriced.payoff == 0

    assert untitled.title == "Untitled Market"
    assert untitled.description == ""
    assert untitled.total_liquidity == 0
    assert untitled.outcome_tokens == []


def test_default_liquidity_mode_comes_from_config(markets, monkeypatch) -> None:
    import config
    monkeypatch.setattr(config, "LIQUIDITY_MODE", SIGNED)
    rain, _ = get_markets_with_metrics(markets)
    assert rain.liquidity_mode == SIGNED
    assert rain.total_liquidity == pytest.approx(12.0)


def test_concurrent_and_sequential_runs_agree(markets) -> None:
    concurrent = get_markets_with_metrics(markets, max_workers=4, batch_size=1)
    sequential = get_markets_with_metrics(markets, max_workers=1)
    assert concurrent == sequential
    assert [m.market_address for m in concurrent] == [MARKET_A, MARKET_B]
