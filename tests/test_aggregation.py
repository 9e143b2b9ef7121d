"""Unit tests for leaderboard aggregation structures."""

import pytest

from analyzers.aggregation import (
    MARKET,
    TOKEN,
    USER,
    Leaderboard,
    VolumeQuantity,
    add_pnl,
    add_value,
    add_volume,
    get_or_create,
)


def test_get_or_create_inserts_once() -> None:
    mapping = {}
    first = get_or_create(mapping, "k", dict)
    first["x"] = 1
    assert get_or_create(mapping, "k", dict) is first
    assert mapping == {"k": {"x": 1}}


def test_pnl_token_level_overwrites_while_upper_levels_accumulate() -> None:
    board = Leaderboard(TOKEN)
    add_pnl(board, "u", "m", "1", 5.0)
    add_pnl(board, "u", "m", "1", 2.0)
    assert board.user_to_stats["u"] == 7.0
    assert board.user_to_market_to_stats["u"]["m"] == 7.0
    assert board.user_to_market_to_token_to_stats["u"]["m"]["1"] == 2.0


def test_volume_accumulates_at_every_level() -> None:
    board = Leaderboard(TOKEN)
    add_volume(board, "u", "m", "1", volume=10.0, quantity=20.0)
    add_volume(board, "u", "m", "1", volume=1.5, quantity=3.0)
    add_volume(board, "u", "m", "2", volume=2.0, quantity=4.0)
    assert board.user_to_stats["u"] == VolumeQuantity(13.5, 27.0)
    assert board.user_to_market_to_stats["u"]["m"] == VolumeQuantity(13.5, 27.0)
    assert board.user_to_market_to_token_to_stats["u"]["m"]["1"] == VolumeQuantity(11.5, 23.0)
    assert board.user_to_market_to_token_to_stats["u"]["m"]["2"] == VolumeQuantity(2.0, 4.0)


def test_user_granularity_fills_only_user_level() -> None:
    board = Leaderboard(USER)
    add_pnl(board, "u", "m", "1", 1.0)
    assert board.user_to_stats == {"u": 1.0}
    assert board.user_to_market_to_stats == {}
    assert board.user_to_market_to_token_to_stats == {}


def test_market_granularity_stops_above_tokens() -> None:
    board = Leaderboard(MARKET)
    add_volume(board, "u", "m", "1", 1.0, 2.0)
    assert board.user_to_market_to_stats == {"u": {"m": VolumeQuantity(1.0, 2.0)}}
    assert board.user_to_market_to_token_to_stats == {}


def test_unknown_granularity_is_rejected() -> None:
    with pytest.raises(ValueError):
        Leaderboard("week")


def test_user_totals_equal_sum_of_market_entries() -> None:
    board = Leaderboard(TOKEN)
    contributions = [
        ("u1", "m1", "1", 1.25), ("u1", "m1", "2", -0.5), ("u1", "m2", "1", 3.0),
        ("u2", "m1", "1", -2.0), ("u2", "m3", "4", 0.75),
    ]
    for user, market, token, pnl in contributions:
        add_pnl(board, user, market, token, pnl)
    for user, total in board.user_to_stats.items():
        assert total == pytest.approx(sum(board.user_to_market_to_stats[user].values()))


def test_add_value_accumulates_per_user() -> None:
    board = Leaderboard(USER)
    add_value(board, "u", 1.5)
    add_value(board, "u", 2.0)
    add_value(board, "v", 0.0)
    assert board.user_to_stats == {"u": 3.5, "v": 0.0}
    assert len(board) == 2
