"""Unit tests for leaderboard tables, console output and charts."""

import os

import pytest

from analyzers.aggregation import TOKEN, USER, Leaderboard, add_pnl, add_value, add_volume
from reporting.charts import leaderboard_bar, write_chart
from reporting.leaderboard_report import (
    PNL,
    PORTFOLIO,
    VOLUME,
    leaderboard_frame,
    market_breakdown_frame,
    print_leaderboard,
    summarize,
)


@pytest.fixture
def pnl_board() -> Leaderboard:
    board = Leaderboard(TOKEN)
    add_pnl(board, "0xbob", "0xm1", "1", -3.0)
    add_pnl(board, "0xalice", "0xm1", "1", 4.0)
    add_pnl(board, "0xalice", "0xm2", "2", 1.0)
    add_pnl(board, "0xcarol", "0xm2", "1", 5.0)
    return board


@pytest.fixture
def volume_board() -> Leaderboard:
    board = Leaderboard(USER)
    add_volume(board, "0xalice", "0xm1", "1", volume=10.0, quantity=20.0)
    add_volume(board, "0xbob", "0xm1", "1", volume=50.0, quantity=5.0)
    return board


def test_pnl_frame_ranks_best_first_with_stable_ties(pnl_board) -> None:
    df = leaderboard_frame(pnl_board, PNL)
    assert list(df["user"]) == ["0xalice", "0xcarol", "0xbob"]
    assert list(df.index) == [1, 2, 3]
    assert df.index.name == "rank"


def test_volume_frame_ranks_by_quantity(volume_board) -> None:
    df = leaderboard_frame(volume_board, VOLUME)
    assert list(df["user"]) == ["0xalice", "0xbob"]
    assert list(df.columns) == ["user", "volume", "quantity"]


def test_market_breakdown_of_one_user(pnl_board) -> None:
    df = market_breakdown_frame(pnl_board, "0xalice")
    assert list(df["market"]) == ["0xm1", "0xm2"]
    assert market_breakdown_frame(pnl_board, "0xnobody").empty


def test_summaries(pnl_board, volume_board) -> None:
    assert summarize(pnl_board, PNL) == {"users": 3, "total": 7.0, "positive": 2, "negative": 1}
    assert summarize(volume_board, VOLUME) == {"users": 2, "total_volume": 60.0, "total_quantity": 25.0}
    assert summarize(Leaderboard(USER), PORTFOLIO) == {"users": 0, "total": 0.0, "positive": 0, "negative": 0}


def test_print_pnl_leaderboard_includes_top_trader_markets(pnl_board, capsys) -> None:
    print_leaderboard(pnl_board, PNL, top=2)
    out = capsys.readouterr().out
    assert "PNL LEADERBOARD" in out
    assert "Total unique users: 3" in out
    assert "0xbob" not in out.split("Market breakdown")[0]
    assert "Market breakdown for top trader 0xalice" in out


def test_print_empty_leaderboard(capsys) -> None:
    print_leaderboard(Leaderboard(USER), PORTFOLIO)
    assert "(no entries)" in capsys.readouterr().out


def test_chart_colours_follow_sign(pnl_board) -> None:
    fig = leaderboard_bar(leaderboard_frame(pnl_board, PNL), PNL)
    bar = fig.data[0]
    assert list(bar.y) == [5.0, 5.0, -3.0]
    assert bar.marker.color[-1] != bar.marker.color[0]


def test_empty_frame_has_no_chart() -> None:
    board = Leaderboard(USER)
    assert leaderboard_bar(leaderboard_frame(board, PORTFOLIO), PORTFOLIO) is None


def test_write_chart(tmp_path) -> None:
    board = Leaderboard(USER)
    add_value(board, "0x" + "a1" * 20, 12.5)
    fig = leaderboard_bar(leaderboard_frame(board, PORTFOLIO), PORTFOLIO)
    path = write_chart(fig, "portfolio_leaderboard", str(tmp_path))
    assert path == os.path.join(str(tmp_path), "portfolio_leaderboard.html")
    with open(path) as f:
        assert "<html>" in f.read()
