"""Leaderboard ranking tables and console summaries."""

from typing import Optional

import pandas as pd

from analyzers.aggregation import Leaderboard

VOLUME = "volume"
PNL = "pnl"
PORTFOLIO = "portfolio"
KINDS = (VOLUME, PNL, PORTFOLIO)


def leaderboard_frame(board: Leaderboard, kind: str) -> pd.DataFrame:
    """Per-user ranking, best first.

    Volume boards rank by cumulative quantity and carry both columns;
    PnL and portfolio boards carry one ``value`` column.
    """
    if kind == VOLUME:
        df = pd.DataFrame(
            [(user, vq.volume, vq.quantity) for user, vq in board.user_to_stats.items()],
            columns=["user", "volume", "quantity"],
        )
        sort_col = "quantity"
    else:
        df = pd.DataFrame(list(board.user_to_stats.items()), columns=["user", "value"])
        sort_col = "value"

    df = df.sort_values([sort_col, "user"], ascending=[False, True], kind="mergesort")
    df = df.reset_index(drop=True)
    df.index = df.index + 1
    df.index.name = "rank"
    return df


def market_breakdown_frame(board: Leaderboard, user: str) -> pd.DataFrame:
    """Per-market values of one user, best first (PnL boards)."""
    markets = board.user_to_market_to_stats.get(user, {})
    df = pd.DataFrame(list(markets.items()), columns=["market", "value"])
    return df.sort_values("value", ascending=False, kind="mergesort").reset_index(drop=True)


def summarize(board: Leaderboard, kind: str) -> dict:
    df = leaderboard_frame(board, kind)
    summary = {"users": len(df)}
    if kind == VOLUME:
        summary["total_volume"] = float(df["volume"].sum()) if len(df) else 0.0
        summary["total_quantity"] = float(df["quantity"].sum()) if len(df) else 0.0
        return summary

    values = df["value"]
    summary["total"] = float(values.sum()) if len(df) else 0.0
    summary["positive"] = int((values > 0).sum())
    summary["negative"] = int((values < 0).sum())
    return summary


def print_leaderboard(board: Leaderboard, kind: str, top: Optional[int] = None):
    """Print summary stats and the ranked table (and top trader's markets for PnL)."""
    df = leaderboard_frame(board, kind)
    summary = summarize(board, kind)

    print("\n" + "=" * 60)
    print(f"{kind.upper()} LEADERBOARD")
    print("=" * 60)
    print(f"  Total unique users: {summary['users']:,}")
    if kind == VOLUME:
        print(f"  Total volume:       {summary['total_volume']:,.2f}")
        print(f"  Total quantity:     {summary['total_quantity']:,.2f}")
    elif kind == PNL:
        print(f"  Total PnL:          {summary['total']:+,.2f}")
        print(f"  Positive PnL users: {summary['positive']:,}")
        print(f"  Negative PnL users: {summary['negative']:,}")
    else:
        print(f"  Total portfolio:    {summary['total']:,.2f}")
        print(f"  Users with value:   {summary['positive']:,}")

    shown = df if top is None else df.head(top)
    if shown.empty:
        print("\n  (no entries)")
        return
    print()
    print(shown.to_string(float_format=lambda v: f"{v:,.2f}"))

    if kind == PNL and board.depth >= 2:
        top_user = df.iloc[0]["user"]
        breakdown = market_breakdown_frame(board, top_user)
        if not breakdown.empty:
            print(f"\n--- Market breakdown for top trader {top_user} ---")
            print(breakdown.to_string(index=False, float_format=lambda v: f"{v:+,.2f}"))
