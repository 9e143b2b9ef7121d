"""Command-line entry point for outcome-token ledger analytics."""

import argparse
import logging
import time

import config
from analyzers.leaderboard import (
    build_pnl_leaderboard,
    build_portfolio_leaderboard,
    build_volume_leaderboard,
)
from analyzers.market_metrics import LIQUIDITY_MODES, get_markets_with_metrics
from analyzers.markets import get_all_markets, get_new_markets
from analyzers.wallet import get_wallet_portfolio, get_wallet_positions, normalize_wallet
from collectors.api_client import GraphQLClient
from collectors.balance_reader import BalanceReader
from reporting import charts
from reporting.leaderboard_report import KINDS, PNL, PORTFOLIO, leaderboard_frame, print_leaderboard


def run_portfolio(client, args):
    """Portfolio value of one wallet, cash included."""
    wallet = normalize_wallet(args.wallet)
    reader = None if args.no_cash else BalanceReader()
    portfolio = get_wallet_portfolio(client, wallet, balance_reader=reader, page_size=args.page_size)
    print(f"\nWallet:    {wallet}")
    print(f"Portfolio: ${portfolio:,.2f}")


def run_positions(client, args):
    """Open positions of one wallet, highest value first."""
    wallet = normalize_wallet(args.wallet)
    positions = get_wallet_positions(client, wallet, page_size=args.page_size)
    positions.sort(key=lambda p: p.value, reverse=True)

    print(f"\nWallet: {wallet}  ({len(positions)} positions)")
    active = sum(1 for p in positions if not p.is_resolved)
    print(f"  Active: {active}  Resolved: {len(positions) - active}")
    print(f"  Total value:        ${sum(p.value for p in positions):,.2f}")
    print(f"  Total realized PnL: ${sum(p.realized_pnl for p in positions):+,.2f}")

    for i, p in enumerate(positions, 1):
        if p.is_resolved:
            status = "Winning" if p.is_winning else "Losing"
        else:
            status = "Active"
        market_short = f"{p.market_address[:6]}...{p.market_address[-4:]}"
        print(f"  {i:>3}. {market_short} token={p.token_id:<4} qty={p.quantity:,.4f} "
              f"price={p.current_price:.4f} value=${p.value:,.2f} "
              f"pnl={p.realized_pnl:+,.2f} [{status}]")


def run_leaderboard(client, args):
    """Build, print and optionally chart one leaderboard."""
    if args.kind == PNL:
        board = build_pnl_leaderboard(client, page_size=args.page_size, progress=True)
    elif args.kind == PORTFOLIO:
        reader = None if args.no_cash else BalanceReader()
        board = build_portfolio_leaderboard(client, reader, page_size=args.page_size, progress=True)
    else:
        board = build_volume_leaderboard(client, page_size=args.page_size, progress=True)

    print_leaderboard(board, args.kind, top=args.top)

    if args.chart:
        fig = charts.leaderboard_bar(leaderboard_frame(board, args.kind), args.kind)
        if fig is not None:
            path = charts.write_chart(fig, f"{args.kind}_leaderboard")
            print(f"\nChart written to {path}")


def run_metrics(client, args):
    """Liquidity, supply and payoff for every unresolved market."""
    markets = get_markets_with_metrics(
        client, page_size=args.page_size, liquidity_mode=args.liquidity_mode, progress=True)

    print(f"\n{len(markets)} unresolved markets")
    for m in markets:
        print(f"\n{m.title}  ({m.market_address})")
        print(f"  Liquidity ({m.liquidity_mode}): {m.total_liquidity:,.2f}")
        for t in m.outcome_tokens:
            print(f"    token {t.token_id:<4} price={t.price:.4f} "
                  f"supply={t.total_supply:,.2f} payoff={t.payoff:.3f}")


def run_markets(client, args):
    """Distinct markets on the ledger, optionally only newer ones."""
    if args.since:
        markets = get_new_markets(client, args.since, page_size=args.page_size)
    else:
        markets = get_all_markets(client, page_size=args.page_size)

    print(f"\n{len(markets)} markets")
    for m in markets:
        print(f"  {m.market_address}  {m.block_timestamp or m.created_at or 'Unknown'}  "
              f"{m.question_text or 'N/A'}")


def main():
    parser = argparse.ArgumentParser(description="Outcome-token ledger analytics")
    parser.add_argument("--page-size", type=int, default=config.PAGE_SIZE,
                        help="Rows per GraphQL page")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("portfolio", help="Portfolio value of a wallet")
    p.add_argument("wallet")
    p.add_argument("--no-cash", action="store_true", help="Skip the on-chain cash balance")
    p.set_defaults(func=run_portfolio)

    p = sub.add_parser("positions", help="Open positions of a wallet")
    p.add_argument("wallet")
    p.set_defaults(func=run_positions)

    p = sub.add_parser("leaderboard", help="Global leaderboard")
    p.add_argument("kind", choices=KINDS)
    p.add_argument("--top", type=int, default=None, help="Show only the top N users")
    p.add_argument("--chart", action="store_true", help="Write an HTML bar chart to the output dir")
    p.add_argument("--no-cash", action="store_true", help="Portfolio: skip cash balances")
    p.set_defaults(func=run_leaderboard)

    p = sub.add_parser("metrics", help="Metrics for unresolved markets")
    p.add_argument("--liquidity-mode", choices=LIQUIDITY_MODES, default=config.LIQUIDITY_MODE)
    p.set_defaults(func=run_metrics)

    p = sub.add_parser("markets", help="Distinct markets on the ledger")
    p.add_argument("--since", default=None, help="Only markets newer than this ISO timestamp")
    p.set_defaults(func=run_markets)

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = GraphQLClient()

    start = time.time()
    args.func(client, args)
    print(f"\nCompleted in {time.time() - start:.1f}s")


if __name__ == "__main__":
    main()
