#!/usr/bin/env python3
"""
Launchpad Events & Trading - Entry Point
========================================

Watch decoded program events, or trade against a launchpad pool.

Usage:
    # Stream all events
    python main.py watch

    # Only trades and phase changes
    python main.py watch --kinds TRADE PHASE_CHANGE

    # Buy with 0.1 SOL / sell 25k tokens (PRIVATE_KEY from env)
    python main.py buy <MINT> 0.1
    python main.py sell <MINT> 25000

    # Wallet balances
    python main.py balance [<MINT>]
"""
import asyncio
import argparse
import logging
import os
import signal
import sys

from launchpad.config import LaunchpadConfig
from launchpad.errors import ConfigError, LaunchpadError
from launchpad.events.stream import EventStream, LogSubscription
from launchpad.execution.trader import TokenTrader
from launchpad.execution.wallet import load_keypair
from launchpad.models import EventEnvelope, EventKind, TradeSide

logger = logging.getLogger("launchpad")


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def format_event(event: EventEnvelope) -> str:
    """One console line per event."""
    p = event.payload
    if event.kind is EventKind.POOL_CREATED:
        return (
            f"POOL   {p.symbol:10} ({p.name}) | mint {p.mint} | "
            f"mcap {p.market_cap_sol:.2f} SOL | price {p.price_per_token:.10f} SOL"
        )
    if event.kind is EventKind.TRADE:
        return (
            f"{p.side.value:6} {p.sol_amount_ui:.4f} SOL for {p.token_amount_ui:,.0f} tokens | "
            f"{p.phase.value} | mcap {p.market_cap_sol:.2f} SOL | price {p.price_per_token:.10f} SOL"
        )
    if event.kind is EventKind.PHASE_CHANGE:
        return (
            f"PHASE  {p.old_phase.value} -> {p.new_phase.value} | mint {p.mint} | "
            f"threshold {p.threshold_sol:.2f} SOL"
        )
    return f"OTHER  discriminant {p.discriminant} ({len(p.raw)} bytes)"


async def watch(config: LaunchpadConfig, kinds):
    stream = EventStream(config)
    subscription = LogSubscription(config)

    def print_event(event: EventEnvelope):
        print(f"[{event.slot}] {format_event(event)}  {event.signature}")

    if kinds:
        for kind in kinds:
            stream.on(EventKind[kind], print_event)
    else:
        stream.on_all(print_event)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda: asyncio.ensure_future(stream.stop()))
        except NotImplementedError:
            pass

    print(f"\nWatching program {config.program_id} via {config.ws_url}\n")
    await stream.run(subscription)
    print(f"\nStats: {stream.get_stats()}")


async def trade(config: LaunchpadConfig, side: TradeSide, mint: str, amount: float):
    trader = TokenTrader(load_keypair(require_env("PRIVATE_KEY")), config)
    try:
        print(f"Wallet: {trader.wallet}")
        print(f"SOL Balance: {await trader.get_sol_balance()} SOL")
        print(f"Token Balance: {await trader.get_token_balance(mint)}\n")

        result = await trader.submit(mint, side, amount)
        if side is TradeSide.BUY:
            print(f"\nBought tokens for {amount} SOL")
        else:
            print(f"\nSold {amount} tokens")
        print(f"Signature: {result.signature}")
    finally:
        await trader.close()


async def balance(config: LaunchpadConfig, mint):
    trader = TokenTrader(load_keypair(require_env("PRIVATE_KEY")), config)
    try:
        print(f"Wallet: {trader.wallet}")
        print(f"SOL Balance: {await trader.get_sol_balance()} SOL")
        if mint:
            print(f"Token Balance: {await trader.get_token_balance(mint)}")
    finally:
        await trader.close()


def require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ConfigError(f"{name} environment variable required")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Launchpad event decoder and trader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py watch --kinds TRADE
  python main.py buy <MINT> 0.1
  python main.py sell <MINT> 25000
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_watch = sub.add_parser("watch", help="Stream decoded program events")
    p_watch.add_argument(
        "--kinds",
        nargs="+",
        choices=[k.name for k in EventKind if k is not EventKind.UNRECOGNIZED],
        help="Only print these event kinds",
    )

    for name, unit in (("buy", "SOL to spend"), ("sell", "tokens to sell")):
        p = sub.add_parser(name, help=f"{name.capitalize()} on the pool")
        p.add_argument("mint", nargs="?", default=os.environ.get("MINT_ADDRESS"), help="Token mint address")
        p.add_argument("amount", type=float, help=f"Amount of {unit}")

    p_balance = sub.add_parser("balance", help="Show wallet balances")
    p_balance.add_argument("mint", nargs="?", default=os.environ.get("MINT_ADDRESS"))
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = LaunchpadConfig.from_env()
        if args.command == "watch":
            asyncio.run(watch(config, args.kinds))
        elif args.command == "balance":
            asyncio.run(balance(config, args.mint))
        else:
            if not args.mint:
                raise ConfigError("MINT_ADDRESS environment variable or mint argument required")
            side = TradeSide.BUY if args.command == "buy" else TradeSide.SELL
            asyncio.run(trade(config, side, args.mint, args.amount))
    except LaunchpadError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
