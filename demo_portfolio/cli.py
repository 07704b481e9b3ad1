"""Command-line interface for the demo portfolio engine."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from .api import DemoApiClient
from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .services import DemoMode, PortfolioOrchestrator, SnapshotStore
from .services.report import (
    build_balances_report,
    build_snapshot_report,
    snapshot_to_dict,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="demo-portfolio",
        description="Demo portfolio aggregation engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    snapshot_parser = sub.add_parser("snapshot", help="Refresh once and print the portfolio")
    snapshot_parser.add_argument(
        "--json", action="store_true", help="Print the snapshot as JSON"
    )

    sub.add_parser("balances", help="Refresh and print wallet balances only")

    watch_parser = sub.add_parser("watch", help="Continuous refresh loop")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Refresh interval in seconds (overrides config)",
    )

    return parser


async def _resolve_demo_mode(config: AppConfig, client: DemoApiClient) -> DemoMode:
    demo_mode = DemoMode()
    if config.portfolio.demo_mode is None:
        await demo_mode.load_from_backend(client)
    else:
        demo_mode.set(config.portfolio.demo_mode)
    return demo_mode


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    client = DemoApiClient(config.api)
    demo_mode = await _resolve_demo_mode(config, client)
    store = SnapshotStore()
    orchestrator = PortfolioOrchestrator(client, store, demo_mode, config.portfolio)

    if not demo_mode.enabled:
        print("Demo mode is disabled; nothing to aggregate.", file=sys.stderr)

    try:
        if args.command == "snapshot":
            await orchestrator.refresh_portfolio()
            if args.json:
                print(json.dumps(snapshot_to_dict(store.snapshot), indent=2))
            else:
                print(build_snapshot_report(store.snapshot))
        elif args.command == "balances":
            await orchestrator.refresh_wallet_balances()
            print(build_balances_report(store.snapshot.wallet_balances))
        elif args.command == "watch":
            store.subscribe(lambda snap: print(build_snapshot_report(snap), flush=True))
            await orchestrator.run_continuous(args.interval)
        else:
            build_parser().print_help()
            return 1
    finally:
        await orchestrator.close()

    if store.error:
        print(f"Error: {store.error}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
