from __future__ import annotations

"""
Command-line quoting and swapping against the hub pools.

Usage (from repo root, with .env holding SWAP_* settings and PRIVATE_KEY):

    python scripts/swap_cli.py pools
    python scripts/swap_cli.py quote tTRUST ORACLE 1.5 --slippage 0.5
    python scripts/swap_cli.py swap INTUIT TSWP 100 --slippage 1 --yes
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = ROOT / "src"
for path in (ROOT, SRC_PATH):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from chain import ChainClient  # noqa: E402
from config import load_settings  # noqa: E402
from core.base_types import TokenAmount  # noqa: E402
from core.settings import SwapSettings  # noqa: E402
from core.tokens import NetworkConfig, get_network  # noqa: E402
from core.wallet_manager import WalletManager  # noqa: E402
from executor.engine import SwapExecutor  # noqa: E402
from executor.errors import PlanningError  # noqa: E402
from executor.planner import ExecutionPlanner  # noqa: E402
from pricing.errors import PricingError  # noqa: E402
from pricing.quote import (  # noqa: E402
    Quote,
    QuoteConfig,
    QuoteErrorKind,
    QuoteOrchestrator,
    QuoteResult,
)
from pricing.reserves import ReserveReader  # noqa: E402
from pricing.strategies import LocalAmmStrategy, OnChainQuoteStrategy  # noqa: E402


def _fmt(raw: int, decimals: int = 18, places: int = 6) -> str:
    value = Decimal(raw) / (Decimal(10) ** decimals)
    return f"{value:,.{places}f}".rstrip("0").rstrip(".")


def _print_quote(quote: Quote) -> None:
    route = [str(quote.token_in.symbol)] + [str(hop.token_out) for hop in quote.hops]
    print(f"Route:            {' → '.join(route)}")
    print(f"You pay:          {_fmt(quote.amount_in)} {quote.token_in.symbol}")
    print(f"You receive:      {_fmt(quote.amount_out)} {quote.token_out.symbol}")
    print(f"Minimum received: {_fmt(quote.minimum_received)} {quote.token_out.symbol}")
    print(
        f"Rate:             1 {quote.token_in.symbol} = "
        f"{quote.exchange_rate:.6f} {quote.token_out.symbol}"
    )
    print(f"Price impact:     {quote.price_impact:.2f}%")
    print(f"Slippage:         {quote.slippage}%")
    print(f"Quoted via:       {quote.strategy}")


def _build(
    settings: SwapSettings,
) -> tuple[NetworkConfig, ChainClient, QuoteOrchestrator]:
    network = get_network(settings.chain_id)
    client = ChainClient(
        list(settings.rpc_urls),
        timeout=settings.rpc_timeout,
        max_retries=settings.rpc_max_retries,
    )
    reader = ReserveReader(client)
    orchestrator = QuoteOrchestrator(
        network,
        reader,
        strategies=[LocalAmmStrategy(), OnChainQuoteStrategy(client)],
        config=QuoteConfig(
            ttl_seconds=settings.quote_ttl_seconds, impact_cap=settings.impact_cap
        ),
    )
    return network, client, orchestrator


def _quote(args: argparse.Namespace, orchestrator: QuoteOrchestrator) -> QuoteResult:
    try:
        token_in = orchestrator.network.token(args.token_in)
        amount = TokenAmount.from_human(args.amount, token_in.decimals)
    except (ValueError, ArithmeticError) as exc:
        return QuoteResult.failed(QuoteErrorKind.INVALID_INPUT, str(exc))
    return orchestrator.get_quote_with_retry(
        args.token_in, args.token_out, amount.raw, args.slippage
    )


def cmd_pools(settings: SwapSettings) -> int:
    network, _, orchestrator = _build(settings)
    for spec in network.pools.values():
        try:
            stats = orchestrator.reader.read_stats(spec)
        except PricingError as exc:
            print(f"{spec.label:<16} unavailable: {exc}")
            continue
        print(
            f"{spec.label:<16} {_fmt(stats.reserve_hub)} {spec.hub.symbol} / "
            f"{_fmt(stats.reserve_other)} {spec.other.symbol}  "
            f"trades={stats.total_trades} volume={_fmt(stats.total_volume)}"
        )
    return 0


def cmd_quote(args: argparse.Namespace, settings: SwapSettings) -> int:
    _, _, orchestrator = _build(settings)
    result = _quote(args, orchestrator)
    if not result.ok:
        print(f"Quote failed ({result.error.kind.value}): {result.error.message}")
        return 1
    _print_quote(result.quote)
    return 0


def cmd_swap(args: argparse.Namespace, settings: SwapSettings) -> int:
    network, client, orchestrator = _build(settings)
    wallet = WalletManager.from_env(chain_id=network.chain_id)
    result = _quote(args, orchestrator)
    if not result.ok:
        print(f"Quote failed ({result.error.kind.value}): {result.error.message}")
        return 1
    _print_quote(result.quote)
    if not args.yes and input("Submit swap? [y/N] ").strip().lower() != "y":
        print("Aborted.")
        return 1

    try:
        plan = ExecutionPlanner(network, client, orchestrator.reader).plan_swap(
            result.quote, result.path, wallet.account
        )
    except PlanningError as exc:
        print(f"Cannot plan swap: {exc}")
        return 1
    outcome = SwapExecutor(
        client,
        wallet,
        network,
        orchestrator.reader,
        gas_priority=settings.gas_priority,
        receipt_timeout=settings.receipt_timeout,
    ).execute(plan)
    if outcome.success:
        print(f"Swap confirmed: {network.tx_url(outcome.receipt.tx_hash)}")
        return 0
    print(f"Swap failed ({outcome.failure.value}): {outcome.error}")
    return 1


def _slippage_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except ArithmeticError as exc:
        raise argparse.ArgumentTypeError(f"invalid slippage: {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hub DEX quoting and swaps")
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("pools", help="Show pool reserves and stats")
    for name in ("quote", "swap"):
        cmd = sub.add_parser(name)
        cmd.add_argument("token_in")
        cmd.add_argument("token_out")
        cmd.add_argument("amount", help="Human amount, e.g. 1.5")
        cmd.add_argument("--slippage", type=_slippage_arg, default=None)
        if name == "swap":
            cmd.add_argument("--yes", action="store_true", help="Skip confirmation")
    return parser


def main() -> int:
    args = build_parser().parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    settings = load_settings()
    if getattr(args, "slippage", None) is None and args.command != "pools":
        args.slippage = settings.default_slippage

    if args.command == "pools":
        return cmd_pools(settings)
    if args.command == "quote":
        return cmd_quote(args, settings)
    return cmd_swap(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
