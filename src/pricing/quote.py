"""
Quote orchestration.

``QuoteOrchestrator.get_quote`` resolves the path, reads fresh reserves for
every hop, chains hop outputs and returns a ``QuoteResult``. Quoting errors
never propagate as exceptions past this module; they come back as a tagged
``QuoteFailure`` so the caller can render them directly.

Price impact is always the depth-consumed measure
``amount_in / (reserve_in + amount_in)`` per hop, compounded across hops,
whichever strategy produced the outputs.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Optional, Sequence

from core.settings import clamp_slippage
from core.tokens import NetworkConfig, Token, TokenSymbol

from . import amm
from .errors import (
    InsufficientLiquidity,
    PoolNotFound,
    PricingError,
    ReserveUnavailable,
    RoutingError,
)
from .path import SwapPath, resolve_path
from .reserves import ReserveReader, ReserveSnapshot
from .strategies import (
    LocalAmmStrategy,
    QuoteStrategy,
    StrategyAttempt,
    StrategyFailed,
)

logger = logging.getLogger(__name__)


class QuoteErrorKind(str, Enum):
    UNROUTABLE_PAIR = "unroutable_pair"
    POOL_NOT_FOUND = "pool_not_found"
    RESERVE_UNAVAILABLE = "reserve_unavailable"
    INSUFFICIENT_LIQUIDITY = "insufficient_liquidity"
    INVALID_INPUT = "invalid_input"

    @property
    def retryable(self) -> bool:
        return self is QuoteErrorKind.RESERVE_UNAVAILABLE


_ERROR_TYPES: dict[QuoteErrorKind, type[PricingError]] = {
    QuoteErrorKind.UNROUTABLE_PAIR: RoutingError,
    QuoteErrorKind.POOL_NOT_FOUND: PoolNotFound,
    QuoteErrorKind.RESERVE_UNAVAILABLE: ReserveUnavailable,
    QuoteErrorKind.INSUFFICIENT_LIQUIDITY: InsufficientLiquidity,
}


@dataclass(frozen=True)
class HopQuote:
    pool_label: str
    token_in: TokenSymbol
    token_out: TokenSymbol
    amount_in: int
    amount_out: int
    price_impact: Decimal


@dataclass(frozen=True)
class Quote:
    token_in: Token
    token_out: Token
    amount_in: int
    amount_out: int
    hops: tuple[HopQuote, ...]
    price_impact: Decimal
    minimum_received: int
    exchange_rate: Decimal
    slippage: Decimal
    strategy: str
    generation: int
    created_at: float
    expires_at: float

    @property
    def num_hops(self) -> int:
        return len(self.hops)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (time.time() if now is None else now) >= self.expires_at

    def is_valid(self, current_generation: int, now: Optional[float] = None) -> bool:
        """Valid until the next reserve read or the TTL, whichever comes first."""
        return current_generation == self.generation and not self.is_expired(now)


@dataclass(frozen=True)
class QuoteFailure:
    kind: QuoteErrorKind
    message: str
    attempts: tuple[StrategyAttempt, ...] = ()


@dataclass(frozen=True)
class QuoteResult:
    quote: Optional[Quote] = None
    error: Optional[QuoteFailure] = None
    path: Optional[SwapPath] = None

    @property
    def ok(self) -> bool:
        return self.quote is not None

    def unwrap(self) -> Quote:
        """Return the quote or raise the matching ``PricingError``."""
        if self.quote is not None:
            return self.quote
        exc_type = _ERROR_TYPES.get(self.error.kind, PricingError)
        raise exc_type(self.error.message)

    @classmethod
    def failed(
        cls,
        kind: QuoteErrorKind,
        message: str,
        attempts: Sequence[StrategyAttempt] = (),
        path: Optional[SwapPath] = None,
    ) -> "QuoteResult":
        return cls(error=QuoteFailure(kind, message, tuple(attempts)), path=path)


@dataclass
class QuoteConfig:
    ttl_seconds: float = 15.0
    impact_cap: Decimal = amm.DEFAULT_IMPACT_CAP


class QuoteOrchestrator:
    """Builds quotes from fresh reserve snapshots."""

    def __init__(
        self,
        network: NetworkConfig,
        reader: ReserveReader,
        strategies: Optional[Sequence[QuoteStrategy]] = None,
        config: Optional[QuoteConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.network = network
        self.reader = reader
        self.strategies = (
            list(strategies) if strategies is not None else [LocalAmmStrategy()]
        )
        if not self.strategies:
            raise ValueError("at least one quote strategy is required")
        self.config = config or QuoteConfig()
        self._clock = clock

    def get_quote(
        self,
        token_in: "str | TokenSymbol | Token",
        token_out: "str | TokenSymbol | Token",
        amount_in: int,
        slippage: "Decimal | str | int",
    ) -> QuoteResult:
        if not isinstance(amount_in, int) or amount_in <= 0:
            return QuoteResult.failed(
                QuoteErrorKind.INVALID_INPUT, "amount_in must be a positive int"
            )
        try:
            tolerance = clamp_slippage(slippage)
        except (TypeError, ValueError, InvalidOperation) as exc:
            return QuoteResult.failed(
                QuoteErrorKind.INVALID_INPUT, f"Invalid slippage {slippage!r}: {exc}"
            )
        try:
            path = resolve_path(self.network, token_in, token_out)
        except RoutingError as exc:
            return QuoteResult.failed(QuoteErrorKind.UNROUTABLE_PAIR, str(exc))

        try:
            snapshots = [self.reader.read_reserves(pool) for pool in path.pools]
        except PoolNotFound as exc:
            return QuoteResult.failed(
                QuoteErrorKind.POOL_NOT_FOUND, str(exc), path=path
            )
        except ReserveUnavailable as exc:
            return QuoteResult.failed(
                QuoteErrorKind.RESERVE_UNAVAILABLE, str(exc), path=path
            )

        outputs, strategy_name, attempts = self._run_strategies(
            path, snapshots, amount_in
        )
        if outputs is None:
            reasons = "; ".join(f"{a.strategy}: {a.reason}" for a in attempts)
            return QuoteResult.failed(
                QuoteErrorKind.RESERVE_UNAVAILABLE,
                f"All quote strategies failed ({reasons})",
                attempts,
                path=path,
            )
        if len(outputs) < path.num_hops or outputs[-1] <= 0:
            return QuoteResult.failed(
                QuoteErrorKind.INSUFFICIENT_LIQUIDITY,
                f"No liquidity for {path.label}",
                attempts,
                path=path,
            )

        quote = self._build_quote(
            path, snapshots, amount_in, outputs, strategy_name, tolerance
        )
        logger.info(
            "quote %s in=%d out=%d impact=%.4f%% via %s",
            path.label,
            quote.amount_in,
            quote.amount_out,
            quote.price_impact,
            quote.strategy,
        )
        return QuoteResult(quote=quote, path=path)

    def get_quote_with_retry(
        self,
        token_in: "str | TokenSymbol | Token",
        token_out: "str | TokenSymbol | Token",
        amount_in: int,
        slippage: "Decimal | str | int",
        attempts: int = 3,
        backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> QuoteResult:
        """Pre-flight variant: retries reserve failures with exponential backoff."""
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        for attempt in range(attempts):
            result = self.get_quote(token_in, token_out, amount_in, slippage)
            if result.ok or not result.error.kind.retryable:
                return result
            if attempt + 1 < attempts:
                delay = backoff * (2**attempt)
                logger.warning(
                    "quote attempt %d/%d failed (%s), retrying in %.2fs",
                    attempt + 1,
                    attempts,
                    result.error.message,
                    delay,
                )
                sleep(delay)
        return result

    def _run_strategies(
        self,
        path: SwapPath,
        snapshots: list[ReserveSnapshot],
        amount_in: int,
    ) -> tuple[Optional[list[int]], str, list[StrategyAttempt]]:
        attempts: list[StrategyAttempt] = []
        for strategy in self.strategies:
            try:
                outputs = strategy.hop_outputs(path, snapshots, amount_in)
            except (StrategyFailed, ValueError) as exc:
                logger.warning("quote strategy %s failed: %s", strategy.name, exc)
                attempts.append(StrategyAttempt(strategy.name, False, str(exc)))
                continue
            attempts.append(StrategyAttempt(strategy.name, True))
            return outputs, strategy.name, attempts
        return None, "", attempts

    def _build_quote(
        self,
        path: SwapPath,
        snapshots: list[ReserveSnapshot],
        amount_in: int,
        outputs: list[int],
        strategy_name: str,
        slippage: Decimal,
    ) -> Quote:
        hops = []
        hop_in = amount_in
        for hop, snapshot, hop_out in zip(path.hops, snapshots, outputs):
            reserve_in, _ = snapshot.to_pool().reserves_for_input(hop.token_in)
            hops.append(
                HopQuote(
                    pool_label=hop.pool.label,
                    token_in=hop.token_in.symbol,
                    token_out=hop.token_out.symbol,
                    amount_in=hop_in,
                    amount_out=hop_out,
                    price_impact=amm.price_impact(hop_in, reserve_in),
                )
            )
            hop_in = hop_out

        amount_out = outputs[-1]
        created_at = self._clock()
        return Quote(
            token_in=path.token_in,
            token_out=path.token_out,
            amount_in=amount_in,
            amount_out=amount_out,
            hops=tuple(hops),
            price_impact=amm.compound_impacts(
                (hop.price_impact for hop in hops), cap=self.config.impact_cap
            ),
            minimum_received=amm.minimum_received(amount_out, slippage),
            exchange_rate=amm.exchange_rate(
                amount_in,
                amount_out,
                path.token_in.decimals,
                path.token_out.decimals,
            ),
            slippage=slippage,
            strategy=strategy_name,
            generation=max(snapshot.generation for snapshot in snapshots),
            created_at=created_at,
            expires_at=created_at + self.config.ttl_seconds,
        )
