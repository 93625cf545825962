"""
Debounced re-quoting.

Input changes call ``submit``; the quote is computed only after the input
has been quiet for ``delay`` seconds. A newer submission supersedes the
pending or in-flight one, and a superseded result is dropped on arrival
(last write wins, not first to finish).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Generic, Optional, TypeVar

from core.base_types import TokenAmount
from core.tokens import TokenSymbol

from .quote import QuoteErrorKind, QuoteOrchestrator, QuoteResult

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class QuoteRequest:
    token_in: TokenSymbol
    token_out: TokenSymbol
    amount: str  # as typed by the user
    slippage: Decimal

    @property
    def is_empty(self) -> bool:
        try:
            return Decimal(self.amount.strip() or "0") <= 0
        except InvalidOperation:
            return True


class QuoteDebouncer(Generic[R]):
    def __init__(
        self,
        compute: Callable[[QuoteRequest], R],
        on_result: Callable[[QuoteRequest, R], None],
        delay: float = 0.5,
    ):
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._compute = compute
        self._on_result = on_result
        self._delay = delay
        self._version = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, request: QuoteRequest) -> Optional[asyncio.Task]:
        """Schedule a quote for ``request``; an empty amount just cancels."""
        self.cancel()
        if request.is_empty:
            return None
        version = self._version
        self._task = asyncio.get_running_loop().create_task(
            self._run(version, request)
        )
        return self._task

    def cancel(self) -> None:
        """Drop pending and in-flight work; nothing lands after this returns."""
        self._version += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the current task, if any (superseded tasks are ignored)."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self, version: int, request: QuoteRequest) -> None:
        await asyncio.sleep(self._delay)
        if version != self._version:
            return
        result = await asyncio.to_thread(self._compute, request)
        if version != self._version:
            logger.debug("discarding superseded quote for %s", request.amount)
            return
        self._on_result(request, result)


def orchestrator_compute(
    orchestrator: QuoteOrchestrator,
) -> Callable[[QuoteRequest], QuoteResult]:
    """Adapt a ``QuoteOrchestrator`` to the debouncer's compute callback."""

    def compute(request: QuoteRequest) -> QuoteResult:
        try:
            token_in = orchestrator.network.token(request.token_in)
            amount = TokenAmount.from_human(request.amount, token_in.decimals)
        except (ValueError, InvalidOperation) as exc:
            return QuoteResult.failed(QuoteErrorKind.INVALID_INPUT, str(exc))
        return orchestrator.get_quote(
            request.token_in, request.token_out, amount.raw, request.slippage
        )

    return compute
