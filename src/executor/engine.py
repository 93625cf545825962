"""
Swap execution.

Submits the steps of an ``ExecutionPlan`` one at a time, waiting for each
receipt so the swap never goes out before its approval is mined. Failures
are classified after the fact into slippage, user rejection or network
errors and returned in a ``SwapOutcome`` rather than raised. Sending a swap
step advances the reserve generation so older quotes cannot be replayed.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from chain import ChainClient, TransactionBuilder
from chain.client import USER_REJECTED_CODE
from chain.errors import (
    ChainError,
    ExecutionReverted,
    RPCError,
    TransactionFailed,
    UserRejected,
)
from core.base_types import TokenAmount, TransactionReceipt
from core.tokens import NetworkConfig
from core.wallet_manager import WalletManager
from pricing.reserves import ReserveReader

from .analytics import AnalyticsSink, LoggingAnalytics, build_record
from .errors import ExecutionError, StepBuildError, WrongNetwork
from .planner import ExecutionPlan, StepKind, SwapStep

logger = logging.getLogger(__name__)

_SLIPPAGE_PATTERN = re.compile(
    r"slippage|insufficient output|insufficient_output|min(imum)?\s*amount|"
    r"amount out|too little received",
    re.I,
)
_REJECTED_PATTERN = re.compile(r"rejected|denied", re.I)


class SwapFailureKind(str, Enum):
    SLIPPAGE_EXCEEDED = "slippage_exceeded"
    USER_REJECTED = "user_rejected"
    NETWORK_ERROR = "network_error"
    WRONG_NETWORK = "wrong_network"

    @property
    def retryable(self) -> bool:
        return self in (
            SwapFailureKind.SLIPPAGE_EXCEEDED,
            SwapFailureKind.NETWORK_ERROR,
        )


class SwapState(Enum):
    IDLE = auto()
    CHECKING_NETWORK = auto()
    APPROVING = auto()
    SWAPPING = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class SwapOutcome:
    plan: ExecutionPlan
    state: SwapState = SwapState.IDLE
    failure: Optional[SwapFailureKind] = None
    error: Optional[str] = None
    tx_hashes: list[str] = field(default_factory=list)
    receipt: Optional[TransactionReceipt] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.state is SwapState.DONE


def classify_failure(exc: BaseException, step: Optional[SwapStep]) -> SwapFailureKind:
    """Map a submission error to the user-facing failure kind."""
    if isinstance(exc, UserRejected):
        return SwapFailureKind.USER_REJECTED
    if isinstance(exc, WrongNetwork):
        return SwapFailureKind.WRONG_NETWORK
    if isinstance(exc, RPCError) and exc.code == USER_REJECTED_CODE:
        return SwapFailureKind.USER_REJECTED
    message = str(exc)
    is_swap = step is not None and step.kind is StepKind.SWAP
    if isinstance(exc, TransactionFailed) and is_swap:
        return SwapFailureKind.SLIPPAGE_EXCEEDED
    if isinstance(exc, ExecutionReverted):
        if is_swap or _SLIPPAGE_PATTERN.search(message):
            return SwapFailureKind.SLIPPAGE_EXCEEDED
        return SwapFailureKind.NETWORK_ERROR
    if _REJECTED_PATTERN.search(message) and not isinstance(exc, TransactionFailed):
        return SwapFailureKind.USER_REJECTED
    return SwapFailureKind.NETWORK_ERROR


class SwapExecutor:
    def __init__(
        self,
        client: ChainClient,
        wallet: WalletManager,
        network: NetworkConfig,
        reader: ReserveReader,
        analytics: Optional[AnalyticsSink] = None,
        gas_priority: str = "medium",
        receipt_timeout: int = 120,
        activity_lock: Optional[asyncio.Lock] = None,
    ):
        self._client = client
        self._wallet = wallet
        self.network = network
        self._reader = reader
        self.analytics = analytics if analytics is not None else LoggingAnalytics()
        self.gas_priority = gas_priority
        self.receipt_timeout = receipt_timeout
        self.activity_lock = activity_lock or asyncio.Lock()

    def execute(self, plan: ExecutionPlan) -> SwapOutcome:
        outcome = SwapOutcome(plan=plan)
        step: Optional[SwapStep] = None
        try:
            outcome.state = SwapState.CHECKING_NETWORK
            self._check_network()
            for step in plan.steps:
                outcome.state = (
                    SwapState.APPROVING
                    if step.kind is StepKind.APPROVE
                    else SwapState.SWAPPING
                )
                outcome.receipt = self._submit(step, outcome)
        except (ChainError, ExecutionError, TimeoutError) as exc:
            outcome.failure = classify_failure(exc, step)
            outcome.error = str(exc)
            outcome.state = SwapState.FAILED
            outcome.finished_at = time.time()
            log = logger.warning
            if outcome.failure is SwapFailureKind.USER_REJECTED:
                log = logger.info
            log(
                "swap %s failed (%s): %s", plan.path.label, outcome.failure.value, exc
            )
            return outcome

        outcome.state = SwapState.DONE
        outcome.finished_at = time.time()
        logger.info(
            "swap %s confirmed in block %d (%s)",
            plan.path.label,
            outcome.receipt.block_number,
            outcome.receipt.tx_hash,
        )
        self._report(plan, outcome.receipt.tx_hash)
        return outcome

    async def execute_async(self, plan: ExecutionPlan) -> SwapOutcome:
        """Run ``execute`` off the event loop while holding ``activity_lock``."""
        async with self.activity_lock:
            return await asyncio.to_thread(self.execute, plan)

    def _check_network(self) -> None:
        chain_id = self._client.get_chain_id()
        if chain_id != self.network.chain_id:
            raise WrongNetwork(self.network.chain_id, chain_id)

    def _submit(self, step: SwapStep, outcome: SwapOutcome) -> TransactionReceipt:
        logger.info("submitting %s: %s", step.kind.value, step.description)
        try:
            signed = (
                TransactionBuilder(self._client, self._wallet)
                .to(step.to)
                .value(TokenAmount(raw=step.value))
                .data(step.data)
                .chain_id(self.network.chain_id)
                .with_gas_estimate()
                .with_gas_price(self.gas_priority)
                .build_and_sign()
            )
        except (ValueError, TypeError) as exc:
            raise StepBuildError(f"Could not build {step.function}: {exc}") from exc
        tx_hash = self._client.send_transaction(signed.raw_transaction)
        if step.kind is StepKind.SWAP:
            self._reader.invalidate()
        outcome.tx_hashes.append(tx_hash)
        logger.info("%s submitted: %s", step.function, self.network.tx_url(tx_hash))
        return self._client.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)

    def _report(self, plan: ExecutionPlan, tx_hash: str) -> None:
        try:
            record = build_record(plan.quote, plan.account, tx_hash, self.network)
            self.analytics.record_swap(record)
        except Exception as exc:
            logger.warning("analytics tracking failed: %s", exc)
