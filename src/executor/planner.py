"""
Execution planning.

Turns an accepted quote into the ordered list of transactions that realize
it. Multi-hop trades always go through the router in a single
transaction; two independent pool swaps would lose the slippage guard
between them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from chain.client import ChainClient
from chain.contracts import (
    ROUTER_SWAP,
    approve_calldata,
    pool_swap_calldata,
    read_allowance,
    router_swap_calldata,
)
from core.base_types import Address
from core.tokens import NetworkConfig
from pricing.path import SwapPath
from pricing.quote import Quote
from pricing.reserves import ReserveReader

from .errors import PlanningError

logger = logging.getLogger(__name__)


class StepKind(str, Enum):
    APPROVE = "approve"
    SWAP = "swap"


@dataclass(frozen=True)
class SwapStep:
    kind: StepKind
    to: Address
    data: bytes
    value: int
    function: str
    description: str


@dataclass(frozen=True)
class ExecutionPlan:
    quote: Quote
    path: SwapPath
    account: Address
    steps: tuple[SwapStep, ...]

    @property
    def requires_approval(self) -> bool:
        return any(step.kind is StepKind.APPROVE for step in self.steps)

    @property
    def swap_step(self) -> SwapStep:
        return self.steps[-1]


class ExecutionPlanner:
    def __init__(
        self, network: NetworkConfig, client: ChainClient, reader: ReserveReader
    ):
        self.network = network
        self._client = client
        self._reader = reader

    def plan_swap(
        self,
        quote: Quote,
        path: SwapPath,
        account: Address,
        now: Optional[float] = None,
    ) -> ExecutionPlan:
        self._validate(quote, path, now)
        if path.is_multi_hop:
            steps = self._plan_router_swap(quote, path, account)
        elif path.token_in.is_native:
            steps = [self._pool_swap_from_hub(quote, path)]
        else:
            steps = self._plan_pool_swap_to_hub(quote, path, account)
        plan = ExecutionPlan(quote, path, account, tuple(steps))
        logger.info(
            "planned %s: %s",
            path.label,
            ", ".join(step.function for step in plan.steps),
        )
        return plan

    def _validate(self, quote: Quote, path: SwapPath, now: Optional[float]) -> None:
        if quote.token_in.symbol != path.token_in.symbol:
            raise PlanningError("quote input token does not match path")
        if quote.token_out.symbol != path.token_out.symbol:
            raise PlanningError("quote output token does not match path")
        if quote.num_hops != path.num_hops:
            raise PlanningError("quote hop count does not match path")
        now = time.time() if now is None else now
        if quote.is_expired(now):
            raise PlanningError("quote has expired, request a new one")
        if not quote.is_valid(self._reader.generation, now):
            raise PlanningError("reserves changed since the quote, request a new one")
        if quote.minimum_received <= 0:
            raise PlanningError("minimum received must be positive")

    def _pool_swap_from_hub(self, quote: Quote, path: SwapPath) -> SwapStep:
        pool = path.pools[0]
        # The payable entry point takes the input from msg.value; the
        # amountIn argument is ignored and passed as zero.
        return SwapStep(
            kind=StepKind.SWAP,
            to=pool.address,
            data=pool_swap_calldata(pool.swap_from_hub_fn, 0, quote.minimum_received),
            value=quote.amount_in,
            function=pool.swap_from_hub_fn,
            description=f"Swap {path.label} on {pool.label}",
        )

    def _plan_pool_swap_to_hub(
        self, quote: Quote, path: SwapPath, account: Address
    ) -> list[SwapStep]:
        pool = path.pools[0]
        steps = self._approval_steps(quote, path, account, pool.address)
        steps.append(
            SwapStep(
                kind=StepKind.SWAP,
                to=pool.address,
                data=pool_swap_calldata(
                    pool.swap_to_hub_fn, quote.amount_in, quote.minimum_received
                ),
                value=0,
                function=pool.swap_to_hub_fn,
                description=f"Swap {path.label} on {pool.label}",
            )
        )
        return steps

    def _plan_router_swap(
        self, quote: Quote, path: SwapPath, account: Address
    ) -> list[SwapStep]:
        router = self.network.router
        if router is None:
            raise PlanningError(f"No router deployed on {self.network.name}")
        steps = []
        if not path.token_in.is_native:
            steps = self._approval_steps(quote, path, account, router)
        steps.append(
            SwapStep(
                kind=StepKind.SWAP,
                to=router,
                data=router_swap_calldata(
                    path.token_in.abi_address,
                    path.token_out.abi_address,
                    quote.amount_in,
                    quote.minimum_received,
                ),
                value=quote.amount_in if path.token_in.is_native else 0,
                function=ROUTER_SWAP.split("(")[0],
                description=f"Swap {path.label} via router",
            )
        )
        return steps

    def _approval_steps(
        self, quote: Quote, path: SwapPath, account: Address, spender: Address
    ) -> list[SwapStep]:
        token = path.token_in
        allowance = read_allowance(self._client, token.address, account, spender)
        if allowance >= quote.amount_in:
            logger.debug(
                "allowance %d covers %d %s", allowance, quote.amount_in, token.symbol
            )
            return []
        return [
            SwapStep(
                kind=StepKind.APPROVE,
                to=token.address,
                data=approve_calldata(spender, quote.amount_in),
                value=0,
                function="approve",
                description=f"Approve {token.symbol} for {spender}",
            )
        ]
