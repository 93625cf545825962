"""
Hop output strategies.

The orchestrator tries these in order and keeps the first success;
each failure is recorded with its reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from eth_abi.exceptions import DecodingError

from chain.client import ChainClient
from chain.contracts import read_amount_out
from chain.errors import ChainError

from .path import SwapPath
from .reserves import ReserveSnapshot


class StrategyFailed(Exception):
    """A strategy could not produce hop outputs."""


@dataclass(frozen=True)
class StrategyAttempt:
    strategy: str
    succeeded: bool
    reason: Optional[str] = None


class QuoteStrategy(Protocol):
    name: str

    def hop_outputs(
        self,
        path: SwapPath,
        snapshots: Sequence[ReserveSnapshot],
        amount_in: int,
    ) -> list[int]:
        """Output of each hop, the output of hop n feeding hop n+1."""
        ...


class LocalAmmStrategy:
    """Constant-product math against the reserve snapshots."""

    name = "local-amm"

    def hop_outputs(
        self,
        path: SwapPath,
        snapshots: Sequence[ReserveSnapshot],
        amount_in: int,
    ) -> list[int]:
        if len(snapshots) != path.num_hops:
            raise StrategyFailed("snapshot count does not match path")
        outputs = []
        current = amount_in
        for hop, snapshot in zip(path.hops, snapshots):
            if snapshot.pool.address != hop.pool.address:
                raise StrategyFailed(f"snapshot is not for {hop.pool.label}")
            current = snapshot.to_pool().get_amount_out(current, hop.token_in)
            outputs.append(current)
            if current == 0:
                break
        return outputs


class OnChainQuoteStrategy:
    """Asks each pool contract via ``getAmountOut(address,uint256)``."""

    name = "on-chain"

    def __init__(self, client: ChainClient):
        self._client = client

    def hop_outputs(
        self,
        path: SwapPath,
        snapshots: Sequence[ReserveSnapshot],
        amount_in: int,
    ) -> list[int]:
        outputs = []
        current = amount_in
        for hop in path.hops:
            try:
                current = read_amount_out(
                    self._client,
                    hop.pool.address,
                    hop.token_in.abi_address,
                    current,
                )
            except (ChainError, DecodingError) as exc:
                raise StrategyFailed(
                    f"getAmountOut on {hop.pool.label} failed: {exc}"
                ) from exc
            outputs.append(current)
            if current == 0:
                break
        return outputs
