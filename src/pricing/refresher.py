"""Periodic background refresh of pool stats and account balances."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from eth_abi.exceptions import DecodingError

from chain.client import ChainClient
from chain.contracts import read_balance_of
from chain.errors import ChainError
from core.base_types import Address
from core.tokens import NetworkConfig, TokenSymbol

from .errors import PricingError
from .reserves import PoolStats, ReserveReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketSnapshot:
    pools: dict[TokenSymbol, PoolStats] = field(default_factory=dict)
    balances: dict[TokenSymbol, int] = field(default_factory=dict)
    refreshed_at: float = 0.0


class MarketRefresher:
    """
    Keeps a display snapshot fresh every ``interval`` seconds.

    The refresher only ever writes its own ``snapshot``. It uses
    ``read_stats`` (which does not advance the reserve generation) so a
    background tick never invalidates the quote the user is looking at,
    and it skips ticks while ``activity_lock`` is held by a swap.
    """

    def __init__(
        self,
        reader: ReserveReader,
        client: ChainClient,
        network: NetworkConfig,
        account: Optional[Address] = None,
        interval: float = 30.0,
        activity_lock: Optional[asyncio.Lock] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._reader = reader
        self._client = client
        self._network = network
        self._account = account
        self._interval = interval
        self.activity_lock = activity_lock or asyncio.Lock()
        self.snapshot = MarketSnapshot()
        self._task: Optional[asyncio.Task] = None

    def refresh_once(self) -> MarketSnapshot:
        pools: dict[TokenSymbol, PoolStats] = {}
        for symbol, spec in self._network.pools.items():
            try:
                pools[symbol] = self._reader.read_stats(spec)
            except PricingError as exc:
                logger.warning("stats refresh for %s failed: %s", spec.label, exc)
                previous = self.snapshot.pools.get(symbol)
                if previous is not None:
                    pools[symbol] = previous

        balances: dict[TokenSymbol, int] = dict(self.snapshot.balances)
        if self._account is not None:
            for symbol, token in self._network.tokens.items():
                try:
                    if token.is_native:
                        balances[symbol] = self._client.get_balance(self._account).raw
                    else:
                        balances[symbol] = read_balance_of(
                            self._client, token.address, self._account
                        )
                except (ChainError, DecodingError) as exc:
                    logger.warning("balance refresh for %s failed: %s", symbol, exc)

        self.snapshot = MarketSnapshot(
            pools=pools, balances=balances, refreshed_at=time.time()
        )
        return self.snapshot

    async def tick(self) -> bool:
        """One refresh, skipped while a swap holds ``activity_lock``."""
        if self.activity_lock.locked():
            logger.debug("skipping refresh, swap in progress")
            return False
        await asyncio.to_thread(self.refresh_once)
        return True

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._loop())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self._interval)
