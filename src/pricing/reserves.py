"""Read-only reserve fetching for hub pools."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from eth_abi.exceptions import DecodingError

from chain.client import ChainClient
from chain.contracts import DexStats, read_dex_stats
from chain.errors import ChainError
from core.tokens import PoolSpec

from .errors import PoolNotFound, ReserveUnavailable
from .pool import Pool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReserveSnapshot:
    pool: PoolSpec
    reserve_hub: int
    reserve_other: int
    generation: int
    fetched_at: float

    def to_pool(self) -> Pool:
        return Pool(self.pool, self.reserve_hub, self.reserve_other)


@dataclass(frozen=True)
class PoolStats:
    pool: PoolSpec
    reserve_hub: int
    reserve_other: int
    total_volume: int
    total_trades: int
    total_liquidity: int


class ReserveReader:
    """
    Reads pool reserves through ``getDEXStats()``.

    Does not retry: interactive quoting fails fast and pre-flight callers
    apply their own backoff. Every successful ``read_reserves`` advances
    ``generation``, which invalidates quotes built on older snapshots.
    Submitting a swap advances it too through ``invalidate``.
    """

    def __init__(self, client: ChainClient):
        self._client = client
        self._generation = 0
        self._lock = threading.Lock()
        self._verified: set[str] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> int:
        """Advance ``generation`` after a swap moved reserves outside a read."""
        with self._lock:
            self._generation += 1
            generation = self._generation
        logger.debug("reserves invalidated gen=%d", generation)
        return generation

    def read_reserves(self, pool: PoolSpec) -> ReserveSnapshot:
        stats = self._read(pool)
        with self._lock:
            self._generation += 1
            generation = self._generation
        logger.debug(
            "reserves %s hub=%d other=%d gen=%d",
            pool.label,
            stats.hub_reserve,
            stats.token_reserve,
            generation,
        )
        return ReserveSnapshot(
            pool=pool,
            reserve_hub=stats.hub_reserve,
            reserve_other=stats.token_reserve,
            generation=generation,
            fetched_at=time.time(),
        )

    def read_stats(self, pool: PoolSpec) -> PoolStats:
        stats = self._read(pool)
        return PoolStats(
            pool=pool,
            reserve_hub=stats.hub_reserve,
            reserve_other=stats.token_reserve,
            total_volume=stats.total_volume,
            total_trades=stats.total_trades,
            total_liquidity=stats.total_liquidity,
        )

    def _read(self, pool: PoolSpec) -> DexStats:
        try:
            self._ensure_deployed(pool)
            return read_dex_stats(self._client, pool.address)
        except ChainError as exc:
            raise ReserveUnavailable(
                f"Reserve read for {pool.label} failed: {exc}"
            ) from exc
        except DecodingError as exc:
            raise ReserveUnavailable(
                f"Undecodable reserves from {pool.label}: {exc}"
            ) from exc

    def _ensure_deployed(self, pool: PoolSpec) -> None:
        key = pool.address.lower
        if key in self._verified:
            return
        if not self._client.get_code(pool.address):
            raise PoolNotFound(
                f"No contract deployed at {pool.address} ({pool.label})"
            )
        self._verified.add(key)
