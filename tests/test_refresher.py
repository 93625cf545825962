import asyncio

import pytest

from core.base_types import Address
from core.tokens import INTUITION_TESTNET, TokenSymbol
from pricing.refresher import MarketRefresher
from pricing.reserves import ReserveReader

E18 = 10**18
ACCOUNT = Address("0x000000000000000000000000000000000000dEaD")
ORACLE = INTUITION_TESTNET.token("ORACLE")


def _refresher(chain, **kwargs):
    return MarketRefresher(
        ReserveReader(chain), chain, INTUITION_TESTNET, account=ACCOUNT, **kwargs
    )


def test_refresh_collects_pools_and_balances(chain):
    chain.native_balance = 3 * E18
    chain.balances[ORACLE.address.lower] = 42
    snapshot = _refresher(chain).refresh_once()

    assert set(snapshot.pools) == set(INTUITION_TESTNET.pools)
    assert snapshot.pools[TokenSymbol.ORACLE].reserve_hub == 1000 * E18
    assert snapshot.balances[TokenSymbol.TTRUST] == 3 * E18
    assert snapshot.balances[TokenSymbol.ORACLE] == 42
    assert snapshot.refreshed_at > 0


def test_refresh_does_not_advance_reserve_generation(chain):
    reader = ReserveReader(chain)
    refresher = MarketRefresher(reader, chain, INTUITION_TESTNET)
    refresher.refresh_once()
    assert reader.generation == 0
    assert refresher.snapshot.balances == {}


def test_failed_pool_keeps_previous_stats(chain):
    refresher = _refresher(chain)
    first = refresher.refresh_once()

    chain.fail_reads = 1
    second = refresher.refresh_once()

    assert set(second.pools) == set(first.pools)
    assert second.pools[TokenSymbol.ORACLE] == first.pools[TokenSymbol.ORACLE]


def test_invalid_interval_rejected(chain):
    with pytest.raises(ValueError):
        _refresher(chain, interval=0)


@pytest.mark.asyncio
async def test_tick_skipped_while_swap_holds_lock(chain):
    lock = asyncio.Lock()
    refresher = _refresher(chain, activity_lock=lock)

    async with lock:
        assert await refresher.tick() is False
    assert refresher.snapshot.refreshed_at == 0.0

    assert await refresher.tick() is True
    assert refresher.snapshot.refreshed_at > 0


@pytest.mark.asyncio
async def test_start_and_stop_background_loop(chain):
    refresher = _refresher(chain, interval=0.01)
    task = refresher.start()
    assert refresher.start() is task
    await asyncio.sleep(0.05)
    await refresher.stop()

    assert task.cancelled()
    assert refresher.snapshot.pools
