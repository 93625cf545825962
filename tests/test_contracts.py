from eth_abi import decode
from eth_utils.crypto import keccak

from chain.contracts import (
    approve_calldata,
    pool_swap_calldata,
    read_allowance,
    read_amount_out,
    read_balance_of,
    read_dex_stats,
    router_swap_calldata,
    selector,
)
from core.base_types import Address
from core.tokens import INTUITION_TESTNET, TokenSymbol

E18 = 10**18
POOL = INTUITION_TESTNET.pools[TokenSymbol.ORACLE].address
ORACLE = INTUITION_TESTNET.token("ORACLE").address
ROUTER = INTUITION_TESTNET.router


def test_selector_is_keccak_prefix():
    assert selector("approve(address,uint256)") == bytes.fromhex("095ea7b3")
    assert selector("getDEXStats()") == keccak(text="getDEXStats()")[:4]


def test_pool_swap_calldata_layout():
    data = pool_swap_calldata("swapTrustForOracle", 0, 42)
    assert data[:4] == selector("swapTrustForOracle(uint256,uint256)")
    assert decode(["uint256", "uint256"], data[4:]) == (0, 42)


def test_router_swap_calldata_uses_zero_address_for_native():
    data = router_swap_calldata(Address.zero(), ORACLE, 5, 4)
    assert data[:4] == selector("swap(address,address,uint256,uint256)")
    token_in, token_out, amount_in, min_out = decode(
        ["address", "address", "uint256", "uint256"], data[4:]
    )
    assert int(token_in, 16) == 0
    assert Address(token_out) == ORACLE
    assert (amount_in, min_out) == (5, 4)


def test_approve_calldata():
    data = approve_calldata(ROUTER, 123)
    spender, amount = decode(["address", "uint256"], data[4:])
    assert Address(spender) == ROUTER
    assert amount == 123


def test_read_dex_stats(chain):
    stats = read_dex_stats(chain, POOL)
    assert stats.hub_reserve == 1000 * E18
    assert stats.token_reserve == 500_000 * E18
    assert stats.total_trades == 3
    (request,) = chain.calls
    assert request.to == POOL
    assert request.value.raw == 0


def test_read_amount_out_hub_in(chain):
    out = read_amount_out(chain, POOL, Address.zero(), E18)
    assert 498 * E18 < out < 499 * E18


def test_read_balance_and_allowance(chain):
    owner = Address("0x000000000000000000000000000000000000dEaD")
    chain.balances[ORACLE.lower] = 77
    chain.allowances[(ORACLE.lower, POOL.lower)] = 55
    assert read_balance_of(chain, ORACLE, owner) == 77
    assert read_allowance(chain, ORACLE, owner, POOL) == 55
    assert read_allowance(chain, ORACLE, owner, ROUTER) == 0
