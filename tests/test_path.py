import pytest

from core.tokens import INTUITION_TESTNET, LOCAL_HARDHAT, TokenSymbol
from pricing.errors import IdenticalTokens, RoutingError, UnsupportedToken
from pricing.path import SwapPath, resolve_path

POOLS = INTUITION_TESTNET.pools


def test_hub_to_spoke_is_single_hop():
    path = resolve_path(INTUITION_TESTNET, "tTRUST", "ORACLE")
    assert path.num_hops == 1
    assert not path.is_multi_hop
    assert path.pools == (POOLS[TokenSymbol.ORACLE],)
    assert path.label == "tTRUST → ORACLE"


def test_spoke_to_hub_uses_spoke_pool():
    path = resolve_path(INTUITION_TESTNET, "pintu", "ttrust")
    assert path.pools == (POOLS[TokenSymbol.PINTU],)
    (hop,) = path.hops
    assert hop.token_in.symbol is TokenSymbol.PINTU
    assert hop.token_out.symbol is TokenSymbol.TTRUST


def test_spoke_to_spoke_routes_through_hub():
    path = resolve_path(INTUITION_TESTNET, TokenSymbol.INTUIT, TokenSymbol.TSWP)
    assert path.is_multi_hop
    assert path.pools == (POOLS[TokenSymbol.INTUIT], POOLS[TokenSymbol.TSWP])
    first, second = path.hops
    assert first.token_out.symbol is TokenSymbol.TTRUST
    assert second.token_in.symbol is TokenSymbol.TTRUST
    assert path.label == "INTUIT → tTRUST → TSWP"


@pytest.mark.parametrize("symbol", list(TokenSymbol))
def test_identical_tokens_rejected(symbol):
    with pytest.raises(IdenticalTokens, match="for itself"):
        resolve_path(INTUITION_TESTNET, symbol.value, symbol.value.lower())
    with pytest.raises(IdenticalTokens):
        resolve_path(INTUITION_TESTNET, symbol, symbol)


def test_unknown_token_rejected():
    with pytest.raises(UnsupportedToken, match="Unknown token symbol"):
        resolve_path(INTUITION_TESTNET, "DOGE", "ORACLE")


def test_token_without_pool_is_unroutable():
    with pytest.raises(RoutingError, match="No TSWP pool"):
        resolve_path(LOCAL_HARDHAT, "tTRUST", "TSWP")


def test_path_length_bounds():
    hub = INTUITION_TESTNET.hub
    oracle = INTUITION_TESTNET.token("ORACLE")
    with pytest.raises(ValueError, match="at least one pool"):
        SwapPath(hub, oracle, ())
    with pytest.raises(ValueError, match="at most two pools"):
        SwapPath(hub, oracle, tuple(POOLS.values())[:3])
