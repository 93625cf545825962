import pytest

from core.tokens import (
    INTUITION_TESTNET,
    LOCAL_HARDHAT,
    TokenSymbol,
    get_network,
    is_network_supported,
)


def test_symbol_parse_is_case_insensitive():
    assert TokenSymbol.parse("ttrust") is TokenSymbol.TTRUST
    assert TokenSymbol.parse(" Oracle ") is TokenSymbol.ORACLE
    assert TokenSymbol.parse(TokenSymbol.PINTU) is TokenSymbol.PINTU


def test_unknown_symbol_raises():
    with pytest.raises(ValueError, match="Unknown token symbol"):
        TokenSymbol.parse("DOGE")


def test_hub_is_native_and_uses_zero_address_in_calls():
    hub = INTUITION_TESTNET.hub
    assert hub.is_native
    assert hub.abi_address.is_zero
    assert not INTUITION_TESTNET.token("INTUIT").is_native


def test_every_spoke_has_a_hub_pool():
    for symbol in ("ORACLE", "INTUIT", "TSWP", "PINTU"):
        token = INTUITION_TESTNET.token(symbol)
        pool = INTUITION_TESTNET.pool_for(token)
        assert pool is not None
        assert pool.hub == INTUITION_TESTNET.hub
        assert pool.other == token


def test_pool_entry_point_names():
    pool = INTUITION_TESTNET.pools[TokenSymbol.INTUIT]
    assert pool.swap_from_hub_fn == "swapTrustForIntuit"
    assert pool.swap_to_hub_fn == "swapIntuitForTrust"
    assert pool.label == "tTRUST/INTUIT"


def test_counterpart():
    pool = INTUITION_TESTNET.pools[TokenSymbol.TSWP]
    assert pool.counterpart(pool.hub) == pool.other
    assert pool.counterpart(pool.other) == pool.hub
    with pytest.raises(ValueError):
        pool.counterpart(INTUITION_TESTNET.token("PINTU"))


def test_local_network_has_only_oracle_pool_and_no_router():
    assert LOCAL_HARDHAT.router is None
    assert LOCAL_HARDHAT.pool_for(LOCAL_HARDHAT.token("TSWP")) is None
    assert LOCAL_HARDHAT.pool_for(LOCAL_HARDHAT.token("ORACLE")) is not None


def test_unknown_chain_falls_back_to_testnet():
    assert is_network_supported(31337)
    assert not is_network_supported(1)
    assert get_network(1) is INTUITION_TESTNET
    assert get_network(31337) is LOCAL_HARDHAT


def test_tx_url():
    url = INTUITION_TESTNET.tx_url("0xabc")
    assert url == "https://testnet.explorer.intuition.systems/tx/0xabc"
