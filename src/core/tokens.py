"""
Static token, pool and network registry.

Every pool on the exchange pairs the native hub asset (tTRUST) with one
other token, so a pool is identified by its non-hub symbol. Multi-hop
swaps go through the router contract.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .base_types import Address

logger = logging.getLogger(__name__)

TOKEN_DECIMALS = 18


class TokenSymbol(str, Enum):
    TTRUST = "tTRUST"
    ORACLE = "ORACLE"
    INTUIT = "INTUIT"
    TSWP = "TSWP"
    PINTU = "PINTU"

    @classmethod
    def parse(cls, text: "str | TokenSymbol") -> "TokenSymbol":
        """Case-insensitive lookup; raises ``ValueError`` on miss."""
        if isinstance(text, TokenSymbol):
            return text
        lowered = str(text).strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown token symbol: {text!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    symbol: TokenSymbol
    name: str
    address: Optional[Address] = None  # None = native hub asset
    decimals: int = TOKEN_DECIMALS

    @property
    def is_native(self) -> bool:
        return self.address is None

    @property
    def abi_address(self) -> Address:
        """Address as passed to contracts (zero address for the native asset)."""
        return self.address if self.address is not None else Address.zero()


@dataclass(frozen=True)
class PoolSpec:
    """Static identity of a hub/other pool and its directional entry points."""

    address: Address
    hub: Token
    other: Token
    swap_from_hub_fn: str  # payable: hub in, other out
    swap_to_hub_fn: str  # other in, hub out

    @property
    def label(self) -> str:
        return f"{self.hub.symbol}/{self.other.symbol}"

    def counterpart(self, token: Token) -> Token:
        if token.symbol == self.hub.symbol:
            return self.other
        if token.symbol == self.other.symbol:
            return self.hub
        raise ValueError(f"{token.symbol} not in pool {self.label}")


@dataclass(frozen=True)
class NetworkConfig:
    chain_id: int
    name: str
    rpc_url: str
    explorer_url: str
    hub_symbol: TokenSymbol
    tokens: dict[TokenSymbol, Token] = field(default_factory=dict)
    pools: dict[TokenSymbol, PoolSpec] = field(default_factory=dict)
    router: Optional[Address] = None

    @property
    def hub(self) -> Token:
        return self.tokens[self.hub_symbol]

    def token(self, symbol: "str | TokenSymbol") -> Token:
        parsed = TokenSymbol.parse(symbol)
        token = self.tokens.get(parsed)
        if token is None:
            raise ValueError(f"{parsed} is not registered on {self.name}")
        return token

    def pool_for(self, token: Token) -> Optional[PoolSpec]:
        """Pool pairing ``token`` with the hub, if one is registered."""
        return self.pools.get(token.symbol)

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"


def _build_network(
    chain_id: int,
    name: str,
    rpc_url: str,
    explorer_url: str,
    token_addresses: dict[TokenSymbol, str],
    pool_addresses: dict[TokenSymbol, str],
    router: Optional[str] = None,
) -> NetworkConfig:
    names = {
        TokenSymbol.TTRUST: "Testnet TRUST (Native Token)",
        TokenSymbol.ORACLE: "Oracle Token",
        TokenSymbol.INTUIT: "INTUIT Token",
        TokenSymbol.TSWP: "TSWP Token (Governance)",
        TokenSymbol.PINTU: "PINTU Token (Staking)",
    }
    hub = Token(TokenSymbol.TTRUST, names[TokenSymbol.TTRUST])
    tokens: dict[TokenSymbol, Token] = {TokenSymbol.TTRUST: hub}
    for symbol, address in token_addresses.items():
        tokens[symbol] = Token(symbol, names[symbol], Address(address))

    pools: dict[TokenSymbol, PoolSpec] = {}
    for symbol, address in pool_addresses.items():
        # Contract entry points are named after the capitalized symbol,
        # e.g. swapTrustForIntuit / swapIntuitForTrust.
        suffix = symbol.value.capitalize()
        pools[symbol] = PoolSpec(
            address=Address(address),
            hub=hub,
            other=tokens[symbol],
            swap_from_hub_fn=f"swapTrustFor{suffix}",
            swap_to_hub_fn=f"swap{suffix}ForTrust",
        )

    return NetworkConfig(
        chain_id=chain_id,
        name=name,
        rpc_url=rpc_url,
        explorer_url=explorer_url,
        hub_symbol=TokenSymbol.TTRUST,
        tokens=tokens,
        pools=pools,
        router=Address(router) if router else None,
    )


INTUITION_TESTNET = _build_network(
    chain_id=13579,
    name="Intuition Testnet",
    rpc_url="https://testnet.rpc.intuition.systems",
    explorer_url="https://testnet.explorer.intuition.systems",
    token_addresses={
        TokenSymbol.ORACLE: "0x1AA6ad0A70Dd90796F2936BD11F0d4DEF7553b04",
        TokenSymbol.INTUIT: "0xD8a5a9b31c3C0232E196d518E89Fd8bF83AcAd43",
        TokenSymbol.TSWP: "0xDC11f7E700A4c898AE5CAddB1082cFfa76512aDD",
        TokenSymbol.PINTU: "0x51A1ceB83B83F1985a81C295d1fF28Afef186E02",
    },
    pool_addresses={
        TokenSymbol.ORACLE: "0x216cCe003Be533D11Fd4B6d87F066Eef48B42568",
        TokenSymbol.INTUIT: "0x36b58F5C1969B7b6591D752ea6F5486D069010AB",
        TokenSymbol.TSWP: "0x8198f5d8F8CfFE8f9C413d98a0A55aEB8ab9FbB7",
        TokenSymbol.PINTU: "0x0355B7B8cb128fA5692729Ab3AAa199C1753f726",
    },
    router="0x9A676e781A523b5d0C0e43731313A708CB607508",
)

LOCAL_HARDHAT = _build_network(
    chain_id=31337,
    name="Local Hardhat",
    rpc_url="http://127.0.0.1:8545",
    explorer_url="http://127.0.0.1:8545",
    token_addresses={
        TokenSymbol.ORACLE: "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0",
        TokenSymbol.INTUIT: "0xCf7Ed3AccA5a467e9e704C703E8D87F634fB0Fc9",
        TokenSymbol.TSWP: "0xDc64a140Aa3E981100a9becA4E685f962f0cF6C9",
        TokenSymbol.PINTU: "0x5FC8d32690cc91D4c39d9d3abcBD16989F875707",
    },
    pool_addresses={
        TokenSymbol.ORACLE: "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512",
    },
)

NETWORKS: dict[int, NetworkConfig] = {
    INTUITION_TESTNET.chain_id: INTUITION_TESTNET,
    LOCAL_HARDHAT.chain_id: LOCAL_HARDHAT,
}


def is_network_supported(chain_id: int) -> bool:
    return chain_id in NETWORKS


def get_network(chain_id: int) -> NetworkConfig:
    """Registry lookup; unknown chains fall back to the testnet."""
    network = NETWORKS.get(chain_id)
    if network is None:
        logger.warning(
            "Unsupported network %s, falling back to %s",
            chain_id,
            INTUITION_TESTNET.name,
        )
        return INTUITION_TESTNET
    return network
