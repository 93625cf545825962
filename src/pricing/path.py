from __future__ import annotations

from dataclasses import dataclass

from core.tokens import NetworkConfig, PoolSpec, Token, TokenSymbol

from .errors import IdenticalTokens, UnsupportedToken


@dataclass(frozen=True)
class Hop:
    pool: PoolSpec
    token_in: Token
    token_out: Token


@dataclass(frozen=True)
class SwapPath:
    """One or two hub pools connecting ``token_in`` to ``token_out``."""

    token_in: Token
    token_out: Token
    pools: tuple[PoolSpec, ...]

    def __post_init__(self) -> None:
        if not self.pools:
            raise ValueError("path must contain at least one pool")
        if len(self.pools) > 2:
            raise ValueError("path may contain at most two pools")

    @property
    def num_hops(self) -> int:
        return len(self.pools)

    @property
    def is_multi_hop(self) -> bool:
        return len(self.pools) > 1

    @property
    def hops(self) -> list[Hop]:
        hops = []
        current = self.token_in
        for pool in self.pools:
            nxt = pool.counterpart(current)
            hops.append(Hop(pool=pool, token_in=current, token_out=nxt))
            current = nxt
        return hops

    @property
    def label(self) -> str:
        symbols = [str(self.token_in.symbol)]
        symbols += [str(hop.token_out.symbol) for hop in self.hops]
        return " → ".join(symbols)


def resolve_path(
    network: NetworkConfig,
    token_in: "str | TokenSymbol | Token",
    token_out: "str | TokenSymbol | Token",
) -> SwapPath:
    """
    Pick the pools for a swap.

    A trade touching the hub uses the pool of the other token; a trade
    between two non-hub tokens goes through both of their hub pools.
    """
    source = _lookup(network, token_in)
    target = _lookup(network, token_out)
    if source.symbol == target.symbol:
        raise IdenticalTokens(f"Cannot swap {source.symbol} for itself")

    hub = network.hub
    if source.symbol == hub.symbol:
        return SwapPath(source, target, (_pool(network, target),))
    if target.symbol == hub.symbol:
        return SwapPath(source, target, (_pool(network, source),))
    return SwapPath(source, target, (_pool(network, source), _pool(network, target)))


def _lookup(network: NetworkConfig, token: "str | TokenSymbol | Token") -> Token:
    if isinstance(token, Token):
        token = token.symbol
    try:
        return network.token(token)
    except ValueError as exc:
        raise UnsupportedToken(str(exc)) from exc


def _pool(network: NetworkConfig, token: Token) -> PoolSpec:
    pool = network.pool_for(token)
    if pool is None:
        raise UnsupportedToken(f"No {token.symbol} pool on {network.name}")
    return pool
