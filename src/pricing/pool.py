from __future__ import annotations

from decimal import Decimal

from core.tokens import PoolSpec, Token

from . import amm


class Pool:
    """
    A hub/other pool with a reserve snapshot.

    Instances are never mutated; ``simulate_swap`` returns a new pool.
    """

    def __init__(
        self,
        spec: PoolSpec,
        reserve_hub: int,
        reserve_other: int,
        fee_bps: int = amm.FEE_BPS,
    ):
        if not isinstance(reserve_hub, int) or not isinstance(reserve_other, int):
            raise TypeError("reserves must be int")
        if reserve_hub < 0 or reserve_other < 0:
            raise ValueError("reserves must be non-negative")
        self.spec = spec
        self.reserve_hub = reserve_hub
        self.reserve_other = reserve_other
        self.fee_bps = fee_bps

    @property
    def address(self):
        return self.spec.address

    def reserves_for_input(self, token_in: Token) -> tuple[int, int]:
        """(reserve_in, reserve_out) for a trade selling ``token_in``."""
        if token_in.symbol == self.spec.hub.symbol:
            return self.reserve_hub, self.reserve_other
        if token_in.symbol == self.spec.other.symbol:
            return self.reserve_other, self.reserve_hub
        raise ValueError(f"{token_in.symbol} not in pool {self.spec.label}")

    def get_amount_out(self, amount_in: int, token_in: Token) -> int:
        reserve_in, reserve_out = self.reserves_for_input(token_in)
        return amm.quote_output(amount_in, reserve_in, reserve_out, self.fee_bps)

    def get_amount_in(self, amount_out: int, token_out: Token) -> int:
        token_in = self.spec.counterpart(token_out)
        reserve_in, reserve_out = self.reserves_for_input(token_in)
        return amm.quote_input(amount_out, reserve_in, reserve_out, self.fee_bps)

    def get_price_impact(self, amount_in: int, token_in: Token) -> Decimal:
        reserve_in, _ = self.reserves_for_input(token_in)
        return amm.price_impact(amount_in, reserve_in)

    def get_spot_price(self, token_in: Token) -> Decimal:
        reserve_in, reserve_out = self.reserves_for_input(token_in)
        return amm.spot_price(reserve_in, reserve_out)

    def simulate_swap(self, amount_in: int, token_in: Token) -> "Pool":
        """Pool as it would look after the trade."""
        amount_out = self.get_amount_out(amount_in, token_in)
        if amount_out == 0:
            raise ValueError("insufficient liquidity for this trade")
        if token_in.symbol == self.spec.hub.symbol:
            reserve_hub = self.reserve_hub + amount_in
            reserve_other = self.reserve_other - amount_out
        else:
            reserve_hub = self.reserve_hub - amount_out
            reserve_other = self.reserve_other + amount_in
        return Pool(self.spec, reserve_hub, reserve_other, self.fee_bps)

    def __repr__(self) -> str:
        return (
            f"Pool({self.spec.label}, hub={self.reserve_hub}, "
            f"other={self.reserve_other})"
        )
