"""Runtime settings for quoting and execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .tokens import INTUITION_TESTNET

MIN_SLIPPAGE = Decimal("0.1")
MAX_SLIPPAGE = Decimal("10.0")
DEFAULT_SLIPPAGE = Decimal("0.5")
SLIPPAGE_PRESETS = (Decimal("0.1"), Decimal("0.5"), Decimal("1.0"), Decimal("2.0"))


def clamp_slippage(value: "Decimal | str | int") -> Decimal:
    """Clamp a slippage percentage into [0.1, 10.0]."""
    if isinstance(value, float):
        raise TypeError("slippage must be Decimal, str or int, not float")
    slippage = Decimal(value)
    if slippage.is_nan():
        raise ValueError("slippage must be a number")
    return min(max(slippage, MIN_SLIPPAGE), MAX_SLIPPAGE)


@dataclass(frozen=True)
class SwapSettings:
    chain_id: int = INTUITION_TESTNET.chain_id
    rpc_urls: tuple[str, ...] = field(default=(INTUITION_TESTNET.rpc_url,))
    default_slippage: Decimal = DEFAULT_SLIPPAGE
    debounce_seconds: float = 0.5
    refresh_seconds: float = 30.0
    quote_ttl_seconds: float = 15.0
    impact_cap: Decimal = Decimal("15")
    rpc_timeout: int = 30
    rpc_max_retries: int = 3
    gas_priority: str = "medium"
    receipt_timeout: int = 120

    def __post_init__(self) -> None:
        if not self.rpc_urls:
            raise ValueError("rpc_urls must not be empty")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must be non-negative")
        if self.refresh_seconds <= 0:
            raise ValueError("refresh_seconds must be positive")
        if self.quote_ttl_seconds <= 0:
            raise ValueError("quote_ttl_seconds must be positive")
        if self.gas_priority not in ("low", "medium", "high"):
            raise ValueError("gas_priority must be low, medium, or high")
        object.__setattr__(
            self, "default_slippage", clamp_slippage(self.default_slippage)
        )
