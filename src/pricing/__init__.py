from .amm import FEE_BPS, compound_impacts, minimum_received, price_impact, quote_output
from .errors import (
    IdenticalTokens,
    InsufficientLiquidity,
    PoolNotFound,
    PricingError,
    ReserveUnavailable,
    RoutingError,
    UnsupportedToken,
)
from .path import SwapPath, resolve_path
from .pool import Pool
from .quote import Quote, QuoteErrorKind, QuoteOrchestrator, QuoteResult
from .reserves import ReserveReader, ReserveSnapshot
from .strategies import LocalAmmStrategy, OnChainQuoteStrategy

__all__ = [
    "FEE_BPS",
    "quote_output",
    "price_impact",
    "compound_impacts",
    "minimum_received",
    "PricingError",
    "RoutingError",
    "IdenticalTokens",
    "UnsupportedToken",
    "ReserveUnavailable",
    "PoolNotFound",
    "InsufficientLiquidity",
    "SwapPath",
    "resolve_path",
    "Pool",
    "Quote",
    "QuoteErrorKind",
    "QuoteOrchestrator",
    "QuoteResult",
    "ReserveReader",
    "ReserveSnapshot",
    "LocalAmmStrategy",
    "OnChainQuoteStrategy",
]
