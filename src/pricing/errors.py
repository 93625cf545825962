"""Quoting and routing exceptions."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for quoting errors."""


class RoutingError(PricingError):
    """No valid path between the requested tokens."""


class IdenticalTokens(RoutingError):
    """Input and output token are the same."""


class UnsupportedToken(RoutingError):
    """Token is unknown or has no registered pool."""


class ReserveUnavailable(PricingError):
    """Reserve read failed (RPC error or undecodable response)."""


class PoolNotFound(PricingError):
    """No contract code at the pool address."""


class InsufficientLiquidity(PricingError):
    """Path exists but the computed output is zero."""
