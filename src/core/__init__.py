from .base_types import Address, TokenAmount, TransactionReceipt, TransactionRequest
from .settings import SwapSettings, clamp_slippage
from .tokens import (
    NETWORKS,
    NetworkConfig,
    PoolSpec,
    Token,
    TokenSymbol,
    get_network,
    is_network_supported,
)

__all__ = [
    "Address",
    "TokenAmount",
    "TransactionRequest",
    "TransactionReceipt",
    "SwapSettings",
    "clamp_slippage",
    "NETWORKS",
    "NetworkConfig",
    "PoolSpec",
    "Token",
    "TokenSymbol",
    "get_network",
    "is_network_supported",
]
