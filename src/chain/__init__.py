from .client import ChainClient, GasPrice
from .errors import (
    ChainError,
    ExecutionReverted,
    InsufficientFunds,
    NonceTooLow,
    ReplacementUnderpriced,
    RPCError,
    TransactionFailed,
    UserRejected,
)
from .transaction_builder import TransactionBuilder

__all__ = [
    "ChainClient",
    "GasPrice",
    "TransactionBuilder",
    "ChainError",
    "RPCError",
    "ExecutionReverted",
    "UserRejected",
    "TransactionFailed",
    "InsufficientFunds",
    "NonceTooLow",
    "ReplacementUnderpriced",
]
