"""Exceptions raised by the RPC client while reading pools or sending swaps."""

from __future__ import annotations

from typing import Optional

from core.base_types import TransactionReceipt


class ChainError(Exception):
    """Base class for anything that went wrong talking to the node."""


class RPCError(ChainError):
    """Node answered with a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[object] = None,
    ):
        self.code = code
        self.data = data
        super().__init__(message)


class ExecutionReverted(RPCError):
    """A pool or router call reverted during eth_call or gas estimation."""


class UserRejected(RPCError):
    """Signer declined the swap or approval (EIP-1193 code 4001)."""


class TransactionFailed(ChainError):
    """Swap or approval was mined with status 0."""

    def __init__(self, tx_hash: str, receipt: TransactionReceipt):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(
            f"Transaction {tx_hash} reverted in block {receipt.block_number}"
        )


class InsufficientFunds(ChainError):
    """Account cannot cover amount in plus gas."""


class NonceTooLow(ChainError):
    """A previous step already consumed this nonce."""


class ReplacementUnderpriced(ChainError):
    """Resubmitted step did not raise the fee enough."""
