"""Core value types shared by the chain, pricing and executor packages."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from eth_utils.address import is_address, to_checksum_address

WEI_DECIMALS = 18
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class Address:
    """Checksummed EVM address."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("Address value must be a string")
        if not is_address(self.value):
            raise ValueError("Invalid Ethereum address")
        object.__setattr__(self, "value", to_checksum_address(self.value))

    @classmethod
    def from_string(cls, s: str) -> "Address":
        return cls(s)

    @classmethod
    def zero(cls) -> "Address":
        return cls(ZERO_ADDRESS)

    @property
    def checksum(self) -> str:
        return self.value

    @property
    def lower(self) -> str:
        return self.value.lower()

    @property
    def is_zero(self) -> bool:
        return self.lower == ZERO_ADDRESS

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.lower == other.lower
        if isinstance(other, str):
            return self.lower == other.lower()
        return False

    def __hash__(self) -> int:
        return hash(self.lower)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TokenAmount:
    """
    Token amount stored as raw base units.

    All pool math works on ``raw``; ``human`` is for display and CLI input.
    """

    raw: int
    decimals: int = WEI_DECIMALS
    symbol: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int):
            raise TypeError("raw must be an int")
        if not isinstance(self.decimals, int) or self.decimals < 0:
            raise ValueError("decimals must be a non-negative integer")

    @classmethod
    def from_human(
        cls,
        amount: str | Decimal,
        decimals: int = WEI_DECIMALS,
        symbol: str | None = None,
    ) -> "TokenAmount":
        """Parse a human amount such as ``"1.5"`` into base units."""
        if isinstance(amount, float):
            raise TypeError("amount must be a string or Decimal, not float")
        if isinstance(amount, str):
            decimal_amount = Decimal(amount.strip().replace("_", ""))
        elif isinstance(amount, Decimal):
            decimal_amount = amount
        else:
            raise TypeError("amount must be a string or Decimal")

        raw_decimal = decimal_amount * (Decimal(10) ** decimals)
        if raw_decimal != raw_decimal.to_integral_value():
            raise ValueError("amount has more precision than decimals allow")
        return cls(raw=int(raw_decimal), decimals=decimals, symbol=symbol)

    @property
    def human(self) -> Decimal:
        return Decimal(self.raw) / (Decimal(10) ** self.decimals)

    def __str__(self) -> str:
        return f"{self.human.normalize():f} {self.symbol or ''}".strip()


@dataclass
class TransactionRequest:
    """An unsigned transaction or read-only call."""

    to: Address
    value: TokenAmount
    data: bytes
    sender: Optional[Address] = None
    nonce: Optional[int] = None
    gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee: Optional[int] = None
    chain_id: int = 1

    def to_dict(self) -> dict:
        """Convert to a web3/eth_account-compatible dict."""
        payload: dict[str, object] = {
            "to": self.to.checksum,
            "value": self.value.raw,
            "data": f"0x{self.data.hex()}",
            "chainId": self.chain_id,
        }
        if self.sender is not None:
            payload["from"] = self.sender.checksum
        if self.nonce is not None:
            payload["nonce"] = self.nonce
        if self.gas_limit is not None:
            payload["gas"] = self.gas_limit
        if self.max_fee_per_gas is not None:
            payload["maxFeePerGas"] = self.max_fee_per_gas
        if self.max_priority_fee is not None:
            payload["maxPriorityFeePerGas"] = self.max_priority_fee
        return payload

    def to_call_dict(self) -> dict:
        """Subset accepted by ``eth_call`` / ``eth_estimateGas`` (hex quantities)."""
        payload: dict[str, object] = {
            "to": self.to.checksum,
            "data": f"0x{self.data.hex()}",
        }
        if self.value.raw:
            payload["value"] = hex(self.value.raw)
        if self.sender is not None:
            payload["from"] = self.sender.checksum
        return payload


@dataclass
class TransactionReceipt:
    """Parsed transaction receipt."""

    tx_hash: str
    block_number: int
    status: bool
    gas_used: int
    effective_gas_price: int
    logs: list

    @property
    def tx_fee(self) -> TokenAmount:
        return TokenAmount(
            raw=self.gas_used * self.effective_gas_price,
            decimals=WEI_DECIMALS,
        )

    @classmethod
    def from_rpc(cls, receipt: dict) -> "TransactionReceipt":
        """Parse an ``eth_getTransactionReceipt`` result."""
        tx_hash = receipt.get("transactionHash")
        if hasattr(tx_hash, "hex"):
            tx_hash_value = tx_hash.hex()
        else:
            tx_hash_value = str(tx_hash)

        status_value = receipt.get("status")
        if isinstance(status_value, bool):
            status = status_value
        elif isinstance(status_value, (int, str)):
            status = _to_int(status_value) == 1
        else:
            raise ValueError("Invalid status in receipt")

        return cls(
            tx_hash=tx_hash_value,
            block_number=_to_int(receipt.get("blockNumber")),
            status=status,
            gas_used=_to_int(receipt.get("gasUsed")),
            effective_gas_price=_to_int(receipt.get("effectiveGasPrice", 0)),
            logs=receipt.get("logs", []),
        )


def _to_int(value: object) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    raise ValueError("Expected integer-like value")
