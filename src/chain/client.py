"""JSON-RPC client with retries, endpoint fallback and error classification."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from core.base_types import Address, TokenAmount, TransactionReceipt, TransactionRequest

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

logger = logging.getLogger(__name__)

USER_REJECTED_CODE = 4001
RETRYABLE_STATUS = frozenset({502, 503, 504})
_TRANSPORT_ERRORS = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)
_DECODE_ERRORS = (json.JSONDecodeError, requests.exceptions.JSONDecodeError)


@dataclass(frozen=True)
class GasPrice:
    """Current EIP-1559 fee information."""

    base_fee: int
    priority_fee_low: int
    priority_fee_medium: int
    priority_fee_high: int

    def priority_fee(self, priority: str = "medium") -> int:
        fee = {
            "low": self.priority_fee_low,
            "medium": self.priority_fee_medium,
            "high": self.priority_fee_high,
        }.get(priority)
        if fee is None:
            raise ValueError("priority must be low, medium, or high")
        return fee

    def get_max_fee(self, priority: str = "medium", buffer: float = 1.2) -> int:
        """maxFeePerGas with headroom for base fee growth."""
        if buffer <= 0:
            raise ValueError("buffer must be positive")
        return int(self.base_fee * buffer) + self.priority_fee(priority)


class ChainClient:
    """
    JSON-RPC client for the exchange's chain.

    Transport failures (timeouts, dropped connections, gateway 502/503/504
    and unparseable bodies) are retried with exponential backoff and then
    the next endpoint is tried. An endpoint that cannot be used at all, such
    as a malformed URL, is skipped without retrying. Every request failure
    surfaces as ``ChainError``. Errors returned by the node are classified
    and raised immediately.
    """

    def __init__(
        self,
        rpc_urls: list[str],
        timeout: int = 30,
        max_retries: int = 3,
    ):
        if not rpc_urls:
            raise ValueError("rpc_urls must not be empty")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._rpc_urls = list(rpc_urls)
        self._timeout = timeout
        self._max_retries = max_retries
        self._session = requests.Session()
        self._request_id = 0

    def get_chain_id(self) -> int:
        return _hex_to_int(self._rpc_call("eth_chainId", []))

    def get_balance(self, address: Address) -> TokenAmount:
        balance_hex = self._rpc_call("eth_getBalance", [address.checksum, "latest"])
        return TokenAmount(raw=_hex_to_int(balance_hex), symbol="tTRUST")

    def get_code(self, address: Address, block: str = "latest") -> bytes:
        return _hex_to_bytes(self._rpc_call("eth_getCode", [address.checksum, block]))

    def get_nonce(self, address: Address, block: str = "pending") -> int:
        nonce_hex = self._rpc_call("eth_getTransactionCount", [address.checksum, block])
        return _hex_to_int(nonce_hex)

    def get_gas_price(self) -> GasPrice:
        block = self._rpc_call("eth_getBlockByNumber", ["latest", False])
        base_fee = _hex_to_int(block.get("baseFeePerGas", "0x0"))
        priority_fee = _hex_to_int(self._rpc_call("eth_maxPriorityFeePerGas", []))
        return GasPrice(
            base_fee=base_fee,
            priority_fee_low=priority_fee,
            priority_fee_medium=priority_fee,
            priority_fee_high=int(priority_fee * 1.5),
        )

    def estimate_gas(self, tx: TransactionRequest) -> int:
        return _hex_to_int(self._rpc_call("eth_estimateGas", [tx.to_call_dict()]))

    def call(self, tx: TransactionRequest, block: str = "latest") -> bytes:
        result = self._rpc_call("eth_call", [tx.to_call_dict(), block])
        return _hex_to_bytes(result)

    def send_transaction(self, signed_tx: bytes) -> str:
        tx_hash = self._rpc_call("eth_sendRawTransaction", [f"0x{signed_tx.hex()}"])
        return str(tx_hash)

    def get_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        data = self._rpc_call("eth_getTransactionReceipt", [tx_hash])
        if data is None:
            return None
        return TransactionReceipt.from_rpc(data)

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: int = 120,
        poll_interval: float = 1.0,
    ) -> TransactionReceipt:
        start = time.time()
        while time.time() - start < timeout:
            receipt = self.get_receipt(tx_hash)
            if receipt is not None:
                if receipt.status is False:
                    raise TransactionFailed(tx_hash, receipt)
                return receipt
            time.sleep(poll_interval)
        raise TimeoutError(f"Timed out waiting for receipt {tx_hash}")

    def _rpc_call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        last_error: Optional[Exception] = None
        for url in self._rpc_urls:
            for attempt in range(self._max_retries):
                start = time.perf_counter()
                try:
                    response = self._session.post(
                        url,
                        json=payload,
                        timeout=self._timeout,
                    )
                    elapsed = time.perf_counter() - start
                    logger.info("rpc %s %s in %.3fs", method, url, elapsed)
                    status = response.status_code
                    if status in RETRYABLE_STATUS:
                        last_error = RPCError(f"HTTP {status} from {url}", code=status)
                        self._log_attempt(method, attempt, url, last_error)
                        self._sleep_backoff(attempt)
                        continue
                    if status >= 400:
                        raise RPCError(f"HTTP {status} from {url}", code=status)
                    data = response.json()
                    if "error" in data:
                        self._raise_rpc_error(data["error"])
                    return data.get("result")
                except _TRANSPORT_ERRORS as exc:
                    last_error = exc
                    self._log_attempt(method, attempt, url, exc)
                    self._sleep_backoff(attempt)
                except _DECODE_ERRORS as exc:
                    last_error = exc
                    self._sleep_backoff(attempt)
                except requests.RequestException as exc:
                    last_error = exc
                    logger.warning("rpc %s skipping %s: %s", method, url, exc)
                    break
        raise ChainError(f"RPC request {method} failed") from last_error

    def _log_attempt(
        self, method: str, attempt: int, url: str, exc: Exception
    ) -> None:
        logger.warning(
            "rpc %s attempt %d/%d on %s failed: %s",
            method,
            attempt + 1,
            self._max_retries,
            url,
            exc,
        )

    def _sleep_backoff(self, attempt: int) -> None:
        time.sleep(0.5 * (2**attempt))

    def _raise_rpc_error(self, error: dict) -> None:
        message = str(error.get("message", "RPC error"))
        code = error.get("code")
        data = error.get("data")
        lowered = message.lower()
        if code == USER_REJECTED_CODE or "user rejected" in lowered:
            raise UserRejected(message, code=code, data=data)
        if "user denied" in lowered:
            raise UserRejected(message, code=code, data=data)
        if "insufficient funds" in lowered:
            raise InsufficientFunds(message)
        if "nonce too low" in lowered:
            raise NonceTooLow(message)
        if "replacement transaction underpriced" in lowered:
            raise ReplacementUnderpriced(message)
        if "revert" in lowered:
            raise ExecutionReverted(message, code=code, data=data)
        raise RPCError(message, code=code, data=data)


def _hex_to_int(value: str) -> int:
    if not isinstance(value, str):
        raise RPCError("Expected hex string result")
    return int(value, 16)


def _hex_to_bytes(value: str) -> bytes:
    if not isinstance(value, str):
        raise RPCError("Expected hex string result")
    normalized = value[2:] if value.startswith("0x") else value
    if normalized == "":
        return b""
    return bytes.fromhex(normalized)
