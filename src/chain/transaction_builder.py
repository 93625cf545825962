"""Turns one planned approval or swap step into a signed EIP-1559 transaction."""

from __future__ import annotations

import dataclasses
from typing import Optional

from eth_account.datastructures import SignedTransaction

from core.base_types import Address, TokenAmount, TransactionRequest
from core.wallet_manager import WalletManager

from .client import ChainClient


class TransactionBuilder:
    """
    Fluent builder for a single step sent from ``wallet``.

    Usage:
        signed = (TransactionBuilder(client, wallet)
            .to(pool_address)
            .value(TokenAmount(raw=amount_in))
            .data(calldata)
            .chain_id(13579)
            .with_gas_estimate()
            .with_gas_price("medium")
            .build_and_sign())

    The nonce comes from the pending block, so a swap built after its
    approval was mined picks up the next nonce.
    """

    def __init__(self, client: ChainClient, wallet: WalletManager):
        self._client = client
        self._wallet = wallet
        self._sender = Address.from_string(wallet.address)
        self._to: Optional[Address] = None
        self._value = TokenAmount(raw=0)
        self._data = b""
        self._chain_id: Optional[int] = None
        self._nonce: Optional[int] = None
        self._gas_limit: Optional[int] = None
        self._max_fee: Optional[int] = None
        self._priority_fee: Optional[int] = None

    def to(self, address: Address) -> "TransactionBuilder":
        self._to = address
        return self

    def value(self, amount: TokenAmount) -> "TransactionBuilder":
        self._value = amount
        return self

    def data(self, calldata: bytes) -> "TransactionBuilder":
        self._data = calldata
        return self

    def chain_id(self, chain_id: int) -> "TransactionBuilder":
        if chain_id <= 0:
            raise ValueError("chain_id must be positive")
        self._chain_id = chain_id
        return self

    def with_gas_estimate(self, buffer: float = 1.2) -> "TransactionBuilder":
        """Estimate as the sender and pad by ``buffer``.

        A swap whose minimum-output guard cannot be met already reverts here.
        """
        if buffer <= 0:
            raise ValueError("buffer must be positive")
        estimate = self._client.estimate_gas(self._request())
        self._gas_limit = int(estimate * buffer)
        return self

    def with_gas_price(self, priority: str = "medium") -> "TransactionBuilder":
        gas = self._client.get_gas_price()
        self._priority_fee = gas.priority_fee(priority)
        self._max_fee = gas.get_max_fee(priority)
        return self

    def build(self) -> TransactionRequest:
        request = self._request()
        if self._chain_id is None:
            raise ValueError("chain_id is required")
        if self._gas_limit is None:
            raise ValueError("gas_limit is required (call with_gas_estimate)")
        if self._max_fee is None or self._priority_fee is None:
            raise ValueError("fees are required (call with_gas_price)")
        return dataclasses.replace(request, chain_id=self._chain_id)

    def build_and_sign(self) -> SignedTransaction:
        payload = self.build().to_dict()
        payload.pop("from", None)
        return self._wallet.sign_transaction(payload)

    def _request(self) -> TransactionRequest:
        if self._to is None:
            raise ValueError("to address is required")
        if self._nonce is None:
            self._nonce = self._client.get_nonce(self._sender)
        return TransactionRequest(
            to=self._to,
            value=self._value,
            data=self._data,
            sender=self._sender,
            nonce=self._nonce,
            gas_limit=self._gas_limit,
            max_fee_per_gas=self._max_fee,
            max_priority_fee=self._priority_fee,
        )
