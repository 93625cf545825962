"""Local signing wallet used to submit planned swap steps."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from eth_account import Account
from eth_account.datastructures import SignedTransaction
from eth_utils.address import to_checksum_address

from .base_types import Address


def _mask_private_key(private_key: Any) -> str:
    raw = private_key.hex() if isinstance(private_key, (bytes, bytearray)) else str(
        private_key
    )
    raw = raw.removeprefix("0x")
    if len(raw) < 10:
        return "<redacted>"
    return f"0x{raw[:6]}...{raw[-4:]}"


class WalletManager:
    """
    Trading account that signs approval and swap steps.

    When ``chain_id`` is given the wallet refuses to sign payloads for any
    other chain. The private key never appears in logs, errors or reprs.
    """

    def __init__(self, private_key: str | bytes, chain_id: Optional[int] = None):
        try:
            self._account = Account.from_key(private_key)
        except Exception as exc:
            masked = _mask_private_key(private_key)
            raise ValueError(f"Invalid private key: {masked}") from exc
        self.chain_id = chain_id

    @classmethod
    def from_env(
        cls, env_var: str = "PRIVATE_KEY", chain_id: Optional[int] = None
    ) -> "WalletManager":
        value = os.environ.get(env_var)
        if not value:
            raise ValueError(f"Environment variable {env_var} is not set")
        return cls(value, chain_id=chain_id)

    @classmethod
    def from_keyfile(
        cls, path: str, password: str, chain_id: Optional[int] = None
    ) -> "WalletManager":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        try:
            private_key = Account.decrypt(data, password)
        except ValueError as exc:
            raise ValueError("Failed to decrypt keyfile") from exc
        return cls(private_key, chain_id=chain_id)

    @property
    def address(self) -> str:
        return to_checksum_address(self._account.address)

    @property
    def account(self) -> Address:
        return Address(self.address)

    def sign_transaction(self, tx: dict) -> SignedTransaction:
        if not isinstance(tx, dict):
            raise TypeError("tx must be a dict")
        if not tx:
            raise ValueError("tx must not be empty")
        target = tx.get("chainId")
        if self.chain_id is not None and target != self.chain_id:
            raise ValueError(
                f"Refusing to sign for chain {target}; wallet is bound to "
                f"chain {self.chain_id}"
            )
        return self._account.sign_transaction(tx)

    def __repr__(self) -> str:
        bound = "" if self.chain_id is None else f", chain_id={self.chain_id}"
        return f"WalletManager(address={self.address}{bound})"

    __str__ = __repr__
