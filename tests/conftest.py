"""Test configuration for module import paths and a shared fake chain."""

from __future__ import annotations

import sys
from pathlib import Path


def _ensure_paths() -> None:
    root = Path(__file__).resolve().parents[1]
    for path in (root / "src", root):
        value = str(path)
        if value not in sys.path:
            sys.path.insert(0, value)


_ensure_paths()

import pytest  # noqa: E402
from eth_abi import decode, encode  # noqa: E402

from chain.client import GasPrice  # noqa: E402
from chain.contracts import (  # noqa: E402
    ALLOWANCE,
    BALANCE_OF,
    GET_AMOUNT_OUT,
    GET_DEX_STATS,
    selector,
)
from chain.errors import ChainError, TransactionFailed  # noqa: E402
from core.base_types import TokenAmount, TransactionReceipt  # noqa: E402
from core.tokens import INTUITION_TESTNET  # noqa: E402
from pricing import amm  # noqa: E402

E18 = 10**18


class FakeChain:
    """
    In-memory stand-in for ``ChainClient``.

    ``eth_call`` is answered for the pool and token selectors the project
    uses; every pool of the testnet registry starts deployed with
    1000 tTRUST / 500000 other.
    """

    def __init__(self, network=INTUITION_TESTNET):
        self.network = network
        self.chain_id = network.chain_id
        self.reserves = {
            spec.address.lower: [1000 * E18, 500_000 * E18]
            for spec in network.pools.values()
        }
        self.deployed = set(self.reserves)
        self.allowances: dict[tuple[str, str], int] = {}
        self.balances: dict[str, int] = {}
        self.native_balance = 0
        self.calls: list = []
        self.fail_reads = 0
        self.garbage = False
        self.fail_amount_out = False
        self.estimates: list = []
        self.sent: list[bytes] = []
        self.send_error: Exception | None = None
        self.estimate_error: Exception | None = None
        self.revert_receipts = False
        self.code_checks = 0

    def get_chain_id(self):
        return self.chain_id

    def get_code(self, address, block="latest"):
        self.code_checks += 1
        return b"\x60\x80" if address.lower in self.deployed else b""

    def get_balance(self, address):
        return TokenAmount(raw=self.native_balance, symbol="tTRUST")

    def get_nonce(self, address, block="pending"):
        return len(self.sent)

    def get_gas_price(self):
        return GasPrice(
            base_fee=10, priority_fee_low=1, priority_fee_medium=2, priority_fee_high=3
        )

    def estimate_gas(self, tx):
        self.estimates.append(tx)
        if self.estimate_error is not None:
            raise self.estimate_error
        return 100_000

    def call(self, tx, block="latest"):
        self.calls.append(tx)
        if self.fail_reads:
            self.fail_reads -= 1
            raise ChainError("RPC request eth_call failed")
        if self.garbage:
            return b"\x01"
        sig, args = tx.data[:4], tx.data[4:]
        target = tx.to.lower
        if sig == selector(GET_DEX_STATS):
            hub, other = self.reserves[target]
            return encode(["uint256"] * 5, [hub, other, 7 * E18, 3, hub * 2])
        if sig == selector(GET_AMOUNT_OUT):
            if self.fail_amount_out:
                raise ChainError("RPC request eth_call failed")
            token_in, amount_in = decode(["address", "uint256"], args)
            hub, other = self.reserves[target]
            if int(token_in, 16) == 0:
                return encode(["uint256"], [amm.quote_output(amount_in, hub, other)])
            return encode(["uint256"], [amm.quote_output(amount_in, other, hub)])
        if sig == selector(BALANCE_OF):
            (owner,) = decode(["address"], args)
            return encode(["uint256"], [self.balances.get(target, 0)])
        if sig == selector(ALLOWANCE):
            _, spender = decode(["address", "address"], args)
            key = (target, spender.lower())
            return encode(["uint256"], [self.allowances.get(key, 0)])
        raise ChainError("execution reverted")

    def send_transaction(self, signed_tx):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(signed_tx)
        return f"0x{len(self.sent):064x}"

    def wait_for_receipt(self, tx_hash, timeout=120, poll_interval=1.0):
        receipt = TransactionReceipt(
            tx_hash=tx_hash,
            block_number=100 + len(self.sent),
            status=not self.revert_receipts,
            gas_used=90_000,
            effective_gas_price=12,
            logs=[],
        )
        if not receipt.status:
            raise TransactionFailed(tx_hash, receipt)
        return receipt


@pytest.fixture
def chain():
    return FakeChain()
