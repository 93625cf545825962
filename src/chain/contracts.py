"""
ABI helpers for the exchange contracts.

Selectors are derived from the function signatures and arguments are
encoded with eth_abi, so no compiled ABI JSON is needed.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_abi import decode
from eth_abi import encode as abi_encode
from eth_utils.crypto import keccak

from core.base_types import Address, TokenAmount, TransactionRequest

from .client import ChainClient

GET_DEX_STATS = "getDEXStats()"
GET_AMOUNT_OUT = "getAmountOut(address,uint256)"
BALANCE_OF = "balanceOf(address)"
ALLOWANCE = "allowance(address,address)"
APPROVE = "approve(address,uint256)"
ROUTER_SWAP = "swap(address,address,uint256,uint256)"


@dataclass(frozen=True)
class DexStats:
    hub_reserve: int
    token_reserve: int
    total_volume: int
    total_trades: int
    total_liquidity: int


def selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


def encode_call(signature: str, arg_types: list[str], args: list) -> bytes:
    return selector(signature) + abi_encode(arg_types, args)


def pool_swap_signature(function_name: str) -> str:
    """Directional pool entry points all take (amountIn, minAmountOut)."""
    return f"{function_name}(uint256,uint256)"


def pool_swap_calldata(
    function_name: str, amount_in: int, min_amount_out: int
) -> bytes:
    return encode_call(
        pool_swap_signature(function_name),
        ["uint256", "uint256"],
        [amount_in, min_amount_out],
    )


def router_swap_calldata(
    token_in: Address, token_out: Address, amount_in: int, min_amount_out: int
) -> bytes:
    return encode_call(
        ROUTER_SWAP,
        ["address", "address", "uint256", "uint256"],
        [token_in.checksum, token_out.checksum, amount_in, min_amount_out],
    )


def approve_calldata(spender: Address, amount: int) -> bytes:
    return encode_call(APPROVE, ["address", "uint256"], [spender.checksum, amount])


def read_dex_stats(client: ChainClient, pool: Address) -> DexStats:
    raw = _read(client, pool, selector(GET_DEX_STATS))
    values = decode(["uint256"] * 5, raw)
    return DexStats(*(int(value) for value in values))


def read_amount_out(
    client: ChainClient, pool: Address, token_in: Address, amount_in: int
) -> int:
    data = encode_call(
        GET_AMOUNT_OUT, ["address", "uint256"], [token_in.checksum, amount_in]
    )
    (amount_out,) = decode(["uint256"], _read(client, pool, data))
    return int(amount_out)


def read_balance_of(client: ChainClient, token: Address, owner: Address) -> int:
    data = encode_call(BALANCE_OF, ["address"], [owner.checksum])
    (balance,) = decode(["uint256"], _read(client, token, data))
    return int(balance)


def read_allowance(
    client: ChainClient, token: Address, owner: Address, spender: Address
) -> int:
    data = encode_call(
        ALLOWANCE, ["address", "address"], [owner.checksum, spender.checksum]
    )
    (allowance,) = decode(["uint256"], _read(client, token, data))
    return int(allowance)


def _read(client: ChainClient, to: Address, data: bytes) -> bytes:
    tx = TransactionRequest(to=to, value=TokenAmount(raw=0), data=data)
    return client.call(tx)
