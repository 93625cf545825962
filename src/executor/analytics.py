"""Swap reporting hooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from core.base_types import Address, TokenAmount
from core.tokens import NetworkConfig
from pricing.quote import Quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapRecord:
    tx_hash: str
    account: Address
    pair_label: str
    amount_label: str
    hub_volume: int  # hub-side amount of the trade, in base units


class AnalyticsSink(Protocol):
    def record_swap(self, record: SwapRecord) -> None:
        ...


class LoggingAnalytics:
    def record_swap(self, record: SwapRecord) -> None:
        logger.info(
            "swap %s by %s: %s (%s), hub volume %d",
            record.tx_hash,
            record.account,
            record.pair_label,
            record.amount_label,
            record.hub_volume,
        )


def hub_volume(quote: Quote, network: NetworkConfig) -> int:
    """Hub amount moved by the trade; the intermediate amount for 2-hop swaps."""
    hub = network.hub_symbol
    if quote.token_in.symbol == hub:
        return quote.amount_in
    if quote.token_out.symbol == hub:
        return quote.amount_out
    return quote.hops[0].amount_out


def build_record(
    quote: Quote, account: Address, tx_hash: str, network: NetworkConfig
) -> SwapRecord:
    amount_in = TokenAmount(
        raw=quote.amount_in,
        decimals=quote.token_in.decimals,
        symbol=str(quote.token_in.symbol),
    )
    return SwapRecord(
        tx_hash=tx_hash,
        account=account,
        pair_label=f"{quote.token_in.symbol}→{quote.token_out.symbol}",
        amount_label=str(amount_in),
        hub_volume=hub_volume(quote, network),
    )
