"""Holders table: formats top holder balances for display."""

from typing import Optional

from ..data.models import HolderRow, TokenHolder, TokenOverview
from ..utils.formatting import (
    etherscan_url,
    format_timestamp,
    format_token_amount,
    format_transaction_count,
    format_usd_value,
    short_address,
)
from ..utils.time import ZoneLike


def holder_row(holder: TokenHolder, price_usd: Optional[float], tz: ZoneLike = "UTC") -> HolderRow:
    return HolderRow(
        address=holder.address,
        short_address=short_address(holder.address),
        explorer_url=etherscan_url(holder.address),
        balance=format_token_amount(holder.balance),
        balance_usd=format_usd_value(holder.balance, price_usd),
        total_sent=format_token_amount(holder.total_sent),
        total_received=format_token_amount(holder.total_received),
        transaction_count=format_transaction_count(holder.transaction_count),
        last_transaction=format_timestamp(holder.last_transaction_time, tz),
    )


def build_holder_rows(overview: TokenOverview, price_usd: Optional[float],
                      tz: ZoneLike = "UTC") -> tuple[HolderRow, ...]:
    """
    Format every holder in ``overview``, keeping its order.

    USD values render as ``"-"`` when no price is known.
    """
    return tuple(holder_row(h, price_usd, tz) for h in overview.holders)
