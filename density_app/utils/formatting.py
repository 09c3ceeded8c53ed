"""
Display formatting for token amounts, USD values and addresses.

Amounts arrive as fixed-point integers. Output never depends on the process
locale.
"""

from datetime import datetime
from typing import Optional

from ..data.models import TOKEN_DECIMALS
from .time import MONTH_ABBR, ZoneLike, resolve_zone

ETHERSCAN_ADDRESS_URL = "https://etherscan.io/address/{address}"


def to_token_units(raw_amount: int, decimals: int = TOKEN_DECIMALS) -> float:
    """Convert a fixed-point on-chain amount into whole tokens."""
    return raw_amount / 10 ** decimals


def format_token_amount(raw_amount: int, decimals: int = TOKEN_DECIMALS) -> str:
    """Format a token amount as ``1.23M``, ``4.56K`` or ``7.89``."""
    num = to_token_units(raw_amount, decimals)
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return f"{num:.2f}"


def format_usd_value(raw_amount: int, price_usd: Optional[float],
                     decimals: int = TOKEN_DECIMALS) -> str:
    """Format the USD value of a token amount; ``"-"`` when no price is known."""
    if not price_usd:
        return "-"

    usd = to_token_units(raw_amount, decimals) * price_usd
    if usd >= 1_000_000_000:
        return f"${usd / 1_000_000_000:.2f}B"
    if usd >= 1_000_000:
        return f"${usd / 1_000_000:.2f}M"
    if usd >= 1_000:
        return f"${usd / 1_000:.2f}K"
    return f"${usd:.2f}"


def format_transaction_count(count: int) -> str:
    """Thousands-separated count: ``12,345``."""
    return f"{count:,}"


def short_address(address: str) -> str:
    """``0x123456...abcdef`` form used in holder tables."""
    if len(address) <= 14:
        return address
    return f"{address[:8]}...{address[-6:]}"


def etherscan_url(address: str) -> str:
    return ETHERSCAN_ADDRESS_URL.format(address=address)


def format_timestamp(epoch_seconds: int, tz: ZoneLike = "UTC") -> str:
    """Format as ``Jan 2, 2024 05:00`` in the given zone."""
    local = datetime.fromtimestamp(epoch_seconds, resolve_zone(tz))
    return f"{MONTH_ABBR[local.month - 1]} {local.day}, {local.year} {local.hour:02d}:{local.minute:02d}"
