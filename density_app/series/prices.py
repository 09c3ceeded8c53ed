"""Price series for the price chart: chronological points and padded axis bounds."""

import math
from typing import Iterable

from ..data.models import PricePoint, PriceSeries, PriceSnapshot
from ..utils.formatting import format_timestamp
from ..utils.time import ZoneLike


def build_price_series(snapshots: Iterable[PriceSnapshot], tz: ZoneLike = "UTC") -> PriceSeries:
    """
    Build a chart-ready price series.

    The indexer returns snapshots newest first; points are ordered oldest
    first. The current price is the newest snapshot. Axis bounds pad the
    observed range by 5% and round outward to cents.
    """
    ordered = sorted(snapshots, key=lambda s: s.timestamp_seconds)
    if not ordered:
        return PriceSeries()

    points = tuple(
        PricePoint(
            timestamp_seconds=s.timestamp_seconds,
            label=format_timestamp(s.timestamp_seconds, tz),
            price_usd=s.price_usd,
        )
        for s in ordered
    )
    prices = [p.price_usd for p in points]

    return PriceSeries(
        points=points,
        current_price=points[-1].price_usd,
        axis_min=math.floor(min(prices) * 0.95 * 100) / 100,
        axis_max=math.ceil(max(prices) * 1.05 * 100) / 100,
    )
