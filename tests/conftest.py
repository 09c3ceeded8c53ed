"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timezone
from typing import Optional

from density_app.data.models import EventFilter, TransferEvent
from density_app.source.memory_source import InMemoryEventSource

# 2024-01-02T00:00:00Z
REFERENCE_TS = int(datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone.utc).timestamp())
HOUR = 3600
DAY = 86400


def make_transfer(ts: int, event_id: Optional[str] = None, sender: str = "0xsender") -> TransferEvent:
    """Build a transfer event at ``ts``."""
    return TransferEvent(
        timestamp_seconds=ts,
        event_id=event_id or f"tx-{ts}",
        sender=sender,
        recipient="0xrecipient",
        value=10 ** 18,
    )


@pytest.fixture
def reference_ts() -> int:
    """Reference instant used across scenarios: 2024-01-02T00:00:00Z."""
    return REFERENCE_TS


@pytest.fixture
def transfer_filter() -> EventFilter:
    """Transfer events on the Silo contract."""
    return EventFilter(event_name="Transfer", contract_name="Silo")


@pytest.fixture
def memory_source() -> InMemoryEventSource:
    """Empty in-memory event source."""
    return InMemoryEventSource()


@pytest.fixture
def hourly_scenario(memory_source: InMemoryEventSource, transfer_filter: EventFilter) -> InMemoryEventSource:
    """
    One transfer per hour across 2024-01-02 plus an extra one at 05:30,
    and three transfers at 05:xx on 2024-01-01.
    """
    current = [make_transfer(REFERENCE_TS + h * HOUR + 60, f"cur-{h}") for h in range(24)]
    current.append(make_transfer(REFERENCE_TS + 5 * HOUR + 1800, "cur-extra"))

    previous_day = REFERENCE_TS - DAY
    previous = [make_transfer(previous_day + 5 * HOUR + m * 60, f"prev-{m}") for m in (1, 2, 3)]

    memory_source.add_events(transfer_filter, current + previous)
    return memory_source
