"""
Indexer row parsers for converting raw GraphQL records to normalized objects.

Rows come back from a Hasura-style indexer as JSON objects whose numeric
fields are frequently strings (uint256 values, ISO timestamps). This module
converts them into the frozen event, price and holder models.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from ..errors import MalformedEventError
from .models import (
    EventPage,
    PriceSnapshot,
    RawEvent,
    TokenHolder,
    TokenStatistics,
    event_kind,
)

logger = structlog.get_logger(__name__)


def parse_timestamp(value: Any) -> int:
    """
    Parse an indexer timestamp into integer epoch seconds.

    Accepts integers, floats, numeric strings and ISO8601 strings. Naive ISO
    strings are treated as UTC, which is how the indexer writes
    ``db_write_timestamp``.

    Raises:
        MalformedEventError: If the value is missing or not a timestamp
    """
    if value is None:
        raise MalformedEventError("Missing timestamp", expected_format="epoch seconds or ISO8601")

    if isinstance(value, bool):
        raise MalformedEventError(
            "Boolean is not a timestamp", raw_data=str(value), expected_format="epoch seconds or ISO8601"
        )

    if isinstance(value, (int, float)):
        return _finite_seconds(value, value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise MalformedEventError("Empty timestamp", expected_format="epoch seconds or ISO8601")
        try:
            numeric = float(text)
        except ValueError:
            numeric = None
        if numeric is not None:
            return _finite_seconds(numeric, text)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedEventError(
                f"Invalid timestamp: {text}", raw_data=text[:100], expected_format="ISO8601"
            ) from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())

    raise MalformedEventError(
        f"Unsupported timestamp type: {type(value).__name__}",
        raw_data=str(value)[:100],
        expected_format="epoch seconds or ISO8601",
    )


def _finite_seconds(number: float, raw: Any) -> int:
    # inf and nan cannot be converted to int
    if isinstance(number, float) and not math.isfinite(number):
        raise MalformedEventError(
            f"Non-finite timestamp: {raw}", raw_data=str(raw)[:100], expected_format="epoch seconds"
        )
    return int(number)


def parse_uint(value: Any, field_name: str) -> int:
    """Parse an on-chain integer that may arrive as a decimal string."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise MalformedEventError(f"Invalid integer for {field_name}", raw_data=str(value))
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(
            f"Invalid integer for {field_name}: {value}", raw_data=str(value)[:100]
        ) from e


def parse_event_row(event_name: str, row: Any, timestamp_field: str = "db_write_timestamp") -> RawEvent:
    """
    Parse one indexer row into the event kind named by ``event_name``.

    Raises:
        MalformedEventError: If the row is not an object or its timestamp is invalid
    """
    if not isinstance(row, dict):
        raise MalformedEventError(
            f"Event row must be an object, got {type(row).__name__}", raw_data=str(row)[:100]
        )

    kind = event_kind(event_name)
    timestamp = parse_timestamp(row.get(timestamp_field))

    kwargs: dict[str, Any] = {
        "timestamp_seconds": timestamp,
        "event_name": event_name,
        "event_id": str(row["id"]) if row.get("id") is not None else None,
    }

    for graphql_field, attr in kind.FIELD_MAP.items():
        raw = row.get(graphql_field)
        if attr in ("value", "previous_balance", "new_balance"):
            kwargs[attr] = parse_uint(raw, graphql_field)
        else:
            kwargs[attr] = str(raw) if raw is not None else ""

    return kind(**kwargs)


def parse_event_rows(event_name: str, rows: Any, timestamp_field: str = "db_write_timestamp") -> EventPage:
    """
    Parse a page of indexer rows, skipping and counting malformed ones.

    The returned page keeps the raw row count so pagination is unaffected by
    skipped rows.
    """
    if not isinstance(rows, list):
        raise MalformedEventError(
            f"Expected a list of rows, got {type(rows).__name__}", raw_data=str(rows)[:100]
        )

    events = []
    malformed = 0

    for i, row in enumerate(rows):
        try:
            events.append(parse_event_row(event_name, row, timestamp_field))
        except MalformedEventError as e:
            malformed += 1
            logger.debug(
                "Skipping malformed event row",
                event_name=event_name,
                row_index=i,
                error=str(e),
                raw_data=e.raw_data,
            )

    if malformed:
        logger.warning(
            "Malformed event rows skipped",
            event_name=event_name,
            malformed=malformed,
            row_count=len(rows),
        )

    return EventPage(events=tuple(events), row_count=len(rows), malformed=malformed)


def parse_price_snapshots(rows: Any) -> list[PriceSnapshot]:
    """Parse ``<Symbol>PriceSnapshot`` rows, skipping malformed ones."""
    if not isinstance(rows, list):
        raise MalformedEventError("Expected a list of price rows", raw_data=str(rows)[:100])

    snapshots = []
    for row in rows:
        try:
            if not isinstance(row, dict):
                raise MalformedEventError("Price row must be an object", raw_data=str(row)[:100])
            snapshots.append(PriceSnapshot(
                price_usd_raw=parse_uint(row.get("priceUSD"), "priceUSD"),
                timestamp_seconds=parse_timestamp(row.get("timestamp")),
            ))
        except MalformedEventError as e:
            logger.warning("Skipping malformed price snapshot", error=str(e))

    return snapshots


def parse_token_holder(row: dict[str, Any]) -> TokenHolder:
    """Parse one ``TokenHolder`` row."""
    address = row.get("id")
    if not address:
        raise MalformedEventError("Token holder missing id", raw_data=str(row)[:100])

    last_tx: Optional[Any] = row.get("lastTransactionTime")
    return TokenHolder(
        address=str(address),
        balance=parse_uint(row.get("balance"), "balance"),
        total_sent=parse_uint(row.get("totalSent"), "totalSent"),
        total_received=parse_uint(row.get("totalReceived"), "totalReceived"),
        last_transaction_time=parse_timestamp(last_tx) if last_tx is not None else 0,
        transaction_count=parse_uint(row.get("transactionCount"), "transactionCount"),
    )


def parse_token_statistics(row: dict[str, Any]) -> TokenStatistics:
    """Parse one ``TokenStatistics`` row."""
    return TokenStatistics(
        id=str(row.get("id", "")),
        total_holders=parse_uint(row.get("totalHolders"), "totalHolders"),
        total_supply=parse_uint(row.get("totalSupply"), "totalSupply"),
        total_transfers=parse_uint(row.get("totalTransfers"), "totalTransfers"),
    )
