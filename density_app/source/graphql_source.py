"""GraphQL indexer event source (Hasura-style HyperIndex endpoint)."""

import socket
import time
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import orjson

from ..config.defaults import SourceParams
from ..data.models import EventPage, PageRequest, PriceSnapshot, TokenOverview, event_kind
from ..data.parsers import (
    parse_event_rows,
    parse_price_snapshots,
    parse_token_holder,
    parse_token_statistics,
)
from ..errors import MalformedEventError, SourceUnavailableError
from ..utils.time import format_iso
from .base import BaseEventSource


class GraphQLEventSource(BaseEventSource):
    """Fetches indexed events over HTTP POST GraphQL queries."""

    def __init__(self, config: Optional[SourceParams] = None, name: str = "graphql"):
        super().__init__(name)
        self.config: SourceParams = config or SourceParams()

        parsed = urlparse(self.config.url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid GraphQL URL: {self.config.url}")

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    def _timestamp_literal(self, epoch_seconds: int) -> str:
        if self.config.timestamp_format == "unix":
            return str(epoch_seconds)
        return f'"{format_iso(epoch_seconds)}"'

    def build_events_query(self, request: PageRequest) -> str:
        """Build the page query for an event table."""
        ts_field = self.config.timestamp_field
        direction = "asc" if request.ascending else "desc"
        fields = ["id", ts_field, *event_kind(request.event_filter.event_name).FIELD_MAP.keys()]

        return (
            "query FetchEvents {\n"
            f"  {request.event_filter.table_name}(\n"
            f"    limit: {request.limit}\n"
            f"    offset: {request.offset}\n"
            f"    order_by: [{{{ts_field}: {direction}}}, {{id: {direction}}}]\n"
            f"    where: {{{ts_field}: {{_gte: {self._timestamp_literal(request.window.start_inclusive)}, "
            f"_lt: {self._timestamp_literal(request.window.end_exclusive)}}}}}\n"
            "  ) {\n"
            f"    {' '.join(fields)}\n"
            "  }\n"
            "}"
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def execute(self, query: str, operation: str) -> dict[str, Any]:
        """
        Execute a GraphQL query with retry on network and 5xx errors.

        Returns:
            The ``data`` object of the response

        Raises:
            SourceUnavailableError: On transport failure, non-JSON response or
                GraphQL errors
        """
        attempt = 0

        while True:
            try:
                return self._execute_once(query, operation)
            except _RetryableSourceError as e:
                attempt += 1
                if attempt > self.config.retry_attempts:
                    self._record_error()
                    raise SourceUnavailableError(
                        f"{operation} failed after {attempt} attempts: {e}",
                        source=self.name,
                        operation=operation,
                    ) from e
                self.logger.warning(
                    "GraphQL request failed, retrying",
                    operation=operation,
                    attempt=attempt,
                    retry_delay_seconds=self.config.retry_delay_seconds,
                    error=str(e),
                )
                time.sleep(self.config.retry_delay_seconds)

    def _execute_once(self, query: str, operation: str) -> dict[str, Any]:
        data = orjson.dumps({"query": query})
        headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(data)),
            'User-Agent': 'density-app/0.1',
        }
        if self.config.admin_secret:
            headers['x-hasura-admin-secret'] = self.config.admin_secret

        req = Request(self.config.url, data=data, headers=headers, method="POST")

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                body = response.read()
        except HTTPError as e:
            if e.code >= 500:
                raise _RetryableSourceError(f"HTTP {e.code}: {e.reason}") from e
            self._record_error()
            raise SourceUnavailableError(
                f"HTTP {e.code}: {e.reason}", source=self.name, operation=operation
            ) from e
        except (URLError, socket.timeout, OSError) as e:
            raise _RetryableSourceError(f"Network error: {e}") from e

        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            self._record_error()
            raise SourceUnavailableError(
                f"Invalid JSON response: {body[:100]!r}", source=self.name, operation=operation
            ) from e

        if not isinstance(payload, dict):
            self._record_error()
            raise SourceUnavailableError(
                "GraphQL response must be an object", source=self.name, operation=operation
            )

        if payload.get("errors"):
            self._record_error()
            message = payload["errors"][0].get("message", "unknown error")
            raise SourceUnavailableError(
                f"GraphQL error: {message}",
                source=self.name,
                operation=operation,
                context={"errors": payload["errors"]},
            )

        result = payload.get("data")
        if not isinstance(result, dict):
            self._record_error()
            raise SourceUnavailableError(
                "GraphQL response missing data", source=self.name, operation=operation
            )

        return result

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def fetch_page(self, request: PageRequest) -> EventPage:
        """Fetch one page of events from the indexer table for the filter."""
        table = request.event_filter.table_name
        data = self.execute(self.build_events_query(request), operation=f"fetch_page:{table}")

        if table not in data:
            self._record_error()
            raise SourceUnavailableError(
                f"Response missing table {table}", source=self.name, operation="fetch_page"
            )

        try:
            page = parse_event_rows(
                request.event_filter.event_name, data[table], self.config.timestamp_field
            )
        except MalformedEventError as e:
            self._record_error()
            raise SourceUnavailableError(
                f"Unusable rows for {table}: {e}", source=self.name, operation="fetch_page"
            ) from e

        self._record_request(page.row_count)
        self.logger.debug(
            "Fetched event page",
            table=table,
            offset=request.offset,
            limit=request.limit,
            row_count=page.row_count,
            malformed=page.malformed,
        )
        return page

    def fetch_price_snapshots(self, symbol: str, limit: int) -> list[PriceSnapshot]:
        """Fetch the most recent ``<symbol>PriceSnapshot`` rows, newest first."""
        table = f"{symbol}PriceSnapshot"
        query = (
            "query FetchPrices {\n"
            f"  {table}(limit: {limit}, order_by: {{timestamp: desc}}) {{\n"
            "    priceUSD\n"
            "    timestamp\n"
            "  }\n"
            "}"
        )
        data = self.execute(query, operation="fetch_price_snapshots")
        try:
            snapshots = parse_price_snapshots(data.get(table, []))
        except MalformedEventError as e:
            raise SourceUnavailableError(
                f"Unusable price rows: {e}", source=self.name, operation="fetch_price_snapshots"
            ) from e
        self._record_request(len(snapshots))
        return snapshots

    def fetch_token_overview(self, holder_limit: int) -> TokenOverview:
        """Fetch the top holders by balance and the ``current`` statistics row."""
        query = (
            "query FetchTokenOverview {\n"
            f"  TokenHolder(limit: {holder_limit}, order_by: {{balance: desc}}) {{\n"
            "    id balance totalSent totalReceived lastTransactionTime transactionCount\n"
            "  }\n"
            '  TokenStatistics(where: {id: {_eq: "current"}}) {\n'
            "    id totalHolders totalSupply totalTransfers\n"
            "  }\n"
            "}"
        )
        data = self.execute(query, operation="fetch_token_overview")

        try:
            holders = tuple(parse_token_holder(row) for row in data.get("TokenHolder", []))
            stats_rows = data.get("TokenStatistics", [])
            statistics = parse_token_statistics(stats_rows[0]) if stats_rows else None
        except MalformedEventError as e:
            raise SourceUnavailableError(
                f"Unusable holder rows: {e}", source=self.name, operation="fetch_token_overview"
            ) from e

        self._record_request(len(holders))
        return TokenOverview(holders=holders, statistics=statistics)

    def health_check(self) -> bool:
        """Check if the GraphQL endpoint answers a trivial query."""
        try:
            self._execute_once("query Health { __typename }", operation="health_check")
            return True
        except (SourceUnavailableError, _RetryableSourceError) as e:
            self.logger.warning("Health check failed", source=self.name, error=str(e))
            return False


class _RetryableSourceError(Exception):
    """Transient transport failure; retried before surfacing as SourceUnavailableError."""
    pass
