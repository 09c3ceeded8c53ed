"""
Data models and parsing module.

Immutable records for indexed events, bucket series, comparisons and price
snapshots, plus parsers for raw indexer rows.
"""
