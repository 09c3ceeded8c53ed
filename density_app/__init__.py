"""
Density App - On-chain Event Density & Period Comparison Engine

Data core for a token activity dashboard. Pages through indexed on-chain
events, buckets them into hourly or daily series, and compares the current
period against the one immediately before it.
"""

__version__ = "0.1.0"
__author__ = "Density Team"
