"""Aggregation of subscription feeds."""

from .aggregator import FeedAggregator, aggregate, aggregate_from_store

__all__ = ["FeedAggregator", "aggregate", "aggregate_from_store"]
