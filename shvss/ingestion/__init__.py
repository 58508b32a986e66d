"""Feed ingestion - fetching and normalizing platform feeds."""

from .interfaces import (
    AggregationResult, FeedClientInterface, FeedFailure, Platform,
    Subscription, VideoEntry, subscriptions_to_dict
)
from .fetcher import FeedClient, build_session
from .platforms import OdyseeClient, RumbleClient, YouTubeClient, client_for

__all__ = [
    "AggregationResult", "FeedClientInterface", "FeedFailure", "Platform",
    "Subscription", "VideoEntry", "subscriptions_to_dict",
    "FeedClient", "build_session",
    "OdyseeClient", "RumbleClient", "YouTubeClient", "client_for"
]
