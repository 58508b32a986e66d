"""Concurrent aggregation of every subscription's feed into one result."""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Callable, Iterable, List, Optional

import aiohttp
import structlog

from ..config.settings import settings
from ..ingestion.fetcher import FeedClient, build_session
from ..ingestion.interfaces import AggregationResult, FeedFailure, Platform, Subscription, VideoEntry
from ..ingestion.platforms import client_for

logger = structlog.get_logger()

ClientFactory = Callable[[Platform, Optional[aiohttp.ClientSession]], FeedClient]


class FeedAggregator:
    """Fetches all subscriptions concurrently and merges their entries.

    One task is started per subscription. A feed that cannot be fetched or
    parsed is logged and contributes nothing; the run itself never fails
    because of it.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        max_concurrency: Optional[int] = None,
        client_factory: ClientFactory = client_for
    ):
        self.session = session
        self.max_concurrency = (
            max_concurrency if max_concurrency is not None
            else settings.max_concurrent_fetches
        )
        self.client_factory = client_factory

    @asynccontextmanager
    async def _session_scope(self):
        if self.session is not None:
            yield self.session
            return
        session = build_session()
        try:
            yield session
        finally:
            await session.close()

    async def aggregate(self, subscriptions: Iterable[Subscription]) -> AggregationResult:
        """Fetch every subscription's feed and return all entries."""
        snapshot = list(subscriptions)
        result = AggregationResult()
        if not snapshot:
            return result

        start_time = time.time()
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async with self._session_scope() as session:
            tasks = [self._fetch_one(sub, session, semaphore) for sub in snapshot]
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        for subscription, outcome in zip(snapshot, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "feed_fetch_failed",
                    service=subscription.platform.value,
                    name=subscription.name,
                    uid=subscription.uid,
                    error_type=type(outcome).__name__,
                    error=str(outcome)
                )
                result.failures.append(FeedFailure(subscription, str(outcome)))
                continue
            result.entries.extend(outcome)

        logger.info(
            "all_feeds_fetched",
            total=len(result.entries),
            feeds=len(snapshot),
            failed=len(result.failures),
            time_ms=int((time.time() - start_time) * 1000)
        )
        return result

    async def _fetch_one(
        self,
        subscription: Subscription,
        session: aiohttp.ClientSession,
        semaphore: Optional[asyncio.Semaphore]
    ) -> List[VideoEntry]:
        client = self.client_factory(subscription.platform, session)
        if semaphore is None:
            return await client.fetch(subscription.uid, subscription.name)
        async with semaphore:
            return await client.fetch(subscription.uid, subscription.name)


async def aggregate(
    subscriptions: Iterable[Subscription],
    session: Optional[aiohttp.ClientSession] = None
) -> AggregationResult:
    """Convenience function to aggregate with default settings."""
    return await FeedAggregator(session=session).aggregate(subscriptions)


async def aggregate_from_store(store, aggregator: Optional[FeedAggregator] = None) -> AggregationResult:
    """Aggregate the store's current subscriptions. StorageError propagates."""
    subscriptions = store.list_subscriptions()
    return await (aggregator or FeedAggregator()).aggregate(subscriptions)
