"""Base feed client: one HTTP GET per feed, parsed with feedparser."""

import asyncio
import time
import xml.sax
from typing import List, Optional

import aiohttp
import feedparser
import structlog

from .interfaces import FeedClientInterface, Platform, VideoEntry
from ..config.settings import settings
from ..errors import ParseError, TransportError

logger = structlog.get_logger()


def build_session(timeout_seconds: Optional[float] = None) -> aiohttp.ClientSession:
    """Create the HTTP session shared by the clients of one run."""
    if timeout_seconds is None:
        timeout_seconds = settings.fetch_timeout_seconds
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout_seconds),
        headers={"User-Agent": settings.user_agent}
    )


class FeedClient(FeedClientInterface):
    """Fetches one platform's feed and maps its items onto VideoEntry.

    Subclasses set ``platform`` and implement ``_to_entry``. ``feed_flavor``
    is the prefix feedparser must report as the document version. A session
    can be passed in to share connections across clients; otherwise the
    client opens its own when used as an async context manager.
    """

    platform: Platform
    feed_flavor = "rss"

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None
    ):
        self.session = session
        self.base_url = base_url if base_url is not None else self._default_base_url()
        self._owns_session = False

    async def __aenter__(self):
        if self.session is None:
            self.session = build_session()
            self._owns_session = True
        return self

    async def __aexit__(self, *args):
        if self._owns_session and self.session:
            await self.session.close()
            self.session = None
            self._owns_session = False

    def _default_base_url(self) -> str:
        raise NotImplementedError

    def feed_url(self, identifier: str) -> str:
        return f"{self.base_url}{identifier}"

    async def get_bytes(self, url: str) -> bytes:
        """GET ``url`` and return the whole body undecoded."""
        if self.session is None:
            raise RuntimeError("client has no session; use 'async with' or pass one in")

        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise TransportError(
                        f"GET {url} returned HTTP {response.status}",
                        url=url,
                        status=response.status
                    )
                return await response.read()
        except aiohttp.ClientError as e:
            raise TransportError(f"GET {url} failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"GET {url} timed out", url=url) from e

    async def get_text(self, url: str) -> str:
        """GET ``url`` as UTF-8 text; undecodable bytes become U+FFFD."""
        body = await self.get_bytes(url)
        return body.decode("utf-8", errors="replace")

    def parse(self, body: bytes, url: str = ""):
        """Parse a feed body.

        Raises ParseError for malformed XML and for documents that are not
        this platform's kind of feed. feedparser works out the character
        encoding from the XML prolog, so ``body`` should be the raw bytes.
        """
        where = url or "<body>"
        feed = feedparser.parse(body)

        error = feed.get("bozo_exception")
        if feed.get("bozo") and isinstance(error, xml.sax.SAXException):
            raise ParseError(f"{self.platform.value} feed {where} is malformed: {error}")

        version = feed.get("version") or ""
        if not version.startswith(self.feed_flavor):
            reason = f"got {version!r}" if version else "no RSS or Atom document found"
            raise ParseError(
                f"{self.platform.value} feed {where} is not {self.feed_flavor}: {reason}"
            )
        return feed

    async def fetch_feed(self, identifier: str):
        """Fetch and parse the raw feed for ``identifier``."""
        url = self.feed_url(identifier)
        body = await self.get_bytes(url)
        return self.parse(body, url)

    async def fetch(self, identifier: str, name: Optional[str] = None) -> List[VideoEntry]:
        """Fetch one channel's feed and normalize every item."""
        start_time = time.time()
        feed = await self.fetch_feed(identifier)
        entries = [self._to_entry(item, identifier, name) for item in feed.entries]

        logger.info(
            "feed_fetched",
            service=self.platform.value,
            uid=identifier,
            entries=len(entries),
            time_ms=int((time.time() - start_time) * 1000)
        )
        return entries

    def _to_entry(self, item, identifier: str, name: Optional[str]) -> VideoEntry:
        raise NotImplementedError


def _text(item, key: str) -> str:
    return item.get(key) or ""


def _image_href(item) -> str:
    image = item.get("image") or {}
    return image.get("href") or ""


def _media_thumbnail(item) -> str:
    for thumb in item.get("media_thumbnail") or []:
        if thumb.get("url"):
            return thumb["url"]
    return ""
