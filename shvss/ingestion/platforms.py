"""Feed clients for Rumble, Odysee and YouTube."""

import re
from typing import Optional
from xml.etree import ElementTree as ET

import aiohttp
import structlog

from .fetcher import FeedClient, _image_href, _media_thumbnail, _text
from .interfaces import Platform, VideoEntry
from ..config.settings import settings
from ..errors import InvalidIdentifierError, ParseError

logger = structlog.get_logger()

EMBED_URL_RE = re.compile(r"https://rumble\.com/embed/[a-zA-Z0-9]+/", re.IGNORECASE)

YOUTUBE_CHANNEL_ID_LENGTH = 24
YOUTUBE_CHANNEL_ID_PREFIX = "UC"

ITEM_IMAGE_KEY = "item_image_href"


class RumbleClient(FeedClient):
    """Rumble has no native feed; items come from the rssgen.xyz generator."""

    platform = Platform.RUMBLE

    def _default_base_url(self) -> str:
        return settings.rumble_feed_url

    def parse(self, body: bytes, url: str = ""):
        """Parse the generator feed and attach each item's plain ``<image href>``.

        feedparser drops an ``<image>`` inside an item, so the hrefs are read
        from the document again and matched to the entries by position.
        """
        feed = super().parse(body, url)
        try:
            root = ET.fromstring(body)
        except ET.ParseError as e:
            raise ParseError(f"rumble feed {url or '<body>'} is malformed: {e}") from e

        for item, element in zip(feed.entries, root.iter("item")):
            image = element.find("image")
            if image is not None and image.get("href"):
                item[ITEM_IMAGE_KEY] = image.get("href")
        return feed

    def _to_entry(self, item, identifier: str, name: Optional[str]) -> VideoEntry:
        # Generator items carry no author, so the subscription name stands in
        return VideoEntry(
            platform=self.platform,
            published_at=_text(item, "published"),
            title=_text(item, "title"),
            author=name if name is not None else identifier,
            video_ref=_text(item, "id"),
            thumbnail_url=(
                _text(item, ITEM_IMAGE_KEY) or _image_href(item) or _media_thumbnail(item)
            ),
        )

    async def lookup_embed_url(self, video_url: str) -> str:
        """Find the embeddable player URL on a Rumble video page."""
        body = await self.get_text(video_url)
        for line in body.split("\n"):
            if "embedUrl" not in line:
                continue
            match = EMBED_URL_RE.search(line)
            if match:
                return match.group(0)
            raise ParseError(f"'embedUrl' in {video_url} holds no rumble embed link")
        raise ParseError(f"failed to find 'embedUrl' in document {video_url}")


class OdyseeClient(FeedClient):
    """Odysee RSS export at odysee.com/$/rss/@<name:claimID>."""

    platform = Platform.ODYSEE

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
        embed_url: Optional[str] = None
    ):
        super().__init__(session, base_url)
        self.embed_url = embed_url if embed_url is not None else settings.odysee_embed_url

    def _default_base_url(self) -> str:
        return settings.odysee_feed_url

    def embed_reference(self, identifier: str, link: str) -> str:
        """Build the embed URL from the last path segment of an item link.

        The feed's own link points at the watch page, which cannot be framed.
        """
        slug = link.split("/")[-1]
        return f"{self.embed_url}{identifier}/{slug}"

    def _to_entry(self, item, identifier: str, name: Optional[str]) -> VideoEntry:
        return VideoEntry(
            platform=self.platform,
            published_at=_text(item, "published"),
            title=_text(item, "title"),
            author=_text(item, "author"),
            video_ref=self.embed_reference(identifier, _text(item, "link")),
            thumbnail_url=_image_href(item) or _media_thumbnail(item),
        )


class YouTubeClient(FeedClient):
    """YouTube Atom export at /feeds/videos.xml?channel_id=<UID>."""

    platform = Platform.YOUTUBE
    feed_flavor = "atom"

    def _default_base_url(self) -> str:
        return settings.youtube_feed_url

    @staticmethod
    def validate_channel_id(uid: str) -> str:
        """Check a channel id is 24 characters and starts with UC."""
        if len(uid) != YOUTUBE_CHANNEL_ID_LENGTH or not uid.startswith(YOUTUBE_CHANNEL_ID_PREFIX):
            raise InvalidIdentifierError(
                f"not a youtube channel id: {uid!r} (length={len(uid)})"
            )
        return uid

    def _to_entry(self, item, identifier: str, name: Optional[str]) -> VideoEntry:
        return VideoEntry(
            platform=self.platform,
            published_at=_text(item, "published"),
            title=_text(item, "title"),
            author=_text(item, "author"),
            video_ref=_text(item, "yt_videoid"),
            thumbnail_url=_media_thumbnail(item),
        )

    async def resolve_channel_name(self, uid: str) -> str:
        """Return the channel's display name from its own feed."""
        self.validate_channel_id(uid)
        feed = await self.fetch_feed(uid)
        name = feed.feed.get("author") or ""
        logger.debug("channel_name_resolved", uid=uid, name=name)
        return name


def client_for(
    platform: Platform,
    session: Optional[aiohttp.ClientSession] = None
) -> FeedClient:
    """Return the feed client for ``platform``."""
    if platform is Platform.RUMBLE:
        return RumbleClient(session)
    if platform is Platform.ODYSEE:
        return OdyseeClient(session)
    if platform is Platform.YOUTUBE:
        return YouTubeClient(session)
    raise ValueError(f"no feed client for {platform!r}")
