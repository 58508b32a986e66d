"""Interface definitions for feed ingestion."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..errors import InvalidIdentifierError


class Platform(Enum):
    """Supported video platforms, valued by their persisted service tag."""
    RUMBLE = "rumble"    # rssgen.xyz generator feed
    ODYSEE = "odysee"    # native RSS export
    YOUTUBE = "youtube"  # native Atom export

    @classmethod
    def parse(cls, tag: str) -> "Platform":
        """Map a user supplied service tag onto a Platform."""
        try:
            return cls((tag or "").strip().lower())
        except ValueError:
            raise InvalidIdentifierError(f"unknown service: {tag!r}") from None


@dataclass(frozen=True)
class Subscription:
    """One channel on one platform."""
    name: str
    uid: str
    platform: Platform

    def to_dict(self) -> dict:
        """Convert to the persisted record shape."""
        return {
            "Name": self.name,
            "UID": self.uid,
            "Service": self.platform.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Subscription":
        """Build from a persisted record. Raises ValueError on an unknown service."""
        platform = Platform(data["Service"])
        return cls(name=data["Name"], uid=data["UID"], platform=platform)


@dataclass(frozen=True)
class VideoEntry:
    """A feed item normalized across platforms.

    ``published_at`` keeps each platform's own timestamp format.
    """
    platform: Platform
    published_at: str = ""
    title: str = ""
    author: str = ""
    video_ref: str = ""
    thumbnail_url: str = ""

    def to_dict(self) -> dict:
        """Convert to the wire shape served by /videos."""
        return {
            "Service": self.platform.value,
            "Date": self.published_at,
            "VidName": self.title,
            "UserName": self.author,
            "VidID": self.video_ref,
            "VidImg": self.thumbnail_url,
        }


@dataclass
class FeedFailure:
    """A subscription whose feed contributed nothing to a run."""
    subscription: Subscription
    error: str


@dataclass
class AggregationResult:
    """Output of one aggregation run. Entry order is unspecified."""
    entries: List[VideoEntry] = field(default_factory=list)
    failures: List[FeedFailure] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"Entries": [e.to_dict() for e in self.entries]}


def subscriptions_to_dict(subscriptions: List[Subscription]) -> dict:
    """Convert an ordered subscription set to the subscriptions file document."""
    return {"Subs": [s.to_dict() for s in subscriptions]}


class FeedClientInterface:
    """Interface for a single platform's feed client."""

    platform: Platform

    async def fetch(self, identifier: str, name: Optional[str] = None) -> List[VideoEntry]:
        """Fetch and normalize the feed of one channel."""
        raise NotImplementedError
