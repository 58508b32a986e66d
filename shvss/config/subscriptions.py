"""Subscription management - the JSON file of followed channels."""

import json
import os
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

import aiohttp
import structlog

from .settings import settings
from ..errors import InvalidIdentifierError, StorageError
from ..ingestion.interfaces import Platform, Subscription, subscriptions_to_dict
from ..ingestion.platforms import YouTubeClient

logger = structlog.get_logger()

NameResolver = Callable[[str], Awaitable[str]]


FILE_MODE = 0o644
JSON_INDENT = 1


def split_records(data) -> Tuple[List[Subscription], List[Dict]]:
    """Split a subscriptions document into known subscriptions and foreign records.

    Foreign records name a service this program does not follow. They are kept
    as-is so that rewriting the file does not lose them.
    """
    if not isinstance(data, dict):
        raise StorageError("subscriptions document is not a JSON object")

    records = data.get("Subs") or []  # an empty set may be stored as null
    if not isinstance(records, list):
        raise StorageError("'Subs' is not a list")

    subscriptions = []
    foreign = []
    for record in records:
        try:
            subscriptions.append(Subscription.from_dict(record))
        except ValueError:
            logger.warning("subscription_unknown_service", record=record)
            foreign.append(record)
        except (KeyError, TypeError) as e:
            raise StorageError(f"malformed subscription record {record!r}: {e}") from e
    return subscriptions, foreign


def subscriptions_from_dict(data) -> List[Subscription]:
    """Read a subscriptions document. Records with an unknown service are skipped."""
    return split_records(data)[0]


class SubscriptionStore:
    """Ordered, de-duplicated subscriptions kept in one JSON file.

    Not safe for concurrent writers: every mutation rewrites the whole file
    from the state read at the start of the call.
    """

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        session: Optional[aiohttp.ClientSession] = None,
        name_resolver: Optional[NameResolver] = None
    ):
        self.path = Path(path) if path else Path(settings.subs_file)
        self.session = session
        self._resolve_name = name_resolver or self._resolve_youtube_name

    def ensure_exists(self) -> None:
        """Create an empty subscriptions file if there is none."""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"cannot create {self.path.parent}: {e}") from e
        self._save([])
        logger.info("subscriptions_file_created", path=str(self.path))

    def raw(self) -> bytes:
        """Return the file exactly as stored."""
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e

    def _load_document(self) -> Tuple[List[Subscription], List[Dict]]:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except OSError as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"cannot parse {self.path}: {e}") from e
        return split_records(data)

    def _load(self) -> List[Subscription]:
        return self._load_document()[0]

    def _save(self, subscriptions: List[Subscription], foreign: Sequence[Dict] = ()) -> None:
        """Save atomically (write to temp, then rename).

        Foreign records are written back after the known subscriptions.
        """
        document = subscriptions_to_dict(subscriptions)
        document["Subs"].extend(foreign)

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent,
                suffix=".json"
            )
            with os.fdopen(fd, 'w') as f:
                json.dump(document, f, indent=JSON_INDENT)
            # mkstemp creates the file 0600
            os.chmod(temp_path, FILE_MODE)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            raise StorageError(f"cannot write {self.path}: {e}") from e
        logger.debug(
            "subscriptions_saved",
            path=str(self.path),
            count=len(subscriptions),
            foreign=len(foreign)
        )

    def list_subscriptions(self) -> List[Subscription]:
        """List all subscriptions in insertion order."""
        return self._load()

    async def add_subscription(
        self,
        identifier: str,
        platform: Union[Platform, str]
    ) -> List[Subscription]:
        """Add a channel and return the resulting set.

        Adding a subscription that already exists changes nothing.
        """
        if not isinstance(platform, Platform):
            platform = Platform.parse(platform)
        identifier = (identifier or "").strip()
        if not identifier:
            raise InvalidIdentifierError("empty identifier")
        if platform is Platform.YOUTUBE:
            YouTubeClient.validate_channel_id(identifier)

        subscriptions, foreign = self._load_document()
        subscription = Subscription(
            name=await self._display_name(identifier, platform),
            uid=identifier,
            platform=platform
        )

        if subscription in subscriptions:
            logger.debug("subscription_exists", uid=identifier, service=platform.value)
            return subscriptions

        subscriptions.append(subscription)
        self._save(subscriptions, foreign)

        logger.info(
            "subscription_added",
            name=subscription.name,
            uid=identifier,
            service=platform.value
        )
        return subscriptions

    def remove_subscription(self, identifier: str) -> List[Subscription]:
        """Remove every subscription with this UID, whatever its platform."""
        subscriptions, foreign = self._load_document()
        remaining = [s for s in subscriptions if s.uid != identifier]
        kept_foreign = [r for r in foreign if r.get("UID") != identifier]

        removed = len(subscriptions) - len(remaining) + len(foreign) - len(kept_foreign)
        if removed:
            self._save(remaining, kept_foreign)
            logger.info("subscription_removed", uid=identifier, removed=removed)
        return remaining

    async def _display_name(self, identifier: str, platform: Platform) -> str:
        if platform is Platform.YOUTUBE:
            return await self._resolve_name(identifier)
        if platform is Platform.ODYSEE:
            return identifier.split(":")[0]
        return identifier

    async def _resolve_youtube_name(self, uid: str) -> str:
        async with YouTubeClient(session=self.session) as client:
            return await client.resolve_channel_name(uid)
