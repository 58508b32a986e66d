"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


YOUTUBE_UID = "UCabcdefghijklmnopqrstuv"
ODYSEE_UID = "alice:abc"
RUMBLE_UID = "ExampleChannel"

RUMBLE_URL = "http://rssgen.xyz/rumble/" + RUMBLE_UID
ODYSEE_URL = "https://odysee.com/$/rss/@" + ODYSEE_UID
YOUTUBE_URL = "https://www.youtube.com/feeds/videos.xml?channel_id=" + YOUTUBE_UID


RUMBLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>ExampleChannel</title>
    <link>https://rumble.com/c/ExampleChannel</link>
    <description>Videos from ExampleChannel</description>
    <item>
      <title>First Upload</title>
      <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
      <guid isPermaLink="true">https://rumble.com/v1abcd-first-upload.html</guid>
      <description>The first one</description>
      <itunes:image href="https://sp.rmbl.ws/thumb1.jpg"/>
    </item>
    <item>
      <title>Second Upload</title>
      <pubDate>Tue, 02 Jan 2024 12:00:00 GMT</pubDate>
      <guid isPermaLink="true">https://rumble.com/v2efgh-second-upload.html</guid>
      <media:thumbnail url="https://sp.rmbl.ws/thumb2.jpg"/>
    </item>
  </channel>
</rss>
"""

ODYSEE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>alice</title>
    <link>https://odysee.com/@alice:abc</link>
    <description>alice on odysee</description>
    <item>
      <title>Slug Video</title>
      <link>https://host/a/b/c/slug123</link>
      <guid isPermaLink="false">abc123</guid>
      <pubDate>Wed, 03 Jan 2024 08:30:00 GMT</pubDate>
      <author>alice</author>
      <itunes:image href="https://thumbs.odycdn.com/slug123.webp"/>
    </item>
    <item>
      <title>Another Video</title>
      <link>https://odysee.com/@alice:abc/another-video:9</link>
      <guid isPermaLink="false">def456</guid>
      <pubDate>Thu, 04 Jan 2024 08:30:00 GMT</pubDate>
      <author>alice</author>
      <itunes:image href="https://thumbs.odycdn.com/another.webp"/>
    </item>
  </channel>
</rss>
"""

YOUTUBE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015"
      xmlns:media="http://search.yahoo.com/mrss/"
      xmlns="http://www.w3.org/2005/Atom">
  <link rel="self" href="http://www.youtube.com/feeds/videos.xml?channel_id=UCabcdefghijklmnopqrstuv"/>
  <id>yt:channel:abcdefghijklmnopqrstuv</id>
  <yt:channelId>abcdefghijklmnopqrstuv</yt:channelId>
  <title>Example Channel</title>
  <author>
    <name>Example Channel</name>
    <uri>https://www.youtube.com/channel/UCabcdefghijklmnopqrstuv</uri>
  </author>
  <published>2015-03-01T00:00:00+00:00</published>
  <entry>
    <id>yt:video:dQw4w9WgXcQ</id>
    <yt:videoId>dQw4w9WgXcQ</yt:videoId>
    <yt:channelId>abcdefghijklmnopqrstuv</yt:channelId>
    <title>Video One</title>
    <link rel="alternate" href="https://www.youtube.com/watch?v=dQw4w9WgXcQ"/>
    <author>
      <name>Example Channel</name>
      <uri>https://www.youtube.com/channel/UCabcdefghijklmnopqrstuv</uri>
    </author>
    <published>2024-01-05T15:00:00+00:00</published>
    <updated>2024-01-06T15:00:00+00:00</updated>
    <media:group>
      <media:title>Video One</media:title>
      <media:content url="https://www.youtube.com/v/dQw4w9WgXcQ?version=3" type="application/x-shockwave-flash" width="640" height="390"/>
      <media:thumbnail url="https://i1.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg" width="480" height="360"/>
      <media:description>The only video</media:description>
    </media:group>
  </entry>
</feed>
"""

RUMBLE_VIDEO_PAGE = """<html>
<head>
<script type="application/ld+json">[{"@context":"https://schema.org","@type":"VideoObject","embedUrl":"https://rumble.com/embed/v4xyz12/","name":"First Upload"}]</script>
</head>
<body>video</body>
</html>
"""

# rssgen.xyz output: a plain <image href> per item, no itunes or media tags
RUMBLE_GENERATOR_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>ExampleChannel</title>
    <link>https://rumble.com/c/ExampleChannel</link>
    <description>ExampleChannel on Rumble</description>
    <item>
      <title>Plain Image Upload</title>
      <link>https://rumble.com/v5plain-upload.html</link>
      <guid>https://rumble.com/v5plain-upload.html</guid>
      <pubDate>Fri, 05 Jan 2024 10:00:00 GMT</pubDate>
      <image href="https://sp.rmbl.ws/plain.jpg"/>
    </item>
    <item>
      <title>No Image Upload</title>
      <guid>https://rumble.com/v6noimage-upload.html</guid>
      <pubDate>Sat, 06 Jan 2024 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

LATIN1_YOUTUBE_FEED = (
    YOUTUBE_FEED
    .replace('encoding="UTF-8"', 'encoding="ISO-8859-1"')
    .replace("Example Channel", "Café Channel")
    .encode("latin-1")
)

TRUNCATED_YOUTUBE_FEED = YOUTUBE_FEED.split("</media:group>")[0]


class FakeResponse:
    """Stands in for an aiohttp response inside ``async with``.

    ``body`` may be text, sent as UTF-8, or raw bytes.
    """

    def __init__(self, body="", status: int = 200):
        self.body = body
        self.status = status

    async def read(self):
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    async def text(self):
        return (await self.read()).decode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


class FakeSession:
    """Routes GET urls to canned bodies, statuses or exceptions.

    Unknown urls answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requested = []
        self.closed = False

    def get(self, url):
        self.requested.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse("not found", 404)
        if isinstance(route, tuple):
            status, body = route
            return FakeResponse(body, status)
        return FakeResponse(route)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    """Provide a session serving the three sample feeds."""
    return FakeSession({
        RUMBLE_URL: RUMBLE_FEED,
        ODYSEE_URL: ODYSEE_FEED,
        YOUTUBE_URL: YOUTUBE_FEED,
    })


@pytest.fixture
def subs_path(tmp_path):
    """Provide a path for a subscriptions file that does not exist yet."""
    return tmp_path / "subs.json"


@pytest.fixture
def sample_subs_document():
    """Provide a persisted subscriptions document."""
    return {
        "Subs": [
            {"Name": "Example Channel", "UID": YOUTUBE_UID, "Service": "youtube"},
            {"Name": "alice", "UID": ODYSEE_UID, "Service": "odysee"},
            {"Name": RUMBLE_UID, "UID": RUMBLE_UID, "Service": "rumble"},
        ]
    }


@pytest.fixture
def populated_subs_path(subs_path, sample_subs_document):
    """Provide a subscriptions file holding the sample document."""
    subs_path.write_text(json.dumps(sample_subs_document))
    return subs_path
