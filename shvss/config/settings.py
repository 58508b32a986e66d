"""Application settings with environment variable support."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SHVSS_",  # SHVSS_SUBS_FILE, SHVSS_PORT, etc.
    )

    # Subscriptions
    subs_file: Path = Path("subs.json")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream feeds (identifier appended verbatim)
    rumble_feed_url: str = "http://rssgen.xyz/rumble/"
    odysee_feed_url: str = "https://odysee.com/$/rss/@"
    odysee_embed_url: str = "https://odysee.com/$/embed/@"
    youtube_feed_url: str = "https://www.youtube.com/feeds/videos.xml?channel_id="

    # Fetching
    fetch_timeout_seconds: Optional[float] = None  # None = no total timeout
    max_concurrent_fetches: Optional[int] = None  # None = one task per subscription
    user_agent: str = "shvss/0.1.3"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
