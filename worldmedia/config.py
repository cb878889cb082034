"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SOURCE_NAMES = [
    "iptv-org",
    "free-tv-iptv",
    "iprd",
    "famelack-channels",
    "m3u-radio-music-playlists",
    "insecam",
    "windy",
]


class Settings(BaseSettings):
    """Settings loaded from WORLDMEDIA_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDMEDIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Fragment layout: http(s) URL or local directory
    data_root: str = "data"
    source_names: list[str] = list(DEFAULT_SOURCE_NAMES)  # merge order
    parallel_fetch: bool = False
    max_concurrent_fetches: int = 8
    request_timeout_seconds: float = 30.0

    # Persisted client state
    state_url: str = "sqlite:///worldmedia_state.db"  # "memory" for no persistence
    favorites_key: str = "worldmedia-favorites"
    trash_key: str = "worldmedia-trash"

    log_level: str = "INFO"


settings = Settings()
