"""Configuration schema using Pydantic.

Single data model and defaults for the bridge, persisted to ~/.superbridge/config.json.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """WebSocket server the remote connects to."""
    host: str = "0.0.0.0"
    port: int = 8890
    log_level: str = "INFO"


class SpotifyConfig(BaseModel):
    """Upstream media API settings."""
    client_id: str = ""  # Falls back to SPOTIFY_CLIENT_ID
    api_base: str = "https://api.spotify.com/v1"
    accounts_base: str = "https://accounts.spotify.com"
    market: str = "US"
    redirect_uri: str = "http://localhost:8888/callback"
    token_path: str = "~/.superbridge/auth-data.json"
    request_timeout_s: float = 20.0


class SyncConfig(BaseModel):
    """Playback state polling."""
    poll_interval_ms: int = Field(default=1500, gt=0)
    initial_state_delay_ms: int = 1000  # Wait before pushing the first state to a new client


class CacheConfig(BaseModel):
    """Ephemeral cache sizing and staleness windows."""
    max_entries: int = Field(default=1000, gt=0)
    library_ttl_s: float = 900.0
    album_ttl_s: float = 900.0
    devices_ttl_s: float = 30.0
    image_dir: str = "~/.superbridge/cache"
    image_base_url: str = "https://i.scdn.co/image/"


class RpcConfig(BaseModel):
    """Inter-app action dispatch."""
    # High-volume methods dropped before logging
    silent_methods: list[str] = Field(
        default_factory=lambda: ["com.spotify.superbird.instrumentation.log"]
    )


class Config(BaseSettings):
    """Root configuration for superbridge."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    spotify: SpotifyConfig = Field(default_factory=SpotifyConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rpc: RpcConfig = Field(default_factory=RpcConfig)

    @property
    def token_path(self) -> Path:
        return Path(self.spotify.token_path).expanduser()

    @property
    def image_dir(self) -> Path:
        return Path(self.cache.image_dir).expanduser()

    @property
    def poll_interval_s(self) -> float:
        return self.sync.poll_interval_ms / 1000.0

    model_config = ConfigDict(
        env_prefix="SUPERBRIDGE_",
        env_nested_delimiter="__"
    )
