"""Application configuration using Pydantic settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    One instance is built at process start and passed explicitly to the
    provisioner and the worker bootstrap.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LiveKit (defaults match `livekit-server --dev`)
    livekit_url: str = "ws://localhost:7880"
    livekit_api_key: str = "devkey"
    livekit_api_secret: str = "secret"

    # Provider API keys
    deepgram_api_key: str = ""
    openai_api_key: str = ""
    groq_api_key: str = ""
    elevenlabs_api_key: str = ""
    cartesia_api_key: str = ""

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Data Storage
    data_path: Path = Path("./data")

    # Dashboard bearer tokens
    token_secret: str = "voice_studio_dev_secret_change_in_production"
    token_expiry_hours: int = 24 * 7

    # Realtime sessions
    access_token_ttl_seconds: int = 3600
    room_empty_timeout_seconds: int = 300
    worker_dispatch_name: str = "voice-studio-agent"

    # Worker -> API end-of-session reports
    worker_api_key: str = ""
    api_base_url: str = "http://localhost:8000"

    @property
    def livekit_http_url(self) -> str:
        """Server API URL derived from the websocket URL."""
        if self.livekit_url.startswith("wss://"):
            return "https://" + self.livekit_url[len("wss://"):]
        if self.livekit_url.startswith("ws://"):
            return "http://" + self.livekit_url[len("ws://"):]
        return self.livekit_url

    def ensure_data_dirs(self) -> None:
        """Ensure required data directories exist."""
        self.data_path.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    settings = Settings()
    settings.ensure_data_dirs()
    return settings
