"""Tests for application settings."""

from voice_studio.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("LIVEKIT_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.livekit_url == "ws://localhost:7880"
    assert settings.access_token_ttl_seconds == 3600
    assert settings.worker_dispatch_name == "voice-studio-agent"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("LIVEKIT_URL", "wss://prod.livekit.cloud")
    monkeypatch.setenv("ACCESS_TOKEN_TTL_SECONDS", "900")
    monkeypatch.setenv("WORKER_DISPATCH_NAME", "prod-agent")

    settings = Settings(_env_file=None)

    assert settings.livekit_url == "wss://prod.livekit.cloud"
    assert settings.access_token_ttl_seconds == 900
    assert settings.worker_dispatch_name == "prod-agent"


def test_http_url_from_websocket_url():
    assert Settings(_env_file=None, livekit_url="wss://x.livekit.cloud").livekit_http_url == "https://x.livekit.cloud"
    assert Settings(_env_file=None, livekit_url="ws://localhost:7880").livekit_http_url == "http://localhost:7880"
    assert Settings(_env_file=None, livekit_url="https://already").livekit_http_url == "https://already"


def test_ensure_data_dirs(tmp_path):
    settings = Settings(_env_file=None, data_path=tmp_path / "nested" / "data")
    settings.ensure_data_dirs()
    assert settings.data_path.is_dir()
