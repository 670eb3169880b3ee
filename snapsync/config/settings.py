from datetime import datetime, timezone
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class FatalStartupError(Exception):
    """Raised when required configuration is missing at process start."""


class Settings(BaseSettings):
    """Pipeline configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "snapmatic"
    db_username: str = "snapmatic"
    db_password: str = ""
    db_sslmode: str = "prefer"

    discord_token: str = ""
    channel_id: str = ""
    discord_api_base_url: str = "https://discord.com/api/v10"

    proxy_base_url: str = ""
    public_base_url: str = ""
    storage_namespace: str = "snapmatic"

    start_date: datetime = datetime(2025, 7, 15, tzinfo=timezone.utc)
    batch_size: int = 100
    max_scan_pages: int = 1
    catalog_page_size: int = 1000

    scan_interval_seconds: int = 30
    rate_limit_backoff_seconds: int = 120
    http_timeout_seconds: int = 30

    temp_dir: str = "./snapmatic-temp"
    ratelimit_breadcrumb_path: str = "./ratelimit.json"

    @field_validator("batch_size")
    @classmethod
    def _cap_batch_size(cls, value: int) -> int:
        if not 1 <= value <= 100:
            raise ValueError("batch_size must be between 1 and 100")
        return value

    @field_validator("start_date")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def missing_required(self) -> list[str]:
        """Names of required settings that are empty."""
        required = {
            "DISCORD_TOKEN": self.discord_token,
            "CHANNEL_ID": self.channel_id,
            "PROXY_BASE_URL": self.proxy_base_url,
            "PUBLIC_BASE_URL": self.public_base_url,
            "DB_PASSWORD": self.db_password,
        }
        return [name for name, value in required.items() if not value.strip()]

    def ensure_required(self) -> None:
        """Raise FatalStartupError when any required setting is missing."""
        missing = self.missing_required()
        if missing:
            raise FatalStartupError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )


class ProxySettings(BaseSettings):
    """Rotating-credential proxy configuration (PROXY_* environment variables)."""

    model_config = SettingsConfigDict(env_prefix="PROXY_", env_file=".env", extra="ignore")

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8787

    github_tokens: Annotated[list[str], NoDecode] = []
    github_api_base_url: str = "https://api.github.com"
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = "master"
    user_agent: str = "snapsync-proxy"

    quota_fresh_seconds: float = 10.0
    image_cache_seconds: int = 60 * 60 * 24 * 365
    listing_cache_seconds: int = 300
    cache_max_entries: int = 1024
    upstream_timeout_seconds: int = 30

    @field_validator("github_tokens", mode="before")
    @classmethod
    def _split_tokens(cls, value: object) -> object:
        if isinstance(value, str):
            return [token.strip() for token in value.split(",") if token.strip()]
        return value

    def ensure_required(self) -> None:
        """Raise FatalStartupError when the proxy cannot serve anything."""
        missing = []
        if not self.github_tokens:
            missing.append("PROXY_GITHUB_TOKENS")
        if not self.github_owner:
            missing.append("PROXY_GITHUB_OWNER")
        if not self.github_repo:
            missing.append("PROXY_GITHUB_REPO")
        if missing:
            raise FatalStartupError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )
