"""incidentbot configuration system using Pydantic Settings."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BotConfig(BaseSettings):
    """Main configuration class. Loads from .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Identity; the transport adapter owns connection settings
    nickname: str = "BlabberBot"

    # Channels to join, and the subset considered public (reduced data, doc links)
    channels: list[str] = ["#somechannel"]
    public_channels: list[str] = []

    # Nicks with unconditional access to every command
    admins: list[str] = []

    # Database
    database_url: str = "sqlite+aiosqlite:///./incidentbot.db"
    # SQLite only: how long a writer waits for the lock held by another task
    db_busy_timeout_ms: int = 5000
    debug: bool = False

    # Logging
    log_dir: str = "logs"
    log_file: str = "incidentbot.log"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    # Seconds between lines of !sing
    sing_delay: float = 0.8

    # Incident documents (Google Drive)
    google_credentials_file: Optional[str] = None
    doc_template_id: Optional[str] = None
    doc_folder: Optional[str] = None
    doc_drive: Optional[str] = None
    doc_domain: Optional[str] = None

    @field_validator("channels", "public_channels")
    @classmethod
    def validate_channel_names(cls, v: list[str]) -> list[str]:
        for channel in v:
            if not channel.startswith("#"):
                raise ValueError(f"channel names must start with '#': {channel!r}")
        return v

    @property
    def documents_enabled(self) -> bool:
        return bool(self.google_credentials_file and self.doc_template_id)

    def is_public_channel(self, channel: str) -> bool:
        return channel in self.public_channels

    def is_admin(self, nick: str) -> bool:
        return nick in self.admins


def get_config() -> BotConfig:
    """Factory function to create config instance."""
    return BotConfig()
