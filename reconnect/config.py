import shlex
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Message store (read-only Messages database)
    MESSAGE_DB_PATH: str = "~/Library/Messages/chat.db"
    MESSAGE_STORE_TIMEOUT_SECONDS: float = 10.0

    # Contact directory lookup tools
    CONTACT_LOOKUP_COMMAND: str = "swift ContactLookup.swift"
    CONTACT_BATCH_LOOKUP_COMMAND: str = "swift ContactBatchLookup.swift"
    CONTACT_LOOKUP_CWD: str | None = None
    CONTACT_LOOKUP_TIMEOUT_SECONDS: float = 5.0
    CONTACT_BATCH_LOOKUP_TIMEOUT_SECONDS: float = 10.0
    CONTACT_BATCH_TIMEOUT_PER_IDENTIFIER_SECONDS: float = 0.1

    # =================================================================
    # IDENTITY CACHE SETTINGS
    # =================================================================
    IDENTITY_CACHE_TTL_SECONDS: float = 1800.0  # 30 minutes
    IDENTITY_CACHE_NEGATIVE_TTL_SECONDS: float | None = None  # falls back to TTL
    IDENTITY_CACHE_CAPACITY: int = 1000
    IDENTITY_CACHE_SWEEP_INTERVAL_SECONDS: float = 300.0  # 5 minutes

    # Birthday provider
    BIRTHDAY_DB_PATH: str = "birthdays.db"
    BIRTHDAY_UPCOMING_DAYS: int = 7

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def message_db_path(self) -> str:
        return str(Path(self.MESSAGE_DB_PATH).expanduser())

    def lookup_command(self) -> list[str]:
        """Split the single-lookup command into an argv prefix."""
        return shlex.split(self.CONTACT_LOOKUP_COMMAND)

    def batch_lookup_command(self) -> list[str]:
        return shlex.split(self.CONTACT_BATCH_LOOKUP_COMMAND)

    def get_identity_cache_config(self) -> dict:
        """
        Get identity cache configuration.
        Development keeps entries for a shorter time so directory edits show up sooner.
        """
        config = {
            "ttl_seconds": self.IDENTITY_CACHE_TTL_SECONDS,
            "negative_ttl_seconds": self.IDENTITY_CACHE_NEGATIVE_TTL_SECONDS,
            "capacity": self.IDENTITY_CACHE_CAPACITY,
        }

        if self.environment == "development" and self.debug:
            config.update(
                {
                    "ttl_seconds": min(self.IDENTITY_CACHE_TTL_SECONDS, 300.0),
                }
            )

        return config


settings = Settings()
