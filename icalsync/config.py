"""Configuration for calendar sync."""

import os
from pathlib import Path
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from icalsync.constants import DEFAULT_CALENDAR_NAME, DEFAULT_UID_DOMAIN


class SyncConfig(BaseModel):
    """Sync service configuration with Pydantic validation."""

    # Storage
    data_dir: Path = Field(default=Path("data"))
    store_backend: Literal["json", "memory"] = "json"

    # Logging
    log_dir: Path = Field(default=Path("logs"))
    log_filename: str = Field(default="icalsync.log")

    # Published calendar
    calendar_name: str = Field(default=DEFAULT_CALENDAR_NAME)
    uid_domain: str = Field(default=DEFAULT_UID_DOMAIN)
    feed_max_age: int = Field(default=300, ge=0)

    # Identity
    default_owner: str = Field(default="local")
    auth_header: str = Field(default="X-User-Id")

    # Sync
    sync_interval_seconds: int = Field(default=300, ge=1)
    sync_max_workers: int = Field(default=4, ge=1)
    fetch_timeout_seconds: float = Field(default=20.0, gt=0)
    default_sync_interval_minutes: int = Field(default=60, ge=1)

    # HTTP server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Load configuration from environment variables and .env file."""
        load_dotenv(find_dotenv(usecwd=True))

        config_dict = {}

        # Storage
        if "ICALSYNC_DATA_DIR" in os.environ:
            config_dict["data_dir"] = Path(os.environ["ICALSYNC_DATA_DIR"])
        if os.environ.get("ICALSYNC_STORE") in ("json", "memory"):
            config_dict["store_backend"] = os.environ["ICALSYNC_STORE"]

        # Logging
        if "LOG_DIR" in os.environ:
            config_dict["log_dir"] = Path(os.environ["LOG_DIR"])
        if "LOG_FILENAME" in os.environ:
            config_dict["log_filename"] = os.environ["LOG_FILENAME"]

        # Strings
        for env_name, field_name in (
            ("CALENDAR_NAME", "calendar_name"),
            ("UID_DOMAIN", "uid_domain"),
            ("DEFAULT_OWNER", "default_owner"),
            ("AUTH_HEADER", "auth_header"),
            ("HOST", "host"),
        ):
            if env_name in os.environ:
                config_dict[field_name] = os.environ[env_name]

        # Numbers
        for env_name, field_name, cast in (
            ("SYNC_INTERVAL_SECONDS", "sync_interval_seconds", int),
            ("SYNC_MAX_WORKERS", "sync_max_workers", int),
            ("FETCH_TIMEOUT_SECONDS", "fetch_timeout_seconds", float),
            ("DEFAULT_SYNC_INTERVAL_MINUTES", "default_sync_interval_minutes", int),
            ("FEED_MAX_AGE", "feed_max_age", int),
            ("PORT", "port", int),
        ):
            if env_name in os.environ:
                try:
                    config_dict[field_name] = cast(os.environ[env_name])
                except ValueError:
                    pass  # Keep default if invalid

        return cls(**config_dict)
