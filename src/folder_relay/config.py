"""Runtime configuration for the relay worker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class RemoteSettings:
    """Remote store settings."""

    root: str = "remote"
    timeout_seconds: float = 30.0
    max_retries: int = 3


@dataclass(slots=True)
class NotifySettings:
    """Notification transport settings."""

    url: str | None = None
    sender: str | None = None
    timeout_seconds: float = 30.0


@dataclass(slots=True)
class LogSettings:
    """Process logging settings."""

    level: str = "INFO"
    file: Path | None = None


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    config_path: Path = Path("folder_relay.json")
    interval_seconds: float = 300.0
    failure_cooldown_seconds: float = 1.0
    remote: RemoteSettings = field(default_factory=RemoteSettings)
    notify: NotifySettings = field(default_factory=NotifySettings)
    log: LogSettings = field(default_factory=LogSettings)

    @classmethod
    def from_env(cls, config_path: Path | None = None) -> Settings:
        """Load settings from environment with defaults for local runs."""

        log_file = os.getenv("FOLDER_RELAY_LOG_FILE", "").strip()
        return cls(
            config_path=config_path
            or Path(os.getenv("FOLDER_RELAY_CONFIG_PATH", "folder_relay.json")),
            interval_seconds=float(os.getenv("FOLDER_RELAY_INTERVAL_SECONDS", "300")),
            failure_cooldown_seconds=float(
                os.getenv("FOLDER_RELAY_FAILURE_COOLDOWN_SECONDS", "1"),
            ),
            remote=RemoteSettings(
                root=os.getenv("FOLDER_RELAY_REMOTE_ROOT", "remote"),
                timeout_seconds=float(os.getenv("FOLDER_RELAY_REMOTE_TIMEOUT_SECONDS", "30")),
                max_retries=int(os.getenv("FOLDER_RELAY_REMOTE_MAX_RETRIES", "3")),
            ),
            notify=NotifySettings(
                url=os.getenv("FOLDER_RELAY_NOTIFY_URL", "").strip() or None,
                sender=os.getenv("FOLDER_RELAY_NOTIFY_SENDER", "").strip() or None,
                timeout_seconds=float(os.getenv("FOLDER_RELAY_NOTIFY_TIMEOUT_SECONDS", "30")),
            ),
            log=LogSettings(
                level=os.getenv("FOLDER_RELAY_LOG_LEVEL", "INFO").strip().upper(),
                file=Path(log_file) if log_file else None,
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the worker cannot run with."""

        if self.interval_seconds <= 0:
            raise ValueError("FOLDER_RELAY_INTERVAL_SECONDS must be > 0.")
        if self.failure_cooldown_seconds < 0:
            raise ValueError("FOLDER_RELAY_FAILURE_COOLDOWN_SECONDS must be >= 0.")
        if not self.remote.root.strip():
            raise ValueError("FOLDER_RELAY_REMOTE_ROOT must not be empty.")
        if self.remote.timeout_seconds <= 0:
            raise ValueError("FOLDER_RELAY_REMOTE_TIMEOUT_SECONDS must be > 0.")
        if self.remote.max_retries < 0:
            raise ValueError("FOLDER_RELAY_REMOTE_MAX_RETRIES must be >= 0.")
        if self.notify.url and not self.notify.url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid FOLDER_RELAY_NOTIFY_URL: {self.notify.url!r}. "
                "Expected an absolute URL with http:// or https:// scheme.",
            )
        if not isinstance(logging.getLevelName(self.log.level), int):
            raise ValueError(f"Invalid FOLDER_RELAY_LOG_LEVEL: {self.log.level!r}")
