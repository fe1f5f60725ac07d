"""Controllers for relay CLI commands."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

from folder_relay.config import LogSettings, Settings
from folder_relay.notify import build_notifier
from folder_relay.relay.mapping import load_app_task
from folder_relay.relay.processor import FolderProcessor
from folder_relay.relay.resolver import TaskResolver, describe_chain
from folder_relay.relay.worker import RelayWorker
from folder_relay.remote import build_remote_store

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(slots=True)
class RelayRunCommand:
    """CLI input for worker execution."""

    config_path: Path | None
    once: bool
    max_cycles: int | None = None


@dataclass(slots=True)
class RelayPlanCommand:
    """CLI input for printing resolved chains."""

    config_path: Path | None


@dataclass(slots=True)
class CommandOutput:
    """Lines to print and whether the command should exit non-zero."""

    lines: list[str] = field(default_factory=list)
    failed: bool = False


def configure_logging(settings: LogSettings) -> None:
    """Console logging plus an optional log file."""

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.file, encoding="utf-8"))
    logging.basicConfig(level=settings.level, format=LOG_FORMAT, handlers=handlers, force=True)


class RelayCliController:
    """Builds the worker from settings and runs CLI commands."""

    def run(self, command: RelayRunCommand) -> CommandOutput:
        settings = Settings.from_env(config_path=command.config_path)
        settings.validate()
        configure_logging(settings.log)

        stop_event = threading.Event()
        store = build_remote_store(
            settings.remote.root,
            timeout_seconds=settings.remote.timeout_seconds,
            max_retries=settings.remote.max_retries,
        )
        notifier = build_notifier(
            settings.notify.url,
            sender=settings.notify.sender,
            timeout_seconds=settings.notify.timeout_seconds,
        )
        processor = FolderProcessor(
            resolver=TaskResolver(store=store, notifier=notifier),
            stop_event=stop_event,
            failure_cooldown_seconds=settings.failure_cooldown_seconds,
        )
        worker = RelayWorker(
            mapper=lambda: load_app_task(settings.config_path),
            processor=processor,
            stop_event=stop_event,
            interval_seconds=settings.interval_seconds,
        )
        try:
            summary = (
                worker.run_once()
                if command.once
                else worker.run_loop(max_cycles=command.max_cycles)
            )
        finally:
            for resource in (store, notifier):
                close = getattr(resource, "close", None)
                if close is not None:
                    close()

        if summary.aborted:
            return CommandOutput(
                lines=[f"Worker aborted: no folders mapped from {settings.config_path}"],
                failed=True,
            )
        return CommandOutput(
            lines=[
                "Worker summary: "
                f"cycles={summary.cycles} folders={summary.folders_processed} "
                f"completed={summary.folders_completed} failed={summary.folders_failed} "
                f"errors={summary.folder_errors} backoffs={summary.backoffs}",
            ],
        )

    def plan(self, command: RelayPlanCommand) -> CommandOutput:
        """Print every folder's resolved chain without executing it."""

        settings = Settings.from_env(config_path=command.config_path)
        app_task = load_app_task(settings.config_path)
        if app_task is None or not app_task.folder_maps:
            return CommandOutput(
                lines=[f"No folders mapped from {settings.config_path}"],
                failed=True,
            )

        lines = [f"{app_task.name or 'N/A'} - Version: {app_task.version or 'N/A'}"]
        for folder in app_task.folder_maps:
            lines.append(
                f"{folder.display_name}: {folder.folder_path or 'N/A'} -> "
                f"{folder.remote_path or 'N/A'}",
            )
            chain = describe_chain(folder)
            lines.extend(f"  {line}" for line in chain or ["(no tasks)"])
        return CommandOutput(lines=lines)
