"""Shared test fixtures."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from folder_relay.notify import Notification, NotificationError
from folder_relay.relay.models import FolderMap, TaskMap
from folder_relay.relay.processor import FolderProcessor
from folder_relay.relay.resolver import TaskResolver
from folder_relay.remote import RemoteStoreError


@dataclass
class FakeStore:
    """In-memory remote store; names listed in ``reject`` fail to upload."""

    reject: set[str] = field(default_factory=set)
    hide: set[str] = field(default_factory=set)
    uploads: list[tuple[str, str]] = field(default_factory=list)

    def upload(self, local_file: Path, remote_dir: str) -> None:
        if local_file.name in self.reject:
            raise RemoteStoreError(f"rejected {local_file.name}")
        self.uploads.append((remote_dir, local_file.name))

    def exists(self, remote_dir: str, file_name: str) -> bool:
        if file_name in self.hide:
            return False
        return (remote_dir, file_name) in self.uploads


@dataclass
class RecordingNotifier:
    sent: list[Notification] = field(default_factory=list)
    fail: bool = False

    def send(self, notification: Notification) -> None:
        if self.fail:
            raise NotificationError("relay down")
        self.sent.append(notification)


@dataclass
class WaitRecorder:
    """Stands in for ``Event.wait``; optionally sets the event on a given call."""

    stop_event: threading.Event
    calls: list[float] = field(default_factory=list)
    cancel_on_call: int | None = None

    def __call__(self, seconds: float) -> bool:
        self.calls.append(seconds)
        if self.cancel_on_call is not None and len(self.calls) >= self.cancel_on_call:
            self.stop_event.set()
        return self.stop_event.is_set()


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def stop_event() -> threading.Event:
    return threading.Event()


@pytest.fixture()
def waits(stop_event: threading.Event) -> WaitRecorder:
    return WaitRecorder(stop_event=stop_event)


@pytest.fixture()
def processor(
    store: FakeStore,
    notifier: RecordingNotifier,
    stop_event: threading.Event,
    waits: WaitRecorder,
) -> FolderProcessor:
    return FolderProcessor(
        resolver=TaskResolver(store=store, notifier=notifier),
        stop_event=stop_event,
        failure_cooldown_seconds=1.0,
        wait=waits,
    )


@pytest.fixture()
def make_folder(tmp_path: Path):  # type: ignore[no-untyped-def]
    """Factory for folder mappings over fresh source directories."""

    def _make(
        *,
        name: str = "invoices",
        files: tuple[str, ...] = ("a.txt", "b.txt"),
        tasks: tuple[tuple[int, str, str], ...] = (),
        notify_email: str | None = "ops@example.com",
        **overrides: object,
    ) -> FolderMap:
        source = tmp_path / name / "in"
        source.mkdir(parents=True)
        for file_name in files:
            (source / file_name).write_text(f"content of {file_name}", encoding="utf-8")
        values: dict[str, object] = {
            "name": name,
            "folder_path": str(source),
            "remote_path": f"/upload/{name}",
            "success_path": str(tmp_path / name / "done"),
            "error_path": str(tmp_path / name / "error"),
            "notify_email": notify_email,
            "task_maps": tuple(
                TaskMap(order=order, name=task_name, task=token)
                for order, task_name, token in tasks
            ),
        }
        values.update(overrides)
        return FolderMap(**values)  # type: ignore[arg-type]

    return _make
