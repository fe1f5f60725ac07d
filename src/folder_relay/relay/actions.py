"""Executable chain steps bound to one folder pass."""

from __future__ import annotations

import html
import logging
import shutil
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import ClassVar

from folder_relay.notify import Notification, NotificationError, Notifier
from folder_relay.relay.models import DeletePolicy, FolderBatch, FolderMap, TaskKind, TaskResult
from folder_relay.remote import RemoteStore, RemoteStoreError

logger = logging.getLogger(__name__)

NOTIFY_SUBJECT_TEMPLATE = "Task completed notification: {folder}"
_REPORT_HEAD = (
    "<!DOCTYPE html>\n"
    '<html lang="en">\n'
    "<head>\n"
    '    <meta charset="UTF-8">\n'
    '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
    "    <title>{title}</title>\n"
    "</head>\n"
    "<body>\n"
)
_REPORT_TAIL = "</body>\n</html>\n"


def render_report(messages: list[str], *, title: str) -> str:
    """HTML execution log with one line per step message, in execution order."""

    lines = "".join(f"{html.escape(message)}<br />\n" for message in messages)
    return _REPORT_HEAD.format(title=html.escape(title)) + lines + _REPORT_TAIL


def unique_destination(target_dir: Path, file_name: str) -> Path:
    """Path under ``target_dir`` that does not overwrite an existing file."""

    candidate = target_dir / file_name
    if not candidate.exists():
        return candidate
    stem, suffix = Path(file_name).stem, Path(file_name).suffix
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")
    candidate = target_dir / f"{stem}_{stamp}{suffix}"
    counter = 1
    while candidate.exists():
        candidate = target_dir / f"{stem}_{stamp}_{counter}{suffix}"
        counter += 1
    return candidate


def _existing(paths: list[Path]) -> list[Path]:
    return [path for path in paths if path.exists()]


class TaskAction(ABC):
    """One resolved step of a folder chain."""

    kind: ClassVar[TaskKind]

    def __init__(  # noqa: PLR0913
        self,
        *,
        name: str,
        folder: FolderMap,
        batch: FolderBatch,
        store: RemoteStore,
        notifier: Notifier,
        report: list[str],
    ) -> None:
        self.name = name
        self.folder = folder
        self.batch = batch
        self.store = store
        self.notifier = notifier
        self.report = report

    @abstractmethod
    def execute(self) -> TaskResult | None:
        """Run the step once."""

    def affected_files(self) -> list[Path]:
        """Local files this step was working on that still exist."""

        return _existing(self.batch.files)

    def relocate_to_error(self, error_path: str | None) -> TaskResult:
        """Quarantine the affected files into ``error_path``."""

        if not error_path:
            return TaskResult.fail(
                f"No error folder configured for {self.folder.display_name}; files left in place",
            )
        files = self.affected_files()
        if not files:
            return TaskResult.ok(f"{self.name}: no files to move to {error_path}")
        target_dir = Path(error_path)
        target_dir.mkdir(parents=True, exist_ok=True)
        for path in files:
            shutil.move(path, unique_destination(target_dir, path.name))
        return TaskResult.ok(f"{self.name}: {len(files)} file(s) moved to {error_path}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class TransferAction(TaskAction):
    """Pushes every file of the batch to the remote destination."""

    kind = TaskKind.TRANSFER

    def execute(self) -> TaskResult:
        remote_dir = self.folder.remote_path
        if not remote_dir:
            return TaskResult.fail(f"{self.name}: no remote destination configured")
        files = self.batch.files
        if not files:
            return TaskResult.ok(f"{self.name}: no files to transfer")

        failures: list[str] = []
        for path in files:
            try:
                self.store.upload(path, remote_dir)
            except RemoteStoreError as error:
                logger.warning("Transfer of %s failed: %s", path, error)
                failures.append(path.name)
                continue
            self.batch.transferred.append(path)

        sent = len(self.batch.transferred)
        if failures:
            return TaskResult.fail(
                f"{self.name}: {sent} of {len(files)} file(s) transferred to {remote_dir}; "
                f"failed: {', '.join(failures)}",
            )
        return TaskResult.ok(f"{self.name}: {sent} file(s) transferred to {remote_dir}")


class VerifyAction(TaskAction):
    """Checks that every transferred file is present remotely."""

    kind = TaskKind.VERIFY

    def execute(self) -> TaskResult:
        remote_dir = self.folder.remote_path
        if not remote_dir:
            return TaskResult.fail(f"{self.name}: no remote destination configured")
        expected = self.batch.transferred
        if not expected:
            return TaskResult.ok(f"{self.name}: nothing to verify")
        missing = [path.name for path in expected if not self.store.exists(remote_dir, path.name)]
        if missing:
            return TaskResult.fail(
                f"{self.name}: {len(missing)} file(s) missing at {remote_dir}: "
                f"{', '.join(missing)}",
            )
        return TaskResult.ok(f"{self.name}: {len(expected)} file(s) verified at {remote_dir}")

    def affected_files(self) -> list[Path]:
        return _existing(self.batch.transferred)


class RelocateAction(TaskAction):
    """Moves transferred files from the source into the success folder."""

    kind = TaskKind.RELOCATE

    def execute(self) -> TaskResult:
        if not self.folder.success_path:
            return TaskResult.fail(f"{self.name}: no success folder configured")
        pending = _existing(self.batch.transferred)
        if not pending:
            return TaskResult.ok(f"{self.name}: nothing to relocate")
        target_dir = Path(self.folder.success_path)
        target_dir.mkdir(parents=True, exist_ok=True)

        failures: list[str] = []
        for path in pending:
            try:
                destination = shutil.move(path, unique_destination(target_dir, path.name))
            except OSError as error:
                logger.warning("Relocation of %s failed: %s", path, error)
                failures.append(path.name)
                continue
            self.batch.relocated.append(Path(destination))

        if failures:
            return TaskResult.fail(
                f"{self.name}: could not move {', '.join(failures)} to {target_dir}",
            )
        return TaskResult.ok(f"{self.name}: {len(pending)} file(s) moved to {target_dir}")

    def affected_files(self) -> list[Path]:
        return _existing(self.batch.transferred)


class DeleteAction(TaskAction):
    """Removes copied files from the location chosen by the folder's delete policy."""

    kind = TaskKind.DELETE

    def targets(self) -> list[Path]:
        if self.folder.delete_from is DeletePolicy.SUCCESS:
            return self.batch.relocated
        return self.batch.transferred

    def execute(self) -> TaskResult:
        pending = _existing(self.targets())
        if not pending:
            return TaskResult.ok(f"{self.name}: nothing to delete")

        failures: list[str] = []
        for path in pending:
            try:
                path.unlink(missing_ok=True)
            except OSError as error:
                logger.warning("Deletion of %s failed: %s", path, error)
                failures.append(path.name)
        if failures:
            return TaskResult.fail(f"{self.name}: could not delete {', '.join(failures)}")
        return TaskResult.ok(
            f"{self.name}: {len(pending)} file(s) deleted from {self.folder.delete_from.value}",
        )

    def affected_files(self) -> list[Path]:
        return _existing(self.targets())


class NotifyAction(TaskAction):
    """Sends the execution log of the pass to the folder's address."""

    kind = TaskKind.NOTIFY
    sent = False

    def execute(self) -> TaskResult:
        recipient = self.folder.notify_email
        if not recipient:
            return TaskResult.ok(f"{self.name}: no notification address, skipped")
        subject = NOTIFY_SUBJECT_TEMPLATE.format(folder=self.folder.display_name)
        body = render_report(self.report, title=subject)
        try:
            self.notifier.send(Notification(recipient=recipient, subject=subject, html_body=body))
        except NotificationError as error:
            logger.warning("Notification to %s not delivered: %s", recipient, error)
            return TaskResult.ok(f"{self.name}: notification to {recipient} not delivered")
        self.sent = True
        return TaskResult.ok(f"Notification sent to: {recipient}")

    def affected_files(self) -> list[Path]:
        return []
