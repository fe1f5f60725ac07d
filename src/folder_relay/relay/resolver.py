"""Resolve declarative task maps into executable actions."""

from __future__ import annotations

import logging

from folder_relay.notify import Notifier
from folder_relay.relay.actions import (
    DeleteAction,
    NotifyAction,
    RelocateAction,
    TaskAction,
    TransferAction,
    VerifyAction,
)
from folder_relay.relay.models import FolderBatch, FolderMap, TaskKind, TaskMap
from folder_relay.relay.templates import render_task_name
from folder_relay.remote import RemoteStore

logger = logging.getLogger(__name__)

TASK_KIND_TOKENS: dict[str, TaskKind] = {
    **{kind.value: kind for kind in TaskKind},
    "copy": TaskKind.TRANSFER,
    "check": TaskKind.VERIFY,
    "move": TaskKind.RELOCATE,
}

_ACTION_TYPES: dict[TaskKind, type[TaskAction]] = {
    TaskKind.TRANSFER: TransferAction,
    TaskKind.VERIFY: VerifyAction,
    TaskKind.RELOCATE: RelocateAction,
    TaskKind.DELETE: DeleteAction,
    TaskKind.NOTIFY: NotifyAction,
}


class UnknownTaskKindError(ValueError):
    """Task token does not name a supported operation."""

    def __init__(self, token: str | None) -> None:
        supported = ", ".join(sorted(TASK_KIND_TOKENS))
        super().__init__(f"Unknown task type {token!r}. Expected one of: {supported}")
        self.token = token


def parse_task_kind(token: str | None) -> TaskKind:
    """Map a task token onto its operation kind, case-insensitively."""

    kind = TASK_KIND_TOKENS.get((token or "").strip().lower())
    if kind is None:
        raise UnknownTaskKindError(token)
    return kind


def ordered_task_maps(folder: FolderMap) -> list[TaskMap]:
    """Task maps by ascending order; ties keep their configured order."""

    return sorted(folder.task_maps, key=lambda task_map: task_map.order)


class TaskResolver:
    """Binds task maps of one folder to the remote store and notifier."""

    def __init__(self, *, store: RemoteStore, notifier: Notifier) -> None:
        self.store = store
        self.notifier = notifier

    def resolve(
        self,
        task_map: TaskMap,
        folder: FolderMap,
        batch: FolderBatch,
        report: list[str],
    ) -> TaskAction:
        """Build one action; raises ``UnknownTaskKindError`` for bad tokens."""

        kind = parse_task_kind(task_map.task)
        name = render_task_name(task_map.name, folder)
        if kind is TaskKind.NOTIFY and not folder.notify_email:
            logger.warning("Notify step %r has no address on folder %s", name, folder.display_name)
        action_type = _ACTION_TYPES[kind]
        return action_type(
            name=name,
            folder=folder,
            batch=batch,
            store=self.store,
            notifier=self.notifier,
            report=report,
        )


def describe_chain(folder: FolderMap) -> list[str]:
    """Human-readable chain for ``plan`` output, without touching files."""

    lines: list[str] = []
    for task_map in ordered_task_maps(folder):
        name = render_task_name(task_map.name, folder)
        try:
            kind = parse_task_kind(task_map.task).value
        except UnknownTaskKindError as error:
            kind = f"invalid ({error.token!r})"
        lines.append(f"[{task_map.order}] {kind}: {name}")
    return lines
