"""Load the folder mapping file into an ``AppTask``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from folder_relay.relay.models import AppTask, DeletePolicy, FolderMap, TaskMap

logger = logging.getLogger(__name__)

_FOLDER_TEXT_FIELDS = (
    "name",
    "folder_path",
    "remote_path",
    "success_path",
    "error_path",
    "notify_email",
)


class MappingError(ValueError):
    """Mapping file content does not describe folders and tasks."""


def load_app_task(path: Path) -> AppTask | None:
    """Read ``path``; ``None`` when the file is missing or malformed."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return parse_app_task(payload)
    except FileNotFoundError:
        logger.error("Mapping file not found: %s", path)
    except (OSError, json.JSONDecodeError, MappingError) as error:
        logger.error("Could not map %s: %s", path, error)
    return None


def parse_app_task(payload: Any) -> AppTask:
    if not isinstance(payload, dict):
        raise MappingError("Mapping root must be a JSON object")
    folders_raw = payload.get("folders") or []
    if not isinstance(folders_raw, list):
        raise MappingError("'folders' must be a list")
    return AppTask(
        name=_optional_text(payload, "name"),
        version=_optional_text(payload, "version"),
        folder_maps=tuple(
            _parse_folder(item, position) for position, item in enumerate(folders_raw, start=1)
        ),
    )


def _parse_folder(item: Any, position: int) -> FolderMap:
    if not isinstance(item, dict):
        raise MappingError(f"Folder #{position} must be a JSON object")
    tasks_raw = item.get("tasks") or []
    if not isinstance(tasks_raw, list):
        raise MappingError(f"Folder #{position}: 'tasks' must be a list")

    delete_raw = item.get("delete_from") or DeletePolicy.SOURCE.value
    try:
        delete_from = DeletePolicy(str(delete_raw).strip().lower())
    except ValueError as error:
        raise MappingError(
            f"Folder #{position}: invalid delete_from {delete_raw!r} "
            f"(expected one of: {', '.join(policy.value for policy in DeletePolicy)})",
        ) from error

    texts = {field: _optional_text(item, field) for field in _FOLDER_TEXT_FIELDS}
    return FolderMap(
        **texts,
        delete_from=delete_from,
        task_maps=tuple(_parse_task(task, position) for task in tasks_raw),
    )


def _parse_task(item: Any, position: int) -> TaskMap:
    if not isinstance(item, dict):
        raise MappingError(f"Folder #{position}: every task must be a JSON object")
    order_raw = item.get("order", 0)
    try:
        order = int(order_raw)
    except (TypeError, ValueError) as error:
        raise MappingError(f"Folder #{position}: invalid task order {order_raw!r}") from error
    return TaskMap(
        order=order,
        name=_optional_text(item, "name"),
        task=str(item.get("task") or ""),
    )


def _optional_text(item: dict[str, Any], key: str) -> str | None:
    value = item.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None
