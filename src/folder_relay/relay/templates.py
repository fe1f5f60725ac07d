"""``@attribute`` placeholder substitution for task display names."""

from __future__ import annotations

import re
from collections.abc import Callable

from folder_relay.relay.models import FolderMap

PLACEHOLDER_PATTERN = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")

_ACCESSORS: dict[str, Callable[[FolderMap], str | None]] = {
    "name": lambda folder: folder.name,
    "folder_path": lambda folder: folder.folder_path,
    "remote_path": lambda folder: folder.remote_path,
    "success_path": lambda folder: folder.success_path,
    "error_path": lambda folder: folder.error_path,
    "notify_email": lambda folder: folder.notify_email,
}

# Spellings used by mapping files written for the previous service.
_ALIASES: dict[str, str] = {
    "Name": "name",
    "FolderPath": "folder_path",
    "SFTPPathDestination": "remote_path",
    "ProcessedFilesOnSuccess": "success_path",
    "ProcessedFilesOnError": "error_path",
    "EmailNotify": "notify_email",
}

SUPPORTED_ATTRIBUTES: frozenset[str] = frozenset(_ACCESSORS)


def extract_variable(template: str | None) -> str | None:
    """Return the identifier of the first ``@identifier`` in ``template``."""

    if not template:
        return None
    match = PLACEHOLDER_PATTERN.search(template)
    return match.group(1) if match else None


def attribute_value(folder: FolderMap, attribute: str) -> str:
    """Look up a folder attribute by name; unknown or unset values are ``""``."""

    accessor = _ACCESSORS.get(_ALIASES.get(attribute, attribute))
    if accessor is None:
        return ""
    return accessor(folder) or ""


def render_task_name(template: str | None, folder: FolderMap) -> str:
    """Resolve the display name of a task against its owning folder."""

    if not template:
        return "N/A"
    variable = extract_variable(template)
    if variable is None:
        return template
    return template.replace(f"@{variable}", attribute_value(folder, variable), 1)
