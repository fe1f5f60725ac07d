"""Remote store interface used by transfer and verify steps."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class RemoteStoreError(RuntimeError):
    """Remote write or lookup failed."""


class RemoteStore(Protocol):
    """Protocol implemented by remote destinations."""

    def upload(self, local_file: Path, remote_dir: str) -> None:
        """Write ``local_file`` under ``remote_dir``.

        Raises ``RemoteStoreError`` unless the write was acknowledged.
        """

    def exists(self, remote_dir: str, file_name: str) -> bool:
        """Return whether ``file_name`` is present under ``remote_dir``."""


def remote_parts(remote_dir: str) -> list[str]:
    """Split a remote directory into clean path segments."""

    parts = [part for part in remote_dir.replace("\\", "/").split("/") if part not in {"", "."}]
    if ".." in parts:
        raise RemoteStoreError(f"Remote path must not escape the store root: {remote_dir!r}")
    return parts
