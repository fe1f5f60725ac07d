"""Remote store backed by a mounted directory."""

from __future__ import annotations

import shutil
from pathlib import Path

from folder_relay.remote.base import RemoteStoreError, remote_parts


class DirectoryRemoteStore:
    """Copies files below a root directory, e.g. a network share mount."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def upload(self, local_file: Path, remote_dir: str) -> None:
        target_dir = self._target_dir(remote_dir)
        partial = target_dir / f".{local_file.name}.part"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(local_file, partial)
            partial.replace(target_dir / local_file.name)
        except OSError as error:
            partial.unlink(missing_ok=True)
            raise RemoteStoreError(
                f"Copy of {local_file.name} to {target_dir} failed: {error}",
            ) from error

    def exists(self, remote_dir: str, file_name: str) -> bool:
        return (self._target_dir(remote_dir) / file_name).is_file()

    def _target_dir(self, remote_dir: str) -> Path:
        return self.root.joinpath(*remote_parts(remote_dir))
