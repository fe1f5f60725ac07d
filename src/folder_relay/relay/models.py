"""Domain models for folder mappings and task-chain execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TaskKind(str, Enum):
    """Closed set of operations a chain step can perform."""

    TRANSFER = "transfer"
    VERIFY = "verify"
    RELOCATE = "relocate"
    DELETE = "delete"
    NOTIFY = "notify"


class DeletePolicy(str, Enum):
    """Where the delete step removes copied files from."""

    SOURCE = "source"
    SUCCESS = "success"


class FolderRunState(str, Enum):
    """States of one folder pass."""

    RUNNING = "running"
    FAILED = "failed"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class TaskMap:
    """Declarative chain step as read from the mapping file."""

    order: int
    name: str | None
    task: str


@dataclass(frozen=True, slots=True)
class FolderMap:
    """One monitored folder and its chain."""

    name: str | None = None
    folder_path: str | None = None
    remote_path: str | None = None
    success_path: str | None = None
    error_path: str | None = None
    notify_email: str | None = None
    delete_from: DeletePolicy = DeletePolicy.SOURCE
    task_maps: tuple[TaskMap, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name or "N/A"


@dataclass(frozen=True, slots=True)
class AppTask:
    """Root of one mapping run."""

    name: str | None = None
    version: str | None = None
    folder_maps: tuple[FolderMap, ...] = ()


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Uniform outcome of one action."""

    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> TaskResult:
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> TaskResult:
        return cls(success=False, message=message)


@dataclass(slots=True)
class FolderBatch:
    """Local files one folder pass is operating on.

    The snapshot is taken once when the pass starts; later steps narrow it down
    to what was transferred and where relocated files ended up.
    """

    files: list[Path] = field(default_factory=list)
    transferred: list[Path] = field(default_factory=list)
    relocated: list[Path] = field(default_factory=list)

    @classmethod
    def snapshot(cls, folder: Path) -> FolderBatch:
        """Collect regular files directly inside ``folder`` in name order."""

        if not folder.is_dir():
            raise FileNotFoundError(f"Source folder not found: {folder}")
        return cls(files=sorted(path for path in folder.iterdir() if path.is_file()))


@dataclass(slots=True)
class FolderRunReport:
    """Outcome of one folder pass."""

    folder_name: str
    state: FolderRunState = FolderRunState.RUNNING
    executed: list[str] = field(default_factory=list)
    report_html: str = ""
    quarantined: bool = False
    notified: bool = False


@dataclass(slots=True)
class WorkerRunSummary:
    """Aggregate worker counters for CLI reporting."""

    cycles: int = 0
    folders_processed: int = 0
    folders_completed: int = 0
    folders_failed: int = 0
    folder_errors: int = 0
    backoffs: int = 0
    aborted: bool = False
