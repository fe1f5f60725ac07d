"""Per-folder chain execution with fail-fast quarantine."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from folder_relay.relay.actions import NotifyAction, TaskAction, render_report
from folder_relay.relay.models import (
    FolderBatch,
    FolderMap,
    FolderRunReport,
    FolderRunState,
    TaskKind,
    TaskResult,
)
from folder_relay.relay.resolver import TaskResolver, ordered_task_maps

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_COOLDOWN_SECONDS = 1.0


class FolderProcessor:
    """Resolves and runs the chain of one folder per call."""

    def __init__(
        self,
        *,
        resolver: TaskResolver,
        stop_event: threading.Event,
        failure_cooldown_seconds: float = DEFAULT_FAILURE_COOLDOWN_SECONDS,
        wait: Callable[[float], bool] | None = None,
    ) -> None:
        self.resolver = resolver
        self.stop_event = stop_event
        self.failure_cooldown_seconds = failure_cooldown_seconds
        self._wait = wait or stop_event.wait

    def process(self, folder: FolderMap) -> FolderRunReport:
        """Run one pass over ``folder``; step failures never propagate."""

        report = FolderRunReport(folder_name=folder.display_name)
        logger.info("Processing folder: %s", folder.display_name)
        logger.info("Folder path: %s", folder.folder_path or "N/A")
        logger.info("Remote destination: %s", folder.remote_path or "N/A")
        logger.info("Destination on error: %s", folder.error_path or "N/A")
        logger.info("Destination on success: %s", folder.success_path or "N/A")
        logger.info("Notification address: %s", folder.notify_email or "N/A")

        if not folder.task_maps:
            logger.warning("No tasks mapped for folder %s", folder.display_name)
            self._transition(report, FolderRunState.COMPLETED)
            return report
        if folder.notify_email and not any(
            task_map.task.strip().lower() == TaskKind.NOTIFY.value for task_map in folder.task_maps
        ):
            logger.warning(
                "Folder %s has a notification address but no notify task",
                folder.display_name,
            )

        if not folder.folder_path:
            raise FileNotFoundError(f"Folder {folder.display_name} has no source path")
        batch = FolderBatch.snapshot(Path(folder.folder_path))
        messages: list[str] = []
        actions = self.build_actions(folder, batch, messages)
        self.run_chain(actions, folder, report, messages)
        report.report_html = render_report(messages, title=folder.display_name)
        return report

    def build_actions(
        self,
        folder: FolderMap,
        batch: FolderBatch,
        messages: list[str],
    ) -> list[TaskAction]:
        actions: list[TaskAction] = []
        for task_map in ordered_task_maps(folder):
            if self.stop_event.is_set():
                break
            try:
                action = self.resolver.resolve(task_map, folder, batch, messages)
            except Exception:
                logger.exception("Could not create task %s", task_map.name or "N/A")
                continue
            logger.info("[%s] Creating task: %s", task_map.order, action.name)
            actions.append(action)
        return actions

    def run_chain(
        self,
        actions: list[TaskAction],
        folder: FolderMap,
        report: FolderRunReport,
        messages: list[str],
    ) -> FolderRunState:
        """Drive ``actions`` through the running/failed/completed state machine."""

        for index, action in enumerate(actions):
            if self.stop_event.is_set():
                logger.info("Folder %s interrupted by cancellation", folder.display_name)
                return report.state
            if report.state is not FolderRunState.RUNNING:
                break

            logger.info("Executing task: %s", action.name)
            result = self._execute(action)
            report.executed.append(action.name)
            message = result.message if result else f"{action.name}: result not available"
            messages.append(message)

            if result is None or not result.success:
                logger.error(message)
                self._fail(action, folder, report)
                break

            logger.info(message)
            if action.kind is TaskKind.NOTIFY:
                report.notified = isinstance(action, NotifyAction) and action.sent
                remaining = len(actions) - index - 1
                if remaining:
                    logger.warning(
                        "Notify ends the chain of %s; %d later task(s) not run",
                        folder.display_name,
                        remaining,
                    )
                break

        if report.state is FolderRunState.RUNNING:
            self._transition(report, FolderRunState.COMPLETED)
        return report.state

    def _execute(self, action: TaskAction) -> TaskResult | None:
        try:
            return action.execute()
        except Exception as error:
            logger.exception("Unexpected error running task %s", action.name)
            return TaskResult.fail(f"{action.name}: unexpected error: {error}")

    def _fail(self, action: TaskAction, folder: FolderMap, report: FolderRunReport) -> None:
        self._transition(report, FolderRunState.FAILED)
        logger.error("Task %s failed, not continuing to the next task", action.name)
        try:
            result = action.relocate_to_error(folder.error_path)
        except Exception:
            logger.exception("Could not move files to the error folder of %s", folder.display_name)
        else:
            if result.success:
                report.quarantined = True
                logger.error(result.message)
            else:
                logger.error("Quarantine incomplete: %s", result.message)
        # Cooldown before control returns to the worker.
        self._wait(self.failure_cooldown_seconds)

    def _transition(self, report: FolderRunReport, state: FolderRunState) -> None:
        logger.info("Folder %s: %s -> %s", report.folder_name, report.state.value, state.value)
        report.state = state
