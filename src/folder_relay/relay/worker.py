"""Polling worker that walks every configured folder on a fixed interval."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from folder_relay.relay.failure_classifier import CycleFaultClass, classify_cycle_failure
from folder_relay.relay.models import AppTask, FolderMap, FolderRunState, WorkerRunSummary
from folder_relay.relay.processor import FolderProcessor

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 300.0


class RelayWorker:
    """Maps configuration once, then processes all folders per cycle until stopped."""

    def __init__(
        self,
        *,
        mapper: Callable[[], AppTask | None],
        processor: FolderProcessor,
        stop_event: threading.Event,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        wait: Callable[[float], bool] | None = None,
    ) -> None:
        self.mapper = mapper
        self.processor = processor
        self.stop_event = stop_event
        self.interval_seconds = interval_seconds
        self._wait = wait or stop_event.wait

    def map_app_task(self) -> AppTask | None:
        """Resolve configuration; ``None`` when there is nothing to process."""

        logger.info("Mapping folders to process...")
        app_task = self.mapper()
        logger.info("Mapped folders: %d", len(app_task.folder_maps) if app_task else 0)
        if app_task is None:
            logger.warning("Stopping without work: no mapping or mapping failed")
            return None
        if not app_task.folder_maps:
            logger.warning("No folders mapped for processing")
            return None
        logger.info(
            "Running: %s - Version: %s",
            app_task.name or "N/A",
            app_task.version or "N/A",
        )
        return app_task

    def run_once(self) -> WorkerRunSummary:
        """Map and process every folder once, without waiting."""

        summary = WorkerRunSummary()
        app_task = self.map_app_task()
        if app_task is None:
            summary.aborted = True
            return summary
        summary.cycles = 1
        self.run_cycle(app_task.folder_maps, summary)
        return summary

    def run_loop(self, *, max_cycles: int | None = None) -> WorkerRunSummary:
        """Process cycles until cancelled.

        Args:
            max_cycles: Stop after this many cycle attempts (None = unlimited).
        """

        summary = WorkerRunSummary()
        logger.info("Processing started: %s", datetime.now().isoformat(timespec="seconds"))
        try:
            app_task = self.map_app_task()
            if app_task is None:
                summary.aborted = True
                return summary

            with self._signal_handlers():
                while not self.stop_event.is_set():
                    if max_cycles is not None and summary.cycles >= max_cycles:
                        break
                    summary.cycles += 1
                    try:
                        self.run_cycle(app_task.folder_maps, summary)
                        logger.info("All tasks were executed.")
                        if _cycles_exhausted(summary, max_cycles):
                            break
                        self.wait_for_next_cycle()
                    except Exception as error:
                        if not self._back_off(
                            error,
                            summary,
                            last_cycle=_cycles_exhausted(summary, max_cycles),
                        ):
                            break
        except Exception as error:
            logger.critical("Critical service error: %s", error, exc_info=True)
            raise
        logger.info("Processing stopped: %s", datetime.now().isoformat(timespec="seconds"))
        return summary

    def run_cycle(self, folder_maps: tuple[FolderMap, ...], summary: WorkerRunSummary) -> None:
        for folder in folder_maps:
            if self.stop_event.is_set():
                break
            try:
                report = self.processor.process(folder)
            except Exception as error:
                logger.error(
                    "Error processing folder %s: %s",
                    folder.display_name,
                    error,
                    exc_info=True,
                )
                summary.folder_errors += 1
                continue
            summary.folders_processed += 1
            if report.state is FolderRunState.COMPLETED:
                summary.folders_completed += 1
            elif report.state is FolderRunState.FAILED:
                summary.folders_failed += 1

    def wait_for_next_cycle(self) -> None:
        next_run = datetime.now() + timedelta(seconds=self.interval_seconds)
        logger.info("Next execution at: %s", next_run.isoformat(timespec="seconds"))
        if self._wait(self.interval_seconds):
            logger.info("Interval wait cancelled")

    def _back_off(self, error: Exception, summary: WorkerRunSummary, *, last_cycle: bool) -> bool:
        """Log and wait out a cycle fault; ``False`` means stop the loop."""

        classified = classify_cycle_failure(
            error,
            cancellation_requested=self.stop_event.is_set(),
        )
        if not classified.retryable:
            logger.info("Processing cancelled")
            return False

        details = {"cycle_failure": classified.to_log_details()}
        if classified.fault_class is CycleFaultClass.PATH_NOT_FOUND:
            logger.error("Directory not found: %s", error, extra=details)
        elif classified.fault_class is CycleFaultClass.PERMISSION_DENIED:
            logger.error("Access denied: %s", error, extra=details)
        elif classified.fault_class is CycleFaultClass.IO_FAILURE:
            logger.error("I/O error: %s", error, extra=details)
        else:
            logger.error(
                "Unexpected error during processing: %s",
                error,
                exc_info=True,
                extra=details,
            )

        if last_cycle:
            return False
        logger.info(
            "Retrying cycle in %.0fs (%s)",
            classified.backoff_seconds,
            classified.matched_rule,
        )
        summary.backoffs += 1
        self._wait(classified.backoff_seconds)
        return True

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        if not hasattr(signal, "SIGINT"):
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = str(signum)
            logger.info("Stop requested by %s", name)
            self.stop_event.set()

        try:
            signal.signal(signal.SIGINT, _handler)
            signal.signal(signal.SIGTERM, _handler)
        except ValueError:
            # Signal handlers can only be installed in main thread.
            yield
            return
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)


def _cycles_exhausted(summary: WorkerRunSummary, max_cycles: int | None) -> bool:
    return max_cycles is not None and summary.cycles >= max_cycles
