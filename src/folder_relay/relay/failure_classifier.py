"""Deterministic cycle failure classification for worker backoff policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CYCLE_FAILURE_CLASSIFIER_VERSION = 1

PATH_NOT_FOUND_BACKOFF_SECONDS = 60.0
PERMISSION_DENIED_BACKOFF_SECONDS = 60.0
IO_FAILURE_BACKOFF_SECONDS = 30.0
UNEXPECTED_BACKOFF_SECONDS = 60.0


class CycleFaultClass(str, Enum):
    """Normalized classes of faults escaping a whole cycle."""

    CANCELLED = "cancelled"
    PATH_NOT_FOUND = "path_not_found"
    PERMISSION_DENIED = "permission_denied"
    IO_FAILURE = "io_failure"
    UNEXPECTED = "unexpected"


# First matching rule wins; subclasses of OSError come before OSError itself.
_RULES: tuple[tuple[tuple[type[BaseException], ...], CycleFaultClass, float], ...] = (
    (
        (FileNotFoundError, NotADirectoryError),
        CycleFaultClass.PATH_NOT_FOUND,
        PATH_NOT_FOUND_BACKOFF_SECONDS,
    ),
    ((PermissionError,), CycleFaultClass.PERMISSION_DENIED, PERMISSION_DENIED_BACKOFF_SECONDS),
    ((OSError,), CycleFaultClass.IO_FAILURE, IO_FAILURE_BACKOFF_SECONDS),
)


@dataclass(frozen=True, slots=True)
class CycleFailureClassification:
    """Normalized classification result."""

    fault_class: CycleFaultClass
    backoff_seconds: float
    matched_rule: str

    @property
    def retryable(self) -> bool:
        return self.fault_class is not CycleFaultClass.CANCELLED

    def to_log_details(self) -> dict[str, object]:
        return {
            "classifier_version": CYCLE_FAILURE_CLASSIFIER_VERSION,
            "fault_class": self.fault_class.value,
            "backoff_seconds": self.backoff_seconds,
            "matched_rule": self.matched_rule,
        }


def classify_cycle_failure(
    error: BaseException,
    *,
    cancellation_requested: bool,
) -> CycleFailureClassification:
    """Classify a fault escaping cycle processing into a backoff class."""

    if cancellation_requested:
        return CycleFailureClassification(
            fault_class=CycleFaultClass.CANCELLED,
            backoff_seconds=0.0,
            matched_rule="cancellation_requested",
        )

    for error_types, fault_class, backoff_seconds in _RULES:
        if isinstance(error, error_types):
            return CycleFailureClassification(
                fault_class=fault_class,
                backoff_seconds=backoff_seconds,
                matched_rule=type(error).__name__,
            )

    return CycleFailureClassification(
        fault_class=CycleFaultClass.UNEXPECTED,
        backoff_seconds=UNEXPECTED_BACKOFF_SECONDS,
        matched_rule="fallback_unexpected",
    )
