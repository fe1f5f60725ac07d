from __future__ import annotations

import allure
import pytest

from folder_relay.relay.failure_classifier import (
    CYCLE_FAILURE_CLASSIFIER_VERSION,
    CycleFaultClass,
    classify_cycle_failure,
)

pytestmark = [
    allure.epic("Polling Worker"),
    allure.feature("Cycle Failure Backoff"),
]


def test_classifier_version_is_stable() -> None:
    assert CYCLE_FAILURE_CLASSIFIER_VERSION == 1


@pytest.mark.parametrize(
    ("error", "fault_class", "backoff"),
    [
        (FileNotFoundError("missing"), CycleFaultClass.PATH_NOT_FOUND, 60.0),
        (NotADirectoryError("not a dir"), CycleFaultClass.PATH_NOT_FOUND, 60.0),
        (PermissionError("denied"), CycleFaultClass.PERMISSION_DENIED, 60.0),
        (OSError("disk"), CycleFaultClass.IO_FAILURE, 30.0),
        (ValueError("boom"), CycleFaultClass.UNEXPECTED, 60.0),
    ],
)
def test_classifier_maps_fault_to_backoff(
    error: Exception,
    fault_class: CycleFaultClass,
    backoff: float,
) -> None:
    classified = classify_cycle_failure(error, cancellation_requested=False)
    assert classified.fault_class is fault_class
    assert classified.backoff_seconds == backoff
    assert classified.retryable


def test_cancellation_wins_over_fault_type() -> None:
    classified = classify_cycle_failure(OSError("disk"), cancellation_requested=True)
    assert classified.fault_class is CycleFaultClass.CANCELLED
    assert classified.backoff_seconds == 0.0
    assert not classified.retryable


def test_log_details_include_rule() -> None:
    details = classify_cycle_failure(
        PermissionError("x"),
        cancellation_requested=False,
    ).to_log_details()
    assert details == {
        "classifier_version": 1,
        "fault_class": "permission_denied",
        "backoff_seconds": 60.0,
        "matched_rule": "PermissionError",
    }
