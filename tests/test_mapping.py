from __future__ import annotations

import json
import logging
from pathlib import Path

import allure
import pytest

from folder_relay.relay.mapping import MappingError, load_app_task, parse_app_task
from folder_relay.relay.models import DeletePolicy, TaskMap

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Folder Mapping"),
]

MAPPING = {
    "name": "Invoice relay",
    "version": "2.1",
    "folders": [
        {
            "name": "invoices",
            "folder_path": "/data/invoices/in",
            "remote_path": "/upload/invoices",
            "success_path": "/data/invoices/done",
            "error_path": "/data/invoices/error",
            "notify_email": "ops@example.com",
            "delete_from": "success",
            "tasks": [
                {"order": 1, "name": "Copy to @remote_path", "task": "transfer"},
                {"order": "2", "name": "Notify", "task": "notify"},
            ],
        },
        {"name": "reports", "folder_path": "/data/reports", "notify_email": "  "},
    ],
}


def test_parse_app_task_builds_folder_maps() -> None:
    app_task = parse_app_task(MAPPING)

    assert app_task.name == "Invoice relay"
    assert app_task.version == "2.1"
    invoices, reports = app_task.folder_maps
    assert invoices.delete_from is DeletePolicy.SUCCESS
    assert invoices.task_maps == (
        TaskMap(order=1, name="Copy to @remote_path", task="transfer"),
        TaskMap(order=2, name="Notify", task="notify"),
    )
    assert reports.notify_email is None
    assert reports.delete_from is DeletePolicy.SOURCE
    assert reports.task_maps == ()


def test_parse_rejects_invalid_delete_policy() -> None:
    with pytest.raises(MappingError, match="invalid delete_from 'nowhere'"):
        parse_app_task({"folders": [{"name": "x", "delete_from": "nowhere"}]})


def test_parse_rejects_invalid_order() -> None:
    with pytest.raises(MappingError, match="invalid task order"):
        parse_app_task({"folders": [{"tasks": [{"order": "first", "task": "transfer"}]}]})


def test_parse_rejects_non_object_root() -> None:
    with pytest.raises(MappingError):
        parse_app_task(["not", "a", "mapping"])


def test_load_app_task_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "folder_relay.json"
    path.write_text(json.dumps(MAPPING), encoding="utf-8")
    app_task = load_app_task(path)
    assert app_task is not None
    assert len(app_task.folder_maps) == 2


def test_load_app_task_missing_file_returns_none(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.ERROR):
        assert load_app_task(tmp_path / "absent.json") is None
    assert "Mapping file not found" in caplog.text


def test_load_app_task_malformed_json_returns_none(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_app_task(path) is None


def test_load_app_task_with_no_folders_is_empty(tmp_path: Path) -> None:
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"name": "relay"}), encoding="utf-8")
    app_task = load_app_task(path)
    assert app_task is not None
    assert app_task.folder_maps == ()
