"""Unit tests for the JSONL run log."""

from __future__ import annotations

from pathlib import Path

from skill_workflows.workflow.models import RunStatus, WorkflowRunEntry
from skill_workflows.workflow.run_store import WorkflowRunStore


def _entry(run_id: str, step_id: str, status: RunStatus, workflow: str = "ci") -> WorkflowRunEntry:
    return WorkflowRunEntry(
        run_id=run_id,
        workflow_name=workflow,
        step_id=step_id,
        status=status,
        started_at="2026-01-01T00:00:00+00:00",
    )


def test_empty_store_has_no_runs(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path / "patterns")

    assert store.read_all() == []
    assert store.get_completed_steps("run-1") == []
    assert store.get_latest_run("ci") is None


def test_append_creates_directory_and_one_line_per_entry(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path / "nested" / "patterns")

    store.append(_entry("run-1", "lint", "started"))
    store.append(_entry("run-1", "lint", "completed"))

    assert store.path.name == "workflow-runs.jsonl"
    assert len(store.path.read_text(encoding="utf-8").splitlines()) == 2
    assert [e.status for e in store.read_all()] == ["started", "completed"]


def test_completed_steps_ignore_started_and_failed(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path)
    for entry in [
        _entry("run-1", "lint", "started"),
        _entry("run-1", "lint", "completed"),
        _entry("run-1", "test", "started"),
        _entry("run-1", "test", "failed"),
        _entry("run-1", "build", "started"),
        _entry("run-2", "deploy", "completed"),
        _entry("run-1", "lint", "completed"),
    ]:
        store.append(entry)

    assert store.get_completed_steps("run-1") == ["lint"]
    assert store.get_completed_steps("run-2") == ["deploy"]
    assert len(store.get_run_entries("run-1")) == 6


def test_latest_run_is_the_last_appended_for_that_workflow(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path)
    store.append(_entry("run-1", "lint", "completed"))
    store.append(_entry("run-2", "lint", "started"))
    store.append(_entry("other-run", "x", "started", workflow="other"))

    latest = store.get_latest_run("ci")

    assert latest is not None
    assert latest.run_id == "run-2"
    assert latest.workflow_name == "ci"
    assert [e.step_id for e in latest.entries] == ["lint"]


def test_unreadable_lines_are_skipped(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path)
    store.append(_entry("run-1", "lint", "completed"))
    with open(store.path, "a", encoding="utf-8") as f:
        f.write("\n")
        f.write('{"run_id": "run-1", "status": "bogus"}\n')
        f.write('{"run_id": "run-1", "step_id": "te')

    assert store.get_completed_steps("run-1") == ["lint"]


def test_line_torn_inside_a_multibyte_character_is_skipped(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path)
    store.append(_entry("run-1", "lint", "completed"))
    failed = _entry("run-1", "test", "failed").model_copy(update={"error": "déjà vu"})
    torn = failed.model_dump_json().encode("utf-8")
    with open(store.path, "ab") as f:
        f.write(torn[: torn.index("é".encode("utf-8")) + 1])

    assert store.get_completed_steps("run-1") == ["lint"]

    store.append(_entry("run-1", "test", "completed"))

    assert store.get_completed_steps("run-1") == ["lint", "test"]
    assert store.path.read_bytes().endswith(b"\n")


def test_non_ascii_entries_survive_a_reread(tmp_path: Path) -> None:
    store = WorkflowRunStore(tmp_path)
    failed = _entry("run-1", "test", "failed").model_copy(update={"error": "déjà vu"})

    store.append(failed)

    assert [e.error for e in store.read_all()] == ["déjà vu"]
