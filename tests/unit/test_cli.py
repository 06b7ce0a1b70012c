from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from skill_workflows.cli import main

_STEPS = json.dumps(
    [
        {"id": "lint", "skill": "linter"},
        {"id": "test", "skill": "tester", "needs": ["lint"]},
    ]
)


@pytest.fixture(autouse=True)
def project(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WORKFLOW_DIR", str(tmp_path / "workflows"))
    monkeypatch.setenv("WORKFLOW_RUNS_PATH", str(tmp_path / "patterns"))
    monkeypatch.setenv("WORK_STATE_PATH", str(tmp_path / "hooks" / "current-work.yaml"))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    # main() installs its own root handler; put pytest's back afterwards.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(capsys, *argv: str) -> tuple[int, dict]:
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


def test_create_writes_workflow_file(capsys, project: Path) -> None:
    code, out = _run(capsys, "create", "--name", "ci", "--steps", _STEPS)

    assert code == 0
    assert out["name"] == "ci"
    assert out["steps"] == 2
    assert out["execution_order"] == ["lint", "test"]
    assert (project / "workflows" / "ci.workflow.yaml").exists()


def test_create_rejects_bad_steps(capsys) -> None:
    code, out = _run(capsys, "create", "--name", "ci", "--steps", "not json")
    assert code == 1
    assert out == {"error": "Invalid JSON in --steps"}

    code, out = _run(capsys, "c", "--name", "ci", "--steps", "[]")
    assert code == 1
    assert out == {"error": "Steps must be a non-empty JSON array"}


def test_create_rejects_cycles(capsys, project: Path) -> None:
    steps = json.dumps(
        [
            {"id": "a", "skill": "sa", "needs": ["b"]},
            {"id": "b", "skill": "sb", "needs": ["a"]},
        ]
    )

    code, out = _run(capsys, "create", "--name", "loop", "--steps", steps)

    assert code == 1
    assert out["error"].startswith("Circular dependency detected: ")
    assert not (project / "workflows" / "loop.workflow.yaml").exists()


def test_validate_reports_order_and_missing(capsys) -> None:
    _run(capsys, "create", "--name", "ci", "--steps", _STEPS)

    code, out = _run(capsys, "validate", "ci")
    assert code == 0
    assert out["valid"] is True
    assert out["chain"] == ["ci"]
    assert out["execution_order"] == ["lint", "test"]

    code, out = _run(capsys, "v", "ghost")
    assert code == 1
    assert out == {"error": 'Workflow "ghost" not found'}


def test_run_then_status(capsys) -> None:
    _run(capsys, "create", "--name", "ci", "--steps", _STEPS)

    code, out = _run(capsys, "run", "ci")
    assert code == 0
    assert out["completed"] is True
    assert [s["step_id"] for s in out["steps_completed"]] == ["lint", "test"]

    code, status = _run(capsys, "status", "ci")
    assert code == 0
    assert status["run_id"] == out["run_id"]
    assert status["completed"] == ["lint", "test"]
    assert status["remaining"] == []
    assert status["all_done"] is True


def test_status_without_runs(capsys) -> None:
    code, out = _run(capsys, "s", "ci")
    assert code == 0
    assert out == {"workflow": "ci", "status": "no-runs"}


def test_run_unknown_workflow_fails(capsys) -> None:
    code, out = _run(capsys, "run", "ghost")
    assert code == 1
    assert out == {"error": 'Workflow "ghost" not found'}


def test_resume_with_nothing_interrupted_fails(capsys) -> None:
    code, out = _run(capsys, "run", "--resume")
    assert code == 1
    assert out == {"error": "No interrupted workflow found to resume"}


def test_resume_finishes_interrupted_run(capsys, project: Path) -> None:
    _run(capsys, "create", "--name", "ci", "--steps", _STEPS)
    runs = project / "patterns" / "workflow-runs.jsonl"
    runs.parent.mkdir(parents=True)
    runs.write_text(
        json.dumps(
            {
                "run_id": "run-1",
                "workflow_name": "ci",
                "step_id": "lint",
                "status": "completed",
                "started_at": "2026-01-01T00:00:00+00:00",
            }
        )
        + "\n",
        encoding="utf-8",
    )
    state = project / "hooks" / "current-work.yaml"
    state.parent.mkdir(parents=True)
    state.write_text(
        "workflow:\n  name: ci\n  current_step: test\n  completed_steps: [lint]\n",
        encoding="utf-8",
    )

    code, out = _run(capsys, "run", "--resume")

    assert code == 0
    assert out["run_id"] == "run-1"
    assert [s["step_id"] for s in out["steps_completed"]] == ["test"]


def test_list_json_and_pretty(capsys) -> None:
    code, out = _run(capsys, "list")
    assert code == 0
    assert out == {"workflows": []}

    _run(capsys, "create", "--name", "ci", "--steps", _STEPS, "--description", "Checks")

    code, out = _run(capsys, "l")
    assert out["workflows"] == [
        {"name": "ci", "description": "Checks", "steps": 2, "file": "ci.workflow.yaml"}
    ]

    assert main(["list", "--pretty"]) == 0
    assert "ci - Checks (2 steps)" in capsys.readouterr().out


def test_bad_configuration_exits_with_2(monkeypatch, capsys) -> None:
    monkeypatch.setenv("WORKFLOW_MAX_EXTENDS_DEPTH", "not-a-number")

    assert main(["list"]) == 2
    assert "Configuration error" in capsys.readouterr().err
