"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from skill_workflows.config import WorkflowSettings
from skill_workflows.work_state.store import WorkStateReader, WorkStateWriter
from skill_workflows.workflow.models import WorkflowDefinition, WorkflowStep
from skill_workflows.workflow.run_store import WorkflowRunStore
from skill_workflows.workflow.runner import WorkflowRunner, WorkflowRunnerDeps


def _make_workflow(
    name: str,
    steps: list[tuple[str, str, list[str]]],
    extends: str | None = None,
) -> WorkflowDefinition:
    """Build a definition from ``(id, skill, needs)`` tuples."""
    return WorkflowDefinition(
        name=name,
        extends=extends,
        steps=[WorkflowStep(id=i, skill=s, needs=n) for i, s, n in steps],
    )


@pytest.fixture
def make_workflow() -> Callable[..., WorkflowDefinition]:
    return _make_workflow


@pytest.fixture
def linear_workflow() -> WorkflowDefinition:
    return _make_workflow(
        "deploy-flow",
        [
            ("lint", "linter", []),
            ("test", "tester", ["lint"]),
            ("deploy", "deployer", ["test"]),
        ],
    )


@pytest.fixture
def workflows(linear_workflow: WorkflowDefinition) -> dict[str, WorkflowDefinition]:
    """Mutable in-memory definition source, keyed by name."""
    return {linear_workflow.name: linear_workflow}


@pytest.fixture
def run_store(tmp_path: Path) -> WorkflowRunStore:
    return WorkflowRunStore(tmp_path / "patterns")


@pytest.fixture
def work_state_path(tmp_path: Path) -> Path:
    return tmp_path / "hooks" / "current-work.yaml"


@pytest.fixture
def make_runner(
    workflows: dict[str, WorkflowDefinition],
    run_store: WorkflowRunStore,
    work_state_path: Path,
) -> Callable[..., WorkflowRunner]:
    """Build a runner over real on-disk stores; call again to simulate a restart."""

    def _make(skill_exists: Callable[[str], bool] = lambda _s: True) -> WorkflowRunner:
        return WorkflowRunner(
            WorkflowRunnerDeps(
                run_store=run_store,
                work_state_reader=WorkStateReader(work_state_path),
                work_state_writer=WorkStateWriter(work_state_path),
                skill_exists=skill_exists,
                load_workflow=workflows.get,
            )
        )

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> WorkflowSettings:
    """Provide settings rooted in a temporary project directory."""
    return WorkflowSettings(
        workflow_dir=tmp_path / ".claude" / "workflows",
        runs_path=tmp_path / ".planning" / "patterns",
        work_state_path=tmp_path / ".planning" / "hooks" / "current-work.yaml",
        log_level="DEBUG",
        _env_file=None,
    )
