"""Wire the runner to its file-backed collaborators."""

from __future__ import annotations

from skill_workflows.config import WorkflowSettings
from skill_workflows.work_state.store import WorkStateReader, WorkStateWriter
from skill_workflows.workflow.parser import WorkflowFileStore
from skill_workflows.workflow.run_store import WorkflowRunStore
from skill_workflows.workflow.runner import WorkflowRunner, WorkflowRunnerDeps
from skill_workflows.workflow.validator import SkillExists


def accept_any_skill(_name: str) -> bool:
    return True


def create_runner(
    settings: WorkflowSettings, *, skill_exists: SkillExists | None = None
) -> WorkflowRunner:
    """Create a runner over the configured definition directory, run log and Work State.

    Args:
        settings: Engine settings.
        skill_exists: Skill lookup. Defaults to accepting every skill, which is what
            the CLI and API do since skill installation is managed elsewhere.
    """
    definitions = WorkflowFileStore(settings.workflow_dir)
    return WorkflowRunner(
        WorkflowRunnerDeps(
            run_store=WorkflowRunStore(settings.runs_path),
            work_state_reader=WorkStateReader(settings.work_state_file),
            work_state_writer=WorkStateWriter(settings.work_state_file),
            skill_exists=skill_exists or accept_any_skill,
            load_workflow=definitions.load,
            max_extends_depth=settings.max_extends_depth,
        )
    )
