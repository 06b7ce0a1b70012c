"""Step-by-step workflow runner with crash recovery.

The runner tracks state; it does not execute step work. An external executor brackets
each step with :meth:`WorkflowRunner.advance_step` and either
:meth:`WorkflowRunner.complete_step` or :meth:`WorkflowRunner.fail_step`.

Two artefacts are kept:

- the run log (JSONL), the source of truth for which steps have completed;
- the Work State ``workflow`` pointer, a hint that says WHICH workflow to resume and
  roughly where. It may be stale and is never trusted for completion.

``start`` raises on composition or validation errors. ``resume`` and ``get_status``
degrade to empty results for the same class of errors so that a status check never
crashes on a definition edited after the run started.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Protocol

from skill_workflows.work_state.models import WorkflowPointer, WorkState, utc_now_iso

from .dag import WorkflowDAG
from .extends import DEFAULT_MAX_EXTENDS_DEPTH, ExtendsError, WorkflowLoader, resolve_extends
from .models import RunStatus, RunSummary, StepResult, WorkflowDefinition, WorkflowRunEntry
from .validator import SkillExists, validate_workflow

logger = logging.getLogger(__name__)


class RunLog(Protocol):
    """Append-only event log; see :class:`~skill_workflows.workflow.run_store.WorkflowRunStore`."""

    def append(self, entry: WorkflowRunEntry) -> None: ...

    def get_run_entries(self, run_id: str) -> list[WorkflowRunEntry]: ...

    def get_completed_steps(self, run_id: str) -> list[str]: ...

    def get_latest_run(self, workflow_name: str) -> RunSummary | None: ...


class WorkStateSource(Protocol):
    def read(self) -> WorkState | None: ...


class WorkStateSink(Protocol):
    def save(self, state: WorkState) -> None: ...


class WorkflowError(ValueError):
    pass


class WorkflowNotFoundError(WorkflowError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Workflow "{name}" not found')
        self.name = name


class WorkflowStartError(WorkflowError):
    """A workflow could not be started because it does not resolve or validate."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Workflow validation failed: {', '.join(errors)}")
        self.errors = errors


@dataclass(frozen=True, slots=True)
class RunStarted:
    run_id: str
    steps: list[str]


@dataclass(frozen=True, slots=True)
class RunResumed:
    run_id: str
    remaining_steps: list[str]


@dataclass(frozen=True, slots=True)
class RunStatusReport:
    completed: list[str] = field(default_factory=list)
    remaining: list[str] = field(default_factory=list)
    current: str | None = None


@dataclass
class WorkflowRunnerDeps:
    run_store: RunLog
    work_state_reader: WorkStateSource
    work_state_writer: WorkStateSink
    skill_exists: SkillExists
    load_workflow: WorkflowLoader
    max_extends_depth: int = DEFAULT_MAX_EXTENDS_DEPTH


class WorkflowRunner:
    def __init__(self, deps: WorkflowRunnerDeps) -> None:
        self._deps = deps
        self._run_workflows: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, workflow_name: str) -> RunStarted:
        """Start a new run of ``workflow_name``.

        Loads, resolves and validates the workflow, then writes the Work State
        pointer at the first step of the execution order.

        Raises:
            WorkflowNotFoundError: No definition with that name exists.
            WorkflowStartError: The extends chain or the definition is invalid.
        """
        definition = self._deps.load_workflow(workflow_name)
        if definition is None:
            raise WorkflowNotFoundError(workflow_name)

        resolution = resolve_extends(
            definition, self._deps.load_workflow, max_depth=self._deps.max_extends_depth
        )
        if isinstance(resolution, ExtendsError):
            raise WorkflowStartError([f"Extends resolution failed: {resolution.message}"])

        validation = validate_workflow(resolution.resolved, self._deps.skill_exists)
        if not validation.valid or validation.execution_order is None:
            raise WorkflowStartError(validation.errors)

        order = validation.execution_order
        run_id = str(uuid.uuid4())
        self._run_workflows[run_id] = workflow_name

        current = self._deps.work_state_reader.read() or WorkState()
        self._deps.work_state_writer.save(
            current.model_copy(
                update={
                    "saved_at": utc_now_iso(),
                    "workflow": WorkflowPointer(
                        name=workflow_name,
                        current_step=order[0] if order else None,
                        completed_steps=[],
                    ),
                }
            )
        )

        logger.info(
            "Workflow run started",
            extra={"workflow": workflow_name, "run_id": run_id, "steps": order},
        )
        return RunStarted(run_id=run_id, steps=order)

    def resume(self) -> RunResumed | None:
        """Find the interrupted run and the steps it still has to do.

        The remaining steps are the fresh execution order minus the steps the run log
        records as completed. The pointer's own ``completed_steps`` is ignored.
        """
        state = self._deps.work_state_reader.read()
        if state is None or state.workflow is None:
            logger.info("Nothing to resume")
            return None

        workflow_name = state.workflow.name
        order = self._execution_order(workflow_name)
        if order is None:
            return None

        latest = self._deps.run_store.get_latest_run(workflow_name)
        if latest is None:
            logger.warning("No recorded run to resume", extra={"workflow": workflow_name})
            return None

        self._run_workflows[latest.run_id] = workflow_name
        completed = set(self._deps.run_store.get_completed_steps(latest.run_id))
        remaining = [step_id for step_id in order if step_id not in completed]

        logger.info(
            "Workflow run resumed",
            extra={"workflow": workflow_name, "run_id": latest.run_id, "remaining": remaining},
        )
        return RunResumed(run_id=latest.run_id, remaining_steps=remaining)

    # ------------------------------------------------------------------
    # Step transitions
    # ------------------------------------------------------------------

    def advance_step(self, run_id: str, step_id: str) -> StepResult:
        """Record that ``step_id`` has started."""
        self._append(run_id, step_id, "started")
        return StepResult(step_id=step_id, status="started")

    def complete_step(self, run_id: str, step_id: str) -> None:
        """Record completion of ``step_id`` and move the Work State pointer on.

        Clears the pointer once every resolved step is complete.
        """
        now = utc_now_iso()
        self._append(run_id, step_id, "completed", completed_at=now)

        state = self._deps.work_state_reader.read()
        if state is None or state.workflow is None:
            return

        pointer = state.workflow
        completed = list(dict.fromkeys([*pointer.completed_steps, step_id]))
        for logged in self._deps.run_store.get_completed_steps(run_id):
            if logged not in completed:
                completed.append(logged)

        definition = self._resolve_quietly(pointer.name)
        if definition is not None and all(s in completed for s in definition.step_ids):
            self._deps.work_state_writer.save(
                state.model_copy(update={"saved_at": now, "workflow": None})
            )
            self._run_workflows.pop(run_id, None)
            logger.info(
                "Workflow run finished", extra={"workflow": pointer.name, "run_id": run_id}
            )
            return

        next_step = step_id
        if definition is not None:
            cycle_result = WorkflowDAG.from_steps(definition.steps).detect_cycles()
            if not cycle_result.has_cycle:
                done = set(completed)
                pending = [s for s in cycle_result.topological_order or [] if s not in done]
                if pending:
                    next_step = pending[0]

        self._deps.work_state_writer.save(
            state.model_copy(
                update={
                    "saved_at": now,
                    "workflow": WorkflowPointer(
                        name=pointer.name,
                        current_step=next_step,
                        completed_steps=completed,
                    ),
                }
            )
        )

    def fail_step(self, run_id: str, step_id: str, error: str) -> None:
        """Record a failed step.

        The Work State pointer is left as it is: the run is paused, not finished, and
        stays resumable.
        """
        self._append(run_id, step_id, "failed", error=error)
        logger.warning(
            "Workflow step failed",
            extra={"run_id": run_id, "step_id": step_id, "error": error},
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_status(self, run_id: str) -> RunStatusReport:
        completed = self._deps.run_store.get_completed_steps(run_id)

        state = self._deps.work_state_reader.read()
        if state is None or state.workflow is None:
            return RunStatusReport(completed=completed)

        order = self._execution_order(state.workflow.name)
        if order is None:
            return RunStatusReport()

        done = set(completed)
        remaining = [step_id for step_id in order if step_id not in done]
        return RunStatusReport(
            completed=completed,
            remaining=remaining,
            current=remaining[0] if remaining else None,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_quietly(self, workflow_name: str) -> WorkflowDefinition | None:
        definition = self._deps.load_workflow(workflow_name)
        if definition is None:
            logger.warning("Workflow definition not found", extra={"workflow": workflow_name})
            return None

        resolution = resolve_extends(
            definition, self._deps.load_workflow, max_depth=self._deps.max_extends_depth
        )
        if isinstance(resolution, ExtendsError):
            logger.warning(
                "Workflow extends chain no longer resolves",
                extra={"workflow": workflow_name, "error": resolution.message},
            )
            return None
        return resolution.resolved

    def _execution_order(self, workflow_name: str) -> list[str] | None:
        definition = self._resolve_quietly(workflow_name)
        if definition is None:
            return None

        cycle_result = WorkflowDAG.from_steps(definition.steps).detect_cycles()
        if cycle_result.has_cycle:
            logger.warning(
                "Workflow definition now contains a cycle",
                extra={"workflow": workflow_name, "cycle": cycle_result.cycle},
            )
            return None
        return cycle_result.topological_order

    def _workflow_name_for(self, run_id: str) -> str:
        name = self._run_workflows.get(run_id)
        if name is not None:
            return name

        entries = self._deps.run_store.get_run_entries(run_id)
        if entries:
            name = entries[0].workflow_name
        else:
            state = self._deps.work_state_reader.read()
            name = state.workflow.name if state and state.workflow else ""

        if name:
            self._run_workflows[run_id] = name
        return name

    def _append(
        self,
        run_id: str,
        step_id: str,
        status: RunStatus,
        *,
        completed_at: str | None = None,
        error: str | None = None,
    ) -> None:
        self._deps.run_store.append(
            WorkflowRunEntry(
                run_id=run_id,
                workflow_name=self._workflow_name_for(run_id),
                step_id=step_id,
                status=status,
                started_at=utc_now_iso(),
                completed_at=completed_at,
                error=error,
            )
        )
