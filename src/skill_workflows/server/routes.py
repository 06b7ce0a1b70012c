"""Workflow REST API.

Routes are thin wrappers over :class:`~skill_workflows.workflow.runner.WorkflowRunner`.
An external executor drives a run by calling the step endpoints in order.

All routes are mounted under `/api`.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from skill_workflows import __version__
from skill_workflows.config import WorkflowSettings
from skill_workflows.server.models import (
    ApiRunResumed,
    ApiRunStarted,
    ApiRunStatus,
    ApiStepResult,
    ApiValidation,
    ApiWorkflowSummary,
    StepFailure,
)
from skill_workflows.workflow.extends import ExtendsError, resolve_extends
from skill_workflows.workflow.models import WorkflowDefinition
from skill_workflows.workflow.parser import WorkflowFileStore
from skill_workflows.workflow.runner import (
    WorkflowNotFoundError,
    WorkflowRunner,
    WorkflowStartError,
)
from skill_workflows.workflow.validator import validate_workflow

router = APIRouter()


def _settings(request: Request) -> WorkflowSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, WorkflowSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


def _runner(request: Request) -> WorkflowRunner:
    runner = getattr(request.app.state, "runner", None)
    if not isinstance(runner, WorkflowRunner):
        raise HTTPException(status_code=500, detail="Workflow runner not configured")
    return runner


def _definitions(request: Request) -> WorkflowFileStore:
    return WorkflowFileStore(_settings(request).workflow_dir)


@router.get("/health")
def health() -> dict[str, object]:
    return {"status": "ok", "ok": True, "version": __version__}


@router.get("/workflows", response_model=list[ApiWorkflowSummary])
def list_workflows(request: Request) -> list[ApiWorkflowSummary]:
    return [
        ApiWorkflowSummary(
            name=definition.name,
            description=definition.description,
            version=definition.version,
            extends=definition.extends,
            steps=len(definition.steps),
            file=path.name,
        )
        for path, definition in _definitions(request).list()
    ]


@router.get("/workflows/{name}", response_model=WorkflowDefinition)
def get_workflow(name: str, request: Request) -> WorkflowDefinition:
    definition = _definitions(request).load(name)
    if definition is None:
        raise HTTPException(status_code=404, detail=f'Workflow "{name}" not found')
    return definition


@router.get("/workflows/{name}/validation", response_model=ApiValidation)
def validate(name: str, request: Request) -> ApiValidation:
    store = _definitions(request)
    definition = store.load(name)
    if definition is None:
        raise HTTPException(status_code=404, detail=f'Workflow "{name}" not found')

    resolution = resolve_extends(
        definition, store.load, max_depth=_settings(request).max_extends_depth
    )
    if isinstance(resolution, ExtendsError):
        return ApiValidation(workflow=name, valid=False, errors=[resolution.message])

    result = validate_workflow(resolution.resolved, request.app.state.skill_exists)
    return ApiValidation(
        workflow=name,
        valid=result.valid,
        errors=result.errors,
        execution_order=result.execution_order,
        chain=resolution.chain,
    )


@router.post("/workflows/{name}/runs", response_model=ApiRunStarted, status_code=201)
def start_run(name: str, request: Request) -> ApiRunStarted:
    try:
        started = _runner(request).start(name)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except WorkflowStartError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors}) from e
    return ApiRunStarted(run_id=started.run_id, workflow=name, steps=started.steps)


@router.post("/runs/resume", response_model=ApiRunResumed)
def resume_run(request: Request) -> ApiRunResumed:
    resumed = _runner(request).resume()
    if resumed is None:
        raise HTTPException(status_code=404, detail="No interrupted workflow found to resume")
    return ApiRunResumed(run_id=resumed.run_id, remaining_steps=resumed.remaining_steps)


@router.get("/runs/{run_id}", response_model=ApiRunStatus)
def run_status(run_id: str, request: Request) -> ApiRunStatus:
    report = _runner(request).get_status(run_id)
    return ApiRunStatus(
        run_id=run_id,
        completed=report.completed,
        remaining=report.remaining,
        current=report.current,
    )


@router.post("/runs/{run_id}/steps/{step_id}/start", response_model=ApiStepResult)
def start_step(run_id: str, step_id: str, request: Request) -> ApiStepResult:
    result = _runner(request).advance_step(run_id, step_id)
    return ApiStepResult(run_id=run_id, step_id=result.step_id, status=result.status)


@router.post("/runs/{run_id}/steps/{step_id}/complete", response_model=ApiStepResult)
def complete_step(run_id: str, step_id: str, request: Request) -> ApiStepResult:
    _runner(request).complete_step(run_id, step_id)
    return ApiStepResult(run_id=run_id, step_id=step_id, status="completed")


@router.post("/runs/{run_id}/steps/{step_id}/fail", response_model=ApiStepResult)
def fail_step(run_id: str, step_id: str, body: StepFailure, request: Request) -> ApiStepResult:
    _runner(request).fail_step(run_id, step_id, body.error)
    return ApiStepResult(run_id=run_id, step_id=step_id, status="failed", error=body.error)
