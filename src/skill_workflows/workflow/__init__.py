"""Workflow definition, composition and crash-recoverable execution.

This package provides:
- a dependency graph over step ids (cycle detection, topological order, ready steps)
- extends resolution (root-to-leaf override of whole steps)
- a validator that collects every referential and structural error
- a runner that brackets externally executed steps with run-log entries and keeps a
  Work State pointer for resumption
"""

from skill_workflows.workflow.dag import CycleResult, WorkflowDAG
from skill_workflows.workflow.extends import ExtendsError, ExtendsResolution, resolve_extends
from skill_workflows.workflow.models import (
    RunSummary,
    StepResult,
    WorkflowDefinition,
    WorkflowRunEntry,
    WorkflowStep,
    WorkflowValidationResult,
)
from skill_workflows.workflow.parser import (
    WorkflowFileStore,
    parse_workflow_file,
    parse_workflow_yaml,
)
from skill_workflows.workflow.run_store import WorkflowRunStore
from skill_workflows.workflow.runner import (
    RunResumed,
    RunStarted,
    RunStatusReport,
    WorkflowError,
    WorkflowNotFoundError,
    WorkflowRunner,
    WorkflowRunnerDeps,
    WorkflowStartError,
)
from skill_workflows.workflow.validator import validate_workflow

__all__ = [
    "CycleResult",
    "ExtendsError",
    "ExtendsResolution",
    "RunResumed",
    "RunStarted",
    "RunStatusReport",
    "RunSummary",
    "StepResult",
    "WorkflowDAG",
    "WorkflowDefinition",
    "WorkflowError",
    "WorkflowFileStore",
    "WorkflowNotFoundError",
    "WorkflowRunEntry",
    "WorkflowRunStore",
    "WorkflowRunner",
    "WorkflowRunnerDeps",
    "WorkflowStartError",
    "WorkflowStep",
    "WorkflowValidationResult",
    "parse_workflow_file",
    "parse_workflow_yaml",
    "resolve_extends",
    "validate_workflow",
]
