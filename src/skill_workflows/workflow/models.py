"""Pydantic models for workflow definitions and run records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RunStatus = Literal["started", "completed", "failed"]


class WorkflowStep(BaseModel):
    """A named unit of work with zero or more predecessor steps."""

    model_config = ConfigDict(extra="allow")

    id: str
    skill: str
    description: str | None = None
    needs: list[str] = Field(default_factory=list)


class WorkflowDefinition(BaseModel):
    """An ordered set of steps plus an optional parent workflow.

    Definitions are treated as read-only input. Anything that needs a different
    definition (extends resolution, for example) builds a new value.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    version: int = 1
    description: str | None = None
    extends: str | None = None
    steps: list[WorkflowStep]

    @property
    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]


class WorkflowRunEntry(BaseModel):
    """One immutable event-log record of a step transition."""

    run_id: str
    workflow_name: str
    step_id: str
    status: RunStatus
    started_at: str
    completed_at: str | None = None
    error: str | None = None


class WorkflowValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    execution_order: list[str] | None = None


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Latest run for a workflow as seen by the event log."""

    run_id: str
    workflow_name: str
    entries: list[WorkflowRunEntry]


@dataclass(frozen=True, slots=True)
class StepResult:
    step_id: str
    status: str
    error: str | None = None
