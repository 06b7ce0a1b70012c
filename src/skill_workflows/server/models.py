"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ApiWorkflowSummary(BaseModel):
    name: str
    description: str | None = None
    version: int
    extends: str | None = None
    steps: int
    file: str


class ApiValidation(BaseModel):
    workflow: str
    valid: bool
    errors: list[str] = Field(default_factory=list)
    execution_order: list[str] | None = None
    chain: list[str] = Field(default_factory=list)


class ApiRunStarted(BaseModel):
    run_id: str
    workflow: str
    steps: list[str]


class ApiRunResumed(BaseModel):
    run_id: str
    remaining_steps: list[str]


class ApiRunStatus(BaseModel):
    run_id: str
    completed: list[str] = Field(default_factory=list)
    remaining: list[str] = Field(default_factory=list)
    current: str | None = None


class ApiStepResult(BaseModel):
    run_id: str
    step_id: str
    status: str
    error: str | None = None


class StepFailure(BaseModel):
    error: str = Field(min_length=1)
