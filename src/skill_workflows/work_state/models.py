"""Work State: the mutable resumption hint shared by session tooling.

Only :attr:`WorkState.workflow` belongs to the workflow runner. The other fields are
owned by other tools and must survive a runner write untouched, which is why every
model here keeps unknown keys.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_WORK_STATE_FILENAME = "current-work.yaml"


def utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class QueuedTask(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    description: str
    skills_needed: list[str] = Field(default_factory=list)
    priority: Literal["low", "medium", "high"] = "medium"
    created_at: str
    source: str | None = None


class WorkCheckpoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    phase: int | None = None
    plan: str | None = None
    step: str | None = None
    status: Literal["in-progress", "paused", "blocked", "complete"] = "in-progress"
    timestamp: str


class WorkflowPointer(BaseModel):
    """Which workflow is active and a best-effort idea of where it is.

    ``completed_steps`` is advisory. Resume and status always recompute completion
    from the run log.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    current_step: str | None = None
    completed_steps: list[str] = Field(default_factory=list)


class WorkState(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: int = 1
    session_id: str | None = None
    saved_at: str = Field(default_factory=utc_now_iso)
    active_task: str | None = None
    checkpoint: WorkCheckpoint | None = None
    loaded_skills: list[str] = Field(default_factory=list)
    queued_tasks: list[QueuedTask] = Field(default_factory=list)
    workflow: WorkflowPointer | None = None
