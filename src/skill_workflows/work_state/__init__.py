"""Work State document and its YAML reader/writer."""

from skill_workflows.work_state.models import (
    DEFAULT_WORK_STATE_FILENAME,
    QueuedTask,
    WorkCheckpoint,
    WorkflowPointer,
    WorkState,
)
from skill_workflows.work_state.store import WorkStateReader, WorkStateWriter

__all__ = [
    "DEFAULT_WORK_STATE_FILENAME",
    "QueuedTask",
    "WorkCheckpoint",
    "WorkState",
    "WorkStateReader",
    "WorkStateWriter",
    "WorkflowPointer",
]
