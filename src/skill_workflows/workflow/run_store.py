"""Append-only JSONL event log of workflow step transitions.

The log is the source of truth for which steps of a run have completed. Entries are
never rewritten; a run's history is the sequence of its lines in file order.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from pydantic import ValidationError

from .models import RunSummary, WorkflowRunEntry

logger = logging.getLogger(__name__)

DEFAULT_RUNS_FILENAME = "workflow-runs.jsonl"


class WorkflowRunStore:
    """JSONL-file backed store for :class:`WorkflowRunEntry` records."""

    def __init__(self, directory: Path, filename: str = DEFAULT_RUNS_FILENAME) -> None:
        self._path = directory / filename
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, entry: WorkflowRunEntry) -> None:
        line = entry.model_dump_json().encode("utf-8") + b"\n"
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a+b") as f:
                # Never glue a new entry onto a torn last line.
                if f.seek(0, os.SEEK_END) > 0:
                    f.seek(-1, os.SEEK_END)
                    if f.read(1) != b"\n":
                        line = b"\n" + line
                f.write(line)
        logger.debug(
            "Run entry appended",
            extra={"run_id": entry.run_id, "step_id": entry.step_id, "status": entry.status},
        )

    def read_all(self) -> list[WorkflowRunEntry]:
        if not self._path.exists():
            return []

        entries: list[WorkflowRunEntry] = []
        with self._lock:
            lines = self._path.read_bytes().split(b"\n")

        # Lines are decoded one by one; a crash mid-append can leave a truncated
        # last line, possibly cut inside a multibyte character.
        for lineno, raw in enumerate(lines, start=1):
            if not raw.strip():
                continue
            try:
                entries.append(WorkflowRunEntry.model_validate_json(raw.decode("utf-8")))
            except (UnicodeDecodeError, ValidationError):
                logger.warning(
                    "Skipping unreadable run log line",
                    extra={"path": str(self._path), "line": lineno},
                )
        return entries

    def get_run_entries(self, run_id: str) -> list[WorkflowRunEntry]:
        return [e for e in self.read_all() if e.run_id == run_id]

    def get_completed_steps(self, run_id: str) -> list[str]:
        """Unique ids of steps with a ``completed`` entry, in completion order."""
        completed: dict[str, None] = {}
        for entry in self.get_run_entries(run_id):
            if entry.status == "completed":
                completed[entry.step_id] = None
        return list(completed)

    def get_latest_run(self, workflow_name: str) -> RunSummary | None:
        entries = [e for e in self.read_all() if e.workflow_name == workflow_name]
        if not entries:
            return None
        run_id = entries[-1].run_id
        return RunSummary(
            run_id=run_id,
            workflow_name=workflow_name,
            entries=[e for e in entries if e.run_id == run_id],
        )
