"""YAML persistence for :class:`WorkState`.

The document is always rewritten whole, with sorted keys so that diffs stay small
and deterministic.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import WorkState

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


class WorkStateReader:
    def __init__(self, path: Path) -> None:
        self._path = path

    def read(self) -> WorkState | None:
        """Load the Work State, or ``None`` if there is no usable document."""
        if not self._path.exists():
            return None

        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning(
                "Work state file is unreadable; treating as absent",
                extra={"path": str(self._path), "error": type(e).__name__},
            )
            return None

        if raw is None:
            return None
        if not isinstance(raw, dict):
            logger.warning(
                "Work state file is not a mapping; treating as absent",
                extra={"path": str(self._path)},
            )
            return None

        try:
            return WorkState.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Work state file failed validation; treating as absent",
                extra={"path": str(self._path), "errors": e.error_count()},
            )
            return None


class WorkStateWriter:
    def __init__(self, path: Path) -> None:
        self._path = path

    def save(self, state: WorkState) -> None:
        payload = yaml.safe_dump(
            state.model_dump(mode="json"),
            sort_keys=True,
            allow_unicode=True,
            default_flow_style=False,
        )

        with _write_lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self._path)
            except Exception:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        logger.debug(
            "Work state saved",
            extra={
                "path": str(self._path),
                "workflow": state.workflow.name if state.workflow else None,
            },
        )
