"""YAML workflow definition files.

Definitions live in a directory as ``<name>.workflow.yaml``::

    name: deploy
    version: 1
    extends: base-ci
    steps:
      - id: lint
        skill: code-linter
      - id: test
        skill: test-runner
        needs: [lint]
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import WorkflowDefinition

logger = logging.getLogger(__name__)

WORKFLOW_FILE_SUFFIX = ".workflow.yaml"


def parse_workflow_yaml(text: str) -> WorkflowDefinition | None:
    """Parse a workflow document, returning ``None`` if it is not a usable definition."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.warning("Workflow file is not valid YAML", extra={"error": str(e)})
        return None

    if not isinstance(raw, dict):
        logger.warning("Workflow document must be a mapping")
        return None

    try:
        definition = WorkflowDefinition.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "Workflow document failed schema validation",
            extra={"errors": e.error_count(), "detail": str(e)},
        )
        return None

    if not definition.steps:
        logger.warning("Workflow has no steps", extra={"workflow": definition.name})
        return None

    return definition


def parse_workflow_file(path: Path) -> WorkflowDefinition | None:
    if not path.exists():
        return None
    return parse_workflow_yaml(path.read_text(encoding="utf-8"))


def _to_yaml_obj(definition: WorkflowDefinition) -> dict[str, object]:
    out: dict[str, object] = {"name": definition.name, "version": definition.version}
    if definition.description:
        out["description"] = definition.description
    if definition.extends:
        out["extends"] = definition.extends

    steps: list[dict[str, object]] = []
    for step in definition.steps:
        item: dict[str, object] = {"id": step.id, "skill": step.skill}
        if step.description:
            item["description"] = step.description
        if step.needs:
            item["needs"] = list(step.needs)
        steps.append(item)
    out["steps"] = steps
    return out


class WorkflowFileStore:
    """Directory of ``*.workflow.yaml`` definitions keyed by workflow name."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path:
        return self._directory / f"{name}{WORKFLOW_FILE_SUFFIX}"

    def load(self, name: str) -> WorkflowDefinition | None:
        return parse_workflow_file(self.path_for(name))

    def list(self) -> list[tuple[Path, WorkflowDefinition]]:
        """Parseable definitions in the directory, sorted by filename."""
        if not self._directory.is_dir():
            return []

        found: list[tuple[Path, WorkflowDefinition]] = []
        for path in sorted(self._directory.glob(f"*{WORKFLOW_FILE_SUFFIX}")):
            definition = parse_workflow_file(path)
            if definition is None:
                logger.warning("Skipping unreadable workflow file", extra={"path": str(path)})
                continue
            found.append((path, definition))
        return found

    def save(self, definition: WorkflowDefinition) -> Path:
        path = self.path_for(definition.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(
                _to_yaml_obj(definition), sort_keys=False, allow_unicode=True, width=120
            ),
            encoding="utf-8",
        )
        logger.info("Workflow saved", extra={"workflow": definition.name, "path": str(path)})
        return path
