"""Configuration for the workflow engine.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Paths default to the project-relative locations used by the surrounding tooling,
so running from a project root needs no configuration at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from skill_workflows.work_state.models import DEFAULT_WORK_STATE_FILENAME
from skill_workflows.workflow.extends import DEFAULT_MAX_EXTENDS_DEPTH
from skill_workflows.workflow.run_store import DEFAULT_RUNS_FILENAME


class WorkflowSettings(BaseSettings):
    """Settings for the workflow engine, CLI and REST API.

    Environment variables:
    - WORKFLOW_DIR                (optional)
    - WORKFLOW_RUNS_PATH          (optional)
    - WORK_STATE_PATH             (optional)
    - WORKFLOW_MAX_EXTENDS_DEPTH  (optional)
    - LOG_LEVEL                   (optional)
    - WORKFLOW_CORS_ORIGINS       (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `WorkflowSettings(_env_file=path_to_env)`.
    """

    workflow_dir: Path = Field(
        default=Path(".claude/workflows"),
        validation_alias="WORKFLOW_DIR",
        description="Directory containing <name>.workflow.yaml definitions",
    )

    runs_path: Path = Field(
        default=Path(".planning/patterns"),
        validation_alias="WORKFLOW_RUNS_PATH",
        description="Directory where the JSONL run log is appended",
    )

    work_state_path: Path = Field(
        default=Path(".planning/hooks") / DEFAULT_WORK_STATE_FILENAME,
        validation_alias="WORK_STATE_PATH",
        description="Path of the Work State YAML document",
    )

    max_extends_depth: int = Field(
        default=DEFAULT_MAX_EXTENDS_DEPTH,
        validation_alias="WORKFLOW_MAX_EXTENDS_DEPTH",
        ge=1,
        le=100,
        description="Maximum number of workflows in an extends chain",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="WORKFLOW_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins for the REST API.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def runs_file(self) -> Path:
        """Path of the JSONL run log."""

        return self.runs_path / DEFAULT_RUNS_FILENAME

    @property
    def work_state_file(self) -> Path:
        return self.work_state_path

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
