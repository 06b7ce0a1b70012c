"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the workflow runner and stores.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skill_workflows import __version__
from skill_workflows.config import WorkflowSettings
from skill_workflows.factory import accept_any_skill, create_runner
from skill_workflows.server.routes import router
from skill_workflows.workflow.validator import SkillExists

logger = logging.getLogger(__name__)


def create_app(
    settings: WorkflowSettings | None = None, *, skill_exists: SkillExists | None = None
) -> FastAPI:
    settings = settings or WorkflowSettings()
    skill_exists = skill_exists or accept_any_skill

    app = FastAPI(
        title="Skill Workflows",
        version=__version__,
        description="REST API for defining, validating and driving resumable workflows.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.settings = settings
    app.state.skill_exists = skill_exists
    app.state.runner = create_runner(settings, skill_exists=skill_exists)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    logger.info(
        "Workflow API configured",
        extra={
            "workflow_dir": str(settings.workflow_dir),
            "runs_file": str(settings.runs_file),
            "work_state_file": str(settings.work_state_file),
        },
    )
    return app
