"""FastAPI server adapter for skill-workflows.

This module exposes a REST API over the workflow runner.

Design intent:
- Keep workflow logic in `skill_workflows.workflow.*`
- Keep server-specific concerns (routing, CORS, HTTP status mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from skill_workflows.server.app import create_app
