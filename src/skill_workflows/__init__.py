"""Skill workflows.

Declarative, resumable workflows of named skill steps:
- YAML definitions with `extends` inheritance
- validation with every error collected
- a step-by-step runner that survives crashes via an append-only run log
"""

__version__ = "0.1.0"

from skill_workflows.config import WorkflowSettings

__all__ = ["__version__", "WorkflowSettings"]
