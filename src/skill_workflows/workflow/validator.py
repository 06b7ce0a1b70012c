"""Referential and structural validation of workflow definitions."""

from __future__ import annotations

from collections.abc import Callable

from .dag import WorkflowDAG
from .models import WorkflowDefinition, WorkflowValidationResult

SkillExists = Callable[[str], bool]


def validate_workflow(
    definition: WorkflowDefinition, skill_exists: SkillExists
) -> WorkflowValidationResult:
    """Check that ``definition`` is executable.

    All problems are collected rather than stopping at the first one: unknown
    ``needs`` targets, unknown skills, then a single error for any cycle.
    """
    errors: list[str] = []
    step_ids = set(definition.step_ids)

    for step in definition.steps:
        for needed in step.needs:
            if needed not in step_ids:
                errors.append(f'Step "{step.id}" needs unknown step "{needed}"')

    for step in definition.steps:
        if not skill_exists(step.skill):
            errors.append(f'Step "{step.id}" references unknown skill "{step.skill}"')

    cycle_result = WorkflowDAG.from_steps(definition.steps).detect_cycles()
    if cycle_result.has_cycle:
        errors.append(f"Circular dependency detected: {' -> '.join(cycle_result.cycle or [])}")

    return WorkflowValidationResult(
        valid=not errors,
        errors=errors,
        execution_order=None if cycle_result.has_cycle else cycle_result.topological_order,
    )
