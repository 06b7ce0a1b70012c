"""Flatten a workflow's ``extends`` chain into a single definition.

Steps are merged root to leaf into an id-keyed mapping. A descendant that declares
an existing id replaces the ancestor's step object entirely; there is no field-level
merge.

Failures are returned as :class:`ExtendsError` values rather than raised, so callers
can report them next to other validation problems.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from .models import WorkflowDefinition, WorkflowStep

logger = logging.getLogger(__name__)

DEFAULT_MAX_EXTENDS_DEPTH = 10

WorkflowLoader = Callable[[str], WorkflowDefinition | None]

ExtendsErrorKind = Literal["circular", "missing_parent", "depth_exceeded"]


@dataclass(frozen=True, slots=True)
class ExtendsResolution:
    resolved: WorkflowDefinition
    chain: list[str]


@dataclass(frozen=True, slots=True)
class ExtendsError:
    kind: ExtendsErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


def resolve_extends(
    definition: WorkflowDefinition,
    load_workflow: WorkflowLoader,
    *,
    max_depth: int = DEFAULT_MAX_EXTENDS_DEPTH,
) -> ExtendsResolution | ExtendsError:
    """Resolve ``definition`` against its ancestors.

    Args:
        definition: The leaf definition.
        load_workflow: Returns the definition for a name, or ``None`` if unknown.
        max_depth: Maximum number of definitions in the chain, leaf included.

    Returns:
        The resolved definition with its root-first chain of names, or an error.
    """
    if not definition.extends:
        return ExtendsResolution(resolved=definition, chain=[definition.name])

    chain: list[WorkflowDefinition] = [definition]
    visited: set[str] = {definition.name}
    current = definition

    while current.extends:
        parent_name = current.extends
        if parent_name in visited:
            return ExtendsError(
                kind="circular",
                message=(
                    f'Circular extends chain: "{parent_name}" already appears in '
                    f"{' -> '.join(d.name for d in chain)}"
                ),
            )

        parent = load_workflow(parent_name)
        if parent is None:
            return ExtendsError(
                kind="missing_parent",
                message=f'Workflow "{current.name}" extends unknown workflow "{parent_name}"',
            )

        visited.add(parent_name)
        chain.append(parent)
        if len(chain) > max_depth:
            return ExtendsError(
                kind="depth_exceeded",
                message=(
                    f'Extends chain for "{definition.name}" exceeds maximum depth of {max_depth}'
                ),
            )
        current = parent

    chain.reverse()

    merged: dict[str, WorkflowStep] = {}
    for ancestor in chain:
        for step in ancestor.steps:
            merged[step.id] = step

    names = [d.name for d in chain]
    logger.debug(
        "Resolved extends chain",
        extra={"workflow": definition.name, "chain": names, "steps": len(merged)},
    )

    resolved = definition.model_copy(
        update={"extends": None, "steps": list(merged.values())},
    )
    return ExtendsResolution(resolved=resolved, chain=names)
