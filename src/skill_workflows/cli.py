"""CLI entrypoint for managing and running workflows.

Output is JSON by default so other agents can consume it; ``--pretty`` switches the
read-only commands to human-readable text. Handled errors are printed as
``{"error": ...}`` with exit code 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from skill_workflows import __version__
from skill_workflows.config import WorkflowSettings
from skill_workflows.factory import accept_any_skill, create_runner
from skill_workflows.logging import configure_logging
from skill_workflows.workflow.dag import WorkflowDAG
from skill_workflows.workflow.extends import ExtendsError, resolve_extends
from skill_workflows.workflow.models import WorkflowDefinition, WorkflowStep
from skill_workflows.workflow.parser import WorkflowFileStore
from skill_workflows.workflow.run_store import WorkflowRunStore
from skill_workflows.workflow.runner import WorkflowError, WorkflowRunner
from skill_workflows.workflow.validator import validate_workflow

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A user-facing failure reported as ``{"error": ...}``."""


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _parse_steps(value: str) -> list[WorkflowStep]:
    try:
        raw = json.loads(value)
    except json.JSONDecodeError as e:
        raise CommandError("Invalid JSON in --steps") from e

    if not isinstance(raw, list) or not raw:
        raise CommandError("Steps must be a non-empty JSON array")

    try:
        return [WorkflowStep.model_validate(item) for item in raw]
    except ValidationError as e:
        raise CommandError(f"Invalid step definition: {e.errors()[0]['msg']}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skill-workflows",
        description="Define, validate and run resumable skill workflows",
    )
    parser.add_argument("--version", action="version", version=f"skill-workflows {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", aliases=["c"], help="Create a workflow file")
    create.add_argument("--name", required=True, help="Workflow name")
    create.add_argument(
        "--steps",
        required=True,
        help='Steps as a JSON array, e.g. \'[{"id":"lint","skill":"linter"}]\'',
    )
    create.add_argument("--description", default=None, help="Workflow description")

    validate = subparsers.add_parser(
        "validate", aliases=["v"], help="Resolve extends and validate a workflow"
    )
    validate.add_argument("name", help="Workflow name")

    run = subparsers.add_parser("run", aliases=["r"], help="Run or resume a workflow")
    run.add_argument("name", nargs="?", default=None, help="Workflow name")
    run.add_argument(
        "--resume", action="store_true", help="Resume the interrupted workflow instead"
    )

    list_cmd = subparsers.add_parser("list", aliases=["l"], help="List workflow files")
    list_cmd.add_argument("--pretty", action="store_true", help="Human-readable output")

    status = subparsers.add_parser(
        "status", aliases=["s"], help="Show the latest run of a workflow"
    )
    status.add_argument("name", help="Workflow name")
    status.add_argument("--pretty", action="store_true", help="Human-readable output")

    return parser


def _cmd_create(args: argparse.Namespace, settings: WorkflowSettings) -> int:
    steps = _parse_steps(args.steps)
    definition = WorkflowDefinition(name=args.name, description=args.description, steps=steps)

    cycle_result = WorkflowDAG.from_steps(definition.steps).detect_cycles()
    if cycle_result.has_cycle:
        raise CommandError(
            f"Circular dependency detected: {' -> '.join(cycle_result.cycle or [])}"
        )

    path = WorkflowFileStore(settings.workflow_dir).save(definition)
    _emit(
        {
            "created": str(path),
            "name": definition.name,
            "steps": len(definition.steps),
            "execution_order": cycle_result.topological_order,
        }
    )
    return 0


def _cmd_validate(args: argparse.Namespace, settings: WorkflowSettings) -> int:
    store = WorkflowFileStore(settings.workflow_dir)
    definition = store.load(args.name)
    if definition is None:
        raise CommandError(f'Workflow "{args.name}" not found')

    resolution = resolve_extends(definition, store.load, max_depth=settings.max_extends_depth)
    if isinstance(resolution, ExtendsError):
        _emit({"workflow": args.name, "valid": False, "errors": [resolution.message]})
        return 1

    result = validate_workflow(resolution.resolved, accept_any_skill)
    _emit(
        {
            "workflow": args.name,
            "chain": resolution.chain,
            **result.model_dump(mode="json"),
        }
    )
    return 0 if result.valid else 1


def _drive(runner: WorkflowRunner, run_id: str, steps: list[str]) -> list[dict[str, str]]:
    results: list[dict[str, str]] = []
    for step_id in steps:
        runner.advance_step(run_id, step_id)
        runner.complete_step(run_id, step_id)
        results.append({"step_id": step_id, "status": "completed"})
    return results


def _cmd_run(args: argparse.Namespace, settings: WorkflowSettings) -> int:
    runner = create_runner(settings)

    if args.resume:
        resumed = runner.resume()
        if resumed is None:
            raise CommandError("No interrupted workflow found to resume")
        _emit(
            {
                "resumed": True,
                "run_id": resumed.run_id,
                "steps_completed": _drive(runner, resumed.run_id, resumed.remaining_steps),
            }
        )
        return 0

    if not args.name:
        raise CommandError("Workflow name is required")

    started = runner.start(args.name)
    _emit(
        {
            "completed": True,
            "workflow": args.name,
            "run_id": started.run_id,
            "steps_completed": _drive(runner, started.run_id, started.steps),
        }
    )
    return 0


def _cmd_list(args: argparse.Namespace, settings: WorkflowSettings) -> int:
    workflows = [
        {
            "name": definition.name,
            "description": definition.description,
            "steps": len(definition.steps),
            "file": path.name,
        }
        for path, definition in WorkflowFileStore(settings.workflow_dir).list()
    ]

    if not args.pretty:
        _emit({"workflows": workflows})
        return 0

    if not workflows:
        print("No workflows found.")
        print("Create one with: skill-workflows create --name=<name> --steps=<json>")
        return 0

    print("Workflows:")
    for wf in workflows:
        desc = f" - {wf['description']}" if wf["description"] else ""
        print(f"  {wf['name']}{desc} ({wf['steps']} steps)")
    return 0


def _cmd_status(args: argparse.Namespace, settings: WorkflowSettings) -> int:
    latest = WorkflowRunStore(settings.runs_path).get_latest_run(args.name)
    if latest is None:
        if args.pretty:
            print(f'No runs found for workflow "{args.name}".')
        else:
            _emit({"workflow": args.name, "status": "no-runs"})
        return 0

    completed = [e.step_id for e in latest.entries if e.status == "completed"]
    completed = list(dict.fromkeys(completed))
    done = set(completed)

    remaining: list[str] = []
    store = WorkflowFileStore(settings.workflow_dir)
    definition = store.load(args.name)
    if definition is not None:
        resolution = resolve_extends(
            definition, store.load, max_depth=settings.max_extends_depth
        )
        if not isinstance(resolution, ExtendsError):
            cycle_result = WorkflowDAG.from_steps(resolution.resolved.steps).detect_cycles()
            if not cycle_result.has_cycle:
                remaining = [s for s in cycle_result.topological_order or [] if s not in done]

    failed = [e.step_id for e in latest.entries if e.status == "failed" and e.step_id not in done]
    report = {
        "workflow": args.name,
        "run_id": latest.run_id,
        "completed": completed,
        "remaining": remaining,
        "failed": list(dict.fromkeys(failed)),
        "current": remaining[0] if remaining else None,
        "all_done": not remaining,
    }

    if not args.pretty:
        _emit(report)
        return 0

    print(f"Workflow: {args.name}")
    print(f"Run ID: {latest.run_id}")
    print(f"Completed: {', '.join(completed) or '(none)'}")
    print(f"Remaining: {', '.join(remaining) or '(none)'}")
    if report["current"]:
        print(f"Current: {report['current']}")
    print(f"Status: {'completed' if report['all_done'] else 'in-progress'}")
    return 0


_COMMANDS = {
    "create": _cmd_create,
    "c": _cmd_create,
    "validate": _cmd_validate,
    "v": _cmd_validate,
    "run": _cmd_run,
    "r": _cmd_run,
    "list": _cmd_list,
    "l": _cmd_list,
    "status": _cmd_status,
    "s": _cmd_status,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = WorkflowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        return _COMMANDS[args.command](args, settings)

    except (CommandError, WorkflowError) as e:
        logger.warning(str(e), extra={"command": args.command})
        _emit({"error": str(e)})
        return 1

    except Exception as e:
        logger.exception("Command failed", extra={"command": args.command})
        _emit({"error": str(e)})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
