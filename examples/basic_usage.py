#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates driving the runner directly, the way an external executor would:

* load settings from `.env`
* save a small workflow definition
* start a run and bracket each step with advance/complete
* stop half way, then resume from a fresh runner as if the process had restarted
"""

from __future__ import annotations

import argparse
from typing import Sequence

from skill_workflows.config import WorkflowSettings
from skill_workflows.factory import create_runner
from skill_workflows.logging import configure_logging
from skill_workflows.workflow.models import WorkflowDefinition, WorkflowStep
from skill_workflows.workflow.parser import WorkflowFileStore
from skill_workflows.workflow.runner import WorkflowError


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a workflow step by step (example).")
    parser.add_argument("--name", default="example-ci", help="Workflow name to create and run")
    parser.add_argument(
        "--stop-after",
        type=int,
        default=1,
        help="Number of steps to complete before simulating a crash",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = WorkflowSettings()
    configure_logging(settings.log_level)

    definition = WorkflowDefinition(
        name=args.name,
        description="Lint, test and build",
        steps=[
            WorkflowStep(id="lint", skill="linter"),
            WorkflowStep(id="test", skill="tester", needs=["lint"]),
            WorkflowStep(id="build", skill="builder", needs=["test"]),
        ],
    )
    path = WorkflowFileStore(settings.workflow_dir).save(definition)
    print(f"Saved workflow to: {path}")

    runner = create_runner(settings)
    try:
        started = runner.start(args.name)
    except WorkflowError as exc:
        print(str(exc))
        return 1

    print(f"Started run {started.run_id}: {' -> '.join(started.steps)}")
    for step_id in started.steps[: args.stop_after]:
        runner.advance_step(started.run_id, step_id)
        runner.complete_step(started.run_id, step_id)
        print(f"  completed {step_id}")

    resumed = create_runner(settings).resume()
    if resumed is None:
        print("Nothing left to resume.")
        return 0

    print(f"Resuming run {resumed.run_id}: {', '.join(resumed.remaining_steps)}")
    runner = create_runner(settings)
    for step_id in resumed.remaining_steps:
        runner.advance_step(resumed.run_id, step_id)
        runner.complete_step(resumed.run_id, step_id)
        print(f"  completed {step_id}")

    status = runner.get_status(resumed.run_id)
    print(f"Completed: {', '.join(status.completed)}")
    print(f"Run log: {settings.runs_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
