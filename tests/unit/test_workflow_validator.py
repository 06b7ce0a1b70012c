"""Unit tests for workflow validation."""

from __future__ import annotations

from skill_workflows.workflow.validator import validate_workflow


def _always(_name: str) -> bool:
    return True


def _never(_name: str) -> bool:
    return False


def test_valid_linear_workflow_has_execution_order(make_workflow) -> None:
    wf = make_workflow(
        "ci",
        [("lint", "linter", []), ("test", "tester", ["lint"]), ("deploy", "deployer", ["test"])],
    )

    result = validate_workflow(wf, _always)

    assert result.valid is True
    assert result.errors == []
    assert result.execution_order == ["lint", "test", "deploy"]


def test_unknown_skill_is_reported_per_step(make_workflow) -> None:
    wf = make_workflow("ci", [("a", "missing-a", []), ("b", "missing-b", ["a"])])

    result = validate_workflow(wf, _never)

    assert result.valid is False
    assert result.errors == [
        'Step "a" references unknown skill "missing-a"',
        'Step "b" references unknown skill "missing-b"',
    ]
    assert result.execution_order == ["a", "b"]


def test_unknown_needs_targets_are_all_reported(make_workflow) -> None:
    wf = make_workflow("ci", [("deploy", "deployer", ["missing1", "missing2"])])

    result = validate_workflow(wf, _always)

    assert result.valid is False
    assert 'Step "deploy" needs unknown step "missing1"' in result.errors
    assert 'Step "deploy" needs unknown step "missing2"' in result.errors


def test_cycle_produces_single_error_and_no_order(make_workflow) -> None:
    wf = make_workflow("ci", [("lint", "linter", ["test"]), ("test", "tester", ["lint"])])

    result = validate_workflow(wf, _always)

    assert result.valid is False
    assert result.errors == ["Circular dependency detected: lint -> test"]
    assert result.execution_order is None


def test_errors_of_every_kind_are_collected_together(make_workflow) -> None:
    wf = make_workflow(
        "ci",
        [
            ("a", "missing-skill", ["nonexistent", "c"]),
            ("b", "real-skill", ["a"]),
            ("c", "real-skill", ["a"]),
        ],
    )

    result = validate_workflow(wf, lambda name: name == "real-skill")

    assert result.valid is False
    assert result.errors[0] == 'Step "a" needs unknown step "nonexistent"'
    assert result.errors[1] == 'Step "a" references unknown skill "missing-skill"'
    assert result.errors[2].startswith("Circular dependency detected:")
    assert "a" in result.errors[2] and "c" in result.errors[2]
