"""Structural validation of a workflow DAG.

Problems are returned as ValidationIssue values so a caller can show all
of them at once. Checks run in order and stop at the first category that
fails, because each later check assumes the earlier ones passed:

1. NO_ROOTS: every task has a dependency
2. CYCLE_DETECTED: one entry per cycle found
3. UNREACHABLE_TASK: one entry per task no root leads to

Anything raised while building the graph becomes a single BUILD_ERROR.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum

from relay.core.dag.build import DAG, build_dag
from relay.core.defaults import CYCLE_PATH_SEPARATOR
from relay.core.errors import (
    ErrorCode,
    ValidationReport,
    WorkflowValidationError,
    raise_collected,
)
from relay.core.logging import get_logger
from relay.core.models.workflow import WorkflowDeclaration

logger = get_logger('validate')


class ValidationCode(str, Enum):
    """Categories of structural problems."""

    NO_ROOTS = 'NO_ROOTS'
    CYCLE_DETECTED = 'CYCLE_DETECTED'
    UNREACHABLE_TASK = 'UNREACHABLE_TASK'
    BUILD_ERROR = 'BUILD_ERROR'


_ERROR_CODES: dict[ValidationCode, ErrorCode] = {
    ValidationCode.NO_ROOTS: ErrorCode.WORKFLOW_NO_ROOT_TASKS,
    ValidationCode.CYCLE_DETECTED: ErrorCode.WORKFLOW_CYCLE_DETECTED,
    ValidationCode.UNREACHABLE_TASK: ErrorCode.WORKFLOW_UNREACHABLE_TASK,
    ValidationCode.BUILD_ERROR: ErrorCode.WORKFLOW_BUILD_FAILED,
}

_HELP: dict[ValidationCode, str] = {
    ValidationCode.NO_ROOTS: 'at least one task must have an empty depends_on list',
    ValidationCode.CYCLE_DETECTED: 'remove circular dependencies between tasks',
    ValidationCode.UNREACHABLE_TASK: 'make the task depend on a task reachable from a root',
    ValidationCode.BUILD_ERROR: 'check task ids and depends_on references',
}


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    """
    One structural problem found by validate_dag().

    Fields:
        code: problem category
        message: human-readable description
        task_id: offending task, for UNREACHABLE_TASK
        path: the cycle as task ids, first id repeated at the end, for CYCLE_DETECTED
    """

    code: ValidationCode
    message: str
    task_id: str | None = None
    path: tuple[str, ...] = ()

    def to_error(self) -> WorkflowValidationError:
        notes: list[str] = []
        if self.task_id is not None:
            notes.append(f'task: {self.task_id}')
        if self.path:
            notes.append(f'cycle: {CYCLE_PATH_SEPARATOR.join(self.path)}')
        return WorkflowValidationError(
            message=self.message,
            code=_ERROR_CODES[self.code],
            notes=notes,
            help_text=_HELP[self.code],
        )


_WHITE, _GRAY, _BLACK = 0, 1, 2


def validate_dag(workflow: WorkflowDeclaration) -> list[ValidationIssue]:
    """Return every structural problem of the declaration; empty means valid."""
    _, issues = _build_and_check(workflow)
    return issues


def is_valid_dag(workflow: WorkflowDeclaration) -> bool:
    return not validate_dag(workflow)


def ensure_valid_dag(workflow: WorkflowDeclaration) -> DAG:
    """Validate and build in one call, for registration-time callers.

    Raises:
        WorkflowValidationError: for a single problem.
        MultipleValidationErrors: for two or more.
    """
    dag, issues = _build_and_check(workflow)
    report = ValidationReport('dag')
    for issue in issues:
        report.add(issue.to_error())
    raise_collected(report)
    # A failed build always yields a BUILD_ERROR issue
    assert dag is not None
    return dag


def _build_and_check(
    workflow: WorkflowDeclaration,
) -> tuple[DAG | None, list[ValidationIssue]]:
    try:
        dag = build_dag(workflow)
    except Exception as exc:
        logger.warning(f"Could not build DAG for '{workflow.name}': {exc}")
        return None, [ValidationIssue(code=ValidationCode.BUILD_ERROR, message=str(exc))]

    issues = _check_structure(dag)
    if issues:
        logger.debug(
            f"Workflow '{workflow.name}' failed validation: "
            f'{[issue.code.value for issue in issues]}'
        )
    return dag, issues


def _check_structure(dag: DAG) -> list[ValidationIssue]:
    if not dag.roots:
        return [
            ValidationIssue(
                code=ValidationCode.NO_ROOTS,
                message=(
                    'Workflow has no root tasks (all tasks have dependencies). '
                    'This creates a cycle.'
                ),
            )
        ]

    issues = _detect_cycles(dag)
    if not issues:
        issues = _find_unreachable_tasks(dag)
    return issues


def _detect_cycles(dag: DAG) -> list[ValidationIssue]:
    """Three-color DFS restarted from every unvisited task."""
    color = dict.fromkeys(dag.nodes, _WHITE)
    issues: list[ValidationIssue] = []

    for task_id in dag.nodes:
        if color[task_id] != _WHITE:
            continue
        for cycle in _find_cycles_from(dag, task_id, color):
            issues.append(
                ValidationIssue(
                    code=ValidationCode.CYCLE_DETECTED,
                    message=f'Cycle detected: {CYCLE_PATH_SEPARATOR.join(cycle)}',
                    path=tuple(cycle),
                )
            )
    return issues


def _find_cycles_from(dag: DAG, start: str, color: dict[str, int]) -> list[list[str]]:
    """Walk forward edges from start; return one cycle per back edge met.

    Iterative so long chains stay clear of the recursion limit. A back edge
    is recorded and skipped, and the walk goes on, so a task is closed out
    only once all of its children are explored.
    """
    cycles: list[list[str]] = []
    path = [start]
    children = [iter(dag.edges[start])]
    color[start] = _GRAY

    while children:
        child_id = next(children[-1], None)
        if child_id is None:
            color[path.pop()] = _BLACK
            children.pop()
            continue

        if color[child_id] == _GRAY:
            cycles.append(path[path.index(child_id):] + [child_id])
        elif color[child_id] == _WHITE:
            color[child_id] = _GRAY
            path.append(child_id)
            children.append(iter(dag.edges[child_id]))

    return cycles


def _find_unreachable_tasks(dag: DAG) -> list[ValidationIssue]:
    """Breadth-first search from all roots at once."""
    reachable = set(dag.roots)
    queue = deque(dag.roots)

    while queue:
        for child_id in dag.edges[queue.popleft()]:
            if child_id not in reachable:
                reachable.add(child_id)
                queue.append(child_id)

    return [
        ValidationIssue(
            code=ValidationCode.UNREACHABLE_TASK,
            message=f'Task {task_id} is not reachable from any root task',
            task_id=task_id,
        )
        for task_id in dag.nodes
        if task_id not in reachable
    ]
