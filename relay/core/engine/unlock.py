"""Dependency unlock resolution and run verdicts.

Every function here is a query over a caller-supplied status snapshot.
Nothing is mutated or retained; the control loop applies the recommended
transitions, persists them, and calls back after the next event. Two
completions racing on the same dependent must be serialized by the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from relay.core.dag.build import DAG, get_downstream, get_upstream
from relay.core.errors import ErrorCode, RunStatusError
from relay.core.logging import get_logger
from relay.core.types.status import RunStatus, TaskRunStatus

logger = get_logger('unlock')


@dataclass(slots=True, frozen=True)
class UnlockResult:
    """
    Tasks leaving PENDING after an unlock query.

    - newly_ready: move to READY (DEPENDENCIES_MET)
    - newly_blocked: move to BLOCKED (APPROVAL_REQUIRED)
    """

    newly_ready: list[str] = field(default_factory=lambda: [])
    newly_blocked: list[str] = field(default_factory=lambda: [])

    @property
    def is_empty(self) -> bool:
        return not self.newly_ready and not self.newly_blocked


def _split_by_approval(
    task_ids: list[str],
    requires_approval: Mapping[str, bool],
) -> UnlockResult:
    result = UnlockResult()
    for task_id in task_ids:
        if requires_approval.get(task_id, False):
            result.newly_blocked.append(task_id)
        else:
            result.newly_ready.append(task_id)
    return result


def compute_initial_ready(
    dag: DAG,
    requires_approval: Mapping[str, bool],
) -> UnlockResult:
    """Root tasks to release when a run starts. Non-roots stay PENDING."""
    result = _split_by_approval(list(dag.roots), requires_approval)
    logger.debug(
        f'Initial unlock: ready={result.newly_ready} blocked={result.newly_blocked}'
    )
    return result


def compute_unlocked(
    completed_task_id: str,
    dag: DAG,
    current_statuses: Mapping[str, TaskRunStatus],
    requires_approval: Mapping[str, bool],
) -> UnlockResult:
    """
    Direct dependents of completed_task_id that can leave PENDING now.

    A dependent qualifies when it is still PENDING and every one of its
    dependencies, not only the completed one, is SUCCESS. Dependents in
    any other status are left alone, so repeating the query on the same
    snapshot never releases a task twice.
    """
    candidates = [
        child_id
        for child_id in get_downstream(dag, completed_task_id)
        if current_statuses.get(child_id) == TaskRunStatus.PENDING
        and are_dependencies_satisfied(child_id, dag, current_statuses)
    ]
    result = _split_by_approval(candidates, requires_approval)
    if not result.is_empty:
        logger.debug(
            f'{completed_task_id} unlocked: ready={result.newly_ready} '
            f'blocked={result.newly_blocked}'
        )
    return result


def are_dependencies_satisfied(
    task_id: str,
    dag: DAG,
    current_statuses: Mapping[str, TaskRunStatus],
) -> bool:
    """True when every dependency's recorded status is exactly SUCCESS."""
    return all(
        current_statuses.get(dep_id) == TaskRunStatus.SUCCESS
        for dep_id in get_upstream(dag, task_id)
    )


def is_run_complete(statuses: Mapping[str, TaskRunStatus]) -> bool:
    """True when no task can move any more."""
    return all(TaskRunStatus(status).is_terminal for status in statuses.values())


def compute_run_status(statuses: Mapping[str, TaskRunStatus]) -> RunStatus:
    """
    Final verdict of a completed run: FAILED > CANCELLED > SUCCESS.

    Raises:
        RunStatusError: if any task is not terminal or there are no tasks.
    """
    pending = [
        task_id
        for task_id, status in statuses.items()
        if not TaskRunStatus(status).is_terminal
    ]
    if pending or not statuses:
        raise RunStatusError(
            message='Cannot determine run status - run not complete',
            code=ErrorCode.RUN_NOT_COMPLETE,
            notes=[
                f'non-terminal tasks: {pending}' if pending else 'run has no tasks',
            ],
            help_text='call is_run_complete() before computing the run status',
            pending=pending,
        )

    values = set(statuses.values())
    if TaskRunStatus.FAILED in values:
        return RunStatus.FAILED
    if TaskRunStatus.CANCELLED in values:
        return RunStatus.CANCELLED
    return RunStatus.SUCCESS
