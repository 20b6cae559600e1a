"""Unit tests for dependency unlock resolution and run verdicts."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from relay.core.dag.build import build_dag
from relay.core.engine.unlock import (
    UnlockResult,
    are_dependencies_satisfied,
    compute_initial_ready,
    compute_run_status,
    compute_unlocked,
    is_run_complete,
)
from relay.core.errors import ErrorCode, RunStatusError
from relay.core.types.status import RunStatus, TaskRunStatus
from tests.helpers import diamond, task, workflow

pytestmark = pytest.mark.unit

S = TaskRunStatus


def _statuses(**kwargs: TaskRunStatus) -> dict[str, TaskRunStatus]:
    return dict(kwargs)


class TestInitialReady:
    """Tests for compute_initial_ready()."""

    def test_roots_become_ready(self) -> None:
        wf = workflow(task('a'), task('b'), task('c', ['a', 'b']))
        result = compute_initial_ready(build_dag(wf), wf.approval_map())
        assert result == UnlockResult(newly_ready=['a', 'b'], newly_blocked=[])

    def test_only_root_requires_approval(self) -> None:
        wf = workflow(task('t1', requires_approval=True), task('t2', ['t1']))
        result = compute_initial_ready(build_dag(wf), wf.approval_map())
        assert result.newly_ready == []
        assert result.newly_blocked == ['t1']

    def test_mixed_roots(self) -> None:
        wf = workflow(task('a', requires_approval=True), task('b'))
        result = compute_initial_ready(build_dag(wf), wf.approval_map())
        assert result.newly_ready == ['b']
        assert result.newly_blocked == ['a']

    def test_missing_approval_entries_mean_no_approval(self) -> None:
        result = compute_initial_ready(build_dag(diamond()), {})
        assert result.newly_ready == ['t1']

    def test_non_roots_untouched(self) -> None:
        result = compute_initial_ready(build_dag(diamond()), {})
        assert 't2' not in result.newly_ready + result.newly_blocked


class TestComputeUnlocked:
    """Tests for compute_unlocked()."""

    def test_partial_dependencies_do_not_unlock(self) -> None:
        # t3 depends on t1 and t2; t2 only on t1
        wf = workflow(task('t1'), task('t2', ['t1']), task('t3', ['t1', 't2']))
        dag = build_dag(wf)
        statuses = _statuses(t1=S.SUCCESS, t2=S.PENDING, t3=S.PENDING)
        result = compute_unlocked('t1', dag, statuses, wf.approval_map())
        assert result.newly_ready == ['t2']
        assert 't3' not in result.newly_ready

    def test_last_dependency_unlocks(self) -> None:
        wf = diamond()
        dag = build_dag(wf)
        statuses = _statuses(t1=S.SUCCESS, t2=S.SUCCESS, t3=S.SUCCESS, t4=S.PENDING)
        result = compute_unlocked('t3', dag, statuses, wf.approval_map())
        assert result == UnlockResult(newly_ready=['t4'], newly_blocked=[])

    def test_diamond_waits_for_both_branches(self) -> None:
        wf = diamond()
        statuses = _statuses(t1=S.SUCCESS, t2=S.SUCCESS, t3=S.RUNNING, t4=S.PENDING)
        result = compute_unlocked('t2', build_dag(wf), statuses, wf.approval_map())
        assert result.is_empty

    def test_approval_required_dependent_is_blocked(self) -> None:
        wf = diamond(t4_approval=True)
        statuses = _statuses(t1=S.SUCCESS, t2=S.SUCCESS, t3=S.SUCCESS, t4=S.PENDING)
        result = compute_unlocked('t2', build_dag(wf), statuses, wf.approval_map())
        assert result == UnlockResult(newly_ready=[], newly_blocked=['t4'])

    @pytest.mark.parametrize(
        'child_status',
        [S.READY, S.QUEUED, S.RUNNING, S.BLOCKED, S.CANCELLED, S.SUCCESS, S.FAILED],
    )
    def test_non_pending_dependents_left_alone(self, child_status: TaskRunStatus) -> None:
        wf = workflow(task('t1'), task('t2', ['t1']))
        statuses = _statuses(t1=S.SUCCESS, t2=child_status)
        assert compute_unlocked('t1', build_dag(wf), statuses, {}).is_empty

    def test_only_direct_dependents_are_inspected(self) -> None:
        # t3 is satisfied but hangs off t2, not off the completed t1
        wf = workflow(task('t1'), task('t2'), task('t3', ['t2']), task('t4', ['t1']))
        statuses = _statuses(t1=S.SUCCESS, t2=S.SUCCESS, t3=S.PENDING, t4=S.PENDING)
        result = compute_unlocked('t1', build_dag(wf), statuses, {})
        assert result.newly_ready == ['t4']

    def test_idempotent_on_same_snapshot(self) -> None:
        wf = diamond()
        dag = build_dag(wf)
        statuses = _statuses(t1=S.SUCCESS, t2=S.PENDING, t3=S.PENDING, t4=S.PENDING)
        first = compute_unlocked('t1', dag, statuses, wf.approval_map())
        second = compute_unlocked('t1', dag, statuses, wf.approval_map())
        assert first == second == UnlockResult(newly_ready=['t2', 't3'], newly_blocked=[])

    def test_applied_result_is_not_released_again(self) -> None:
        wf = diamond()
        dag = build_dag(wf)
        statuses = _statuses(t1=S.SUCCESS, t2=S.PENDING, t3=S.PENDING, t4=S.PENDING)
        for task_id in compute_unlocked('t1', dag, statuses, {}).newly_ready:
            statuses[task_id] = S.READY
        assert compute_unlocked('t1', dag, statuses, {}).is_empty

    def test_does_not_mutate_inputs(self) -> None:
        wf = diamond()
        statuses = MappingProxyType(
            _statuses(t1=S.SUCCESS, t2=S.PENDING, t3=S.PENDING, t4=S.PENDING)
        )
        approvals = MappingProxyType(wf.approval_map())
        result = compute_unlocked('t1', build_dag(wf), statuses, approvals)
        assert result.newly_ready == ['t2', 't3']

    def test_leaf_completion_unlocks_nothing(self) -> None:
        wf = diamond()
        statuses = {t: S.SUCCESS for t in ('t1', 't2', 't3', 't4')}
        assert compute_unlocked('t4', build_dag(wf), statuses, {}).is_empty


class TestDependenciesSatisfied:
    """Tests for are_dependencies_satisfied()."""

    def test_root_is_trivially_satisfied(self) -> None:
        assert are_dependencies_satisfied('t1', build_dag(diamond()), {}) is True

    def test_all_success(self) -> None:
        statuses = _statuses(t2=S.SUCCESS, t3=S.SUCCESS)
        assert are_dependencies_satisfied('t4', build_dag(diamond()), statuses) is True

    @pytest.mark.parametrize(
        'other',
        [S.PENDING, S.READY, S.QUEUED, S.RUNNING, S.BLOCKED, S.FAILED, S.CANCELLED],
    )
    def test_anything_but_success_is_unsatisfied(self, other: TaskRunStatus) -> None:
        statuses = _statuses(t2=S.SUCCESS, t3=other)
        assert are_dependencies_satisfied('t4', build_dag(diamond()), statuses) is False

    def test_missing_status_is_unsatisfied(self) -> None:
        statuses = _statuses(t2=S.SUCCESS)
        assert are_dependencies_satisfied('t4', build_dag(diamond()), statuses) is False


class TestRunCompletion:
    """Tests for is_run_complete() and compute_run_status()."""

    def test_complete_when_all_terminal(self) -> None:
        assert is_run_complete(_statuses(a=S.SUCCESS, b=S.FAILED, c=S.CANCELLED)) is True

    @pytest.mark.parametrize(
        'open_status', [S.PENDING, S.READY, S.QUEUED, S.RUNNING, S.BLOCKED]
    )
    def test_incomplete_with_open_task(self, open_status: TaskRunStatus) -> None:
        assert is_run_complete(_statuses(a=S.SUCCESS, b=open_status)) is False

    def test_failed_wins(self) -> None:
        statuses = _statuses(a=S.FAILED, b=S.CANCELLED, c=S.SUCCESS)
        assert compute_run_status(statuses) is RunStatus.FAILED

    def test_cancelled_beats_success(self) -> None:
        assert compute_run_status(_statuses(a=S.CANCELLED, b=S.SUCCESS)) is RunStatus.CANCELLED

    def test_all_success(self) -> None:
        assert compute_run_status(_statuses(a=S.SUCCESS, b=S.SUCCESS)) is RunStatus.SUCCESS

    def test_all_cancelled(self) -> None:
        assert compute_run_status(_statuses(a=S.CANCELLED)) is RunStatus.CANCELLED

    def test_incomplete_run_raises(self) -> None:
        with pytest.raises(RunStatusError) as exc_info:
            compute_run_status(_statuses(a=S.SUCCESS, b=S.RUNNING, c=S.BLOCKED))
        err = exc_info.value
        assert err.code == ErrorCode.RUN_NOT_COMPLETE
        assert err.pending == ['b', 'c']

    def test_empty_run_raises(self) -> None:
        with pytest.raises(RunStatusError):
            compute_run_status({})

    def test_verdict_is_terminal(self) -> None:
        assert compute_run_status(_statuses(a=S.SUCCESS)).is_terminal


class TestControlLoopWalkthrough:
    """Drives a whole run the way an orchestrator would."""

    def test_diamond_run_to_success(self) -> None:
        from relay.core.engine.state import (
            Approved,
            ApprovalRequired,
            Claimed,
            Completed,
            DependenciesMet,
            Scheduled,
            apply_event,
        )

        wf = diamond(t4_approval=True)
        dag = build_dag(wf)
        approvals = wf.approval_map()
        statuses = {task_id: S.PENDING for task_id in dag.nodes}

        def release(result: UnlockResult) -> None:
            for task_id in result.newly_ready:
                statuses[task_id] = apply_event(statuses[task_id], DependenciesMet())
            for task_id in result.newly_blocked:
                statuses[task_id] = apply_event(statuses[task_id], ApprovalRequired())

        def run(task_id: str) -> None:
            for event in (Scheduled(), Claimed(), Completed(output=task_id)):
                statuses[task_id] = apply_event(statuses[task_id], event)
            release(compute_unlocked(task_id, dag, statuses, approvals))

        release(compute_initial_ready(dag, approvals))
        run('t1')
        assert statuses['t2'] is S.READY and statuses['t3'] is S.READY
        run('t2')
        assert statuses['t4'] is S.PENDING
        run('t3')
        assert statuses['t4'] is S.BLOCKED

        statuses['t4'] = apply_event(statuses['t4'], Approved())
        run('t4')

        assert is_run_complete(statuses)
        assert compute_run_status(statuses) is RunStatus.SUCCESS
