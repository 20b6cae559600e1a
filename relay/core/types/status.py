# core/types/status.py
"""
Status vocabulary shared by the state machine and the unlock resolver.
This module should not import from other application modules.
"""

from enum import Enum


class TaskRunStatus(str, Enum):
    """
    Status of one execution attempt of one task within a run.

    State machine:
        PENDING → READY → QUEUED → RUNNING → SUCCESS
                                           → FAILED
                                           → QUEUED (retry)
                → BLOCKED → READY (approved)
        Any non-terminal status → CANCELLED
    """

    PENDING = 'PENDING'
    """Created with the run, dependencies not yet satisfied"""

    READY = 'READY'
    """All dependencies satisfied, can be scheduled"""

    QUEUED = 'QUEUED'
    """Pushed to the work queue, waiting for a worker"""

    RUNNING = 'RUNNING'
    """Claimed by a worker and executing"""

    SUCCESS = 'SUCCESS'
    """Completed successfully"""

    FAILED = 'FAILED'
    """Failed with a non-retriable error"""

    BLOCKED = 'BLOCKED'
    """Waiting for human approval"""

    CANCELLED = 'CANCELLED'
    """Cancelled before reaching another terminal status"""

    @property
    def is_terminal(self) -> bool:
        """Whether this status represents a final state (no further transitions)."""
        return self in TASK_RUN_TERMINAL_STATES

    @property
    def is_active(self) -> bool:
        """Whether the task sits in the queue or on a worker."""
        return self in TASK_RUN_ACTIVE_STATES

    @property
    def is_waiting(self) -> bool:
        """Whether the task waits on dependencies or approval."""
        return self in TASK_RUN_WAITING_STATES

    @property
    def is_schedulable(self) -> bool:
        return self in TASK_RUN_SCHEDULABLE_STATES


TASK_RUN_TERMINAL_STATES: frozenset[TaskRunStatus] = frozenset({
    TaskRunStatus.SUCCESS,
    TaskRunStatus.FAILED,
    TaskRunStatus.CANCELLED,
})

TASK_RUN_ACTIVE_STATES: frozenset[TaskRunStatus] = frozenset({
    TaskRunStatus.QUEUED,
    TaskRunStatus.RUNNING,
})

TASK_RUN_WAITING_STATES: frozenset[TaskRunStatus] = frozenset({
    TaskRunStatus.PENDING,
    TaskRunStatus.BLOCKED,
})

TASK_RUN_SCHEDULABLE_STATES: frozenset[TaskRunStatus] = frozenset({
    TaskRunStatus.READY,
})


class RunStatus(str, Enum):
    """
    Status of a whole run.

    RUNNING is what the orchestrator stores while tasks remain; the
    resolver only ever computes one of the terminal members.
    """

    RUNNING = 'RUNNING'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'
    CANCELLED = 'CANCELLED'

    @property
    def is_terminal(self) -> bool:
        return self in RUN_TERMINAL_STATES


RUN_TERMINAL_STATES: frozenset[RunStatus] = frozenset({
    RunStatus.SUCCESS,
    RunStatus.FAILED,
    RunStatus.CANCELLED,
})
