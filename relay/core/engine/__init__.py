"""Task lifecycle state machine and dependency unlock resolution."""

from relay.core.engine.state import (
    TaskEventType,
    TaskEvent,
    DependenciesMet,
    ApprovalRequired,
    Scheduled,
    Claimed,
    Completed,
    Errored,
    Approved,
    Cancelled,
    VALID_TRANSITIONS,
    allowed_transitions,
    can_transition,
    next_status,
    apply_event,
    is_terminal,
    is_active,
    is_waiting,
    is_schedulable,
)
from relay.core.engine.unlock import (
    UnlockResult,
    compute_initial_ready,
    compute_unlocked,
    are_dependencies_satisfied,
    is_run_complete,
    compute_run_status,
)
from relay.core.engine.retry import should_retry, should_retry_task

__all__ = [
    # Events
    'TaskEventType',
    'TaskEvent',
    'DependenciesMet',
    'ApprovalRequired',
    'Scheduled',
    'Claimed',
    'Completed',
    'Errored',
    'Approved',
    'Cancelled',
    # Transitions
    'VALID_TRANSITIONS',
    'allowed_transitions',
    'can_transition',
    'next_status',
    'apply_event',
    'is_terminal',
    'is_active',
    'is_waiting',
    'is_schedulable',
    # Unlock
    'UnlockResult',
    'compute_initial_ready',
    'compute_unlocked',
    'are_dependencies_satisfied',
    'is_run_complete',
    'compute_run_status',
    # Retry
    'should_retry',
    'should_retry_task',
]
