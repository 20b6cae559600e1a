"""Relay - DAG compilation and task lifecycle engine for declarative workflows"""

# Install Rust-style error handler on import
from .core.errors import install_error_handler as _install_error_handler

_install_error_handler()

from .core.types.status import (
    TaskRunStatus,
    RunStatus,
    TASK_RUN_TERMINAL_STATES,
    TASK_RUN_ACTIVE_STATES,
    TASK_RUN_WAITING_STATES,
    TASK_RUN_SCHEDULABLE_STATES,
    RUN_TERMINAL_STATES,
)
from .core.models.workflow import (
    TaskDeclaration,
    WorkflowDeclaration,
    TaskConfig,
    RetryConfig,
    GlobalConfig,
    validate_unique_task_ids,
    validate_task_references,
)
from .core.errors import (
    ErrorCode,
    RelayError,
    DeclarationError,
    WorkflowValidationError,
    ConfigurationError,
    CycleError,
    TransitionError,
    RunStatusError,
    ValidationReport,
    MultipleValidationErrors,
)
from .core.dag import (
    DAG,
    TaskNode,
    build_dag,
    get_downstream,
    get_upstream,
    is_root,
    get_all_task_ids,
    topo_sort,
    compute_execution_phases,
    compute_task_depths,
    ValidationCode,
    ValidationIssue,
    validate_dag,
    is_valid_dag,
    ensure_valid_dag,
)
from .core.engine import (
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
    UnlockResult,
    compute_initial_ready,
    compute_unlocked,
    are_dependencies_satisfied,
    is_run_complete,
    compute_run_status,
    should_retry,
    should_retry_task,
)

__all__ = [
    # Status
    'TaskRunStatus',
    'RunStatus',
    'TASK_RUN_TERMINAL_STATES',
    'TASK_RUN_ACTIVE_STATES',
    'TASK_RUN_WAITING_STATES',
    'TASK_RUN_SCHEDULABLE_STATES',
    'RUN_TERMINAL_STATES',
    # Declarations
    'TaskDeclaration',
    'WorkflowDeclaration',
    'TaskConfig',
    'RetryConfig',
    'GlobalConfig',
    'validate_unique_task_ids',
    'validate_task_references',
    # Errors
    'ErrorCode',
    'RelayError',
    'DeclarationError',
    'WorkflowValidationError',
    'ConfigurationError',
    'CycleError',
    'TransitionError',
    'RunStatusError',
    'ValidationReport',
    'MultipleValidationErrors',
    # DAG
    'DAG',
    'TaskNode',
    'build_dag',
    'get_downstream',
    'get_upstream',
    'is_root',
    'get_all_task_ids',
    'topo_sort',
    'compute_execution_phases',
    'compute_task_depths',
    'ValidationCode',
    'ValidationIssue',
    'validate_dag',
    'is_valid_dag',
    'ensure_valid_dag',
    # State machine
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
    'should_retry',
    'should_retry_task',
]
