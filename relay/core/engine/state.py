"""Task run state machine: legal transitions and the events that drive them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, TypeAlias

from relay.core.errors import ErrorCode, TransitionError
from relay.core.logging import get_logger
from relay.core.types.status import TaskRunStatus

logger = get_logger('state')


class TaskEventType(str, Enum):
    DEPENDENCIES_MET = 'DEPENDENCIES_MET'
    APPROVAL_REQUIRED = 'APPROVAL_REQUIRED'
    SCHEDULED = 'SCHEDULED'
    CLAIMED = 'CLAIMED'
    COMPLETED = 'COMPLETED'
    ERRORED = 'ERRORED'
    APPROVED = 'APPROVED'
    CANCELLED = 'CANCELLED'


# =============================================================================
# Events
# =============================================================================


@dataclass(slots=True, frozen=True)
class DependenciesMet:
    """Every upstream task reached SUCCESS."""

    event_type: ClassVar[TaskEventType] = TaskEventType.DEPENDENCIES_MET


@dataclass(slots=True, frozen=True)
class ApprovalRequired:
    """Dependencies are met but a human must approve first."""

    event_type: ClassVar[TaskEventType] = TaskEventType.APPROVAL_REQUIRED


@dataclass(slots=True, frozen=True)
class Scheduled:
    """The control loop pushed the task onto the work queue."""

    event_type: ClassVar[TaskEventType] = TaskEventType.SCHEDULED


@dataclass(slots=True, frozen=True)
class Claimed:
    """A worker took the task off the queue."""

    event_type: ClassVar[TaskEventType] = TaskEventType.CLAIMED


@dataclass(slots=True, frozen=True)
class Completed:
    """The worker finished and produced output."""

    output: str
    event_type: ClassVar[TaskEventType] = TaskEventType.COMPLETED


@dataclass(slots=True, frozen=True)
class Errored:
    """The worker failed; retriable decides between requeue and FAILED."""

    error: str
    retriable: bool
    event_type: ClassVar[TaskEventType] = TaskEventType.ERRORED


@dataclass(slots=True, frozen=True)
class Approved:
    """A human approved a blocked task."""

    event_type: ClassVar[TaskEventType] = TaskEventType.APPROVED


@dataclass(slots=True, frozen=True)
class Cancelled:
    """The task (or its run) was cancelled."""

    event_type: ClassVar[TaskEventType] = TaskEventType.CANCELLED


TaskEvent: TypeAlias = (
    DependenciesMet
    | ApprovalRequired
    | Scheduled
    | Claimed
    | Completed
    | Errored
    | Approved
    | Cancelled
)


# =============================================================================
# Transition table
# =============================================================================


VALID_TRANSITIONS: dict[TaskRunStatus, frozenset[TaskRunStatus]] = {
    TaskRunStatus.PENDING: frozenset({
        TaskRunStatus.READY,
        TaskRunStatus.BLOCKED,
        TaskRunStatus.CANCELLED,
    }),
    TaskRunStatus.READY: frozenset({TaskRunStatus.QUEUED, TaskRunStatus.CANCELLED}),
    TaskRunStatus.QUEUED: frozenset({TaskRunStatus.RUNNING, TaskRunStatus.CANCELLED}),
    TaskRunStatus.RUNNING: frozenset({
        TaskRunStatus.SUCCESS,
        TaskRunStatus.FAILED,
        TaskRunStatus.QUEUED,  # retry
        TaskRunStatus.CANCELLED,
    }),
    TaskRunStatus.BLOCKED: frozenset({TaskRunStatus.READY, TaskRunStatus.CANCELLED}),
    TaskRunStatus.SUCCESS: frozenset(),
    TaskRunStatus.FAILED: frozenset(),
    TaskRunStatus.CANCELLED: frozenset(),
}


def allowed_transitions(status: TaskRunStatus) -> frozenset[TaskRunStatus]:
    return VALID_TRANSITIONS[status]


def can_transition(from_status: TaskRunStatus, to_status: TaskRunStatus) -> bool:
    return to_status in VALID_TRANSITIONS[from_status]


def _illegal(event: TaskEventType, current: TaskRunStatus, expected: TaskRunStatus) -> TransitionError:
    return TransitionError(
        message=f'Cannot process {event.value} from {current.value}',
        code=ErrorCode.TASK_INVALID_TRANSITION,
        notes=[f'{event.value} is only valid from {expected.value}'],
        current=current.value,
        event_type=event.value,
    )


def next_status(current: TaskRunStatus, event: TaskEvent) -> TaskRunStatus:
    """
    Return the status a task moves to when event happens in current.

    Raises:
        TransitionError: if the event is not legal from current, including
            any attempt to cancel a terminal task.
    """
    current = TaskRunStatus(current)
    match event:
        case DependenciesMet():
            if current is TaskRunStatus.PENDING:
                return TaskRunStatus.READY
            raise _illegal(event.event_type, current, TaskRunStatus.PENDING)

        case ApprovalRequired():
            if current is TaskRunStatus.PENDING:
                return TaskRunStatus.BLOCKED
            raise _illegal(event.event_type, current, TaskRunStatus.PENDING)

        case Scheduled():
            if current is TaskRunStatus.READY:
                return TaskRunStatus.QUEUED
            raise _illegal(event.event_type, current, TaskRunStatus.READY)

        case Claimed():
            if current is TaskRunStatus.QUEUED:
                return TaskRunStatus.RUNNING
            raise _illegal(event.event_type, current, TaskRunStatus.QUEUED)

        case Completed():
            if current is TaskRunStatus.RUNNING:
                return TaskRunStatus.SUCCESS
            raise _illegal(event.event_type, current, TaskRunStatus.RUNNING)

        case Errored(retriable=retriable):
            if current is TaskRunStatus.RUNNING:
                return TaskRunStatus.QUEUED if retriable else TaskRunStatus.FAILED
            raise _illegal(event.event_type, current, TaskRunStatus.RUNNING)

        case Approved():
            if current is TaskRunStatus.BLOCKED:
                return TaskRunStatus.READY
            raise _illegal(event.event_type, current, TaskRunStatus.BLOCKED)

        case Cancelled():
            if current.is_terminal:
                raise TransitionError(
                    message=f'Cannot process CANCELLED from terminal state {current.value}',
                    code=ErrorCode.TASK_CANCEL_TERMINAL,
                    notes=['terminal tasks accept no further events'],
                    current=current.value,
                    event_type=TaskEventType.CANCELLED.value,
                )
            return TaskRunStatus.CANCELLED

        case _:
            raise TransitionError(
                message=f'Unknown event {event!r} from {current.value}',
                code=ErrorCode.TASK_UNKNOWN_EVENT,
                current=current.value,
            )


def apply_event(current: TaskRunStatus, event: TaskEvent) -> TaskRunStatus:
    """next_status() with a debug record of the transition."""
    new_status = next_status(current, event)
    logger.debug(f'{event.event_type.value}: {current.value} -> {new_status.value}')
    return new_status


def is_terminal(status: TaskRunStatus) -> bool:
    return status.is_terminal


def is_active(status: TaskRunStatus) -> bool:
    return status.is_active


def is_waiting(status: TaskRunStatus) -> bool:
    return status.is_waiting


def is_schedulable(status: TaskRunStatus) -> bool:
    return status.is_schedulable
