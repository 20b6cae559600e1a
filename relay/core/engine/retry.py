"""Retriable-failure decision for the ERRORED event."""

from __future__ import annotations

from relay.core.logging import get_logger
from relay.core.models.workflow import RetryConfig, TaskDeclaration

logger = get_logger('retry')


def should_retry(attempt: int, retry_policy: RetryConfig | None) -> bool:
    """
    Whether a failure on attempt (1-based) may be requeued.

    Only the yes/no answer lives here. The caller owns backoff timing and
    reads retry_policy.backoff_ms itself.
    """
    if retry_policy is None:
        return False
    if attempt < 1:
        raise ValueError(f'attempt must be >= 1, got {attempt}')
    retriable = attempt < retry_policy.max_attempts
    if not retriable:
        logger.debug(f'Attempt {attempt} exhausted max_attempts={retry_policy.max_attempts}')
    return retriable


def should_retry_task(task: TaskDeclaration, attempt: int) -> bool:
    return should_retry(attempt, task.retry_policy)
