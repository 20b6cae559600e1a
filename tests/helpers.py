"""Declaration builders shared by the unit tests."""

from __future__ import annotations

from typing import Any

from relay.core.models.workflow import TaskDeclaration, WorkflowDeclaration


def task(
    task_id: str,
    depends_on: list[str] | None = None,
    *,
    requires_approval: bool = False,
    **extra: Any,
) -> TaskDeclaration:
    return TaskDeclaration(
        id=task_id,
        name=f'Task {task_id}',
        prompt=f'Prompt for {task_id}',
        model='gpt-4',
        provider='openai',
        depends_on=depends_on or [],
        requires_approval=requires_approval,
        **extra,
    )


def workflow(*tasks: TaskDeclaration, name: str = 'Test') -> WorkflowDeclaration:
    return WorkflowDeclaration(name=name, tasks=tasks)


def diamond(*, t4_approval: bool = False) -> WorkflowDeclaration:
    """t1 <- {t2, t3} <- t4"""
    return workflow(
        task('t1'),
        task('t2', ['t1']),
        task('t3', ['t1']),
        task('t4', ['t2', 't3'], requires_approval=t4_approval),
    )
