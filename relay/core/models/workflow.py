# relay/core/models/workflow.py
"""Workflow declaration models consumed by the DAG builder and validator.

A declaration arrives already normalized. The models only coerce a few
shorthand forms (a single ``depends_on`` string) and enforce the two
invariants the builder relies on: task ids are unique and every
dependency points at a task of the same declaration.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from relay.core.defaults import DEFAULT_BACKOFF_MS, DEFAULT_MAX_ATTEMPTS
from relay.core.errors import (
    ConfigurationError,
    DeclarationError,
    ErrorCode,
    RelayError,
    ValidationReport,
    raise_collected,
)


class RetryConfig(BaseModel):
    """
    Retry policy attached to a task.

    Fields:
        max_attempts: total attempts allowed, the first one included
        backoff_ms: delay the caller waits before requeueing
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    max_attempts: Annotated[int, Field(ge=1, le=100)] = DEFAULT_MAX_ATTEMPTS
    backoff_ms: Annotated[int, Field(ge=0, le=86_400_000)] = DEFAULT_BACKOFF_MS


class TaskConfig(BaseModel):
    """Execution parameters for a task, carried through untouched."""

    model_config = ConfigDict(frozen=True)

    temperature: Annotated[float, Field(ge=0.0, le=2.0)] | None = None
    max_tokens: Annotated[int, Field(gt=0)] | None = None
    json_output: bool | dict[str, Any] | None = None
    retry_policy: RetryConfig | None = None


class GlobalConfig(BaseModel):
    """Workflow-wide execution limits, read by the orchestrator."""

    model_config = ConfigDict(frozen=True)

    max_parallel: int | None = None
    timeout_ms: int | None = None

    @model_validator(mode='after')
    def validate_limits(self) -> Self:
        report = ValidationReport('config')
        if self.max_parallel is not None and self.max_parallel < 1:
            report.add(
                ConfigurationError(
                    message='max_parallel must be at least 1',
                    code=ErrorCode.CONFIG_INVALID_GLOBAL,
                    notes=[f'max_parallel={self.max_parallel}'],
                    help_text='omit max_parallel for unlimited parallelism',
                )
            )
        if self.timeout_ms is not None and self.timeout_ms < 1:
            report.add(
                ConfigurationError(
                    message='timeout_ms must be positive',
                    code=ErrorCode.CONFIG_INVALID_GLOBAL,
                    notes=[f'timeout_ms={self.timeout_ms}'],
                    help_text='omit timeout_ms to disable the run timeout',
                )
            )
        raise_collected(report)
        return self


class TaskDeclaration(BaseModel):
    """One task of a workflow declaration."""

    model_config = ConfigDict(frozen=True)

    id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    prompt: str = ''
    model: str = ''
    provider: Literal['openai', 'anthropic'] = 'openai'
    depends_on: tuple[str, ...] = ()
    requires_approval: bool = False
    config: TaskConfig = Field(default_factory=TaskConfig)

    @field_validator('depends_on', mode='before')
    @classmethod
    def _coerce_depends_on(cls, value: Any) -> Any:
        # Shorthand: depends_on: research
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    @property
    def retry_policy(self) -> RetryConfig | None:
        return self.config.retry_policy


class WorkflowDeclaration(BaseModel):
    """A named, ordered sequence of task declarations.

    Task order matters: it fixes the iteration order of the built DAG and
    therefore the tie-breaking of every traversal.
    """

    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(min_length=1)]
    tasks: tuple[TaskDeclaration, ...]
    config: GlobalConfig = Field(default_factory=GlobalConfig)

    @model_validator(mode='after')
    def validate_task_graph_inputs(self) -> Self:
        """Collect every precondition violation and raise them together."""
        report = ValidationReport('declaration')
        if not self.tasks:
            report.add(
                DeclarationError(
                    message='workflow has no tasks',
                    code=ErrorCode.WORKFLOW_NO_TASKS,
                    notes=[f"workflow '{self.name}' declares an empty task list"],
                    help_text='declare at least one task',
                )
            )
        report.extend(validate_unique_task_ids(self.tasks))
        report.extend(validate_task_references(self.tasks))
        raise_collected(report)
        return self

    def task_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    def get_task(self, task_id: str) -> TaskDeclaration | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def approval_map(self) -> dict[str, bool]:
        """task id -> requires_approval, the shape the unlock resolver reads."""
        return {task.id: task.requires_approval for task in self.tasks}


def validate_unique_task_ids(tasks: Sequence[TaskDeclaration]) -> list[RelayError]:
    """Return one error per task id declared more than once."""
    errors: list[RelayError] = []
    seen: set[str] = set()
    reported: set[str] = set()
    for task in tasks:
        if task.id in seen and task.id not in reported:
            errors.append(
                DeclarationError(
                    message=f"duplicate task id '{task.id}'",
                    code=ErrorCode.WORKFLOW_DUPLICATE_TASK_ID,
                    help_text='each task must have a unique id within the workflow',
                )
            )
            reported.add(task.id)
        seen.add(task.id)
    return errors


def validate_task_references(tasks: Sequence[TaskDeclaration]) -> list[RelayError]:
    """Return one error per depends_on entry naming an unknown task."""
    errors: list[RelayError] = []
    known = {task.id for task in tasks}
    for task in tasks:
        for dep_id in task.depends_on:
            if dep_id not in known:
                errors.append(
                    DeclarationError(
                        message=f"task '{task.id}' depends on non-existent task '{dep_id}'",
                        code=ErrorCode.WORKFLOW_INVALID_DEPENDENCY,
                        notes=[f'known task ids: {sorted(known)}'],
                        help_text='ensure every dependency is declared in the same workflow',
                    )
                )
    return errors
