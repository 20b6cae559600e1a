"""Execution ordering over a built DAG: topological order, phases, depths."""

from __future__ import annotations

from collections import deque

from relay.core.dag.build import DAG
from relay.core.errors import CycleError, ErrorCode


def _cycle_error(message: str, remaining: list[str]) -> CycleError:
    return CycleError(
        message=message,
        code=ErrorCode.DAG_CYCLE,
        notes=[
            f'tasks never released: {remaining}',
            'ordering is only defined for acyclic graphs',
        ],
        help_text='run validate_dag() on the declaration before ordering it',
        remaining=remaining,
    )


def topo_sort(dag: DAG) -> list[str]:
    """
    Order task ids so every dependency comes before its dependents (Kahn).

    Ties follow FIFO discovery order, so the result is deterministic for a
    fixed declaration order.

    Raises:
        CycleError: if the graph contains a cycle.
    """
    in_degree = {task_id: len(dag.dependencies[task_id]) for task_id in dag.nodes}
    queue = deque(task_id for task_id, degree in in_degree.items() if degree == 0)
    order: list[str] = []

    while queue:
        task_id = queue.popleft()
        order.append(task_id)
        for child_id in dag.edges[task_id]:
            in_degree[child_id] -= 1
            if in_degree[child_id] == 0:
                queue.append(child_id)

    if len(order) != len(dag.nodes):
        emitted = set(order)
        remaining = [task_id for task_id in dag.nodes if task_id not in emitted]
        raise _cycle_error('cycle detected, topological sort failed', remaining)

    return order


def compute_execution_phases(dag: DAG) -> list[list[str]]:
    """
    Partition tasks into waves that can run in parallel.

    A wave is every unprocessed task whose dependencies all lie in earlier
    waves. The whole wave is released at once, so siblings never see each
    other's in-degree decrements. Members keep declaration order.

    Raises:
        CycleError: if unprocessed tasks remain but none is free.
    """
    in_degree = {task_id: len(dag.dependencies[task_id]) for task_id in dag.nodes}
    processed: set[str] = set()
    phases: list[list[str]] = []

    while len(processed) < len(dag.nodes):
        phase = [
            task_id
            for task_id, degree in in_degree.items()
            if degree == 0 and task_id not in processed
        ]
        if not phase:
            remaining = [task_id for task_id in dag.nodes if task_id not in processed]
            raise _cycle_error('cycle detected, no tasks ready in phase', remaining)

        for task_id in phase:
            processed.add(task_id)
            for child_id in dag.edges[task_id]:
                in_degree[child_id] -= 1

        phases.append(phase)

    return phases


def compute_task_depths(dag: DAG) -> dict[str, int]:
    """Longest-path distance from any root, keyed by task id.

    Raises:
        CycleError: propagated from topo_sort() on a cyclic graph.
    """
    depths: dict[str, int] = {}
    for task_id in topo_sort(dag):
        deps = dag.dependencies[task_id]
        depths[task_id] = 1 + max(depths[dep_id] for dep_id in deps) if deps else 0
    return depths
