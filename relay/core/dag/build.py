"""DAG construction: turns a workflow declaration into adjacency indexes."""

from __future__ import annotations

from dataclasses import dataclass, field

from relay.core.logging import get_logger
from relay.core.models.workflow import TaskDeclaration, WorkflowDeclaration

logger = get_logger('dag')


@dataclass(slots=True, frozen=True)
class TaskNode:
    """A task as seen by the graph: identity plus its declaration."""

    id: str
    name: str
    task: TaskDeclaration = field(repr=False)


@dataclass(slots=True, frozen=True)
class DAG:
    """
    Compiled dependency graph of a workflow. Read-only after build_dag().

    - nodes: task id -> TaskNode, in declaration order
    - edges: task id -> ids of tasks that depend on it (upstream → downstream)
    - dependencies: task id -> ids it depends on (downstream → upstream)
    - roots: ids with no dependencies, in declaration order

    ``edges`` and ``dependencies`` are exact transposes of each other.
    """

    nodes: dict[str, TaskNode]
    edges: dict[str, list[str]]
    dependencies: dict[str, list[str]]
    roots: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.nodes

    def as_dict(self) -> dict[str, object]:
        """Plain-data view (ids only) for logging, diffing and tests."""
        return {
            'nodes': list(self.nodes),
            'edges': {k: list(v) for k, v in self.edges.items()},
            'dependencies': {k: list(v) for k, v in self.dependencies.items()},
            'roots': list(self.roots),
        }


def build_dag(workflow: WorkflowDeclaration) -> DAG:
    """Build the DAG for a declaration.

    Task ids must already be unique and every dependency must name a
    declared task; WorkflowDeclaration enforces both. Nothing is re-checked
    here.
    """
    nodes: dict[str, TaskNode] = {}
    edges: dict[str, list[str]] = {}
    dependencies: dict[str, list[str]] = {}

    for task in workflow.tasks:
        nodes[task.id] = TaskNode(id=task.id, name=task.name, task=task)
        edges[task.id] = []
        dependencies[task.id] = []

    for task in workflow.tasks:
        for dep_id in task.depends_on:
            edges[dep_id].append(task.id)
            dependencies[task.id].append(dep_id)

    roots = tuple(task_id for task_id, deps in dependencies.items() if not deps)

    logger.debug(
        f"Built DAG for '{workflow.name}': {len(nodes)} tasks, "
        f'{sum(len(v) for v in edges.values())} edges, {len(roots)} roots'
    )
    return DAG(nodes=nodes, edges=edges, dependencies=dependencies, roots=roots)


def get_downstream(dag: DAG, task_id: str) -> list[str]:
    """Tasks that depend on task_id."""
    return list(dag.edges.get(task_id, ()))


def get_upstream(dag: DAG, task_id: str) -> list[str]:
    """Tasks task_id depends on."""
    return list(dag.dependencies.get(task_id, ()))


def is_root(dag: DAG, task_id: str) -> bool:
    return not dag.dependencies.get(task_id)


def get_all_task_ids(dag: DAG) -> list[str]:
    return list(dag.nodes)
