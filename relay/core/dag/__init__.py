"""DAG compilation, ordering and structural validation."""

from relay.core.dag.build import (
    DAG,
    TaskNode,
    build_dag,
    get_downstream,
    get_upstream,
    is_root,
    get_all_task_ids,
)
from relay.core.dag.topo import (
    topo_sort,
    compute_execution_phases,
    compute_task_depths,
)
from relay.core.dag.validate import (
    ValidationCode,
    ValidationIssue,
    validate_dag,
    is_valid_dag,
    ensure_valid_dag,
)

__all__ = [
    'DAG',
    'TaskNode',
    'build_dag',
    'get_downstream',
    'get_upstream',
    'is_root',
    'get_all_task_ids',
    # Ordering
    'topo_sort',
    'compute_execution_phases',
    'compute_task_depths',
    # Validation
    'ValidationCode',
    'ValidationIssue',
    'validate_dag',
    'is_valid_dag',
    'ensure_valid_dag',
]
