import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from youtrack_timeline import config
from youtrack_timeline.app.models import CriticalPathResult, ProjectGraph, Task, TaskMetrics

from .timeline import SECONDS_PER_DAY, utc_now

logger = logging.getLogger(__name__)

SINK_PROJECT_END = "project_end"
SINK_OWN_FINISH = "own_finish"

_UNSEEN, _IN_PROGRESS, _DONE = 0, 1, 2


def _days(delta: timedelta) -> float:
    return delta.total_seconds() / SECONDS_PER_DAY


def task_duration(task: Task, default_minutes: Optional[float] = None) -> timedelta:
    """Planned window when both dates are set, else the estimate (or the default) in minutes."""
    if task.start_date is not None and task.due_date is not None:
        return max(timedelta(0), task.due_date - task.start_date)
    if default_minutes is None:
        default_minutes = config.DEFAULT_TASK_MINUTES
    minutes = task.estimated_minutes if task.estimated_minutes is not None else default_minutes
    return timedelta(minutes=max(0.0, float(minutes)))


def _index_adjacency(ids: List[str], adjacency: Dict[str, List[str]]) -> List[List[int]]:
    pos = {k: i for i, k in enumerate(ids)}
    return [[pos[v] for v in adjacency.get(k, []) if v in pos] for k in ids]


def _postorder(adj: List[List[int]]) -> List[int]:
    """Children-first visit order over an index arena.

    A child that is still in progress is a cycle back-edge and is skipped, so
    malformed (cyclic) input still terminates.
    """
    n = len(adj)
    state = [_UNSEEN] * n
    order: List[int] = []
    for root in range(n):
        if state[root] != _UNSEEN:
            continue
        state[root] = _IN_PROGRESS
        stack = [(root, 0)]
        while stack:
            node, i = stack[-1]
            if i < len(adj[node]):
                stack[-1] = (node, i + 1)
                child = adj[node][i]
                if state[child] == _UNSEEN:
                    state[child] = _IN_PROGRESS
                    stack.append((child, 0))
                continue
            stack.pop()
            state[node] = _DONE
            order.append(node)
    return order


def calculate_critical_path(
    graph: ProjectGraph,
    project: Optional[str] = None,
    now: Optional[datetime] = None,
    default_minutes: Optional[float] = None,
    sink_anchor: Optional[str] = None,
    tolerance_days: Optional[float] = None,
) -> CriticalPathResult:
    """Critical Path Method over the depends-on edges of `graph`.

    Restricted to `project` when given. Forward pass: a task starts at its own
    start (or creation) unless a dependency finishes later. Backward pass: a
    task must finish before its earliest-starting dependent; tasks nobody
    depends on finish at the project end (or at their own earliest finish with
    sink_anchor="own_finish"). Tasks with |slack| under `tolerance_days` are
    critical.
    """
    if project is not None:
        graph = graph.scoped(project)
    if not graph.tasks:
        if project is not None:
            logger.info("No tasks in scope for project %s; empty critical path", project)
        return CriticalPathResult(ordered_critical_tasks=[], total_duration_days=0.0, per_task_metrics=[])

    sink_anchor = sink_anchor or config.CPA_SINK_ANCHOR
    if tolerance_days is None:
        tolerance_days = config.CPA_SLACK_TOLERANCE_DAYS

    tasks = graph.tasks
    ids = [t.human_id for t in tasks]
    deps = _index_adjacency(ids, graph.dependencies())
    succ = _index_adjacency(ids, graph.dependents())
    dur = [task_duration(t, default_minutes) for t in tasks]

    # Tasks with neither a start nor a creation date start at the earliest known anchor
    anchors = [t.start_date or t.created_at for t in tasks]
    known = [a for a in anchors if a is not None]
    fallback = min(known) if known else (now or utc_now())
    own_start = [a if a is not None else fallback for a in anchors]

    # Forward pass: dependencies before dependents
    es: List[Optional[datetime]] = [None] * len(tasks)
    ef: List[Optional[datetime]] = [None] * len(tasks)
    for u in _postorder(deps):
        start = own_start[u]
        for p in deps[u]:
            if ef[p] is not None and ef[p] > start:
                start = ef[p]
        es[u] = start
        ef[u] = start + dur[u]

    project_end = max(ef)

    # Backward pass: dependents before dependencies
    ls: List[Optional[datetime]] = [None] * len(tasks)
    lf: List[Optional[datetime]] = [None] * len(tasks)
    for u in _postorder(succ):
        finish = None
        for s in succ[u]:
            if ls[s] is not None and (finish is None or ls[s] < finish):
                finish = ls[s]
        if finish is None:
            finish = ef[u] if sink_anchor == SINK_OWN_FINISH else project_end
        lf[u] = finish
        ls[u] = finish - dur[u]

    metrics: List[TaskMetrics] = []
    critical: List[int] = []
    for i, t in enumerate(tasks):
        slack = _days(ls[i] - es[i])
        is_critical = abs(slack) < tolerance_days
        if is_critical:
            critical.append(i)
        metrics.append(TaskMetrics(
            human_id=t.human_id,
            summary=t.summary,
            start_date=t.start_date,
            due_date=t.due_date,
            duration_days=_days(dur[i]),
            slack_days=slack,
            earliest_start=es[i],
            earliest_finish=ef[i],
            latest_start=ls[i],
            latest_finish=lf[i],
            is_critical=is_critical,
        ))

    critical.sort(key=lambda i: es[i])
    metrics.sort(key=lambda m: m.slack_days)
    return CriticalPathResult(
        ordered_critical_tasks=[ids[i] for i in critical],
        total_duration_days=_days(project_end - min(es)),
        per_task_metrics=metrics,
    )
