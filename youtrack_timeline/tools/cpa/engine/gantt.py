from datetime import datetime
from typing import Iterable, List, Optional

from youtrack_timeline.app.models import (
    CriticalPathResult,
    GanttMetadata,
    RawLink,
    ScheduleReport,
    SkippedItem,
    Task,
    TimelineFilter,
)

from .conflicts import detect_conflicts
from .cpa import calculate_critical_path
from .project_graph import build_project_graph
from .task_builder import build_tasks
from .timeline import calculate_timeline, utc_now


def build_gantt_query(flt: TimelineFilter) -> str:
    """YouTrack search query for a timeline filter."""
    parts: List[str] = []
    if flt.project_ids:
        parts.append(f"project: {{{', '.join(flt.project_ids)}}}")
    if flt.assignee_ids:
        parts.append(f"assignee: {{{', '.join(flt.assignee_ids)}}}")
    if flt.state_names:
        parts.append(f"State: {{{', '.join(flt.state_names)}}}")
    if flt.priority_names:
        parts.append(f"Priority: {{{', '.join(flt.priority_names)}}}")
    if flt.type_names:
        parts.append(f"Type: {{{', '.join(flt.type_names)}}}")
    if flt.created_after:
        parts.append(f"created: {flt.created_after} ..")
    if flt.created_before:
        parts.append(f"created: .. {flt.created_before}")
    if not flt.include_completed:
        parts.append("#Unresolved")
    if flt.query:
        parts.append(flt.query)
    return " ".join(parts)


def project_keys(tasks: List[Task]) -> List[str]:
    """Distinct project references (short name, else id) in first-seen order."""
    keys: List[str] = []
    for t in tasks:
        key = t.project_key or t.project_id
        if key not in keys:
            keys.append(key)
    return keys


def gantt_metadata(tasks: List[Task], now: datetime) -> GanttMetadata:
    return GanttMetadata(
        generated_at=now,
        total_tasks=len(tasks),
        completed_tasks=sum(1 for t in tasks if t.resolved),
        overdue_tasks=sum(1 for t in tasks if t.due_date is not None and t.due_date < now and not t.resolved),
    )


def build_schedule(
    issues: List[dict],
    links: Iterable[RawLink],
    project: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ScheduleReport:
    """Run the whole engine for one request.

    Maps raw issues to tasks (skipping bad ones), assembles the dependency
    graph, then computes the timeline, conflicts and critical paths. Each
    project gets its own critical path in `critical_paths`; `critical_path`
    is the one for `project`, or for the only project present. Tasks from
    several projects with no `project` given leave it empty.
    """
    now = now or utc_now()
    tasks, errors = build_tasks(issues)
    graph = build_project_graph(tasks, links)
    paths = {
        key: calculate_critical_path(graph, project=key, now=now)
        for key in project_keys(graph.tasks)
    }
    if project is not None:
        critical_path = calculate_critical_path(graph, project=project, now=now)
    elif len(paths) == 1:
        critical_path = next(iter(paths.values()))
    else:
        critical_path = CriticalPathResult()
    return ScheduleReport(
        tasks=graph.tasks,
        edges=graph.edges,
        timeline=calculate_timeline(graph.tasks, now=now),
        conflicts=detect_conflicts(graph),
        critical_path=critical_path,
        critical_paths=paths,
        metadata=gantt_metadata(graph.tasks, now),
        skipped=[SkippedItem(item_ref=e.item_ref, reason=str(e)) for e in errors],
    )
