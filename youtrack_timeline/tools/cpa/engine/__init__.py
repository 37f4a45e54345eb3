from .attributes import classify_attribute, parse_timestamp
from .conflicts import (
    detect_conflicts,
    find_dependency_cycles,
    find_missing_dates,
    find_resource_overlaps,
)
from .cpa import calculate_critical_path, task_duration
from .gantt import build_gantt_query, build_schedule
from .project_graph import (
    assemble_edges,
    build_project_graph,
    classify_link,
    flatten_issue_links,
)
from .task_builder import build_task, build_tasks
from .timeline import calculate_timeline

__all__ = [
    "classify_attribute",
    "parse_timestamp",
    "build_task",
    "build_tasks",
    "classify_link",
    "flatten_issue_links",
    "assemble_edges",
    "build_project_graph",
    "calculate_timeline",
    "detect_conflicts",
    "find_missing_dates",
    "find_dependency_cycles",
    "find_resource_overlaps",
    "calculate_critical_path",
    "task_duration",
    "build_schedule",
    "build_gantt_query",
]
