"""Deterministic timeline tools for agents.

Each tool fetches issues and links from YouTrack, runs the scheduling engine
and returns a JSON-serializable dict.
"""
import logging
from collections import Counter
from typing import List, Optional, Tuple

import requests

from youtrack_timeline import config
from youtrack_timeline.app.errors import ScopeError, YouTrackAPIError
from youtrack_timeline.app.models import ProjectGraph, RawLink, ScheduleReport, TimelineFilter
from youtrack_timeline.tools.youtrack.client import get_issue_links, search_issues

from .engine import build_gantt_query, build_schedule, flatten_issue_links
from .engine.project_graph import dependency_summary

logger = logging.getLogger(__name__)


def _require_project(project_id: str) -> str:
    project_id = (project_id or "").strip()
    if not project_id:
        raise ScopeError("project_id is required, e.g. 'PROJ'")
    return project_id


def _project_from_issue_key(issue_key: str) -> str:
    if not issue_key or "-" not in issue_key or issue_key.startswith("-"):
        raise ScopeError("issue_key must look like 'PROJ-123'")
    return issue_key.split("-", 1)[0]


def _fetch(flt: TimelineFilter) -> Tuple[List[dict], List[RawLink], str]:
    """Issues matching the filter (capped at GANTT_MAX_ISSUES) plus their links."""
    query = build_gantt_query(flt)
    issues = search_issues(query or None)[: config.GANTT_MAX_ISSUES]
    links: List[RawLink] = []
    for issue in issues:
        key = issue.get("idReadable")
        if not key:
            continue
        try:
            links.extend(flatten_issue_links(key, get_issue_links(key)))
        except (YouTrackAPIError, requests.RequestException, ValueError) as e:
            # One unreadable issue must not block the rest of the schedule
            logger.warning("Could not read links of %s: %s", key, e)
    return issues, links, query


def _schedule(flt: TimelineFilter, project: Optional[str] = None) -> Tuple[ScheduleReport, str]:
    if project is None and len(flt.project_ids) == 1:
        project = flt.project_ids[0]
    issues, links, query = _fetch(flt)
    return build_schedule(issues, links, project=project), query


def _tasks_json(report: ScheduleReport) -> List[dict]:
    out = []
    for t in report.tasks:
        row = t.model_dump(mode="json")
        row["progress"] = round(t.progress, 1)
        out.append(row)
    return out


def get_gantt_data(
    project_ids: Optional[List[str]] = None,
    assignee_ids: Optional[List[str]] = None,
    state_names: Optional[List[str]] = None,
    priority_names: Optional[List[str]] = None,
    type_names: Optional[List[str]] = None,
    include_completed: bool = True,
    query: Optional[str] = None,
) -> dict:
    """Gantt data for the matching issues: tasks, dependency edges, timeline window,
    conflicts, critical paths (one per project) and summary counts.
    """
    flt = TimelineFilter(
        project_ids=project_ids or [],
        assignee_ids=assignee_ids or [],
        state_names=state_names or [],
        priority_names=priority_names or [],
        type_names=type_names or [],
        include_completed=include_completed,
        query=query,
    )
    report, used_query = _schedule(flt)
    data = report.model_dump(mode="json")
    data["tasks"] = _tasks_json(report)
    data["query"] = used_query
    return data


def get_project_timeline(project_id: str, include_completed: bool = False) -> dict:
    """Timeline window, tasks and dependency nodes for one project."""
    project_id = _require_project(project_id)
    report, _ = _schedule(
        TimelineFilter(project_ids=[project_id], include_completed=include_completed),
        project=project_id,
    )
    return {
        "project_id": project_id,
        "timeline": report.timeline.model_dump(mode="json"),
        "tasks": _tasks_json(report),
        "nodes": dependency_summary(ProjectGraph(tasks=report.tasks, edges=report.edges)),
        "metadata": report.metadata.model_dump(mode="json"),
        "skipped": [s.model_dump(mode="json") for s in report.skipped],
    }


def calculate_critical_path(project_id: str) -> dict:
    """Critical path of a project (completed issues included): ordered critical
    tasks, total duration in days and per-task duration/slack sorted by slack.
    """
    project_id = _require_project(project_id)
    report, _ = _schedule(TimelineFilter(project_ids=[project_id], include_completed=True), project=project_id)
    return {
        "project_id": project_id,
        **report.critical_path.model_dump(mode="json"),
    }


def get_timeline_conflicts(
    project_ids: Optional[List[str]] = None,
    assignee_ids: Optional[List[str]] = None,
) -> dict:
    """Scheduling conflicts (missing dates, dependency cycles, resource overlap) with counts by severity."""
    report, _ = _schedule(TimelineFilter(project_ids=project_ids or [], assignee_ids=assignee_ids or []))
    by_severity = Counter(c.severity.value for c in report.conflicts)
    return {
        "project_ids": project_ids or [],
        "conflicts": [c.model_dump(mode="json") for c in report.conflicts],
        "counts": {s: by_severity.get(s, 0) for s in ("high", "medium", "low")},
        "total_tasks": report.metadata.total_tasks,
    }


def get_task_slack(issue_key: str) -> dict:
    """Slack (days) of one issue, computed over its whole project."""
    project_id = _project_from_issue_key(issue_key)
    result = calculate_critical_path(project_id)
    for m in result.get("per_task_metrics", []):
        if m.get("human_id") == issue_key:
            return {
                "issue_key": issue_key,
                "project_id": project_id,
                "slack_days": m.get("slack_days"),
                "duration_days": m.get("duration_days"),
                "is_critical": m.get("is_critical"),
            }
    return {"issue_key": issue_key, "project_id": project_id, "error": "task not found"}
