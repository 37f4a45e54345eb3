import logging
from typing import List, Optional, Tuple

from youtrack_timeline.app.errors import MappingError
from youtrack_timeline.app.models import Task
from .attributes import (
    DateAttribute,
    DurationAttribute,
    EnumAttribute,
    ScalarAttribute,
    UserAttribute,
    classify_attribute,
    normalize_name,
    parse_timestamp,
)

logger = logging.getLogger(__name__)


def _story_points(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_task(issue: dict) -> Task:
    """Normalize one raw YouTrack issue into a Task.

    Raises MappingError when the issue has no readable id or no project.
    """
    human_id = issue.get("idReadable")
    if not human_id:
        raise MappingError("issue has no idReadable", item_ref=issue.get("id"))
    project = issue.get("project") or {}
    if isinstance(project, str):
        project = {"shortName": project}
    project_id = project.get("id") or project.get("shortName")
    if not project_id:
        raise MappingError(f"issue {human_id} has no project", item_ref=human_id)

    start_date = parse_timestamp(issue.get("startDate"))
    due_date = parse_timestamp(issue.get("dueDate"))
    estimated: Optional[float] = None
    spent: Optional[float] = None
    story_points: Optional[float] = None
    state: Optional[str] = None
    state_resolved = False
    assignee = issue.get("assignee") or {}

    for field in issue.get("customFields") or []:
        attr = classify_attribute(field)
        if attr is None:
            continue
        name = normalize_name(attr.name)
        if isinstance(attr, DateAttribute):
            # first candidate with a usable value wins
            if attr.role == "start" and start_date is None:
                start_date = attr.value
            elif attr.role == "due" and due_date is None:
                due_date = attr.value
        elif isinstance(attr, DurationAttribute):
            if attr.role == "estimation" and estimated is None:
                estimated = attr.minutes
            elif attr.role == "spent" and spent is None:
                spent = attr.minutes
        elif isinstance(attr, EnumAttribute):
            if name in ("state", "stage") and state is None:
                state = attr.value
                state_resolved = attr.is_resolved
        elif isinstance(attr, UserAttribute):
            if name == "assignee" and not assignee:
                assignee = {"id": attr.user_id, "login": attr.login, "fullName": attr.full_name}
        elif isinstance(attr, ScalarAttribute):
            if name == "story points" and story_points is None:
                story_points = _story_points(attr.value)

    resolved_at = parse_timestamp(issue.get("resolved"))
    return Task(
        id=str(issue.get("id") or human_id),
        human_id=human_id,
        project_id=str(project_id),
        project_key=project.get("shortName"),
        summary=issue.get("summary"),
        assignee_id=assignee.get("id") or assignee.get("login"),
        assignee_name=assignee.get("fullName") or assignee.get("login"),
        start_date=start_date,
        due_date=due_date,
        created_at=parse_timestamp(issue.get("created")),
        updated_at=parse_timestamp(issue.get("updated")),
        resolved_at=resolved_at,
        estimated_minutes=estimated,
        spent_minutes=spent,
        story_points=story_points,
        state=state,
        resolved=resolved_at is not None or state_resolved,
    )


def build_tasks(issues: List[dict]) -> Tuple[List[Task], List[MappingError]]:
    """Map a batch of raw issues, skipping (and logging) the ones that cannot be mapped.

    Duplicate readable ids keep the first occurrence.
    """
    tasks: List[Task] = []
    errors: List[MappingError] = []
    seen = set()
    for issue in issues:
        try:
            task = build_task(issue)
        except MappingError as e:
            logger.warning("Skipping issue %s: %s", e.item_ref, e)
            errors.append(e)
            continue
        if task.human_id in seen:
            err = MappingError(f"duplicate issue {task.human_id}", item_ref=task.human_id)
            logger.warning("Skipping issue %s: %s", err.item_ref, err)
            errors.append(err)
            continue
        seen.add(task.human_id)
        tasks.append(task)
    return tasks, errors
