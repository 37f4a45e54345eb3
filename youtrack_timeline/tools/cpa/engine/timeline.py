import math
from datetime import datetime, timezone
from typing import List, Optional

from youtrack_timeline.app.models import Task, Timeline

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def task_window_start(task: Task) -> Optional[datetime]:
    return task.start_date or task.created_at


def task_window_end(task: Task) -> Optional[datetime]:
    return task.due_date or task.resolved_at or task.updated_at


def calculate_timeline(tasks: List[Task], now: Optional[datetime] = None) -> Timeline:
    """Overall project window: earliest start (or creation) to latest due (or resolution/update).

    An empty task set has a degenerate window at `now`, not an error.
    """
    now = now or utc_now()
    starts = [d for d in (task_window_start(t) for t in tasks) if d is not None]
    ends = [d for d in (task_window_end(t) for t in tasks) if d is not None]
    if not starts and not ends:
        return Timeline(start=now, end=now, duration_days=0)
    start = min(starts) if starts else min(ends)
    end = max(ends) if ends else max(starts)
    days = math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
    return Timeline(start=start, end=end, duration_days=max(0, days))
