from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


class Task(BaseModel):
    id: str
    human_id: str
    project_id: str
    project_key: Optional[str] = None
    summary: Optional[str] = None
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    estimated_minutes: Optional[float] = None
    spent_minutes: Optional[float] = None
    story_points: Optional[float] = None
    state: Optional[str] = None
    resolved: bool = False

    @property
    def progress(self) -> float:
        """Percent complete: 100 once resolved, else spent/estimated capped at 100."""
        if self.resolved:
            return 100.0
        if self.spent_minutes is not None and self.estimated_minutes:
            return min(100.0, self.spent_minutes / self.estimated_minutes * 100.0)
        return 0.0

    def in_project(self, project_ref: str) -> bool:
        return project_ref in (self.project_id, self.project_key)


class DependencyKind(str, Enum):
    DEPENDS_ON = "depends-on"
    BLOCKS = "blocks"
    SUBTASK_OF = "subtask-of"
    PARENT_OF = "parent-of"
    RELATES_TO = "relates-to"


class LinkDirection(str, Enum):
    OUTWARD = "OUTWARD"
    INWARD = "INWARD"
    BOTH = "BOTH"


class RawLink(BaseModel):
    """One issue link as seen from `source` (YouTrack /issues/{id}/links, flattened)."""
    source: str
    target: str
    link_type: str
    direction: LinkDirection = LinkDirection.OUTWARD


class DependencyEdge(BaseModel):
    from_task: str
    to_task: str
    kind: DependencyKind
    link_type: Optional[str] = None

    @property
    def is_self_reference(self) -> bool:
        return self.from_task == self.to_task


class ProjectGraph(BaseModel):
    """Tasks of one query plus the dependency edges among them. Built per request."""
    tasks: List[Task] = []
    edges: List[DependencyEdge] = []

    def task_map(self) -> Dict[str, Task]:
        return {t.human_id: t for t in self.tasks}

    def adjacency(self, kinds: Iterable[DependencyKind] = (DependencyKind.DEPENDS_ON,)) -> Dict[str, List[str]]:
        """from_task -> [to_task] for the given kinds, self edges included."""
        wanted = set(kinds)
        adj: Dict[str, List[str]] = {t.human_id: [] for t in self.tasks}
        for e in self.edges:
            if e.kind in wanted and e.from_task in adj:
                adj[e.from_task].append(e.to_task)
        return adj

    def dependencies(self) -> Dict[str, List[str]]:
        """task -> tasks it depends on (depends-on edges, self edges excluded)."""
        deps: Dict[str, List[str]] = {t.human_id: [] for t in self.tasks}
        for e in self.edges:
            if e.kind == DependencyKind.DEPENDS_ON and not e.is_self_reference and e.from_task in deps:
                deps[e.from_task].append(e.to_task)
        return deps

    def dependents(self) -> Dict[str, List[str]]:
        """task -> tasks depending on it (reverse of dependencies())."""
        rev: Dict[str, List[str]] = {t.human_id: [] for t in self.tasks}
        for e in self.edges:
            if e.kind == DependencyKind.DEPENDS_ON and not e.is_self_reference and e.to_task in rev:
                rev[e.to_task].append(e.from_task)
        return rev

    def scoped(self, project_ref: str) -> "ProjectGraph":
        tasks = [t for t in self.tasks if t.in_project(project_ref)]
        keep = {t.human_id for t in tasks}
        edges = [e for e in self.edges if e.from_task in keep and e.to_task in keep]
        return ProjectGraph(tasks=tasks, edges=edges)


class ConflictKind(str, Enum):
    MISSING_DATES = "missing-dates"
    DEPENDENCY_CYCLE = "dependency-cycle"
    RESOURCE_OVERLAP = "resource-overlap"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


CONFLICT_SEVERITY: Dict[ConflictKind, Severity] = {
    ConflictKind.MISSING_DATES: Severity.MEDIUM,
    ConflictKind.DEPENDENCY_CYCLE: Severity.HIGH,
    ConflictKind.RESOURCE_OVERLAP: Severity.MEDIUM,
}


class Conflict(BaseModel):
    kind: ConflictKind
    severity: Severity
    affected_tasks: List[str]
    description: str
    assignee_id: Optional[str] = None


class Timeline(BaseModel):
    start: datetime
    end: datetime
    duration_days: int


class TaskMetrics(BaseModel):
    human_id: str
    summary: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    duration_days: float
    slack_days: float
    earliest_start: datetime
    earliest_finish: datetime
    latest_start: datetime
    latest_finish: datetime
    is_critical: bool = False


class CriticalPathResult(BaseModel):
    ordered_critical_tasks: List[str] = []
    total_duration_days: float = 0.0
    per_task_metrics: List[TaskMetrics] = []


class GanttMetadata(BaseModel):
    generated_at: datetime
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int


class SkippedItem(BaseModel):
    item_ref: Optional[str] = None
    reason: str


class ScheduleReport(BaseModel):
    tasks: List[Task]
    edges: List[DependencyEdge]
    timeline: Timeline
    conflicts: List[Conflict]
    critical_path: CriticalPathResult
    critical_paths: Dict[str, CriticalPathResult] = {}
    metadata: GanttMetadata
    skipped: List[SkippedItem] = []


class TimelineFilter(BaseModel):
    project_ids: List[str] = []
    assignee_ids: List[str] = []
    state_names: List[str] = []
    priority_names: List[str] = []
    type_names: List[str] = []
    created_after: Optional[str] = None
    created_before: Optional[str] = None
    include_completed: bool = True
    query: Optional[str] = Field(default=None, description="Extra YouTrack query syntax")
