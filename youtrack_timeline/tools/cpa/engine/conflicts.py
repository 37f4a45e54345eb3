import logging
from typing import Dict, Iterable, List, Optional

from youtrack_timeline.app.models import (
    CONFLICT_SEVERITY,
    Conflict,
    ConflictKind,
    DependencyKind,
    ProjectGraph,
    Task,
)

logger = logging.getLogger(__name__)


def _conflict(kind: ConflictKind, affected: List[str], description: str, assignee_id: Optional[str] = None) -> Conflict:
    return Conflict(
        kind=kind,
        severity=CONFLICT_SEVERITY[kind],
        affected_tasks=affected,
        description=description,
        assignee_id=assignee_id,
    )


def find_missing_dates(tasks: List[Task]) -> List[Conflict]:
    """One conflict listing every task lacking a start or a due date."""
    missing = [t.human_id for t in tasks if t.start_date is None or t.due_date is None]
    if not missing:
        return []
    return [_conflict(
        ConflictKind.MISSING_DATES,
        missing,
        f"{len(missing)} tasks are missing start or due dates: {', '.join(missing)}",
    )]


def find_cycles(adjacency: Dict[str, List[str]]) -> List[List[str]]:
    """Return dependency cycles as `[n0, n1, ..., n0]` paths.

    Depth-first over `adjacency` in key order, with an explicit stack so deep
    chains do not hit the recursion limit. Reaching a node that is on the
    current path closes a cycle; fully explored nodes are not re-entered.
    """
    cycles: List[List[str]] = []
    visited = set()
    on_path = set()
    path: List[str] = []

    for root in adjacency:
        if root in visited:
            continue
        visited.add(root)
        on_path.add(root)
        path.append(root)
        stack = [(root, iter(adjacency.get(root, [])))]
        while stack:
            node, neighbors = stack[-1]
            advanced = False
            for nxt in neighbors:
                if nxt in on_path:
                    cycles.append(path[path.index(nxt):] + [nxt])
                    continue
                if nxt in visited or nxt not in adjacency:
                    continue
                visited.add(nxt)
                on_path.add(nxt)
                path.append(nxt)
                stack.append((nxt, iter(adjacency.get(nxt, []))))
                advanced = True
                break
            if not advanced:
                stack.pop()
                on_path.discard(node)
                path.pop()
    return cycles


def find_dependency_cycles(
    graph: ProjectGraph,
    kinds: Iterable[DependencyKind] = (DependencyKind.DEPENDS_ON,),
) -> List[Conflict]:
    """One conflict per cycle. Only depends-on edges by default; pass `kinds` to include other link kinds."""
    out: List[Conflict] = []
    for cycle in find_cycles(graph.adjacency(kinds)):
        out.append(_conflict(
            ConflictKind.DEPENDENCY_CYCLE,
            cycle,
            f"Circular dependency detected: {' → '.join(cycle)}",
        ))
    return out


def dates_overlap(start1, end1, start2, end2) -> bool:
    """Closed-interval overlap; touching endpoints count."""
    return start1 <= end2 and start2 <= end1


def find_resource_overlaps(tasks: List[Task]) -> List[Conflict]:
    """Pairs of same-assignee tasks whose [start, due] windows overlap.

    Compares every pair within an assignee's group, so cost grows with the
    square of the group size.
    """
    by_assignee: Dict[str, List[Task]] = {}
    for t in tasks:
        if t.assignee_id and t.start_date is not None and t.due_date is not None:
            by_assignee.setdefault(t.assignee_id, []).append(t)

    out: List[Conflict] = []
    for assignee_id, group in by_assignee.items():
        for i in range(len(group)):
            for j in range(i + 1, len(group)):
                a, b = group[i], group[j]
                if dates_overlap(a.start_date, a.due_date, b.start_date, b.due_date):
                    who = a.assignee_name or assignee_id
                    out.append(_conflict(
                        ConflictKind.RESOURCE_OVERLAP,
                        [a.human_id, b.human_id],
                        f"Tasks {a.human_id} and {b.human_id} overlap for assignee {who}",
                        assignee_id=assignee_id,
                    ))
    return out


def detect_conflicts(graph: ProjectGraph) -> List[Conflict]:
    """Run all checks. A failing check is logged and does not suppress the others."""
    conflicts: List[Conflict] = []
    checks = (
        ("missing dates", lambda: find_missing_dates(graph.tasks)),
        ("dependency cycles", lambda: find_dependency_cycles(graph)),
        ("resource overlap", lambda: find_resource_overlaps(graph.tasks)),
    )
    for name, check in checks:
        try:
            conflicts.extend(check())
        except Exception:
            logger.exception("Conflict check '%s' failed", name)
    return conflicts
