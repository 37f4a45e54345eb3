import logging
from typing import Dict, Iterable, List, Optional, Tuple

from youtrack_timeline.app.models import (
    DependencyEdge,
    DependencyKind,
    LinkDirection,
    ProjectGraph,
    RawLink,
    Task,
)

logger = logging.getLogger(__name__)

# Kinds stored reversed as their canonical counterpart
_INVERSE = {
    DependencyKind.BLOCKS: DependencyKind.DEPENDS_ON,
    DependencyKind.PARENT_OF: DependencyKind.SUBTASK_OF,
}


def classify_link(link_type: str, direction: LinkDirection) -> DependencyKind:
    """Map a YouTrack link type name + direction (as seen from the source issue) to a kind."""
    name = (link_type or "").lower()
    outward = LinkDirection(direction) == LinkDirection.OUTWARD
    if "depend" in name:
        return DependencyKind.DEPENDS_ON if outward else DependencyKind.BLOCKS
    if "block" in name:
        return DependencyKind.BLOCKS if outward else DependencyKind.DEPENDS_ON
    if "subtask" in name or "parent" in name:
        return DependencyKind.PARENT_OF if outward else DependencyKind.SUBTASK_OF
    return DependencyKind.RELATES_TO


def normalize_link(link: RawLink) -> DependencyEdge:
    """Turn a raw link into a canonical edge: blocks/parent-of are stored reversed."""
    kind = classify_link(link.link_type, link.direction)
    if kind in _INVERSE:
        return DependencyEdge(from_task=link.target, to_task=link.source, kind=_INVERSE[kind], link_type=link.link_type)
    return DependencyEdge(from_task=link.source, to_task=link.target, kind=kind, link_type=link.link_type)


def flatten_issue_links(source: str, payload: Optional[List[dict]]) -> List[RawLink]:
    """Flatten a YouTrack `/issues/{id}/links` response into RawLinks from `source`."""
    out: List[RawLink] = []
    for link in payload or []:
        link_type = (link.get("linkType") or {})
        type_name = link_type.get("name") or link_type.get("localizedName") or ""
        direction = (link.get("direction") or "OUTWARD").upper()
        for target in (link.get("issues") or []):
            target_key = target.get("idReadable")
            if not target_key:
                continue
            out.append(RawLink(source=source, target=target_key, link_type=type_name, direction=direction))
    return out


def assemble_edges(tasks: List[Task], links: Iterable[RawLink]) -> List[DependencyEdge]:
    """Normalize raw links into edges among `tasks`.

    Edges touching an issue outside the task set are dropped; self edges are
    kept (the cycle check reports them). The same relation reported from both
    ends collapses into one edge.
    """
    present = {t.human_id for t in tasks}
    seen = set()
    edges: List[DependencyEdge] = []
    for link in links:
        edge = normalize_link(link)
        if edge.from_task not in present or edge.to_task not in present:
            logger.debug("Dropping out-of-scope link %s -> %s (%s)", edge.from_task, edge.to_task, edge.kind.value)
            continue
        key: Tuple[str, str, DependencyKind] = (edge.from_task, edge.to_task, edge.kind)
        if key in seen:
            continue
        seen.add(key)
        edges.append(edge)
    return edges


def build_project_graph(tasks: List[Task], links: Iterable[RawLink]) -> ProjectGraph:
    """Build the per-request dependency graph (tasks + normalized edges)."""
    return ProjectGraph(tasks=list(tasks), edges=assemble_edges(tasks, links))


def dependency_summary(graph: ProjectGraph) -> Dict[str, dict]:
    """Per-task node view: assignee and direct depends-on targets, as the agent tools report it."""
    deps = graph.dependencies()
    return {
        t.human_id: {
            "assignee": t.assignee_name,
            "dependencies": deps.get(t.human_id, []),
        }
        for t in graph.tasks
    }
