"""Structural connectivity of a layout.

Two modules are joined when they are loosely aligned (their x or y origins
differ by less than the adjacency threshold) or when both overlap the same
corridor. The graph is rebuilt from scratch on every call.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Sequence, Set

from .models import ConnectivityReport, Corridor, Module, ValidationSettings

DISCONNECTED_WARNING = "Some modules are not connected to the main base"


def is_adjacent(a: Module, b: Module, threshold: float = 20.0) -> bool:
    return abs(a.x - b.x) < threshold or abs(a.y - b.y) < threshold


def intersects_corridor(module: Module, corridor: Corridor) -> bool:
    # Shared edges count as overlap.
    return not (
        module.x + module.width < corridor.x
        or module.x > corridor.x + corridor.width
        or module.y + module.height < corridor.y
        or module.y > corridor.y + corridor.height
    )


def modules_in_corridor(modules: Sequence[Module], corridor: Corridor) -> List[Module]:
    return [m for m in modules if intersects_corridor(m, corridor)]


def _link(graph: Dict[str, List[str]], a: str, b: str) -> None:
    if b not in graph[a]:
        graph[a].append(b)
    if a not in graph[b]:
        graph[b].append(a)


def build_graph(
    modules: Sequence[Module],
    corridors: Sequence[Corridor],
    threshold: float = 20.0,
) -> Dict[str, List[str]]:
    graph: Dict[str, List[str]] = {m.id: [] for m in modules}

    for corridor in corridors:
        members = modules_in_corridor(modules, corridor)
        if len(members) < 2:
            continue
        for i, first in enumerate(members):
            for second in members[i + 1:]:
                _link(graph, first.id, second.id)

    for i, first in enumerate(modules):
        for second in modules[i + 1:]:
            if is_adjacent(first, second, threshold):
                _link(graph, first.id, second.id)

    return graph


def reachable_from(graph: Dict[str, List[str]], start: str) -> Set[str]:
    seen: Set[str] = set()
    queue: deque[str] = deque([start])
    while queue:
        node = queue.popleft()
        if node in seen:
            continue
        seen.add(node)
        for nbr in graph.get(node, []):
            if nbr not in seen:
                queue.append(nbr)
    return seen


def analyze(
    modules: Sequence[Module],
    corridors: Sequence[Corridor],
    settings: ValidationSettings | None = None,
) -> ConnectivityReport:
    """Check that every module is reachable from the first placed one."""

    settings = settings or ValidationSettings()
    if len(modules) <= 1:
        return ConnectivityReport(connected=True)

    graph = build_graph(modules, corridors, settings.adjacency_threshold)
    visited = reachable_from(graph, modules[0].id)
    if len(visited) == len(modules):
        return ConnectivityReport(connected=True)

    unreachable = [m.id for m in modules if m.id not in visited]
    return ConnectivityReport(connected=False, unreachable=unreachable, warning=DISCONNECTED_WARNING)
