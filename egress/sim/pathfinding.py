"""Graph-based pathfinding (A*) with a straight-line fallback."""

from __future__ import annotations

from dataclasses import dataclass
import heapq
import logging

from egress.sim.contracts import Building
from egress.sim.geometry import (
    FALLBACK_STEPS,
    WAIST_HEIGHT,
    Vec3,
    distance3,
    lerp_path,
)
from egress.sim.nav_graph import NavGraph, build_graph

logger = logging.getLogger(__name__)

LEVEL_TOLERANCE = 1.5


@dataclass(frozen=True)
class Route:
    waypoints: list[Vec3]
    used_fallback: bool = False
    reason: str | None = None


class PathFinder:
    def __init__(self, graph: NavGraph) -> None:
        self._graph = graph

    def nearest_node(self, position: Vec3) -> int:
        """Closest node by brute force; the lowest index wins ties."""
        best_index = 0
        best_distance = float("inf")
        for index, node in enumerate(self._graph.nodes):
            dist = distance3(position, node.position)
            if dist < best_distance:
                best_distance = dist
                best_index = index
        return best_index

    def search(self, start: int, goal: int) -> list[int]:
        """Node indices from start to goal inclusive, or [] when unreachable.

        The open heap is ordered by (f, node index), so equal f scores are
        resolved in favour of the lowest node index.
        """
        nodes = self._graph.nodes
        open_set: list[tuple[float, int]] = []
        heapq.heappush(open_set, (self._heuristic(start, goal), start))
        came_from: dict[int, int] = {}
        g_score: dict[int, float] = {start: 0.0}
        closed: set[int] = set()

        while open_set:
            _, current = heapq.heappop(open_set)
            if current in closed:
                continue
            if current == goal:
                return self._reconstruct_path(came_from, current)
            closed.add(current)

            for neighbor in sorted(self._graph.neighbors(current)):
                tentative = g_score[current] + distance3(
                    nodes[current].position, nodes[neighbor].position
                )
                if tentative < g_score.get(neighbor, float("inf")):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative
                    closed.discard(neighbor)
                    f_score = tentative + self._heuristic(neighbor, goal)
                    heapq.heappush(open_set, (f_score, neighbor))

        return []

    def _heuristic(self, a: int, b: int) -> float:
        nodes = self._graph.nodes
        return distance3(nodes[a].position, nodes[b].position)

    @staticmethod
    def _reconstruct_path(came_from: dict[int, int], current: int) -> list[int]:
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path


def find_level_index(building: Building, y: float) -> int | None:
    for index, level in enumerate(building.building_levels):
        if abs(y - level.elevation - WAIST_HEIGHT) < LEVEL_TOLERANCE:
            return index
    return None


def plan_route(
    start: Vec3,
    goal: Vec3,
    building: Building,
    graph: NavGraph | None = None,
) -> Route:
    level_index = find_level_index(building, start[1])
    if level_index is None:
        return _fallback(start, goal, "no-level")

    if graph is None:
        graph = build_graph(building.building_levels[level_index])
    if graph.is_empty:
        return _fallback(start, goal, "empty-graph")

    finder = PathFinder(graph)
    start_node = finder.nearest_node(start)
    goal_node = finder.nearest_node(goal)
    node_path = finder.search(start_node, goal_node)
    if not node_path:
        return _fallback(start, goal, "no-path")

    waypoints = [tuple(start)]
    waypoints.extend(graph.nodes[index].position for index in node_path)
    waypoints.append(tuple(goal))
    return Route(waypoints=waypoints)


def find_path(
    start: Vec3,
    goal: Vec3,
    building: Building,
    graph: NavGraph | None = None,
) -> list[Vec3]:
    """Waypoints from start to goal through doors; never empty, never raises."""
    return plan_route(start, goal, building, graph).waypoints


def _fallback(start: Vec3, goal: Vec3, reason: str) -> Route:
    logger.debug("Straight-line fallback from %s to %s (%s)", start, goal, reason)
    return Route(
        waypoints=lerp_path(tuple(start), tuple(goal), FALLBACK_STEPS),
        used_fallback=True,
        reason=reason,
    )
