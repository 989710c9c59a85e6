"""Per-level navigation graph of area centres and doors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

from egress.sim.contracts import Area, Door, Level
from egress.sim.geometry import Vec3, floor_point

logger = logging.getLogger(__name__)

DEFAULT_AREA_SIZE = 2.0


@dataclass(frozen=True)
class NavNode:
    position: Vec3
    area_index: int
    is_door: bool = False
    is_exit: bool = False


@dataclass(frozen=True)
class NavGraph:
    """Undirected graph; derived from a level and never mutated."""

    nodes: tuple[NavNode, ...] = ()
    edges: Mapping[int, frozenset[int]] = field(default_factory=dict)
    area_nodes: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))
        object.__setattr__(self, "area_nodes", MappingProxyType(dict(self.area_nodes)))

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def neighbors(self, node_index: int) -> frozenset[int]:
        return self.edges.get(node_index, frozenset())

    def area_node_index(self, area_index: int) -> int | None:
        return self.area_nodes.get(area_index)

    def edge_pairs(self) -> Iterator[tuple[int, int]]:
        for node_index in sorted(self.edges):
            for neighbor in sorted(self.edges[node_index]):
                yield node_index, neighbor


@dataclass
class GraphDiagnostics:
    skipped_areas: list[str] = field(default_factory=list)
    unresolved_connections: list[tuple[str, str]] = field(default_factory=list)
    ambiguous_connections: list[tuple[str, list[str]]] = field(default_factory=list)


def build_graph(level: Level) -> NavGraph:
    graph, diagnostics = build_graph_with_diagnostics(level)
    if diagnostics.skipped_areas:
        logger.info(
            "Level %r: %d area(s) without position left out of the graph",
            level.level_name,
            len(diagnostics.skipped_areas),
        )
    if diagnostics.unresolved_connections:
        logger.info(
            "Level %r: %d door connection(s) could not be resolved",
            level.level_name,
            len(diagnostics.unresolved_connections),
        )
    return graph


def build_graph_with_diagnostics(level: Level) -> tuple[NavGraph, GraphDiagnostics]:
    diagnostics = GraphDiagnostics()
    nodes: list[NavNode] = []
    edges: dict[int, set[int]] = {}
    area_nodes: dict[int, int] = {}

    # Area centres come first so that, with every area positioned, the node
    # index of an area equals its index in the level.
    for area_index, area in enumerate(level.areas):
        if area.position is None:
            diagnostics.skipped_areas.append(area.name)
            logger.debug("Area %r has no position; skipped", area.name)
            continue
        area_nodes[area_index] = len(nodes)
        nodes.append(
            NavNode(
                position=floor_point(
                    area.position[0], level.elevation, area.position[1]
                ),
                area_index=area_index,
            )
        )

    for area_index, area in enumerate(level.areas):
        area_node = area_nodes.get(area_index)
        if area_node is None:
            continue
        for door_index, door in enumerate(area.doors):
            door_node = len(nodes)
            nodes.append(
                NavNode(
                    position=door_position(level, area, door_index),
                    area_index=area_index,
                    is_door=True,
                    is_exit=door.is_exit,
                )
            )
            _connect(edges, door_node, area_node)

            if door.is_exit or not door.connects_to:
                continue
            target_index = _match_area(level, door.connects_to, diagnostics)
            target_node = (
                area_nodes.get(target_index) if target_index is not None else None
            )
            if target_node is None:
                diagnostics.unresolved_connections.append(
                    (area.name, door.connects_to)
                )
                logger.debug(
                    "Door %d of %r: connectsTo %r not resolved",
                    door_index,
                    area.name,
                    door.connects_to,
                )
                continue
            if target_index == area_index:
                continue
            _connect(edges, door_node, target_node)

    graph = NavGraph(
        nodes=tuple(nodes),
        edges={index: frozenset(neighbors) for index, neighbors in edges.items()},
        area_nodes=area_nodes,
    )
    return graph, diagnostics


def door_position(level: Level, area: Area, door_index: int) -> Vec3:
    """Door position on the level, synthesised on the area's far edge if absent."""
    door: Door = area.doors[door_index]
    if door.position is not None:
        return floor_point(door.position[0], level.elevation, door.position[1])
    if area.position is None:
        raise ValueError(f"Area {area.name} has no position to place doors on.")
    width = area.width or DEFAULT_AREA_SIZE
    length = area.length or DEFAULT_AREA_SIZE
    offset = (door_index + 1) / (len(area.doors) + 1)
    return floor_point(
        area.position[0] + (width / 2) * (offset * 2 - 1),
        level.elevation,
        area.position[1] + length / 2,
    )


def resolve_connection(level: Level, connects_to: str) -> int | None:
    """Index of the first area whose name contains ``connects_to`` (any case)."""
    return _match_area(level, connects_to, GraphDiagnostics())


def _match_area(
    level: Level, connects_to: str, diagnostics: GraphDiagnostics
) -> int | None:
    needle = connects_to.lower()
    matches = [
        index for index, area in enumerate(level.areas) if needle in area.name.lower()
    ]
    if not matches:
        return None
    if len(matches) > 1:
        names = [level.areas[index].name for index in matches]
        diagnostics.ambiguous_connections.append((connects_to, names))
        logger.warning(
            "connectsTo %r matches %d areas %s; using %r",
            connects_to,
            len(matches),
            names,
            names[0],
        )
    return matches[0]


def _connect(edges: dict[int, set[int]], a: int, b: int) -> None:
    edges.setdefault(a, set()).add(b)
    edges.setdefault(b, set()).add(a)
