"""Nearest-exit lookup for agents."""

from __future__ import annotations

from egress.sim.contracts import Agent, Building, Level
from egress.sim.geometry import Vec3, distance3, floor_point


def exit_positions(level: Level) -> list[Vec3]:
    """Targets for every exit door of a level.

    Exits are area-level targets: the position is the owning area's centre
    at waist height, not the door's own placement.
    """
    positions: list[Vec3] = []
    for area in level.areas:
        if area.position is None:
            continue
        for door in area.doors:
            if door.is_exit:
                positions.append(
                    floor_point(area.position[0], level.elevation, area.position[1])
                )
    return positions


def find_nearest_exit(agent: Agent, building: Building) -> Vec3 | None:
    level = building.level(agent.level_index)
    if level is None:
        return None
    nearest: Vec3 | None = None
    min_distance = float("inf")
    for position in exit_positions(level):
        dist = distance3(agent.position, position)
        if dist < min_distance:
            min_distance = dist
            nearest = position
    return nearest
