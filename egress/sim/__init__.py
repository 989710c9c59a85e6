"""Navigation graph, pathfinding and evacuation simulation core."""

from egress.sim.building_loader import load_building
from egress.sim.contracts import (
    Agent,
    AgentFrame,
    AgentProfile,
    Area,
    Building,
    Door,
    EvacuationStats,
    Event,
    Level,
    ProfileStats,
    Stair,
    TickPayload,
)
from egress.sim.exits import find_nearest_exit
from egress.sim.geometry import distance3, lerp_path
from egress.sim.movement import advance
from egress.sim.nav_graph import NavGraph, NavNode, build_graph
from egress.sim.pathfinding import PathFinder, Route, find_path, plan_route
from egress.sim.profiles import (
    DEFAULT_AGENT_PROFILES,
    ProfileCatalog,
    default_catalog,
)
from egress.sim.simulation import (
    EvacuationReport,
    EvacuationSimulation,
    SimulationConfig,
)

__all__ = [
    "Agent",
    "AgentFrame",
    "AgentProfile",
    "Area",
    "Building",
    "DEFAULT_AGENT_PROFILES",
    "Door",
    "EvacuationReport",
    "EvacuationSimulation",
    "EvacuationStats",
    "Event",
    "Level",
    "NavGraph",
    "NavNode",
    "PathFinder",
    "ProfileCatalog",
    "ProfileStats",
    "Route",
    "SimulationConfig",
    "Stair",
    "TickPayload",
    "advance",
    "build_graph",
    "default_catalog",
    "distance3",
    "find_nearest_exit",
    "find_path",
    "lerp_path",
    "load_building",
    "plan_route",
]
