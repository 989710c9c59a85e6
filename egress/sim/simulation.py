"""Evacuation driver: owns the agents and steps them on a fixed tick."""

from __future__ import annotations

from dataclasses import dataclass
import itertools
import logging
import random
from typing import Iterator

from egress.sim.contracts import (
    Agent,
    AgentFrame,
    Building,
    Event,
    EvacuationStats,
    ProfileStats,
    TickPayload,
)
from egress.sim.exits import find_nearest_exit
from egress.sim.geometry import Vec3, floor_point
from egress.sim.movement import advance
from egress.sim.nav_graph import DEFAULT_AREA_SIZE, NavGraph, build_graph
from egress.sim.pathfinding import plan_route
from egress.sim.profiles import DEFAULT_PROFILE_ID, ProfileCatalog, default_catalog

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.05
DEFAULT_SPAWN_MARGIN = 0.5


@dataclass(frozen=True)
class SimulationConfig:
    tick_seconds: float = DEFAULT_TICK_SECONDS
    spawn_margin: float = DEFAULT_SPAWN_MARGIN
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.tick_seconds <= 0:
            raise ValueError(f"tick_seconds must be positive, got {self.tick_seconds}.")


@dataclass(frozen=True)
class EvacuationReport:
    routed: int = 0
    fallback_routes: int = 0
    without_exit: int = 0
    graphs_built: int = 0


class EvacuationSimulation:
    """Explicit simulation state; nothing here is shared between instances.

    Stepping is cooperative: the caller drives ``step`` (or iterates ``run``)
    from its own timer, and route assignment in ``start_evacuation`` never
    interleaves with a tick.
    """

    def __init__(
        self,
        building: Building,
        *,
        profiles: ProfileCatalog | None = None,
        config: SimulationConfig | None = None,
    ) -> None:
        self.building = building
        self.profiles = profiles or default_catalog()
        self.config = config or SimulationConfig()
        self.agents: dict[str, Agent] = {}
        self.tick = 0
        self.elapsed = 0.0
        self._rng = random.Random(self.config.seed)
        self._ids = itertools.count(1)
        self._running = False
        self._pending_events: list[Event] = []

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_complete(self) -> bool:
        return all(agent.evacuated for agent in self.agents.values())

    def random_position(self, level_index: int) -> Vec3 | None:
        level = self.building.level(level_index)
        if level is None:
            return None
        areas = [area for area in level.areas if area.position is not None]
        if not areas:
            return None
        area = self._rng.choice(areas)
        margin = self.config.spawn_margin
        width = max(0.0, (area.width or DEFAULT_AREA_SIZE) - margin * 2)
        length = max(0.0, (area.length or DEFAULT_AREA_SIZE) - margin * 2)
        x = area.position[0] + (self._rng.random() - 0.5) * width
        z = area.position[1] + (self._rng.random() - 0.5) * length
        return floor_point(x, level.elevation, z)

    def add_agent(
        self,
        level_index: int,
        profile_id: str = DEFAULT_PROFILE_ID,
        *,
        position: Vec3 | None = None,
        agent_id: str | None = None,
    ) -> Agent | None:
        if profile_id not in self.profiles:
            raise ValueError(f"Unknown agent profile {profile_id}.")
        if self.building.level(level_index) is None:
            raise ValueError(f"Level index {level_index} is not defined.")
        if position is None:
            position = self.random_position(level_index)
        if position is None:
            logger.warning("Level %d has no positioned area to spawn in", level_index)
            return None
        agent_id = agent_id or f"agent-{next(self._ids)}"
        if agent_id in self.agents:
            raise ValueError(f"Agent id {agent_id} already exists.")
        agent = Agent(
            id=agent_id,
            profile_id=profile_id,
            position=position,
            path_history=(position,),
            level_index=level_index,
        )
        self.agents[agent_id] = agent
        logger.debug("Added %s (%s) on level %d", agent_id, profile_id, level_index)
        return agent

    def clear_agents(self) -> None:
        self.agents.clear()
        self._pending_events.clear()
        self._running = False

    def start_evacuation(self) -> EvacuationReport:
        pending = [agent for agent in self.agents.values() if not agent.evacuated]
        graphs: dict[int, NavGraph] = {}
        for level_index in sorted({agent.level_index for agent in pending}):
            level = self.building.level(level_index)
            if level is not None:
                graphs[level_index] = build_graph(level)

        updated: dict[str, Agent] = {}
        events: list[Event] = []
        routed = fallbacks = without_exit = 0
        for agent in pending:
            exit_position = find_nearest_exit(agent, self.building)
            graph = graphs.get(agent.level_index)
            if exit_position is None or graph is None:
                logger.warning(
                    "No exit found for %s on level %d", agent.id, agent.level_index
                )
                without_exit += 1
                events.append(
                    Event(
                        kind="NO_EXIT",
                        payload={"agent_id": agent.id, "level": agent.level_index},
                    )
                )
                continue
            route = plan_route(agent.position, exit_position, self.building, graph)
            if route.used_fallback:
                fallbacks += 1
                logger.info(
                    "Agent %s routed in a straight line (%s)", agent.id, route.reason
                )
            updated[agent.id] = agent.model_copy(
                update={
                    "is_evacuating": True,
                    "target_position": exit_position,
                    "path": tuple(route.waypoints),
                }
            )
            routed += 1
            events.append(
                Event(
                    kind="ROUTE_ASSIGNED",
                    payload={
                        "agent_id": agent.id,
                        "waypoints": len(route.waypoints),
                        "fallback": route.used_fallback,
                    },
                )
            )

        self.agents.update(updated)
        self._pending_events = events
        self.tick = 0
        self.elapsed = 0.0
        self._running = bool(updated) and not self.is_complete
        logger.info(
            "Evacuation started: %d routed, %d fallback, %d without exit",
            routed,
            fallbacks,
            without_exit,
        )
        return EvacuationReport(
            routed=routed,
            fallback_routes=fallbacks,
            without_exit=without_exit,
            graphs_built=len(graphs),
        )

    def pause(self) -> None:
        self._running = False

    def resume(self) -> None:
        if not self.is_complete:
            self._running = True

    def step(self, dt: float | None = None) -> TickPayload | None:
        if not self._running:
            return None
        dt = self.config.tick_seconds if dt is None else dt
        clock = self.elapsed + dt

        snapshot = dict(self.agents)
        events = self._pending_events
        self._pending_events = []
        for agent_id, agent in snapshot.items():
            moved = advance(agent, dt, self.profiles)
            if moved.evacuated and not agent.evacuated:
                moved = moved.model_copy(update={"evacuation_time": clock})
                events.append(
                    Event(
                        kind="EVACUATED",
                        payload={"agent_id": agent_id, "time": round(clock, 3)},
                    )
                )
            self.agents[agent_id] = moved

        self.tick += 1
        self.elapsed = clock
        if self.is_complete:
            self._running = False
            events.append(
                Event(
                    kind="EVACUATION_COMPLETE",
                    payload={"time": round(clock, 3), "agents": len(self.agents)},
                )
            )
        return TickPayload(
            tick=self.tick,
            elapsed=self.elapsed,
            agents=self.frames(),
            stats=self.stats(),
            events=events or None,
        )

    def run(self, max_ticks: int | None = None) -> Iterator[TickPayload]:
        step_count = 0
        while max_ticks is None or step_count < max_ticks:
            if not self._has_moving_agents():
                if self._running:
                    stranded = [
                        agent.id
                        for agent in self.agents.values()
                        if not agent.evacuated
                    ]
                    logger.warning(
                        "Stopping with %d agent(s) that cannot move: %s",
                        len(stranded),
                        ", ".join(stranded),
                    )
                    self._running = False
                return
            payload = self.step()
            if payload is None:
                return
            yield payload
            step_count += 1

    def frames(self) -> list[AgentFrame]:
        return [AgentFrame.from_agent(agent) for agent in self.agents.values()]

    def stats(self) -> EvacuationStats:
        by_profile: dict[str, ProfileStats] = {}
        times: list[float] = []
        evacuated = evacuating = idle = 0
        for agent in self.agents.values():
            profile_stats = by_profile.setdefault(agent.profile_id, ProfileStats())
            profile_stats.total += 1
            if agent.evacuated:
                evacuated += 1
                profile_stats.evacuated += 1
                if agent.evacuation_time is not None:
                    times.append(agent.evacuation_time)
            elif agent.is_evacuating:
                evacuating += 1
            else:
                idle += 1
        return EvacuationStats(
            total=len(self.agents),
            evacuated=evacuated,
            evacuating=evacuating,
            idle=idle,
            by_profile=by_profile,
            mean_evacuation_time=sum(times) / len(times) if times else None,
            max_evacuation_time=max(times) if times else None,
        )

    def _has_moving_agents(self) -> bool:
        return any(
            agent.path and not agent.evacuated for agent in self.agents.values()
        )
