"""Core data contracts for buildings, agents and tick payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from egress.sim.geometry import Vec3

Point2 = tuple[float, float]


class BuildingModel(BaseModel):
    """Base for building descriptions handed over by plan ingestion.

    Accepts the camelCase keys produced upstream as well as snake_case, and
    ignores keys the core has no use for (installations, rendering hints).
    """

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Door(BuildingModel):
    width: float = 0.9
    position: Point2 | None = None
    connects_to: str | None = None
    is_exit: bool = False


class Stair(BuildingModel):
    name: str
    position: Point2
    width: float | None = None
    connects_to_level: str | None = None


class Area(BuildingModel):
    name: str
    surface: float | None = None
    width: float | None = None
    length: float | None = None
    position: Point2 | None = None
    doors: list[Door] = Field(default_factory=list)


class Level(BuildingModel):
    level_name: str = ""
    level_height: float = 3.0
    elevation: float = 0.0
    areas: list[Area] = Field(default_factory=list)
    stairs: list[Stair] = Field(default_factory=list)


class ProjectInfo(BuildingModel):
    project_name: str
    author: str | None = None
    director: str | None = None
    date: str | None = None
    location: str | None = None


class Building(BuildingModel):
    project_info: ProjectInfo | None = None
    building_levels: list[Level] = Field(default_factory=list)

    def level(self, index: int) -> Level | None:
        if 0 <= index < len(self.building_levels):
            return self.building_levels[index]
        return None


class AgentProfile(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    speed: float = Field(gt=0)
    color: str = "#3B82F6"
    description: str | None = None


class Agent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    profile_id: str
    position: Vec3
    level_index: int = 0
    target_position: Vec3 | None = None
    path: tuple[Vec3, ...] = ()
    path_history: tuple[Vec3, ...] = ()
    is_evacuating: bool = False
    evacuated: bool = False
    evacuation_time: float | None = None

    @property
    def status(self) -> str:
        if self.evacuated:
            return "evacuated"
        if self.is_evacuating:
            return "evacuating"
        return "idle"


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    payload: dict[str, Any] = Field(default_factory=dict)


class AgentFrame(BaseModel):
    """What a renderer needs to draw one agent for one tick."""

    model_config = ConfigDict(extra="forbid")

    id: str
    profile_id: str
    level_index: int
    position: Vec3
    target_position: Vec3 | None = None
    waypoints_remaining: int = 0
    status: str = "idle"
    evacuation_time: float | None = None

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentFrame":
        return cls(
            id=agent.id,
            profile_id=agent.profile_id,
            level_index=agent.level_index,
            position=agent.position,
            target_position=agent.target_position,
            waypoints_remaining=len(agent.path),
            status=agent.status,
            evacuation_time=agent.evacuation_time,
        )


class ProfileStats(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total: int = 0
    evacuated: int = 0


class EvacuationStats(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total: int = 0
    evacuated: int = 0
    evacuating: int = 0
    idle: int = 0
    by_profile: dict[str, ProfileStats] = Field(default_factory=dict)
    mean_evacuation_time: float | None = None
    max_evacuation_time: float | None = None

    @property
    def percent_complete(self) -> int:
        if self.total == 0:
            return 0
        return round(self.evacuated * 100 / self.total)


class TickPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick: int
    elapsed: float
    agents: list[AgentFrame] = Field(default_factory=list)
    stats: EvacuationStats = Field(default_factory=EvacuationStats)
    events: list[Event] | None = None
