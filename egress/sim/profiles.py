"""Agent profile catalog (walking speeds per kind of occupant)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator

from egress.sim.contracts import AgentProfile

DEFAULT_PROFILE_ID = "adult-normal"

DEFAULT_AGENT_PROFILES: tuple[AgentProfile, ...] = (
    AgentProfile(
        id="adult-normal",
        name="Adult",
        speed=1.4,
        color="#3B82F6",
        description="Adult without reduced mobility",
    ),
    AgentProfile(
        id="elderly",
        name="Elderly",
        speed=0.8,
        color="#F59E0B",
        description="Older adult with reduced mobility",
    ),
    AgentProfile(
        id="child",
        name="Child",
        speed=1.0,
        color="#22C55E",
        description="Child or teenager",
    ),
    AgentProfile(
        id="disabled",
        name="Person with disability",
        speed=0.5,
        color="#EF4444",
        description="Wheelchair user or very reduced mobility",
    ),
    AgentProfile(
        id="athletic",
        name="Athletic",
        speed=2.0,
        color="#8B5CF6",
        description="Young, athletic person",
    ),
)


class ProfileCatalog:
    """Fixed lookup of profiles by id, validated when built."""

    def __init__(self, profiles: Iterable[AgentProfile]) -> None:
        self._profiles: dict[str, AgentProfile] = {}
        for profile in profiles:
            if profile.id in self._profiles:
                raise ValueError(f"Duplicate agent profile id {profile.id}.")
            self._profiles[profile.id] = profile

    def get(self, profile_id: str) -> AgentProfile | None:
        return self._profiles.get(profile_id)

    def ids(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, profile_id: object) -> bool:
        return profile_id in self._profiles

    def __iter__(self) -> Iterator[AgentProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


def default_catalog() -> ProfileCatalog:
    return ProfileCatalog(DEFAULT_AGENT_PROFILES)


def load_profile_catalog(path: Path) -> ProfileCatalog:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing profile catalog file: {path}") from exc
    data = json.loads(text)
    raw_profiles = data.get("profiles", []) if isinstance(data, dict) else data
    return ProfileCatalog(
        AgentProfile.model_validate(raw) for raw in raw_profiles
    )
