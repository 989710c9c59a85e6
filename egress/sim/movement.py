"""Per-tick motion of agents along their assigned paths."""

from __future__ import annotations

from egress.sim.contracts import Agent, AgentProfile
from egress.sim.geometry import distance3, lerp, path_length
from egress.sim.profiles import ProfileCatalog


def advance(agent: Agent, dt: float, profiles: ProfileCatalog) -> Agent:
    """Move an agent for ``dt`` seconds; no-ops return the agent unchanged.

    Reaching a waypoint ends the agent's movement for the tick: the distance
    left over is not carried into the next segment.
    """
    if not agent.path or agent.evacuated:
        return agent

    profile = profiles.get(agent.profile_id)
    if profile is None:
        return agent

    distance_to_move = profile.speed * dt
    target = agent.path[0]
    distance_to_target = distance3(agent.position, target)

    if distance_to_target <= distance_to_move:
        remaining = agent.path[1:]
        return agent.model_copy(
            update={
                "position": target,
                "path": remaining,
                "path_history": agent.path_history + (target,),
                "evacuated": not remaining,
            }
        )

    ratio = distance_to_move / distance_to_target
    return agent.model_copy(
        update={"position": lerp(agent.position, target, ratio)}
    )


def traversal_time(agent: Agent, profile: AgentProfile) -> float:
    """Seconds needed to walk what is left of the agent's path."""
    if not agent.path:
        return 0.0
    points = (agent.position, *agent.path)
    return path_length(points) / profile.speed
