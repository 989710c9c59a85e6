"""Application entry for recording an evacuation drill."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from egress.db.replay_log import append_tick_payload, create_run_folder, write_header
from egress.sim.building_loader import load_building
from egress.sim.contracts import EvacuationStats
from egress.sim.profiles import (
    DEFAULT_PROFILE_ID,
    ProfileCatalog,
    default_catalog,
    load_profile_catalog,
)
from egress.sim.simulation import (
    DEFAULT_TICK_SECONDS,
    EvacuationSimulation,
    SimulationConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_AGENT_COUNT = 10
DEFAULT_MAX_TICKS = 20 * 60 * 10
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class RunResult:
    run_dir: Path
    stats: EvacuationStats
    ticks: int


def run_evacuation(
    building_path: Path,
    base_dir: Path,
    *,
    agents: int = DEFAULT_AGENT_COUNT,
    level_index: int = 0,
    profile_id: str = DEFAULT_PROFILE_ID,
    profile_path: Path | None = None,
    ticks: int | None = None,
    tick_seconds: float | None = None,
    seed: int | None = None,
) -> RunResult:
    building = load_building(building_path)
    profiles = _resolve_profiles(profile_path)
    config = SimulationConfig(
        tick_seconds=_resolve_tick_seconds(tick_seconds),
        seed=_resolve_seed(seed),
    )
    simulation = EvacuationSimulation(building, profiles=profiles, config=config)
    for _ in range(agents):
        simulation.add_agent(level_index, profile_id)

    max_ticks = DEFAULT_MAX_TICKS if ticks is None else ticks
    run_dir, log_path = create_run_folder(base_dir)
    write_header(
        log_path,
        metadata={
            "run_id": run_dir.name,
            "building": str(building_path),
            "agents": len(simulation.agents),
            "level": level_index,
            "profile": profile_id,
            "tick_seconds": config.tick_seconds,
            "seed": config.seed,
            "max_ticks": max_ticks,
        },
    )

    report = simulation.start_evacuation()
    logger.info("Routes assigned: %s", report)
    tick_count = 0
    for payload in simulation.run(max_ticks=max_ticks):
        append_tick_payload(log_path, payload)
        tick_count += 1
    stats = simulation.stats()
    if not simulation.is_complete:
        logger.warning(
            "Run stopped after %d ticks with %d agent(s) still inside",
            tick_count,
            stats.total - stats.evacuated,
        )
    return RunResult(run_dir=run_dir, stats=stats, ticks=tick_count)


def resolve_log_level(log_level: str | None) -> str:
    return (log_level or os.getenv("EGRESS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


def _resolve_profiles(profile_path: Path | None) -> ProfileCatalog:
    if profile_path is None:
        return default_catalog()
    return load_profile_catalog(profile_path)


def _resolve_tick_seconds(tick_seconds: float | None) -> float:
    if tick_seconds is not None:
        return tick_seconds
    value = os.getenv("EGRESS_TICK_SECONDS")
    return float(value) if value else DEFAULT_TICK_SECONDS


def _resolve_seed(seed: int | None) -> int | None:
    if seed is not None:
        return seed
    value = os.getenv("EGRESS_SEED")
    return int(value) if value else None
