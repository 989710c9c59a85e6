"""Rich rendering for evacuation tick payloads."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from egress.sim.contracts import EvacuationStats, TickPayload

STATUS_STYLES = {
    "idle": "dim",
    "evacuating": "yellow",
    "evacuated": "green",
}


def render_tick(
    payload: TickPayload, *, max_agents: int = 15, max_events: int = 5
) -> RenderableType:
    header = Text(
        f"Tick {payload.tick} · {payload.elapsed:.2f}s", style="bold"
    )
    agents = _render_agents(payload, max_agents=max_agents)
    events = _render_events(payload, max_events=max_events)
    progress = render_stats(payload.stats)

    left = Group(header, agents)
    right = Group(progress, events)
    return Columns([Panel(left, title="Agents"), Panel(right, title="Progress")])


def render_stats(stats: EvacuationStats) -> RenderableType:
    table = Table(title="Evacuation Summary", show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Agents", str(stats.total))
    table.add_row(
        "Evacuated", f"{stats.evacuated} ({stats.percent_complete}% complete)"
    )
    table.add_row("Evacuating", str(stats.evacuating))
    table.add_row("Idle", str(stats.idle))
    if stats.mean_evacuation_time is not None:
        table.add_row("Mean time", f"{stats.mean_evacuation_time:.2f}s")
    if stats.max_evacuation_time is not None:
        table.add_row("Last out", f"{stats.max_evacuation_time:.2f}s")
    for profile_id in sorted(stats.by_profile):
        profile_stats = stats.by_profile[profile_id]
        table.add_row(
            profile_id, f"{profile_stats.evacuated}/{profile_stats.total} evacuated"
        )
    return table


def _render_agents(payload: TickPayload, *, max_agents: int) -> RenderableType:
    table = Table(title="Agent Positions", show_header=True, header_style="bold")
    table.add_column("Agent")
    table.add_column("Profile")
    table.add_column("Level")
    table.add_column("Position")
    table.add_column("Left")
    table.add_column("Status")

    for frame in payload.agents[:max_agents]:
        x, _, z = frame.position
        table.add_row(
            frame.id,
            frame.profile_id,
            str(frame.level_index),
            f"({x:.2f}, {z:.2f})",
            str(frame.waypoints_remaining),
            Text(frame.status, style=STATUS_STYLES.get(frame.status, "")),
        )
    if not payload.agents:
        table.add_row("-", "-", "-", "-", "-", "None")
    elif len(payload.agents) > max_agents:
        table.add_row("…", f"+{len(payload.agents) - max_agents} more", "", "", "", "")
    return table


def _render_events(payload: TickPayload, *, max_events: int) -> RenderableType:
    table = Table(title="Recent Events", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Detail")

    events = payload.events or []
    for event in events[-max_events:]:
        table.add_row(event.kind, _format_payload(event.payload))
    if not events:
        table.add_row("-", "None")
    return table


def _format_payload(payload: dict) -> str:
    if not payload:
        return "-"
    return ", ".join(f"{key}={value}" for key, value in payload.items())


def render_run_header(metadata: dict) -> RenderableType:
    table = Table(title="Run", show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    for key, value in metadata.items():
        table.add_row(str(key), str(value))
    return table
