import json
from pathlib import Path

from egress.db.replay_log import (
    RUN_LOG_NAME,
    append_tick_payload,
    create_run_folder,
    write_header,
)
from egress.render.live_tail import LogFollower
from egress.render.replay_reader import parse_tick_line, read_header, read_tick_payloads
from egress.sim.contracts import AgentFrame, Event, TickPayload


def test_run_log_header_and_ticks(tmp_path: Path) -> None:
    run_dir, log_path = create_run_folder(tmp_path, timestamp="2026-01-31T15-50-00Z")
    write_header(log_path, metadata={"run_id": run_dir.name})

    append_tick_payload(log_path, _payload(tick=1))

    with log_path.open("r", encoding="utf-8") as handle:
        records = [json.loads(line) for line in handle]

    assert log_path.name == RUN_LOG_NAME
    assert run_dir.name == "2026-01-31T15-50-00Z"
    assert records[0]["type"] == "header"
    assert records[0]["metadata"]["run_id"] == run_dir.name
    assert records[1]["type"] == "tick"
    assert records[1]["payload"]["tick"] == 1
    assert records[1]["payload"]["agents"][0]["position"] == [1.0, 0.5, 2.0]


def test_reader_skips_header_and_garbage(tmp_path: Path) -> None:
    run_dir, log_path = create_run_folder(tmp_path, timestamp="2026-01-31T15-51-00Z")
    write_header(log_path, metadata={"run_id": run_dir.name, "agents": 1})
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")
        handle.write("[1, 2]\n")
        handle.write("5\n")
        handle.write('"tick"\n')
        handle.write(json.dumps({"type": "tick", "payload": {"tick": "oops"}}) + "\n")
    append_tick_payload(log_path, _payload(tick=2))

    payloads = list(read_tick_payloads(log_path))

    assert read_header(log_path) == {"run_id": run_dir.name, "agents": 1}
    assert len(payloads) == 1
    assert payloads[0].tick == 2
    assert payloads[0].agents[0].position == (1.0, 0.5, 2.0)
    assert payloads[0].events[0].kind == "EVACUATED"


def test_parse_tick_line() -> None:
    line = json.dumps({"type": "tick", "payload": _payload(tick=4).model_dump()})

    assert parse_tick_line(line).tick == 4
    assert parse_tick_line('{"type": "header", "metadata": {}}') is None
    assert parse_tick_line("{broken") is None
    assert parse_tick_line("[1, 2]") is None
    assert parse_tick_line('{"type": "tick", "payload": {"elapsed": 1.0}}') is None


def test_same_second_runs_get_distinct_folders(tmp_path: Path) -> None:
    first, _ = create_run_folder(tmp_path, timestamp="2026-01-31T15-52-00Z")
    second, second_log = create_run_folder(tmp_path, timestamp="2026-01-31T15-52-00Z")
    third, _ = create_run_folder(tmp_path, timestamp="2026-01-31T15-52-00Z")

    assert first.name == "2026-01-31T15-52-00Z"
    assert second.name == "2026-01-31T15-52-00Z-2"
    assert third.name == "2026-01-31T15-52-00Z-3"
    assert second_log.parent == second


def test_follower_waits_for_complete_lines(tmp_path: Path) -> None:
    log_path = tmp_path / RUN_LOG_NAME
    line = json.dumps({"type": "tick", "payload": _payload(tick=7).model_dump(mode="json")})
    log_path.write_text("", encoding="utf-8")

    with log_path.open("a", encoding="utf-8") as writer, log_path.open(
        "r", encoding="utf-8"
    ) as reader:
        follower = LogFollower(reader)
        writer.write(line[:20])
        writer.flush()
        assert follower.poll() == []

        writer.write(line[20:] + "\n")
        writer.flush()
        payloads = follower.poll()

        assert [payload.tick for payload in payloads] == [7]
        assert follower.poll() == []


def _payload(*, tick: int) -> TickPayload:
    return TickPayload(
        tick=tick,
        elapsed=tick * 0.05,
        agents=[
            AgentFrame(
                id="agent-1",
                profile_id="child",
                level_index=0,
                position=(1.0, 0.5, 2.0),
                status="evacuated",
                evacuation_time=0.1,
            )
        ],
        events=[Event(kind="EVACUATED", payload={"agent_id": "agent-1"})],
    )
