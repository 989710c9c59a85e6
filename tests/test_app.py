import json
from pathlib import Path

import pytest

from egress.app import resolve_log_level, run_evacuation
from egress.db.replay_log import RUN_LOG_NAME
from egress.render.replay_reader import read_tick_payloads

SAMPLE_BUILDING = Path(__file__).resolve().parents[1] / "data" / "building.json"


def test_run_evacuation_records_every_tick(tmp_path: Path) -> None:
    result = run_evacuation(SAMPLE_BUILDING, tmp_path, agents=3, seed=5)

    log_path = result.run_dir / RUN_LOG_NAME
    with log_path.open("r", encoding="utf-8") as handle:
        header = json.loads(handle.readline())
    payloads = list(read_tick_payloads(log_path))

    assert header["metadata"]["agents"] == 3
    assert header["metadata"]["seed"] == 5
    assert len(payloads) == result.ticks
    assert result.stats.total == 3
    assert result.stats.evacuated == 3
    assert payloads[-1].events[-1].kind == "EVACUATION_COMPLETE"


def test_run_evacuation_honours_env_overrides(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("EGRESS_TICK_SECONDS", "0.5")
    monkeypatch.setenv("EGRESS_SEED", "9")

    result = run_evacuation(
        SAMPLE_BUILDING, tmp_path, agents=1, level_index=1, ticks=2
    )

    payloads = list(read_tick_payloads(result.run_dir / RUN_LOG_NAME))
    assert result.ticks == 2
    assert payloads[-1].elapsed == pytest.approx(1.0)


def test_run_evacuation_rejects_unknown_profile(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        run_evacuation(SAMPLE_BUILDING, tmp_path, agents=1, profile_id="ghost")


def test_two_runs_get_separate_folders(tmp_path: Path) -> None:
    first = run_evacuation(SAMPLE_BUILDING, tmp_path, agents=1, seed=1, ticks=3)
    second = run_evacuation(SAMPLE_BUILDING, tmp_path, agents=1, seed=1, ticks=3)

    assert first.run_dir != second.run_dir
    for result in (first, second):
        with (result.run_dir / RUN_LOG_NAME).open("r", encoding="utf-8") as handle:
            records = [json.loads(line) for line in handle]
        assert [record["type"] for record in records].count("header") == 1
        assert records[0]["metadata"]["run_id"] == result.run_dir.name


def test_run_evacuation_rejects_non_positive_tick(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("EGRESS_TICK_SECONDS", "-1")

    with pytest.raises(ValueError):
        run_evacuation(SAMPLE_BUILDING, tmp_path, agents=1)
    with pytest.raises(ValueError):
        run_evacuation(SAMPLE_BUILDING, tmp_path, agents=1, tick_seconds=0)
    assert list(tmp_path.iterdir()) == []


def test_resolve_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EGRESS_LOG_LEVEL", raising=False)
    assert resolve_log_level(None) == "WARNING"
    assert resolve_log_level("debug") == "DEBUG"
    monkeypatch.setenv("EGRESS_LOG_LEVEL", "info")
    assert resolve_log_level(None) == "INFO"
