import pytest
from pydantic import ValidationError

from egress.sim.contracts import Agent, AgentProfile, Building, EvacuationStats


def test_building_accepts_camel_case_description() -> None:
    building = Building.model_validate(
        {
            "projectInfo": {"projectName": "Casa"},
            "buildingLevels": [
                {
                    "levelName": "PB",
                    "elevation": 0,
                    "areas": [
                        {
                            "name": "SALA",
                            "surface": None,
                            "position": [0, 0],
                            "doors": [
                                {"width": 1.0, "isExit": True},
                                {"width": 0.9, "connectsTo": "COCINA"},
                            ],
                        }
                    ],
                    "stairs": [
                        {"name": "E1", "position": [1, 1], "connectsToLevel": "P1"}
                    ],
                }
            ],
            "installations": {"solar": {"name": "Paneles"}},
        }
    )

    assert building.project_info is not None
    assert building.project_info.project_name == "Casa"
    level = building.building_levels[0]
    assert level.level_height == 3.0
    assert level.areas[0].doors[0].is_exit is True
    assert level.areas[0].doors[1].connects_to == "COCINA"
    assert level.stairs[0].connects_to_level == "P1"


def test_building_accepts_snake_case_and_level_lookup() -> None:
    building = Building(
        building_levels=[{"level_name": "PB", "areas": [{"name": "HALL"}]}]
    )

    assert building.level(0) is not None
    assert building.level(0).areas[0].position is None
    assert building.level(1) is None
    assert building.level(-1) is None


def test_profile_speed_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        AgentProfile(id="still", name="Still", speed=0)


def test_agent_is_frozen_and_reports_status() -> None:
    agent = Agent(id="a", profile_id="child", position=(0.0, 0.5, 0.0))

    assert agent.status == "idle"
    with pytest.raises(ValidationError):
        agent.evacuated = True
    assert agent.model_copy(update={"is_evacuating": True}).status == "evacuating"
    assert agent.model_copy(update={"evacuated": True}).status == "evacuated"


def test_stats_percent_complete() -> None:
    assert EvacuationStats().percent_complete == 0
    assert EvacuationStats(total=3, evacuated=1).percent_complete == 33
