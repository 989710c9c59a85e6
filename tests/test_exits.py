from egress.sim.contracts import Agent, Area, Building, Door, Level
from egress.sim.exits import exit_positions, find_nearest_exit


def test_nearest_exit_uses_area_centre() -> None:
    building = Building(building_levels=[_two_exit_level()])
    agent = Agent(id="a", profile_id="child", position=(9.0, 0.5, 1.0))

    assert find_nearest_exit(agent, building) == (10.0, 0.5, 0.0)


def test_first_exit_wins_ties() -> None:
    building = Building(building_levels=[_two_exit_level()])
    agent = Agent(id="a", profile_id="child", position=(5.0, 0.5, 0.0))

    assert find_nearest_exit(agent, building) == (0.0, 0.5, 0.0)


def test_no_exit_on_level() -> None:
    level = Level(
        areas=[Area(name="VAULT", position=(0, 0), doors=[Door(connects_to="X")])]
    )
    building = Building(building_levels=[level])
    agent = Agent(id="a", profile_id="child", position=(0.0, 0.5, 0.0))

    assert find_nearest_exit(agent, building) is None


def test_unknown_level_has_no_exit() -> None:
    building = Building(building_levels=[_two_exit_level()])
    agent = Agent(id="a", profile_id="child", position=(0.0, 3.5, 0.0), level_index=1)

    assert find_nearest_exit(agent, building) is None


def test_exit_positions_skip_unpositioned_areas() -> None:
    level = Level(
        elevation=3.0,
        areas=[
            Area(name="ROOF", doors=[Door(is_exit=True)]),
            Area(name="LANDING", position=(2, 2), doors=[Door(is_exit=True)] * 2),
        ],
    )

    assert exit_positions(level) == [(2.0, 3.5, 2.0), (2.0, 3.5, 2.0)]


def _two_exit_level() -> Level:
    return Level(
        areas=[
            Area(name="WEST", position=(0, 0), doors=[Door(is_exit=True)]),
            Area(name="MIDDLE", position=(5, 5)),
            Area(name="EAST", position=(10, 0), doors=[Door(is_exit=True)]),
        ]
    )
