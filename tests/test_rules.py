import pytest

from wall_follower.decision import STOP, Rule, RuleEngine, VelocityCommand, default_rules
from wall_follower.params import Parameters
from wall_follower.perception import Sector, SectorReading

CLEAR = 1.0


def sectors(**values):
    return SectorReading.from_mapping(
        {Sector[name]: value for name, value in values.items()}, default=CLEAR
    )


@pytest.fixture
def engine():
    return RuleEngine(default_rules(Parameters()))


def test_table_order(engine):
    assert engine.names == [
        "loop_closed",
        "left_front_open",
        "obstacle_ahead",
        "front_left_obstacle",
        "front_right_obstacle",
        "wall_receding",
        "follow_wall",
    ]


@pytest.mark.parametrize("reading", [
    sectors(LEFT_FRONT=0.5),
    sectors(LEFT_FRONT=3.0),
    sectors(FRONT=0.1, FRONT_LEFT=0.1, FRONT_RIGHT=0.1),
    SectorReading.filled(0.0),
])
def test_near_start_overrides_everything(engine, reading):
    assert engine.evaluate(reading, near_start=True) == STOP
    assert engine.select(reading, near_start=True).name == "loop_closed"


def test_falls_through_to_follow_wall(engine):
    reading = sectors(FRONT=1.0, FRONT_LEFT=1.0, FRONT_RIGHT=1.0, LEFT_FRONT=0.5)
    assert engine.evaluate(reading, False) == VelocityCommand(0.3, 0.0)


def test_obstacle_ahead_rotates_in_place(engine):
    reading = sectors(FRONT=0.5, LEFT_FRONT=0.5)
    assert engine.evaluate(reading, False) == VelocityCommand(0.0, -1.5)


@pytest.mark.parametrize("reading, name, command", [
    (sectors(LEFT_FRONT=0.95), "left_front_open", (0.2, 1.5)),
    (sectors(LEFT_FRONT=0.5, FRONT=0.69), "obstacle_ahead", (0.0, -1.5)),
    (sectors(LEFT_FRONT=0.5, FRONT_LEFT=0.59), "front_left_obstacle", (0.3, -1.5)),
    (sectors(LEFT_FRONT=0.5, FRONT_RIGHT=0.59), "front_right_obstacle", (0.3, 1.5)),
    (sectors(LEFT_FRONT=0.61), "wall_receding", (0.3, 1.5)),
    (sectors(LEFT_FRONT=0.6), "follow_wall", (0.3, 0.0)),
])
def test_each_rule(engine, reading, name, command):
    rule = engine.select(reading, False)
    assert rule.name == name
    assert rule.command == VelocityCommand(*command)


def test_open_left_beats_obstacle_ahead(engine):
    reading = sectors(LEFT_FRONT=1.0, FRONT=0.3)
    assert engine.select(reading, False).name == "left_front_open"


def test_obstacle_ahead_beats_front_left(engine):
    reading = sectors(LEFT_FRONT=0.5, FRONT=0.3, FRONT_LEFT=0.3)
    assert engine.select(reading, False).name == "obstacle_ahead"


def test_front_left_beats_front_right(engine):
    reading = sectors(LEFT_FRONT=0.5, FRONT_LEFT=0.3, FRONT_RIGHT=0.3)
    assert engine.select(reading, False).name == "front_left_obstacle"


def test_thresholds_are_strict(engine):
    # Exactly at a threshold does not trigger
    reading = sectors(LEFT_FRONT=0.6, FRONT=0.7, FRONT_LEFT=0.6, FRONT_RIGHT=0.6)
    assert engine.select(reading, False).name == "follow_wall"


def test_rules_follow_parameters():
    params = Parameters(linear_speed=0.5, angular_speed=1.0, front_blocked=1.5)
    engine = RuleEngine(default_rules(params))
    reading = sectors(LEFT_FRONT=0.5, FRONT=1.2)
    assert engine.evaluate(reading, False) == VelocityCommand(0.0, -1.0)
    assert engine.evaluate(sectors(LEFT_FRONT=0.5, FRONT=2.0), False) == VelocityCommand(0.5, 0.0)


def test_evaluation_is_stateless(engine):
    reading = sectors(LEFT_FRONT=0.5)
    first = engine.evaluate(reading, False)
    engine.evaluate(sectors(FRONT=0.1, LEFT_FRONT=0.5), False)
    assert engine.evaluate(reading, False) == first


def test_empty_table_rejected():
    with pytest.raises(ValueError):
        RuleEngine([])


def test_no_match_raises():
    engine = RuleEngine([Rule("never", lambda s, n: False, STOP)])
    with pytest.raises(LookupError):
        engine.select(SectorReading.filled(1.0), False)


def test_command_scaling():
    command = VelocityCommand(0.3, -1.5).scaled(0.5)
    assert command.linear == pytest.approx(0.15)
    assert command.angular == pytest.approx(-0.75)
    assert command.to_dict() == {"linear": 0.15, "angular": -0.75}
