import pytest
from pydantic import ValidationError

from habitat_layout.errors import InvalidEnvironment, InvalidModuleType, UnknownScenario
from habitat_layout.models import DesignState, MissionParameters, Module, Point
from habitat_layout.session import Session


def test_new_session_is_evaluated():
    session = Session()
    assert session.parameters == MissionParameters()
    assert session.last_evaluation.module_count == 0
    assert session.environment.id == "moon"


def test_each_edit_refreshes_evaluation():
    session = Session()
    kitchen = session.place_module("kitchen", 60, 60)
    assert session.last_evaluation.module_count == 1

    gym = session.place_module("gym", 300, 250)
    assert not session.last_evaluation.connected

    session.move_module(gym.id, 60, 200)
    assert session.last_evaluation.connected

    session.remove_module(kitchen.id)
    assert session.last_evaluation.module_count == 1
    assert kitchen.id not in session.last_evaluation.module_statuses


def test_corridor_edits_refresh_connectivity():
    session = Session()
    a = session.place_module("kitchen", 60, 60)
    b = session.place_module("lab", 300, 250)
    corridor = session.add_corridor(Point(x=a.x + 5, y=a.y + 5), Point(x=b.x + 5, y=b.y + 5))
    assert session.last_evaluation.connected
    session.remove_corridor(corridor.id)
    assert not session.last_evaluation.connected


def test_rejected_placement_keeps_state():
    session = Session()
    before = session.last_evaluation
    with pytest.raises(InvalidModuleType):
        session.place_module("reactor", 100, 100)
    assert session.last_evaluation is before
    assert len(session.layout) == 0


def test_crew_count_must_be_positive():
    session = Session()
    with pytest.raises(ValueError):
        session.set_crew_count(0)
    with pytest.raises(ValidationError):
        session.set_mission_duration(-5)
    assert session.parameters == MissionParameters()


def test_unknown_environment_is_rejected():
    session = Session()
    with pytest.raises(InvalidEnvironment):
        session.set_environment("venus")
    assert session.parameters.environment == "moon"


def test_crew_change_rescales_demand():
    session = Session()
    session.place_module("kitchen", 60, 60)
    assert session.last_evaluation.resource_statuses["food"].level == "low"
    session.set_crew_count(2)
    assert session.last_evaluation.resource_statuses["food"].level == "ok"


def test_load_scenario_sets_parameters():
    session = Session()
    session.load_scenario("orbital-lab")
    assert session.parameters == MissionParameters(
        environment="orbit", crew_count=8, mission_duration=180
    )
    assert session.last_evaluation.resource_statuses["radiation"].level == "critical"


def test_custom_scenario_changes_nothing():
    session = Session(MissionParameters(crew_count=3))
    session.load_scenario("custom")
    assert session.parameters.crew_count == 3


def test_unknown_scenario():
    session = Session()
    with pytest.raises(UnknownScenario):
        session.load_scenario("jupiter-station")


def test_viewport_shrinks_outline_and_reclamps():
    session = Session()
    module = session.place_module("kitchen", 200, 200)
    session.set_viewport(800, 600)
    outline = session.layout.outline
    assert outline.width == pytest.approx(50)
    assert outline.height == pytest.approx(50)
    # A 60x40 kitchen is wider than the 50 unit outline: x pins to the
    # left edge and the module overflows on the right.
    assert (module.x, module.y) == (50, 60)
    assert module.x + module.width > outline.right
    assert module.y + module.height == pytest.approx(outline.bottom)


def test_environment_change_refits_outline_once_viewport_is_known():
    session = Session()
    session.set_environment("orbit")
    assert session.layout.outline.width == 400

    session.set_viewport(1200, 900)
    session.set_environment("mars")
    # min(1100, 800) = 800 px across the 84 unit Mars span
    assert session.layout.outline.width == pytest.approx(80)
    assert session.layout.outline.height == pytest.approx(80)


def test_tiny_viewport_is_rejected():
    session = Session()
    with pytest.raises(ValueError):
        session.set_viewport(80, 600)
    assert session.viewport is None
    assert session.layout.outline.width == 400


def test_load_state_replaces_layout():
    session = Session()
    session.place_module("gym", 60, 60)
    state = DesignState(
        environment="mars",
        crewCount=6,
        missionDuration=90,
        modules=[Module(id="k1", type="kitchen", x=60, y=60, width=60, height=40)],
    )
    session.load_state(state)
    assert [m.id for m in session.layout.modules] == ["k1"]
    assert session.parameters.environment == "mars"
    assert session.last_evaluation.module_count == 1


def test_load_state_with_bad_module_type_changes_nothing():
    session = Session()
    session.place_module("gym", 60, 60)
    state = DesignState(modules=[Module(id="x", type="forge", x=0, y=0, width=60, height=40)])
    with pytest.raises(InvalidModuleType):
        session.load_state(state)
    assert [m.type for m in session.layout.modules] == ["gym"]


def test_to_state_and_back():
    session = Session(MissionParameters(environment="mars", crew_count=6, mission_duration=90))
    a = session.place_module("kitchen", 60, 60)
    session.place_module("hygiene", 60, 200)
    session.add_corridor(Point(x=a.x, y=a.y), Point(x=a.x + 40, y=a.y + 160))

    state = session.to_state(timestamp="2024-01-01T00:00:00+00:00")
    restored = Session.from_state(state)
    assert restored.to_state(timestamp=state.timestamp) == state
    assert restored.last_evaluation == session.last_evaluation


def test_snapshot_uses_wire_names():
    session = Session()
    session.place_module("lab", 100, 100)
    snap = session.snapshot()
    assert set(snap) == {"environment", "crewCount", "missionDuration", "modules", "corridors"}
    assert snap["modules"][0]["type"] == "lab"
