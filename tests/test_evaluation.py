import pytest

from habitat_layout.connectivity import DISCONNECTED_WARNING
from habitat_layout.evaluation import evaluate
from habitat_layout.layout import LayoutModel
from habitat_layout.models import MissionParameters, Module, Point


def test_empty_layout_warns_on_every_resource():
    result = evaluate(LayoutModel(), MissionParameters())
    assert result.module_count == 0
    assert result.connected
    assert result.total_area == 0
    assert [w.split(":")[0] for w in result.warnings[:4]] == ["Food", "Water", "Oxygen", "Exercise"]
    assert result.warnings[4] == "Consider adding more radiation shielding"
    assert len(result.warnings) == 5


def test_disconnected_warning_comes_last():
    layout = LayoutModel()
    layout.place("kitchen", 60, 60)
    layout.place("storage", 300, 250)
    result = evaluate(layout, MissionParameters())
    assert not result.connected
    assert result.warnings[-1] == DISCONNECTED_WARNING
    assert result.unreachable == [layout.modules[1].id]


def test_small_kitchen_food_scenario():
    layout = LayoutModel()
    layout.add_module(Module(id="k1", type="kitchen", x=100, y=100, width=25, height=10))
    result = evaluate(layout, MissionParameters(crew_count=4, mission_duration=30))
    food = result.resource_statuses["food"]
    assert food.demand == pytest.approx(420.0)
    assert food.supply == pytest.approx(25.0)
    assert food.level == "critical"
    assert result.module_statuses == {"k1": "too-small"}


def test_orbit_crew_of_eight_without_storage():
    layout = LayoutModel()
    layout.place("lab", 60, 60)
    params = MissionParameters(environment="orbit", crew_count=8, mission_duration=180)
    result = evaluate(layout, params)
    assert result.resource_statuses["radiation"].level == "critical"


def test_corridor_reconnects_layout():
    layout = LayoutModel()
    kitchen = layout.place("kitchen", 60, 60)
    gym = layout.place("gym", 300, 250)
    assert not evaluate(layout, MissionParameters()).connected
    layout.add_corridor(Point(x=kitchen.x + 10, y=kitchen.y + 10), Point(x=gym.x + 10, y=gym.y + 10))
    assert evaluate(layout, MissionParameters()).connected


def test_evaluate_is_pure():
    layout = LayoutModel()
    layout.place("kitchen", 60, 60)
    layout.place("hygiene", 60, 200)
    params = MissionParameters(crew_count=6, mission_duration=90)
    before = [m.model_copy() for m in layout.modules]
    first = evaluate(layout, params)
    second = evaluate(layout, params)
    assert first == second
    assert layout.modules == before


def test_statuses_track_crew_changes():
    layout = LayoutModel()
    module = layout.place("lab", 60, 60)
    assert evaluate(layout, MissionParameters(crew_count=2)).module_statuses[module.id] == "oversized"
    assert evaluate(layout, MissionParameters(crew_count=8)).module_statuses[module.id] == "ok"
