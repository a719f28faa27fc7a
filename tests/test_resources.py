import pytest

from habitat_layout.models import MissionParameters, Module, ValidationSettings
from habitat_layout.resources import (
    classify,
    demand,
    radiation_status,
    resource_status,
    resource_statuses,
    supply,
    total_area,
)


def make_module(module_type: str, width: float = 60, height: float = 40, idx: int = 0) -> Module:
    return Module(id=f"{module_type}-{idx}", type=module_type, x=60 + idx * 80, y=60, width=width, height=height)


def test_demand_scales_with_crew_and_duration():
    params = MissionParameters(crew_count=4, mission_duration=30)
    assert demand("food", params) == pytest.approx(420.0)
    assert demand("water", params) == pytest.approx(456.0)
    assert demand("oxygen", params) == pytest.approx(99.6)
    assert demand("exercise", params) == pytest.approx(240.0)


def test_single_small_kitchen_is_critical():
    kitchen = make_module("kitchen", width=25, height=10)
    status = resource_status("food", [kitchen], MissionParameters(crew_count=4, mission_duration=30))
    assert status.supply == pytest.approx(25.0)
    assert status.demand == pytest.approx(420.0)
    assert status.percentage == pytest.approx(5.952, rel=1e-3)
    assert status.level == "critical"
    assert "food" in status.warning.lower()
    assert "kitchen" in status.warning


def test_supply_only_counts_the_supplying_type():
    modules = [make_module("kitchen"), make_module("lab", idx=1), make_module("hygiene", idx=2)]
    assert supply("food", modules) == pytest.approx(240.0)
    assert supply("water", modules) == pytest.approx(240.0)
    assert supply("exercise", modules) == 0


@pytest.mark.parametrize(
    "percentage,level",
    [
        (0.0, "critical"),
        (49.9, "critical"),
        (50.0, "low"),
        (79.9, "low"),
        (80.0, "ok"),
        (150.0, "ok"),
        (150.1, "oversized"),
    ],
)
def test_classification_thresholds(percentage, level):
    assert classify(percentage) == level


def test_low_and_oversized_warnings():
    params = MissionParameters(crew_count=4, mission_duration=30)
    low = resource_status("food", [make_module("kitchen")], params)
    assert low.level == "low"
    assert low.label == "Low"
    assert low.warning is not None

    gyms = [make_module("gym", width=100, height=100, idx=i) for i in range(4)]
    oversized = resource_status("exercise", gyms, params)
    assert oversized.level == "oversized"
    assert oversized.warning is None


def test_ok_kitchen():
    params = MissionParameters(crew_count=4, mission_duration=30)
    status = resource_status("food", [make_module("kitchen", width=60, height=70)], params)
    assert status.percentage == pytest.approx(100.0)
    assert status.level == "ok"
    assert status.warning is None


def test_percentage_is_monotonic_in_supplier_area():
    params = MissionParameters(crew_count=6, mission_duration=90)
    previous = -1.0
    for width in (10, 40, 80, 160, 320, 640):
        status = resource_status("water", [make_module("hygiene", width=width, height=50)], params)
        assert status.percentage >= previous
        previous = status.percentage


def test_capacity_factor_comes_from_settings():
    settings = ValidationSettings(capacity_factor=20)
    assert supply("food", [make_module("kitchen")], settings) == pytest.approx(480.0)


def test_orbit_without_storage_is_critical():
    params = MissionParameters(environment="orbit", crew_count=8, mission_duration=180)
    status = radiation_status([], params)
    assert status.level == "critical"
    assert status.percentage == 30
    assert status.warning == "Insufficient radiation shielding for orbit environment"


def test_orbit_with_enough_storage_is_ok():
    params = MissionParameters(environment="orbit", crew_count=8, mission_duration=180)
    storage = [make_module("storage", idx=i) for i in range(4)]
    assert radiation_status(storage, params).level == "ok"


def test_high_radiation_needs_half_crew_shielding():
    params = MissionParameters(environment="moon", crew_count=4, mission_duration=30)
    assert radiation_status([], params).level == "low"
    assert radiation_status([], params).warning == "Consider adding more radiation shielding"
    assert radiation_status([make_module("storage")], params).level == "ok"


def test_shielding_ignores_storage_size():
    params = MissionParameters(environment="mars", crew_count=6, mission_duration=90)
    tiny = [make_module("storage", width=5, height=5)]
    assert radiation_status(tiny, params).level == "low"
    tiny.append(make_module("storage", width=5, height=5, idx=1))
    assert radiation_status(tiny, params).level == "ok"


def test_statuses_come_in_fixed_order():
    statuses = resource_statuses([], MissionParameters())
    assert list(statuses) == ["food", "water", "oxygen", "exercise", "radiation"]


def test_total_area():
    modules = [make_module("kitchen"), make_module("lab", width=100, height=50, idx=1)]
    assert total_area(modules) == pytest.approx(74.0)
    assert total_area([]) == 0
