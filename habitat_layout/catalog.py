"""Static environment, requirement and scenario tables."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .errors import InvalidEnvironment, InvalidModuleType, UnknownScenario
from .models import Environment, ModuleRequirement, Scenario

ENVIRONMENTS: Mapping[str, Environment] = MappingProxyType(
    {
        env.id: env
        for env in (
            Environment(
                id="moon",
                name="Moon",
                gravity=0.16,
                atmosphere="none",
                radiation="high",
                max_width=8.4,
                max_height=8.4,
            ),
            Environment(
                id="mars",
                name="Mars",
                gravity=0.38,
                atmosphere="thin",
                radiation="high",
                max_width=8.4,
                max_height=8.4,
            ),
            Environment(
                id="orbit",
                name="Earth Orbit",
                gravity=0.0,
                atmosphere="none",
                radiation="extreme",
                max_width=5.2,
                max_height=5.2,
            ),
        )
    }
)

# Per crew member: area m², volume m³, power kW.
MODULE_REQUIREMENTS: Mapping[str, ModuleRequirement] = MappingProxyType(
    {
        name: ModuleRequirement(module_type=name, area=area, volume=volume, power=power)
        for name, area, volume, power in (
            ("kitchen", 2.5, 7.5, 2.0),
            ("lab", 3.0, 9.0, 3.0),
            ("gym", 2.0, 6.0, 1.5),
            ("sleeping", 1.5, 4.5, 0.5),
            ("hygiene", 1.5, 4.5, 1.0),
            ("storage", 2.0, 6.0, 0.5),
            ("medical", 1.5, 4.5, 1.0),
            ("recreation", 1.5, 4.5, 1.0),
        )
    }
)

MODULE_TYPES: Tuple[str, ...] = tuple(MODULE_REQUIREMENTS)

# Per crew member per day: food kg, water L, oxygen kg, exercise h.
DAILY_CONSUMPTION: Mapping[str, float] = MappingProxyType(
    {
        "food": 3.5,
        "water": 3.8,
        "oxygen": 0.83,
        "exercise": 2.0,
    }
)

SUPPLYING_MODULE_TYPE: Mapping[str, str] = MappingProxyType(
    {
        "food": "kitchen",
        "water": "hygiene",
        "oxygen": "storage",
        "exercise": "gym",
    }
)

TRACKED_RESOURCES: Tuple[str, ...] = ("food", "water", "oxygen", "exercise")
SHIELDING_MODULE_TYPE = "storage"

SCENARIOS: Mapping[str, Scenario] = MappingProxyType(
    {
        s.id: s
        for s in (
            Scenario(
                id="lunar-research",
                description="Lunar Research Mission",
                environment="moon",
                crew_count=4,
                mission_duration=30,
            ),
            Scenario(
                id="mars-colony",
                description="Mars Colony Mission",
                environment="mars",
                crew_count=6,
                mission_duration=90,
            ),
            Scenario(
                id="orbital-lab",
                description="Orbital Laboratory Mission",
                environment="orbit",
                crew_count=8,
                mission_duration=180,
            ),
        )
    }
)

CUSTOM_SCENARIO = "custom"


def get_environment(environment_id: str) -> Environment:
    try:
        return ENVIRONMENTS[environment_id]
    except KeyError:
        raise InvalidEnvironment(environment_id) from None


def get_requirement(module_type: str) -> ModuleRequirement:
    try:
        return MODULE_REQUIREMENTS[module_type]
    except KeyError:
        raise InvalidModuleType(module_type) from None


def get_scenario(scenario_id: str) -> Scenario:
    try:
        return SCENARIOS[scenario_id]
    except KeyError:
        raise UnknownScenario(scenario_id) from None
