"""Resource supply/demand accounting for a habitat layout.

Supply is a deliberately coarse design figure: every m² of a supplying
module yields ``capacity_factor`` units for the whole mission. Demand is
crew x daily rate x mission days.
"""

from __future__ import annotations

from typing import Dict, Iterable, Sequence, Tuple

from .catalog import (
    DAILY_CONSUMPTION,
    SHIELDING_MODULE_TYPE,
    SUPPLYING_MODULE_TYPE,
    TRACKED_RESOURCES,
    get_environment,
)
from .models import Module, MissionParameters, ResourceLevel, ResourceStatus, ValidationSettings

LEVEL_LABELS: Dict[str, str] = {
    "critical": "Critical",
    "low": "Low",
    "ok": "OK",
    "oversized": "Oversized",
}


def demand(resource: str, params: MissionParameters) -> float:
    return params.crew_count * DAILY_CONSUMPTION[resource] * params.mission_duration


def supply(
    resource: str,
    modules: Iterable[Module],
    settings: ValidationSettings | None = None,
) -> float:
    settings = settings or ValidationSettings()
    module_type = SUPPLYING_MODULE_TYPE[resource]
    return sum(m.area_m2 * settings.capacity_factor for m in modules if m.type == module_type)


def classify(percentage: float, settings: ValidationSettings | None = None) -> ResourceLevel:
    settings = settings or ValidationSettings()
    if percentage < settings.critical_below:
        return "critical"
    if percentage < settings.low_below:
        return "low"
    if percentage > settings.oversized_above:
        return "oversized"
    return "ok"


def _warning(resource: str, level: str) -> str | None:
    module_type = SUPPLYING_MODULE_TYPE[resource]
    if level == "critical":
        return f"{resource.capitalize()}: {module_type} capacity insufficient for crew needs"
    if level == "low":
        return f"{resource.capitalize()}: {module_type} capacity may be insufficient"
    return None


def resource_status(
    resource: str,
    modules: Sequence[Module],
    params: MissionParameters,
    settings: ValidationSettings | None = None,
) -> ResourceStatus:
    settings = settings or ValidationSettings()
    required = demand(resource, params)
    available = supply(resource, modules, settings)
    percentage = 100.0 * available / required
    level = classify(percentage, settings)
    return ResourceStatus(
        resource=resource,
        level=level,
        label=LEVEL_LABELS[level],
        percentage=percentage,
        supply=available,
        demand=required,
        warning=_warning(resource, level),
    )


def shielding(modules: Iterable[Module], settings: ValidationSettings | None = None) -> float:
    settings = settings or ValidationSettings()
    count = sum(1 for m in modules if m.type == SHIELDING_MODULE_TYPE)
    return count * settings.shielding_per_storage


def _radiation_verdict(
    radiation: str, available: float, crew: int
) -> Tuple[ResourceLevel, float, float, str | None]:
    if radiation == "extreme":
        if available < crew:
            return "critical", 30.0, crew, "Insufficient radiation shielding for orbit environment"
        return "ok", 100.0, crew, None
    if radiation == "high":
        if available < crew * 0.5:
            return "low", 60.0, crew * 0.5, "Consider adding more radiation shielding"
        return "ok", 100.0, crew * 0.5, None
    return "ok", 100.0, 0.0, None


def radiation_status(
    modules: Sequence[Module],
    params: MissionParameters,
    settings: ValidationSettings | None = None,
) -> ResourceStatus:
    """Shielding verdict from the environment's radiation class.

    Storage mass doubles as shielding, so the verdict depends only on the
    number of storage modules, not on their size.
    """

    environment = get_environment(params.environment)
    available = shielding(modules, settings)
    level, percentage, required, warning = _radiation_verdict(
        environment.radiation, available, params.crew_count
    )
    return ResourceStatus(
        resource="radiation",
        level=level,
        label=LEVEL_LABELS[level],
        percentage=percentage,
        supply=available,
        demand=required,
        warning=warning,
    )


def total_area(modules: Iterable[Module]) -> float:
    return sum(m.area_m2 for m in modules)


def resource_statuses(
    modules: Sequence[Module],
    params: MissionParameters,
    settings: ValidationSettings | None = None,
) -> Dict[str, ResourceStatus]:
    """Statuses for food, water, oxygen, exercise and radiation, in that order."""

    settings = settings or ValidationSettings()
    statuses = {r: resource_status(r, modules, params, settings) for r in TRACKED_RESOURCES}
    statuses["radiation"] = radiation_status(modules, params, settings)
    return statuses
