"""Per-module sizing verdicts against crew-scaled area requirements."""

from __future__ import annotations

from typing import Dict, Sequence

from .catalog import get_requirement
from .models import Module, ModuleStatus, ValidationSettings


def required_area(module: Module, crew_count: int) -> float:
    return get_requirement(module.type).area * crew_count


def classify_module(
    module: Module,
    crew_count: int,
    settings: ValidationSettings | None = None,
) -> ModuleStatus:
    settings = settings or ValidationSettings()
    required = required_area(module, crew_count)
    actual = module.area_m2
    if actual < required * settings.undersized_ratio:
        return "too-small"
    if actual > required * settings.oversized_ratio:
        return "oversized"
    return "ok"


def classify_modules(
    modules: Sequence[Module],
    crew_count: int,
    settings: ValidationSettings | None = None,
) -> Dict[str, ModuleStatus]:
    return {m.id: classify_module(m, crew_count, settings) for m in modules}
