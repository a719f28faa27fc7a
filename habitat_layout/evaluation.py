"""Single entry point that evaluates a layout against mission parameters."""

from __future__ import annotations

import logging
from typing import List

from .connectivity import analyze
from .layout import LayoutModel
from .models import Evaluation, MissionParameters, ValidationSettings
from .resources import resource_statuses, total_area
from .sizing import classify_modules

logger = logging.getLogger(__name__)


def evaluate(
    layout: LayoutModel,
    params: MissionParameters,
    settings: ValidationSettings | None = None,
) -> Evaluation:
    """Compute resource, connectivity and sizing verdicts for ``layout``.

    Pure with respect to its inputs. Warnings come out in the order food,
    water, oxygen, exercise, radiation, connectivity.
    """

    settings = settings or ValidationSettings()
    modules = layout.modules
    corridors = layout.corridors

    statuses = resource_statuses(modules, params, settings)
    connectivity = analyze(modules, corridors, settings)

    warnings: List[str] = [s.warning for s in statuses.values() if s.warning]
    if connectivity.warning:
        warnings.append(connectivity.warning)

    evaluation = Evaluation(
        resource_statuses=statuses,
        total_area=total_area(modules),
        module_count=len(modules),
        connected=connectivity.connected,
        unreachable=connectivity.unreachable,
        warnings=warnings,
        module_statuses=classify_modules(modules, params.crew_count, settings),
    )
    logger.debug(
        "Evaluated %d modules: connected=%s warnings=%d",
        evaluation.module_count,
        evaluation.connected,
        len(warnings),
    )
    return evaluation
