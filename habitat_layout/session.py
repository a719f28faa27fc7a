"""Interactive design session: one layout plus its mission parameters."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from .catalog import CUSTOM_SCENARIO, get_environment, get_requirement, get_scenario
from .evaluation import evaluate
from .layout import LayoutModel, outline_for_viewport
from .models import (
    Corridor,
    DesignState,
    Environment,
    Evaluation,
    MissionParameters,
    Module,
    Point,
    ValidationSettings,
)

logger = logging.getLogger(__name__)


class Session:
    """Single owner of the layout and mission parameters.

    Every mutation re-runs the full evaluation before returning, so
    ``last_evaluation`` always describes the current state.
    """

    def __init__(
        self,
        parameters: Optional[MissionParameters] = None,
        settings: Optional[ValidationSettings] = None,
        layout: Optional[LayoutModel] = None,
    ) -> None:
        self.parameters = parameters or MissionParameters()
        get_environment(self.parameters.environment)
        self.settings = settings or ValidationSettings()
        self.layout = layout or LayoutModel()
        self.viewport: Optional[Tuple[float, float]] = None
        self.last_evaluation = self.evaluate()

    @classmethod
    def from_state(
        cls, state: DesignState, settings: Optional[ValidationSettings] = None
    ) -> "Session":
        session = cls(settings=settings)
        session.load_state(state)
        return session

    @property
    def environment(self) -> Environment:
        return get_environment(self.parameters.environment)

    def evaluate(self) -> Evaluation:
        return evaluate(self.layout, self.parameters, self.settings)

    def _refresh(self) -> Evaluation:
        self.last_evaluation = self.evaluate()
        return self.last_evaluation

    # -- layout edits -------------------------------------------------

    def place_module(self, module_type: str, x: float, y: float) -> Module:
        module = self.layout.place(module_type, x, y)
        self._refresh()
        return module

    def move_module(self, module_id: str, x: float, y: float) -> Module:
        module = self.layout.move(module_id, x, y)
        self._refresh()
        return module

    def remove_module(self, module_id: str) -> Module:
        module = self.layout.remove(module_id)
        self._refresh()
        return module

    def add_corridor(self, start: Point, end: Point) -> Corridor:
        corridor = self.layout.add_corridor(start, end)
        self._refresh()
        return corridor

    def remove_corridor(self, corridor_id: str) -> Corridor:
        corridor = self.layout.remove_corridor(corridor_id)
        self._refresh()
        return corridor

    def module_at(self, x: float, y: float) -> Optional[Module]:
        return self.layout.module_at(x, y)

    def clear(self) -> Evaluation:
        self.layout.clear()
        return self._refresh()

    # -- mission parameters ------------------------------------------

    def update_parameters(self, **changes: Any) -> Evaluation:
        values = self.parameters.model_dump()
        values.update(changes)
        parameters = MissionParameters(**values)
        get_environment(parameters.environment)
        environment_changed = parameters.environment != self.parameters.environment
        self.parameters = parameters
        if environment_changed and self.viewport is not None:
            self._fit_outline()
        logger.info(
            "Mission parameters: %s, crew %d, %d days",
            parameters.environment,
            parameters.crew_count,
            parameters.mission_duration,
        )
        return self._refresh()

    def set_environment(self, environment: str) -> Evaluation:
        return self.update_parameters(environment=environment)

    def set_crew_count(self, crew_count: int) -> Evaluation:
        return self.update_parameters(crew_count=crew_count)

    def set_mission_duration(self, mission_duration: int) -> Evaluation:
        return self.update_parameters(mission_duration=mission_duration)

    def load_scenario(self, scenario_id: str) -> Evaluation:
        if scenario_id == CUSTOM_SCENARIO:
            return self.last_evaluation
        scenario = get_scenario(scenario_id)
        logger.info("Loading scenario %s", scenario.description)
        return self.update_parameters(
            environment=scenario.environment,
            crew_count=scenario.crew_count,
            mission_duration=scenario.mission_duration,
        )

    def _fit_outline(self) -> None:
        width, height = self.viewport
        self.layout.set_outline(outline_for_viewport(self.environment, width, height))

    def set_viewport(self, width: float, height: float) -> Evaluation:
        """Resize the base outline to a drawing surface of ``width`` x ``height``."""
        outline_for_viewport(self.environment, width, height)
        self.viewport = (width, height)
        self._fit_outline()
        return self._refresh()

    # -- persistence / advisory snapshots ----------------------------

    def to_state(self, timestamp: Optional[str] = None) -> DesignState:
        return DesignState(
            environment=self.parameters.environment,
            crew_count=self.parameters.crew_count,
            mission_duration=self.parameters.mission_duration,
            modules=[m.model_copy() for m in self.layout.modules],
            corridors=[c.model_copy(deep=True) for c in self.layout.corridors],
            timestamp=timestamp,
        )

    def load_state(self, state: DesignState) -> Evaluation:
        parameters = state.parameters
        get_environment(parameters.environment)
        for module in state.modules:
            get_requirement(module.type)
        self.parameters = parameters
        if self.viewport is not None:
            self._fit_outline()
        self.layout.clear()
        self.layout.extend(state.modules, state.corridors)
        logger.info(
            "Loaded design with %d modules and %d corridors",
            len(state.modules),
            len(state.corridors),
        )
        return self._refresh()

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the design for the advisory service and clients."""
        state = self.to_state()
        return state.model_dump(mode="json", by_alias=True, exclude={"timestamp"})
