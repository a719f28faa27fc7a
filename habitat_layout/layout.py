"""Placed modules and corridors for a single base layout."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Tuple

from .catalog import get_requirement
from .errors import UnknownCorridor, UnknownModule
from .models import AREA_SCALE, Corridor, Environment, Module, Outline, Point

logger = logging.getLogger(__name__)

DEFAULT_OUTLINE = Outline(x=50, y=50, width=400, height=300)
MIN_MODULE_WIDTH = 60.0
MIN_MODULE_HEIGHT = 40.0
HEIGHT_RATIO = 0.6
VIEWPORT_MARGIN = 100.0


def _clamp(value: float, low: float, high: float) -> float:
    # An oversized module pins to the low edge rather than failing.
    return max(low, min(value, high))


def module_size(module_type: str) -> Tuple[float, float]:
    """Default (width, height) for a newly placed module of ``module_type``."""

    requirement = get_requirement(module_type)
    min_size = math.sqrt(requirement.area * AREA_SCALE)
    return max(min_size, MIN_MODULE_WIDTH), max(min_size * HEIGHT_RATIO, MIN_MODULE_HEIGHT)


def outline_for_viewport(
    environment: Environment,
    viewport_width: float,
    viewport_height: float,
    base: Outline = DEFAULT_OUTLINE,
) -> Outline:
    """Fit the base outline for ``environment`` into a drawing viewport."""

    max_pixels = min(viewport_width - VIEWPORT_MARGIN, viewport_height - VIEWPORT_MARGIN)
    if max_pixels <= 0:
        raise ValueError(
            f"Viewport {viewport_width}x{viewport_height} leaves no room for the base outline"
        )
    scale = max_pixels / (environment.max_width * 10)
    return Outline(
        x=base.x,
        y=base.y,
        width=min(base.width, environment.max_width * scale),
        height=min(base.height, environment.max_height * scale),
    )


class LayoutModel:
    """Owns the modules and corridors of one layout.

    Modules are kept in insertion order; that order breaks ties in
    :meth:`module_at` and picks the traversal root for connectivity.
    Every geometry operation clamps into the active outline instead of
    rejecting out-of-range coordinates.
    """

    def __init__(self, outline: Optional[Outline] = None) -> None:
        self.outline = outline or DEFAULT_OUTLINE
        self._modules: List[Module] = []
        self._corridors: List[Corridor] = []
        self._next_serial = 1

    @property
    def modules(self) -> List[Module]:
        return list(self._modules)

    @property
    def corridors(self) -> List[Corridor]:
        return list(self._corridors)

    def __len__(self) -> int:
        return len(self._modules)

    def _taken_ids(self) -> set[str]:
        return {m.id for m in self._modules} | {c.id for c in self._corridors}

    def _new_id(self, prefix: str) -> str:
        taken = self._taken_ids()
        while True:
            candidate = f"{prefix}-{self._next_serial:04d}"
            self._next_serial += 1
            if candidate not in taken:
                return candidate

    def constrain(self, module: Module) -> Module:
        outline = self.outline
        module.x = _clamp(module.x, outline.x, outline.right - module.width)
        module.y = _clamp(module.y, outline.y, outline.bottom - module.height)
        return module

    def place(self, module_type: str, x: float, y: float) -> Module:
        """Create a module of ``module_type`` at (x, y), clamped to the outline."""

        width, height = module_size(module_type)
        module = Module(
            id=self._new_id(module_type),
            type=module_type,
            x=x,
            y=y,
            width=width,
            height=height,
        )
        self.constrain(module)
        self._modules.append(module)
        logger.info("Placed %s at (%.1f, %.1f)", module.id, module.x, module.y)
        return module

    def add_module(self, module: Module) -> Module:
        """Adopt an existing module record, e.g. one read from a saved design."""

        get_requirement(module.type)
        module = module.model_copy()
        if module.id in self._taken_ids():
            replacement = self._new_id(module.type)
            logger.warning("Duplicate module id %s renamed to %s", module.id, replacement)
            module.id = replacement
        self.constrain(module)
        self._modules.append(module)
        return module

    def get(self, module_id: str) -> Module:
        for module in self._modules:
            if module.id == module_id:
                return module
        raise UnknownModule(module_id)

    def move(self, module_id: str, x: float, y: float) -> Module:
        module = self.get(module_id)
        module.x = x
        module.y = y
        return self.constrain(module)

    def remove(self, module_id: str) -> Module:
        module = self.get(module_id)
        self._modules.remove(module)
        logger.info("Removed %s", module_id)
        return module

    def add_corridor(self, start: Point, end: Point) -> Corridor:
        corridor = Corridor.between(self._new_id("corridor"), start, end)
        self._corridors.append(corridor)
        logger.info(
            "Added %s spanning (%.1f, %.1f) %.1fx%.1f",
            corridor.id,
            corridor.x,
            corridor.y,
            corridor.width,
            corridor.height,
        )
        return corridor

    def add_corridor_record(self, corridor: Corridor) -> Corridor:
        corridor = corridor.model_copy()
        if corridor.id in self._taken_ids():
            replacement = self._new_id("corridor")
            logger.warning("Duplicate corridor id %s renamed to %s", corridor.id, replacement)
            corridor.id = replacement
        self._corridors.append(corridor)
        return corridor

    def remove_corridor(self, corridor_id: str) -> Corridor:
        for corridor in self._corridors:
            if corridor.id == corridor_id:
                self._corridors.remove(corridor)
                return corridor
        raise UnknownCorridor(corridor_id)

    def module_at(self, x: float, y: float) -> Optional[Module]:
        return next((m for m in self._modules if m.contains(x, y)), None)

    def is_within_outline(self, x: float, y: float) -> bool:
        return self.outline.contains(x, y)

    def set_outline(self, outline: Outline) -> None:
        self.outline = outline
        for module in self._modules:
            self.constrain(module)

    def clear(self) -> None:
        self._modules.clear()
        self._corridors.clear()
        logger.info("Cleared layout")

    def extend(self, modules: Iterable[Module], corridors: Iterable[Corridor]) -> None:
        for module in modules:
            self.add_module(module)
        for corridor in corridors:
            self.add_corridor_record(corridor)
