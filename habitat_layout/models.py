"""Core data models for habitat base layouts."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AtmosphereClass = Literal["none", "thin", "normal"]
RadiationClass = Literal["low", "high", "extreme"]
ModuleStatus = Literal["ok", "too-small", "oversized"]
ResourceLevel = Literal["critical", "low", "ok", "oversized"]

# Layout units per meter squared: width x height / AREA_SCALE gives m².
AREA_SCALE = 100.0
CORRIDOR_MIN_EXTENT = 20.0


def _coerce_id(value: Any) -> Any:
    # Designs saved by older tools used numeric ids.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Environment(BaseModel):
    """Deployment environment profile."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    gravity: float = Field(..., ge=0)
    atmosphere: AtmosphereClass
    radiation: RadiationClass
    max_width: float = Field(..., gt=0)
    max_height: float = Field(..., gt=0)


class ModuleRequirement(BaseModel):
    """Per-crew-member requirement for one module type."""

    model_config = ConfigDict(frozen=True)

    module_type: str
    area: float = Field(..., gt=0)
    volume: float = Field(..., gt=0)
    power: float = Field(..., ge=0)


class Scenario(BaseModel):
    """Preset mission parameters."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    environment: str
    crew_count: int = Field(..., gt=0)
    mission_duration: int = Field(..., gt=0)


class Point(BaseModel):
    x: float
    y: float


class Outline(BaseModel):
    """Axis-aligned base outline that modules are clamped into."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom


class Module(BaseModel):
    """A placed functional unit of the habitat."""

    id: str
    type: str
    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def area_m2(self) -> float:
        return self.width * self.height / AREA_SCALE

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


class Corridor(BaseModel):
    """Rectangular connective element between overlapping modules."""

    id: str
    x: float
    y: float
    width: float = Field(..., ge=CORRIDOR_MIN_EXTENT)
    height: float = Field(..., ge=CORRIDOR_MIN_EXTENT)
    start: Point
    end: Point

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return _coerce_id(value)

    @classmethod
    def between(cls, corridor_id: str, start: Point, end: Point) -> "Corridor":
        """Build a corridor spanning two endpoints in either order."""
        return cls(
            id=corridor_id,
            x=min(start.x, end.x),
            y=min(start.y, end.y),
            width=max(abs(end.x - start.x), CORRIDOR_MIN_EXTENT),
            height=max(abs(end.y - start.y), CORRIDOR_MIN_EXTENT),
            start=start,
            end=end,
        )


class MissionParameters(BaseModel):
    """Current environment, crew and duration selection."""

    environment: str = "moon"
    crew_count: int = Field(4, gt=0)
    mission_duration: int = Field(30, gt=0)


class ValidationSettings(BaseModel):
    """Thresholds and design constants used by the evaluators."""

    capacity_factor: float = Field(10.0, gt=0)
    critical_below: float = 50.0
    low_below: float = 80.0
    oversized_above: float = 150.0
    shielding_per_storage: float = 2.0
    adjacency_threshold: float = 20.0
    undersized_ratio: float = 0.8
    oversized_ratio: float = 1.5


class ResourceStatus(BaseModel):
    """Sufficiency verdict for one tracked resource."""

    resource: str
    level: ResourceLevel
    label: str
    percentage: float
    supply: float
    demand: float
    warning: Optional[str] = None


class ConnectivityReport(BaseModel):
    connected: bool
    unreachable: List[str] = Field(default_factory=list)
    warning: Optional[str] = None


class Evaluation(BaseModel):
    """Everything derived from a layout and its mission parameters."""

    resource_statuses: Dict[str, ResourceStatus]
    total_area: float
    module_count: int
    connected: bool
    unreachable: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    module_statuses: Dict[str, ModuleStatus] = Field(default_factory=dict)


class DesignState(BaseModel):
    """The full persisted state of a design."""

    model_config = ConfigDict(populate_by_name=True)

    environment: str = "moon"
    crew_count: int = Field(4, alias="crewCount", gt=0)
    mission_duration: int = Field(30, alias="missionDuration", gt=0)
    modules: List[Module] = Field(default_factory=list)
    corridors: List[Corridor] = Field(default_factory=list)
    timestamp: Optional[str] = None

    @property
    def parameters(self) -> MissionParameters:
        return MissionParameters(
            environment=self.environment,
            crew_count=self.crew_count,
            mission_duration=self.mission_duration,
        )
