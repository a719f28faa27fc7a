"""JSON import/export for saved designs and evaluation summaries."""

from __future__ import annotations

import csv
import json
import logging
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .catalog import ENVIRONMENTS, MODULE_REQUIREMENTS
from .errors import MalformedPersistedState
from .models import Corridor, DesignState, Evaluation, MissionParameters, Module, ValidationSettings
from .session import Session

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_PARAMETER_KEYS = {
    "environment": "environment",
    "crewCount": "crew_count",
    "missionDuration": "mission_duration",
}


def design_schema() -> Dict[str, Any]:
    return DesignState.model_json_schema(by_alias=True)


def evaluation_schema() -> Dict[str, Any]:
    return Evaluation.model_json_schema()


def _parse_records(raw: Any, model: Type[RecordT], kind: str) -> List[RecordT]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring %s entries: expected a list, got %s", kind, type(raw).__name__)
        return []
    records: List[RecordT] = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping %s #%d: %s", kind, index, exc.errors()[0]["msg"])
    return records


def _parse_parameters(data: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for key, field in _PARAMETER_KEYS.items():
        raw = data.get(key, data.get(field))
        if raw is None:
            continue
        try:
            MissionParameters(**{field: raw})
        except ValidationError:
            logger.warning("Ignoring invalid %s %r; using default", key, raw)
            continue
        if field == "environment" and raw not in ENVIRONMENTS:
            logger.warning("Ignoring unknown environment %r; using default", raw)
            continue
        values[field] = raw
    return values


def parse_design(data: Any) -> DesignState:
    """Build a design from decoded JSON, degrading rather than failing.

    Missing collections become empty, missing or invalid parameters fall
    back to defaults, and individual records that fail validation are
    skipped. Only a document that is not a JSON object is rejected.
    """

    if not isinstance(data, dict):
        raise MalformedPersistedState("Design must be a JSON object")

    modules = _parse_records(data.get("modules"), Module, "module")
    known = [m for m in modules if m.type in MODULE_REQUIREMENTS]
    for module in modules:
        if module.type not in MODULE_REQUIREMENTS:
            logger.warning("Skipping module %s with unknown type %r", module.id, module.type)

    timestamp = data.get("timestamp")
    return DesignState(
        **_parse_parameters(data),
        modules=known,
        corridors=_parse_records(data.get("corridors"), Corridor, "corridor"),
        timestamp=timestamp if isinstance(timestamp, str) else None,
    )


def load_design(path: Path | str) -> DesignState:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise MalformedPersistedState(f"Design file {path} is not valid JSON: {exc}") from exc
    return parse_design(data)


def design_from_session(session: Session, timestamp: str | None = None) -> DesignState:
    """Persistable state of the session's current design."""
    return session.to_state(timestamp=timestamp)


def dump_design(state: DesignState) -> Dict[str, Any]:
    return state.model_dump(mode="json", by_alias=True, exclude_none=True)


def save_design(state: DesignState, path: Path | str) -> None:
    Path(path).write_text(json.dumps(dump_design(state), indent=2, sort_keys=True))


def load_settings(path: Path | str | None) -> ValidationSettings:
    if path is None:
        return ValidationSettings()
    data = json.loads(Path(path).read_text())
    return ValidationSettings.model_validate(data)


def export_markdown(state: DesignState, evaluation: Evaluation) -> str:
    environment = ENVIRONMENTS.get(state.environment)
    lines: list[str] = []
    lines.append("# Habitat Layout Summary")
    lines.append("")
    lines.append(f"- Environment: {environment.name if environment else state.environment}")
    lines.append(f"- Crew: {state.crew_count}")
    lines.append(f"- Duration: {state.mission_duration} days")
    lines.append(f"- Modules: {evaluation.module_count}")
    lines.append(f"- Total Area: {evaluation.total_area:.1f} m²")
    lines.append(f"- Connected: {'yes' if evaluation.connected else 'no'}")
    lines.append("")
    lines.append("## Resources")
    lines.append("| Resource | Status | Supply | Demand | Percentage |")
    lines.append("| --- | --- | --- | --- | --- |")
    for status in evaluation.resource_statuses.values():
        lines.append(
            f"| {status.resource} | {status.label} | {status.supply:.1f} | "
            f"{status.demand:.1f} | {status.percentage:.1f}% |"
        )
    lines.append("")
    lines.append("## Modules")
    lines.append("| Module | Type | Position | Size | Area (m²) | Sizing |")
    lines.append("| --- | --- | --- | --- | --- | --- |")
    for module in state.modules:
        lines.append(
            f"| {module.id} | {module.type} | ({module.x:.0f}, {module.y:.0f}) | "
            f"{module.width:.0f}x{module.height:.0f} | {module.area_m2:.1f} | "
            f"{evaluation.module_statuses.get(module.id, 'n/a')} |"
        )
    lines.append("")
    lines.append("## Warnings")
    if evaluation.warnings:
        for msg in evaluation.warnings:
            lines.append(f"- ⚠️ {msg}")
    else:
        lines.append("- ✅ No warnings.")
    return "\n".join(lines)


def export_csv(evaluation: Evaluation) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Resource", "Status", "Supply", "Demand", "Percentage"])
    for status in evaluation.resource_statuses.values():
        writer.writerow(
            [
                status.resource,
                status.level,
                round(status.supply, 3),
                round(status.demand, 3),
                round(status.percentage, 3),
            ]
        )
    writer.writerow(["total_area", "", round(evaluation.total_area, 3), "", ""])
    writer.writerow(["connected", evaluation.connected, "", "", ""])
    return buffer.getvalue()
