import logging
import os
import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, current_app, jsonify, request

from habitat_layout.advisory import AdvisoryChannel, AdvisoryClient, render_advice_html
from habitat_layout.catalog import ENVIRONMENTS, MODULE_REQUIREMENTS, SCENARIOS
from habitat_layout.errors import (
    AdvisoryServiceError,
    InvalidModuleType,
    MalformedPersistedState,
    UnknownCorridor,
    UnknownModule,
    UnknownScenario,
)
from habitat_layout.io_schema import design_from_session, dump_design, parse_design
from habitat_layout.models import Point
from habitat_layout.session import Session

logger = logging.getLogger(__name__)

_PARAMETER_FIELDS = {
    "environment": "environment",
    "crewCount": "crew_count",
    "missionDuration": "mission_duration",
}


def _session() -> Session:
    return current_app.config["SESSION"]


def _session_lock() -> threading.Lock:
    # Guards the session and the advisory channel across request threads.
    return current_app.config["SESSION_LOCK"]


def _payload() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _state_payload(session: Session) -> Dict[str, Any]:
    return {
        "design": session.snapshot(),
        "outline": session.layout.outline.model_dump(),
        "evaluation": session.last_evaluation.model_dump(mode="json"),
    }


def _point(raw: Any) -> Point:
    if not isinstance(raw, dict):
        raise ValueError("point must be an object with x and y")
    return Point(x=float(raw["x"]), y=float(raw["y"]))


def _coords(data: Dict[str, Any]) -> Tuple[float, float]:
    try:
        return float(data["x"]), float(data["y"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("x and y must be numbers") from exc


def _advice_payload(channel: AdvisoryChannel) -> Dict[str, Any]:
    return {
        "pending": channel.pending,
        "html": channel.display_html(),
        "ticket": channel.latest_ticket,
    }


def create_app(
    session: Optional[Session] = None,
    advisory_client: Optional[AdvisoryClient] = None,
) -> Flask:
    app = Flask(__name__)
    app.config["SESSION"] = session or Session()
    app.config["SESSION_LOCK"] = threading.Lock()
    app.config["ADVISORY_CLIENT"] = advisory_client
    app.config["ADVISORY_CHANNEL"] = AdvisoryChannel()

    @app.route("/health")
    def health():
        return jsonify({"ok": True})

    @app.route("/catalog", methods=["GET"])
    def catalog():
        return jsonify({
            "environments": [env.model_dump() for env in ENVIRONMENTS.values()],
            "modules": [req.model_dump() for req in MODULE_REQUIREMENTS.values()],
            "scenarios": [s.model_dump() for s in SCENARIOS.values()],
        })

    @app.route("/layout", methods=["GET"])
    def get_layout():
        with _session_lock():
            return jsonify(_state_payload(_session()))

    @app.route("/evaluation", methods=["GET"])
    def get_evaluation():
        with _session_lock():
            return jsonify(_session().last_evaluation.model_dump(mode="json"))

    @app.route("/modules", methods=["POST"])
    def place_module():
        data = _payload()
        with _session_lock():
            try:
                x, y = _coords(data)
                module = _session().place_module(str(data.get("type", "")), x, y)
            except InvalidModuleType as exc:
                return jsonify({"error": str(exc), "moduleType": exc.module_type}), 400
            except ValueError as exc:
                return jsonify({"error": str(exc)}), 400
            return jsonify({"module": module.model_dump(), **_state_payload(_session())}), 201

    @app.route("/modules/at", methods=["GET"])
    def module_at():
        x = request.args.get("x", type=float)
        y = request.args.get("y", type=float)
        if x is None or y is None:
            return jsonify({"error": "x and y query parameters required"}), 400
        with _session_lock():
            module = _session().module_at(x, y)
            return jsonify({"module": module.model_dump() if module else None})

    @app.route("/modules/<module_id>/move", methods=["POST"])
    def move_module(module_id: str):
        data = _payload()
        with _session_lock():
            try:
                x, y = _coords(data)
                module = _session().move_module(module_id, x, y)
            except UnknownModule as exc:
                return jsonify({"error": str(exc)}), 404
            except ValueError as exc:
                return jsonify({"error": str(exc)}), 400
            return jsonify({"module": module.model_dump(), **_state_payload(_session())})

    @app.route("/modules/<module_id>", methods=["DELETE"])
    def remove_module(module_id: str):
        with _session_lock():
            try:
                _session().remove_module(module_id)
            except UnknownModule as exc:
                return jsonify({"error": str(exc)}), 404
            return jsonify(_state_payload(_session()))

    @app.route("/corridors", methods=["POST"])
    def add_corridor():
        data = _payload()
        with _session_lock():
            try:
                corridor = _session().add_corridor(_point(data.get("start")), _point(data.get("end")))
            except (KeyError, TypeError, ValueError) as exc:
                return jsonify({"error": f"Invalid corridor payload: {exc}"}), 400
            return jsonify({"corridor": corridor.model_dump(), **_state_payload(_session())}), 201

    @app.route("/corridors/<corridor_id>", methods=["DELETE"])
    def remove_corridor(corridor_id: str):
        with _session_lock():
            try:
                _session().remove_corridor(corridor_id)
            except UnknownCorridor as exc:
                return jsonify({"error": str(exc)}), 404
            return jsonify(_state_payload(_session()))

    @app.route("/mission", methods=["POST"])
    def update_mission():
        data = _payload()
        changes = {field: data[key] for key, field in _PARAMETER_FIELDS.items() if key in data}
        with _session_lock():
            try:
                _session().update_parameters(**changes)
            except ValueError as exc:
                return jsonify({"error": str(exc)}), 400
            return jsonify(_state_payload(_session()))

    @app.route("/viewport", methods=["POST"])
    def set_viewport():
        data = _payload()
        with _session_lock():
            try:
                _session().set_viewport(float(data["width"]), float(data["height"]))
            except (KeyError, TypeError, ValueError) as exc:
                return jsonify({"error": f"Invalid viewport: {exc}"}), 400
            return jsonify(_state_payload(_session()))

    @app.route("/scenario/<scenario_id>", methods=["POST"])
    def load_scenario(scenario_id: str):
        with _session_lock():
            try:
                _session().load_scenario(scenario_id)
            except UnknownScenario as exc:
                return jsonify({"error": str(exc)}), 404
            return jsonify(_state_payload(_session()))

    @app.route("/clear", methods=["POST"])
    def clear_base():
        with _session_lock():
            _session().clear()
            return jsonify(_state_payload(_session()))

    @app.route("/design", methods=["GET"])
    def save_design():
        with _session_lock():
            return jsonify(dump_design(design_from_session(_session())))

    @app.route("/design", methods=["POST"])
    def load_design():
        data = request.get_json(force=True, silent=True)
        with _session_lock():
            try:
                _session().load_state(parse_design(data))
            except MalformedPersistedState as exc:
                return jsonify({"error": str(exc)}), 400
            return jsonify(_state_payload(_session()))

    @app.route("/api/ai/analyze", methods=["POST"])
    def analyze():
        data = _payload()
        channel: AdvisoryChannel = app.config["ADVISORY_CHANNEL"]
        with _session_lock():
            design = data.get("design") or _session().snapshot()
            client = app.config["ADVISORY_CLIENT"]
            if client is None:
                client = app.config["ADVISORY_CLIENT"] = AdvisoryClient()
            ticket = channel.begin()

        # The remote call runs unlocked so edits are not blocked behind it.
        try:
            content = client.analyze(design, prompt=data.get("prompt"), model=data.get("model"))
        except AdvisoryServiceError as exc:
            with _session_lock():
                superseded = not channel.fail(ticket, exc)
            return (
                jsonify({"error": str(exc), "ticket": ticket, "superseded": superseded}),
                exc.status_code or 502,
            )

        with _session_lock():
            superseded = not channel.resolve(ticket, content)
        if superseded:
            logger.info("Advisory result %d superseded by %d", ticket, channel.latest_ticket)
        return jsonify({
            "content": content,
            "html": render_advice_html(content),
            "ticket": ticket,
            "superseded": superseded,
        })

    @app.route("/api/ai/analyze/latest", methods=["GET"])
    def latest_advice():
        with _session_lock():
            return jsonify(_advice_payload(app.config["ADVISORY_CHANNEL"]))

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5173))
    create_app().run(host="0.0.0.0", port=port, debug=True, use_reloader=False)
