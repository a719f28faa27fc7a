"""Command line interface for the habitat_layout toolkit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from .advisory import AdvisoryClient
from .catalog import ENVIRONMENTS, SCENARIOS, get_scenario
from .io_schema import (
    design_from_session,
    design_schema,
    evaluation_schema,
    export_csv,
    export_markdown,
    load_design,
    load_settings,
    save_design,
)
from .models import MissionParameters
from .session import Session

DEFAULT_DESIGN_PATH = Path("examples/design.json")

# Starter modules for `init`: (type, x, y).
SEED_MODULES = [
    ("kitchen", 60, 60),
    ("hygiene", 140, 60),
    ("storage", 220, 60),
    ("gym", 300, 60),
    ("sleeping", 60, 140),
]


def _session(args: argparse.Namespace) -> Session:
    settings = load_settings(getattr(args, "settings", None))
    return Session.from_state(load_design(args.input), settings)


def cmd_init(args: argparse.Namespace) -> int:
    path = Path(args.out or DEFAULT_DESIGN_PATH)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    scenario = get_scenario(args.scenario)
    session = Session(
        MissionParameters(
            environment=scenario.environment,
            crew_count=scenario.crew_count,
            mission_duration=scenario.mission_duration,
        )
    )
    for module_type, x, y in SEED_MODULES:
        session.place_module(module_type, x, y)
    timestamp = datetime.now(timezone.utc).isoformat()
    save_design(design_from_session(session, timestamp=timestamp), path)
    print(f"Wrote {scenario.description} design to {path}")
    return 0


def cmd_evaluate(args: argparse.Namespace) -> int:
    session = _session(args)
    evaluation = session.last_evaluation
    print(json.dumps(evaluation.model_dump(mode="json"), indent=2))
    return 0 if not evaluation.warnings else 1


def cmd_export(args: argparse.Namespace) -> int:
    session = _session(args)
    evaluation = session.last_evaluation
    state = design_from_session(session)

    if args.format == "md":
        output = export_markdown(state, evaluation)
    elif args.format == "json":
        data = {
            "design": state.model_dump(mode="json", by_alias=True, exclude_none=True),
            "evaluation": evaluation.model_dump(mode="json"),
        }
        output = json.dumps(data, indent=2)
    elif args.format == "csv":
        output = export_csv(evaluation)
    else:
        raise ValueError(f"Unsupported export format: {args.format}")

    if args.out:
        Path(args.out).write_text(output)
    else:
        sys.stdout.write(output if output.endswith("\n") else output + "\n")
    return 0


def cmd_environments(args: argparse.Namespace) -> int:
    data = {
        "environments": [env.model_dump() for env in ENVIRONMENTS.values()],
        "scenarios": [s.model_dump() for s in SCENARIOS.values()],
    }
    print(json.dumps(data, indent=2))
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    if args.target == "design":
        data = design_schema()
    elif args.target == "evaluation":
        data = evaluation_schema()
    else:
        raise ValueError("Unknown schema target")
    print(json.dumps(data, indent=2))
    return 0


def cmd_advise(args: argparse.Namespace) -> int:
    session = _session(args)
    client = AdvisoryClient()
    try:
        content = client.analyze(session.snapshot(), prompt=args.prompt, model=args.model)
    finally:
        client.close()
    print(content or "No response")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitat_layout")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--settings", default=None, help="validation settings JSON file")
    sub = parser.add_subparsers(dest="command")

    p_init = sub.add_parser("init", help="write a starter design")
    p_init.add_argument("--out", default=None)
    p_init.add_argument("--scenario", choices=sorted(SCENARIOS), default="lunar-research")
    p_init.set_defaults(func=cmd_init)

    p_eval = sub.add_parser("evaluate", help="evaluate a saved design")
    p_eval.add_argument("--in", dest="input", required=True)
    p_eval.set_defaults(func=cmd_evaluate)

    p_exp = sub.add_parser("export", help="export design summary")
    p_exp.add_argument("--in", dest="input", required=True)
    p_exp.add_argument("--format", choices=["md", "json", "csv"], required=True)
    p_exp.add_argument("--out", default=None)
    p_exp.set_defaults(func=cmd_export)

    p_env = sub.add_parser("environments", help="list environments and scenarios")
    p_env.set_defaults(func=cmd_environments)

    p_schema = sub.add_parser("schema", help="print JSON schema")
    p_schema.add_argument("--target", choices=["design", "evaluation"], required=True)
    p_schema.set_defaults(func=cmd_schema)

    p_adv = sub.add_parser("advise", help="ask the advisory service about a design")
    p_adv.add_argument("--in", dest="input", required=True)
    p_adv.add_argument("--prompt", default=None)
    p_adv.add_argument("--model", default=None)
    p_adv.set_defaults(func=cmd_advise)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    try:
        return int(args.func(args))
    except Exception as exc:  # pragma: no cover - CLI top-level handler
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
