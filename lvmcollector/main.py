"""Command-line entrypoint for the End-LVM collector."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from loguru import logger

from .config import AppConfig, load_config
from .errors import CollectorError
from .frames import load_frame
from .logging_utils import configure_logging
from .packaging import package_sessions
from .paths import default_session_name
from .session.pipeline import replay_session
from .writer.session_writer import SessionWriter


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="lvmcollector")
    p.add_argument(
        "--config",
        default=os.environ.get("LVMCOLLECTOR_CONFIG"),
        help="Path to config YAML (default: built-in defaults or LVMCOLLECTOR_CONFIG).",
    )
    p.add_argument("--log-level", default=None, help="Override logging.level.")
    sub = p.add_subparsers(dest="cmd", required=True)

    dry = sub.add_parser("dry-run", help="Replay a recorded event log into one session.")
    dry.add_argument("--events", type=Path, required=True, help="Input event JSONL log.")
    dry.add_argument("--steps", type=_positive_int, required=True, help="Number of steps.")
    dry.add_argument("--thoughts", type=Path, default=None, help="Thought annotation JSONL.")
    dry.add_argument("--frame", type=Path, default=None, help="Raw BGRA frame or image file.")
    dry.add_argument("--dataset-root", type=Path, default=None)
    dry.add_argument("--session-name", default=None)
    dry.add_argument("--run-id", type=_positive_int, default=1)
    dry.add_argument("--long-goal", default="")
    dry.add_argument("--mid-goal", default="")

    pkg = sub.add_parser("package", help="Zip finished sessions.")
    pkg.add_argument("--session", dest="sessions", action="append", default=[])
    pkg.add_argument("--output", type=Path, required=True)
    pkg.add_argument("--dataset-root", type=Path, default=None)
    pkg.add_argument("--delete-after", action="store_true")

    sub.add_parser("print-config", help="Load config and print resolved values.")
    return p.parse_args(argv)


def _dry_run(config: AppConfig, args: argparse.Namespace) -> int:
    frame = None
    if args.frame is not None:
        frame = load_frame(args.frame, config.video.record_resolution)
    session = replay_session(
        args.events,
        step_count=args.steps,
        step_duration=config.timing.step_duration,
        thoughts_path=args.thoughts,
        frame=frame,
    )
    session_name = args.session_name or default_session_name(run_id=args.run_id)
    writer = SessionWriter(config, dataset_root=args.dataset_root)
    layout = writer.write(
        session,
        session_name=session_name,
        long_goal=args.long_goal,
        mid_goal=args.mid_goal,
    )
    diagnostics = session.diagnostics
    if diagnostics.dropped_events or diagnostics.dropped_thoughts:
        logger.warning(
            "Session {} dropped {} events and {} thoughts outside the recorded range",
            session_name,
            diagnostics.dropped_events,
            diagnostics.dropped_thoughts,
        )
    print(layout.root_dir)
    return 0


def _package(config: AppConfig, args: argparse.Namespace) -> int:
    output = package_sessions(
        Path(args.dataset_root or config.dataset_root),
        args.output,
        session_names=args.sessions,
        delete_after=args.delete_after,
    )
    print(output)
    return 0


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = _parse_args(argv)

    config = load_config(args.config) if args.config else AppConfig()
    configure_logging(config.logging.log_dir, args.log_level or config.logging.level)

    if args.cmd == "print-config":
        print(json.dumps(config.model_dump(mode="json"), indent=2, sort_keys=True))
        return

    try:
        if args.cmd == "dry-run":
            code = _dry_run(config, args)
        else:
            code = _package(config, args)
    except (CollectorError, OSError, ValueError) as exc:
        logger.error("{} failed: {}", args.cmd, exc)
        raise SystemExit(2) from exc
    raise SystemExit(code)


if __name__ == "__main__":
    main()
