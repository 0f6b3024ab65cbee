"""Command line entry point.

    python -m towerdef levels
    python -m towerdef run --level 1 --tower cannon:0,-2 --tower laser:-10,-3 --auto-waves
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from loguru import logger

from towerdef.config import settings
from towerdef.runner import HeadlessRunner, parse_tower_arg
from towerdef.simulation.level import get_level, list_levels


class _InterceptHandler(logging.Handler):
    """Route stdlib logging from the simulation modules into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)


def _cmd_levels(args: argparse.Namespace) -> int:
    for level_id in list_levels(settings.levels_dir):
        level = get_level(level_id, settings.levels_dir)
        print(f"{level.level_id:3d}  {level.name:20s}  waves={level.total_waves}  "
              f"gold={level.initial_gold}  {level.description}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        level = get_level(args.level, settings.levels_dir)
    except KeyError:
        logger.error(f"Unknown level: {args.level}")
        return 2
    except (ValueError, json.JSONDecodeError) as e:
        logger.error(f"Invalid level {args.level}: {e}")
        return 2

    try:
        towers = [parse_tower_arg(raw) for raw in args.tower]
    except ValueError as e:
        logger.error(str(e))
        return 2

    runner = HeadlessRunner(
        level,
        towers=towers,
        fps=args.fps,
        max_seconds=args.max_seconds,
        auto_waves=args.auto_waves,
    )
    result = runner.run()
    print(json.dumps(result, indent=2))
    return 0 if result["outcome"] == "victory" else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="towerdef", description="Tower defense simulation")
    parser.add_argument("--log-level", default=settings.log_level,
                        help="Log level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_levels = sub.add_parser("levels", help="List available levels")
    p_levels.set_defaults(func=_cmd_levels)

    p_run = sub.add_parser("run", help="Play a level headless and print the outcome")
    p_run.add_argument("--level", type=int, default=1)
    p_run.add_argument("--tower", action="append", default=[], metavar="TYPE:X,Z",
                       help="Tower to build before the first wave (repeatable)")
    p_run.add_argument("--fps", type=int, default=settings.tick_rate)
    p_run.add_argument("--max-seconds", type=float, default=settings.max_run_seconds)
    p_run.add_argument("--auto-waves", action="store_true",
                       help="Wait each wave's wave_delay before starting the next")
    p_run.set_defaults(func=_cmd_run)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
