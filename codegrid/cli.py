"""
Codegrid CLI - Command-line interface for the engine.

Usage:
    codegrid levels                                 List the level catalog
    codegrid run <program.json> --level N [--seed S]  Run a program and show its trace
    codegrid validate <program.json> --level N      Check a program against a level
    codegrid serve [--host H] [--port P]            Start the HTTP API
"""

import argparse
import logging
import os
import sys

from .errors import CodegridError, ProgramValidationError

LOG_LEVEL = os.getenv("CODEGRID_LOG_LEVEL", "WARNING")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Codegrid - Block programming puzzle engine",
        prog="codegrid",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Levels command
    subparsers.add_parser("levels", help="List the level catalog")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run a program on a level")
    run_parser.add_argument("program_file", help="Path to program JSON")
    run_parser.add_argument("--level", "-l", type=int, required=True, help="Level id")
    run_parser.add_argument("--seed", type=int, default=None, help="Seed for generated layouts")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a program against a level")
    validate_parser.add_argument("program_file", help="Path to program JSON")
    validate_parser.add_argument("--level", "-l", type=int, required=True, help="Level id")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "levels":
        return cmd_levels(args)
    elif args.command == "run":
        return cmd_run(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_level(level_id: int):
    from .levels import get_level

    level = get_level(level_id)
    if level is None:
        print(f"Error: Level {level_id} not found")
        sys.exit(1)
    return level


def _load_program(path: str):
    from .program import loads_program

    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)

    try:
        return loads_program(text)
    except ProgramValidationError as e:
        print("Error: Program could not be parsed")
        for err in e.errors:
            print(f"  - {err}")
        sys.exit(1)


def cmd_levels(args):
    """List the level catalog."""
    from .levels import list_levels

    for level in list_levels():
        extras = []
        if level.has_walls:
            extras.append("walls")
        if level.collectibles:
            extras.append(f"{level.collectibles} items")
        suffix = f" [{', '.join(extras)}]" if extras else ""
        print(f"{level.level_id:>2}. {level.name} - {level.concept} "
              f"(max {level.max_blocks} blocks){suffix}")


def cmd_validate(args):
    """Validate a program against a level."""
    from .program import validate_for_level

    level = _load_level(args.level)
    program = _load_program(args.program_file)
    result = validate_for_level(program, level)

    if result.warnings:
        print("Warnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if not result.valid:
        print("Errors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print(f"Program is valid for level {level.level_id} "
          f"({program.top_level_count}/{level.max_blocks} blocks)")


def cmd_run(args):
    """Run a program and print its trace and verdict."""
    from .levels import generate_world
    from .program import validate_for_level
    from .session import start_run

    level = _load_level(args.level)
    program = _load_program(args.program_file)

    result = validate_for_level(program, level)
    if not result.valid:
        print("Errors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    try:
        world = generate_world(level, seed=args.seed)
        handle = start_run(program, world, goal=level.goal)
    except CodegridError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Level {level.level_id}: {level.name}")
    print(f"Start {world.start}, goal {world.goal}")
    for event in handle.events():
        print(f"  {event.sequence:>3}  {event.describe()}")

    outcome = handle.require_outcome()
    if outcome.terminated_early:
        print("Program stopped early at a BREAK outside any loop")
    print(outcome.goal.message)
    if not outcome.success:
        sys.exit(2)


def cmd_serve(args):
    """Start the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("codegrid.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
