"""TimeSync CLI entry point.

Provides subcommands for running the level API server and for generating a
single level straight to the terminal. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from dotenv import load_dotenv

from timesync import __version__


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    TimeSync Level Generator

    Run the level API server or generate a single dual-timeline level from
    the command line. Configuration can be provided via CLI flags or
    environment variables. If both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                         Bind address for the web server (default: 0.0.0.0)
          PORT                         Port for the web server (default: 5000)
          TIMESYNC_MAX_ATTEMPTS        Candidate layouts tried before the fallback room
          TIMESYNC_MAX_SEARCH_STATES   Solver state budget per candidate
          TIMESYNC_LOG_LEVEL           debug|info|warn|error
          TIMESYNC_LOG_JSON            1 for JSON log lines

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Run the server on a custom port
          python run.py server --port 8080

          # Generate a 12x8 level at difficulty 7 with a fixed seed
          python run.py generate --width 12 --height 8 --difficulty 7 --seed 42

          # Same level as JSON, without levers
          python run.py generate --seed 42 --no-levers --json

          # Load variables from .env then run the server
          python run.py --env-file .env server
        """
    )

    parser = argparse.ArgumentParser(
        prog="TimeSync",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"TimeSync Level Generator {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # server subcommand
    server_parser = subparsers.add_parser(
        "server",
        help="Run the level API web server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask level API server",
    )
    server_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    server_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    server_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    server_parser.set_defaults(command="server")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate one level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Generate a verified-solvable level and print both timelines and the hint.",
    )
    gen_parser.add_argument("--width", type=int, default=10, help="Grid width (default: 10)")
    gen_parser.add_argument("--height", type=int, default=10, help="Grid height (default: 10)")
    gen_parser.add_argument("--difficulty", type=float, default=5.0, help="Difficulty 0..10 (default: 5)")
    gen_parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible level")
    gen_parser.add_argument("--no-keys", dest="keys", action="store_false", help="Disable key/door/chest mechanisms")
    gen_parser.add_argument("--no-levers", dest="levers", action="store_false", help="Disable lever/gate mechanisms")
    gen_parser.add_argument("--no-obstacles", dest="obstacles", action="store_false", help="Disable pushable obstacles")
    gen_parser.add_argument("--json", action="store_true", help="Print the level as JSON")
    gen_parser.set_defaults(command="generate")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    args = parser.parse_args(argv)
    return args


def _print_level(level) -> None:
    from timesync.level.api_helpers.solution import format_hint

    print(f"Seed: {level.seed}  Size: {level.width}x{level.height}  Difficulty: {level.difficulty:g}")
    print(f"Minimum moves: {level.min_moves}  Pushes: {level.boxes_pushed}  Attempts: {level.attempts}")
    if level.fallback:
        print("[WARN] Generation exhausted its attempts; showing the fallback room")
    print("\nPast:")
    print(level.render("past"))
    print("\nFuture:")
    print(level.render("future"))
    print(f"\nHint: {format_hint(level.solution_path)}")


def run_generate(args: argparse.Namespace) -> int:
    from timesync.level import LevelConfigError, LevelOptions, generate

    options = LevelOptions(enable_keys=args.keys, enable_levers=args.levers, enable_obstacles=args.obstacles)
    try:
        level = generate(args.width, args.height, args.difficulty, options, seed=args.seed)
    except LevelConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps(level.to_dict()))
    else:
        _print_level(level)
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    # Load .env if requested; otherwise the default .env if present (no error if missing)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()
    if mode == "generate":
        return run_generate(args)

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))

    def handle_sigint(sig, frame):
        print("\n[INFO] Shutting down server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    # Import server entrypoint only after environment is ready
    from timesync.server import start_server

    divider = "=" * 40
    lines = [
        divider,
        "  TimeSync Level API",
        divider,
        f"  {'Mode:':12} {mode.upper()}",
        f"  {'Host:':12} {host}",
        f"  {'Port:':12} {port}",
        divider,
        "",
    ]
    print("\n".join(lines))
    from timesync.logging_utils import log

    log.info(event="startup", mode=mode, host=host, port=port)
    start_server(host=host, port=port, debug=bool(getattr(args, "debug", False)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
