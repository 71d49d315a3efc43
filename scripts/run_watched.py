#!/usr/bin/env python3
"""
impmon Runner Script.

Runs a Python script with hot reload installed for it and everything it imports.
Requires Python 3.11+.

Usage:
    python scripts/run_watched.py app.py [--timeout 500] [--console] -- [script args]
"""

import argparse
import importlib.util
import re
import sys
import time
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import impmon
from impmon.utils.logger import configure_logging, get_logger


logger = get_logger("run_watched")


def run_script(path: Path, argv: list[str]) -> None:
    """
    Execute a script as ``__main__`` with its file tracked.

    Args:
        path: Script to run
        argv: Arguments the script sees after its own name
    """
    spec = importlib.util.spec_from_file_location("__main__", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load {path}", path=str(path))

    module = importlib.util.module_from_spec(spec)
    sys.modules["__main__"] = module
    sys.argv = [str(path), *argv]
    sys.path.insert(0, str(path.parent))

    impmon.get_monitor().track(path, "__main__")
    spec.loader.exec_module(module)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run a Python script and reload its modules when they change"
    )
    parser.add_argument("script", type=Path, help="Script to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the script")
    parser.add_argument("--timeout", type=int, default=None, help="Cooldown in milliseconds")
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="REGEX",
        help="Never track paths matching this expression (repeatable)",
    )
    parser.add_argument("--console", action="store_true", help="Log tracked modules and reloads")
    parser.add_argument("--debug", action="store_true", help="Log internal diagnostics")
    parser.add_argument(
        "--reload-children",
        action="store_true",
        help="Re-execute cached children of reloaded modules",
    )

    args = parser.parse_args()
    configure_logging(level="DEBUG" if args.debug else None)

    script = args.script.resolve()
    if not script.is_file():
        parser.error(f"no such script: {args.script}")

    monitor = impmon.watch(
        ignore=[re.compile(p) for p in args.ignore] or None,
        timeout=args.timeout,
        console=args.console or None,
        debug=args.debug or None,
        reload_children=args.reload_children or None,
    )
    monitor.on(impmon.LOADED, lambda path, module: logger.info("reloaded", path=path))

    script_args = args.args[1:] if args.args[:1] == ["--"] else args.args
    try:
        run_script(script, script_args)
        logger.info("watching", tracked=len(monitor.list()))
        # Watch threads are daemons, so keep the process alive ourselves
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\nStopped by user")
    finally:
        monitor.unwatch()


if __name__ == "__main__":
    main()
