"""CLI entry point for evrun.

Parses the project path from command-line arguments, discovers
``pyproject.toml``, imports local plugins, and publishes the start event.
"""

import argparse
import importlib
import sys
from pathlib import Path

from loguru import logger

from eventon._types import Subscriber
from eventon.config import load_config, parse_config
from eventon.default import set_default_dispatcher
from eventon.dispatcher import Dispatcher
from eventon.exceptions import EventonError, FatalPublishError

log = logger.bind(source=__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="evrun",
        description="Run an eventon application from its project directory.",
    )
    parser.add_argument(
        "project_path",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the project directory containing pyproject.toml "
        "(defaults to current directory).",
    )
    parser.add_argument(
        "--event",
        dest="start_event",
        default=None,
        help="Event name to publish once plugins are loaded "
        "(overrides start_event in [tool.eventon]).",
    )
    parser.add_argument(
        "--lock",
        dest="enable_lock",
        action="store_true",
        default=False,
        help="Serialize publishes with a dispatcher-wide lock.",
    )
    return parser


def import_plugins(dispatcher: Dispatcher, module_paths: list[str]) -> None:
    """Import local plugin modules.

    Modules register listeners at import time, usually with
    ``@eventon.on(...)`` on the default dispatcher.  A module that also
    defines ``subscribed_events()`` is subscribed to *dispatcher* as a
    whole.

    Args:
        dispatcher: Dispatcher that receives module subscriptions.
        module_paths: Dotted module paths, e.g. ``["shop.listeners"]``.
    """
    for module_path in module_paths:
        log.debug("Importing local plugin '{}'", module_path)
        module = importlib.import_module(module_path)
        if isinstance(module, Subscriber):
            dispatcher.subscribe(module)
        log.info("Local plugin '{}' loaded", module_path)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: load config, import plugins, publish the start event.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    parser = _build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    project_path: Path = args.project_path.resolve()

    if not project_path.is_dir():
        log.error("Not a directory: {}", project_path)
        sys.exit(1)

    pyproject_path = project_path / "pyproject.toml"
    if not pyproject_path.is_file():
        log.error("No pyproject.toml found in {}", project_path)
        sys.exit(1)

    overrides: dict[str, object] = {}
    if args.enable_lock:
        overrides["enable_lock"] = True
    if args.start_event:
        overrides["start_event"] = args.start_event

    try:
        config = load_config(pyproject_path)
        if overrides:
            config = parse_config(config.model_dump() | overrides)
    except EventonError:
        log.exception("Invalid eventon configuration for {}", project_path)
        sys.exit(1)

    dispatcher = Dispatcher.from_config(config)
    set_default_dispatcher(dispatcher)

    # Local plugins are modules of the project itself
    if str(project_path) not in sys.path:
        sys.path.insert(0, str(project_path))

    try:
        import_plugins(dispatcher, config.local_plugins)
    except Exception:
        log.exception("Failed to import local plugins of {}", project_path)
        dispatcher.shutdown()
        sys.exit(1)

    log.info("Starting application '{}' from {}", config.start_event, project_path)
    try:
        dispatcher.must_publish(config.start_event, {"project_path": project_path})
    except FatalPublishError:
        log.exception("Start event '{}' failed", config.start_event)
        sys.exit(1)
    finally:
        dispatcher.shutdown()
