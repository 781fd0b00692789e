# File: mysqltranslate/cli.py
"""
MySQL Translate - Command-Line Interface
==========================================

Non-interactive CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Register a database and bind output files
    python -m mysqltranslate add shop mysql://root:pw@localhost:3306/shop
    python -m mysqltranslate map shop prisma prisma/schema.prisma
    python -m mysqltranslate map shop json schema.json

    # Introspect and write every bound file
    python -m mysqltranslate sync           # all databases
    python -m mysqltranslate -v sync shop   # one database, INFO logging

    # Show what is on disk / in the database
    python -m mysqltranslate view shop prisma --source disk

    # Everything registered
    python -m mysqltranslate list

Exit codes:
    0 — success
    1 — sync / write failure
    2 — DSL parse error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, NoReturn, Optional, Sequence

if TYPE_CHECKING:
    from mysqltranslate.session import SessionRegistry
    from mysqltranslate.sync import DatabaseSync

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_SYNC_ERROR: int = 1
EXIT_PARSE_ERROR: int = 2
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int, default_level: int = logging.WARNING) -> None:
    """
    Configure the root mysqltranslate logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = *default_level*, 1 = INFO, 2+ = DEBUG.
        default_level: Level used when neither -v nor -q is given.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = default_level
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("mysqltranslate")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from mysqltranslate import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="mysqltranslate",
        description=(
            "MySQL Translate — introspect MySQL databases and keep JSON and "
            "Prisma schema files in sync with them."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s add shop mysql://root:pw@localhost:3306/shop\n"
            "  %(prog)s map shop prisma prisma/schema.prisma\n"
            "  %(prog)s sync\n"
            "  %(prog)s view shop prisma --source disk\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"MySQL Translate v{__version__}",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Configuration file (JSON or YAML). Defaults come from $STORAGE.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    # --- Commands ---
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    commands.add_parser("list", help="List registered databases and their files.")

    add_cmd = commands.add_parser("add", help="Register a database.")
    add_cmd.add_argument("name", help="Display name.")
    add_cmd.add_argument("url", help="Connection URL, e.g. mysql://user:pw@host:3306/db.")

    remove_cmd = commands.add_parser("remove", help="Unregister a database.")
    remove_cmd.add_argument("name")

    map_cmd = commands.add_parser("map", help="Bind an output file to a database.")
    map_cmd.add_argument("name")
    map_cmd.add_argument("format", choices=["json", "prisma"])
    map_cmd.add_argument("path")

    sync_cmd = commands.add_parser("sync", help="Introspect and write bound files.")
    sync_cmd.add_argument("name", nargs="?", default=None, help="Only this database.")

    view_cmd = commands.add_parser("view", help="Print a schema without writing it.")
    view_cmd.add_argument("name")
    view_cmd.add_argument("format", choices=["json", "prisma"])
    view_cmd.add_argument(
        "--source",
        choices=["database", "disk", "both"],
        default="database",
        help="Where to read the schema from (default: database).",
    )

    write_cmd = commands.add_parser("write", help="Write one bound file.")
    write_cmd.add_argument("name")
    write_cmd.add_argument("format", choices=["json", "prisma"])

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _run_list(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    databases = registry.sorted_databases()
    if not databases:
        print("No databases registered.")
        return EXIT_SUCCESS
    for entry in databases:
        print(entry.display())
    return EXIT_SUCCESS


def _run_add(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    from mysqltranslate.session import DatabaseEntry

    if registry.find(args.name) is not None:
        logger.error("A database named '%s' already exists.", args.name)
        return EXIT_INPUT_ERROR
    if not registry.add_database(DatabaseEntry(name=args.name, db_url=args.url)):
        logger.error("Database '%s' was not added (empty or duplicate URL).", args.name)
        return EXIT_INPUT_ERROR
    print(f"Added database '{args.name}'.")
    return EXIT_SUCCESS


def _run_remove(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    if not registry.remove_database(args.name):
        logger.error("No database named '%s'.", args.name)
        return EXIT_INPUT_ERROR
    print(f"Removed database '{args.name}'.")
    return EXIT_SUCCESS


def _run_map(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    from mysqltranslate.models import AcceptedFormat

    entry = registry.find(args.name)
    if entry is None:
        logger.error("No database named '%s'.", args.name)
        return EXIT_INPUT_ERROR
    entry.update_disk_mapping(AcceptedFormat.from_string(args.format), args.path)
    registry.save()
    print(f"Bound {args.format} output of '{args.name}' to {args.path}.")
    return EXIT_SUCCESS


def _run_sync(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    if args.name is None:
        reports = syncer.sync_all(registry)
    else:
        entry = registry.find(args.name)
        if entry is None:
            logger.error("No database named '%s'.", args.name)
            return EXIT_INPUT_ERROR
        reports = [syncer.sync_database(entry)]

    if not reports:
        print("No databases registered.")
        return EXIT_SUCCESS
    for report in reports:
        print(report.summary())
    return EXIT_SUCCESS if all(r.success for r in reports) else EXIT_SYNC_ERROR


def _run_view(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    from mysqltranslate.introspector import IntrospectionConnectionError
    from mysqltranslate.models import AcceptedFormat

    entry = registry.find(args.name)
    if entry is None:
        logger.error("No database named '%s'.", args.name)
        return EXIT_INPUT_ERROR
    if entry.get_mapping(AcceptedFormat.from_string(args.format)) is None:
        logger.error("Database '%s' has no %s file bound.", args.name, args.format)
        return EXIT_INPUT_ERROR
    try:
        text: str = syncer.view(entry, args.format, source=args.source)
    except (OSError, IntrospectionConnectionError) as exc:
        logger.error("Could not load %s schema of '%s': %s", args.format, args.name, exc)
        return EXIT_SYNC_ERROR
    print(text, end="")
    return EXIT_SUCCESS


def _run_write(
    args: argparse.Namespace, registry: SessionRegistry, syncer: DatabaseSync
) -> int:
    from mysqltranslate.models import AcceptedFormat
    from mysqltranslate.session import DatabaseEntry

    entry = registry.find(args.name)
    if entry is None:
        logger.error("No database named '%s'.", args.name)
        return EXIT_INPUT_ERROR
    mapping = entry.get_mapping(AcceptedFormat.from_string(args.format))
    if mapping is None:
        logger.error("Database '%s' has no %s file bound.", args.name, args.format)
        return EXIT_INPUT_ERROR

    single: DatabaseEntry = entry.model_copy(update={"disk_mappings": [mapping]})
    report = syncer.sync_database(single)
    print(report.summary())
    return EXIT_SUCCESS if report.success else EXIT_SYNC_ERROR


_COMMANDS: Dict[str, Callable[..., int]] = {
    "list": _run_list,
    "add": _run_add,
    "remove": _run_remove,
    "map": _run_map,
    "sync": _run_sync,
    "view": _run_view,
    "write": _run_write,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    from mysqltranslate.config import TranslateConfig, load_config_file
    from mysqltranslate.parser import RelationParseError
    from mysqltranslate.session import SessionRegistry
    from mysqltranslate.sync import DatabaseSync

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    # --- Configuration ---
    try:
        if args.config is not None:
            config: TranslateConfig = load_config_file(Path(args.config))
        else:
            config = TranslateConfig.from_env()
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    # -v / -q win over the configured level.
    _setup_logging(verbosity, default_level=getattr(logging, config.log_level))

    # --- Session registry ---
    registry: SessionRegistry = SessionRegistry(config.session_path)
    try:
        registry.load()
    except (OSError, ValueError) as exc:
        logger.error("Failed to load session registry: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Session: %s (%d databases)", registry.path, len(registry))

    # --- Dispatch ---
    syncer: DatabaseSync = DatabaseSync(config)
    try:
        exit_code: int = _COMMANDS[args.command](args, registry, syncer)
    except RelationParseError as exc:
        logger.error("DSL parse error: %s", exc)
        exit_code = EXIT_PARSE_ERROR
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        exit_code = EXIT_SYNC_ERROR

    if exit_code != EXIT_SUCCESS:
        logger.error("Command '%s' failed with exit code %d.", args.command, exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_SYNC_ERROR",
    "EXIT_PARSE_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("mysqltranslate.cli loaded.")
