# File: restgen/cli.py
"""
restgen - Command-Line Interface
================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate ./myapp from a SQLite database
    restgen rest_app MyApp sqlite:///app.db

    # PostgreSQL with credentials, into ./build, with progress output
    restgen rest_app MyApp postgresql://db.local/shop alice s3cret -o build -v

    # Show version
    restgen --version

Exit codes:
    0 — success
    1 — validation error (bad class name, schema errors)
    2 — generation error (introspection failed)
    3 — export error (write failed)
    4 — input error (class name or connection string missing, bad port)
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING, List, NoReturn, Optional, Sequence

if TYPE_CHECKING:
    from restgen.generator import GenerationReport

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root restgen logger based on verbosity level.

    Args:
        verbosity: -1 = silent, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.CRITICAL + 1

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("restgen")
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
    from restgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="restgen",
        description=(
            "restgen — REST application scaffolding.\n\n"
            "Introspects a database and writes a FastAPI + SQLAlchemy "
            "application with one CRUD controller per table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"restgen v{__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    rest_app: argparse.ArgumentParser = subparsers.add_parser(
        "rest_app",
        help="Generate a RESTful application directory structure.",
        description="Generate a RESTful application directory structure.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s MyApp sqlite:///app.db\n"
            "  %(prog)s MyApp postgresql://localhost/shop alice s3cret -o build\n"
        ),
    )

    # Missing positionals are reported by validate_invocation (exit code 4).
    rest_app.add_argument("class_name", nargs="?", default=None, metavar="CLASS",
                          help='Application class name, e.g. "MyApp" or "My::App".')
    rest_app.add_argument("dsn", nargs="?", default=None, metavar="DSN",
                          help="SQLAlchemy connection string, e.g. sqlite:///app.db.")
    rest_app.add_argument("user", nargs="?", default=None, metavar="USER",
                          help="Database user.")
    rest_app.add_argument("password", nargs="?", default=None, metavar="PASS",
                          help="Database password.")

    rest_app.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help="Directory in which <app_name>/ is created (default: current directory).",
    )
    rest_app.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Bind host written into the launcher script.",
    )
    rest_app.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Bind port written into the launcher script.",
    )

    verbosity_group = rest_app.add_argument_group("verbosity")
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
        help="Suppress all output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    from restgen.validators import MISSING_ARGUMENTS

    if report.success:
        return EXIT_SUCCESS
    if MISSING_ARGUMENTS in report.error_codes:
        return EXIT_INPUT_ERROR
    if report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_GENERATION_ERROR


def _run_rest_app(args: argparse.Namespace) -> int:
    """Run the rest_app command and return the exit code."""
    from pydantic import ValidationError

    from restgen.generator import RestAppGenerator
    from restgen.models import GeneratorConfig

    try:
        config: GeneratorConfig = GeneratorConfig(
            class_name=args.class_name or "",
            dsn=args.dsn or "",
            user=args.user,
            password=args.password,
            output_dir=args.output,
            host=args.host,
            port=args.port,
        )
    except ValidationError as exc:
        logger.error("Invalid arguments: %s", exc)
        return EXIT_INPUT_ERROR

    logger.info("Application: %s", config.class_name)
    logger.info("Output:      %s", config.output_dir)

    report: GenerationReport = RestAppGenerator().generate(config)
    if not args.quiet:
        print(report.summary())
    return _exit_code_for(report)


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
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose

    _setup_logging(verbosity)

    exit_code: int = _run_rest_app(args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("restgen.cli loaded.")
