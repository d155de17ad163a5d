"""
FTNed Entry Point

Usage:
    python -m ftned areas               # List areas
    python -m ftned read AREA [N]       # Read a message
    python -m ftned quote AREA N        # Print a reply citation
    python -m ftned stats               # Message statistics
    python -m ftned init-config         # Write a default config
    python -m ftned --help              # Show help
"""

import argparse
import sys
import logging
from pathlib import Path

from . import __version__
from .errors import ConfigError, DatabaseConnectionError


def setup_logging(level: str, log_file: str | None = None):
    """Configure logging for the application."""
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftned",
        description="FTNed - FidoNet message reader for jnode SQL databases"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"FTNed {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("ftned.toml"),
        help="Path to configuration file (default: ftned.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, else INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    areas_parser = subparsers.add_parser("areas", help="List areas")
    areas_parser.add_argument("--filter", "-f", default="", help="Show areas whose name contains text")

    read_parser = subparsers.add_parser("read", help="Read a message")
    read_parser.add_argument("area", help="Area name")
    read_parser.add_argument("number", type=int, nargs="?", default=0,
                             help="Message number (default: next unread)")

    quote_parser = subparsers.add_parser("quote", help="Print a reply citation")
    quote_parser.add_argument("area", help="Area name")
    quote_parser.add_argument("number", type=int, help="Message number")
    quote_parser.add_argument("--width", type=int, default=79, help="Wrap column (default: 79)")
    quote_parser.add_argument("--margin", type=int, default=79,
                              help="Wrap column for quoted lines (default: 79)")

    subparsers.add_parser("stats", help="Message statistics")

    init_parser = subparsers.add_parser("init-config", help="Write a default configuration file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    config_parser = subparsers.add_parser("config", help="Check configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current config")

    return parser


def main():
    """Main entry point for FTNed."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from .cli import commands

    if args.command == "init-config":
        setup_logging(args.log_level or "INFO")
        sys.exit(commands.run_init_config(args))

    if args.command == "config":
        setup_logging(args.log_level or "INFO")
        try:
            sys.exit(commands.run_config(args))
        except ConfigError as e:
            print(f"Error: {e}")
            sys.exit(1)

    from .config import load_config
    from .core.session import EditorSession

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging(args.log_level or "INFO")
        logging.getLogger("ftned").error(f"Fatal error: {e}")
        sys.exit(1)

    setup_logging(args.log_level or config.logging.level, config.logging.file or None)
    logger = logging.getLogger("ftned")

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error(f"Configuration error: {err}")
        sys.exit(1)

    handlers = {
        "areas": commands.run_areas,
        "read": commands.run_read,
        "quote": commands.run_quote,
        "stats": commands.run_stats,
    }

    session = EditorSession(config)
    try:
        logger.debug(f"Starting FTNed v{__version__}")
        session.setup()
        sys.exit(handlers[args.command](args, session))
    except (ConfigError, DatabaseConnectionError) as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutdown requested")
        sys.exit(0)
    finally:
        session.close()


if __name__ == "__main__":
    main()
