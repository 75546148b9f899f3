"""
JuryPack CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m jurypack_cli build --query-file PATH [--file PATH[:DESC]]... [--cid NAME=CID[:DESC]]...
                                 [--link "URL DESC"]... [--support CID]... [--jury PATH] --out PATH [--json]
    python -m jurypack_cli inspect <path-or-cid> [--json]
    python -m jurypack_cli upload <path> [--json]
    python -m jurypack_cli result <cid> [--json]
    python -m jurypack_cli config --init|--show

Environment Variables:
    JURYPACK_IPFS_GATEWAY       IPFS gateway base URL (default: https://ipfs.io)
    IPFS_PINNING_SERVICE        Pinning service base URL
    IPFS_PINNING_KEY            Pinning service bearer key
    JURYPACK_FETCH_RETRIES      Attempts per content fetch (default: 3)
    JURYPACK_FETCH_BACKOFF_MS   Delay between fetch attempts (default: 2000)
    JURYPACK_LOG_LEVEL          Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from jurypack_cli import __version__
from jurypack_cli.commands import package, store
from jurypack_cli.config import (
    DEFAULT_CONFIG_NAME,
    get_default_config_template,
    load_config,
)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VALIDATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="jurypack",
        description="JuryPack CLI - Build, inspect and publish jury query packages.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: ./{DEFAULT_CONFIG_NAME} or ~/.config/jurypack/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Assemble a query package zip",
        description="Bundle a primary query with supporting files, CID references and jury settings.",
    )
    build_parser.add_argument(
        "--query-file", "-q",
        type=str,
        required=True,
        help="Primary query document (JSON, or QUERY:/REF: lines)",
    )
    build_parser.add_argument(
        "--file", "-f",
        action="append",
        default=None,
        metavar="PATH[:DESC]",
        help="Supporting file to bundle (repeatable)",
    )
    build_parser.add_argument(
        "--cid",
        action="append",
        default=None,
        metavar="NAME=CID[:DESC]",
        help="External document already in the content store (repeatable)",
    )
    build_parser.add_argument(
        "--link",
        action="append",
        default=None,
        metavar='"URL DESC"',
        help="Reference URL appended to the query text (repeatable)",
    )
    build_parser.add_argument(
        "--support",
        action="append",
        default=None,
        metavar="CID",
        help="Support CID recorded in the manifest (repeatable)",
    )
    build_parser.add_argument(
        "--jury", "-j",
        type=str,
        default=None,
        help="Jury configuration file (JSON or YAML)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        required=True,
        help="Output path for the package zip",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=package.build_cmd)

    # --- inspect command ---
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Read a package from disk or by CID",
        description="Validate a query package and print its details.",
    )
    inspect_parser.add_argument(
        "source",
        type=str,
        help="Path to a package zip, or a content store CID",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    inspect_parser.set_defaults(func=package.inspect_cmd)

    # --- upload command ---
    upload_parser = subparsers.add_parser(
        "upload",
        help="Pin a file to the content store",
        description="Upload a file through the configured pinning service and print its CID.",
    )
    upload_parser.add_argument("path", type=str, help="File to upload")
    upload_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    upload_parser.set_defaults(func=store.upload_cmd)

    # --- result command ---
    result_parser = subparsers.add_parser(
        "result",
        help="Fetch and parse an evaluation justification",
        description="Fetch a justification document by CID and print scores and text.",
    )
    result_parser.add_argument("cid", type=str, help="Justification CID")
    result_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    result_parser.set_defaults(func=store.result_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default=DEFAULT_CONFIG_NAME,
        help=f"Path for config file (default: {DEFAULT_CONFIG_NAME})",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (JURYPACK_* prefix, IPFS_PINNING_KEY).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: jurypack config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=package validation failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if log_level.upper() == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
