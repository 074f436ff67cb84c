"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m piecetree_cli verify <path> [--piece-length N] [--json] [--debug]
    python -m piecetree_cli layer <piece_length> [--json]
    python -m piecetree_cli empty-hash <layer> [--json]
    python -m piecetree_cli config --show

Environment Variables:
    PIECETREE_MAX_LAYER         Root reduction bound (default: 100)
    PIECETREE_LOG_LEVEL         Log level (default: INFO)
    PIECETREE_LOG_FILE          Also write logs to this file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from piecetree import __version__
from piecetree.config.runtime import RuntimeConfig, load_config
from piecetree_cli.commands import empty_hash, layer, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


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


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="piecetree",
        description="BEP-0052 Merkle tools - validate piece layers and inspect tree layers.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: ./piecetree.yaml or ~/.config/piecetree/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify the piece layers in a document",
        description="Check that every piece layers entry reduces to its root.",
    )
    verify_parser.add_argument(
        "path",
        type=str,
        help="JSON or YAML document with piece_length and piece_layers",
    )
    verify_parser.add_argument(
        "--piece-length",
        type=int,
        default=None,
        help="Piece length in bytes (overrides the document)",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include detailed checks in output",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- layer command ---
    layer_parser = subparsers.add_parser(
        "layer",
        help="Show the tree layer for a piece length",
    )
    layer_parser.add_argument("piece_length", type=int, help="Piece length in bytes")
    layer_parser.add_argument("--json", action="store_true", help="JSON output")
    layer_parser.set_defaults(func=layer.layer_cmd)

    # --- empty-hash command ---
    empty_parser = subparsers.add_parser(
        "empty-hash",
        help="Show the hash of an empty subtree at a layer",
    )
    empty_parser.add_argument("layer", type=_non_negative_int, help="Layer number")
    empty_parser.add_argument("--json", action="store_true", help="JSON output")
    empty_parser.set_defaults(func=empty_hash.empty_hash_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Show effective configuration",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: piecetree config --show")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config: RuntimeConfig = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
