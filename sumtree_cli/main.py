"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m sumtree_cli build <leaves.json> [--json]
    python -m sumtree_cli prove <leaves.json> --index N [--out PATH] [--json]
    python -m sumtree_cli verify <proof.json> [--root-hash HEX --root-sum N] [--json]
    python -m sumtree_cli config --init

Environment Variables:
    SUMTREE_LOG_LEVEL           Log level (default: INFO)
    SUMTREE_LOG_FILE            Also log to this file
    SUMTREE_OUTPUT_FORMAT       Default output format: human, json
    SUMTREE_FIELD               Field preset: pasta, bn254
    SUMTREE_MIMC_ROUNDS         MiMC rounds (default: 220)
    SUMTREE_MAX_VALUE           Largest root sum accepted
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from sumtree_cli import __version__
from sumtree_cli.commands import build, prove, verify
from sumtree_cli.config import config_to_dict, get_default_config_template, load_config


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


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="sumtree",
        description="Merkle sum tree CLI - Build trees, issue inclusion proofs, and verify them.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./sumtree.json or ~/.config/sumtree/config.json)",
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
        help="Build a tree and print its root",
        description="Build a Merkle sum tree from a JSON leaf file.",
    )
    build_parser.add_argument(
        "leaves_path",
        type=str,
        help='JSON array of {"id": ..., "value": ...} objects',
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one leaf",
        description="Build a tree from a leaf file and emit a proof bundle for one index.",
    )
    prove_parser.add_argument(
        "leaves_path",
        type=str,
        help='JSON array of {"id": ..., "value": ...} objects',
    )
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="Leaf index to prove",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof bundle to this path",
    )
    prove_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the proof bundle as JSON",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof bundle",
        description="Recompute the root from a proof bundle and compare it to the expected root.",
    )
    verify_parser.add_argument(
        "bundle_path",
        type=str,
        help="Proof bundle written by 'sumtree prove'",
    )
    verify_parser.add_argument(
        "--root-hash",
        type=str,
        default=None,
        help="Expected root hash (0x hex); defaults to the bundle's root",
    )
    verify_parser.add_argument(
        "--root-sum",
        type=int,
        default=None,
        help="Expected root sum; required with --root-hash",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

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
        default="sumtree.json",
        help="Path for config file (default: sumtree.json)",
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
        print("You can also use environment variables (SUMTREE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(config_to_dict(args.cli_config), indent=2))
        return EXIT_SUCCESS

    print("Usage: sumtree config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
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
        if config.runtime.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
