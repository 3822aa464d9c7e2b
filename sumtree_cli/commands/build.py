"""
CLI Build Command

Build a sum tree from a leaf file and print its root commitment.

Usage:
    sumtree build leaves.json [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass
from dataclasses import field as dc_field
from typing import Any

from sumtree.schemas.errors import SumTreeException
from sumtree_cli.io import load_leaves, print_error


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a tree build for CLI output."""
    leaves_path: str = ""
    field: str = ""
    leaf_count: int = 0
    size: int = 0
    height: int = 0
    root_hash: str = ""
    root_sum: int = 0
    zero_index: list[int] = dc_field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: BuildSummary) -> None:
    """Print summary in human-readable format."""
    print(f"leaves: {summary.leaves_path} ({summary.leaf_count} entries)")
    print(f"field: {summary.field}")
    print(f"height: {summary.height} ({summary.size} slots)")
    print(f"root_hash: {summary.root_hash}")
    print(f"root_sum: {summary.root_sum}")
    if summary.zero_index:
        print(f"free slots: {', '.join(str(i) for i in summary.zero_index)}")


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Returns:
        Exit code
    """
    runtime = args.cli_config.runtime
    output_json = args.json or args.cli_config.default_output_format == "json"

    try:
        leafs = load_leaves(args.leaves_path, runtime.prime_field)
        tree = runtime.build_tree(leafs)
    except SumTreeException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    summary = BuildSummary(
        leaves_path=str(args.leaves_path),
        field=tree.field.name,
        leaf_count=len(leafs),
        size=tree.size,
        height=tree.height,
        root_hash=tree.root_hash.to_hex(),
        root_sum=tree.root_sum,
        zero_index=list(tree.zero_index),
    )
    logger.info("Built tree of height %d from %s", tree.height, args.leaves_path)

    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
