"""
CLI Verify Command

Verify a proof bundle offline, against the root recorded in the bundle
or against an externally supplied root.

Usage:
    sumtree verify proof.json [--root-hash 0x.. --root-sum N] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from typing import Any

from sumtree.crypto.field import FieldElement, get_field
from sumtree.merkle.merkle_sum_tree import verify_inclusion_proof
from sumtree.merkle.models import Node
from sumtree.schemas.errors import SumTreeException
from sumtree_cli.io import load_bundle, print_error


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    bundle_path: str = ""
    leaf_id: str = ""
    leaf_value: int = 0
    root_hash: str = ""
    root_sum: int = 0
    external_root: bool = False
    ok: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"bundle: {summary.bundle_path}")
    print(f"leaf: {summary.leaf_id} (value {summary.leaf_value})")
    source = "supplied" if summary.external_root else "bundle"
    print(f"root ({source}): {summary.root_hash} sum={summary.root_sum}")
    print(f"ok: {str(summary.ok).lower()}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        Exit code (2 if the proof does not match the root)
    """
    runtime = args.cli_config.runtime
    output_json = args.json or args.cli_config.default_output_format == "json"

    if (args.root_hash is None) != (args.root_sum is None):
        print("Error: --root-hash and --root-sum must be given together", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        bundle = load_bundle(args.bundle_path)
        proof = bundle.proof.to_domain()
        field = get_field(bundle.proof.field)

        if args.root_hash is not None:
            root = Node(FieldElement.from_hex(args.root_hash, field), args.root_sum)
        else:
            root = bundle.root.to_node(field)

        ok = verify_inclusion_proof(
            proof,
            root,
            bundle.root.height,
            runtime.build_hasher(field),
        )
    except (SumTreeException, ValueError) as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    summary = VerifySummary(
        bundle_path=str(args.bundle_path),
        leaf_id=proof.leaf.id,
        leaf_value=proof.leaf.value,
        root_hash=root.hash.to_hex(),
        root_sum=root.value,
        external_root=args.root_hash is not None,
        ok=ok,
    )
    if not ok:
        logger.warning("Proof for leaf '%s' does not match root", proof.leaf.id)

    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED
