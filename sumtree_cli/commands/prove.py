"""
CLI Prove Command

Build a sum tree from a leaf file and emit an inclusion proof bundle
(proof plus the root it was issued against).

Usage:
    sumtree prove leaves.json --index 2 [--out proof.json] [--json]
"""

from __future__ import annotations

import logging
from argparse import Namespace

from sumtree.schemas.errors import SumTreeException
from sumtree.schemas.transport import ProofBundle
from sumtree_cli.io import dump_bundle, load_leaves, print_error, save_bundle


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def print_bundle_human(bundle: ProofBundle, out_path: str | None) -> None:
    """Print a bundle in human-readable format."""
    proof = bundle.proof
    print(f"leaf: {proof.leaf.id} (value {proof.leaf.node.value})")
    print(f"root_hash: {bundle.root.hash}")
    print(f"root_sum: {bundle.root.sum}")
    print(f"height: {bundle.root.height}")
    print(f"path ({len(proof.path)}):")
    for level, neighbor in enumerate(proof.path):
        print(f"  [{level}] {neighbor.position.value:<5} {neighbor.node.hash} sum={neighbor.node.value}")
    if out_path:
        print(f"\nwritten: {out_path}")


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Returns:
        Exit code
    """
    runtime = args.cli_config.runtime
    output_json = args.json or args.cli_config.default_output_format == "json"

    try:
        leafs = load_leaves(args.leaves_path, runtime.prime_field)
        tree = runtime.build_tree(leafs)
        proof = tree.get_proof(args.index)
    except SumTreeException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    bundle = ProofBundle.from_domain(proof, tree.root, tree.height)
    logger.info("Generated proof for leaf %d of %s", args.index, args.leaves_path)

    out_path = None
    if args.out:
        out_path = str(save_bundle(bundle, args.out))

    if output_json:
        if not out_path:
            print(dump_bundle(bundle))
    else:
        print_bundle_human(bundle, out_path)

    return EXIT_SUCCESS
