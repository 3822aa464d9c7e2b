"""
Sumtree CLI

Command-line interface for Merkle sum trees.

Usage:
    python -m sumtree_cli build leaves.json
    python -m sumtree_cli prove leaves.json --index 0 --out proof.json
    python -m sumtree_cli verify proof.json
    python -m sumtree_cli config --init
"""

__version__ = "0.1.0"
