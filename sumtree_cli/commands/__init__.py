"""
CLI command modules.
"""

from sumtree_cli.commands import build, prove, verify

__all__ = ["build", "prove", "verify"]
