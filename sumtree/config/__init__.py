"""
Runtime Configuration Module

Provides configuration loading and management for sum trees.
"""

from .runtime import (
    RuntimeConfig,
    HasherConfig,
    TreeConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "RuntimeConfig",
    "HasherConfig",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]
