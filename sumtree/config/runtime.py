"""
Runtime Configuration

Central configuration for hasher selection and tree limits.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from dotenv import load_dotenv

from sumtree.crypto.field import PrimeField, get_field
from sumtree.crypto.mimc_sponge import DEFAULT_ROUNDS, DEFAULT_SEED, MimcSponge
from sumtree.merkle.merkle_sum_tree import MAX_HEIGHT, MerkleSumTree
from sumtree.merkle.models import MAX_VALUE, Leaf

load_dotenv()


@dataclass
class HasherConfig:
    """Configuration for the MiMC sponge hash."""
    field: str = "pasta"
    rounds: int = DEFAULT_ROUNDS
    seed: str = DEFAULT_SEED
    key: int = 0

    def __post_init__(self):
        # Fail early on an unknown preset
        get_field(self.field)


@dataclass
class TreeConfig:
    """Limits applied to every tree built from this configuration."""
    max_value: int = MAX_VALUE
    max_height: int = MAX_HEIGHT


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    hasher: HasherConfig = field(default_factory=HasherConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    debug: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - SUMTREE_FIELD: Field preset name (pasta, bn254)
        - SUMTREE_MIMC_ROUNDS: Number of MiMC rounds
        - SUMTREE_MIMC_SEED: Seed string for MiMC round constants
        - SUMTREE_MAX_VALUE: Largest root sum a tree accepts
        - SUMTREE_MAX_HEIGHT: Largest height a tree may grow to
        - SUMTREE_DEBUG: Enable debug mode (true/false)
        """
        overrides: dict[str, Any] = {}

        # Hasher settings
        if os.getenv("SUMTREE_FIELD"):
            overrides.setdefault("hasher", {})["field"] = os.getenv("SUMTREE_FIELD")
        if os.getenv("SUMTREE_MIMC_ROUNDS"):
            overrides.setdefault("hasher", {})["rounds"] = int(os.getenv("SUMTREE_MIMC_ROUNDS"))
        if os.getenv("SUMTREE_MIMC_SEED"):
            overrides.setdefault("hasher", {})["seed"] = os.getenv("SUMTREE_MIMC_SEED")

        # Tree limits
        if os.getenv("SUMTREE_MAX_VALUE"):
            overrides.setdefault("tree", {})["max_value"] = int(os.getenv("SUMTREE_MAX_VALUE"))
        if os.getenv("SUMTREE_MAX_HEIGHT"):
            overrides.setdefault("tree", {})["max_height"] = int(os.getenv("SUMTREE_MAX_HEIGHT"))

        if os.getenv("SUMTREE_DEBUG"):
            overrides["debug"] = os.getenv("SUMTREE_DEBUG", "false").lower() == "true"

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        hasher_data = data.get("hasher", {})
        tree_data = data.get("tree", {})

        hasher = HasherConfig(**hasher_data) if hasher_data else HasherConfig()
        tree = TreeConfig(**tree_data) if tree_data else TreeConfig()

        return cls(
            hasher=hasher,
            tree=tree,
            debug=bool(data.get("debug", False)),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        if "hasher" in overrides:
            for key, value in overrides["hasher"].items():
                setattr(new_config.hasher, key, value)
            get_field(new_config.hasher.field)

        if "tree" in overrides:
            for key, value in overrides["tree"].items():
                setattr(new_config.tree, key, value)

        if "debug" in overrides:
            new_config.debug = overrides["debug"]

        return new_config

    @property
    def prime_field(self) -> PrimeField:
        return get_field(self.hasher.field)

    def build_hasher(self, field: Optional[PrimeField] = None) -> MimcSponge:
        """
        Create the MiMC sponge described by this configuration.

        `field` overrides the configured preset, e.g. to match a proof
        that names its own field.
        """
        return MimcSponge(
            field=field or self.prime_field,
            rounds=self.hasher.rounds,
            seed=self.hasher.seed,
            key=self.hasher.key,
        )

    def build_tree(self, leafs: Iterable[Leaf], hasher: Optional[MimcSponge] = None) -> MerkleSumTree:
        """Build a tree with this configuration's hasher and limits."""
        return MerkleSumTree(
            leafs,
            hasher=hasher or self.build_hasher(),
            max_value=self.tree.max_value,
            max_height=self.tree.max_height,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hasher": {
                "field": self.hasher.field,
                "rounds": self.hasher.rounds,
                "seed": self.hasher.seed,
                "key": self.hasher.key,
            },
            "tree": {
                "max_value": self.tree.max_value,
                "max_height": self.tree.max_height,
            },
            "debug": self.debug,
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
