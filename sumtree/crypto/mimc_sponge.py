"""
MiMC Sponge
Default two-input hash primitive for the Merkle sum tree.

This module provides:
- mimc_constants: keccak-derived round constants for a field
- MimcSponge: Feistel-MiMC permutation (x^5 S-box) in sponge mode

Construction Rules:
1. Round constants: c = keccak256(seed); for i in 1..rounds-1:
   c = keccak256(c), C[i] = int(c) mod p. C[0] = C[rounds-1] = 0.
2. Round i: t = (xl + k + C[i])^5; xl, xr = xr + t, xl
   (the last round keeps xl and sets xr = xr + t)
3. Sponge: absorb each input into r, permute (r, c); squeeze r.

With the BN254 field, 220 rounds and seed "mimcsponge" this is the
circomlib MiMCSponge construction.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from eth_utils import keccak

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField


DEFAULT_ROUNDS = 220
DEFAULT_SEED = "mimcsponge"

# S-box exponent
_EXPONENT = 5


@lru_cache(maxsize=16)
def mimc_constants(
    modulus: int,
    rounds: int = DEFAULT_ROUNDS,
    seed: str = DEFAULT_SEED,
) -> tuple[int, ...]:
    """
    Compute the MiMC round constants for a modulus.

    Args:
        modulus: Prime field modulus
        rounds: Number of Feistel rounds
        seed: Seed string hashed to start the keccak chain

    Returns:
        Tuple of `rounds` integers, first and last equal to 0
    """
    if rounds < 2:
        raise ValueError(f"MiMC needs at least 2 rounds, got {rounds}")

    constants = [0] * rounds
    c = keccak(text=seed)
    for i in range(1, rounds):
        c = keccak(c)
        constants[i] = int.from_bytes(c, "big") % modulus
    constants[-1] = 0
    return tuple(constants)


class MimcSponge:
    """
    MiMC Feistel permutation used as a sponge over a prime field.

    Instances are callable with two field elements, which makes them
    satisfy the Hasher protocol.

    Example:
        >>> sponge = MimcSponge()
        >>> a, b = PASTA.element(1), PASTA.element(2)
        >>> sponge(a, b) == sponge.multi_hash([a, b])[0]
        True
    """

    def __init__(
        self,
        field: PrimeField = DEFAULT_FIELD,
        rounds: int = DEFAULT_ROUNDS,
        seed: str = DEFAULT_SEED,
        key: int = 0,
    ) -> None:
        self.field = field
        self.rounds = rounds
        self.seed = seed
        self.key = key % field.modulus
        self._constants = mimc_constants(field.modulus, rounds, seed)

    @property
    def constants(self) -> tuple[int, ...]:
        return self._constants

    def _permute(self, xl: int, xr: int, k: int) -> tuple[int, int]:
        p = self.field.modulus
        last = self.rounds - 1
        for i, c in enumerate(self._constants):
            t = pow((xl + k + c) % p, _EXPONENT, p)
            if i < last:
                xl, xr = (xr + t) % p, xl
            else:
                xr = (xr + t) % p
        return xl, xr

    def permute(
        self,
        xl: FieldElement,
        xr: FieldElement,
        key: FieldElement | None = None,
    ) -> tuple[FieldElement, FieldElement]:
        """Apply the Feistel permutation to a (left, right) state."""
        self._check(xl)
        self._check(xr)
        k = self.key if key is None else self._check(key).value
        left, right = self._permute(xl.value, xr.value, k)
        return FieldElement(left, self.field), FieldElement(right, self.field)

    def multi_hash(
        self,
        inputs: Sequence[FieldElement],
        key: FieldElement | None = None,
        num_outputs: int = 1,
    ) -> list[FieldElement]:
        """
        Hash a sequence of field elements in sponge mode.

        Args:
            inputs: Elements to absorb, in order
            key: Permutation key (defaults to the instance key)
            num_outputs: Number of elements to squeeze

        Returns:
            List of `num_outputs` field elements
        """
        if num_outputs < 1:
            raise ValueError(f"num_outputs must be at least 1, got {num_outputs}")

        p = self.field.modulus
        k = self.key if key is None else self._check(key).value
        r, c = 0, 0
        for elem in inputs:
            r = (r + self._check(elem).value) % p
            r, c = self._permute(r, c, k)

        outputs = [r]
        for _ in range(1, num_outputs):
            r, c = self._permute(r, c, k)
            outputs.append(r)

        return [FieldElement(v, self.field) for v in outputs]

    def hash_pair(self, left: FieldElement, right: FieldElement) -> FieldElement:
        """Combine two field elements into one."""
        return self.multi_hash([left, right])[0]

    __call__ = hash_pair

    def _check(self, element: FieldElement) -> FieldElement:
        if element.field != self.field:
            raise ValueError(
                f"Element of field '{element.field.name}' passed to "
                f"MiMC sponge over '{self.field.name}'"
            )
        return element

    def __repr__(self) -> str:
        return f"MimcSponge(field={self.field.name!r}, rounds={self.rounds}, seed={self.seed!r})"


__all__ = [
    "DEFAULT_ROUNDS",
    "DEFAULT_SEED",
    "mimc_constants",
    "MimcSponge",
]
