"""
Prime Field Elements

Minimal prime-field element type used by the sum tree and the MiMC sponge.

This module provides:
- PrimeField: a named prime modulus
- FieldElement: an immutable value reduced into a PrimeField
- PASTA / BN254 presets and get_field() lookup by name

The tree itself only needs equality on field elements. The small amount of
arithmetic here (add, pow) exists for the hash permutation.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PrimeField:
    """
    A prime field identified by name and modulus.

    Attributes:
        name: Short preset name (e.g. "pasta", "bn254")
        modulus: The prime modulus p
    """
    name: str
    modulus: int

    def __post_init__(self) -> None:
        if self.modulus < 2:
            raise ValueError(f"Field modulus must be at least 2, got {self.modulus}")

    def element(self, value: int) -> "FieldElement":
        """Reduce an integer into this field."""
        return FieldElement(value % self.modulus, self)

    def zero(self) -> "FieldElement":
        return FieldElement(0, self)

    def from_bytes(self, data: bytes) -> "FieldElement":
        """Interpret big-endian bytes as an integer and reduce it into the field."""
        return self.element(int.from_bytes(data, "big"))

    @property
    def byte_length(self) -> int:
        return (self.modulus.bit_length() + 7) // 8


@dataclass(frozen=True)
class FieldElement:
    """
    An element of a prime field.

    Equality compares both the value and the field, so elements of
    different fields never compare equal.

    Attributes:
        value: Canonical integer representative, 0 <= value < modulus
        field: The field this element belongs to
    """
    value: int
    field: PrimeField

    def __post_init__(self) -> None:
        if not 0 <= self.value < self.field.modulus:
            raise ValueError(
                f"Value {self.value} is not a canonical element of field '{self.field.name}'"
            )

    def _coerce(self, other: "FieldElement | int") -> int:
        if isinstance(other, FieldElement):
            if other.field != self.field:
                raise ValueError(
                    f"Cannot combine elements of fields '{self.field.name}' "
                    f"and '{other.field.name}'"
                )
            return other.value
        return other

    def __add__(self, other: "FieldElement | int") -> "FieldElement":
        return self.field.element(self.value + self._coerce(other))

    __radd__ = __add__

    def __mul__(self, other: "FieldElement | int") -> "FieldElement":
        return self.field.element(self.value * self._coerce(other))

    __rmul__ = __mul__

    def __pow__(self, exponent: int) -> "FieldElement":
        return FieldElement(pow(self.value, exponent, self.field.modulus), self.field)

    def __int__(self) -> int:
        return self.value

    def to_hex(self) -> str:
        """
        Fixed-width hex encoding with 0x prefix.

        Example:
            >>> PASTA.element(255).to_hex()[-4:]
            '00ff'
        """
        return "0x" + self.value.to_bytes(self.field.byte_length, "big").hex()

    @classmethod
    def from_hex(cls, hex_string: str, field: "PrimeField") -> "FieldElement":
        """
        Parse a 0x-prefixed hex string into an element of `field`.

        Raises:
            ValueError: If the prefix is missing, the hex is invalid,
                or the value is not below the modulus
        """
        if not hex_string.startswith("0x"):
            raise ValueError(
                f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
            )
        try:
            value = int(hex_string[2:], 16)
        except ValueError as e:
            raise ValueError(f"Invalid hex characters in string: {e}") from e
        return cls(value, field)

    def __repr__(self) -> str:
        return f"FieldElement({self.to_hex()}, field={self.field.name!r})"


# Folding-friendly 255-bit field used by default
PASTA = PrimeField(
    name="pasta",
    modulus=28948022309329048855892746252171976963363056481941647379679742748393362948097,
)

# circom / BN254 scalar field
BN254 = PrimeField(
    name="bn254",
    modulus=21888242871839275222246405745257275088548364400416034343698204186575808495617,
)

DEFAULT_FIELD = PASTA

FIELDS: dict[str, PrimeField] = {
    PASTA.name: PASTA,
    BN254.name: BN254,
}


def get_field(name: str) -> PrimeField:
    """
    Look up a field preset by name (case-insensitive).

    Raises:
        ValueError: If no preset has that name
    """
    try:
        return FIELDS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown field '{name}', expected one of: {', '.join(sorted(FIELDS))}"
        ) from None


__all__ = [
    "PrimeField",
    "FieldElement",
    "PASTA",
    "BN254",
    "DEFAULT_FIELD",
    "FIELDS",
    "get_field",
]
