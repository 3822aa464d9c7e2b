"""
Transport Schemas

Pydantic models for moving nodes, leaves and inclusion proofs across
process boundaries (JSON files, wire messages, circuit witnesses).

Field elements are encoded as fixed-width 0x-prefixed hex; the field
itself travels once per proof by preset name.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField, get_field
from sumtree.merkle.models import (
    MAX_VALUE,
    InclusionProof,
    Leaf,
    Neighbor,
    Node,
    Position,
)


class NodeModel(BaseModel):
    """Serialized tree node."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: str = Field(
        ...,
        description="Node hash as 0x-prefixed hex",
        pattern=r"^0x[0-9a-fA-F]+$",
    )
    value: int = Field(
        ...,
        description="Sum of leaf values beneath the node",
        ge=0,
        le=MAX_VALUE,
    )

    @classmethod
    def from_domain(cls, node: Node) -> "NodeModel":
        return cls(hash=node.hash.to_hex(), value=node.value)

    def to_domain(self, field: PrimeField = DEFAULT_FIELD) -> Node:
        return Node(FieldElement.from_hex(self.hash, field), self.value)


class LeafInput(BaseModel):
    """An (id, value) row as supplied by users, before hashing."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Leaf identifier")
    value: int = Field(..., description="Leaf value", ge=0, le=MAX_VALUE)

    def to_leaf(self, field: PrimeField = DEFAULT_FIELD) -> Leaf:
        """Hash the row into a Leaf; raises ValueError for an empty id."""
        return Leaf.create(self.id, self.value, field)


class LeafModel(BaseModel):
    """Serialized leaf with its node."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., description="Leaf identifier")
    node: NodeModel

    @classmethod
    def from_domain(cls, leaf: Leaf) -> "LeafModel":
        return cls(id=leaf.id, node=NodeModel.from_domain(leaf.node))

    def to_domain(self, field: PrimeField = DEFAULT_FIELD) -> Leaf:
        return Leaf(id=self.id, node=self.node.to_domain(field))


class NeighborModel(BaseModel):
    """Serialized sibling entry of an inclusion path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    position: Position
    node: NodeModel

    @classmethod
    def from_domain(cls, neighbor: Neighbor) -> "NeighborModel":
        return cls(position=neighbor.position, node=NodeModel.from_domain(neighbor.node))

    def to_domain(self, field: PrimeField = DEFAULT_FIELD) -> Neighbor:
        return Neighbor(position=self.position, node=self.node.to_domain(field))


class InclusionProofModel(BaseModel):
    """Serialized inclusion proof."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(
        default=DEFAULT_FIELD.name,
        description="Name of the prime field preset the hashes belong to",
    )
    leaf: LeafModel
    path: list[NeighborModel] = Field(
        default_factory=list,
        description="Sibling neighbors from leaf level up to the root",
    )

    @field_validator("field")
    @classmethod
    def _known_field(cls, value: str) -> str:
        return get_field(value).name

    @classmethod
    def from_domain(cls, proof: InclusionProof) -> "InclusionProofModel":
        return cls(
            field=proof.leaf.field.name,
            leaf=LeafModel.from_domain(proof.leaf),
            path=[NeighborModel.from_domain(n) for n in proof.path],
        )

    def to_domain(self) -> InclusionProof:
        field = get_field(self.field)
        return InclusionProof(
            leaf=self.leaf.to_domain(field),
            path=tuple(n.to_domain(field) for n in self.path),
        )


class RootModel(BaseModel):
    """Root commitment of a tree at a point in time."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: str = Field(..., pattern=r"^0x[0-9a-fA-F]+$")
    sum: int = Field(..., ge=0, le=MAX_VALUE)
    height: int = Field(..., ge=1, le=64)

    @classmethod
    def from_node(cls, node: Node, height: int) -> "RootModel":
        return cls(hash=node.hash.to_hex(), sum=node.value, height=height)

    def to_node(self, field: PrimeField = DEFAULT_FIELD) -> Node:
        return Node(FieldElement.from_hex(self.hash, field), self.sum)


class ProofBundle(BaseModel):
    """An inclusion proof together with the root it was issued against."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    proof: InclusionProofModel
    root: RootModel

    @classmethod
    def from_domain(cls, proof: InclusionProof, root: Node, height: int) -> "ProofBundle":
        return cls(
            proof=InclusionProofModel.from_domain(proof),
            root=RootModel.from_node(root, height),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


__all__ = [
    "NodeModel",
    "LeafInput",
    "LeafModel",
    "NeighborModel",
    "InclusionProofModel",
    "RootModel",
    "ProofBundle",
]
