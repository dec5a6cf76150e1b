"""Primitives - Low-level cryptographic and mathematical building blocks."""

from primitives.channel import Channel
from primitives.domain import Domain
from primitives.errors import (
    DivisionByZero,
    DivisionByZeroPolynomial,
    DuplicateInterpolationPoint,
    InvalidLeafCount,
    NonZeroRemainder,
    StarkError,
)
from primitives.field import (
    FF,
    FIELD_BYTES,
    GENERATOR,
    P,
    FieldElement,
    get_omega,
    powers,
)
from primitives.merkle_tree import (
    HASH_SIZE,
    MerkleRoot,
    MerkleTree,
    QueryProof,
)
from primitives.ntt import NTT
from primitives.polynomial import ZERO_DEGREE, Polynomial

__all__ = [
    # Field
    "FF",
    "FIELD_BYTES",
    "GENERATOR",
    "P",
    "FieldElement",
    "get_omega",
    "powers",
    # Polynomials
    "Domain",
    "NTT",
    "Polynomial",
    "ZERO_DEGREE",
    # Merkle Tree
    "HASH_SIZE",
    "MerkleRoot",
    "MerkleTree",
    "QueryProof",
    # Transcript
    "Channel",
    # Errors
    "StarkError",
    "DivisionByZero",
    "DivisionByZeroPolynomial",
    "DuplicateInterpolationPoint",
    "NonZeroRemainder",
    "InvalidLeafCount",
]
