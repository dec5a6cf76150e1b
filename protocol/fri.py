"""FRI folding protocol."""

from dataclasses import dataclass
from typing import Union

from primitives.domain import Domain
from primitives.field import FF, FieldElement
from primitives.merkle_tree import MerkleRoot, MerkleTree
from primitives.polynomial import Polynomial

Scalar = Union[int, FieldElement]

TWO_INV = FieldElement(2).inverse()


# --- Data Classes ---

@dataclass
class FriLayer:
    """One committed FRI layer.

    Attributes:
        polynomial: Layer polynomial in coefficient form
        domain: Evaluation domain (the extended domain squared `index` times)
        evaluations: polynomial evaluated over domain, in index order
        tree: Merkle tree over evaluations
    """
    polynomial: Polynomial
    domain: Domain
    evaluations: FF
    tree: MerkleTree

    @property
    def root(self) -> MerkleRoot:
        return self.tree.commit()


# --- FRI Protocol ---

class FRI:
    """FRI protocol: folding, commitment, and fold verification."""

    @staticmethod
    def fold(poly: Polynomial, beta: Scalar) -> Polynomial:
        """even(X) + beta * odd(X), where poly(X) = even(X^2) + X * odd(X^2)."""
        even, odd = poly.split_even_odd()
        return even + odd * FieldElement(beta)

    @staticmethod
    def commit_layer(poly: Polynomial, domain: Domain) -> FriLayer:
        """Evaluate over the domain and build the layer's Merkle tree."""
        evaluations = poly.evaluate_domain(domain)
        return FriLayer(
            polynomial=poly,
            domain=domain,
            evaluations=evaluations,
            tree=MerkleTree(evaluations),
        )

    @staticmethod
    def fold_value(x: Scalar, value: Scalar, sibling: Scalar, beta: Scalar) -> FieldElement:
        """Folded value at x^2 from f(x) and f(-x).

        even(x^2) = (f(x) + f(-x)) / 2
        odd(x^2)  = (f(x) - f(-x)) / (2x)
        """
        x, value, sibling = FieldElement(x), FieldElement(value), FieldElement(sibling)
        even = (value + sibling) * TWO_INV
        odd = (value - sibling) * TWO_INV / x
        return even + FieldElement(beta) * odd

    @staticmethod
    def num_folds(degree_bound: int, threshold: int) -> int:
        """Number of halvings b -> b // 2 until b <= threshold."""
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        folds = 0
        while degree_bound > threshold:
            degree_bound //= 2
            folds += 1
        return folds

    @staticmethod
    def sibling_index(index: int, layer_size: int) -> int:
        """Position of -x given the position of x in a layer domain."""
        return (index + layer_size // 2) % layer_size
