"""FRI Polynomial Commitment Scheme."""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from primitives.channel import Channel
from primitives.domain import Domain
from primitives.field import FieldElement
from primitives.merkle_tree import HASH_SIZE, MerkleRoot, MerkleTree, QueryProof
from primitives.polynomial import Polynomial
from protocol.errors import MalformedProof, ProofRejected
from protocol.fri import FRI, FriLayer
from protocol.proof import FriLayerOpening

logger = logging.getLogger(__name__)

# --- Type Aliases ---

Checkpoint = Callable[[int], None]
QueryIndex = int


# --- Configuration ---

@dataclass(frozen=True)
class FriPcsConfig:
    """FRI PCS parameters.

    Attributes:
        domain: Domain of the first layer (the extended domain)
        degree_bound: Degree bound of the committed polynomial
        threshold: Folding stops once the bound is <= threshold
    """
    domain: Domain
    degree_bound: int
    threshold: int = 0

    def __post_init__(self) -> None:
        if self.degree_bound < 0:
            raise ValueError(f"degree_bound must be non-negative, got {self.degree_bound}")
        if self.degree_bound >= self.domain.size:
            raise ValueError(f"degree_bound {self.degree_bound} must be below the domain size {self.domain.size}")

    @property
    def n_folds(self) -> int:
        return FRI.num_folds(self.degree_bound, self.threshold)

    @property
    def n_layers(self) -> int:
        """Committed layers; layer 0 is committed even when no fold happens."""
        return max(self.n_folds, 1)

    def layer_domain(self, layer: int) -> Domain:
        domain = self.domain
        for _ in range(layer):
            domain = domain.squared()
        return domain


@dataclass
class FriProof:
    """Prover-side FRI output: layer roots, final polynomial and the layers themselves."""
    fri_roots: List[MerkleRoot] = field(default_factory=list)
    final_polynomial: Polynomial = field(default_factory=Polynomial)
    layers: List[FriLayer] = field(default_factory=list)


# --- FRI PCS ---

class FriPcs:
    """FRI Polynomial Commitment Scheme."""

    def __init__(self, config: FriPcsConfig):
        self.config = config
        self.layers: List[FriLayer] = []

    # --- Prover ---

    def prove(
        self,
        polynomial: Polynomial,
        channel: Channel,
        checkpoint: Optional[Checkpoint] = None,
    ) -> FriProof:
        """Commit-fold loop, then send the final polynomial in clear."""
        cfg = self.config
        n_folds = cfg.n_folds

        layer = FRI.commit_layer(polynomial, cfg.domain)
        self._add_layer(layer, channel, checkpoint)

        # --- Commit-Fold Loop ---
        # Each iteration: derive challenge -> fold -> commit (except after the last fold)
        current_pol = polynomial
        domain = cfg.domain
        for fri_round in range(n_folds):
            beta = channel.receive_random_field_element()
            current_pol = FRI.fold(current_pol, beta)
            domain = domain.squared()
            if fri_round + 1 < n_folds:
                self._add_layer(FRI.commit_layer(current_pol, domain), channel, checkpoint)

        # --- Finalize ---
        channel.send_field_elements(current_pol.coefficients)
        logger.debug("FRI final polynomial has degree %d after %d folds", current_pol.degree(), n_folds)

        return FriProof(
            fri_roots=[lay.root for lay in self.layers],
            final_polynomial=current_pol,
            layers=list(self.layers),
        )

    def _add_layer(self, layer: FriLayer, channel: Channel, checkpoint: Optional[Checkpoint]) -> None:
        index = len(self.layers)
        self.layers.append(layer)
        channel.send(layer.root)
        logger.debug("FRI layer %d committed over %d points", index, layer.domain.size)
        if checkpoint is not None:
            checkpoint(index)

    def open(self, index: QueryIndex) -> List[FriLayerOpening]:
        """Open f(x) and f(-x) in every committed layer for a query index."""
        if not self.layers:
            raise ValueError("open() called before prove()")
        openings = []
        for layer in self.layers:
            size = layer.domain.size
            j = index % size
            openings.append(FriLayerOpening(
                value=layer.tree.get_query_proof(j),
                sibling=layer.tree.get_query_proof(FRI.sibling_index(j, size)),
            ))
        return openings

    def get_fri_tree(self, fri_round: int) -> MerkleTree:
        return self.layers[fri_round].tree

    # --- Verifier ---

    def replay_commitments(
        self,
        fri_roots: Sequence[MerkleRoot],
        final_coefficients: Sequence[FieldElement],
        channel: Channel,
    ) -> List[FieldElement]:
        """Absorb the layer roots and final polynomial; return the folding challenges."""
        cfg = self.config
        if len(fri_roots) != cfg.n_layers:
            raise MalformedProof(f"Expected {cfg.n_layers} FRI roots, got {len(fri_roots)}")
        for i, root in enumerate(fri_roots):
            if len(root) != HASH_SIZE:
                raise MalformedProof(f"FRI root {i} has {len(root)} bytes, expected {HASH_SIZE}")

        channel.send(fri_roots[0])
        betas = []
        for fri_round in range(cfg.n_folds):
            betas.append(channel.receive_random_field_element())
            if fri_round + 1 < cfg.n_folds:
                channel.send(fri_roots[fri_round + 1])
        channel.send_field_elements(final_coefficients)

        final = Polynomial(final_coefficients)
        if final.degree() > cfg.threshold:
            raise ProofRejected(f"Final FRI polynomial has degree {final.degree()}, bound is {cfg.threshold}")
        return betas

    def verify_query(
        self,
        index: QueryIndex,
        openings: Sequence[FriLayerOpening],
        fri_roots: Sequence[MerkleRoot],
        betas: Sequence[FieldElement],
        final_polynomial: Polynomial,
    ) -> None:
        """Check every layer opening and the folding chain down to the final polynomial."""
        cfg = self.config
        if len(openings) != cfg.n_layers:
            raise MalformedProof(f"Query {index} has {len(openings)} FRI layers, expected {cfg.n_layers}")

        domain = cfg.domain
        for i, opening in enumerate(openings):
            size = domain.size
            j = index % size
            _check_opening(opening.value, fri_roots[i], j, domain.n_bits, f"FRI layer {i}")
            _check_opening(opening.sibling, fri_roots[i], FRI.sibling_index(j, size), domain.n_bits, f"FRI layer {i} sibling")

            x = domain.element(j)
            if cfg.n_folds == 0:
                if final_polynomial(x) != opening.value.value:
                    raise ProofRejected(f"Layer 0 value at index {j} does not match the final polynomial")
                return

            folded = FRI.fold_value(x, opening.value.value, opening.sibling.value, betas[i])
            if i + 1 < len(openings):
                expected = FieldElement(openings[i + 1].value.value)
            else:
                expected = final_polynomial(x * x)
            if folded != expected:
                raise ProofRejected(f"FRI fold mismatch between layer {i} and layer {i + 1} at index {j}")
            domain = domain.squared()


def _check_opening(opening: QueryProof, root: MerkleRoot, index: int, depth: int, what: str) -> None:
    """Shape errors are MalformedProof; a failing path is ProofRejected."""
    if len(opening.path) != depth:
        raise MalformedProof(f"{what}: path has {len(opening.path)} entries, expected {depth}")
    if any(len(d) != HASH_SIZE for d in opening.path):
        raise MalformedProof(f"{what}: path digest has wrong size")
    if not MerkleTree.verify(root, index, opening.value, opening.path):
        raise ProofRejected(f"{what}: Merkle path for index {index} does not match the root")
