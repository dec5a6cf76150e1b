"""STARK proof verification.

The verifier never sees the trace. It replays the prover's channel from the
proof's commitments to recover the same challenges, then, for every query:

1. Trace openings - each column opened at x * g^k for every constraint
   offset k, authenticated against the column's Merkle root
2. Composition check - CP(x) recomputed from those values must equal the
   opened layer-0 FRI value
3. FRI - the folding chain from layer 0 down to the final polynomial

Shape problems raise MalformedProof; failed checks raise ProofRejected.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from primitives.field import FieldElement
from primitives.merkle_tree import HASH_SIZE, MerkleTree
from primitives.polynomial import Polynomial
from protocol.challenges import draw_constraint_weights, draw_query_indices, new_channel
from protocol.composition import evaluate_composition
from protocol.constraints import ConstraintSystem
from protocol.errors import MalformedProof, ProofRejected
from protocol.params import StarkParams
from protocol.pcs import FriPcs
from protocol.proof import QueryResponse, StarkProof
from protocol.prover import composition_config, trace_positions

logger = logging.getLogger(__name__)


# --- Result Types ---

class VerificationStatus(enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.status is VerificationStatus.ACCEPTED

    def __bool__(self) -> bool:
        return self.accepted


# --- Main Entry Point ---

def stark_verify(proof: StarkProof, system: ConstraintSystem, params: StarkParams) -> bool:
    """Verify a STARK proof.

    Args:
        proof: Proof produced by gen_proof
        system: Constraint system the proof claims the trace satisfies
        params: Protocol parameters the proof was produced with

    Returns:
        True if the proof is valid.

    Raises:
        MalformedProof: The proof's shape does not match the statement.
        ProofRejected: Some check failed.
    """
    fri_config = composition_config(system, params)
    _check_shape(proof, system, params, fri_config.n_layers)

    # --- Reconstruct Fiat-Shamir transcript ---
    channel = new_channel(system, params)
    for root in proof.trace_roots:
        channel.send(root)
    weights = draw_constraint_weights(channel, system)

    pcs = FriPcs(fri_config)
    betas = pcs.replay_commitments(proof.fri_roots, proof.final_coefficients, channel)
    final_polynomial = Polynomial(proof.final_coefficients)

    indices = draw_query_indices(channel, params)

    # --- Per-query checks ---
    for expected_index, query in zip(indices, proof.queries):
        if query.index != expected_index:
            raise ProofRejected(f"Query index {query.index} does not match the channel ({expected_index})")
        values = _verify_trace_openings(query, proof, system, params)
        x = params.extended_domain.element(query.index)
        composition_value = evaluate_composition(system, params, x, values, weights)
        if composition_value != query.fri[0].value.value:
            raise ProofRejected(f"Composition value at index {query.index} does not match the FRI layer 0 opening")
        pcs.verify_query(query.index, query.fri, proof.fri_roots, betas, final_polynomial)

    return True


def check_proof(proof: StarkProof, system: ConstraintSystem, params: StarkParams) -> VerificationResult:
    """stark_verify as a status value instead of exceptions."""
    try:
        stark_verify(proof, system, params)
    except MalformedProof as exc:
        logger.info("Malformed proof: %s", exc)
        return VerificationResult(VerificationStatus.MALFORMED, str(exc))
    except ProofRejected as exc:
        logger.info("Proof rejected: %s", exc)
        return VerificationResult(VerificationStatus.REJECTED, str(exc))
    return VerificationResult(VerificationStatus.ACCEPTED)


# --- Helpers ---

def _check_shape(proof: StarkProof, system: ConstraintSystem, params: StarkParams, n_layers: int) -> None:
    n_columns = len(system.columns)
    n_offsets = len(system.offsets)
    if len(proof.trace_roots) != n_columns:
        raise MalformedProof(f"Expected {n_columns} trace roots, got {len(proof.trace_roots)}")
    for i, root in enumerate(proof.trace_roots):
        if len(root) != HASH_SIZE:
            raise MalformedProof(f"Trace root {i} has {len(root)} bytes, expected {HASH_SIZE}")
    if len(proof.queries) != params.n_queries:
        raise MalformedProof(f"Expected {params.n_queries} queries, got {len(proof.queries)}")
    for q, query in enumerate(proof.queries):
        if len(query.trace) != n_columns:
            raise MalformedProof(f"Query {q} opens {len(query.trace)} columns, expected {n_columns}")
        for c, column in enumerate(query.trace):
            if len(column) != n_offsets:
                raise MalformedProof(f"Query {q} column {c} has {len(column)} openings, expected {n_offsets}")
        if len(query.fri) != n_layers:
            raise MalformedProof(f"Query {q} has {len(query.fri)} FRI layers, expected {n_layers}")


def _verify_trace_openings(
    query: QueryResponse,
    proof: StarkProof,
    system: ConstraintSystem,
    params: StarkParams,
) -> Dict[Tuple[str, int], FieldElement]:
    """Authenticate the trace openings and return them keyed by (column, offset)."""
    depth = params.extended_domain.n_bits
    positions = trace_positions(query.index, system, params)
    values: Dict[Tuple[str, int], FieldElement] = {}
    for c, name in enumerate(system.columns):
        root = proof.trace_roots[c]
        for offset, position, opening in zip(system.offsets, positions, query.trace[c]):
            if len(opening.path) != depth or any(len(d) != HASH_SIZE for d in opening.path):
                raise MalformedProof(f"Column '{name}' opening at position {position} has a malformed path")
            if not MerkleTree.verify(root, position, opening.value, opening.path):
                raise ProofRejected(f"Column '{name}' Merkle path at position {position} does not match the root")
            values[(name, offset)] = FieldElement(opening.value)
    return values

