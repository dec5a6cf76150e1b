"""Top-level STARK proof generation."""

import logging
from typing import Dict, List, Optional

from primitives.merkle_tree import MerkleTree
from primitives.polynomial import Polynomial
from protocol.challenges import draw_constraint_weights, draw_query_indices, new_channel
from protocol.composition import build_composition_polynomial
from protocol.constraints import ConstraintSystem, Trace
from protocol.params import StarkParams
from protocol.pcs import Checkpoint, FriPcs, FriPcsConfig
from protocol.proof import QueryResponse, StarkProof

logger = logging.getLogger(__name__)


# --- Helper Functions ---

def composition_config(system: ConstraintSystem, params: StarkParams) -> FriPcsConfig:
    """FRI configuration for the composition polynomial of this statement."""
    system.check_trace_length(params.trace_length)
    degree_bound = system.composition_degree_bound(params.trace_length)
    if degree_bound >= params.extended_size:
        raise ValueError(
            f"Composition degree bound {degree_bound} does not fit the extended domain "
            f"of size {params.extended_size}; increase blowup_factor"
        )
    return FriPcsConfig(
        domain=params.extended_domain,
        degree_bound=degree_bound,
        threshold=params.fri_degree_bound,
    )


def trace_positions(index: int, system: ConstraintSystem, params: StarkParams) -> List[int]:
    """Extended-domain positions of x * g^k for each constraint offset k."""
    return [(index + k * params.blowup_factor) % params.extended_size for k in system.offsets]


# --- Main Entry Point ---

def gen_proof(
    trace: Trace,
    system: ConstraintSystem,
    params: StarkParams,
    checkpoint: Optional[Checkpoint] = None,
) -> StarkProof:
    """Generate a STARK proof that `trace` satisfies `system`.

    Args:
        trace: Row-major trace, params.trace_length rows of len(system.columns) values
        system: Constraints the trace must satisfy
        params: Protocol parameters shared with the verifier
        checkpoint: Called with the layer index after each committed FRI layer;
            an exception raised from it aborts proving

    Returns:
        The proof.

    Raises:
        ValueError: The trace shape or parameters do not match the system.
        NonZeroRemainder: Some constraint does not hold on the trace.
    """
    columns = system.trace_columns(trace, params.trace_length)
    fri_config = composition_config(system, params)
    channel = new_channel(system, params)

    # --- Trace Commitment ---
    # Interpolate each column over <g>, extend to the coset, commit one tree per column
    trace_polys: Dict[str, Polynomial] = {}
    trace_trees: List[MerkleTree] = []
    for name in system.columns:
        poly = Polynomial.from_evaluations(columns[name], params.trace_domain)
        tree = MerkleTree(poly.evaluate_domain(params.extended_domain))
        trace_polys[name] = poly
        trace_trees.append(tree)
        channel.send(tree.commit())
    logger.debug("Committed %d trace columns over %d points", len(trace_trees), params.extended_size)

    # --- Composition ---
    weights = draw_constraint_weights(channel, system)
    composition = build_composition_polynomial(trace_polys, system, params, weights)

    # --- FRI ---
    pcs = FriPcs(fri_config)
    fri_proof = pcs.prove(composition, channel, checkpoint)

    # --- Queries ---
    queries = []
    for index in draw_query_indices(channel, params):
        positions = trace_positions(index, system, params)
        queries.append(QueryResponse(
            index=index,
            trace=[[tree.get_query_proof(pos) for pos in positions] for tree in trace_trees],
            fri=pcs.open(index),
        ))
    logger.debug("Answered %d queries", len(queries))

    return StarkProof(
        trace_roots=[tree.commit() for tree in trace_trees],
        fri_roots=fri_proof.fri_roots,
        final_coefficients=fri_proof.final_polynomial.coefficients,
        queries=queries,
    )
