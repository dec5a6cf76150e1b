"""Protocol - Core STARK protocol algorithms."""

from protocol.challenges import draw_constraint_weights, draw_query_indices, new_channel
from protocol.composition import build_composition_polynomial, evaluate_composition
from protocol.constraints import BoundaryConstraint, ConstraintSystem, TransitionConstraint
from protocol.errors import MalformedProof, ProofRejected
from protocol.expressions import Constant, Expr, TraceValue
from protocol.fri import FRI, FriLayer
from protocol.params import StarkParams
from protocol.pcs import FriPcs, FriPcsConfig, FriProof
from protocol.proof import (
    FriLayerOpening,
    QueryResponse,
    StarkProof,
    proof_from_bytes,
    proof_from_json,
    proof_to_bytes,
    proof_to_json,
)
from protocol.prover import gen_proof
from protocol.verifier import (
    VerificationResult,
    VerificationStatus,
    check_proof,
    stark_verify,
)

__all__ = [
    # Constraints
    "Expr",
    "Constant",
    "TraceValue",
    "TransitionConstraint",
    "BoundaryConstraint",
    "ConstraintSystem",
    # Configuration
    "StarkParams",
    # Transcript
    "new_channel",
    "draw_constraint_weights",
    "draw_query_indices",
    # Composition
    "build_composition_polynomial",
    "evaluate_composition",
    # FRI
    "FRI",
    "FriLayer",
    # FRI PCS
    "FriPcs",
    "FriPcsConfig",
    "FriProof",
    # Proof
    "FriLayerOpening",
    "QueryResponse",
    "StarkProof",
    "proof_to_bytes",
    "proof_from_bytes",
    "proof_to_json",
    "proof_from_json",
    # STARK
    "gen_proof",
    "stark_verify",
    "check_proof",
    "VerificationResult",
    "VerificationStatus",
    # Errors
    "ProofRejected",
    "MalformedProof",
]
