"""Verifier outcomes that are not internal faults."""

from primitives.errors import StarkError


class ProofRejected(StarkError):
    """The proof is well formed but fails a soundness check."""


class MalformedProof(StarkError):
    """The proof cannot be decoded, or its shape does not match the statement."""
