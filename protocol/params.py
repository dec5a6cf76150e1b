"""Protocol parameters."""

from dataclasses import dataclass
from typing import Any, Dict

from primitives.domain import Domain
from primitives.field import GENERATOR, P, TWO_ADICITY, FieldElement


@dataclass(frozen=True)
class StarkParams:
    """Fixed protocol parameters shared by prover and verifier.

    Attributes:
        trace_length: Number of trace rows (power of two)
        blowup_factor: Extended domain size / trace length (power of two, >= 2)
        coset_offset: Offset of the extended (LDE) domain coset
        n_queries: Number of query repetitions
        fri_degree_bound: FRI stops folding once the degree bound is <= this
        channel_seed: Bytes mixed into the initial channel state
        modulus: Prime modulus of the field; only P is supported
    """
    trace_length: int
    blowup_factor: int = 8
    coset_offset: int = GENERATOR
    n_queries: int = 8
    fri_degree_bound: int = 0
    channel_seed: bytes = b""
    modulus: int = P

    def __post_init__(self) -> None:
        if self.modulus != P:
            raise ValueError(f"Unsupported modulus {self.modulus}; the field is GF({P}) with P = 3 * 2^30 + 1")
        if self.trace_length < 2 or self.trace_length & (self.trace_length - 1):
            raise ValueError(f"trace_length must be a power of two >= 2, got {self.trace_length}")
        if self.blowup_factor < 2 or self.blowup_factor & (self.blowup_factor - 1):
            raise ValueError(f"blowup_factor must be a power of two >= 2, got {self.blowup_factor}")
        if self.extended_size > 1 << TWO_ADICITY:
            raise ValueError(f"Extended domain of size {self.extended_size} exceeds 2^{TWO_ADICITY}")
        if int(self.coset_offset) % P == 0:
            raise ValueError("coset_offset must be non-zero")
        # The coset must miss the subgroup, so no LDE point lies on the trace domain
        if FieldElement(self.coset_offset) ** self.extended_size == FieldElement.one():
            raise ValueError(f"coset_offset {self.coset_offset} lies in the subgroup of size {self.extended_size}")
        if self.n_queries < 1:
            raise ValueError(f"n_queries must be positive, got {self.n_queries}")
        if self.fri_degree_bound < 0:
            raise ValueError(f"fri_degree_bound must be non-negative, got {self.fri_degree_bound}")

    @property
    def extended_size(self) -> int:
        return self.trace_length * self.blowup_factor

    @property
    def trace_domain(self) -> Domain:
        return Domain.subgroup(self.trace_length)

    @property
    def extended_domain(self) -> Domain:
        return Domain.coset(self.extended_size, self.coset_offset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modulus": self.modulus,
            "trace_length": self.trace_length,
            "blowup_factor": self.blowup_factor,
            "coset_offset": int(self.coset_offset) % P,
            "n_queries": self.n_queries,
            "fri_degree_bound": self.fri_degree_bound,
            "channel_seed": self.channel_seed.hex(),
        }
