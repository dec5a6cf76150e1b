"""Tests for proof serialization (binary and JSON)."""

import json
import struct

import pytest

from primitives.field import P, FieldElement
from protocol.errors import MalformedProof
from protocol.params import StarkParams
from protocol.proof import (
    MAGIC,
    StarkProof,
    dumps,
    loads,
    proof_from_bytes,
    proof_from_json,
    proof_to_bytes,
    proof_to_json,
)
from protocol.prover import gen_proof
from protocol.verifier import stark_verify


@pytest.fixture
def proof(fib_trace, fib_system, fib_params) -> StarkProof:
    return gen_proof(fib_trace, fib_system, fib_params)


class TestBinaryFormat:
    """proof_to_bytes / proof_from_bytes."""

    def test_roundtrip(self, proof: StarkProof, fib_system, fib_params) -> None:
        data = proof_to_bytes(proof)
        assert data.startswith(MAGIC)
        decoded = proof_from_bytes(data)
        assert decoded == proof
        assert proof_to_bytes(decoded) == data
        assert stark_verify(decoded, fib_system, fib_params)

    def test_header_layout(self, proof: StarkProof) -> None:
        data = proof_to_bytes(proof)
        (n_trace_roots,) = struct.unpack(">I", data[4:8])
        assert n_trace_roots == 1
        assert data[8:40] == proof.trace_roots[0]

    def test_empty_proof(self) -> None:
        data = proof_to_bytes(StarkProof())
        assert data == MAGIC + bytes(16)
        assert proof_from_bytes(data) == StarkProof()

    @pytest.mark.parametrize("cut", [1, 5, 100])
    def test_truncated(self, proof: StarkProof, cut: int) -> None:
        data = proof_to_bytes(proof)
        with pytest.raises(MalformedProof):
            proof_from_bytes(data[:-cut])

    def test_trailing_bytes(self, proof: StarkProof) -> None:
        with pytest.raises(MalformedProof):
            proof_from_bytes(proof_to_bytes(proof) + b"\x00")

    def test_bad_magic(self, proof: StarkProof) -> None:
        data = proof_to_bytes(proof)
        with pytest.raises(MalformedProof):
            proof_from_bytes(b"XXXX" + data[4:])
        with pytest.raises(MalformedProof):
            proof_from_bytes(b"")

    def test_non_canonical_element(self) -> None:
        data = MAGIC + struct.pack(">III", 0, 0, 1) + P.to_bytes(4, "big") + struct.pack(">I", 0)
        with pytest.raises(MalformedProof):
            proof_from_bytes(data)
        ok = MAGIC + struct.pack(">III", 0, 0, 1) + (P - 1).to_bytes(4, "big") + struct.pack(">I", 0)
        assert proof_from_bytes(ok).final_coefficients == [FieldElement(P - 1)]

    def test_oversized_count(self) -> None:
        data = MAGIC + struct.pack(">I", 0xFFFFFFFF)
        with pytest.raises(MalformedProof):
            proof_from_bytes(data)


class TestJsonFormat:
    """proof_to_json / proof_from_json."""

    def test_roundtrip(self, proof: StarkProof) -> None:
        as_json = proof_to_json(proof)
        json.dumps(as_json)
        assert proof_from_json(as_json) == proof
        assert loads(dumps(proof)) == proof

    def test_missing_field(self, proof: StarkProof) -> None:
        as_json = proof_to_json(proof)
        del as_json["fri_roots"]
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    def test_bad_hex(self, proof: StarkProof) -> None:
        as_json = proof_to_json(proof)
        as_json["trace_roots"][0] = "zz"
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    def test_out_of_range_value(self, proof: StarkProof) -> None:
        as_json = proof_to_json(proof)
        as_json["queries"][0]["trace"][0][0]["value"] = P
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    @pytest.mark.parametrize("bad", [1.0, 3.7, True, "5", None])
    def test_non_integer_query_index(self, proof: StarkProof, bad) -> None:
        as_json = proof_to_json(proof)
        as_json["queries"][0]["index"] = bad
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    @pytest.mark.parametrize("bad", [1.0, False, "7"])
    def test_non_integer_opening_value(self, proof: StarkProof, bad) -> None:
        as_json = proof_to_json(proof)
        as_json["queries"][0]["trace"][0][0]["value"] = bad
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    @pytest.mark.parametrize("bad", [0.0, True])
    def test_non_integer_final_coefficient(self, proof: StarkProof, bad) -> None:
        as_json = proof_to_json(proof)
        as_json["final_coefficients"][0] = bad
        with pytest.raises(MalformedProof):
            proof_from_json(as_json)

    def test_invalid_text(self) -> None:
        with pytest.raises(MalformedProof):
            loads("{not json")


def test_params_reject_bad_configuration() -> None:
    for kwargs in (
        {"trace_length": 6},
        {"trace_length": 1},
        {"trace_length": 8, "blowup_factor": 1},
        {"trace_length": 8, "blowup_factor": 3},
        {"trace_length": 8, "coset_offset": 0},
        {"trace_length": 8, "coset_offset": 1},
        {"trace_length": 8, "n_queries": 0},
        {"trace_length": 8, "fri_degree_bound": -1},
        {"trace_length": 1 << 28, "blowup_factor": 8},
        {"trace_length": 8, "modulus": 2**31 - 1},
    ):
        with pytest.raises(ValueError):
            StarkParams(**kwargs)


def test_params_modulus_is_part_of_the_statement() -> None:
    params = StarkParams(trace_length=8, modulus=P)
    assert params.modulus == P
    assert params.to_dict()["modulus"] == P
    with pytest.raises(ValueError, match=str(P)):
        StarkParams(trace_length=8, modulus=2**31 - 1)
