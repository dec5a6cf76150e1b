"""STARK proof data structures and serialization.

Binary layout (all integers big-endian):

    magic            b"STK\\x01"
    trace roots      u32 count, count * 32-byte digest
    FRI roots        u32 count, count * 32-byte digest   (layer 0 = composition)
    final coeffs     u32 count, count * field element
    queries          u32 count, then per query:
        index        u32
        trace        u32 n_columns, per column: u32 n_offsets, n_offsets * opening
        fri          u32 n_layers, per layer: opening (value), opening (sibling)

    opening          field element, u8 path length, path length * 32-byte digest
    field element    FIELD_BYTES, must be canonical (< p)
"""

import json
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, List

from primitives.field import FIELD_BYTES, P, FieldElement
from primitives.merkle_tree import HASH_SIZE, MerkleRoot, QueryProof
from protocol.errors import MalformedProof

MAGIC = b"STK\x01"

# --- Proof Data Structures ---

@dataclass
class FriLayerOpening:
    """Openings of f(x) and f(-x) in one FRI layer."""
    value: QueryProof = field(default_factory=QueryProof)
    sibling: QueryProof = field(default_factory=QueryProof)


@dataclass
class QueryResponse:
    """Everything the prover reveals for one query index.

    Attributes:
        index: Position in the extended domain
        trace: trace[c][j] opens column c at the j-th constraint offset
        fri: One opening pair per committed FRI layer
    """
    index: int = 0
    trace: List[List[QueryProof]] = field(default_factory=list)
    fri: List[FriLayerOpening] = field(default_factory=list)


@dataclass
class StarkProof:
    """Complete STARK proof.

    Attributes:
        trace_roots: Merkle root of each trace column's low-degree extension
        fri_roots: Merkle root of each committed FRI layer; fri_roots[0]
                   commits to the composition polynomial
        final_coefficients: Coefficients of the last folded polynomial
        queries: One response per query repetition
    """
    trace_roots: List[MerkleRoot] = field(default_factory=list)
    fri_roots: List[MerkleRoot] = field(default_factory=list)
    final_coefficients: List[FieldElement] = field(default_factory=list)
    queries: List[QueryResponse] = field(default_factory=list)


# --- Binary Serialization ---

def _pack_u32(value: int) -> bytes:
    return struct.pack(">I", value)


def _pack_opening(opening: QueryProof) -> bytes:
    if len(opening.path) > 0xFF:
        raise ValueError(f"Authentication path of length {len(opening.path)} does not fit in one byte")
    parts = [FieldElement(opening.value).to_bytes(), struct.pack(">B", len(opening.path))]
    parts.extend(opening.path)
    return b"".join(parts)


def proof_to_bytes(proof: StarkProof) -> bytes:
    """Serialize a proof to its canonical binary form."""
    parts = [MAGIC]

    for roots in (proof.trace_roots, proof.fri_roots):
        parts.append(_pack_u32(len(roots)))
        for root in roots:
            if len(root) != HASH_SIZE:
                raise ValueError(f"Root has {len(root)} bytes, expected {HASH_SIZE}")
            parts.append(root)

    parts.append(_pack_u32(len(proof.final_coefficients)))
    parts.extend(FieldElement(c).to_bytes() for c in proof.final_coefficients)

    parts.append(_pack_u32(len(proof.queries)))
    for query in proof.queries:
        parts.append(_pack_u32(query.index))
        parts.append(_pack_u32(len(query.trace)))
        for column in query.trace:
            parts.append(_pack_u32(len(column)))
            parts.extend(_pack_opening(o) for o in column)
        parts.append(_pack_u32(len(query.fri)))
        for layer in query.fri:
            parts.append(_pack_opening(layer.value))
            parts.append(_pack_opening(layer.sibling))

    return b"".join(parts)


class _Reader:
    """Cursor over proof bytes; every short read is a MalformedProof."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise MalformedProof(f"Proof truncated at byte {self.pos} (needed {n} more)")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u8(self) -> int:
        return struct.unpack(">B", self.take(1))[0]

    def u32(self) -> int:
        return struct.unpack(">I", self.take(4))[0]

    def count(self, item_size: int) -> int:
        """Read a u32 count, rejecting counts the remaining bytes cannot hold."""
        n = self.u32()
        if n * item_size > len(self.data) - self.pos:
            raise MalformedProof(f"Count {n} at byte {self.pos - 4} exceeds the remaining proof data")
        return n

    def element(self) -> FieldElement:
        value = int.from_bytes(self.take(FIELD_BYTES), "big")
        if value >= P:
            raise MalformedProof(f"Non-canonical field element {value} at byte {self.pos - FIELD_BYTES}")
        return FieldElement(value)

    def digest(self) -> bytes:
        return self.take(HASH_SIZE)

    def opening(self) -> QueryProof:
        value = self.element()
        path = [self.digest() for _ in range(self.u8())]
        return QueryProof(value=value, path=path)

    def finish(self) -> None:
        if self.pos != len(self.data):
            raise MalformedProof(f"{len(self.data) - self.pos} trailing bytes after proof")


def proof_from_bytes(data: bytes) -> StarkProof:
    """Parse the binary form; raises MalformedProof on any encoding error."""
    reader = _Reader(bytes(data))
    if reader.take(len(MAGIC)) != MAGIC:
        raise MalformedProof("Bad proof magic")

    proof = StarkProof()
    proof.trace_roots = [reader.digest() for _ in range(reader.count(HASH_SIZE))]
    proof.fri_roots = [reader.digest() for _ in range(reader.count(HASH_SIZE))]
    proof.final_coefficients = [reader.element() for _ in range(reader.count(FIELD_BYTES))]

    # Smallest query: index, column count, layer count
    for _ in range(reader.count(12)):
        query = QueryResponse(index=reader.u32())
        for _ in range(reader.count(4)):
            query.trace.append([reader.opening() for _ in range(reader.count(FIELD_BYTES + 1))])
        for _ in range(reader.count(2 * (FIELD_BYTES + 1))):
            query.fri.append(FriLayerOpening(value=reader.opening(), sibling=reader.opening()))
        proof.queries.append(query)

    reader.finish()
    return proof


# --- JSON Serialization ---

def _opening_to_json(opening: QueryProof) -> Dict[str, Any]:
    return {"value": int(opening.value), "path": [d.hex() for d in opening.path]}


def _json_int(value: Any, what: str) -> int:
    # bool is an int subclass; int() would truncate floats
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedProof(f"{what} must be an integer, got {value!r}")
    return value


def _opening_from_json(data: Dict[str, Any]) -> QueryProof:
    value = _json_int(data["value"], "Field element")
    if not 0 <= value < P:
        raise MalformedProof(f"Non-canonical field element {value}")
    path = [bytes.fromhex(d) for d in data["path"]]
    return QueryProof(value=FieldElement(value), path=path)


def proof_to_json(proof: StarkProof) -> Dict[str, Any]:
    """Convert a proof to a JSON-serializable dictionary (digests as hex)."""
    return {
        "trace_roots": [r.hex() for r in proof.trace_roots],
        "fri_roots": [r.hex() for r in proof.fri_roots],
        "final_coefficients": [int(c) for c in proof.final_coefficients],
        "queries": [
            {
                "index": q.index,
                "trace": [[_opening_to_json(o) for o in column] for column in q.trace],
                "fri": [
                    {"value": _opening_to_json(layer.value), "sibling": _opening_to_json(layer.sibling)}
                    for layer in q.fri
                ],
            }
            for q in proof.queries
        ],
    }


def proof_from_json(data: Dict[str, Any]) -> StarkProof:
    """Inverse of proof_to_json; raises MalformedProof on missing or invalid fields."""
    try:
        return StarkProof(
            trace_roots=[bytes.fromhex(r) for r in data["trace_roots"]],
            fri_roots=[bytes.fromhex(r) for r in data["fri_roots"]],
            final_coefficients=[
                _opening_from_json({"value": c, "path": []}).value
                for c in data["final_coefficients"]
            ],
            queries=[
                QueryResponse(
                    index=_json_int(q["index"], "Query index"),
                    trace=[[_opening_from_json(o) for o in column] for column in q["trace"]],
                    fri=[
                        FriLayerOpening(
                            value=_opening_from_json(layer["value"]),
                            sibling=_opening_from_json(layer["sibling"]),
                        )
                        for layer in q["fri"]
                    ],
                )
                for q in data["queries"]
            ],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedProof(f"Invalid proof JSON: {exc}") from exc


def dumps(proof: StarkProof) -> str:
    return json.dumps(proof_to_json(proof), sort_keys=True)


def loads(text: str) -> StarkProof:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedProof(f"Invalid proof JSON: {exc}") from exc
    return proof_from_json(data)
