"""Binary Merkle tree commitment using SHA-256."""

import hashlib
from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np

from primitives.errors import InvalidLeafCount
from primitives.field import FF, FieldElement

# --- Constants ---

HASH_SIZE = 32

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"

PADDING_VALUE = FieldElement.zero()
"""Value appended to a leaf sequence whose length is not a power of two."""

# --- Type Aliases ---

MerkleRoot = bytes
Digest = bytes


# --- Hashing ---

def hash_leaf(value: Union[int, FieldElement]) -> Digest:
    return hashlib.sha256(LEAF_PREFIX + FieldElement(value).to_bytes()).digest()


def hash_node(left: Digest, right: Digest) -> Digest:
    return hashlib.sha256(NODE_PREFIX + left + right).digest()


# --- Data Classes ---

@dataclass
class QueryProof:
    """Opened leaf value and its authentication path.

    Attributes:
        value: Field value stored at the queried leaf
        path: Sibling digests from the leaf level up to (excluding) the root
    """
    value: FieldElement = field(default_factory=FieldElement.zero)
    path: List[Digest] = field(default_factory=list)


# --- Merkle Tree ---

class MerkleTree:
    """Complete binary Merkle tree over a sequence of field values.

    Nodes are stored heap-style: nodes[1] is the root and the children of
    node i are 2i and 2i + 1, so leaf i lives at nodes[n_leaves + i].
    """

    def __init__(self, values: Union[Sequence[Union[int, FieldElement]], FF]) -> None:
        if isinstance(values, FF):
            values = [int(v) for v in np.asarray(values)]
        if len(values) == 0:
            raise InvalidLeafCount("Cannot build a Merkle tree over zero leaves")

        self.n_values = len(values)
        n_leaves = 1 << (self.n_values - 1).bit_length()
        self.leaves: List[FieldElement] = [FieldElement(v) for v in values]
        self.leaves.extend([PADDING_VALUE] * (n_leaves - self.n_values))
        self.height = n_leaves.bit_length() - 1

        self.nodes: List[Digest] = [b""] * (2 * n_leaves)
        self.nodes[n_leaves:] = [hash_leaf(v) for v in self.leaves]
        for i in range(n_leaves - 1, 0, -1):
            self.nodes[i] = hash_node(self.nodes[2 * i], self.nodes[2 * i + 1])

    # --- Core Operations ---

    @property
    def n_leaves(self) -> int:
        return len(self.leaves)

    def commit(self) -> MerkleRoot:
        """Return the root digest."""
        return self.nodes[1]

    def get_authentication_path(self, index: int) -> List[Digest]:
        """Sibling digests from leaf `index` up to the root."""
        if index < 0 or index >= self.n_leaves:
            raise ValueError(f"Leaf index {index} out of range [0, {self.n_leaves})")
        path = []
        node = self.n_leaves + index
        while node > 1:
            path.append(self.nodes[node ^ 1])
            node >>= 1
        return path

    def get_query_proof(self, index: int) -> QueryProof:
        """Leaf value plus authentication path for `index`."""
        path = self.get_authentication_path(index)
        return QueryProof(value=self.leaves[index], path=path)

    # --- Verification ---

    @staticmethod
    def verify(root: MerkleRoot, index: int, value: Union[int, FieldElement], path: Sequence[Digest]) -> bool:
        """Recompute the root from a leaf and its path; True iff it equals `root`."""
        if index < 0 or index >= (1 << len(path)):
            return False
        if any(len(sibling) != HASH_SIZE for sibling in path):
            return False
        current = hash_leaf(value)
        node = index
        for sibling in path:
            if node & 1:
                current = hash_node(sibling, current)
            else:
                current = hash_node(current, sibling)
            node >>= 1
        return current == root

    def verify_query(self, index: int, proof: QueryProof) -> bool:
        return MerkleTree.verify(self.commit(), index, proof.value, proof.path)
