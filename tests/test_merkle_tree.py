"""Tests for the SHA-256 Merkle tree commitment."""

import hashlib

import pytest

from primitives.errors import InvalidLeafCount
from primitives.field import FF, FieldElement
from primitives.merkle_tree import (
    HASH_SIZE,
    PADDING_VALUE,
    MerkleTree,
    QueryProof,
    hash_leaf,
    hash_node,
)


class TestHashing:
    """Domain-separated leaf and node hashes."""

    def test_leaf_hash(self) -> None:
        expected = hashlib.sha256(b"\x00" + (7).to_bytes(4, "big")).digest()
        assert hash_leaf(7) == expected
        assert hash_leaf(FieldElement(7)) == expected

    def test_node_hash(self) -> None:
        left, right = hash_leaf(1), hash_leaf(2)
        assert hash_node(left, right) == hashlib.sha256(b"\x01" + left + right).digest()

    def test_leaf_and_node_separated(self) -> None:
        # A 4-byte value must never collide with an internal node by construction
        assert hash_leaf(0) != hashlib.sha256((0).to_bytes(4, "big")).digest()


class TestMerkleTree:
    """Commitment and authentication paths."""

    @pytest.mark.parametrize("n", [1, 2, 5, 8, 13])
    def test_all_indices_verify(self, n: int) -> None:
        values = [i * i + 3 for i in range(n)]
        tree = MerkleTree(values)
        root = tree.commit()
        assert len(root) == HASH_SIZE
        for i, v in enumerate(values):
            path = tree.get_authentication_path(i)
            assert len(path) == tree.height
            assert MerkleTree.verify(root, i, v, path)
            assert tree.verify_query(i, tree.get_query_proof(i))

    def test_two_leaf_root(self) -> None:
        tree = MerkleTree([1, 2])
        assert tree.commit() == hash_node(hash_leaf(1), hash_leaf(2))
        assert tree.height == 1

    def test_single_leaf(self) -> None:
        tree = MerkleTree([9])
        assert tree.commit() == hash_leaf(9)
        assert tree.get_authentication_path(0) == []
        assert MerkleTree.verify(tree.commit(), 0, 9, [])

    def test_padding(self) -> None:
        tree = MerkleTree([1, 2, 3])
        assert tree.n_values == 3
        assert tree.n_leaves == 4
        assert tree.leaves[3] == PADDING_VALUE
        assert tree.commit() == MerkleTree([1, 2, 3, 0]).commit()

    def test_accepts_field_array(self) -> None:
        assert MerkleTree(FF([4, 5, 6, 7])).commit() == MerkleTree([4, 5, 6, 7]).commit()

    def test_empty_raises(self) -> None:
        with pytest.raises(InvalidLeafCount):
            MerkleTree([])

    def test_deterministic(self) -> None:
        assert MerkleTree([1, 2, 3, 4]).commit() == MerkleTree([1, 2, 3, 4]).commit()
        assert MerkleTree([1, 2, 3, 4]).commit() != MerkleTree([1, 2, 4, 3]).commit()

    @pytest.mark.parametrize("index", [-1, 8])
    def test_path_index_out_of_range(self, index: int) -> None:
        with pytest.raises(ValueError):
            MerkleTree(list(range(8))).get_authentication_path(index)


class TestVerifyRejects:
    """verify() returns False, never raises, on bad input."""

    @pytest.fixture
    def tree(self) -> MerkleTree:
        return MerkleTree([10, 20, 30, 40, 50, 60, 70, 80])

    def test_wrong_value(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(2)
        assert not MerkleTree.verify(tree.commit(), 2, 31, path)

    def test_wrong_index(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(2)
        assert not MerkleTree.verify(tree.commit(), 3, 30, path)

    @pytest.mark.parametrize("level", [0, 1, 2])
    def test_tampered_path(self, tree: MerkleTree, level: int) -> None:
        path = tree.get_authentication_path(5)
        tampered = bytearray(path[level])
        tampered[0] ^= 1
        path[level] = bytes(tampered)
        assert not MerkleTree.verify(tree.commit(), 5, 60, path)

    def test_index_beyond_path(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(0)
        assert not MerkleTree.verify(tree.commit(), 8, 10, path)
        assert not MerkleTree.verify(tree.commit(), -1, 10, path)

    def test_short_sibling(self, tree: MerkleTree) -> None:
        path = tree.get_authentication_path(0)
        path[1] = path[1][:16]
        assert not MerkleTree.verify(tree.commit(), 0, 10, path)

    def test_wrong_root(self, tree: MerkleTree) -> None:
        proof = tree.get_query_proof(4)
        assert not MerkleTree.verify(MerkleTree([1]).commit(), 4, proof.value, proof.path)

    def test_tampered_query_proof(self, tree: MerkleTree) -> None:
        proof = tree.get_query_proof(1)
        assert not tree.verify_query(1, QueryProof(value=FieldElement(21), path=proof.path))
