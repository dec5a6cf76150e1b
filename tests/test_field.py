"""Tests for the prime field GF(3 * 2^30 + 1)."""

import random

import pytest

from primitives.errors import DivisionByZero
from primitives.field import (
    FF,
    FIELD_BYTES,
    GENERATOR,
    P,
    TWO_ADICITY,
    FieldElement,
    get_omega,
    powers,
    to_elements,
    to_ff,
)


class TestFieldElement:
    """Arithmetic and representation of scalar elements."""

    def test_reduces_on_construction(self) -> None:
        assert FieldElement(P).val == 0
        assert FieldElement(P + 5).val == 5
        assert FieldElement(-1).val == P - 1

    def test_basic_arithmetic(self) -> None:
        a, b = FieldElement(7), FieldElement(P - 3)
        assert a + b == 4
        assert a - b == 10
        assert a * b == (7 * (P - 3)) % P
        assert -a == P - 7

    def test_int_operands(self) -> None:
        a = FieldElement(10)
        assert a + 1 == 11
        assert 1 + a == 11
        assert 20 - a == 10
        assert 3 * a == 30
        assert 1 / FieldElement(2) * 2 == 1

    @pytest.mark.parametrize("seed", range(5))
    def test_inverse(self, seed: int) -> None:
        x = FieldElement.random(random.Random(seed))
        if x == 0:
            x = FieldElement.one()
        assert x * x.inverse() == FieldElement.one()
        assert x / x == 1

    def test_zero_inverse_raises(self) -> None:
        with pytest.raises(DivisionByZero):
            FieldElement.zero().inverse()
        with pytest.raises(ZeroDivisionError):
            FieldElement(3) / 0

    def test_pow(self) -> None:
        g = FieldElement.generator()
        assert g ** 0 == 1
        assert g ** (P - 1) == 1
        assert g ** -1 == g.inverse()
        assert g ** -3 * g ** 3 == 1

    def test_generator_has_full_order(self) -> None:
        g = FieldElement(GENERATOR)
        assert g.is_order(P - 1)
        assert not g.is_order((P - 1) // 2)
        assert not FieldElement(4).is_order(P - 1)

    @pytest.mark.parametrize("n_bits", [0, 1, 5, 30])
    def test_omega_is_order(self, n_bits: int) -> None:
        omega = get_omega(n_bits)
        assert omega.is_order(1 << n_bits)
        if n_bits > 0:
            assert not omega.is_order(1 << (n_bits - 1))
            assert not omega.is_order(1 << (n_bits + 1))

    def test_is_order_small_cases(self) -> None:
        assert FieldElement.one().is_order(1)
        assert not FieldElement.one().is_order(3)
        assert (-FieldElement.one()).is_order(2)
        assert not FieldElement.zero().is_order(1)
        with pytest.raises(ValueError):
            FieldElement(5).is_order(0)

    def test_immutable(self) -> None:
        x = FieldElement(1)
        with pytest.raises(AttributeError):
            x._val = 2

    def test_hash_and_equality(self) -> None:
        assert FieldElement(5) == FieldElement(P + 5)
        assert len({FieldElement(5), FieldElement(P + 5), FieldElement(6)}) == 2
        assert FieldElement(5) != "5"

    def test_bytes_roundtrip(self) -> None:
        x = FieldElement(P - 1)
        data = x.to_bytes()
        assert len(data) == FIELD_BYTES == 4
        assert data == (P - 1).to_bytes(4, "big")
        assert FieldElement.from_bytes(data) == x

    def test_str_repr(self) -> None:
        assert str(FieldElement(42)) == "42"
        assert repr(FieldElement(42)) == "FieldElement(42)"


class TestRootsOfUnity:
    """Canonical 2^k-th roots of unity."""

    @pytest.mark.parametrize("n_bits", [0, 1, 3, 10, TWO_ADICITY])
    def test_order(self, n_bits: int) -> None:
        w = get_omega(n_bits)
        assert w ** (1 << n_bits) == 1
        if n_bits > 0:
            assert w ** (1 << (n_bits - 1)) == P - 1

    def test_squares_are_canonical(self) -> None:
        for k in range(1, 12):
            assert get_omega(k) ** 2 == get_omega(k - 1)

    @pytest.mark.parametrize("n_bits", [-1, TWO_ADICITY + 1])
    def test_out_of_range(self, n_bits: int) -> None:
        with pytest.raises(ValueError):
            get_omega(n_bits)


class TestArrayHelpers:
    """Conversions between FieldElement and galois arrays."""

    def test_powers(self) -> None:
        assert [int(v) for v in powers(3, 5)] == [1, 3, 9, 27, 81]
        assert len(powers(3, 0)) == 0
        g = FieldElement(GENERATOR)
        assert [int(v) for v in powers(g, 40)] == [int(g ** i) for i in range(40)]

    def test_to_ff_and_back(self) -> None:
        arr = to_ff([1, FieldElement(2), P + 3])
        assert isinstance(arr, FF)
        assert to_elements(arr) == [FieldElement(1), FieldElement(2), FieldElement(3)]
        assert len(to_ff([])) == 0
