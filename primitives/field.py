"""Prime field GF(p) with p = 3 * 2^30 + 1.

Two representations share the same field:

- FieldElement: immutable scalar used at protocol boundaries (channel draws,
  proof values, constraint evaluation at a point).
- FF: the galois array class, used for bulk vectors (coefficients, domain
  evaluations) so arithmetic runs vectorized.

Conversions are explicit: FF(int(x)) and FieldElement(int(a)).
"""

import random
from typing import Optional, Union

import galois
import numpy as np

from primitives.errors import DivisionByZero

# --- Field Construction ---

P = 3 * 2**30 + 1
"""Field modulus. p - 1 = 3 * 2^30, so power-of-two domains up to 2^30 exist."""

GENERATOR = 5
"""Generator of the multiplicative group GF(p)*."""

TWO_ADICITY = 30

FIELD_BYTES = (P.bit_length() + 7) // 8
"""Width of the fixed-size big-endian encoding of one element."""

FF = galois.GF(P)
"""Base field GF(p) as a galois array class."""


# --- Scalar Element ---

class FieldElement:
    """An element of GF(p), always stored reduced to [0, p)."""

    __slots__ = ("_val",)

    def __init__(self, val: Union[int, "FieldElement"] = 0) -> None:
        if isinstance(val, FieldElement):
            val = val._val
        object.__setattr__(self, "_val", int(val) % P)

    def __setattr__(self, name, value):
        raise AttributeError("FieldElement is immutable")

    # --- Constructors ---

    @classmethod
    def zero(cls) -> "FieldElement":
        return cls(0)

    @classmethod
    def one(cls) -> "FieldElement":
        return cls(1)

    @classmethod
    def generator(cls) -> "FieldElement":
        return cls(GENERATOR)

    @classmethod
    def random(cls, rng: Optional[random.Random] = None) -> "FieldElement":
        """Uniform element; pass a seeded rng for reproducible tests."""
        rng = rng if rng is not None else random.Random()
        return cls(rng.randrange(P))

    @classmethod
    def from_bytes(cls, data: bytes) -> "FieldElement":
        """Decode a big-endian encoding. Out-of-range values are reduced."""
        return cls(int.from_bytes(data, "big"))

    # --- Accessors ---

    @property
    def val(self) -> int:
        return self._val

    def __int__(self) -> int:
        return self._val

    def to_bytes(self) -> bytes:
        """Fixed-width (FIELD_BYTES) big-endian encoding."""
        return self._val.to_bytes(FIELD_BYTES, "big")

    # --- Arithmetic ---

    @staticmethod
    def _coerce(other):
        if isinstance(other, FieldElement):
            return other
        if isinstance(other, int):
            return FieldElement(other)
        return None

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(self._val + other._val)

    __radd__ = __add__

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(self._val - other._val)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(other._val - self._val)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(self._val * other._val)

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self * other.inverse()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other * self.inverse()

    def __neg__(self) -> "FieldElement":
        return FieldElement(-self._val)

    def __pow__(self, exponent: int) -> "FieldElement":
        if exponent < 0:
            return FieldElement(pow(self.inverse()._val, -exponent, P))
        return FieldElement(pow(self._val, exponent, P))

    def inverse(self) -> "FieldElement":
        """Multiplicative inverse via Fermat's little theorem: a^(p-2)."""
        if self._val == 0:
            raise DivisionByZero("Cannot invert the zero element")
        return FieldElement(pow(self._val, P - 2, P))

    def is_order(self, n: int) -> bool:
        """True iff the multiplicative order of this element is exactly n."""
        if n < 1:
            raise ValueError(f"Order must be positive, got {n}")
        if self ** n != 1:
            return False
        # Order divides n; it is n unless some n / q already gives 1
        m, q = n, 2
        while q * q <= m:
            if m % q == 0:
                if self ** (n // q) == 1:
                    return False
                while m % q == 0:
                    m //= q
            q += 1
        return m == 1 or self ** (n // m) != 1

    # --- Comparison ---

    def __eq__(self, other) -> bool:
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self._val == other._val

    def __hash__(self) -> int:
        return hash(self._val)

    def __repr__(self) -> str:
        return f"FieldElement({self._val})"

    def __str__(self) -> str:
        return str(self._val)


# --- Roots of Unity ---

def get_omega(n_bits: int) -> FieldElement:
    """Return the canonical primitive 2^n_bits-th root of unity.

    omega_k = GENERATOR^((p - 1) / 2^k), so omega_k^2 == omega_{k-1}.
    """
    if n_bits < 0 or n_bits > TWO_ADICITY:
        raise ValueError(f"n_bits must be in [0, {TWO_ADICITY}], got {n_bits}")
    return FieldElement(GENERATOR) ** ((P - 1) >> n_bits)


def powers(base: Union[int, FieldElement], count: int) -> FF:
    """Return FF array [base^0, base^1, ..., base^(count-1)]."""
    if count == 0:
        return FF.Zeros(0)
    return FF(int(base) % P) ** np.arange(count)


def to_ff(values) -> FF:
    """Convert a sequence of ints / FieldElements (or an FF array) to FF."""
    if isinstance(values, FF):
        return values
    ints = [int(v) % P for v in values]
    if not ints:
        return FF.Zeros(0)
    return FF(ints)


def to_elements(values: FF) -> list[FieldElement]:
    """Convert an FF array to a list of FieldElements."""
    return [FieldElement(int(v)) for v in values]
