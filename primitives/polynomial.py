"""Dense univariate polynomials over GF(p).

Coefficients are stored lowest degree first as a trimmed FF array, so the
last stored coefficient is always non-zero and the zero polynomial has no
coefficients at all. galois.Poly (which orders coefficients highest degree
first) is used internally for schoolbook multiplication, division and
interpolation; large products go through the NTT instead.
"""

from typing import Iterable, List, Sequence, Tuple, Union

import galois
import numpy as np

from primitives.domain import Domain
from primitives.errors import (
    DivisionByZeroPolynomial,
    DuplicateInterpolationPoint,
    NonZeroRemainder,
)
from primitives.field import FF, P, FieldElement, powers, to_elements, to_ff
from primitives.ntt import NTT

# --- Constants ---

ZERO_DEGREE = -1
"""Degree reported by the zero polynomial."""

NTT_MULTIPLY_THRESHOLD = 64
"""Both factors must have at least this many coefficients to use NTT multiplication."""

Scalar = Union[int, FieldElement]


# --- Internal Helpers ---

def _trim(coeffs: FF) -> FF:
    """Drop trailing zero coefficients."""
    nonzero = np.nonzero(np.asarray(coeffs))[0]
    if len(nonzero) == 0:
        return FF.Zeros(0)
    return coeffs[: nonzero[-1] + 1]


def _pad_to(coeffs: FF, n: int) -> FF:
    if len(coeffs) == n:
        return coeffs
    out = FF.Zeros(n)
    out[: len(coeffs)] = coeffs
    return out


def _ntt_multiply(a: FF, b: FF) -> FF:
    """Convolution through pointwise products on a large enough subgroup."""
    n = len(a) + len(b) - 1
    size = 1 << (n - 1).bit_length()
    engine = NTT(size)
    return engine.intt(engine.ntt(a) * engine.ntt(b))[:n]


# --- Polynomial ---

class Polynomial:
    """Polynomial with coefficients in GF(p), lowest degree first.

    Instances are never mutated; every operation returns a new polynomial.
    Operands may be Polynomials, FieldElements or ints.
    """

    def __init__(self, coeffs: Union[Iterable[Scalar], FF] = ()) -> None:
        self._coeffs = _trim(to_ff(coeffs if isinstance(coeffs, FF) else list(coeffs))).copy()

    # --- Constructors ---

    @classmethod
    def zero(cls) -> "Polynomial":
        return cls()

    @classmethod
    def constant(cls, value: Scalar) -> "Polynomial":
        return cls([value])

    @classmethod
    def X(cls) -> "Polynomial":
        """The identity polynomial X."""
        return cls([0, 1])

    @classmethod
    def monomial(cls, degree: int, coeff: Scalar = 1) -> "Polynomial":
        return cls([0] * degree + [coeff])

    @classmethod
    def interpolate(cls, xs: Sequence[Scalar], ys: Sequence[Scalar]) -> "Polynomial":
        """Lagrange interpolation: the unique polynomial of degree < len(xs) through the points."""
        if len(xs) != len(ys):
            raise ValueError(f"Got {len(xs)} x-values but {len(ys)} y-values")
        seen = set()
        for x in xs:
            key = int(x) % P
            if key in seen:
                raise DuplicateInterpolationPoint(f"x = {key} appears more than once")
            seen.add(key)
        if not xs:
            return cls()
        return cls._from_galois(galois.lagrange_poly(to_ff(xs), to_ff(ys)))

    @classmethod
    def from_evaluations(cls, values: Union[Sequence[Scalar], FF], domain: Domain) -> "Polynomial":
        """Interpolate values given at domain.element(0..size-1) with an inverse coset NTT."""
        values = to_ff(values)
        if len(values) != domain.size:
            raise ValueError(f"Expected {domain.size} values, got {len(values)}")
        return cls(NTT(domain.size).coset_intt(values, domain.offset))

    @classmethod
    def vanishing(cls, points: Sequence[Scalar]) -> "Polynomial":
        """Return Z(X) = prod (X - x_i) over the given points."""
        if len(points) == 0:
            return cls([1])
        return cls._from_galois(galois.Poly.Roots(to_ff(points), field=FF))

    # --- Accessors ---

    @property
    def coeffs(self) -> FF:
        """Coefficients as an FF array (lowest degree first, trimmed)."""
        return self._coeffs.copy()

    @property
    def coefficients(self) -> List[FieldElement]:
        return to_elements(self._coeffs)

    @property
    def leading_coefficient(self) -> FieldElement:
        if self.is_zero():
            return FieldElement.zero()
        return FieldElement(int(self._coeffs[-1]))

    def degree(self) -> int:
        """Index of the last non-zero coefficient; ZERO_DEGREE for the zero polynomial."""
        return len(self._coeffs) - 1

    def is_zero(self) -> bool:
        return len(self._coeffs) == 0

    def _int_coeffs(self) -> List[int]:
        return [int(c) for c in self._coeffs]

    # --- Evaluation ---

    def evaluate(self, x: Scalar) -> FieldElement:
        """Evaluate at a single point with Horner's method."""
        xv = int(x) % P
        acc = 0
        for c in reversed(self._int_coeffs()):
            acc = (acc * xv + c) % P
        return FieldElement(acc)

    def evaluate_domain(self, domain: Domain) -> FF:
        """Evaluate at every point of domain, in index order."""
        if len(self._coeffs) <= domain.size:
            return NTT(domain.size).coset_ntt(self._coeffs, domain.offset)
        return self._to_galois()(domain.elements())

    def __call__(self, x):
        """p(x) for a point, or p(x(X)) when x is a Polynomial."""
        if isinstance(x, Polynomial):
            return self.compose(x)
        return self.evaluate(x)

    # --- Arithmetic ---

    @staticmethod
    def _lift(other) -> "Polynomial":
        if isinstance(other, Polynomial):
            return other
        if isinstance(other, (FieldElement, int)):
            return Polynomial([other])
        return None

    def __add__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        n = max(len(self._coeffs), len(other._coeffs))
        return Polynomial(_pad_to(self._coeffs, n) + _pad_to(other._coeffs, n))

    __radd__ = __add__

    def __sub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        n = max(len(self._coeffs), len(other._coeffs))
        return Polynomial(_pad_to(self._coeffs, n) - _pad_to(other._coeffs, n))

    def __rsub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return other - self

    def __neg__(self) -> "Polynomial":
        return Polynomial(-self._coeffs)

    def __mul__(self, other):
        if isinstance(other, (FieldElement, int)):
            return Polynomial(self._coeffs * FF(int(other) % P))
        other = self._lift(other)
        if other is None:
            return NotImplemented
        if self.is_zero() or other.is_zero():
            return Polynomial()
        if min(len(self._coeffs), len(other._coeffs)) >= NTT_MULTIPLY_THRESHOLD:
            return Polynomial(_ntt_multiply(self._coeffs, other._coeffs))
        return Polynomial._from_galois(self._to_galois() * other._to_galois())

    __rmul__ = __mul__

    def __pow__(self, exponent: int) -> "Polynomial":
        if exponent < 0:
            raise ValueError(f"Polynomial exponent must be non-negative, got {exponent}")
        result = Polynomial([1])
        base = self
        while exponent:
            if exponent & 1:
                result = result * base
            exponent >>= 1
            if exponent:
                base = base * base
        return result

    def compose(self, other) -> "Polynomial":
        """Return self(other(X))."""
        other = self._lift(other)
        if other is None:
            raise TypeError("compose() expects a Polynomial, FieldElement or int")
        # Fast path for self(c * X): scale the i-th coefficient by c^i
        if other.degree() == 1 and int(other._coeffs[0]) == 0:
            c = int(other._coeffs[1])
            return Polynomial(self._coeffs * powers(c, len(self._coeffs)))
        result = Polynomial()
        for c in reversed(self.coefficients):
            result = result * other + c
        return result

    def scale(self, factor: Scalar) -> "Polynomial":
        """Scalar multiplication."""
        return self * FieldElement(factor)

    # --- Division ---

    def qdiv(self, other) -> Tuple["Polynomial", "Polynomial"]:
        """Return (quotient, remainder) with self == q * other + r and deg(r) < deg(other)."""
        other = self._lift(other)
        if other is None:
            raise TypeError(f"Cannot divide a Polynomial by {type(other).__name__}")
        if other.is_zero():
            raise DivisionByZeroPolynomial("Polynomial division by the zero polynomial")
        if self.is_zero():
            return Polynomial(), Polynomial()
        q, r = divmod(self._to_galois(), other._to_galois())
        return Polynomial._from_galois(q), Polynomial._from_galois(r)

    __divmod__ = qdiv

    def __floordiv__(self, other) -> "Polynomial":
        return self.qdiv(other)[0]

    def __mod__(self, other) -> "Polynomial":
        return self.qdiv(other)[1]

    def __truediv__(self, other) -> "Polynomial":
        """Exact division; a scalar divisor multiplies by its inverse."""
        if isinstance(other, (FieldElement, int)):
            return self * FieldElement(other).inverse()
        q, r = self.qdiv(other)
        if not r.is_zero():
            raise NonZeroRemainder(f"Division by a degree-{other.degree()} polynomial is not exact")
        return q

    def divide_by_vanishing(self, points: Sequence[Scalar]) -> "Polynomial":
        """Divide by prod (X - x_i), requiring self to vanish on every x_i."""
        if len(points) == 0:
            return Polynomial(self._coeffs)
        q, r = self.qdiv(Polynomial.vanishing(points))
        if not r.is_zero():
            raise NonZeroRemainder(f"Polynomial does not vanish on all {len(points)} points")
        return q

    # --- FRI Support ---

    def split_even_odd(self) -> Tuple["Polynomial", "Polynomial"]:
        """Return (even, odd) with self(X) == even(X^2) + X * odd(X^2)."""
        return Polynomial(self._coeffs[0::2]), Polynomial(self._coeffs[1::2])

    # --- galois Interop ---

    def _to_galois(self) -> galois.Poly:
        if self.is_zero():
            return galois.Poly.Zero(FF)
        return galois.Poly(self._coeffs[::-1], field=FF)

    @classmethod
    def _from_galois(cls, poly: galois.Poly) -> "Polynomial":
        return cls(poly.coeffs[::-1])

    # --- Comparison / Display ---

    def __eq__(self, other) -> bool:
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self._int_coeffs() == other._int_coeffs()

    __hash__ = None

    def __repr__(self) -> str:
        return f"Polynomial({self._int_coeffs()})"

    def __str__(self) -> str:
        terms = []
        for power, c in enumerate(self._int_coeffs()):
            if c == 0:
                continue
            if power == 0:
                terms.append(f"{c}")
            elif power == 1:
                terms.append("X" if c == 1 else f"{c}*X")
            else:
                terms.append(f"X^{power}" if c == 1 else f"{c}*X^{power}")
        return " + ".join(terms) if terms else "0"
