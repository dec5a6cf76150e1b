"""Errors raised by the algebra and commitment layers."""


class StarkError(Exception):
    """Base class for every error raised by this package."""


# --- Algebraic Errors ---

class DivisionByZero(StarkError, ZeroDivisionError):
    """Division by (or inversion of) the additive identity of the field."""


class DivisionByZeroPolynomial(StarkError, ZeroDivisionError):
    """Polynomial division with the zero polynomial as divisor."""


class DuplicateInterpolationPoint(StarkError, ValueError):
    """Interpolation was given the same x-coordinate twice."""


class NonZeroRemainder(StarkError):
    """An exact division left a remainder.

    Raised when a constraint numerator does not vanish on its point set,
    i.e. the constraint does not hold on the trace.
    """


# --- Commitment Errors ---

class InvalidLeafCount(StarkError, ValueError):
    """A Merkle tree was requested over an empty leaf sequence."""
