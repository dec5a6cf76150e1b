"""Composition polynomial: a random linear combination of constraint quotients.

For trace polynomials f_c of degree < n over the trace domain <g>:

    transition t:  Q_t(X) = C_t(f(X), f(gX), ...) / prod_{r in rows(t)} (X - g^r)
    boundary b:    Q_b(X) = (f_c(X) - v) / (X - g^row)
    CP(X)          = sum_i w_i * Q_i(X)

Every quotient is a polynomial exactly when its constraint holds on the trace.
The prover builds CP as a polynomial; the verifier evaluates the same
combination at a single point from opened trace values.
"""

import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from primitives.errors import NonZeroRemainder
from primitives.field import FieldElement
from primitives.polynomial import Polynomial
from protocol.constraints import ConstraintSystem, TransitionConstraint
from protocol.expressions import evaluate
from protocol.params import StarkParams

logger = logging.getLogger(__name__)

# --- Type Aliases ---

Cell = Tuple[str, int]  # (column, row offset)


# --- Prover Side ---

def _shifted_polynomials(
    system: ConstraintSystem,
    trace_polys: Mapping[str, Polynomial],
    generator: FieldElement,
) -> Dict[Cell, Polynomial]:
    """f_c(g^k X) for every column c and every offset k any constraint uses."""
    shifted = {}
    for column in system.columns:
        poly = trace_polys[column]
        for k in system.offsets:
            shifted[(column, k)] = poly if k == 0 else poly.compose(Polynomial([0, generator ** k]))
    return shifted


def build_composition_polynomial(
    trace_polys: Mapping[str, Polynomial],
    system: ConstraintSystem,
    params: StarkParams,
    weights: Sequence[FieldElement],
) -> Polynomial:
    """Return CP(X); raises NonZeroRemainder naming the first violated constraint."""
    if len(weights) != system.n_constraints:
        raise ValueError(f"Expected {system.n_constraints} weights, got {len(weights)}")
    n = params.trace_length
    g = params.trace_domain.generator
    shifted = _shifted_polynomials(system, trace_polys, g)

    quotients: List[Polynomial] = []
    for i, t in enumerate(system.transitions):
        numerator = evaluate(t.expression, lambda column, offset: shifted[(column, offset)])
        points = [g ** r for r in t.rows(n)]
        try:
            quotients.append(numerator.divide_by_vanishing(points))
        except NonZeroRemainder as exc:
            raise NonZeroRemainder(f"Constraint {t.label(i)} does not hold on the trace") from exc

    for i, b in enumerate(system.boundaries):
        numerator = trace_polys[b.column] - b.value
        try:
            quotients.append(numerator.divide_by_vanishing([g ** b.row]))
        except NonZeroRemainder as exc:
            raise NonZeroRemainder(f"Constraint {b.label(i)} does not hold on the trace") from exc

    composition = Polynomial()
    for weight, quotient in zip(weights, quotients):
        composition = composition + quotient * weight

    logger.debug("Composition polynomial has degree %d", composition.degree())
    return composition


# --- Verifier Side ---

def transition_vanishing_value(t: TransitionConstraint, x: FieldElement, params: StarkParams) -> FieldElement:
    """prod_{r in rows(t)} (x - g^r), computed as (x^n - 1) / prod over the excluded rows."""
    n = params.trace_length
    g = params.trace_domain.generator
    value = x ** n - 1
    for r in range(n - t.max_offset, n):
        value = value / (x - g ** r)
    return value


def evaluate_composition(
    system: ConstraintSystem,
    params: StarkParams,
    x: FieldElement,
    values: Mapping[Cell, FieldElement],
    weights: Sequence[FieldElement],
) -> FieldElement:
    """CP(x) from the trace values f_c(x * g^k) opened at a point x off the trace domain."""
    g = params.trace_domain.generator
    total = FieldElement.zero()
    weight_iter = iter(weights)

    for t in system.transitions:
        numerator = evaluate(t.expression, lambda column, offset: values[(column, offset)])
        total += next(weight_iter) * numerator / transition_vanishing_value(t, x, params)

    for b in system.boundaries:
        total += next(weight_iter) * (values[(b.column, 0)] - b.value) / (x - g ** b.row)

    return total
