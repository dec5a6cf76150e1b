"""
Pytest configuration and shared fixtures.

The fixtures describe small statements used across the protocol tests:
a Fibonacci sequence (degree 1), its squared variant (degree 2) and a
two-column system with a cross-column transition.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path so absolute imports work
# (tests/ is inside the root, so parent is the root)
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from primitives.field import P  # noqa: E402
from protocol.constraints import BoundaryConstraint, ConstraintSystem, TransitionConstraint  # noqa: E402
from protocol.expressions import TraceValue  # noqa: E402
from protocol.params import StarkParams  # noqa: E402


def fibonacci_trace(n: int, a0: int = 1, a1: int = 1) -> list:
    rows = [[a0], [a1]]
    while len(rows) < n:
        rows.append([(rows[-1][0] + rows[-2][0]) % P])
    return rows[:n]


def fibonacci_square_trace(n: int, a0: int = 1, a1: int = 3141592) -> list:
    """a[i+2] = a[i+1]^2 + a[i]^2, as in the STARK101 walkthrough."""
    rows = [[a0], [a1]]
    while len(rows) < n:
        rows.append([(rows[-1][0] ** 2 + rows[-2][0] ** 2) % P])
    return rows[:n]


def counter_trace(n: int) -> list:
    """Columns x (counter) and y (running sum of x)."""
    rows = [[0, 0]]
    while len(rows) < n:
        x, y = rows[-1]
        rows.append([x + 1, (y + x + 1) % P])
    return rows


@pytest.fixture
def fib_system() -> ConstraintSystem:
    a = lambda k: TraceValue("a", k)  # noqa: E731
    return ConstraintSystem(
        columns=("a",),
        transitions=(TransitionConstraint(a(2) - a(1) - a(0), "fib"),),
        boundaries=(BoundaryConstraint("a", 0, 1), BoundaryConstraint("a", 1, 1)),
    )


@pytest.fixture
def fib_params() -> StarkParams:
    return StarkParams(trace_length=8, blowup_factor=8, n_queries=4)


@pytest.fixture
def fib_trace() -> list:
    return fibonacci_trace(8)


@pytest.fixture
def fib_square_system() -> ConstraintSystem:
    a = lambda k: TraceValue("a", k)  # noqa: E731
    return ConstraintSystem(
        columns=("a",),
        transitions=(TransitionConstraint(a(2) - a(1) ** 2 - a(0) ** 2, "fib_square"),),
        boundaries=(BoundaryConstraint("a", 0, 1), BoundaryConstraint("a", 1, 3141592)),
    )


@pytest.fixture
def counter_system() -> ConstraintSystem:
    x = lambda k: TraceValue("x", k)  # noqa: E731
    y = lambda k: TraceValue("y", k)  # noqa: E731
    return ConstraintSystem(
        columns=("x", "y"),
        transitions=(
            TransitionConstraint(x(1) - x(0) - 1, "step"),
            TransitionConstraint(y(1) - y(0) - x(1), "accumulate"),
        ),
        boundaries=(BoundaryConstraint("x", 0, 0), BoundaryConstraint("y", 0, 0)),
    )
