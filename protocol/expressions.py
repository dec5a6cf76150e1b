"""Constraint expression trees.

An expression is a small tagged tree over trace cells:

    Constant(value)              a field constant
    TraceValue(column, offset)   column value `offset` rows after the current row
    Add / Sub / Mul              binary arithmetic
    Neg                          additive inverse
    Pow(base, exponent)          non-negative integer power

Python operators build trees, so a Fibonacci step reads

    TraceValue("a", 2) - TraceValue("a", 1) - TraceValue("a", 0)

evaluate() is the single interpreter for every context. The caller supplies
`lookup(column, offset)`; the prover returns shifted trace polynomials and the
verifier returns opened field values, and the same tree works for both since
Polynomial and FieldElement share the arithmetic operators.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Set, Tuple, Union

from primitives.field import FieldElement

Operand = Union["Expr", int, FieldElement]


def _wrap(value: Operand) -> "Expr":
    if isinstance(value, Expr):
        return value
    if isinstance(value, (int, FieldElement)):
        return Constant(int(value))
    raise TypeError(f"Cannot use {type(value).__name__} in a constraint expression")


class Expr:
    """Base class; provides the operator overloads that build trees."""

    __slots__ = ()

    def __add__(self, other: Operand) -> "Expr":
        return Add(self, _wrap(other))

    def __radd__(self, other: Operand) -> "Expr":
        return Add(_wrap(other), self)

    def __sub__(self, other: Operand) -> "Expr":
        return Sub(self, _wrap(other))

    def __rsub__(self, other: Operand) -> "Expr":
        return Sub(_wrap(other), self)

    def __mul__(self, other: Operand) -> "Expr":
        return Mul(self, _wrap(other))

    def __rmul__(self, other: Operand) -> "Expr":
        return Mul(_wrap(other), self)

    def __neg__(self) -> "Expr":
        return Neg(self)

    def __pow__(self, exponent: int) -> "Expr":
        return Pow(self, exponent)

    def __str__(self) -> str:
        return to_text(self)


@dataclass(frozen=True)
class Constant(Expr):
    value: int


@dataclass(frozen=True)
class TraceValue(Expr):
    column: str
    offset: int = 0


@dataclass(frozen=True)
class Add(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Sub(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Mul(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Neg(Expr):
    operand: Expr


@dataclass(frozen=True)
class Pow(Expr):
    base: Expr
    exponent: int

    def __post_init__(self) -> None:
        if self.exponent < 0:
            raise ValueError(f"Exponent must be non-negative, got {self.exponent}")


_BINARY_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    Add: lambda a, b: a + b,
    Sub: lambda a, b: a - b,
    Mul: lambda a, b: a * b,
}

_TAGS: Dict[type, str] = {
    Constant: "const",
    TraceValue: "trace",
    Add: "add",
    Sub: "sub",
    Mul: "mul",
    Neg: "neg",
    Pow: "pow",
}

_SYMBOLS: Dict[type, str] = {Add: "+", Sub: "-", Mul: "*"}


# --- Interpreter ---

def evaluate(expr: Expr, lookup: Callable[[str, int], Any]) -> Any:
    """Evaluate an expression; trace cells are resolved with lookup(column, offset)."""
    if isinstance(expr, Constant):
        return FieldElement(expr.value)
    if isinstance(expr, TraceValue):
        return lookup(expr.column, expr.offset)
    if isinstance(expr, Neg):
        return -evaluate(expr.operand, lookup)
    if isinstance(expr, Pow):
        base = evaluate(expr.base, lookup)
        return base ** expr.exponent
    op = _BINARY_OPS.get(type(expr))
    if op is None:
        raise TypeError(f"Unknown expression node {type(expr).__name__}")
    return op(evaluate(expr.left, lookup), evaluate(expr.right, lookup))


def degree(expr: Expr) -> int:
    """Total degree in the trace cells (a Constant has degree 0)."""
    if isinstance(expr, Constant):
        return 0
    if isinstance(expr, TraceValue):
        return 1
    if isinstance(expr, Neg):
        return degree(expr.operand)
    if isinstance(expr, Pow):
        return degree(expr.base) * expr.exponent
    if isinstance(expr, Mul):
        return degree(expr.left) + degree(expr.right)
    return max(degree(expr.left), degree(expr.right))


def trace_cells(expr: Expr) -> Set[Tuple[str, int]]:
    """All (column, offset) pairs referenced by the expression."""
    if isinstance(expr, Constant):
        return set()
    if isinstance(expr, TraceValue):
        return {(expr.column, expr.offset)}
    if isinstance(expr, Neg):
        return trace_cells(expr.operand)
    if isinstance(expr, Pow):
        return trace_cells(expr.base)
    return trace_cells(expr.left) | trace_cells(expr.right)


# --- Textual / Serializable Forms ---

def to_text(expr: Expr) -> str:
    """Fully parenthesized infix form, e.g. `(a[+2] - (a[+1] * a[+1]))`."""
    if isinstance(expr, Constant):
        return str(expr.value)
    if isinstance(expr, TraceValue):
        return expr.column if expr.offset == 0 else f"{expr.column}[+{expr.offset}]"
    if isinstance(expr, Neg):
        return f"-{to_text(expr.operand)}"
    if isinstance(expr, Pow):
        return f"{to_text(expr.base)}^{expr.exponent}"
    return f"({to_text(expr.left)} {_SYMBOLS[type(expr)]} {to_text(expr.right)})"


def expr_to_dict(expr: Expr) -> Dict[str, Any]:
    """JSON-compatible form of an expression tree."""
    tag = _TAGS[type(expr)]
    if isinstance(expr, Constant):
        return {"op": tag, "value": expr.value}
    if isinstance(expr, TraceValue):
        return {"op": tag, "column": expr.column, "offset": expr.offset}
    if isinstance(expr, Neg):
        return {"op": tag, "operand": expr_to_dict(expr.operand)}
    if isinstance(expr, Pow):
        return {"op": tag, "base": expr_to_dict(expr.base), "exponent": expr.exponent}
    return {"op": tag, "left": expr_to_dict(expr.left), "right": expr_to_dict(expr.right)}


def expr_from_dict(data: Dict[str, Any]) -> Expr:
    """Inverse of expr_to_dict."""
    op = data.get("op")
    if op == "const":
        return Constant(int(data["value"]))
    if op == "trace":
        return TraceValue(str(data["column"]), int(data["offset"]))
    if op == "neg":
        return Neg(expr_from_dict(data["operand"]))
    if op == "pow":
        return Pow(expr_from_dict(data["base"]), int(data["exponent"]))
    for cls, tag in _TAGS.items():
        if tag == op and cls in _BINARY_OPS:
            return cls(expr_from_dict(data["left"]), expr_from_dict(data["right"]))
    raise ValueError(f"Invalid expression operation: {op}")
