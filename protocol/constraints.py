"""Constraint systems: transition and boundary constraints over named trace columns."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

from primitives.field import FF, FieldElement, to_ff
from protocol.expressions import (
    Expr,
    degree,
    expr_from_dict,
    expr_to_dict,
    trace_cells,
)

# --- Type Aliases ---

Row = Sequence[Union[int, FieldElement]]
Trace = Sequence[Row]


# --- Constraints ---

@dataclass(frozen=True)
class TransitionConstraint:
    """expression == 0 on every row where all referenced cells exist.

    With max_offset m, the constraint covers rows 0 .. n-1-m of an n-row trace.
    """
    expression: Expr
    name: str = ""

    @property
    def max_offset(self) -> int:
        return max(offset for _, offset in trace_cells(self.expression))

    @property
    def degree(self) -> int:
        return degree(self.expression)

    def rows(self, trace_length: int) -> range:
        return range(trace_length - self.max_offset)

    def quotient_degree_bound(self, trace_length: int) -> int:
        """Degree of numerator / vanishing polynomial for trace polynomials of degree n-1."""
        numerator = self.degree * (trace_length - 1)
        return max(numerator - len(self.rows(trace_length)), 0)

    def label(self, index: int) -> str:
        return self.name or f"transition[{index}] {self.expression}"


@dataclass(frozen=True)
class BoundaryConstraint:
    """trace[row][column] == value."""
    column: str
    row: int
    value: int

    def label(self, index: int) -> str:
        return f"boundary[{index}] {self.column}[{self.row}] == {self.value}"


# --- Constraint System ---

@dataclass(frozen=True)
class ConstraintSystem:
    """Named trace columns plus the constraints the trace must satisfy."""
    columns: Tuple[str, ...]
    transitions: Tuple[TransitionConstraint, ...] = field(default_factory=tuple)
    boundaries: Tuple[BoundaryConstraint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "transitions", tuple(
            t if isinstance(t, TransitionConstraint) else TransitionConstraint(t)
            for t in self.transitions
        ))
        object.__setattr__(self, "boundaries", tuple(self.boundaries))

        if not self.columns:
            raise ValueError("Constraint system needs at least one column")
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Duplicate column names in {self.columns}")
        if not self.transitions and not self.boundaries:
            raise ValueError("Constraint system has no constraints")

        known = set(self.columns)
        for i, t in enumerate(self.transitions):
            cells = trace_cells(t.expression)
            if not cells or t.degree == 0:
                raise ValueError(f"Transition constraint {i} does not depend on the trace")
            for column, offset in cells:
                if column not in known:
                    raise ValueError(f"Transition constraint {i} references unknown column '{column}'")
                if offset < 0:
                    raise ValueError(f"Transition constraint {i} uses negative offset {offset}")
        for i, b in enumerate(self.boundaries):
            if b.column not in known:
                raise ValueError(f"Boundary constraint {i} references unknown column '{b.column}'")
            if b.row < 0:
                raise ValueError(f"Boundary constraint {i} uses negative row {b.row}")

    # --- Derived Shape ---

    @property
    def offsets(self) -> Tuple[int, ...]:
        """Row offsets opened per query (always includes 0)."""
        used = {0}
        for t in self.transitions:
            used.update(offset for _, offset in trace_cells(t.expression))
        return tuple(sorted(used))

    @property
    def n_constraints(self) -> int:
        return len(self.transitions) + len(self.boundaries)

    def composition_degree_bound(self, trace_length: int) -> int:
        """Upper bound on the degree of the composition polynomial."""
        bounds = [t.quotient_degree_bound(trace_length) for t in self.transitions]
        if self.boundaries:
            bounds.append(trace_length - 2)
        return max(bounds)

    def check_trace_length(self, trace_length: int) -> None:
        for i, t in enumerate(self.transitions):
            if t.max_offset >= trace_length:
                raise ValueError(f"Transition constraint {i} spans {t.max_offset + 1} rows, trace has {trace_length}")
        for i, b in enumerate(self.boundaries):
            if b.row >= trace_length:
                raise ValueError(f"Boundary constraint {i} targets row {b.row}, trace has {trace_length}")

    def trace_columns(self, trace: Trace, trace_length: int) -> Dict[str, FF]:
        """Validate the row-major trace and return it column by column."""
        if len(trace) != trace_length:
            raise ValueError(f"Trace has {len(trace)} rows, expected {trace_length}")
        width = len(self.columns)
        for i, row in enumerate(trace):
            if len(row) != width:
                raise ValueError(f"Trace row {i} has {len(row)} values, expected {width}")
        return {
            name: to_ff([row[c] for row in trace])
            for c, name in enumerate(self.columns)
        }

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "transitions": [
                {"name": t.name, "expression": expr_to_dict(t.expression)}
                for t in self.transitions
            ],
            "boundaries": [
                {"column": b.column, "row": b.row, "value": int(b.value)}
                for b in self.boundaries
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConstraintSystem":
        return cls(
            columns=tuple(data["columns"]),
            transitions=tuple(
                TransitionConstraint(expr_from_dict(t["expression"]), t.get("name", ""))
                for t in data.get("transitions", [])
            ),
            boundaries=tuple(
                BoundaryConstraint(b["column"], int(b["row"]), int(b["value"]))
                for b in data.get("boundaries", [])
            ),
        )

    def to_json(self) -> str:
        """Canonical JSON text (sorted keys, no whitespace)."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def describe(self) -> List[str]:
        """One human-readable line per constraint."""
        lines = [f"{t.label(i)}: {t.expression} == 0" for i, t in enumerate(self.transitions)]
        lines.extend(b.label(i) for i, b in enumerate(self.boundaries))
        return lines
