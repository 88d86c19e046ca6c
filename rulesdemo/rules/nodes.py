"""
Expression tree node types produced by the rule compiler.

All nodes are frozen dataclasses, so two compilations of the same text
compare equal and a compiled tree can be shared between threads.

- Literal: number, string, boolean or null constant
- MemberPath: identifier with optional dotted member access
- MethodCall: named operation invoked on a receiver (or a bare function)
- Comparison: ==, !=, >=, <=, >, <
- Logical: AND / OR with short-circuit semantics
- Arithmetic: +, -, *, /, %
- Not / Negate: unary operators
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

LiteralValue = Union[int, float, Decimal, str, bool, None]

COMPARISON_OPERATORS = ("==", "!=", ">=", "<=", ">", "<")
LOGICAL_OPERATORS = ("AND", "OR")
ARITHMETIC_OPERATORS = ("+", "-", "*", "/", "%")


@dataclass(frozen=True)
class Literal:
    value: LiteralValue
    # Part of equality so that 1, True and Decimal("1.0") stay distinct constants
    kind: str = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "kind", type(self.value).__name__)

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


@dataclass(frozen=True)
class MemberPath:
    """
    A root identifier followed by zero or more member reads.

    Examples:
        MemberPath(("input1",))                          # input1
        MemberPath(("input1", "TotalPurchasesToDate"))   # input1.TotalPurchasesToDate
    """
    parts: tuple[str, ...]

    def __post_init__(self):
        if not self.parts:
            raise ValueError("MemberPath: at least one identifier is required")

    @property
    def root(self) -> str:
        return self.parts[0]

    @property
    def members(self) -> tuple[str, ...]:
        return self.parts[1:]

    def __repr__(self) -> str:
        return f"Path({'.'.join(self.parts)})"


@dataclass(frozen=True)
class MethodCall:
    """
    Invocation of a named operation.

    The receiver is resolved from the fact context at evaluation time. A call
    without a receiver (``max(a, b)``) targets the context's function table.

    Examples:
        MethodCall(MemberPath(("businessLogic",)), "IsWeekend", ())
        MethodCall(None, "max", (Literal(1), Literal(2)))
    """
    receiver: Optional[MemberPath]
    method: str
    args: tuple["Expr", ...] = ()

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        if self.receiver is None:
            return f"Call({self.method}({args}))"
        return f"Call({'.'.join(self.receiver.parts)}.{self.method}({args}))"


@dataclass(frozen=True)
class Comparison:
    op: str
    left: "Expr"
    right: "Expr"

    def __post_init__(self):
        if self.op not in COMPARISON_OPERATORS:
            raise ValueError(f"Comparison: unknown operator '{self.op}'")

    def __repr__(self) -> str:
        return f"({self.left!r} {self.op} {self.right!r})"


@dataclass(frozen=True)
class Logical:
    """AND / OR. The right operand is only evaluated when it can change the result."""
    op: str
    left: "Expr"
    right: "Expr"

    def __post_init__(self):
        if self.op not in LOGICAL_OPERATORS:
            raise ValueError(f"Logical: unknown operator '{self.op}'")

    def __repr__(self) -> str:
        return f"({self.left!r} {self.op} {self.right!r})"


@dataclass(frozen=True)
class Arithmetic:
    op: str
    left: "Expr"
    right: "Expr"

    def __post_init__(self):
        if self.op not in ARITHMETIC_OPERATORS:
            raise ValueError(f"Arithmetic: unknown operator '{self.op}'")

    def __repr__(self) -> str:
        return f"({self.left!r} {self.op} {self.right!r})"


@dataclass(frozen=True)
class Not:
    operand: "Expr"

    def __repr__(self) -> str:
        return f"Not({self.operand!r})"


@dataclass(frozen=True)
class Negate:
    operand: "Expr"

    def __repr__(self) -> str:
        return f"Neg({self.operand!r})"


Expr = Union[Literal, MemberPath, MethodCall, Comparison, Logical, Arithmetic, Not, Negate]


def iter_nodes(node: Expr):
    """Yield every node of a tree in depth-first, left-to-right order."""
    yield node
    if isinstance(node, MethodCall):
        if node.receiver is not None:
            yield node.receiver
        for arg in node.args:
            yield from iter_nodes(arg)
    elif isinstance(node, (Comparison, Logical, Arithmetic)):
        yield from iter_nodes(node.left)
        yield from iter_nodes(node.right)
    elif isinstance(node, (Not, Negate)):
        yield from iter_nodes(node.operand)
