"""
absint_domains/expressions.py
═════════════════════════════

The symbolic expression model the domains are driven with.

Expressions are produced by an external front end; the domains only
pattern-match on them.  The shapes are closed:

    Expression ::= Constant(value)
                 | Identifier(name)
                 | UnaryExpression(operator, operand)
                 | BinaryExpression(operator, left, right)

Operators come from the ``Operator`` enumeration.  ``Operator.OTHER``
stands for every operator the domains do not model; anything carrying
it evaluates to ⊤ (values) or UNKNOWN (predicates).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final, Hashable, Optional, Tuple, Union


class Operator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    NEGATE = "neg"
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    LOGICAL_NOT = "!"
    OTHER = "?"

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC

    def complement(self) -> Operator:
        """``not (a op b)``  ⟺  ``a op.complement() b``."""
        return _COMPLEMENT.get(self, Operator.OTHER)

    def mirror(self) -> Operator:
        """``a op b``  ⟺  ``b op.mirror() a``."""
        return _MIRROR.get(self, Operator.OTHER)


_COMPARISONS: Final = frozenset({
    Operator.EQ, Operator.NE, Operator.GT,
    Operator.GE, Operator.LT, Operator.LE,
})

_ARITHMETIC: Final = frozenset({
    Operator.ADD, Operator.SUB, Operator.MUL, Operator.DIV, Operator.REM,
})

_COMPLEMENT: Final[Dict[Operator, Operator]] = {
    Operator.EQ: Operator.NE,
    Operator.NE: Operator.EQ,
    Operator.LT: Operator.GE,
    Operator.GE: Operator.LT,
    Operator.GT: Operator.LE,
    Operator.LE: Operator.GT,
}

_MIRROR: Final[Dict[Operator, Operator]] = {
    Operator.EQ: Operator.EQ,
    Operator.NE: Operator.NE,
    Operator.LT: Operator.GT,
    Operator.GT: Operator.LT,
    Operator.LE: Operator.GE,
    Operator.GE: Operator.LE,
}


# ═══════════════════════════════════════════════════════════════════════════
#  EXPRESSION NODES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Constant:
    value: Any

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Identifier:
    """
    A program variable.

    ``scopes`` is the stack of scope tokens the identifier is currently
    hidden under (innermost first).  A freshly created identifier is
    visible, i.e. ``scopes == ()``.
    """
    name: str
    scopes: Tuple[Hashable, ...] = ()

    @property
    def is_hidden(self) -> bool:
        return bool(self.scopes)

    @property
    def scope(self) -> Optional[Hashable]:
        return self.scopes[0] if self.scopes else None

    def hide(self, token: Hashable) -> Identifier:
        return Identifier(self.name, (token,) + self.scopes)

    def restore(self) -> Identifier:
        return Identifier(self.name, self.scopes[1:])

    def __str__(self) -> str:
        if not self.scopes:
            return self.name
        return f"{self.name}@{self.scopes[0]}"


@dataclass(frozen=True, slots=True)
class UnaryExpression:
    operator: Operator
    operand: Expression

    def __str__(self) -> str:
        symbol = "-" if self.operator is Operator.NEGATE else self.operator.value
        return f"{symbol}{self.operand}"


@dataclass(frozen=True, slots=True)
class BinaryExpression:
    operator: Operator
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator.value} {self.right})"


Expression = Union[Constant, Identifier, UnaryExpression, BinaryExpression]


def identifier_pair(expression: Any) -> Optional[Tuple[Identifier, Identifier]]:
    """Operands of ``expression`` if it is a binary over two identifiers."""
    if not isinstance(expression, BinaryExpression):
        return None
    if isinstance(expression.left, Identifier) and isinstance(expression.right, Identifier):
        return expression.left, expression.right
    return None


def strip_negation(expression: Any) -> Tuple[Any, bool]:
    """Unwrap at most one logical negation; report whether one was removed."""
    if isinstance(expression, UnaryExpression) and expression.operator is Operator.LOGICAL_NOT:
        return expression.operand, True
    return expression, False


def integer_constant(expression: Any) -> Optional[int]:
    """The value of an integer ``Constant`` (booleans excluded), else None."""
    if isinstance(expression, Constant):
        value = expression.value
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


__all__ = [
    "Operator",
    "Constant",
    "Identifier",
    "UnaryExpression",
    "BinaryExpression",
    "Expression",
    "identifier_pair",
    "strip_negation",
    "integer_constant",
]
