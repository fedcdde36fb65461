# tests/conftest.py
"""
Shared helpers for building expressions in the domain tests.

Operands given as ``str`` become identifiers, ``int``/``bool`` become
constants, anything else is passed through unchanged::

    lt("x", 10)          (x < 10)
    sub("x", "y")        (x - y)
    lnot(eq("a", "b"))   !(a == b)
"""

import pytest

from absint_domains import (
    BinaryExpression,
    Constant,
    Identifier,
    Operator,
    UnaryExpression,
)


def expr(value):
    if isinstance(value, str):
        return Identifier(value)
    if isinstance(value, (int, bool)):
        return Constant(value)
    return value


def binop(operator, left, right):
    return BinaryExpression(operator, expr(left), expr(right))


def add(a, b):
    return binop(Operator.ADD, a, b)


def sub(a, b):
    return binop(Operator.SUB, a, b)


def mul(a, b):
    return binop(Operator.MUL, a, b)


def div(a, b):
    return binop(Operator.DIV, a, b)


def rem(a, b):
    return binop(Operator.REM, a, b)


def eq(a, b):
    return binop(Operator.EQ, a, b)


def ne(a, b):
    return binop(Operator.NE, a, b)


def lt(a, b):
    return binop(Operator.LT, a, b)


def le(a, b):
    return binop(Operator.LE, a, b)


def gt(a, b):
    return binop(Operator.GT, a, b)


def ge(a, b):
    return binop(Operator.GE, a, b)


def neg(a):
    return UnaryExpression(Operator.NEGATE, expr(a))


def lnot(a):
    return UnaryExpression(Operator.LOGICAL_NOT, expr(a))


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def x():
    return Identifier("x")


@pytest.fixture
def y():
    return Identifier("y")


@pytest.fixture
def z():
    return Identifier("z")


@pytest.fixture
def r():
    return Identifier("r")
