"""
absint_domains/congruence.py
════════════════════════════

Congruence domain  mℤ + r  (integers congruent to r modulo m).

Concretisation:
    γ(m, r) = { r + k·m | k ∈ ℤ }     where m ≥ 0
    γ(0, r) = { r }                     (singleton / constant)
    γ(1, 0) = ℤ                         (⊤)
    γ(⊥)    = ∅                         (explicit tag, no numeric sentinel)

Normal form:  m ≥ 0  and, when m > 0,  0 ≤ r < m.  ``CongruenceValue``
normalises on construction, so ``CongruenceValue(4, -3)`` is ``4ℤ+1``
and ``CongruenceValue(1, 7)`` is ⊤.

Ordering
    mℤ+r ⊑ nℤ+s  ⟺  n | m  ∧  r ≡ s (mod n)

Join
    gcd(m, n, |r − s|)ℤ + s

    The residue is taken from the *right* operand.  Every residue of
    the joined class is congruent modulo the new modulus, so the result
    still contains both operands; only the printed residue differs from
    the symmetric choice.

Meet
    lcm(m, n)ℤ + x   where x solves  x ≡ r (mod m), x ≡ s (mod n)
    (Chinese remainder theorem via extended Euclid), or ⊥ when
    r ≢ s (mod gcd(m, n)).

The state-level congruence domain is ``ValueEnvironment[CongruenceValue]``,
built with ``make_congruence_env()``.
"""

from __future__ import annotations

import logging
import math
import operator as op
from dataclasses import dataclass
from typing import Any, Callable, Dict, Final, Optional, Tuple

from .expressions import Operator
from .lattice import BOTTOM_REPR, BaseNonRelationalValue, LatticeKind, Satisfiability

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 0 — NUMBER THEORY HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def divides(m: int, n: int) -> bool:
    """m | n, with 0 | 0 true and 0 | n false for n ≠ 0."""
    if m == 0:
        return n == 0
    return n % m == 0


def congruent(a: int, b: int, m: int) -> bool:
    """a ≡ b (mod m); modulo 0 this is plain equality."""
    return divides(m, abs(a - b))


def _ext_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """Return (g, s, t) with a·s + b·t = g = gcd(a, b)."""
    if b == 0:
        return a, 1, 0
    g, s, t = _ext_gcd(b, a % b)
    return g, t, s - (a // b) * t


def _crt(m: int, r: int, n: int, s: int) -> int:
    """Solve x ≡ r (mod m), x ≡ s (mod n) for m, n > 0 (assumed solvable)."""
    g, p, _ = _ext_gcd(m, n)
    lcm = (m // g) * n
    return (r + m * ((s - r) // g) * p) % lcm


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — CONGRUENCE VALUE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class CongruenceValue(BaseNonRelationalValue):
    """
    The congruence class  modulus·ℤ + residue.

    Examples
    --------
    >>> CongruenceValue(4, 1).join(CongruenceValue(6, 3)).representation()
    '2Z+1'
    >>> CongruenceValue(2, 0).meet(CongruenceValue(3, 0)).representation()
    '6Z+0'
    """
    modulus: int = 1
    residue: int = 0
    kind: LatticeKind = LatticeKind.VALUE

    def __post_init__(self) -> None:
        kind = self.kind
        modulus = abs(self.modulus)
        residue = self.residue
        if kind is LatticeKind.BOTTOM:
            modulus, residue = 0, 0
        elif kind is LatticeKind.TOP or modulus == 1:
            kind, modulus, residue = LatticeKind.TOP, 1, 0
        elif modulus > 0:
            residue %= modulus
        object.__setattr__(self, "modulus", modulus)
        object.__setattr__(self, "residue", residue)
        object.__setattr__(self, "kind", kind)

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def top(cls) -> CongruenceValue:
        return cls(1, 0, LatticeKind.TOP)

    @classmethod
    def bottom(cls) -> CongruenceValue:
        return cls(0, 0, LatticeKind.BOTTOM)

    @classmethod
    def const(cls, n: int) -> CongruenceValue:
        return cls(0, n)

    # ---- Predicates ------------------------------------------------------

    def is_top(self) -> bool:
        return self.kind is LatticeKind.TOP

    def is_bottom(self) -> bool:
        return self.kind is LatticeKind.BOTTOM

    def is_const(self) -> bool:
        return self.kind is LatticeKind.VALUE and self.modulus == 0

    def const_value(self) -> Optional[int]:
        return self.residue if self.is_const() else None

    def contains(self, n: int) -> bool:
        """Is the concrete integer n in γ(self)?"""
        if self.is_bottom():
            return False
        return congruent(n, self.residue, self.modulus)

    # ---- Lattice operations ----------------------------------------------

    def leq(self, other: CongruenceValue) -> bool:
        """mℤ+r ⊑ nℤ+s  ⟺  n | m  ∧  r ≡ s (mod n)."""
        if self.is_bottom():
            return True
        if other.is_bottom():
            return False
        if other.is_top():
            return True
        return (divides(other.modulus, self.modulus)
                and congruent(self.residue, other.residue, other.modulus))

    def join(self, other: CongruenceValue) -> CongruenceValue:
        """gcd(m, n, |r − s|)ℤ + s."""
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        if self.is_top() or other.is_top():
            return CongruenceValue.top()
        g = math.gcd(math.gcd(self.modulus, other.modulus),
                     abs(self.residue - other.residue))
        return CongruenceValue(g, other.residue)

    def meet(self, other: CongruenceValue) -> CongruenceValue:
        """Greatest lower bound via the Chinese remainder theorem."""
        if self.is_bottom() or other.is_bottom():
            return CongruenceValue.bottom()
        if self.is_top():
            return other
        if other.is_top():
            return self
        m, r = self.modulus, self.residue
        n, s = other.modulus, other.residue
        if not congruent(r, s, math.gcd(m, n)):
            return CongruenceValue.bottom()
        if m == 0:
            return self
        if n == 0:
            return other
        return CongruenceValue(math.lcm(m, n), _crt(m, r, n, s))

    def widen(self, other: CongruenceValue) -> CongruenceValue:
        # Moduli only shrink along divisors, so join already converges.
        return self.join(other)

    def narrow(self, other: CongruenceValue) -> CongruenceValue:
        """Refine only out of ⊤; any other value is kept as is."""
        if self.is_bottom() or other.is_bottom():
            return CongruenceValue.bottom()
        if self.is_top():
            return other
        return self

    # ---- Expression semantics --------------------------------------------

    @classmethod
    def eval_constant(cls, value: Any) -> CongruenceValue:
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.const(value)
        return cls.top()

    @classmethod
    def eval_unary(cls, operator: Operator, arg: CongruenceValue) -> CongruenceValue:
        if arg.is_bottom():
            return arg
        if operator is Operator.NEGATE:
            if arg.is_top():
                return arg
            return CongruenceValue(arg.modulus, -arg.residue)
        return cls.top()

    @classmethod
    def eval_binary(cls, operator: Operator, left: CongruenceValue,
                    right: CongruenceValue) -> CongruenceValue:
        if left.is_bottom() or right.is_bottom():
            return cls.bottom()
        transfer = _ARITHMETIC.get(operator)
        if transfer is None:
            logger.debug("congruence: no transfer for %s, result is ⊤", operator)
            return cls.top()
        return transfer(left, right)

    @classmethod
    def satisfies_binary(cls, operator: Operator, left: CongruenceValue,
                         right: CongruenceValue) -> Satisfiability:
        if left.is_bottom() or right.is_bottom():
            return Satisfiability.UNKNOWN
        if operator is Operator.EQ:
            return _satisfies_eq(left, right)
        if operator is Operator.NE:
            return _satisfies_eq(left, right).negate()
        compare = _ORDERING.get(operator)
        if compare is None or not (left.is_const() and right.is_const()):
            return Satisfiability.UNKNOWN
        return Satisfiability.of(compare(left.residue, right.residue))

    @classmethod
    def refine_binary(cls, operator: Operator, left: CongruenceValue,
                      right: CongruenceValue) -> Tuple[CongruenceValue, CongruenceValue]:
        if operator is Operator.EQ:
            common = left.meet(right)
            return common, common
        return left, right

    # ---- Representation --------------------------------------------------

    def representation(self) -> str:
        if self.is_bottom():
            return BOTTOM_REPR
        return f"{self.modulus}Z+{self.residue}"

    def __str__(self) -> str:
        return self.representation()

    def __repr__(self) -> str:
        return f"CongruenceValue({self.representation()})"


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — ABSTRACT ARITHMETIC
# ═══════════════════════════════════════════════════════════════════════════
#
#  Operands reaching these functions are never ⊥.  ⊤ is (1, 0), which the
#  formulas below handle without special cases: gcd with 1 is 1.
#
#  Division and remainder follow Python's floor semantics, under which
#  (r + k·m) % d == r % d whenever d | m, for either sign of d.

def _add(a: CongruenceValue, b: CongruenceValue) -> CongruenceValue:
    return CongruenceValue(math.gcd(a.modulus, b.modulus), a.residue + b.residue)


def _sub(a: CongruenceValue, b: CongruenceValue) -> CongruenceValue:
    return CongruenceValue(math.gcd(a.modulus, b.modulus), a.residue - b.residue)


def _mul(a: CongruenceValue, b: CongruenceValue) -> CongruenceValue:
    m, r, n, s = a.modulus, a.residue, b.modulus, b.residue
    return CongruenceValue(math.gcd(m * n, math.gcd(m * s, n * r)), r * s)


def _div(a: CongruenceValue, b: CongruenceValue) -> CongruenceValue:
    if b.is_const() and b.residue == 0:
        logger.debug("congruence: division by the constant 0, result is ⊥")
        return CongruenceValue.bottom()
    d = b.residue
    if b.is_const() and divides(d, a.modulus) and divides(d, a.residue):
        return CongruenceValue(a.modulus // d, a.residue // d)
    return CongruenceValue.top()


def _rem(a: CongruenceValue, b: CongruenceValue) -> CongruenceValue:
    if b.is_const() and b.residue == 0:
        logger.debug("congruence: remainder by the constant 0, result is ⊥")
        return CongruenceValue.bottom()
    d = b.residue
    if b.is_const() and divides(d, a.modulus):
        return CongruenceValue(0, a.residue % d)
    return CongruenceValue.top()


_ARITHMETIC: Final[Dict[Operator, Callable[[CongruenceValue, CongruenceValue], CongruenceValue]]] = {
    Operator.ADD: _add,
    Operator.SUB: _sub,
    Operator.MUL: _mul,
    Operator.DIV: _div,
    Operator.REM: _rem,
}

_ORDERING: Final[Dict[Operator, Callable[[int, int], bool]]] = {
    Operator.GT: op.gt,
    Operator.GE: op.ge,
    Operator.LT: op.lt,
    Operator.LE: op.le,
}


def _satisfies_eq(left: CongruenceValue, right: CongruenceValue) -> Satisfiability:
    if left.meet(right).is_bottom():
        return Satisfiability.NOT_SATISFIED
    # Two equal classes with more than one member say nothing about
    # whether the concrete values coincide; only equal singletons do.
    if left.is_const() and left.leq(right) and right.leq(left):
        return Satisfiability.SATISFIED
    return Satisfiability.UNKNOWN


__all__ = [
    "CongruenceValue",
    "divides",
    "congruent",
]
