"""
absint_domains/intervals.py
═══════════════════════════

Interval domain  [lo, hi] ⊆ ℤ ∪ {-∞, +∞}.

    γ([a, b]) = { z ∈ ℤ | a ≤ z ≤ b }

The lattice has INFINITE height (⊥ ⊏ [0,0] ⊏ [0,1] ⊏ … never
stabilises), so widening is mandatory.

Standard widening (Cousot & Cousot 1977):
    [a, b] ∇ [c, d] = [ (c < a ? -∞ : a),  (d > b ? +∞ : b) ]

Standard narrowing:
    [a, b] Δ [c, d] = [ (a = -∞ ? c : a),  (b = +∞ ? d : b) ]

Finite bounds are kept as Python ints; ±∞ are ``float('-inf')`` and
``float('inf')``, which compare cleanly against ints.  Division and
remainder follow Python's floor semantics.

This is the interval collaborator of the pentagon domain.  Any other
implementation exposing the same lattice contract can replace it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Final, Optional, Tuple, Union

from .expressions import Operator
from .lattice import BOTTOM_REPR, BaseNonRelationalValue, Satisfiability

logger = logging.getLogger(__name__)

Bound = Union[int, float]

NEG_INF: Final[float] = float("-inf")
POS_INF: Final[float] = float("inf")


def _is_inf(v: Bound) -> bool:
    return isinstance(v, float) and math.isinf(v)


def _normalise(v: Bound) -> Bound:
    if isinstance(v, float) and math.isfinite(v) and v.is_integer():
        return int(v)
    return v


@dataclass(frozen=True, slots=True)
class IntervalValue(BaseNonRelationalValue):
    """
    Interval abstract value.

    Representation:
        lo > hi           ⟹  ⊥  (canonically stored as [1, 0])
        lo = -∞, hi = +∞  ⟹  ⊤

    Examples
    --------
    >>> a = IntervalValue(0, 10)
    >>> a.join(IntervalValue(5, 20))
    IntervalValue([0, 20])
    >>> a.widen(IntervalValue(0, 100))
    IntervalValue([0, +∞])
    """
    lo: Bound = NEG_INF
    hi: Bound = POS_INF

    def __post_init__(self) -> None:
        lo, hi = _normalise(self.lo), _normalise(self.hi)
        if lo > hi or lo == POS_INF or hi == NEG_INF:
            lo, hi = 1, 0
        object.__setattr__(self, "lo", lo)
        object.__setattr__(self, "hi", hi)

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def bottom(cls) -> IntervalValue:
        """The empty interval ⊥."""
        return cls(1, 0)

    @classmethod
    def top(cls) -> IntervalValue:
        """The full interval ⊤ = [-∞, +∞]."""
        return cls(NEG_INF, POS_INF)

    @classmethod
    def const(cls, n: int) -> IntervalValue:
        return cls(n, n)

    @classmethod
    def at_least(cls, lo: Bound) -> IntervalValue:
        """Half-open interval [lo, +∞)."""
        return cls(lo, POS_INF)

    @classmethod
    def at_most(cls, hi: Bound) -> IntervalValue:
        """Half-open interval (-∞, hi]."""
        return cls(NEG_INF, hi)

    # ---- Predicates ------------------------------------------------------

    def is_bottom(self) -> bool:
        return self.lo > self.hi

    def is_top(self) -> bool:
        return self.lo == NEG_INF and self.hi == POS_INF

    def is_const(self) -> bool:
        return self.lo == self.hi and not self.is_bottom()

    def const_value(self) -> Optional[int]:
        if self.is_const() and not _is_inf(self.lo):
            return int(self.lo)
        return None

    def contains(self, n: int) -> bool:
        if self.is_bottom():
            return False
        return self.lo <= n <= self.hi

    # ---- Lattice operations ----------------------------------------------

    def leq(self, other: IntervalValue) -> bool:
        """[a,b] ⊑ [c,d]  ⟺  c ≤ a  ∧  b ≤ d  (or self = ⊥)."""
        if self.is_bottom():
            return True
        if other.is_bottom():
            return False
        return other.lo <= self.lo and self.hi <= other.hi

    def join(self, other: IntervalValue) -> IntervalValue:
        """[a,b] ⊔ [c,d] = [min(a,c), max(b,d)]."""
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return IntervalValue(min(self.lo, other.lo), max(self.hi, other.hi))

    def meet(self, other: IntervalValue) -> IntervalValue:
        """[a,b] ⊓ [c,d] = [max(a,c), min(b,d)]."""
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        return IntervalValue(max(self.lo, other.lo), min(self.hi, other.hi))

    def widen(self, other: IntervalValue) -> IntervalValue:
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        new_lo = NEG_INF if other.lo < self.lo else self.lo
        new_hi = POS_INF if other.hi > self.hi else self.hi
        return IntervalValue(new_lo, new_hi)

    def narrow(self, other: IntervalValue) -> IntervalValue:
        if self.is_bottom():
            return self
        if other.is_bottom():
            return other
        new_lo = other.lo if self.lo == NEG_INF else self.lo
        new_hi = other.hi if self.hi == POS_INF else self.hi
        return IntervalValue(new_lo, new_hi)

    # ---- Abstract arithmetic ---------------------------------------------

    def add(self, other: IntervalValue) -> IntervalValue:
        """[a,b] + [c,d] = [a+c, b+d]."""
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        return IntervalValue(self.lo + other.lo, self.hi + other.hi)

    def sub(self, other: IntervalValue) -> IntervalValue:
        """[a,b] - [c,d] = [a-d, b-c]."""
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        return IntervalValue(self.lo - other.hi, self.hi - other.lo)

    def negate(self) -> IntervalValue:
        if self.is_bottom():
            return self
        return IntervalValue(-self.hi, -self.lo)

    def mul(self, other: IntervalValue) -> IntervalValue:
        """[a,b] × [c,d] = [min(ac,ad,bc,bd), max(ac,ad,bc,bd)]."""
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        if self.const_value() == 0 or other.const_value() == 0:
            return IntervalValue.const(0)
        products = []
        for a in (self.lo, self.hi):
            for b in (other.lo, other.hi):
                p = a * b
                if isinstance(p, float) and math.isnan(p):
                    p = 0  # inf * 0 = 0 in interval arithmetic
                products.append(p)
        return IntervalValue(min(products), max(products))

    def div(self, other: IntervalValue) -> IntervalValue:
        """
        Floor division [a,b] // [c,d].

        ⊥ if the divisor is exactly [0,0]; ⊤ if it merely contains 0.
        Otherwise floor(x / y) is monotone in both arguments on a
        sign-constant divisor, so the endpoint quotients bound it.
        """
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        if other.const_value() == 0:
            logger.debug("interval: division by [0, 0], result is ⊥")
            return IntervalValue.bottom()
        if other.contains(0):
            return IntervalValue.top()
        quotients = [_floordiv(a, b) for a in (self.lo, self.hi)
                     for b in (other.lo, other.hi)]
        return IntervalValue(min(quotients), max(quotients))

    def mod(self, other: IntervalValue) -> IntervalValue:
        """Floor remainder: sign of the divisor, magnitude below it."""
        if self.is_bottom() or other.is_bottom():
            return IntervalValue.bottom()
        if other.const_value() == 0:
            logger.debug("interval: remainder by [0, 0], result is ⊥")
            return IntervalValue.bottom()
        if other.contains(0):
            return IntervalValue.top()
        if other.lo > 0:
            if self.lo >= 0 and self.hi < other.lo:
                return self
            return IntervalValue(0, other.hi - 1)
        return IntervalValue(other.lo + 1, 0)

    # ---- Comparison refinement -------------------------------------------
    #
    #   if (x < 10)  →  x ⊓ [-∞, 9]    in the true branch
    #                →  x ⊓ [10, +∞]   in the false branch

    def refine_lt(self, bound: Bound) -> IntervalValue:
        return self.meet(IntervalValue(NEG_INF, bound - 1))

    def refine_le(self, bound: Bound) -> IntervalValue:
        return self.meet(IntervalValue(NEG_INF, bound))

    def refine_gt(self, bound: Bound) -> IntervalValue:
        return self.meet(IntervalValue(bound + 1, POS_INF))

    def refine_ge(self, bound: Bound) -> IntervalValue:
        return self.meet(IntervalValue(bound, POS_INF))

    def refine_ne(self, other: IntervalValue) -> IntervalValue:
        """Trim an endpoint equal to the singleton ``other``."""
        n = other.const_value()
        if n is None or self.is_bottom():
            return self
        if self.lo == n:
            return IntervalValue(n + 1, self.hi)
        if self.hi == n:
            return IntervalValue(self.lo, n - 1)
        return self

    # ---- Expression semantics --------------------------------------------

    @classmethod
    def eval_constant(cls, value: Any) -> IntervalValue:
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.const(value)
        return cls.top()

    @classmethod
    def eval_unary(cls, operator: Operator, arg: IntervalValue) -> IntervalValue:
        if operator is Operator.NEGATE:
            return arg.negate()
        if arg.is_bottom():
            return arg
        return cls.top()

    @classmethod
    def eval_binary(cls, operator: Operator, left: IntervalValue,
                    right: IntervalValue) -> IntervalValue:
        transfer = _ARITHMETIC.get(operator)
        if transfer is None:
            if left.is_bottom() or right.is_bottom():
                return cls.bottom()
            logger.debug("interval: no transfer for %s, result is ⊤", operator)
            return cls.top()
        return transfer(left, right)

    @classmethod
    def satisfies_binary(cls, operator: Operator, left: IntervalValue,
                         right: IntervalValue) -> Satisfiability:
        if left.is_bottom() or right.is_bottom():
            return Satisfiability.UNKNOWN
        if operator in (Operator.GT, Operator.GE):
            return cls.satisfies_binary(operator.mirror(), right, left)
        if operator is Operator.LT:
            if left.hi < right.lo:
                return Satisfiability.SATISFIED
            if left.lo >= right.hi:
                return Satisfiability.NOT_SATISFIED
            return Satisfiability.UNKNOWN
        if operator is Operator.LE:
            if left.hi <= right.lo:
                return Satisfiability.SATISFIED
            if left.lo > right.hi:
                return Satisfiability.NOT_SATISFIED
            return Satisfiability.UNKNOWN
        if operator in (Operator.EQ, Operator.NE):
            if left.meet(right).is_bottom():
                answer = Satisfiability.NOT_SATISFIED
            elif left.is_const() and left == right:
                answer = Satisfiability.SATISFIED
            else:
                answer = Satisfiability.UNKNOWN
            return answer if operator is Operator.EQ else answer.negate()
        return Satisfiability.UNKNOWN

    @classmethod
    def refine_binary(cls, operator: Operator, left: IntervalValue,
                      right: IntervalValue) -> Tuple[IntervalValue, IntervalValue]:
        if left.is_bottom() or right.is_bottom():
            return cls.bottom(), cls.bottom()
        if operator in (Operator.GT, Operator.GE):
            new_right, new_left = cls.refine_binary(operator.mirror(), right, left)
            return new_left, new_right
        if operator is Operator.LT:
            return left.refine_lt(right.hi), right.refine_gt(left.lo)
        if operator is Operator.LE:
            return left.refine_le(right.hi), right.refine_ge(left.lo)
        if operator is Operator.EQ:
            common = left.meet(right)
            return common, common
        if operator is Operator.NE:
            return left.refine_ne(right), right.refine_ne(left)
        return left, right

    # ---- Representation --------------------------------------------------

    def representation(self) -> str:
        if self.is_bottom():
            return BOTTOM_REPR
        return f"[{_fmt(self.lo)}, {_fmt(self.hi)}]"

    def __str__(self) -> str:
        return self.representation()

    def __repr__(self) -> str:
        return f"IntervalValue({self.representation()})"


def _fmt(v: Bound) -> str:
    if v == NEG_INF:
        return "-∞"
    if v == POS_INF:
        return "+∞"
    return str(v)


def _floordiv(a: Bound, b: Bound) -> Bound:
    """floor(a / b) extended to infinite endpoints (b ≠ 0)."""
    if a == 0:
        return 0
    if _is_inf(b):
        # |a / b| → 0; the floor is 0 or -1 depending on the sign.
        return 0 if (a > 0) == (b > 0) else -1
    if _is_inf(a):
        return a if b > 0 else -a
    return a // b


_ARITHMETIC: Final[Dict[Operator, Callable[[IntervalValue, IntervalValue], IntervalValue]]] = {
    Operator.ADD: IntervalValue.add,
    Operator.SUB: IntervalValue.sub,
    Operator.MUL: IntervalValue.mul,
    Operator.DIV: IntervalValue.div,
    Operator.REM: IntervalValue.mod,
}


__all__ = [
    "IntervalValue",
    "NEG_INF",
    "POS_INF",
]
