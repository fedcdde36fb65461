"""
absint_domains/pentagon.py
══════════════════════════

Pentagons: intervals plus strict upper bounds between identifiers.

    ┌──────────────────────────┐   ┌──────────────────────────────┐
    │  StrictUpperBounds       │ × │  ValueEnvironment[Interval]  │
    │  x ↦ {y | x < y}         │   │  x ↦ [lo, hi]                │
    └──────────────────────────┘   └──────────────────────────────┘

Each half can recover facts the other loses:

  * Join.  The intersection of two bound sets drops ``x < y`` whenever
    one operand did not record it symbolically, even though that
    operand's intervals may prove it (``hi(x) < lo(y)``).  The join
    closure re-admits such bounds.

  * Order.  A bound ``x < y`` of the larger element need not be
    recorded by the smaller one when its intervals already imply it.

  * ``r := x - y``.  If ``y < x`` is recorded then ``r ≥ 1``; if
    ``y > 0`` then ``r < x`` and every bound of x is a bound of r.

Reference:
    F. Logozzo, M. Fähndrich, "Pentagons: A weakly relational abstract
    domain for the efficient validation of array accesses",
    Science of Computer Programming 75 (2010).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .combined import CartesianProduct, JoinClosure
from .environment import ValueEnvironment, make_interval_env
from .expressions import BinaryExpression, Identifier, Operator, identifier_pair
from .intervals import IntervalValue
from .lattice import BOTTOM_REPR, TOP_REPR
from .upper_bounds import StrictUpperBounds

logger = logging.getLogger(__name__)


def _provably_below(x: IntervalValue, y: IntervalValue) -> bool:
    """Every value of ``x`` is strictly smaller than every value of ``y``."""
    return not x.is_bottom() and not y.is_bottom() and x.hi < y.lo


def _readmit(target: StrictUpperBounds, source: StrictUpperBounds,
             intervals: ValueEnvironment) -> StrictUpperBounds:
    """Add to ``target`` each bound of ``source`` that ``intervals`` prove."""
    for x in source.keys():
        ix = intervals.get(x)
        if ix.is_bottom():
            continue
        closure = target.get(x)
        for y in source.get(x):
            if y not in closure and _provably_below(ix, intervals.get(y)):
                logger.debug("pentagon: join re-admits %s < %s", x, y)
                closure = closure | {y}
        target = target.put(x, closure)
    return target


def _reduced(state: Pentagon) -> Pentagon:
    """⊥ in either half makes the whole state ⊥."""
    if state.is_bottom():
        return state
    if state.bounds.is_bottom() or state.intervals.is_bottom():
        logger.debug("pentagon: one half is ⊥, state is ⊥")
        return state.bottom()
    return state


def _pentagon_join_closure(this: Pentagon, other: Pentagon, joined: Pentagon) -> Pentagon:
    bounds = _readmit(joined.bounds, this.bounds, other.intervals)
    bounds = _readmit(bounds, other.bounds, this.intervals)
    return joined._make(bounds, joined.intervals)


@dataclass(frozen=True)
class Pentagon(CartesianProduct[StrictUpperBounds, ValueEnvironment]):
    """
    The pentagon state: ``left`` holds the bounds, ``right`` the intervals.

    Example::

        assume  y > 0        y ↦ [1, +∞]
        assume  y < x        x ↦ [2, +∞],  bounds(y) = {x}
        r := x - y           r ↦ [1, +∞],  bounds(r) = {x}
    """
    left: StrictUpperBounds = field(default_factory=StrictUpperBounds)
    right: ValueEnvironment = field(default_factory=make_interval_env)
    join_closure: Optional[JoinClosure] = field(
        default=_pentagon_join_closure, repr=False, compare=False,
    )

    @property
    def bounds(self) -> StrictUpperBounds:
        return self.left

    @property
    def intervals(self) -> ValueEnvironment:
        return self.right

    def leq(self, other: Pentagon) -> bool:
        self._check(other)
        if not self.intervals.leq(other.intervals):
            return False
        for x, above in other.bounds.bounds.items():
            recorded = self.bounds.get(x)
            ix = self.intervals.get(x)
            for y in above:
                if y in recorded:
                    continue
                if ix.is_bottom() or other.intervals.get(y).is_top():
                    continue
                if _provably_below(ix, self.intervals.get(y)):
                    continue
                return False
        return True

    def meet(self, other: Pentagon) -> Pentagon:
        return _reduced(super().meet(other))

    def narrow(self, other: Pentagon) -> Pentagon:
        return _reduced(super().narrow(other))

    def assume(self, expression: Any, *, pp: Any = None, dest: Any = None,
               oracle: Any = None) -> Pentagon:
        return _reduced(super().assume(expression, pp=pp, dest=dest, oracle=oracle))

    def assign(self, identifier: Identifier, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> Pentagon:
        result = _reduced(super().assign(identifier, expression, pp=pp, oracle=oracle))
        if result.is_bottom() or not (isinstance(expression, BinaryExpression)
                                      and expression.operator is Operator.SUB):
            return result
        pair = identifier_pair(expression)
        if pair is None:
            return result
        x, y = pair
        bounds, intervals = result.bounds, result.intervals

        if x in bounds.get(y):
            intervals = intervals.put(
                identifier,
                intervals.get(identifier).meet(IntervalValue.at_least(1)),
            )

        iy = self.intervals.get(y)
        if not iy.is_bottom() and iy.lo > 0:
            bounds = bounds.put(identifier, (self.bounds.get(x) | {x}) - {identifier})
        else:
            bounds = bounds.put(identifier, frozenset())
        return _reduced(self._make(bounds, intervals))

    def representation(self) -> Union[str, Dict[str, str]]:
        """``"⊤"``, ``"⊥"`` or ``{name: "<interval>, <bounds>"}``."""
        if self.is_top():
            return TOP_REPR
        if self.is_bottom():
            return BOTTOM_REPR
        tracked = self.intervals.keys() | self.bounds.keys()
        return {
            str(i): (f"{self.intervals.get(i).representation()}, "
                     f"{self.bounds.bounds_representation(i)}")
            for i in sorted(tracked, key=str)
        }

    def __str__(self) -> str:
        rep = self.representation()
        if isinstance(rep, str):
            return rep
        return "{" + "; ".join(f"{k}: {v}" for k, v in rep.items()) + "}"

    def __repr__(self) -> str:
        return f"Pentagon({self})"


def make_pentagon() -> Pentagon:
    """Create the ⊤ pentagon state."""
    return Pentagon()


__all__ = [
    "Pentagon",
    "make_pentagon",
]
