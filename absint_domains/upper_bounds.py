"""
absint_domains/upper_bounds.py
══════════════════════════════

Strict upper bounds:  x ↦ { y | x < y is known to hold }.

This is the symbolic half of the pentagon domain.  Fewer recorded bounds
means less knowledge, so the order is reversed set inclusion:

    ⊤            no bound recorded for any identifier
    A ⊑ B   ⟺   ∀x. bounds_A(x) ⊇ bounds_B(x)
    A ⊔ B        per-identifier intersection
    A ⊓ B        per-identifier union (transitively closed; a cycle is ⊥)
    ⊥            explicit tag

``assume`` and ``meet`` keep the relation transitively closed: if
y ∈ bounds(x) and z ∈ bounds(y) then z ∈ bounds(x).  A cycle
(x < … < x) means the state is unreachable, i.e. ⊥.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Hashable,
    Iterable,
    Mapping,
    Optional,
    Tuple,
)

from .expressions import (
    BinaryExpression,
    Identifier,
    Operator,
    identifier_pair,
    integer_constant,
    strip_negation,
)
from .lattice import BOTTOM_REPR, TOP_REPR, LatticeKind, Satisfiability

logger = logging.getLogger(__name__)

IdSet = FrozenSet[Identifier]

_EMPTY: IdSet = frozenset()


def _format_ids(ids: IdSet) -> str:
    if not ids:
        return TOP_REPR
    return "{" + ", ".join(sorted(str(i) for i in ids)) + "}"


def _close(bounds: Dict[Identifier, IdSet]) -> Optional[Dict[Identifier, IdSet]]:
    """Transitive closure of ``bounds``; None if it contains a cycle."""
    closed = dict(bounds)
    changed = True
    while changed:
        changed = False
        for x, above in list(closed.items()):
            reach = above.union(*(closed.get(y, _EMPTY) for y in above))
            if reach != above:
                closed[x] = reach
                changed = True
    if any(x in above for x, above in closed.items()):
        return None
    return closed


@dataclass(frozen=True)
class StrictUpperBounds:
    """
    Map from identifiers to the set of identifiers known to be strictly
    greater.  Empty sets are never stored.

    Examples
    --------
    >>> x, y = Identifier("x"), Identifier("y")
    >>> sub = StrictUpperBounds().assume(BinaryExpression(Operator.LT, x, y))
    >>> sub.get(x) == frozenset({y})
    True
    """
    bounds: Mapping[Identifier, IdSet] = field(default_factory=dict, hash=False)
    kind: LatticeKind = LatticeKind.VALUE

    def __post_init__(self) -> None:
        stored: Dict[Identifier, IdSet]
        if self.kind is LatticeKind.BOTTOM:
            stored = {}
        else:
            stored = {k: frozenset(v) for k, v in self.bounds.items() if v}
        object.__setattr__(self, "bounds", MappingProxyType(stored))

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def top(cls) -> StrictUpperBounds:
        return cls()

    @classmethod
    def bottom(cls) -> StrictUpperBounds:
        return cls({}, LatticeKind.BOTTOM)

    # ---- Access ----------------------------------------------------------

    def get(self, identifier: Identifier) -> IdSet:
        return self.bounds.get(identifier, _EMPTY)

    def put(self, identifier: Identifier, above: Iterable[Identifier]) -> StrictUpperBounds:
        if self.is_bottom():
            return self
        new_map = dict(self.bounds)
        new_map[identifier] = frozenset(above)
        return StrictUpperBounds(new_map)

    def keys(self) -> FrozenSet[Identifier]:
        return frozenset(self.bounds)

    # ---- Predicates ------------------------------------------------------

    def is_top(self) -> bool:
        return self.kind is LatticeKind.VALUE and not self.bounds

    def is_bottom(self) -> bool:
        return self.kind is LatticeKind.BOTTOM

    def knows_identifier(self, identifier: Identifier) -> bool:
        return identifier in self.bounds or any(
            identifier in above for above in self.bounds.values()
        )

    # ---- Lattice operations ----------------------------------------------

    def leq(self, other: StrictUpperBounds) -> bool:
        """Every bound recorded in ``other`` is recorded here too."""
        if self.is_bottom():
            return True
        if other.is_bottom():
            return False
        return all(self.get(x) >= above for x, above in other.bounds.items())

    def join(self, other: StrictUpperBounds) -> StrictUpperBounds:
        """Keep the facts both operands agree on."""
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return StrictUpperBounds({
            x: self.get(x) & other.get(x)
            for x in self.keys() & other.keys()
        })

    def meet(self, other: StrictUpperBounds) -> StrictUpperBounds:
        if self.is_bottom() or other.is_bottom():
            return StrictUpperBounds.bottom()
        closed = _close({
            x: self.get(x) | other.get(x)
            for x in self.keys() | other.keys()
        })
        if closed is None:
            logger.debug("upper bounds: meet produced a cycle, result is ⊥")
            return StrictUpperBounds.bottom()
        return StrictUpperBounds(closed)

    def widen(self, other: StrictUpperBounds) -> StrictUpperBounds:
        """A set survives only if the new iterate still contains all of it."""
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return StrictUpperBounds({
            x: above
            for x, above in self.bounds.items()
            if above <= other.get(x)
        })

    def narrow(self, other: StrictUpperBounds) -> StrictUpperBounds:
        if self.is_bottom() or other.is_bottom():
            return StrictUpperBounds.bottom()
        if self.is_top():
            return other
        return self

    # ---- Forgetting and renaming -----------------------------------------

    def _rename(self, fn: Callable[[Identifier], Optional[Identifier]]) -> StrictUpperBounds:
        """Apply ``fn`` to every identifier; those mapped to None vanish."""
        if self.is_bottom():
            return self
        new_map: Dict[Identifier, IdSet] = {}
        for x, above in self.bounds.items():
            nx = fn(x)
            if nx is None:
                continue
            new_map[nx] = frozenset(
                ny for ny in (fn(y) for y in above) if ny is not None
            )
        return StrictUpperBounds(new_map)

    def forget_identifier(self, identifier: Identifier) -> StrictUpperBounds:
        return self.forget_identifiers_if(lambda i: i == identifier)

    def forget_identifiers(self, identifiers: Iterable[Identifier]) -> StrictUpperBounds:
        doomed = frozenset(identifiers)
        return self.forget_identifiers_if(lambda i: i in doomed)

    def forget_identifiers_if(self, predicate: Callable[[Identifier], bool]) -> StrictUpperBounds:
        return self._rename(lambda i: None if predicate(i) else i)

    def push_scope(self, token: Hashable) -> StrictUpperBounds:
        return self._rename(lambda i: i.hide(token))

    def pop_scope(self, token: Hashable) -> StrictUpperBounds:
        def restore(i: Identifier) -> Optional[Identifier]:
            if i.scope == token:
                return i.restore()
            return i if i.is_hidden else None
        return self._rename(restore)

    # ---- Semantics -------------------------------------------------------

    def small_step_semantics(self, expression: Any, *,
                             pp: Any = None, oracle: Any = None) -> StrictUpperBounds:
        return self

    def assign(self, identifier: Identifier, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> StrictUpperBounds:
        """
        Transfer for ``identifier := expression``.

        Recognised shapes (y an identifier, c > 0 an integer constant):

            id := y        id has the bounds of y, and sits wherever y does
            id := y - c    bounds(id) = bounds(y) ∪ {y}
            id := y + c    id sits wherever y does, and y < id
            id := id + c   facts  x < id  survive
            id := id - c   bounds(id) survives

        Anything else leaves no fact about ``identifier``.
        """
        if self.is_bottom():
            return self
        if expression == identifier:
            return self
        cleared = self.forget_identifier(identifier)

        if isinstance(expression, Identifier):
            below = self._below(expression)
            result = cleared._add_above(below, identifier)
            return result.put(identifier, self.get(expression) - {identifier})

        shifted = _shift(expression)
        if shifted is None:
            return cleared
        source, step = shifted

        if source == identifier:
            if step > 0:
                return cleared._add_above(self._below(identifier), identifier)
            return cleared.put(identifier, self.get(identifier))

        if step < 0:
            return cleared.put(identifier, (self.get(source) | {source}) - {identifier})
        return cleared._add_above(self._below(source) | {source}, identifier)

    def _below(self, identifier: Identifier) -> IdSet:
        return frozenset(x for x, above in self.bounds.items() if identifier in above)

    def _add_above(self, lower: Iterable[Identifier], upper: Identifier) -> StrictUpperBounds:
        if self.is_bottom():
            return self
        new_map = dict(self.bounds)
        for x in lower:
            if x != upper:
                new_map[x] = new_map.get(x, _EMPTY) | {upper}
        return StrictUpperBounds(new_map)

    def assume(self, expression: Any, *, pp: Any = None, dest: Any = None,
               oracle: Any = None) -> StrictUpperBounds:
        if self.is_bottom():
            return self
        ordered = _strict_order(expression)
        if ordered is None:
            return self
        lower, upper = ordered
        if lower == upper or lower in self.get(upper):
            logger.debug("upper bounds: assuming %s closes a cycle, state is ⊥", expression)
            return StrictUpperBounds.bottom()
        gained = self.get(upper) | {upper}
        new_map = dict(self.bounds)
        for x in self._below(lower) | {lower}:
            new_map[x] = new_map.get(x, _EMPTY) | gained
        return StrictUpperBounds(new_map)

    def satisfies(self, expression: Any, *,
                  pp: Any = None, oracle: Any = None) -> Satisfiability:
        if self.is_bottom():
            return Satisfiability.BOTTOM
        inner, negated = strip_negation(expression)
        pair = identifier_pair(inner)
        if pair is None:
            return Satisfiability.UNKNOWN
        x, y = pair
        decide = _DECISIONS.get(inner.operator)
        if decide is None:
            return Satisfiability.UNKNOWN
        answer = decide(self, x, y)
        return answer.negate() if negated else answer

    # ---- Representation --------------------------------------------------

    def bounds_representation(self, identifier: Identifier) -> str:
        """``"{a, b}"`` for the bounds of ``identifier``, ``"⊤"`` when none."""
        if self.is_bottom():
            return BOTTOM_REPR
        return _format_ids(self.get(identifier))

    def representation(self) -> str:
        if self.is_bottom():
            return BOTTOM_REPR
        if self.is_top():
            return TOP_REPR
        entries = ", ".join(
            f"{x}: {_format_ids(above)}"
            for x, above in sorted(self.bounds.items(), key=lambda kv: str(kv[0]))
        )
        return f"{{{entries}}}"

    def __str__(self) -> str:
        return self.representation()

    def __repr__(self) -> str:
        return f"StrictUpperBounds({self.representation()})"


# ═══════════════════════════════════════════════════════════════════════════
#  EXPRESSION SHAPES
# ═══════════════════════════════════════════════════════════════════════════

def _shift(expression: Any) -> Optional[Tuple[Identifier, int]]:
    """
    ``(y, +1)`` for ``y + c`` and ``(y, -1)`` for ``y - c`` with an
    identifier y and an integer constant c > 0; None otherwise.
    """
    if not isinstance(expression, BinaryExpression):
        return None
    if not isinstance(expression.left, Identifier):
        return None
    c = integer_constant(expression.right)
    if c is None or c <= 0:
        return None
    if expression.operator is Operator.ADD:
        return expression.left, 1
    if expression.operator is Operator.SUB:
        return expression.left, -1
    return None


def _strict_order(expression: Any) -> Optional[Tuple[Identifier, Identifier]]:
    """``(lower, upper)`` if ``expression`` states  lower < upper."""
    inner, negated = strip_negation(expression)
    pair = identifier_pair(inner)
    if pair is None:
        return None
    operator = inner.operator.complement() if negated else inner.operator
    x, y = pair
    if operator is Operator.LT:
        return x, y
    if operator is Operator.GT:
        return y, x
    return None


def _decide_lt(sub: StrictUpperBounds, x: Identifier, y: Identifier) -> Satisfiability:
    """Is ``x < y`` established (or refuted) by a recorded bound?"""
    if y in sub.get(x):
        return Satisfiability.SATISFIED
    if x in sub.get(y):
        return Satisfiability.NOT_SATISFIED
    return Satisfiability.UNKNOWN


def _decide_eq(sub: StrictUpperBounds, x: Identifier, y: Identifier) -> Satisfiability:
    if y in sub.get(x) or x in sub.get(y):
        return Satisfiability.NOT_SATISFIED
    return Satisfiability.UNKNOWN


_DECISIONS: Dict[Operator, Callable[[StrictUpperBounds, Identifier, Identifier], Satisfiability]] = {
    Operator.LT: _decide_lt,
    Operator.LE: _decide_lt,
    Operator.GT: lambda s, x, y: _decide_lt(s, y, x),
    Operator.GE: lambda s, x, y: _decide_lt(s, y, x),
    Operator.EQ: _decide_eq,
    Operator.NE: lambda s, x, y: _decide_eq(s, x, y).negate(),
}


__all__ = [
    "StrictUpperBounds",
    "IdSet",
]
