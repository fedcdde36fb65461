"""
absint_domains/equality.py
══════════════════════════

Must-equality between identifiers as a partition into classes.

    {{a, b, c}, {d, e}}     a = b = c  and  d = e  hold on every path

Only classes with two or more members are stored, so ⊤ (nothing is
known) is the empty partition.  ⊥ is an explicit tag.

Ordering  (more classes, or bigger ones, means more knowledge)

    A ⊑ B  ⟺  every class of B is contained in some class of A

Join keeps the equalities valid on both sides: the pairwise
intersections of the classes of A and B that still relate two
identifiers.  Meet merges the classes of both sides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Hashable, Iterable

from .expressions import Identifier, Operator, identifier_pair, strip_negation
from .lattice import BOTTOM_REPR, LatticeKind, Satisfiability

logger = logging.getLogger(__name__)

EqClass = FrozenSet[Identifier]


def _partition(classes: Iterable[Iterable[Identifier]]) -> FrozenSet[EqClass]:
    return frozenset(frozenset(c) for c in classes if len(frozenset(c)) > 1)


@dataclass(frozen=True)
class EqualityDomain:
    """
    Partition of identifiers into must-equal classes.

    Examples
    --------
    >>> a, b, c = Identifier("a"), Identifier("b"), Identifier("c")
    >>> eq = EqualityDomain().assign(a, b).assign(c, b)
    >>> eq.representation()
    'a = b = c'
    """
    classes: FrozenSet[EqClass] = frozenset()
    kind: LatticeKind = LatticeKind.VALUE

    def __post_init__(self) -> None:
        if self.kind is LatticeKind.BOTTOM:
            object.__setattr__(self, "classes", frozenset())
        else:
            object.__setattr__(self, "classes", _partition(self.classes))

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def top(cls) -> EqualityDomain:
        return cls()

    @classmethod
    def bottom(cls) -> EqualityDomain:
        return cls(frozenset(), LatticeKind.BOTTOM)

    # ---- Predicates ------------------------------------------------------

    def is_top(self) -> bool:
        return self.kind is LatticeKind.VALUE and not self.classes

    def is_bottom(self) -> bool:
        return self.kind is LatticeKind.BOTTOM

    def knows_identifier(self, identifier: Identifier) -> bool:
        return any(identifier in c for c in self.classes)

    def class_of(self, identifier: Identifier) -> EqClass:
        """The class holding ``identifier``; a singleton if it has none."""
        for c in self.classes:
            if identifier in c:
                return c
        return frozenset({identifier})

    # ---- Class edits -----------------------------------------------------

    def merge(self, a: Identifier, b: Identifier) -> EqualityDomain:
        """Union the classes of ``a`` and ``b``."""
        if self.is_bottom():
            return self
        ca, cb = self.class_of(a), self.class_of(b)
        if ca == cb:
            return self
        rest = (c for c in self.classes if c != ca and c != cb)
        return EqualityDomain(frozenset(rest) | {ca | cb})

    def isolate(self, identifier: Identifier) -> EqualityDomain:
        """Drop ``identifier`` from its class (it becomes a singleton)."""
        return self.forget_identifiers_if(lambda i: i == identifier)

    # ---- Lattice operations ----------------------------------------------

    def leq(self, other: EqualityDomain) -> bool:
        if self.is_bottom():
            return True
        if other.is_bottom():
            return False
        return all(any(o <= c for c in self.classes) for o in other.classes)

    def join(self, other: EqualityDomain) -> EqualityDomain:
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return EqualityDomain(frozenset(
            c & o for c in self.classes for o in other.classes
        ))

    def meet(self, other: EqualityDomain) -> EqualityDomain:
        if self.is_bottom() or other.is_bottom():
            return EqualityDomain.bottom()
        result = self
        for c in other.classes:
            first, *rest = sorted(c, key=str)
            for i in rest:
                result = result.merge(first, i)
        return result

    def widen(self, other: EqualityDomain) -> EqualityDomain:
        # Finite height over the identifiers of a program.
        return self.join(other)

    def narrow(self, other: EqualityDomain) -> EqualityDomain:
        return other

    # ---- Semantics -------------------------------------------------------

    def assign(self, identifier: Identifier, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> EqualityDomain:
        """
        ``id := v`` for an identifier v puts ``id`` in the class of v;
        any other right-hand side severs ``id`` from its class.
        """
        if self.is_bottom() or expression == identifier:
            return self
        isolated = self.isolate(identifier)
        if isinstance(expression, Identifier):
            return isolated.merge(identifier, expression)
        return isolated

    def small_step_semantics(self, expression: Any, *,
                             pp: Any = None, oracle: Any = None) -> EqualityDomain:
        return self

    def satisfies(self, expression: Any, *,
                  pp: Any = None, oracle: Any = None) -> Satisfiability:
        if self.is_bottom():
            return Satisfiability.BOTTOM
        inner, negated = strip_negation(expression)
        pair = identifier_pair(inner)
        if pair is None or inner.operator not in (Operator.EQ, Operator.NE):
            return Satisfiability.UNKNOWN
        left, right = pair
        if right not in self.class_of(left):
            return Satisfiability.UNKNOWN
        holds = (inner.operator is Operator.EQ) != negated
        return Satisfiability.of(holds)

    def assume(self, expression: Any, *, pp: Any = None, dest: Any = None,
               oracle: Any = None) -> EqualityDomain:
        answer = self.satisfies(expression)
        if answer is Satisfiability.NOT_SATISFIED:
            logger.debug("equality: %s contradicts a known class, state is ⊥", expression)
            return EqualityDomain.bottom()
        return self

    def forget_identifier(self, identifier: Identifier) -> EqualityDomain:
        return self.isolate(identifier)

    def forget_identifiers(self, identifiers: Iterable[Identifier]) -> EqualityDomain:
        doomed = frozenset(identifiers)
        return self.forget_identifiers_if(lambda i: i in doomed)

    def forget_identifiers_if(self, predicate: Callable[[Identifier], bool]) -> EqualityDomain:
        if self.is_bottom():
            return self
        return EqualityDomain(frozenset(
            frozenset(i for i in c if not predicate(i)) for c in self.classes
        ))

    def push_scope(self, token: Hashable) -> EqualityDomain:
        return self

    def pop_scope(self, token: Hashable) -> EqualityDomain:
        return self

    # ---- Representation --------------------------------------------------

    def representation(self) -> str:
        if self.is_bottom():
            return BOTTOM_REPR
        rendered = sorted(
            " = ".join(sorted(str(i) for i in c)) for c in self.classes
        )
        return ", ".join(rendered)

    def __str__(self) -> str:
        return self.representation()

    def __repr__(self) -> str:
        return f"EqualityDomain({self.representation()})"


__all__ = [
    "EqualityDomain",
    "EqClass",
]
