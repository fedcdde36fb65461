"""
absint_domains/combined.py
══════════════════════════

Cartesian composition of two state domains.

    (L₁, R₁) ⊑ (L₂, R₂)  ⟺  L₁ ⊑ L₂ ∧ R₁ ⊑ R₂
    (L₁, R₁) ⊔ (L₂, R₂)  =   closure(self, other, (L₁ ⊔ L₂, R₁ ⊔ R₂))

Every operation is applied component-wise and the results are packed
back into a product of the same class.  The optional ``join_closure``
lets a relational combination (the pentagon domain) re-derive facts
that the component-wise join loses; it receives both operands and the
component-wise result.

A satisfiability query is answered by both components and the answers
are met, so a definite answer from either side wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Hashable, Iterable, Optional, TypeVar

from .environment import ValueEnvironment, make_congruence_env
from .equality import EqualityDomain
from .errors import DomainComputationError
from .expressions import Identifier
from .lattice import BOTTOM_REPR, TOP_REPR, Satisfiability

L = TypeVar("L")
R = TypeVar("R")
P = TypeVar("P", bound="CartesianProduct")

JoinClosure = Callable[[Any, Any, Any], Any]


@dataclass(frozen=True)
class CartesianProduct(Generic[L, R]):
    """
    Direct product of two state domains with an optional join closure.
    """
    left: L
    right: R
    join_closure: Optional[JoinClosure] = field(default=None, repr=False, compare=False)

    def _make(self: P, left: Any, right: Any) -> P:
        return replace(self, left=left, right=right)

    def _check(self, other: Any) -> None:
        if not isinstance(other, type(self)):
            raise DomainComputationError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}",
                operand=other,
            )

    # ---- Constructors and predicates -------------------------------------

    def top(self: P) -> P:
        return self._make(self.left.top(), self.right.top())

    def bottom(self: P) -> P:
        return self._make(self.left.bottom(), self.right.bottom())

    def is_top(self) -> bool:
        return self.left.is_top() and self.right.is_top()

    def is_bottom(self) -> bool:
        return self.left.is_bottom() and self.right.is_bottom()

    def knows_identifier(self, identifier: Identifier) -> bool:
        return (self.left.knows_identifier(identifier)
                or self.right.knows_identifier(identifier))

    # ---- Lattice operations ----------------------------------------------

    def leq(self, other: P) -> bool:
        self._check(other)
        return self.left.leq(other.left) and self.right.leq(other.right)

    def join(self: P, other: P) -> P:
        self._check(other)
        joined = self._make(self.left.join(other.left), self.right.join(other.right))
        if self.join_closure is not None:
            joined = self.join_closure(self, other, joined)
        return joined

    def meet(self: P, other: P) -> P:
        self._check(other)
        return self._make(self.left.meet(other.left), self.right.meet(other.right))

    def widen(self: P, other: P) -> P:
        self._check(other)
        return self._make(self.left.widen(other.left), self.right.widen(other.right))

    def narrow(self: P, other: P) -> P:
        self._check(other)
        return self._make(self.left.narrow(other.left), self.right.narrow(other.right))

    # ---- Semantics -------------------------------------------------------

    def assign(self: P, identifier: Identifier, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> P:
        return self._make(
            self.left.assign(identifier, expression, pp=pp, oracle=oracle),
            self.right.assign(identifier, expression, pp=pp, oracle=oracle),
        )

    def small_step_semantics(self: P, expression: Any, *,
                             pp: Any = None, oracle: Any = None) -> P:
        return self._make(
            self.left.small_step_semantics(expression, pp=pp, oracle=oracle),
            self.right.small_step_semantics(expression, pp=pp, oracle=oracle),
        )

    def assume(self: P, expression: Any, *, pp: Any = None, dest: Any = None,
               oracle: Any = None) -> P:
        return self._make(
            self.left.assume(expression, pp=pp, dest=dest, oracle=oracle),
            self.right.assume(expression, pp=pp, dest=dest, oracle=oracle),
        )

    def satisfies(self, expression: Any, *,
                  pp: Any = None, oracle: Any = None) -> Satisfiability:
        left = self.left.satisfies(expression, pp=pp, oracle=oracle)
        right = self.right.satisfies(expression, pp=pp, oracle=oracle)
        return left.meet(right)

    def forget_identifier(self: P, identifier: Identifier) -> P:
        return self._make(
            self.left.forget_identifier(identifier),
            self.right.forget_identifier(identifier),
        )

    def forget_identifiers(self: P, identifiers: Iterable[Identifier]) -> P:
        doomed = frozenset(identifiers)
        return self.forget_identifiers_if(lambda i: i in doomed)

    def forget_identifiers_if(self: P, predicate: Callable[[Identifier], bool]) -> P:
        return self._make(
            self.left.forget_identifiers_if(predicate),
            self.right.forget_identifiers_if(predicate),
        )

    def push_scope(self: P, token: Hashable) -> P:
        return self._make(self.left.push_scope(token), self.right.push_scope(token))

    def pop_scope(self: P, token: Hashable) -> P:
        return self._make(self.left.pop_scope(token), self.right.pop_scope(token))

    # ---- Representation --------------------------------------------------

    def representation(self) -> Any:
        if self.is_bottom():
            return BOTTOM_REPR
        if self.is_top():
            return TOP_REPR
        return f"[{self.left.representation()}, {self.right.representation()}]"

    def __str__(self) -> str:
        return str(self.representation())

    def __repr__(self) -> str:
        return f"({self.left!r} × {self.right!r})"


@dataclass(frozen=True)
class CongruenceEqualityProduct(CartesianProduct[EqualityDomain, ValueEnvironment]):
    """
    Must-equalities alongside per-identifier congruences.

    Identifiers are known through the equality component only.
    """
    left: EqualityDomain = field(default_factory=EqualityDomain)
    right: ValueEnvironment = field(default_factory=make_congruence_env)

    def knows_identifier(self, identifier: Identifier) -> bool:
        return self.left.knows_identifier(identifier)


def make_congruence_equality() -> CongruenceEqualityProduct:
    """Create the ⊤ product of the equality and congruence domains."""
    return CongruenceEqualityProduct()


__all__ = [
    "CartesianProduct",
    "CongruenceEqualityProduct",
    "JoinClosure",
    "make_congruence_equality",
]
