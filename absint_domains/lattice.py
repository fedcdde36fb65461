"""
absint_domains/lattice.py
═════════════════════════

The lattice contract shared by every domain in the package.

    ┌─────────────────────────────────────────────────────────────┐
    │  Lattice            (protocol: ⊑, ⊔, ⊓, ∇, Δ, ⊤/⊥ tests)    │
    │    └── SemanticDomain  (+ assign / assume / satisfies / …)  │
    │  BaseNonRelationalValue  (per-identifier value hooks)       │
    │  Satisfiability          (answer to a condition query)      │
    │  LatticeKind             (explicit ⊤ / ⊥ / value tag)       │
    └─────────────────────────────────────────────────────────────┘

Lattice laws that every implementation MUST satisfy (property-tested
with Hypothesis in ``tests/test_lattice_laws.py``):

    1. x ⊔ ⊥ = x                          (⊥ is identity for join)
    2. x ⊓ ⊤ = x                          (⊤ is identity for meet)
    3. x ⊑ x ⊔ y  and  y ⊑ x ⊔ y         (join is upper bound)
    4. x ⊑ x                              (reflexivity)
    5. x ⊑ y ∧ y ⊑ z  ⟹  x ⊑ z          (transitivity)
    6. ⊥ ⊑ x ⊑ ⊤                         (extremal elements)

Domains are immutable: every operation returns a new value.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import (
    Any,
    Callable,
    Final,
    Protocol,
    Tuple,
    TypeVar,
    runtime_checkable,
)

TOP_REPR: Final[str] = "⊤"
BOTTOM_REPR: Final[str] = "⊥"

V = TypeVar("V", bound="BaseNonRelationalValue")


# ═══════════════════════════════════════════════════════════════════════════
#  PART 0 — TAGS AND QUERY RESULTS
# ═══════════════════════════════════════════════════════════════════════════

class LatticeKind(Enum):
    """Explicit tag replacing numeric or identity sentinels for ⊤ and ⊥."""
    TOP = auto()
    BOTTOM = auto()
    VALUE = auto()


class Satisfiability(Enum):
    """
    Answer to "does this state satisfy the condition?".

    ``BOTTOM`` only arises from meeting two contradicting answers (the
    state that produced them is unreachable) or from querying ⊥.
    """
    SATISFIED = auto()
    NOT_SATISFIED = auto()
    UNKNOWN = auto()
    BOTTOM = auto()

    @classmethod
    def of(cls, condition: bool) -> Satisfiability:
        return cls.SATISFIED if condition else cls.NOT_SATISFIED

    def negate(self) -> Satisfiability:
        if self is Satisfiability.SATISFIED:
            return Satisfiability.NOT_SATISFIED
        if self is Satisfiability.NOT_SATISFIED:
            return Satisfiability.SATISFIED
        return self

    def meet(self, other: Satisfiability) -> Satisfiability:
        """Combine two sound answers: any definite answer wins."""
        if self is other:
            return self
        if self is Satisfiability.UNKNOWN:
            return other
        if other is Satisfiability.UNKNOWN:
            return self
        return Satisfiability.BOTTOM

    def join(self, other: Satisfiability) -> Satisfiability:
        if self is other:
            return self
        if self is Satisfiability.BOTTOM:
            return other
        if other is Satisfiability.BOTTOM:
            return self
        return Satisfiability.UNKNOWN

    def is_definite(self) -> bool:
        return self in (Satisfiability.SATISFIED, Satisfiability.NOT_SATISFIED)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — PROTOCOLS
# ═══════════════════════════════════════════════════════════════════════════

@runtime_checkable
class Lattice(Protocol):
    """Structure every domain element exposes to the fixpoint engine."""

    def leq(self, other: Any) -> bool:
        """Partial order:  self ⊑ other."""
        ...

    def join(self, other: Any) -> Any:
        """Least upper bound:  self ⊔ other."""
        ...

    def meet(self, other: Any) -> Any:
        """Greatest lower bound:  self ⊓ other."""
        ...

    def widen(self, other: Any) -> Any:
        """
        Widening operator  self ∇ other.

        Must satisfy  x ⊔ y ⊑ x ∇ y,  and every chain x₀ ∇ x₁ ∇ …
        stabilises in finitely many steps.
        """
        ...

    def narrow(self, other: Any) -> Any:
        """
        Narrowing operator  self Δ other.

        other ⊑ self  ⟹  other ⊑ (self Δ other) ⊑ self.
        """
        ...

    def is_top(self) -> bool:
        ...

    def is_bottom(self) -> bool:
        ...


@runtime_checkable
class SemanticDomain(Lattice, Protocol):
    """
    A lattice describing a whole program state.

    ``pp``, ``dest`` and ``oracle`` are opaque tokens owned by the
    driving engine; domains forward them and never look inside.
    """

    def top(self) -> Any:
        ...

    def bottom(self) -> Any:
        ...

    def assign(self, identifier: Any, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> Any:
        ...

    def small_step_semantics(self, expression: Any, *,
                             pp: Any = None, oracle: Any = None) -> Any:
        ...

    def assume(self, expression: Any, *, pp: Any = None,
               dest: Any = None, oracle: Any = None) -> Any:
        ...

    def satisfies(self, expression: Any, *,
                  pp: Any = None, oracle: Any = None) -> Satisfiability:
        ...

    def forget_identifier(self, identifier: Any) -> Any:
        ...

    def forget_identifiers_if(self, predicate: Callable[[Any], bool]) -> Any:
        ...

    def push_scope(self, token: Any) -> Any:
        ...

    def pop_scope(self, token: Any) -> Any:
        ...

    def knows_identifier(self, identifier: Any) -> bool:
        ...

    def representation(self) -> Any:
        ...


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — NON-RELATIONAL VALUE HOOKS
# ═══════════════════════════════════════════════════════════════════════════
#
#  A non-relational value abstracts the possible values of ONE identifier.
#  ``ValueEnvironment`` lifts it to a whole state and calls these hooks
#  while walking an expression.  Defaults are the sound fallbacks: ⊤ for
#  every value-producing operator, UNKNOWN for every predicate, and no
#  refinement on assumptions.
# ═══════════════════════════════════════════════════════════════════════════

class BaseNonRelationalValue:
    """Default semantics for per-identifier values; subclasses override."""

    __slots__ = ()

    @classmethod
    def top(cls: type[V]) -> V:
        raise NotImplementedError

    @classmethod
    def bottom(cls: type[V]) -> V:
        raise NotImplementedError

    @classmethod
    def eval_constant(cls: type[V], value: Any) -> V:
        return cls.top()

    @classmethod
    def eval_unary(cls: type[V], operator: Any, arg: V) -> V:
        if arg.is_bottom():
            return arg
        return cls.top()

    @classmethod
    def eval_binary(cls: type[V], operator: Any, left: V, right: V) -> V:
        if left.is_bottom() or right.is_bottom():
            return cls.bottom()
        return cls.top()

    @classmethod
    def satisfies_binary(cls, operator: Any, left: Any, right: Any) -> Satisfiability:
        return Satisfiability.UNKNOWN

    @classmethod
    def refine_binary(cls: type[V], operator: Any, left: V, right: V) -> Tuple[V, V]:
        """Refine both operands assuming ``left <operator> right`` holds."""
        return left, right

    def is_top(self) -> bool:
        raise NotImplementedError

    def is_bottom(self) -> bool:
        raise NotImplementedError

    def representation(self) -> str:
        return repr(self)


__all__ = [
    "TOP_REPR",
    "BOTTOM_REPR",
    "LatticeKind",
    "Satisfiability",
    "Lattice",
    "SemanticDomain",
    "BaseNonRelationalValue",
]
