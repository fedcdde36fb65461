"""
absint_domains/environment.py
═════════════════════════════

Abstract environment  Identifier → V  (pointwise lift of a non-relational
value class V such as ``CongruenceValue`` or ``IntervalValue``).

Unmapped identifiers are implicitly ⊤ (anything is possible).  The
unreachable environment is an explicit ⊥ tag: storing a ⊥ value for any
identifier collapses the whole environment to it.

Expression evaluation walks the expression tree and calls the value
class hooks (``eval_constant``, ``eval_unary``, ``eval_binary``,
``satisfies_binary``, ``refine_binary``), so a new value domain only
has to provide those to become a full state domain.
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
    Generic,
    Hashable,
    Iterable,
    Mapping,
    Type,
    TypeVar,
)

from .congruence import CongruenceValue
from .errors import DomainComputationError
from .expressions import (
    BinaryExpression,
    Constant,
    Identifier,
    UnaryExpression,
    strip_negation,
)
from .intervals import IntervalValue
from .lattice import (
    BOTTOM_REPR,
    TOP_REPR,
    BaseNonRelationalValue,
    LatticeKind,
    Satisfiability,
)

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=BaseNonRelationalValue)


@dataclass(frozen=True)
class ValueEnvironment(Generic[V]):
    """
    Abstract environment over the value class ``value_type``.

    Examples
    --------
    >>> env = make_congruence_env()
    >>> env = env.assign(Identifier("x"), Constant(4))
    >>> env.get(Identifier("x")).representation()
    '0Z+4'
    """
    value_type: Type[V]
    mapping: Mapping[Identifier, V] = field(default_factory=dict, hash=False)
    kind: LatticeKind = LatticeKind.VALUE

    def __post_init__(self) -> None:
        # Read-only private copy of the caller's mapping.
        object.__setattr__(self, "mapping", MappingProxyType(dict(self.mapping)))

    # ---- Constructors ----------------------------------------------------

    def top(self) -> ValueEnvironment[V]:
        return ValueEnvironment(self.value_type)

    def bottom(self) -> ValueEnvironment[V]:
        return ValueEnvironment(self.value_type, {}, LatticeKind.BOTTOM)

    def _with(self, mapping: Dict[Identifier, V]) -> ValueEnvironment[V]:
        if any(v.is_bottom() for v in mapping.values()):
            return self.bottom()
        return ValueEnvironment(self.value_type, mapping)

    # ---- Access ----------------------------------------------------------

    def get(self, identifier: Identifier) -> V:
        """Value of ``identifier``; ⊤ when unmapped, ⊥ in a ⊥ environment."""
        if self.is_bottom():
            return self.value_type.bottom()
        return self.mapping.get(identifier, self.value_type.top())

    def put(self, identifier: Identifier, value: V) -> ValueEnvironment[V]:
        """Return a new environment with ``identifier`` mapped to ``value``."""
        if self.is_bottom():
            return self
        new_map = dict(self.mapping)
        new_map[identifier] = value
        return self._with(new_map)

    def keys(self) -> FrozenSet[Identifier]:
        return frozenset(self.mapping)

    # ---- Predicates ------------------------------------------------------

    def is_bottom(self) -> bool:
        return self.kind is LatticeKind.BOTTOM

    def is_top(self) -> bool:
        return not self.is_bottom() and all(v.is_top() for v in self.mapping.values())

    def knows_identifier(self, identifier: Identifier) -> bool:
        return identifier in self.mapping

    # ---- Lattice operations ----------------------------------------------

    def _check(self, other: ValueEnvironment[Any]) -> None:
        if not isinstance(other, ValueEnvironment) or other.value_type is not self.value_type:
            raise DomainComputationError(
                f"cannot combine an environment of {self.value_type.__name__} "
                "with a different domain",
                operand=other,
            )

    def _pointwise(self, other: ValueEnvironment[V],
                   fn: Callable[[V, V], V]) -> ValueEnvironment[V]:
        new_map = {
            k: fn(self.get(k), other.get(k))
            for k in self.keys() | other.keys()
        }
        return self._with(new_map)

    def leq(self, other: ValueEnvironment[V]) -> bool:
        """Pointwise ⊑."""
        self._check(other)
        if self.is_bottom():
            return True
        if other.is_bottom():
            return False
        return all(self.get(k).leq(other.get(k)) for k in self.keys() | other.keys())

    def join(self, other: ValueEnvironment[V]) -> ValueEnvironment[V]:
        """Pointwise ⊔."""
        self._check(other)
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return self._pointwise(other, lambda a, b: a.join(b))

    def meet(self, other: ValueEnvironment[V]) -> ValueEnvironment[V]:
        """Pointwise ⊓."""
        self._check(other)
        if self.is_bottom() or other.is_bottom():
            return self.bottom()
        return self._pointwise(other, lambda a, b: a.meet(b))

    def widen(self, other: ValueEnvironment[V]) -> ValueEnvironment[V]:
        """Pointwise ∇."""
        self._check(other)
        if self.is_bottom():
            return other
        if other.is_bottom():
            return self
        return self._pointwise(other, lambda a, b: a.widen(b))

    def narrow(self, other: ValueEnvironment[V]) -> ValueEnvironment[V]:
        """Pointwise Δ."""
        self._check(other)
        if self.is_bottom() or other.is_bottom():
            return self.bottom()
        return self._pointwise(other, lambda a, b: a.narrow(b))

    # ---- Expression semantics --------------------------------------------

    def eval(self, expression: Any) -> V:
        """Abstract value of ``expression`` in this environment."""
        vt = self.value_type
        if self.is_bottom():
            return vt.bottom()
        if isinstance(expression, Identifier):
            return self.get(expression)
        if isinstance(expression, Constant):
            return vt.eval_constant(expression.value)
        if isinstance(expression, UnaryExpression):
            return vt.eval_unary(expression.operator, self.eval(expression.operand))
        if isinstance(expression, BinaryExpression):
            return vt.eval_binary(
                expression.operator,
                self.eval(expression.left),
                self.eval(expression.right),
            )
        logger.debug("environment: unrecognised expression %r, result is ⊤", expression)
        return vt.top()

    def assign(self, identifier: Identifier, expression: Any, *,
               pp: Any = None, oracle: Any = None) -> ValueEnvironment[V]:
        if self.is_bottom():
            return self
        return self.put(identifier, self.eval(expression))

    def small_step_semantics(self, expression: Any, *,
                             pp: Any = None, oracle: Any = None) -> ValueEnvironment[V]:
        return self

    def satisfies(self, expression: Any, *,
                  pp: Any = None, oracle: Any = None) -> Satisfiability:
        if self.is_bottom():
            return Satisfiability.BOTTOM
        if isinstance(expression, Constant) and isinstance(expression.value, bool):
            return Satisfiability.of(expression.value)
        inner, negated = strip_negation(expression)
        if negated:
            return self.satisfies(inner).negate()
        if isinstance(expression, BinaryExpression) and expression.operator.is_comparison:
            return self.value_type.satisfies_binary(
                expression.operator,
                self.eval(expression.left),
                self.eval(expression.right),
            )
        return Satisfiability.UNKNOWN

    def assume(self, expression: Any, *, pp: Any = None, dest: Any = None,
               oracle: Any = None) -> ValueEnvironment[V]:
        if self.is_bottom():
            return self
        answer = self.satisfies(expression)
        if answer in (Satisfiability.NOT_SATISFIED, Satisfiability.BOTTOM):
            logger.debug("environment: %s cannot hold, state is ⊥", expression)
            return self.bottom()
        if answer is Satisfiability.SATISFIED:
            return self
        return self._refine(expression, negated=False)

    def _refine(self, expression: Any, *, negated: bool) -> ValueEnvironment[V]:
        inner, stripped = strip_negation(expression)
        if stripped:
            return self._refine(inner, negated=not negated)
        if not (isinstance(expression, BinaryExpression) and expression.operator.is_comparison):
            return self
        operator = expression.operator.complement() if negated else expression.operator
        left, right = self.value_type.refine_binary(
            operator,
            self.eval(expression.left),
            self.eval(expression.right),
        )
        if left.is_bottom() or right.is_bottom():
            return self.bottom()
        env = self
        if isinstance(expression.left, Identifier):
            env = env.put(expression.left, left)
        if isinstance(expression.right, Identifier):
            env = env.put(expression.right, right)
        return env

    # ---- Forgetting and scoping ------------------------------------------

    def forget_identifier(self, identifier: Identifier) -> ValueEnvironment[V]:
        if self.is_bottom() or identifier not in self.mapping:
            return self
        new_map = dict(self.mapping)
        del new_map[identifier]
        return ValueEnvironment(self.value_type, new_map)

    def forget_identifiers(self, identifiers: Iterable[Identifier]) -> ValueEnvironment[V]:
        doomed = frozenset(identifiers)
        return self.forget_identifiers_if(lambda i: i in doomed)

    def forget_identifiers_if(self, predicate: Callable[[Identifier], bool]) -> ValueEnvironment[V]:
        if self.is_bottom():
            return self
        return ValueEnvironment(
            self.value_type,
            {k: v for k, v in self.mapping.items() if not predicate(k)},
        )

    def push_scope(self, token: Hashable) -> ValueEnvironment[V]:
        """Hide every identifier under ``token``."""
        if self.is_bottom():
            return self
        return ValueEnvironment(
            self.value_type,
            {k.hide(token): v for k, v in self.mapping.items()},
        )

    def pop_scope(self, token: Hashable) -> ValueEnvironment[V]:
        """
        Leave the scope opened by ``token``: identifiers hidden under it
        become visible again, visible ones (locals of the scope) are
        dropped, identifiers hidden under other tokens are kept.
        """
        if self.is_bottom():
            return self
        new_map: Dict[Identifier, V] = {}
        for k, v in self.mapping.items():
            if k.scope == token:
                new_map[k.restore()] = v
            elif k.is_hidden:
                new_map[k] = v
        return ValueEnvironment(self.value_type, new_map)

    # ---- Representation --------------------------------------------------

    def representation(self) -> str:
        if self.is_bottom():
            return BOTTOM_REPR
        if not self.mapping:
            return TOP_REPR
        entries = ", ".join(
            f"{k}: {v.representation()}"
            for k, v in sorted(self.mapping.items(), key=lambda kv: str(kv[0]))
        )
        return f"{{{entries}}}"

    def __str__(self) -> str:
        return self.representation()

    def __repr__(self) -> str:
        return f"Env[{self.value_type.__name__}]({self.representation()})"


# ═══════════════════════════════════════════════════════════════════════════
#  FACTORY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════

def make_interval_env() -> ValueEnvironment[IntervalValue]:
    """Create an empty (⊤) abstract environment over the interval domain."""
    return ValueEnvironment(IntervalValue)


def make_congruence_env() -> ValueEnvironment[CongruenceValue]:
    """Create an empty (⊤) abstract environment over the congruence domain."""
    return ValueEnvironment(CongruenceValue)


__all__ = [
    "ValueEnvironment",
    "make_interval_env",
    "make_congruence_env",
]
