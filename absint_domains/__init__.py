"""
absint_domains — Abstract Domains for Numeric Static Analysis
=============================================================

Lattice values a fixpoint engine can drive through a program: each
domain answers ``leq``/``join``/``meet``/``widen``/``narrow`` and gives
transfer functions for assignments, guards and scope changes over a
small symbolic expression model.

Core modules
------------
lattice
    Lattice protocols, ``Satisfiability`` and the ⊤/⊥ tag.
expressions
    Constants, identifiers, unary and binary expressions.
congruence
    The congruence domain  mℤ + r.
intervals
    The interval domain  [lo, hi].
environment
    Pointwise lift of a per-identifier value to a whole state.
equality
    Must-equality classes between identifiers.
upper_bounds
    Strict upper bounds  x < y  between identifiers.
combined
    Cartesian composition; equality × congruence.
pentagon
    Intervals × strict upper bounds with cross-refinement.

Quick start
-----------
>>> from absint_domains import Identifier, Constant, make_congruence_env
>>> env = make_congruence_env().assign(Identifier("x"), Constant(4))
>>> print(env)
{x: 0Z+4}

Package layout
--------------
::

    absint_domains/
    ├── __init__.py            ← this file
    ├── lattice.py
    ├── expressions.py
    ├── errors.py
    ├── congruence.py
    ├── intervals.py
    ├── environment.py
    ├── equality.py
    ├── upper_bounds.py
    ├── combined.py
    └── pentagon.py
"""

from __future__ import annotations

import logging

from .combined import CartesianProduct, CongruenceEqualityProduct, make_congruence_equality
from .congruence import CongruenceValue
from .environment import ValueEnvironment, make_congruence_env, make_interval_env
from .equality import EqualityDomain
from .errors import DomainComputationError
from .expressions import (
    BinaryExpression,
    Constant,
    Expression,
    Identifier,
    Operator,
    UnaryExpression,
)
from .intervals import IntervalValue
from .lattice import (
    BOTTOM_REPR,
    TOP_REPR,
    BaseNonRelationalValue,
    Lattice,
    LatticeKind,
    Satisfiability,
    SemanticDomain,
)
from .pentagon import Pentagon, make_pentagon
from .upper_bounds import StrictUpperBounds

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # lattice
    "TOP_REPR",
    "BOTTOM_REPR",
    "LatticeKind",
    "Satisfiability",
    "Lattice",
    "SemanticDomain",
    "BaseNonRelationalValue",
    "DomainComputationError",
    # expressions
    "Operator",
    "Constant",
    "Identifier",
    "UnaryExpression",
    "BinaryExpression",
    "Expression",
    # domains
    "CongruenceValue",
    "IntervalValue",
    "ValueEnvironment",
    "EqualityDomain",
    "StrictUpperBounds",
    "CartesianProduct",
    "CongruenceEqualityProduct",
    "Pentagon",
    # factories
    "make_interval_env",
    "make_congruence_env",
    "make_congruence_equality",
    "make_pentagon",
]
