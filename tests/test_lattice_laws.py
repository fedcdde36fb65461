# tests/test_lattice_laws.py
"""
Property tests: the partial-order and lattice laws every domain obeys.

Each law is a module-level test parametrized over the strategies of the
domains it applies to; ``STATES`` additionally obey the forgetting and
scoping laws, ``CANONICAL`` domains have one representation per element.
"""

import pytest
from hypothesis import given, settings, strategies as st

from absint_domains import (
    BinaryExpression,
    CongruenceValue,
    Constant,
    EqualityDomain,
    Identifier,
    IntervalValue,
    Operator,
    StrictUpperBounds,
    make_congruence_env,
    make_congruence_equality,
    make_interval_env,
    make_pentagon,
)
from absint_domains.intervals import NEG_INF, POS_INF


IDENTIFIERS = [Identifier(n) for n in "abcde"]


# ═══════════════════════════════════════════════════════════════════════════
#  STRATEGIES
# ═══════════════════════════════════════════════════════════════════════════

@st.composite
def congruences(draw) -> CongruenceValue:
    choice = draw(st.integers(min_value=0, max_value=9))
    if choice == 0:
        return CongruenceValue.bottom()
    if choice == 1:
        return CongruenceValue.top()
    modulus = draw(st.integers(min_value=0, max_value=12))
    residue = draw(st.integers(min_value=-20, max_value=20))
    return CongruenceValue(modulus, residue)


@st.composite
def intervals(draw) -> IntervalValue:
    if draw(st.integers(min_value=0, max_value=9)) == 0:
        return IntervalValue.bottom()
    a = draw(st.integers(min_value=-20, max_value=20))
    b = draw(st.integers(min_value=-20, max_value=20))
    lo, hi = min(a, b), max(a, b)
    if draw(st.booleans()):
        lo = NEG_INF
    if draw(st.booleans()):
        hi = POS_INF
    return IntervalValue(lo, hi)


@st.composite
def identifiers(draw) -> Identifier:
    return draw(st.sampled_from(IDENTIFIERS))


@st.composite
def equalities(draw) -> EqualityDomain:
    if draw(st.integers(min_value=0, max_value=9)) == 0:
        return EqualityDomain.bottom()
    eqd = EqualityDomain()
    for a, b in draw(st.lists(st.tuples(identifiers(), identifiers()), max_size=4)):
        eqd = eqd.merge(a, b)
    return eqd


@st.composite
def upper_bounds(draw) -> StrictUpperBounds:
    sub = StrictUpperBounds()
    for x, y in draw(st.lists(st.tuples(identifiers(), identifiers()), max_size=4)):
        sub = sub.assume(BinaryExpression(Operator.LT, x, y))
    return sub


@st.composite
def interval_envs(draw):
    env = make_interval_env()
    for ident, value in draw(st.dictionaries(identifiers(), intervals(), max_size=4)).items():
        env = env.put(ident, value)
    return env


@st.composite
def congruence_envs(draw):
    env = make_congruence_env()
    for ident, value in draw(st.dictionaries(identifiers(), congruences(), max_size=4)).items():
        env = env.put(ident, value)
    return env


@st.composite
def pentagons(draw):
    """Pentagons reached by guards  x < y,  constants and differences."""
    p = make_pentagon()
    if draw(st.integers(min_value=0, max_value=9)) == 0:
        return p.bottom()
    for _ in range(draw(st.integers(min_value=0, max_value=5))):
        target, x, y = draw(identifiers()), draw(identifiers()), draw(identifiers())
        step = draw(st.sampled_from(("order", "constant", "difference")))
        if step == "order":
            p = p.assume(BinaryExpression(Operator.LT, x, y))
        elif step == "constant":
            value = draw(st.integers(min_value=-5, max_value=5))
            p = p.assign(target, Constant(value))
        else:
            p = p.assign(target, BinaryExpression(Operator.SUB, x, y))
    return p


@st.composite
def congruence_equalities(draw):
    """Equality × congruence states reached by copies, constants, shifts and ``!=`` guards."""
    p = make_congruence_equality()
    for _ in range(draw(st.integers(min_value=0, max_value=5))):
        target, source = draw(identifiers()), draw(identifiers())
        step = draw(st.sampled_from(("copy", "constant", "shift", "differ")))
        if step == "copy":
            p = p.assign(target, source)
        elif step == "constant":
            p = p.assign(target, Constant(draw(st.integers(min_value=-5, max_value=5))))
        elif step == "shift":
            step_by = Constant(draw(st.integers(min_value=1, max_value=4)))
            p = p.assign(target, BinaryExpression(Operator.ADD, source, step_by))
        else:
            p = p.assume(BinaryExpression(Operator.NE, target, source))
    return p


CANONICAL = [
    pytest.param(congruences(), id="congruence"),
    pytest.param(intervals(), id="interval"),
    pytest.param(equalities(), id="equality"),
    pytest.param(upper_bounds(), id="upper-bounds"),
]

STATES = [
    pytest.param(equalities(), id="equality"),
    pytest.param(upper_bounds(), id="upper-bounds"),
    pytest.param(interval_envs(), id="interval-env"),
    pytest.param(congruence_envs(), id="congruence-env"),
    pytest.param(pentagons(), id="pentagon"),
    pytest.param(congruence_equalities(), id="congruence-equality"),
]

ALL = CANONICAL[:2] + STATES


# ═══════════════════════════════════════════════════════════════════════════
#  LATTICE LAWS
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_leq_is_reflexive(values, data):
    a = data.draw(values)
    assert a.leq(a)


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_join_is_upper_bound(values, data):
    a, b = data.draw(values), data.draw(values)
    joined = a.join(b)
    assert a.leq(joined)
    assert b.leq(joined)


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_meet_is_lower_bound(values, data):
    a, b = data.draw(values), data.draw(values)
    met = a.meet(b)
    assert met.leq(a)
    assert met.leq(b)


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_extremes(values, data):
    a = data.draw(values)
    assert a.bottom().leq(a)
    assert a.leq(a.top())
    assert a.join(a.bottom()) == a
    assert a.bottom().join(a) == a
    assert a.meet(a.top()) == a


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_leq_is_transitive_along_joins(values, data):
    a, b, c = (data.draw(values) for _ in range(3))
    ab = a.join(b)
    abc = ab.join(c)
    assert ab.leq(abc)
    assert a.leq(abc)


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=100)
def test_widening_covers_join(values, data):
    a, b = data.draw(values), data.draw(values)
    assert a.join(b).leq(a.widen(b))


@pytest.mark.parametrize("values", ALL)
@given(data=st.data())
@settings(max_examples=50)
def test_operations_are_deterministic(values, data):
    a, b = data.draw(values), data.draw(values)
    assert a.join(b) == a.join(b)
    assert a.meet(b) == a.meet(b)


@pytest.mark.parametrize("values", CANONICAL)
@given(data=st.data())
@settings(max_examples=200)
def test_leq_is_antisymmetric(values, data):
    a, b = data.draw(values), data.draw(values)
    if a.leq(b) and b.leq(a):
        assert a == b


@pytest.mark.parametrize("values", CANONICAL)
@given(data=st.data())
@settings(max_examples=100)
def test_join_is_idempotent(values, data):
    a = data.draw(values)
    assert a.join(a) == a


# ═══════════════════════════════════════════════════════════════════════════
#  STATE LAWS
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("values", STATES)
@given(data=st.data(), ident=identifiers())
@settings(max_examples=100)
def test_forget_is_idempotent(values, data, ident):
    state = data.draw(values)
    once = state.forget_identifier(ident)
    assert once.forget_identifier(ident) == once
    assert not once.knows_identifier(ident) or once.is_bottom()


@pytest.mark.parametrize("values", STATES)
@given(data=st.data())
@settings(max_examples=50)
def test_forget_goes_up(values, data):
    state = data.draw(values)
    assert state.leq(state.forget_identifiers(IDENTIFIERS))


@pytest.mark.parametrize("values", STATES)
@given(data=st.data())
@settings(max_examples=50)
def test_scope_round_trip(values, data):
    state = data.draw(values)
    assert state.push_scope("call").pop_scope("call") == state


@given(state=pentagons())
@settings(max_examples=100)
def test_pentagon_has_no_half_bottom_state(state):
    assert state.is_bottom() or not (state.bounds.is_bottom() or state.intervals.is_bottom())


# ═══════════════════════════════════════════════════════════════════════════
#  CONGRUENCE ORDER
# ═══════════════════════════════════════════════════════════════════════════

class TestCongruenceOrder:

    @given(n=st.integers(min_value=-30, max_value=30),
           m=st.integers(min_value=0, max_value=12),
           r=st.integers(min_value=-30, max_value=30))
    @settings(max_examples=200)
    def test_constant_below_class_iff_member(self, n, m, r):
        expected = (m > 0 and (n - r) % m == 0) or (m == 0 and n == r)
        assert CongruenceValue(0, n).leq(CongruenceValue(m, r)) is expected

    @given(a=congruences(), b=congruences(), n=st.integers(min_value=-30, max_value=30))
    @settings(max_examples=200)
    def test_meet_keeps_common_members(self, a, b, n):
        if a.contains(n) and b.contains(n):
            assert a.meet(b).contains(n)
