# tests/test_environment.py
"""
Tests for the pointwise environment lift: lookup, lattice operations,
forgetting, scoping and error reporting.
"""

import logging

import pytest

from absint_domains import (
    CongruenceValue,
    Constant,
    DomainComputationError,
    Identifier,
    IntervalValue,
    Operator,
    Satisfiability,
    UnaryExpression,
    ValueEnvironment,
    make_congruence_env,
    make_interval_env,
)
from tests.conftest import binop, div, eq, lnot, lt


class TestLookup:

    def test_unmapped_identifier_is_top(self, x):
        env = make_interval_env()
        assert env.get(x).is_top()
        assert not env.knows_identifier(x)

    def test_put_returns_new_environment(self, x):
        env = make_interval_env()
        updated = env.put(x, IntervalValue(0, 1))
        assert updated.get(x) == IntervalValue(0, 1)
        assert env.get(x).is_top()
        assert updated.knows_identifier(x)

    def test_bottom_value_collapses_environment(self, x, y):
        env = make_interval_env().put(y, IntervalValue(0, 0))
        assert env.put(x, IntervalValue.bottom()).is_bottom()

    def test_bottom_environment_reports_bottom_values(self, x):
        bot = make_interval_env().bottom()
        assert bot.get(x).is_bottom()
        assert bot.eval(Constant(1)).is_bottom()
        assert bot.assign(x, Constant(1)).is_bottom()

    def test_is_top_ignores_explicit_top_values(self, x):
        env = make_interval_env().put(x, IntervalValue.top())
        assert env.is_top()

    def test_keys(self, x, y):
        env = make_interval_env().put(x, IntervalValue(0, 0)).put(y, IntervalValue(1, 1))
        assert env.keys() == frozenset({x, y})

    def test_caller_mapping_is_copied(self, x):
        source = {}
        env = ValueEnvironment(IntervalValue, source)
        source[x] = IntervalValue(0, 0)
        assert env.get(x).is_top()
        assert not env.knows_identifier(x)

    def test_mapping_is_read_only(self, x):
        env = make_interval_env().put(x, IntervalValue(0, 0))
        with pytest.raises(TypeError):
            env.mapping[x] = IntervalValue(5, 5)
        assert env.get(x) == IntervalValue(0, 0)


class TestPointwiseLattice:

    def test_join_covers_union_of_keys(self, x, y):
        a = make_interval_env().put(x, IntervalValue(0, 0))
        b = make_interval_env().put(x, IntervalValue(5, 5)).put(y, IntervalValue(1, 1))
        joined = a.join(b)
        assert joined.get(x) == IntervalValue(0, 5)
        assert joined.get(y).is_top()
        assert a.leq(joined) and b.leq(joined)

    def test_meet_conflict_is_bottom(self, x):
        a = make_interval_env().put(x, IntervalValue(0, 1))
        b = make_interval_env().put(x, IntervalValue(5, 6))
        assert a.meet(b).is_bottom()

    def test_leq(self, x):
        small = make_interval_env().put(x, IntervalValue(1, 2))
        big = make_interval_env().put(x, IntervalValue(0, 5))
        assert small.leq(big)
        assert not big.leq(small)
        assert small.leq(make_interval_env())
        assert small.bottom().leq(small)
        assert not small.leq(small.bottom())

    def test_bottom_is_neutral_for_join(self, x):
        env = make_congruence_env().put(x, CongruenceValue(4, 1))
        assert env.join(env.bottom()) == env
        assert env.bottom().join(env) == env
        assert env.widen(env.bottom()) == env

    def test_mixing_value_domains_raises(self):
        with pytest.raises(DomainComputationError, match="different domain"):
            make_interval_env().join(make_congruence_env())

    def test_error_carries_operand(self):
        other = make_congruence_env()
        with pytest.raises(DomainComputationError) as info:
            make_interval_env().leq(other)
        assert info.value.operand is other


class TestPredicates:

    def test_boolean_constants_are_decided(self):
        env = make_interval_env()
        assert env.satisfies(Constant(True)) is Satisfiability.SATISFIED
        assert env.satisfies(Constant(False)) is Satisfiability.NOT_SATISFIED
        assert env.assume(Constant(False)).is_bottom()

    def test_logical_negation_flips_answer(self, x):
        env = make_interval_env().assign(x, Constant(1))
        assert env.satisfies(lt("x", 2)) is Satisfiability.SATISFIED
        assert env.satisfies(lnot(lt("x", 2))) is Satisfiability.NOT_SATISFIED

    def test_non_comparisons_are_unknown(self, x):
        env = make_interval_env()
        assert env.satisfies(x) is Satisfiability.UNKNOWN
        assert env.satisfies(binop(Operator.ADD, "x", 1)) is Satisfiability.UNKNOWN
        assert env.assume(x) == env

    def test_bottom_state_answers_bottom(self):
        bot = make_interval_env().bottom()
        assert bot.satisfies(eq("x", 1)) is Satisfiability.BOTTOM
        assert bot.assume(eq("x", 1)) is bot

    def test_double_negation(self, x):
        env = make_interval_env()
        guard = UnaryExpression(Operator.LOGICAL_NOT, lnot(lt("x", 10)))
        assert env.assume(guard).get(x) == IntervalValue(float("-inf"), 9)

    def test_infeasible_assumption_is_logged(self, x, caplog):
        env = make_interval_env().assign(x, Constant(5))
        with caplog.at_level(logging.DEBUG, logger="absint_domains.environment"):
            assert env.assume(lt("x", 0)).is_bottom()
        assert "cannot hold" in caplog.text


class TestForgetAndScopes:

    def test_forget_is_idempotent(self, x, y):
        env = make_interval_env().put(x, IntervalValue(0, 1)).put(y, IntervalValue(2, 3))
        once = env.forget_identifier(x)
        assert once.forget_identifier(x) == once
        assert not once.knows_identifier(x)
        assert once.get(y) == IntervalValue(2, 3)

    def test_forget_many(self, x, y, z):
        env = (make_interval_env()
               .put(x, IntervalValue(0, 1))
               .put(y, IntervalValue(2, 3))
               .put(z, IntervalValue(4, 5)))
        assert env.forget_identifiers([x, y]).keys() == frozenset({z})
        assert env.forget_identifiers_if(lambda i: i.name != "y").keys() == frozenset({y})

    def test_push_hides_and_pop_restores(self, x, y):
        env = make_interval_env().put(x, IntervalValue(0, 1))
        inner = env.push_scope("call")
        assert inner.get(x).is_top()
        assert inner.keys() == frozenset({x.hide("call")})
        inner = inner.put(y, IntervalValue(7, 7))
        outer = inner.pop_scope("call")
        assert outer == env

    def test_pop_keeps_identifiers_of_enclosing_scopes(self, x):
        env = make_interval_env().put(x, IntervalValue(0, 1))
        nested = env.push_scope("outer").push_scope("inner")
        popped = nested.pop_scope("inner")
        assert popped.keys() == frozenset({x.hide("outer")})
        assert popped.pop_scope("outer") == env

    def test_small_step_semantics_is_identity(self, x):
        env = make_interval_env().put(x, IntervalValue(0, 1))
        assert env.small_step_semantics(div("x", 0)) is env


class TestEvaluation:

    def test_unknown_expression_shape_is_top(self):
        assert make_interval_env().eval(object()).is_top()

    def test_unknown_unary_operator_is_top(self, x):
        env = make_interval_env().put(x, IntervalValue(0, 1))
        assert env.eval(UnaryExpression(Operator.OTHER, x)).is_top()

    def test_context_tokens_are_accepted(self, x):
        env = make_interval_env()
        moved = env.assign(x, Constant(1), pp="line 3", oracle=object())
        assert moved.get(x) == IntervalValue(1, 1)
        assert moved.assume(lt("x", 2), pp="a", dest="b") == moved

    def test_representation_sorts_by_name(self):
        env = (make_interval_env()
               .put(Identifier("b"), IntervalValue(1, 1))
               .put(Identifier("a"), IntervalValue(0, 0)))
        assert str(env) == "{a: [0, 0], b: [1, 1]}"
        assert repr(env) == "Env[IntervalValue]({a: [0, 0], b: [1, 1]})"
