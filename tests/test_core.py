"""Tests for lazyexpr core functionality."""

import pytest

from lazyexpr import (
    ConsumedExpressionError,
    EvaluationTracer,
    Expression,
    Lazy,
    Map,
    Thunk,
    Value,
    configure_tracer,
    get_tracer,
    lazy,
    lazyf,
)


class TestValue:
    """Test Value leaves."""

    def test_literal(self):
        assert lazy(1).evaluate() == 1

    def test_returns_same_object(self):
        data = [1, 2, 3]
        assert lazy(data).evaluate() is data

    def test_none_is_a_value(self):
        assert lazy(None).evaluate() is None

    def test_bare_value_node(self):
        assert Value("abc").evaluate() == "abc"

    def test_lazy_wraps_value(self):
        expr = lazy(3)
        assert isinstance(expr, Lazy)
        assert repr(expr) == "Lazy(Value(3))"


class TestThunk:
    """Test Thunk leaves."""

    def test_function(self):
        assert lazyf(lambda: "potatoland").evaluate() == "potatoland"

    def test_not_called_until_evaluated(self):
        calls = []
        expr = lazyf(lambda: calls.append("called") or 42)
        assert calls == []
        assert expr.evaluate() == 42
        assert calls == ["called"]

    def test_called_exactly_once(self):
        calls = []

        def produce():
            calls.append(1)
            return len(calls)

        expr = lazyf(produce).map(lambda n: n * 10)
        assert expr.evaluate() == 10
        assert len(calls) == 1

    def test_exception_propagates_unmodified(self):
        error = KeyError("missing")

        def fail():
            raise error

        with pytest.raises(KeyError) as exc_info:
            lazyf(fail).evaluate()
        assert exc_info.value is error


class TestMap:
    """Test Map combinators."""

    def test_map(self):
        assert lazy(2).map(lambda n: n ** 3).evaluate() == 8

    def test_map_changes_type(self):
        assert lazy(12).map(str).map(len).evaluate() == 2

    def test_map_is_deferred(self):
        calls = []
        expr = lazy(5).map(lambda n: calls.append(n) or n + 1)
        assert calls == []
        assert expr.evaluate() == 6
        assert calls == [5]

    def test_inner_before_transform(self):
        order = []
        inner = lazyf(lambda: order.append("inner") or 1)
        expr = inner.map(lambda n: order.append("transform") or n)
        expr.evaluate()
        assert order == ["inner", "transform"]

    def test_deep_chain(self):
        expr = lazy(0)
        for _ in range(5000):
            expr = expr.map(lambda n: n + 1)
        assert expr.evaluate() == 5000

    def test_deep_chain_clone_and_repr(self):
        expr = lazy(0)
        for _ in range(1000):
            expr = expr.map(lambda n: n + 1)
        copy = expr.clone()
        assert repr(copy).startswith("Lazy(Map(Map(")
        assert copy.evaluate() == 1000
        assert expr.evaluate() == 1000

    def test_transform_exception_propagates(self):
        expr = lazy(1).map(lambda n: n / 0)
        with pytest.raises(ZeroDivisionError):
            expr.evaluate()

    def test_map_on_bare_node(self):
        expr = Value(4).map(lambda n: n * 2)
        assert isinstance(expr, Lazy)
        assert repr(expr).startswith("Lazy(Map(Value(4), ")
        assert expr.evaluate() == 8


class TestConsumption:
    """Test that expressions are single-use."""

    def test_evaluate_consumes(self):
        expr = lazy(1)
        expr.evaluate()
        assert expr.is_consumed
        with pytest.raises(ConsumedExpressionError):
            expr.evaluate()

    def test_map_moves_operand(self):
        base = lazy(3)
        mapped = base.map(lambda n: n + 1)
        assert base.is_consumed
        assert not mapped.is_consumed
        with pytest.raises(ConsumedExpressionError):
            base.evaluate()
        assert mapped.evaluate() == 4

    def test_cannot_compose_twice(self):
        base = Value(3)
        Map(base, str)
        with pytest.raises(ConsumedExpressionError):
            Map(base, repr)

    def test_clone_of_consumed_raises(self):
        expr = lazy(1)
        expr.evaluate()
        with pytest.raises(ConsumedExpressionError):
            expr.clone()

    def test_consumed_repr(self):
        expr = Value(1)
        expr.evaluate()
        assert repr(expr) == "<consumed Value>"

    def test_failed_evaluation_still_consumes(self):
        expr = lazyf(lambda: 1 / 0)
        with pytest.raises(ZeroDivisionError):
            expr.evaluate()
        assert expr.is_consumed

    def test_base_expression_is_abstract(self):
        with pytest.raises(NotImplementedError):
            Expression().evaluate()


class TestClone:
    """Test clone() on unevaluated trees."""

    def test_clone_evaluates_independently(self):
        expr = lazy(2).map(lambda n: n * 3)
        copy = expr.clone()
        assert expr.evaluate() == 6
        assert copy.evaluate() == 6

    def test_clone_deep_copies_values(self):
        data = [1, 2]
        expr = lazy(data)
        copy = expr.clone()
        copy_value = copy.evaluate()
        assert copy_value == [1, 2]
        assert copy_value is not data

    def test_clone_shares_callable(self):
        calls = []
        expr = lazyf(lambda: calls.append(1) or len(calls))
        copy = expr.clone()
        assert expr.evaluate() == 1
        assert copy.evaluate() == 2

    def test_clone_leaves_original_live(self):
        expr = lazy(1)
        expr.clone()
        assert not expr.is_consumed


class TestRepr:
    """Test readable descriptions of trees."""

    def test_value_repr(self):
        assert repr(lazy(3)) == "Lazy(Value(3))"

    def test_thunk_repr(self):
        def load():
            return 1

        assert repr(Thunk(load)) == "Thunk(load)"

    def test_map_repr(self):
        assert repr(lazy(3).map(str)) == "Lazy(Map(Value(3), str))"


class TestTracer:
    """Test the global evaluation tracer."""

    def test_no_tracer_by_default(self):
        assert get_tracer() is None

    def test_configure_tracer(self, tracer):
        assert get_tracer() is tracer
        assert isinstance(tracer, EvaluationTracer)

    def test_children_reported_before_parents(self, tracer):
        lazy(2).map(lambda n: n * 5).evaluate()
        assert tracer.events == [("Value", 2), ("Map", 10)]

    def test_lazy_wrapper_not_reported(self, tracer):
        lazy(1).evaluate()
        assert tracer.events == [("Value", 1)]

    def test_disable_tracer(self, tracer):
        configure_tracer(None)
        lazy(1).evaluate()
        assert tracer.events == []

    def test_failed_node_not_reported(self, tracer):
        with pytest.raises(ValueError):
            lazy("x").map(int).evaluate()
        assert tracer.events == [("Value", "x")]
