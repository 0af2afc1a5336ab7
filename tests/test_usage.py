"""Tests for usage combinators and declared shapes."""

import pytest

from streambound.core.multiplicity import Exact, UNBOUNDED
from streambound.core.usage import (
    Usage, UsageShape, ShapeKind,
    constant_usage, once_usage, never_usage, unbounded_usage,
    conditional_usage, dependent_usage, as_usage, usage_for_shape,
    shape_of, declared_bound, compose_shapes, composition_factor,
)


# ═══════════════════════════════════════════════════════════════════════════
# 1. Shapes
# ═══════════════════════════════════════════════════════════════════════════

class TestUsageShape:
    def test_constructors(self):
        assert UsageShape.constant(2).values == (2,)
        assert UsageShape.conditional(1, 0).kind == ShapeKind.CONDITIONAL
        assert UsageShape.unbounded().values == ()

    def test_arity_checked(self):
        with pytest.raises(ValueError, match="takes 1 value"):
            UsageShape(kind=ShapeKind.CONSTANT, values=(1, 2))

    def test_values_validated(self):
        with pytest.raises(ValueError):
            UsageShape.constant(-3)

    def test_bounds(self):
        assert UsageShape.constant(4).bound == Exact(4)
        assert UsageShape.conditional(1, 3).bound == Exact(3)
        assert UsageShape.data_dependent().bound == UNBOUNDED
        assert UsageShape.unbounded().bound == UNBOUNDED

    def test_str(self):
        assert str(UsageShape.constant(1)) == "constant(1)"
        assert str(UsageShape.conditional(1, 0)) == "conditional(1, 0)"
        assert str(UsageShape.unbounded()) == "unbounded"


# ═══════════════════════════════════════════════════════════════════════════
# 2. Combinators
# ═══════════════════════════════════════════════════════════════════════════

class TestCombinators:
    def test_constant(self):
        u = constant_usage(3)
        assert u("anything") == Exact(3)
        assert u(None) == Exact(3)
        assert u.shape == UsageShape.constant(3)

    def test_once_and_never(self):
        assert once_usage()(1) == Exact(1)
        assert never_usage()(1) == Exact(0)

    def test_unbounded(self):
        assert unbounded_usage()([1, 2]) == UNBOUNDED

    def test_conditional(self):
        u = conditional_usage(lambda x: x > 0, 1, 0)
        assert u(5) == Exact(1)
        assert u(-5) == Exact(0)
        assert u.shape.bound == Exact(1)

    def test_dependent_counts(self):
        u = dependent_usage(len)
        assert u([1, 2, 3]) == Exact(3)
        assert u.shape.kind == ShapeKind.DATA_DEPENDENT

    def test_dependent_non_count_is_unbounded(self):
        assert dependent_usage(lambda _x: None)(0) == UNBOUNDED
        assert dependent_usage(lambda _x: -1)(0) == UNBOUNDED
        assert dependent_usage(lambda _x: "x")(0) == UNBOUNDED

    def test_as_usage(self):
        assert as_usage(2)(None) == Exact(2)
        assert as_usage(Exact(1)).shape == UsageShape.constant(1)
        assert as_usage(UNBOUNDED).shape == UsageShape.unbounded()
        fn = lambda _x: Exact(1)
        assert as_usage(fn) is fn
        with pytest.raises(TypeError):
            as_usage("once")

    def test_usage_for_shape(self):
        u = usage_for_shape(UsageShape.conditional(2, 1))
        assert u(None) == Exact(2)


# ═══════════════════════════════════════════════════════════════════════════
# 3. Shape queries
# ═══════════════════════════════════════════════════════════════════════════

class TestShapeQueries:
    def test_plain_callable_is_data_dependent(self):
        assert shape_of(lambda _x: Exact(1)).kind == ShapeKind.DATA_DEPENDENT
        assert declared_bound(lambda _x: Exact(1)) == UNBOUNDED

    def test_declared_bound(self):
        assert declared_bound(constant_usage(5)) == Exact(5)

    def test_compose_constants(self):
        assert compose_shapes(UsageShape.constant(2), UsageShape.constant(3)) == UsageShape.constant(6)

    def test_compose_constant_into_unbounded(self):
        assert compose_shapes(UsageShape.constant(1), UsageShape.unbounded()) == UsageShape.unbounded()

    def test_compose_zero_into_unbounded(self):
        assert compose_shapes(UsageShape.constant(0), UsageShape.unbounded()) == UsageShape.constant(0)

    def test_compose_conditional(self):
        assert compose_shapes(UsageShape.conditional(1, 0), UsageShape.constant(3)) == UsageShape.conditional(3, 0)

    def test_compose_conditional_collapses(self):
        assert compose_shapes(UsageShape.conditional(2, 1), UsageShape.constant(0)) == UsageShape.constant(0)

    def test_composition_factor(self):
        assert composition_factor(UsageShape.constant(3)) == Exact(3)
        assert composition_factor(UsageShape.conditional(1, 0)) == UNBOUNDED
        assert composition_factor(UsageShape.data_dependent()) == UNBOUNDED
        assert composition_factor(UsageShape.unbounded()) == UNBOUNDED

    def test_compose_into_conditional_is_unbounded(self):
        assert compose_shapes(UsageShape.constant(1), UsageShape.conditional(1, 0)) == UsageShape.unbounded()
        assert compose_shapes(UsageShape.constant(0), UsageShape.conditional(1, 0)) == UsageShape.constant(0)

    def test_compose_unbounded_upstream(self):
        assert compose_shapes(UsageShape.unbounded(), UsageShape.constant(1)) == UsageShape.unbounded()
        assert compose_shapes(UsageShape.unbounded(), UsageShape.constant(0)) == UsageShape.constant(0)

    def test_usage_is_callable_dataclass(self):
        u = Usage(fn=lambda _x: Exact(7), shape=UsageShape.constant(7))
        assert u(None) == Exact(7)
