"""Tests for multiplicity arithmetic and ordering."""

import pytest

from streambound.core.multiplicity import (
    Exact, Unbounded, ZERO, ONE, UNBOUNDED,
    add, mul, maximum, minimum, product, leq, lt, is_finite,
    parse_multiplicity, format_multiplicity,
)


SAMPLES = [Exact(0), Exact(1), Exact(3), Exact(10), UNBOUNDED]


# ═══════════════════════════════════════════════════════════════════════════
# 1. Values
# ═══════════════════════════════════════════════════════════════════════════

class TestValues:
    def test_exact_holds_count(self):
        assert Exact(4).n == 4
        assert str(Exact(4)) == "4"

    def test_unbounded_is_singleton_by_value(self):
        assert Unbounded() == UNBOUNDED
        assert str(UNBOUNDED) == "∞"

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Exact(-1)

    def test_non_int_rejected(self):
        with pytest.raises(ValueError, match="int"):
            Exact(1.5)
        with pytest.raises(ValueError, match="int"):
            Exact(True)

    def test_is_finite(self):
        assert is_finite(Exact(0))
        assert not is_finite(UNBOUNDED)


# ═══════════════════════════════════════════════════════════════════════════
# 2. Arithmetic
# ═══════════════════════════════════════════════════════════════════════════

class TestArithmetic:
    def test_add_exact(self):
        assert add(Exact(2), Exact(3)) == Exact(5)

    def test_add_unbounded_absorbs(self):
        assert add(Exact(2), UNBOUNDED) == UNBOUNDED
        assert add(UNBOUNDED, Exact(0)) == UNBOUNDED

    def test_mul_exact(self):
        assert mul(Exact(2), Exact(3)) == Exact(6)

    def test_mul_unbounded_absorbs_nonzero(self):
        for a in (Exact(1), Exact(7), UNBOUNDED):
            assert mul(a, UNBOUNDED) == UNBOUNDED
            assert mul(UNBOUNDED, a) == UNBOUNDED

    def test_zero_times_unbounded_is_zero(self):
        """Regression: zero upstream runs means zero downstream runs."""
        assert mul(ZERO, UNBOUNDED) == ZERO
        assert mul(UNBOUNDED, ZERO) == ZERO

    def test_mul_identity(self):
        for m in SAMPLES:
            assert mul(ONE, m) == m
            assert mul(m, ONE) == m

    def test_maximum_minimum(self):
        assert maximum(Exact(2), Exact(5)) == Exact(5)
        assert maximum(Exact(2), UNBOUNDED) == UNBOUNDED
        assert minimum(Exact(2), Exact(5)) == Exact(2)
        assert minimum(UNBOUNDED, Exact(5)) == Exact(5)
        assert minimum(UNBOUNDED, UNBOUNDED) == UNBOUNDED

    def test_product(self):
        assert product([]) == ONE
        assert product([Exact(2), Exact(3), Exact(4)]) == Exact(24)
        assert product([Exact(2), UNBOUNDED]) == UNBOUNDED
        assert product([UNBOUNDED, Exact(0), Exact(9)]) == ZERO


# ═══════════════════════════════════════════════════════════════════════════
# 3. Order
# ═══════════════════════════════════════════════════════════════════════════

class TestOrder:
    def test_reflexive(self):
        for m in SAMPLES:
            assert leq(m, m)
            assert not lt(m, m)

    def test_transitive(self):
        for a in SAMPLES:
            for b in SAMPLES:
                for c in SAMPLES:
                    if leq(a, b) and leq(b, c):
                        assert leq(a, c)

    def test_unbounded_is_top(self):
        for n in (0, 1, 1000):
            assert leq(Exact(n), UNBOUNDED)
            assert not leq(UNBOUNDED, Exact(n))

    def test_exact_order(self):
        assert leq(Exact(2), Exact(3))
        assert not leq(Exact(3), Exact(2))
        assert lt(Exact(2), Exact(3))


# ═══════════════════════════════════════════════════════════════════════════
# 4. JSON conversion
# ═══════════════════════════════════════════════════════════════════════════

class TestConversion:
    @pytest.mark.parametrize("raw", ["∞", "inf", "Infinity", " unbounded ", None])
    def test_parse_unbounded_markers(self, raw):
        assert parse_multiplicity(raw) == UNBOUNDED

    def test_parse_counts(self):
        assert parse_multiplicity(3) == Exact(3)
        assert parse_multiplicity("12") == Exact(12)
        assert parse_multiplicity(Exact(2)) == Exact(2)

    @pytest.mark.parametrize("raw", ["-1", "abc", 1.5, True, [1]])
    def test_parse_rejects_garbage(self, raw):
        with pytest.raises(ValueError):
            parse_multiplicity(raw)

    def test_format(self):
        assert format_multiplicity(Exact(3)) == 3
        assert format_multiplicity(UNBOUNDED) == "∞"
