"""Unit tests for Interval.

Tests cover:
- Inclusive contains vs. strict surrounds at the bounds
- Clamp saturation
- Size, including the empty and universe intervals
"""

import math

import pytest
import taichi as ti


class TestIntervalMembership:
    """Tests for interval_contains and interval_surrounds."""

    def test_bounds_are_contained_but_not_surrounded(self):
        """contains() accepts the bounds, surrounds() rejects them."""
        from src.pathtrace.core.interval import (
            Interval,
            interval_contains,
            interval_surrounds,
        )

        results = ti.field(dtype=ti.i32, shape=6)

        @ti.kernel
        def test_kernel():
            iv = Interval(lo=0.0, hi=1.0)
            results[0] = interval_contains(iv, 0.0)
            results[1] = interval_contains(iv, 1.0)
            results[2] = interval_surrounds(iv, 0.0)
            results[3] = interval_surrounds(iv, 1.0)
            results[4] = interval_surrounds(iv, 0.5)
            results[5] = interval_contains(iv, 1.5)

        test_kernel()
        assert results[0] == 1
        assert results[1] == 1
        assert results[2] == 0
        assert results[3] == 0
        assert results[4] == 1
        assert results[5] == 0

    def test_empty_interval_contains_nothing(self):
        """An interval with hi < lo rejects every value."""
        from src.pathtrace.core.interval import EMPTY, interval_contains, make_interval

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            iv = make_interval(EMPTY[0], EMPTY[1])
            result[None] = interval_contains(iv, 0.0)

        test_kernel()
        assert result[None] == 0

    def test_universe_surrounds_large_values(self):
        """The universe interval surrounds any finite value."""
        from src.pathtrace.core.interval import UNIVERSE, interval_surrounds, make_interval

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            iv = make_interval(UNIVERSE[0], UNIVERSE[1])
            result[None] = interval_surrounds(iv, -1.0e30) and interval_surrounds(iv, 1.0e30)

        test_kernel()
        assert result[None] == 1


class TestIntervalClamp:
    """Tests for interval_clamp and interval_size."""

    def test_clamp(self):
        """Values outside the interval saturate to the nearest bound."""
        from src.pathtrace.core.interval import Interval, interval_clamp

        results = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            iv = Interval(lo=0.0, hi=0.999)
            results[0] = interval_clamp(iv, -2.0)
            results[1] = interval_clamp(iv, 0.25)
            results[2] = interval_clamp(iv, 5.0)

        test_kernel()
        assert abs(results[0] - 0.0) < 1e-7
        assert abs(results[1] - 0.25) < 1e-7
        assert abs(results[2] - 0.999) < 1e-7

    def test_size(self):
        """Size is hi - lo."""
        from src.pathtrace.core.interval import Interval, interval_size

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = interval_size(Interval(lo=-1.5, hi=2.0))

        test_kernel()
        assert abs(result[None] - 3.5) < 1e-6

    def test_python_bounds(self):
        """The Python-side empty and universe bounds."""
        from src.pathtrace.core.interval import EMPTY, UNIVERSE

        assert EMPTY == (math.inf, -math.inf)
        assert UNIVERSE == (-math.inf, math.inf)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
