"""Tests for the injectable clock."""

from datetime import date, datetime

import pytest

from folio.core.clock import Clock, FixedClock, SystemClock


class TestClock:
    def test_base_clock_is_abstract(self):
        with pytest.raises(TypeError):
            Clock()

    def test_fixed_clock_is_frozen(self, fixed_clock: FixedClock):
        assert fixed_clock.now() == datetime(2026, 3, 2, 9, 0, 0)
        assert fixed_clock.today() == date(2026, 3, 2)

    def test_fixed_clock_advance(self, fixed_clock: FixedClock):
        fixed_clock.advance(3)
        assert fixed_clock.today() == date(2026, 3, 5)

    def test_system_clock_drops_microseconds(self):
        assert SystemClock().now().microsecond == 0
