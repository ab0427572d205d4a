"""Tests for night counting and server-side total verification."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from globalstay.exceptions import PriceMismatchError
from globalstay.services.pricing import count_nights, ensure_total_matches, expected_total, verify_total


class TestCountNights:
    def test_whole_days(self):
        assert count_nights(date(2030, 5, 1), date(2030, 5, 4)) == 3

    def test_partial_day_rounds_up(self):
        check_in = datetime(2030, 5, 1, 15, tzinfo=timezone.utc)
        check_out = datetime(2030, 5, 3, 11, tzinfo=timezone.utc)
        assert count_nights(check_in, check_out) == 2

    def test_across_month_end(self):
        assert count_nights(date(2030, 1, 30), date(2030, 2, 2)) == 3


class TestExpectedTotal:
    def test_price_times_nights(self):
        assert expected_total(Decimal("100.00"), date(2030, 5, 1), date(2030, 5, 4)) == Decimal("300.00")

    def test_fractional_price_is_exact(self):
        assert expected_total(Decimal("48.50"), date(2030, 5, 1), date(2030, 5, 4)) == Decimal("145.50")

    def test_float_price_uses_shortest_repr(self):
        assert expected_total(0.1, date(2030, 5, 1), date(2030, 5, 4)) == Decimal("0.3")


class TestVerifyTotal:
    def test_equal_amounts_with_different_scale_match(self):
        assert verify_total(Decimal("300"), Decimal("300.00"))
        assert verify_total(300.0, Decimal("300.00"))
        assert verify_total("300.00", Decimal("300.00"))

    def test_one_cent_off_fails(self):
        assert not verify_total(Decimal("299.99"), Decimal("300.00"))

    def test_ensure_total_matches_raises(self):
        with pytest.raises(PriceMismatchError) as exc_info:
            ensure_total_matches(Decimal("250"), Decimal("300.00"))
        assert exc_info.value.message == "Price mismatch. Please try again."
        assert exc_info.value.status_code == 400

    def test_ensure_total_matches_passes(self):
        ensure_total_matches(Decimal("300.00"), Decimal("300"))
