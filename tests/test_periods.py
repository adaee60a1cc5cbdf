"""
Tests for month keys and month navigation.
"""

from datetime import date

import pytest

from pocket_ledger.ledger.periods import (
    day_key_for,
    format_month_display,
    is_future_month,
    month_key,
    month_key_for,
    next_month_key,
    parse_month_key,
    previous_month_key,
)


class TestKeys:
    def test_month_and_day_keys(self):
        assert month_key_for(date(2024, 3, 5)) == "2024_03"
        assert day_key_for(date(2024, 3, 5)) == "05"
        assert month_key(2024, 12) == "2024_12"

    @pytest.mark.parametrize("key", ["2024-03", "2024_3", "24_03", "2024_13", "abcd_ef", ""])
    def test_parse_rejects_malformed(self, key):
        with pytest.raises(ValueError):
            parse_month_key(key)

    def test_parse_gives_days_in_month(self):
        assert parse_month_key("2024_02").days == 29
        assert parse_month_key("2023_02").days == 28


class TestNavigation:
    def test_previous_crosses_year(self):
        assert previous_month_key("2024_01") == "2023_12"

    def test_next_crosses_year(self):
        assert next_month_key("2023_12") == "2024_01"

    def test_future_month(self):
        today = date(2024, 3, 15)
        assert is_future_month("2024_04", today=today)
        assert not is_future_month("2024_03", today=today)
        assert not is_future_month("2023_12", today=today)

    def test_display(self):
        assert format_month_display("2024_03") == "March 2024"
