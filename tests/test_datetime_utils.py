"""Tests for datetime parsing and display in the configured timezone."""

from datetime import datetime

import pytest
import pytz

from calendar_agent.utils.datetime_utils import format_display_datetime, parse_iso_datetime

BUDAPEST = pytz.timezone("Europe/Budapest")


def test_naive_time_is_read_in_configured_timezone():
    naive = parse_iso_datetime("2024-01-01T10:00:00", BUDAPEST)
    with_offset = parse_iso_datetime("2024-01-01T10:00:00+01:00", BUDAPEST)

    assert naive == with_offset == datetime(2024, 1, 1, 9, 0)


def test_naive_time_follows_daylight_saving():
    assert parse_iso_datetime("2024-07-01T10:00:00", BUDAPEST) == datetime(2024, 7, 1, 8, 0)


def test_explicit_offsets_ignore_configured_timezone():
    assert parse_iso_datetime("2024-01-01T10:00:00Z", BUDAPEST) == datetime(2024, 1, 1, 10, 0)
    assert parse_iso_datetime("2024-01-01T10:00:00-05:00", BUDAPEST) == datetime(2024, 1, 1, 15, 0)


def test_naive_time_defaults_to_utc():
    assert parse_iso_datetime("2024-01-01T10:00:00", pytz.UTC) == datetime(2024, 1, 1, 10, 0)


def test_stored_times_are_displayed_in_configured_timezone():
    assert format_display_datetime(datetime(2024, 1, 1, 9, 0), BUDAPEST) == "2024-01-01 10:00"
    assert format_display_datetime(datetime(2024, 1, 1, 9, 0), pytz.UTC) == "2024-01-01 09:00"
    assert format_display_datetime(None, BUDAPEST) == ""


@pytest.mark.parametrize("value", ["tomorrow", "", None, "2024-13-01T10:00:00"])
def test_invalid_values_are_rejected(value):
    with pytest.raises(ValueError):
        parse_iso_datetime(value, BUDAPEST)
