from datetime import date, datetime, timedelta, timezone

from hrms.common.datetime_utils import (
    business_tz,
    day_range,
    format_clock,
    format_hours,
    hours_between,
    local_date,
    month_range,
    working_days_in_month,
)

UTC = timezone.utc


def test_day_range_after_local_midnight_belongs_to_next_day():
    start, end = day_range(datetime(2024, 3, 10, 20, 30, tzinfo=UTC))

    assert start == datetime(2024, 3, 10, 19, 0, tzinfo=UTC)
    assert end == datetime(2024, 3, 11, 19, 0, tzinfo=UTC)


def test_day_range_just_before_local_midnight():
    start, end = day_range(datetime(2024, 3, 10, 18, 59, 59, tzinfo=UTC))

    assert start == datetime(2024, 3, 9, 19, 0, tzinfo=UTC)
    assert end - start == timedelta(hours=24)


def test_exact_local_midnight_opens_the_new_day():
    start, end = day_range(datetime(2024, 1, 15, 19, 0, 0, tzinfo=UTC))

    assert start == datetime(2024, 1, 15, 19, 0, tzinfo=UTC)
    assert end == datetime(2024, 1, 16, 19, 0, tzinfo=UTC)


def test_evening_utc_instant_maps_to_next_business_day():
    instant = datetime(2024, 1, 15, 20, 5, 0, tzinfo=UTC)
    start, end = day_range(instant)

    assert start == datetime(2024, 1, 15, 19, 0, tzinfo=UTC)
    assert end == datetime(2024, 1, 16, 19, 0, tzinfo=UTC)
    assert local_date(instant) == date(2024, 1, 16)


def test_naive_instants_are_treated_as_utc():
    assert day_range(datetime(2024, 3, 10, 20, 30)) == day_range(datetime(2024, 3, 10, 20, 30, tzinfo=UTC))


def test_local_date_and_clock_use_business_offset():
    instant = datetime(2024, 3, 10, 20, 30, tzinfo=UTC)

    assert local_date(instant) == date(2024, 3, 11)
    assert format_clock(instant) == "01:30 AM"
    assert local_date(instant, business_tz(0)) == date(2024, 3, 10)


def test_month_range_spans_local_month():
    start, end = month_range(2, 2024)

    assert start == datetime(2024, 1, 31, 19, 0, tzinfo=UTC)
    assert end == datetime(2024, 2, 29, 19, 0, tzinfo=UTC)


def test_december_month_range_rolls_into_next_year():
    _, end = month_range(12, 2024)
    assert end == datetime(2024, 12, 31, 19, 0, tzinfo=UTC)


def test_working_days_counts_monday_to_friday():
    assert working_days_in_month(2, 2024) == 21
    assert working_days_in_month(6, 2024) == 20


def test_hours_between_rounds_half_up_from_milliseconds():
    t0 = datetime(2024, 3, 11, 4, 0, tzinfo=UTC)

    assert hours_between(t0, t0 + timedelta(seconds=61)) == 0.02
    assert hours_between(t0, t0 + timedelta(hours=4, minutes=30)) == 4.5
    # 18 seconds = 0.005h exactly, rounds up
    assert hours_between(t0, t0 + timedelta(seconds=18)) == 0.01


def test_format_hours():
    assert format_hours(4.5) == "4h 30m"
    assert format_hours(0) == "0h 0m"
    assert format_hours(None) == "0h 0m"
