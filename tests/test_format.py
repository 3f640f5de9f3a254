from datetime import timedelta

import pytest

from barkit.format import (
    BinaryBytes,
    DecimalBytes,
    FormattedDuration,
    HumanBytes,
    HumanCount,
    HumanDuration,
    HumanFloatCount,
)

MILLI = timedelta(milliseconds=1)
SECOND = timedelta(seconds=1)
MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)
YEAR = timedelta(days=365)

ALL_UNITS = [(YEAR, "y"), (WEEK, "w"), (DAY, "d"), (HOUR, "h"), (MINUTE, "m"), (SECOND, "s")]


@pytest.mark.parametrize("unit,alt", ALL_UNITS)
def test_human_duration_alternate(unit, alt):
    assert format(HumanDuration(2 * unit), "#") == f"2{alt}"
    assert f"{HumanDuration(2 * unit):#}" == f"2{alt}"


def test_human_duration_less_than_one_second():
    assert str(HumanDuration(timedelta(0))) == "0 seconds"
    assert str(HumanDuration(MILLI)) == "0 seconds"
    assert str(HumanDuration(499 * MILLI)) == "0 seconds"
    assert str(HumanDuration(500 * MILLI)) == "1 second"
    assert str(HumanDuration(999 * MILLI)) == "1 second"


def test_human_duration_less_than_two_seconds():
    assert str(HumanDuration(1499 * MILLI)) == "1 second"
    assert str(HumanDuration(1500 * MILLI)) == "2 seconds"
    assert str(HumanDuration(1999 * MILLI)) == "2 seconds"


def test_human_duration_one_unit():
    assert str(HumanDuration(SECOND)) == "1 second"
    assert str(HumanDuration(MINUTE)) == "60 seconds"
    assert str(HumanDuration(HOUR)) == "60 minutes"
    assert str(HumanDuration(DAY)) == "24 hours"
    assert str(HumanDuration(WEEK)) == "7 days"
    assert str(HumanDuration(YEAR)) == "52 weeks"


def test_human_duration_less_than_one_and_a_half_unit():
    assert str(HumanDuration(MINUTE + MINUTE / 2 - SECOND / 2 - MILLI)) == "89 seconds"
    assert str(HumanDuration(HOUR + HOUR / 2 - MINUTE / 2 - MILLI)) == "89 minutes"
    assert str(HumanDuration(DAY + DAY / 2 - HOUR / 2 - MILLI)) == "35 hours"
    assert str(HumanDuration(WEEK + WEEK / 2 - DAY / 2 - MILLI)) == "10 days"
    assert str(HumanDuration(YEAR + YEAR / 2 - WEEK / 2 - MILLI)) == "78 weeks"


def test_human_duration_one_and_a_half_unit():
    assert str(HumanDuration(MINUTE + MINUTE / 2 - SECOND / 2)) == "2 minutes"
    assert str(HumanDuration(HOUR + HOUR / 2 - MINUTE / 2)) == "2 hours"
    assert str(HumanDuration(DAY + DAY / 2 - HOUR / 2)) == "2 days"
    assert str(HumanDuration(WEEK + WEEK / 2 - DAY / 2)) == "2 weeks"
    assert str(HumanDuration(YEAR + YEAR / 2 - WEEK / 2)) == "2 years"


def test_human_duration_two_units():
    assert str(HumanDuration(2 * SECOND)) == "2 seconds"
    assert str(HumanDuration(2 * MINUTE)) == "2 minutes"
    assert str(HumanDuration(2 * HOUR)) == "2 hours"
    assert str(HumanDuration(2 * DAY)) == "2 days"
    assert str(HumanDuration(2 * WEEK)) == "2 weeks"
    assert str(HumanDuration(2 * YEAR)) == "2 years"


def test_human_duration_less_than_two_and_a_half_units():
    assert str(HumanDuration(2 * SECOND + SECOND / 2 - MILLI)) == "2 seconds"
    assert str(HumanDuration(2 * MINUTE + MINUTE / 2 - MILLI)) == "2 minutes"
    assert str(HumanDuration(2 * HOUR + HOUR / 2 - MILLI)) == "2 hours"
    assert str(HumanDuration(2 * DAY + DAY / 2 - MILLI)) == "2 days"
    assert str(HumanDuration(2 * WEEK + WEEK / 2 - MILLI)) == "2 weeks"
    assert str(HumanDuration(2 * YEAR + YEAR / 2 - MILLI)) == "2 years"


def test_human_duration_two_and_a_half_units():
    assert str(HumanDuration(2 * SECOND + SECOND / 2)) == "3 seconds"
    assert str(HumanDuration(2 * MINUTE + MINUTE / 2)) == "3 minutes"
    assert str(HumanDuration(2 * HOUR + HOUR / 2)) == "3 hours"
    assert str(HumanDuration(2 * DAY + DAY / 2)) == "3 days"
    assert str(HumanDuration(2 * WEEK + WEEK / 2)) == "3 weeks"
    assert str(HumanDuration(2 * YEAR + YEAR / 2)) == "3 years"


def test_human_duration_three_units():
    assert str(HumanDuration(3 * SECOND)) == "3 seconds"
    assert str(HumanDuration(3 * MINUTE)) == "3 minutes"
    assert str(HumanDuration(3 * HOUR)) == "3 hours"
    assert str(HumanDuration(3 * DAY)) == "3 days"
    assert str(HumanDuration(3 * WEEK)) == "3 weeks"
    assert str(HumanDuration(3 * YEAR)) == "3 years"


def test_human_duration_accepts_seconds_and_width_spec():
    assert str(HumanDuration(8)) == "8 seconds"
    assert f"{HumanDuration(8):>12}" == "   8 seconds"


def test_human_duration_rejects_negative():
    with pytest.raises(ValueError):
        HumanDuration(timedelta(seconds=-1))


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3661, "01:01:01"),
        (86399, "23:59:59"),
        (90061, "1d 01:01:01"),
    ],
)
def test_formatted_duration(seconds, expected):
    assert str(FormattedDuration(timedelta(seconds=seconds))) == expected


def test_formatted_duration_truncates_fraction():
    assert str(FormattedDuration(timedelta(seconds=59, milliseconds=999))) == "00:00:59"


@pytest.mark.parametrize("cls", [HumanBytes, BinaryBytes])
@pytest.mark.parametrize(
    "value,expected",
    [
        (15, "15 B"),
        (1_500, "1.46 KiB"),
        (1_500_000, "1.43 MiB"),
        (1_500_000_000, "1.40 GiB"),
        (1_500_000_000_000, "1.36 TiB"),
        (1_500_000_000_000_000, "1.33 PiB"),
        (3 * 1024 * 1024, "3.00 MiB"),
    ],
)
def test_binary_bytes(cls, value, expected):
    assert str(cls(value)) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (15, "15 B"),
        (1_500, "1.50 kB"),
        (1_500_000, "1.50 MB"),
        (1_500_000_000, "1.50 GB"),
        (1_500_000_000_000, "1.50 TB"),
        (1_500_000_000_000_000, "1.50 PB"),
    ],
)
def test_decimal_bytes(value, expected):
    assert str(DecimalBytes(value)) == expected


def test_bytes_reject_negative():
    with pytest.raises(ValueError):
        HumanBytes(-1)


@pytest.mark.parametrize(
    "value,expected",
    [
        (42, "42"),
        (7654, "7,654"),
        (12345, "12,345"),
        (1234567890, "1,234,567,890"),
        (33857009, "33,857,009"),
    ],
)
def test_human_count(value, expected):
    assert str(HumanCount(value)) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (42.0, "42"),
        (7654.0, "7,654"),
        (12345.0, "12,345"),
        (1234567890.0, "1,234,567,890"),
        (42.5, "42.5"),
        (42.500012345, "42.5"),
        (42.502012345, "42.502"),
        (7654.321, "7,654.321"),
        (7654.3210123456, "7,654.321"),
        (12345.6789, "12,345.6789"),
        (1234567890.1234567, "1,234,567,890.1235"),
        (1234567890.1234321, "1,234,567,890.1234"),
        (33857009.123456, "33,857,009.1235"),
    ],
)
def test_human_float_count(value, expected):
    assert str(HumanFloatCount(value)) == expected