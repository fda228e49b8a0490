from datetime import date, datetime

import pytest

from jakmyeong.astro_calendar import (
    apply_lmt, julian_day_number, lmt_correction, parse_birth_date, parse_birth_time, solar_time,
)
from jakmyeong.errors import InvalidInputError


def test_parse_birth_date():
    assert parse_birth_date("1990-03-15") == date(1990, 3, 15)
    assert parse_birth_date(datetime(1990, 3, 15, 10, 30)) == date(1990, 3, 15)
    assert parse_birth_date(date(2000, 2, 29)) == date(2000, 2, 29)


@pytest.mark.parametrize("value", ["1990-02-30", "1990-3", "15.03.1990", "", 19900315])
def test_parse_birth_date_rejects(value):
    with pytest.raises(InvalidInputError):
        parse_birth_date(value)


@pytest.mark.parametrize("value, expected", [
    ("9", (9, 0)),
    ("10:30", (10, 30)),
    (" 23:59 ", (23, 59)),
    ("0:05", (0, 5)),
])
def test_parse_birth_time(value, expected):
    assert parse_birth_time(value) == expected


@pytest.mark.parametrize("value", ["24:00", "10:60", "ten", "10:30:00", ""])
def test_parse_birth_time_rejects(value):
    with pytest.raises(InvalidInputError):
        parse_birth_time(value)


def test_julian_day_number():
    assert julian_day_number(date(1900, 1, 1)) == 2415021
    assert julian_day_number(date(2000, 1, 1)) == 2451545
    assert julian_day_number(date(1990, 3, 15)) == 2447966


def test_lmt_correction_seoul():
    assert lmt_correction(126.98) == pytest.approx(-32.08)
    assert lmt_correction(135.0) == 0.0


def test_apply_lmt():
    corrected = apply_lmt(datetime(1990, 3, 15, 10, 0), 120.0)
    assert (corrected.hour, corrected.minute) == (9, 0)


def test_solar_time_seoul():
    result = solar_time(date(1990, 3, 15), 10, 0, 37.5665, 126.9780)
    assert result["timezone"] == "Asia/Seoul"
    assert result["dst_detected"] is False
    assert (result["hour"], result["minute"]) == (9, 27)
    assert result["correction_minutes"] == pytest.approx(-32.1)
