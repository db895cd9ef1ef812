#!/usr/bin/env python3
"""
Tests for the clip and recap filename codec.
"""

from datetime import date, datetime, timedelta

import pytest

from diary_recap.recap_generator.exceptions.recap_exceptions import ParseError
from diary_recap.recap_generator.models.recap_models import MonthPeriod, WeekPeriod
from diary_recap.recap_generator.utils.filename_codec import (
    VIDEO_EXTENSION, FileKind, classify_filename, decode_clip_name, decode_recap_name,
    encode_clip_name, encode_recap_name, is_recap_filename
)


def test_clip_name_format():
    """Clip names use fixed numeric formatting and drop sub-second precision."""
    name = encode_clip_name(datetime(2024, 3, 15, 20, 5, 33, 987654))
    assert name == "2024-03-15_20-05-33.mp4"
    assert decode_clip_name(name) == datetime(2024, 3, 15, 20, 5, 33)


def test_clip_name_round_trip_at_second_precision():
    for name in ["2024-03-15_20-05-33.mp4", "2000-01-01_00-00-00.mp4", "2024-02-29_23-59-59.mp4"]:
        assert encode_clip_name(decode_clip_name(name)) == name


def test_clip_names_sort_chronologically():
    """Lexicographic order of clip names matches capture order."""
    start = datetime(2023, 12, 30, 9, 0, 0)
    moments = [start + timedelta(hours=7 * i, seconds=i) for i in range(40)]
    names = [encode_clip_name(m) for m in moments]
    assert sorted(names) == names


@pytest.mark.parametrize("name", [
    "2024-13-01_10-00-00.mp4",   # month 13
    "2024-02-30_10-00-00.mp4",   # Feb 30
    "2023-02-29_10-00-00.mp4",   # not a leap year
    "2024-03-15_24-00-00.mp4",   # hour 24
    "2024-03-15_20-60-00.mp4",   # minute 60
    "2024-03-15_20-05-3.mp4",    # short field
    "2024-03-15 20-05-33.mp4",   # wrong separator
    "2024-03-15_20-05-33.mov",   # wrong extension
    "2024-03-15_20-05-33.mp4.tmp",
    "x2024-03-15_20-05-33.mp4",
    "0000-01-01_00-00-00.mp4",
    "recap_week_2024-W11.mp4",
])
def test_decode_clip_name_rejects_invalid_names(name):
    with pytest.raises(ParseError):
        decode_clip_name(name)


def test_decode_clip_name_rejects_non_ascii_digits():
    with pytest.raises(ParseError):
        decode_clip_name("٢٠٢٤-03-15_20-05-33.mp4")


def test_recap_names():
    assert encode_recap_name(WeekPeriod(iso_year=2024, iso_week=11)) == "recap_week_2024-W11.mp4"
    assert encode_recap_name(WeekPeriod(iso_year=2020, iso_week=53)) == "recap_week_2020-W53.mp4"
    assert encode_recap_name(MonthPeriod(year=2024, month=2)) == "recap_month_2024-02.mp4"


def test_recap_name_round_trip():
    periods = [WeekPeriod(iso_year=2024, iso_week=w) for w in range(1, 53)]
    periods += [MonthPeriod(year=2023, month=m) for m in range(1, 13)]
    names = [encode_recap_name(p) for p in periods]
    assert len(set(names)) == len(periods), "recap names must be unique per period"
    for period, name in zip(periods, names):
        assert decode_recap_name(name) == period


@pytest.mark.parametrize("name", [
    "recap_week_2023-W53.mp4",   # 2023 has 52 ISO weeks
    "recap_week_2024-W00.mp4",
    "recap_week_2024-W54.mp4",
    "recap_month_2024-00.mp4",
    "recap_month_2024-13.mp4",
    "recap_week_2024-11.mp4",
    "recap_2024-W11.mp4",
    "2024-03-15_20-05-33.mp4",
])
def test_decode_recap_name_rejects_invalid_names(name):
    with pytest.raises(ParseError):
        decode_recap_name(name)


def test_classification_is_disjoint():
    """Every generated name matches exactly its own pattern."""
    day = date(2019, 12, 20)
    clip_names = [encode_clip_name(datetime.combine(day + timedelta(days=i), datetime.min.time())
                                   + timedelta(seconds=3607 * i)) for i in range(800)]
    week_names = [encode_recap_name(WeekPeriod(iso_year=y, iso_week=w))
                  for y in (2020, 2021) for w in range(1, 53)]
    month_names = [encode_recap_name(MonthPeriod(year=y, month=m)) for y in (2020, 2021) for m in range(1, 13)]

    assert {classify_filename(n) for n in clip_names} == {FileKind.CLIP}
    assert {classify_filename(n) for n in week_names} == {FileKind.WEEKLY_RECAP}
    assert {classify_filename(n) for n in month_names} == {FileKind.MONTHLY_RECAP}


def test_classify_unrelated_names():
    for name in ["notes.txt", ".DS_Store", "recap_year_2024.mp4", "IMG_0001.mp4", "2024-03-15.mp4"]:
        assert classify_filename(name) == FileKind.UNRELATED, name


def test_classification_is_shape_only():
    """Impossible dates still classify as clips; decoding is what rejects them."""
    assert classify_filename("2024-13-45_99-99-99.mp4") == FileKind.CLIP


def test_is_recap_filename():
    assert is_recap_filename("recap_week_2024-W11.mp4")
    assert is_recap_filename("recap_month_2024-13.mp4")
    assert not is_recap_filename("2024-03-15_20-05-33.mp4")
    assert VIDEO_EXTENSION == ".mp4"
