"""
Filename codec for daily clips and recaps.

Daily clips:    YYYY-MM-DD_hh-mm-ss.mp4   (e.g. 2024-03-15_20-05-33.mp4)
Weekly recaps:  recap_week_YYYY-Www.mp4   (e.g. recap_week_2024-W11.mp4)
Monthly recaps: recap_month_YYYY-MM.mp4   (e.g. recap_month_2024-02.mp4)

Formatting is purely numeric, so lexicographic order of clip names equals
chronological order. A clip name starts with a digit and recap names start
with "recap_", so the three patterns can never match the same name.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Union

from pydantic import ValidationError

from ..exceptions.recap_exceptions import ParseError
from ..models.recap_models import WeekPeriod, MonthPeriod

VIDEO_EXTENSION = ".mp4"
RECAP_PREFIX = "recap_"

_EXT = re.escape(VIDEO_EXTENSION)
CLIP_PATTERN = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})_"
    r"(?P<hour>\d{2})-(?P<minute>\d{2})-(?P<second>\d{2})" + _EXT,
    re.ASCII
)
WEEKLY_RECAP_PATTERN = re.compile(r"recap_week_(?P<year>\d{4})-W(?P<week>\d{2})" + _EXT, re.ASCII)
MONTHLY_RECAP_PATTERN = re.compile(r"recap_month_(?P<year>\d{4})-(?P<month>\d{2})" + _EXT, re.ASCII)


class FileKind(str, Enum):
    """Shape classification of a directory entry."""
    CLIP = "clip"
    WEEKLY_RECAP = "weekly_recap"
    MONTHLY_RECAP = "monthly_recap"
    UNRELATED = "unrelated"


def encode_clip_name(captured_at: datetime) -> str:
    """Format a capture time as a clip filename. Sub-second precision is dropped."""
    return (
        f"{captured_at.year:04d}-{captured_at.month:02d}-{captured_at.day:02d}_"
        f"{captured_at.hour:02d}-{captured_at.minute:02d}-{captured_at.second:02d}"
        f"{VIDEO_EXTENSION}"
    )


def decode_clip_name(name: str) -> datetime:
    """
    Parse a clip filename into its naive local capture time.

    Args:
        name: Bare filename, e.g. ``2024-03-15_20-05-33.mp4``

    Returns:
        The capture timestamp

    Raises:
        ParseError: if the name deviates from the pattern or names an impossible date/time
    """
    match = CLIP_PATTERN.fullmatch(name)
    if not match:
        raise ParseError(name, "not a daily clip name")
    try:
        return datetime(*(int(match.group(g)) for g in ("year", "month", "day", "hour", "minute", "second")))
    except ValueError as e:
        raise ParseError(name, str(e))


def encode_recap_name(period: Union[WeekPeriod, MonthPeriod]) -> str:
    """Canonical recap filename for a period."""
    if isinstance(period, WeekPeriod):
        return f"{RECAP_PREFIX}week_{period.token}{VIDEO_EXTENSION}"
    if isinstance(period, MonthPeriod):
        return f"{RECAP_PREFIX}month_{period.token}{VIDEO_EXTENSION}"
    raise TypeError(f"Unsupported period type: {type(period).__name__}")


def decode_recap_name(name: str) -> Union[WeekPeriod, MonthPeriod]:
    """
    Parse a recap filename back into its period.

    Raises:
        ParseError: if the name is not a recap name or the period does not exist
    """
    try:
        match = WEEKLY_RECAP_PATTERN.fullmatch(name)
        if match:
            return WeekPeriod(iso_year=int(match.group("year")), iso_week=int(match.group("week")))
        match = MONTHLY_RECAP_PATTERN.fullmatch(name)
        if match:
            return MonthPeriod(year=int(match.group("year")), month=int(match.group("month")))
    except ValidationError as e:
        raise ParseError(name, f"invalid period ({e.error_count()} validation error(s))")
    raise ParseError(name, "not a recap name")


def classify_filename(name: str) -> FileKind:
    """Classify a filename by shape only; dates are not validated here."""
    if CLIP_PATTERN.fullmatch(name):
        return FileKind.CLIP
    if WEEKLY_RECAP_PATTERN.fullmatch(name):
        return FileKind.WEEKLY_RECAP
    if MONTHLY_RECAP_PATTERN.fullmatch(name):
        return FileKind.MONTHLY_RECAP
    return FileKind.UNRELATED


def is_recap_filename(name: str) -> bool:
    """True for anything named like a recap, valid period or not."""
    return name.startswith(RECAP_PREFIX) and name.endswith(VIDEO_EXTENSION)
