"""
Video library and recap data models.

This module defines Pydantic models for the video diary: daily clips, recap
periods (ISO weeks and calendar months), generated recaps, directory scans and
the recap generation configuration.
"""

import calendar
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Literal, Union, Tuple, Set

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from typing_extensions import Annotated

from ...config import Config
from ..exceptions.recap_exceptions import ConfigurationError


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class RecapKind(str, Enum):
    """Kind of recap period."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class WeekPeriod(BaseModel):
    """An ISO-8601 week (Monday start, first-Thursday rule)."""

    model_config = {"frozen": True}

    kind: Literal["weekly"] = "weekly"
    iso_year: int = Field(ge=1, le=9999, description="ISO week-numbering year")
    iso_week: int = Field(ge=1, le=53, description="ISO week number")

    @model_validator(mode="after")
    def validate_week_exists(self):
        """Week 53 only exists in long ISO years."""
        try:
            date.fromisocalendar(self.iso_year, self.iso_week, 1)
        except ValueError:
            raise ValueError(f"ISO year {self.iso_year} has no week {self.iso_week}")
        return self

    @property
    def token(self) -> str:
        return f"{self.iso_year:04d}-W{self.iso_week:02d}"

    @property
    def start_date(self) -> date:
        return date.fromisocalendar(self.iso_year, self.iso_week, 1)

    @property
    def end_date(self) -> date:
        return date.fromisocalendar(self.iso_year, self.iso_week, 7)

    @property
    def title(self) -> str:
        return f"Week {self.iso_week}, {self.iso_year}"

    def __str__(self) -> str:
        return self.token


class MonthPeriod(BaseModel):
    """A calendar month."""

    model_config = {"frozen": True}

    kind: Literal["monthly"] = "monthly"
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)

    @property
    def token(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end_date(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def __str__(self) -> str:
        return self.token


RecapPeriod = Annotated[Union[WeekPeriod, MonthPeriod], Field(discriminator="kind")]


def to_local_naive(moment: datetime) -> datetime:
    """Express an aware datetime as naive local wall-clock time; naive input is returned as is."""
    if moment.tzinfo is not None and moment.utcoffset() is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def period_recency_key(period: Union[WeekPeriod, MonthPeriod]) -> Tuple[date, date, str]:
    """Sort key ordering periods by how recently they ended."""
    return (period.end_date, period.start_date, period.kind)


class DailyClip(BaseModel):
    """One user recording, identified by its file path."""

    model_config = {"frozen": True}

    path: Path = Field(description="Location of the clip inside the storage directory")
    captured_at: datetime = Field(description="Local capture time embedded in the filename")
    thumbnail_path: Optional[Path] = Field(None, description="Reserved; thumbnails are not generated")

    @field_validator('captured_at')
    @classmethod
    def normalize_captured_at(cls, v: datetime) -> datetime:
        return to_local_naive(v)

    @property
    def id(self) -> str:
        """Surrogate id for list diffing; filenames are unique within the directory."""
        return self.path.name

    @property
    def day(self) -> date:
        return self.captured_at.date()


class Recap(BaseModel):
    """A generated weekly or monthly highlight video."""

    period: RecapPeriod
    path: Path = Field(description="Canonical output path derived from the period")
    source_clips: List[Path] = Field(default_factory=list, description="Clips concatenated, in order")
    skipped_clips: List[str] = Field(default_factory=list, description="Clips left out because they were unreadable")
    duration_seconds: Optional[float] = Field(None, ge=0.0)
    generated_at: Optional[datetime] = None

    @property
    def id(self) -> str:
        return self.path.name

    @property
    def kind(self) -> RecapKind:
        return RecapKind(self.period.kind)

    @property
    def title(self) -> str:
        return f"Recap {self.period.title}"


class RecapSidecar(BaseModel):
    """Audit record stored next to a recap file."""
    period: str = Field(description="Period token, e.g. 2024-W11 or 2024-02")
    generated_at: Optional[datetime] = None
    source_clips: List[str] = Field(default_factory=list, description="Clip filenames in concatenation order")
    skipped_clips: List[str] = Field(default_factory=list)
    duration_seconds: Optional[float] = None

    @classmethod
    def from_recap(cls, recap: "Recap") -> "RecapSidecar":
        return cls(
            period=recap.period.token,
            generated_at=recap.generated_at,
            source_clips=[clip.name for clip in recap.source_clips],
            skipped_clips=list(recap.skipped_clips),
            duration_seconds=recap.duration_seconds
        )


class LibraryScan(BaseModel):
    """Result of one full scan of the storage directory."""

    directory: Path
    clips: List[DailyClip] = Field(default_factory=list, description="Newest first")
    recaps: List[Recap] = Field(default_factory=list, description="Most recent period first")
    skipped_entries: List[str] = Field(default_factory=list, description="Names that did not classify")
    storage_error: Optional[str] = Field(None, description="Set when the directory could not be read")
    scanned_at: datetime = Field(default_factory=datetime.now)

    @property
    def storage_available(self) -> bool:
        return self.storage_error is None

    @property
    def recap_periods(self) -> Set[Union[WeekPeriod, MonthPeriod]]:
        return {recap.period for recap in self.recaps}

    def recaps_of_kind(self, kind: RecapKind) -> List[Recap]:
        return [recap for recap in self.recaps if recap.kind == kind]


class LibraryOverview(BaseModel):
    """What the library view shows for one displayed month."""
    displayed_month: MonthPeriod
    clips: List[DailyClip] = Field(default_factory=list, description="Clips of the displayed month, newest first")
    weekly_recap: Optional[Recap] = None
    monthly_recap: Optional[Recap] = None
    has_recorded_today: bool = False
    storage_error: Optional[str] = None


# Settings RecapConfiguration.from_config reads from Config properties of the same name
CONFIG_FIELDS = (
    "min_clips_for_recap", "weekly_trigger_weekday", "monthly_trigger_day", "write_sidecar",
    "ffmpeg_binary", "ffprobe_binary", "video_codec", "audio_codec", "ffmpeg_preset", "crf",
    "output_width", "output_height", "frame_rate", "audio_bitrate", "audio_sample_rate",
    "probe_timeout_seconds", "export_timeout_seconds",
)


class RecapConfiguration(BaseModel):
    """Configuration settings for recap generation."""

    min_clips_for_recap: int = Field(default=2, ge=1, description="Minimum clips a period needs for a recap")
    weekly_trigger_weekday: Optional[int] = Field(None, ge=0, le=6, description="Weekday (0=Monday) weekly recaps may run on")
    monthly_trigger_day: Optional[int] = Field(None, ge=1, le=28, description="Day of month monthly recaps may run on")
    write_sidecar: bool = Field(default=True, description="Store an audit sidecar next to each recap")
    ffmpeg_binary: str = Field(default="ffmpeg")
    ffprobe_binary: str = Field(default="ffprobe")
    video_codec: str = Field(default="libx264", description="Video codec for output")
    audio_codec: str = Field(default="aac", description="Audio codec for output")
    ffmpeg_preset: str = Field(default="medium", description="FFmpeg encoding preset")
    crf: int = Field(default=23, ge=0, le=51)
    output_width: int = Field(default=1080, ge=16)
    output_height: int = Field(default=1920, ge=16)
    frame_rate: int = Field(default=30, ge=1, le=120)
    audio_bitrate: str = Field(default="192k")
    audio_sample_rate: int = Field(default=44100, ge=8000)
    probe_timeout_seconds: float = Field(default=30.0, gt=0)
    export_timeout_seconds: float = Field(default=1200.0, gt=0)

    @field_validator('output_width', 'output_height')
    @classmethod
    def validate_even_dimension(cls, v):
        """yuv420p output needs even frame dimensions."""
        if v % 2:
            raise ValueError('Output dimensions must be even')
        return v

    @classmethod
    def from_config(cls, cfg: Config) -> "RecapConfiguration":
        """Build the configuration from config.ini values."""
        values = {}
        for name in CONFIG_FIELDS:
            try:
                values[name] = getattr(cfg, name)
            except ValueError as e:
                raise ConfigurationError(str(e), parameter_name=name)

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            raise ConfigurationError(
                first["msg"],
                parameter_name=".".join(str(part) for part in first["loc"]) or None,
                parameter_value=first.get("input")
            )
