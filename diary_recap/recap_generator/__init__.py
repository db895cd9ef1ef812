"""
Recap Generator Module

This module indexes the daily clips of a video diary and turns them into
weekly and monthly recap videos. It combines filename-based indexing, period
selection and an ffmpeg-backed composition engine.
"""

from .models.recap_models import (
    RecapKind,
    WeekPeriod,
    MonthPeriod,
    DailyClip,
    Recap,
    LibraryScan,
    RecapConfiguration
)

from .models.run_models import (
    RunState,
    SkipReason,
    NecessityDecision,
    RecapRunResult
)

from .exceptions.recap_exceptions import (
    RecapGenerationError,
    ParseError,
    StorageUnavailableError,
    OutputAlreadyExistsError,
    NoVideosForPeriodError,
    TooFewClipsError,
    ComposeError,
    NoValidClipsComposedError,
    VideoProcessingError,
    RecapDeletionForbiddenError
)

__all__ = [
    # Models
    "RecapKind",
    "WeekPeriod",
    "MonthPeriod",
    "DailyClip",
    "Recap",
    "LibraryScan",
    "RecapConfiguration",
    "RunState",
    "SkipReason",
    "NecessityDecision",
    "RecapRunResult",
    # Exceptions
    "RecapGenerationError",
    "ParseError",
    "StorageUnavailableError",
    "OutputAlreadyExistsError",
    "NoVideosForPeriodError",
    "TooFewClipsError",
    "ComposeError",
    "NoValidClipsComposedError",
    "VideoProcessingError",
    "RecapDeletionForbiddenError",
]
