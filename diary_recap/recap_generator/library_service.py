"""
Library query service.

Read-side surface for the library view and the daily reminder: month
overviews, recap listings, "recorded today" checks and reminder timing.
"""

from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import List, Optional, Union

from ..utils.logger_utils import setup_logging
from .exceptions.recap_exceptions import ConfigurationError
from .models.recap_models import LibraryOverview, MonthPeriod, Recap, RecapConfiguration
from .necessity_policy import RecapNecessityPolicy
from .period_selector import month_of, shift_month, to_local_naive
from .video_library import VideoLibraryIndex

logger = setup_logging(__name__)


class VideoLibraryService:
    """Queries over the video library for UI and notification callers."""

    def __init__(self,
                 index: VideoLibraryIndex,
                 policy: Optional[RecapNecessityPolicy] = None,
                 reminder_hour: int = 20):
        if not 0 <= reminder_hour <= 23:
            raise ConfigurationError("reminder hour out of range", "reminder_hour", reminder_hour, (0, 23))
        self.index = index
        self.policy = policy or RecapNecessityPolicy(RecapConfiguration())
        self.reminder_hour = reminder_hour

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return to_local_naive(now) if now is not None else datetime.now()

    def get_month_overview(self,
                           displayed_month: Optional[Union[MonthPeriod, date]] = None,
                           now: Optional[datetime] = None) -> LibraryOverview:
        """
        Build the library view for one month.

        Args:
            displayed_month: Month whose clips are listed (defaults to the month of now)
            now: Reference moment for the recaps shown and the "today" flag

        Returns:
            LibraryOverview; storage_error is set and lists are empty if the directory is unreadable
        """
        now = self._now(now)
        if displayed_month is None:
            displayed_month = month_of(now)
        elif not isinstance(displayed_month, MonthPeriod):
            displayed_month = month_of(displayed_month)

        scan = self.index.scan()
        if not scan.storage_available:
            return LibraryOverview(displayed_month=displayed_month, storage_error=scan.storage_error)

        clips = [clip for clip in scan.clips if month_of(clip.captured_at) == displayed_month]
        by_period = {recap.period: recap for recap in scan.recaps}

        weekly_recap = None
        for period in self.policy.displayed_weekly_periods(now):
            if period in by_period:
                weekly_recap = by_period[period]
                break

        return LibraryOverview(
            displayed_month=displayed_month,
            clips=clips,
            weekly_recap=weekly_recap,
            monthly_recap=by_period.get(self.policy.displayed_monthly_period(now)),
            has_recorded_today=self.index.has_clip_on(now, scan.clips)
        )

    @staticmethod
    def change_month(displayed_month: MonthPeriod, offset: int) -> MonthPeriod:
        """Month navigation: the month `offset` months from the displayed one."""
        return month_of(shift_month(displayed_month.start_date, offset))

    def list_recaps(self) -> List[Recap]:
        """All recaps on disk, most recent period first."""
        return self.index.scan().recaps

    def delete_clip(self, clip: Union[str, Path]) -> bool:
        return self.index.delete_clip(clip)

    def has_recorded_today(self, now: Optional[datetime] = None) -> bool:
        """Notification signal; always based on a fresh scan."""
        now = self._now(now)
        scan = self.index.scan()
        if not scan.storage_available:
            logger.warning(f"⚠️ Cannot tell whether today is recorded: {scan.storage_error}")
            return False
        return self.index.has_clip_on(now, scan.clips)

    def time_until_next_recording(self, now: Optional[datetime] = None) -> timedelta:
        """Time until a new clip can be recorded: until local midnight once today is done, else zero."""
        now = self._now(now)
        if not self.has_recorded_today(now):
            return timedelta(0)
        midnight = datetime.combine(now.date() + timedelta(days=1), time.min)
        return midnight - now

    def next_reminder_at(self, now: Optional[datetime] = None) -> datetime:
        """Next daily reminder instant, strictly after now."""
        now = self._now(now)
        reminder = datetime.combine(now.date(), time(hour=self.reminder_hour))
        if reminder <= now:
            reminder += timedelta(days=1)
        return reminder
