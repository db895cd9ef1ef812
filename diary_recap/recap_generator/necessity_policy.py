"""
Recap necessity policy.

Decides which period, if any, should get a recap right now. The policy only
selects periods and checks for existing recaps; the minimum clip threshold is
enforced by the orchestrator.
"""

from typing import Iterable, List, Optional, Set, Union

from ..utils.logger_utils import setup_logging
from .models.recap_models import RecapConfiguration, RecapKind, Recap, WeekPeriod, MonthPeriod, DailyClip
from .models.run_models import NecessityDecision, SkipReason
from .period_selector import (
    Period, DateLike, clips_in_period, current_period, previous_period, local_day
)

logger = setup_logging(__name__)

ExistingRecaps = Iterable[Union[Recap, WeekPeriod, MonthPeriod]]


def _existing_periods(existing_recaps: ExistingRecaps) -> Set[Period]:
    return {item.period if isinstance(item, Recap) else item for item in existing_recaps}


class RecapNecessityPolicy:
    """Deterministic period selection for weekly and monthly recaps."""

    def __init__(self, configuration: Optional[RecapConfiguration] = None):
        self.configuration = configuration or RecapConfiguration()

    def is_trigger_day(self, kind: Union[RecapKind, str], now: DateLike) -> bool:
        """Whether generation of this kind may run today; unset trigger settings allow every day."""
        day = local_day(now)
        if RecapKind(kind) == RecapKind.WEEKLY:
            weekday = self.configuration.weekly_trigger_weekday
            return weekday is None or day.weekday() == weekday
        trigger_day = self.configuration.monthly_trigger_day
        return trigger_day is None or day.day == trigger_day

    def select_weekly_period(self, now: DateLike, clips: Iterable[DailyClip]) -> WeekPeriod:
        """Current week when it already has enough clips, otherwise the week before."""
        current = current_period(RecapKind.WEEKLY, now)
        if len(clips_in_period(current, clips)) >= self.configuration.min_clips_for_recap:
            return current
        return previous_period(current)

    def select_monthly_period(self, now: DateLike) -> MonthPeriod:
        """The previous calendar month; the running month is never recapped."""
        return previous_period(current_period(RecapKind.MONTHLY, now))

    def weekly_recap_needed(self, now: DateLike, existing_recaps: ExistingRecaps,
                            clips: Iterable[DailyClip]) -> Optional[WeekPeriod]:
        """
        Week that needs a recap, or None when the selected week already has one.

        Args:
            now: Reference moment
            existing_recaps: Recaps (or their periods) already on disk
            clips: All known daily clips

        Returns:
            The selected week, or None
        """
        selected = self.select_weekly_period(now, clips)
        return None if selected in _existing_periods(existing_recaps) else selected

    def monthly_recap_needed(self, now: DateLike, existing_recaps: ExistingRecaps) -> Optional[MonthPeriod]:
        selected = self.select_monthly_period(now)
        return None if selected in _existing_periods(existing_recaps) else selected

    def evaluate(self, kind: Union[RecapKind, str], now: DateLike,
                 existing_recaps: ExistingRecaps, clips: Iterable[DailyClip]) -> NecessityDecision:
        """Full decision for one kind, including why nothing is needed."""
        kind = RecapKind(kind)
        if not self.is_trigger_day(kind, now):
            logger.debug(f"{kind.value} recap not scheduled for {local_day(now)}")
            return NecessityDecision(kind=kind, skip_reason=SkipReason.NO_PERIOD_CANDIDATE)

        if kind == RecapKind.WEEKLY:
            candidate = self.select_weekly_period(now, clips)
        else:
            candidate = self.select_monthly_period(now)

        if candidate in _existing_periods(existing_recaps):
            return NecessityDecision(kind=kind, candidate=candidate, skip_reason=SkipReason.ALREADY_EXISTS)
        return NecessityDecision(kind=kind, candidate=candidate)

    def displayed_weekly_periods(self, now: DateLike) -> List[WeekPeriod]:
        """Weeks whose recap the library view surfaces, in preference order."""
        current = current_period(RecapKind.WEEKLY, now)
        return [current, previous_period(current)]

    def displayed_monthly_period(self, now: DateLike) -> MonthPeriod:
        return self.select_monthly_period(now)
