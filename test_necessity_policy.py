#!/usr/bin/env python3
"""
Tests for weekly/monthly recap period selection.
"""

from datetime import datetime
from pathlib import Path

import pytest

from diary_recap.config import Config
from diary_recap.recap_generator.exceptions.recap_exceptions import ConfigurationError
from diary_recap.recap_generator.models.recap_models import (
    DailyClip, MonthPeriod, Recap, RecapConfiguration, RecapKind, WeekPeriod
)
from diary_recap.recap_generator.models.run_models import SkipReason
from diary_recap.recap_generator.necessity_policy import RecapNecessityPolicy
from diary_recap.recap_generator.utils.filename_codec import encode_clip_name, encode_recap_name

W10 = WeekPeriod(iso_year=2024, iso_week=10)
W11 = WeekPeriod(iso_year=2024, iso_week=11)
FRIDAY = datetime(2024, 3, 15, 21, 0)


def clips_on(*moments):
    return [DailyClip(path=Path("/videos") / encode_clip_name(m), captured_at=m) for m in moments]


def recap_for(period):
    return Recap(period=period, path=Path("/videos") / encode_recap_name(period))


def test_current_week_selected_when_it_has_enough_clips():
    policy = RecapNecessityPolicy()
    clips = clips_on(datetime(2024, 3, 11, 20), datetime(2024, 3, 14, 20))
    assert policy.weekly_recap_needed(FRIDAY, [], clips) == W11


def test_falls_back_to_previous_week_with_too_few_current_clips():
    policy = RecapNecessityPolicy()
    clips = clips_on(datetime(2024, 3, 14, 20), datetime(2024, 3, 5, 9), datetime(2024, 3, 6, 9))
    assert policy.weekly_recap_needed(FRIDAY, [], clips) == W10


def test_sunday_clip_counts_for_the_previous_iso_week():
    """2024-03-10 is a Sunday, so it belongs to week 10 rather than week 11."""
    policy = RecapNecessityPolicy()
    clips = clips_on(datetime(2024, 3, 10, 20), datetime(2024, 3, 14, 20))
    assert policy.weekly_recap_needed(FRIDAY, [], clips) == W10


def test_existing_recap_for_selected_week_means_nothing_needed():
    policy = RecapNecessityPolicy()
    clips = clips_on(datetime(2024, 3, 11, 20), datetime(2024, 3, 14, 20))
    assert policy.weekly_recap_needed(FRIDAY, [recap_for(W11)], clips) is None
    # Periods work as well as Recap records
    assert policy.weekly_recap_needed(FRIDAY, {W11}, clips) is None
    # A recap for some other week does not matter
    assert policy.weekly_recap_needed(FRIDAY, [recap_for(W10)], clips) == W11


def test_monthly_always_targets_previous_month():
    policy = RecapNecessityPolicy()
    assert policy.monthly_recap_needed(FRIDAY, []) == MonthPeriod(year=2024, month=2)
    assert policy.monthly_recap_needed(datetime(2024, 1, 1, 0, 0), []) == MonthPeriod(year=2023, month=12)
    assert policy.monthly_recap_needed(datetime(2024, 3, 31, 23, 59), []) != MonthPeriod(year=2024, month=3)


def test_monthly_none_when_previous_month_exists():
    policy = RecapNecessityPolicy()
    assert policy.monthly_recap_needed(FRIDAY, [recap_for(MonthPeriod(year=2024, month=2))]) is None


def test_evaluate_reports_skip_reasons():
    policy = RecapNecessityPolicy()
    clips = clips_on(datetime(2024, 3, 11, 20), datetime(2024, 3, 14, 20))

    needed = policy.evaluate(RecapKind.WEEKLY, FRIDAY, [], clips)
    assert needed.needed
    assert needed.candidate == W11
    assert needed.skip_reason is None

    exists = policy.evaluate(RecapKind.WEEKLY, FRIDAY, [recap_for(W11)], clips)
    assert not exists.needed
    assert exists.candidate == W11
    assert exists.skip_reason == SkipReason.ALREADY_EXISTS


def test_trigger_days_unset_allow_any_day():
    policy = RecapNecessityPolicy()
    assert policy.is_trigger_day(RecapKind.WEEKLY, FRIDAY)
    assert policy.is_trigger_day(RecapKind.MONTHLY, FRIDAY)


def test_trigger_day_alignment():
    """Weekly generation only on Mondays and monthly only on the 1st when configured."""
    policy = RecapNecessityPolicy(RecapConfiguration(weekly_trigger_weekday=0, monthly_trigger_day=1))
    monday = datetime(2024, 3, 18, 9, 0)
    first = datetime(2024, 4, 1, 9, 0)

    friday_decision = policy.evaluate(RecapKind.WEEKLY, FRIDAY, [], [])
    assert friday_decision.skip_reason == SkipReason.NO_PERIOD_CANDIDATE
    assert friday_decision.candidate is None

    monday_decision = policy.evaluate(RecapKind.WEEKLY, monday, [], [])
    assert monday_decision.needed
    assert monday_decision.candidate == W11   # the week that just closed

    assert policy.evaluate("monthly", FRIDAY, [], []).skip_reason == SkipReason.NO_PERIOD_CANDIDATE
    assert policy.evaluate("monthly", first, [], []).candidate == MonthPeriod(year=2024, month=3)


def test_min_clips_threshold_comes_from_configuration():
    policy = RecapNecessityPolicy(RecapConfiguration(min_clips_for_recap=3))
    clips = clips_on(datetime(2024, 3, 11, 20), datetime(2024, 3, 14, 20))
    assert policy.weekly_recap_needed(FRIDAY, [], clips) == W10


def test_displayed_periods():
    policy = RecapNecessityPolicy()
    assert policy.displayed_weekly_periods(FRIDAY) == [W11, W10]
    assert policy.displayed_monthly_period(FRIDAY) == MonthPeriod(year=2024, month=2)


def test_configuration_read_from_ini(tmp_path):
    ini = tmp_path / "config.ini"
    ini.write_text("[recap]\nmin_clips_for_recap = 3\nweekly_trigger_weekday = 0\nmonthly_trigger_day =\n")

    recap_config = RecapConfiguration.from_config(Config(str(ini)))

    assert recap_config.min_clips_for_recap == 3
    assert recap_config.weekly_trigger_weekday == 0
    assert recap_config.monthly_trigger_day is None


def test_invalid_ini_value_is_a_configuration_error(tmp_path):
    ini = tmp_path / "config.ini"
    ini.write_text("[recap]\nweekly_trigger_weekday = 7\n")

    with pytest.raises(ConfigurationError) as excinfo:
        RecapConfiguration.from_config(Config(str(ini)))
    assert excinfo.value.parameter_name == "weekly_trigger_weekday"


def test_non_numeric_ini_value_is_a_configuration_error(tmp_path):
    ini = tmp_path / "config.ini"
    ini.write_text("[recap]\nweekly_trigger_weekday = monday\n")

    with pytest.raises(ConfigurationError) as excinfo:
        RecapConfiguration.from_config(Config(str(ini)))
    assert excinfo.value.parameter_name == "weekly_trigger_weekday"
    assert "monday" in excinfo.value.message
