#!/usr/bin/env python3
"""
Tests for the library query service (library view and daily reminder signals).
"""

from datetime import date, datetime, timedelta

import pytest

from diary_recap.recap_generator.exceptions.recap_exceptions import ConfigurationError
from diary_recap.recap_generator.library_service import VideoLibraryService
from diary_recap.recap_generator.models.recap_models import MonthPeriod, WeekPeriod
from diary_recap.recap_generator.video_library import VideoLibraryIndex

FRIDAY = datetime(2024, 3, 15, 21, 0, 0)


@pytest.fixture
def service(library):
    return VideoLibraryService(library)


def test_month_overview(videos_dir, make_clip, service):
    make_clip(datetime(2024, 2, 28, 9, 0, 0))
    make_clip(datetime(2024, 3, 1, 9, 0, 0))
    make_clip(datetime(2024, 3, 15, 20, 5, 33))
    (videos_dir / "recap_week_2024-W10.mp4").write_bytes(b"r")
    (videos_dir / "recap_month_2024-02.mp4").write_bytes(b"r")
    (videos_dir / "recap_month_2024-01.mp4").write_bytes(b"r")

    overview = service.get_month_overview(MonthPeriod(year=2024, month=3), FRIDAY)

    assert [c.path.name for c in overview.clips] == ["2024-03-15_20-05-33.mp4", "2024-03-01_09-00-00.mp4"]
    assert overview.weekly_recap.period == WeekPeriod(iso_year=2024, iso_week=10)
    assert overview.monthly_recap.period == MonthPeriod(year=2024, month=2)
    assert overview.has_recorded_today
    assert overview.storage_error is None


def test_current_week_recap_preferred(videos_dir, service):
    (videos_dir / "recap_week_2024-W10.mp4").write_bytes(b"r")
    (videos_dir / "recap_week_2024-W11.mp4").write_bytes(b"r")

    overview = service.get_month_overview(date(2024, 3, 20), FRIDAY)

    assert overview.displayed_month == MonthPeriod(year=2024, month=3)
    assert overview.weekly_recap.period == WeekPeriod(iso_year=2024, iso_week=11)
    assert overview.monthly_recap is None


def test_month_overview_defaults_to_current_month(make_clip, service):
    make_clip(datetime(2024, 3, 2, 9, 0, 0))
    overview = service.get_month_overview(now=FRIDAY)
    assert overview.displayed_month == MonthPeriod(year=2024, month=3)
    assert len(overview.clips) == 1
    assert not overview.has_recorded_today


def test_month_overview_with_unavailable_storage(tmp_path):
    service = VideoLibraryService(VideoLibraryIndex(tmp_path / "missing"))
    overview = service.get_month_overview(MonthPeriod(year=2024, month=3), FRIDAY)
    assert overview.storage_error
    assert overview.clips == []
    assert service.has_recorded_today(FRIDAY) is False


def test_change_month():
    march = MonthPeriod(year=2024, month=3)
    assert VideoLibraryService.change_month(march, -3) == MonthPeriod(year=2023, month=12)
    assert VideoLibraryService.change_month(march, 1) == MonthPeriod(year=2024, month=4)


def test_has_recorded_today_uses_a_fresh_scan(make_clip, service):
    assert not service.has_recorded_today(FRIDAY)
    make_clip(datetime(2024, 3, 15, 8, 0, 0))
    assert service.has_recorded_today(FRIDAY)


def test_time_until_next_recording(make_clip, service):
    assert service.time_until_next_recording(FRIDAY) == timedelta(0)
    make_clip(datetime(2024, 3, 15, 20, 5, 33))
    assert service.time_until_next_recording(FRIDAY) == timedelta(hours=3)


def test_next_reminder_is_strictly_in_the_future(service):
    assert service.next_reminder_at(datetime(2024, 3, 15, 19, 59, 59)) == datetime(2024, 3, 15, 20, 0)
    assert service.next_reminder_at(datetime(2024, 3, 15, 20, 0, 0)) == datetime(2024, 3, 16, 20, 0)
    assert service.next_reminder_at(datetime(2024, 12, 31, 22, 0)) == datetime(2025, 1, 1, 20, 0)


def test_custom_reminder_hour(library):
    service = VideoLibraryService(library, reminder_hour=8)
    assert service.next_reminder_at(FRIDAY) == datetime(2024, 3, 16, 8, 0)
    with pytest.raises(ConfigurationError):
        VideoLibraryService(library, reminder_hour=24)


def test_list_and_delete(videos_dir, make_clip, service):
    clip = make_clip(datetime(2024, 3, 15, 20, 5, 33))
    (videos_dir / "recap_week_2024-W11.mp4").write_bytes(b"r")

    assert [r.path.name for r in service.list_recaps()] == ["recap_week_2024-W11.mp4"]
    assert service.delete_clip(clip.name)
    assert not clip.exists()
