#!/usr/bin/env python3
"""
Configuration Management Script for the video diary recap engine

This script allows users to view and modify configuration settings in config.ini.
"""

import argparse
import sys

from diary_recap.config import config

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']


def show_config():
    """Display current configuration settings."""
    print("Video Diary Configuration Settings")
    print("=" * 40)
    print()
    print("[Paths]")
    print(f"  videos_dir: {config.videos_dir}")
    print()
    print("[Recap]")
    print(f"  min_clips_for_recap: {config.min_clips_for_recap}")
    weekday = config.weekly_trigger_weekday
    print(f"  weekly_trigger_weekday: {WEEKDAYS[weekday] if weekday is not None else 'any day'}")
    print(f"  monthly_trigger_day: {config.monthly_trigger_day or 'any day'}")
    print(f"  write_sidecar: {config.write_sidecar}")
    print()
    print("[Export]")
    print(f"  ffmpeg_binary: {config.ffmpeg_binary}")
    print(f"  video: {config.video_codec} {config.output_width}x{config.output_height}@{config.frame_rate} "
          f"(preset {config.ffmpeg_preset}, crf {config.crf})")
    print(f"  audio: {config.audio_codec} {config.audio_bitrate} {config.audio_sample_rate}Hz")
    print()
    print("[Notifications]")
    print(f"  reminder_hour: {config.reminder_hour}")
    print()
    print("[API]")
    print(f"  host: {config.api_host}")
    print(f"  port: {config.api_port}")
    print()
    print("[Logging]")
    print(f"  level: {config.log_level}")
    print(f"  log_to_file: {config.log_to_file}")
    print(f"  log_file: {config.log_file}")
    sys.stdout.flush()


def set_videos_dir(path: str):
    config.set_value('paths', 'videos_dir', path)
    config.save_config()
    print(f"✓ Set videos_dir to: {path}")


def set_min_clips(count: int):
    """Set the minimum number of clips a period needs for a recap."""
    if count < 1:
        print("❌ Error: Minimum clip count must be at least 1")
        return

    config.set_value('recap', 'min_clips_for_recap', str(count))
    config.save_config()
    print(f"✓ Set min_clips_for_recap to: {count}")


def set_weekly_trigger(day: str):
    """Restrict weekly recap generation to one weekday ('any' removes the restriction)."""
    value = '' if day == 'any' else str(WEEKDAYS.index(day))
    config.set_value('recap', 'weekly_trigger_weekday', value)
    config.save_config()
    print(f"✓ Set weekly_trigger_weekday to: {day}")


def set_monthly_trigger(day: int):
    """Restrict monthly recap generation to one day of the month (0 removes the restriction)."""
    if not 0 <= day <= 28:
        print("❌ Error: Day must be between 1 and 28, or 0 for any day")
        return

    config.set_value('recap', 'monthly_trigger_day', str(day) if day else '')
    config.save_config()
    print(f"✓ Set monthly_trigger_day to: {day or 'any day'}")


def set_reminder_hour(hour: int):
    if not 0 <= hour <= 23:
        print("❌ Error: Reminder hour must be between 0 and 23")
        return

    config.set_value('notifications', 'reminder_hour', str(hour))
    config.save_config()
    print(f"✓ Set reminder_hour to: {hour}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Manage video diary configuration settings",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--show',
        action='store_true',
        help='Show current configuration settings'
    )

    parser.add_argument(
        '--videos-dir',
        type=str,
        help='Set the storage directory for clips and recaps'
    )

    parser.add_argument(
        '--min-clips',
        type=int,
        help='Set the minimum number of clips needed for a recap'
    )

    parser.add_argument(
        '--weekly-trigger',
        type=str,
        choices=WEEKDAYS + ['any'],
        help='Only generate weekly recaps on this weekday'
    )

    parser.add_argument(
        '--monthly-trigger',
        type=int,
        help='Only generate monthly recaps on this day of the month (0 = any day)'
    )

    parser.add_argument(
        '--reminder-hour',
        type=int,
        help='Set the hour of the daily recording reminder'
    )

    args = parser.parse_args(argv)

    # If no arguments provided, show configuration by default
    if not any(value is not None and value is not False for value in vars(args).values()):
        show_config()
        return

    if args.show:
        show_config()

    if args.videos_dir:
        set_videos_dir(args.videos_dir)

    if args.min_clips is not None:
        set_min_clips(args.min_clips)

    if args.weekly_trigger:
        set_weekly_trigger(args.weekly_trigger)

    if args.monthly_trigger is not None:
        set_monthly_trigger(args.monthly_trigger)

    if args.reminder_hour is not None:
        set_reminder_hour(args.reminder_hour)


if __name__ == "__main__":
    main()
