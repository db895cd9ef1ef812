"""
Configuration loader for the diary recap engine.

This module provides functionality to load and access configuration settings
from the config.ini file.
"""

import configparser
import os
from typing import Any, Optional
from dotenv import load_dotenv

load_dotenv(override=True)


class Config:
    """Configuration manager for the diary recap engine."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration from file.

        Args:
            config_file: Path to the configuration file
        """
        self.config = configparser.ConfigParser()

        # Find config file in project root
        if config_file is None:
            possible_paths = [
                "config.ini",                    # Current directory
                "../config.ini",                 # Parent directory
                os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config.ini")  # Project root
            ]

            found_config = None
            for path in possible_paths:
                if os.path.exists(path):
                    found_config = path
                    break

            config_file = found_config if found_config else "config.ini"

        self.config_file = config_file
        self._load_config()

    def _load_config(self):
        """Load configuration from file."""
        self.config.read(self.config_file)

    def get_bool(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get boolean value from config."""
        return self.config.getboolean(section, key, fallback=fallback)

    def get_str(self, section: str, key: str, fallback: str = "") -> str:
        """Get string value from config."""
        return self.config.get(section, key, fallback=fallback)

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get integer value from config."""
        return self.config.getint(section, key, fallback=fallback)

    def get_float(self, section: str, key: str, fallback: float = 0.0) -> float:
        """Get float value from config."""
        return self.config.getfloat(section, key, fallback=fallback)

    def get_optional_int(self, section: str, key: str) -> Optional[int]:
        """Get integer value, treating a missing or blank entry as unset."""
        raw = self.config.get(section, key, fallback="").strip()
        return int(raw) if raw else None

    def set_value(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, str(value))

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w') as f:
            self.config.write(f)

    # Storage
    @property
    def videos_dir(self) -> str:
        """Flat directory holding daily clips and recaps (DIARY_VIDEOS_DIR wins)."""
        return os.getenv("DIARY_VIDEOS_DIR") or self.get_str('paths', 'videos_dir', fallback='videos')

    # Recap policy
    @property
    def min_clips_for_recap(self) -> int:
        """Minimum number of clips a period needs before a recap is generated."""
        return self.get_int('recap', 'min_clips_for_recap', fallback=2)

    @property
    def weekly_trigger_weekday(self) -> Optional[int]:
        """Weekday (0=Monday) on which weekly recaps may trigger; unset means any day."""
        return self.get_optional_int('recap', 'weekly_trigger_weekday')

    @property
    def monthly_trigger_day(self) -> Optional[int]:
        """Day of month on which monthly recaps may trigger; unset means any day."""
        return self.get_optional_int('recap', 'monthly_trigger_day')

    @property
    def write_sidecar(self) -> bool:
        """Whether to store the audit sidecar next to each generated recap."""
        return self.get_bool('recap', 'write_sidecar', fallback=True)

    # Export settings
    @property
    def ffmpeg_binary(self) -> str:
        return self.get_str('export', 'ffmpeg_binary', fallback='ffmpeg')

    @property
    def ffprobe_binary(self) -> str:
        return self.get_str('export', 'ffprobe_binary', fallback='ffprobe')

    @property
    def video_codec(self) -> str:
        return self.get_str('export', 'video_codec', fallback='libx264')

    @property
    def audio_codec(self) -> str:
        return self.get_str('export', 'audio_codec', fallback='aac')

    @property
    def ffmpeg_preset(self) -> str:
        return self.get_str('export', 'ffmpeg_preset', fallback='medium')

    @property
    def crf(self) -> int:
        return self.get_int('export', 'crf', fallback=23)

    @property
    def output_width(self) -> int:
        return self.get_int('export', 'output_width', fallback=1080)

    @property
    def output_height(self) -> int:
        return self.get_int('export', 'output_height', fallback=1920)

    @property
    def frame_rate(self) -> int:
        return self.get_int('export', 'frame_rate', fallback=30)

    @property
    def audio_bitrate(self) -> str:
        return self.get_str('export', 'audio_bitrate', fallback='192k')

    @property
    def audio_sample_rate(self) -> int:
        return self.get_int('export', 'audio_sample_rate', fallback=44100)

    @property
    def probe_timeout_seconds(self) -> float:
        return self.get_float('export', 'probe_timeout_seconds', fallback=30.0)

    @property
    def export_timeout_seconds(self) -> float:
        return self.get_float('export', 'export_timeout_seconds', fallback=1200.0)

    # Notifications
    @property
    def reminder_hour(self) -> int:
        """Local hour of the daily "record your video" reminder."""
        return self.get_int('notifications', 'reminder_hour', fallback=20)

    # API
    @property
    def api_host(self) -> str:
        """API server host."""
        return self.get_str('api', 'host', fallback='127.0.0.1')

    @property
    def api_port(self) -> int:
        """API server port."""
        return self.get_int('api', 'port', fallback=8000)

    # Logging
    @property
    def log_level(self) -> str:
        """Logging level."""
        return self.get_str('logging', 'level', fallback='INFO')

    @property
    def log_to_file(self) -> bool:
        """Whether to log to file."""
        return self.get_bool('logging', 'log_to_file', fallback=False)

    @property
    def log_file(self) -> str:
        """Log file path."""
        return self.get_str('logging', 'log_file', fallback='diary_recap.log')


# Global configuration instance
config = Config()
