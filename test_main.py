#!/usr/bin/env python3
"""
Tests for the command line entry point.
"""

from datetime import datetime
from unittest.mock import patch

from main import build_parser, main


def test_parser_accepts_reference_time():
    args = build_parser().parse_args(["run", "--kind", "weekly", "--now", "2024-03-15T21:00:00"])
    assert args.kind == "weekly"
    assert args.now == datetime(2024, 3, 15, 21, 0, 0)


def test_scan_prints_library(videos_dir, make_clip, capsys):
    make_clip(datetime(2024, 3, 15, 20, 5, 33))
    (videos_dir / "recap_week_2024-W11.mp4").write_bytes(b"r")

    assert main(["--videos-dir", str(videos_dir), "scan"]) == 0

    out = capsys.readouterr().out
    assert "2024-03-15_20-05-33.mp4" in out
    assert "Recap Week 11, 2024" in out


def test_scan_of_missing_directory_fails(tmp_path, capsys):
    assert main(["--videos-dir", str(tmp_path / "missing"), "scan"]) == 1
    assert "unavailable" in capsys.readouterr().out


def test_delete_refuses_recap(videos_dir, capsys):
    (videos_dir / "recap_week_2024-W11.mp4").write_bytes(b"r")
    assert main(["--videos-dir", str(videos_dir), "delete", "recap_week_2024-W11.mp4"]) == 1
    assert (videos_dir / "recap_week_2024-W11.mp4").exists()


def test_run_stops_without_ffmpeg(videos_dir, capsys):
    with patch("diary_recap.recap_generator.utils.ffmpeg_utils.subprocess.run",
               side_effect=FileNotFoundError("ffmpeg")):
        assert main(["--videos-dir", str(videos_dir), "run"]) == 1
    assert "validation failed" in capsys.readouterr().out
