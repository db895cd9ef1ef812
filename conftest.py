"""
Shared fixtures for the recap engine tests.

Clip files written by these fixtures carry a marker payload that the fake
media backend interprets instead of real video data, so no test needs ffmpeg.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from diary_recap.recap_generator.exceptions.recap_exceptions import VideoProcessingError
from diary_recap.recap_generator.models.composition_models import ClipProbe, CompositionTimeline
from diary_recap.recap_generator.models.recap_models import RecapConfiguration
from diary_recap.recap_generator.necessity_policy import RecapNecessityPolicy
from diary_recap.recap_generator.recap_assembler import RecapAssembler
from diary_recap.recap_generator.recap_orchestrator import RecapOrchestrator
from diary_recap.recap_generator.utils.filename_codec import encode_clip_name
from diary_recap.recap_generator.utils.media_backend import MediaBackend
from diary_recap.recap_generator.video_library import VideoLibraryIndex

GOOD = b"video+audio"
SILENT = b"video-only"
CORRUPT = b"corrupt"
AUDIO_ONLY = b"audio-only"


class FakeMediaBackend(MediaBackend):
    """Media backend driven by marker payloads inside the clip files."""

    def __init__(self, clip_duration: float = 2.5):
        self.clip_duration = clip_duration
        self.probed: List[Path] = []
        self.exports: List[CompositionTimeline] = []
        self.export_error: Optional[Exception] = None
        self.export_started = asyncio.Event()
        self.export_gate: Optional[asyncio.Event] = None

    async def probe(self, clip_path: Path) -> ClipProbe:
        self.probed.append(Path(clip_path))
        try:
            payload = Path(clip_path).read_bytes()
        except OSError as e:
            raise VideoProcessingError(str(e), operation="probe")
        if payload.startswith(CORRUPT):
            raise VideoProcessingError("Invalid data found when processing input", operation="probe")
        if payload.startswith(AUDIO_ONLY):
            return ClipProbe(duration=self.clip_duration, has_video=False, has_audio=True)
        return ClipProbe(
            duration=self.clip_duration,
            has_video=True,
            has_audio=not payload.startswith(SILENT),
            width=1080,
            height=1920
        )

    async def export(self, timeline: CompositionTimeline, output_path: Path) -> None:
        self.exports.append(timeline)
        with open(output_path, 'wb') as f:
            f.write(b"partial")
        self.export_started.set()
        if self.export_gate is not None:
            await self.export_gate.wait()
        if self.export_error is not None:
            raise self.export_error
        with open(output_path, 'wb') as f:
            for segment in timeline.segments:
                f.write(segment.clip.read_bytes())


@pytest.fixture
def videos_dir(tmp_path) -> Path:
    directory = tmp_path / "videos"
    directory.mkdir()
    return directory


@pytest.fixture
def make_clip(videos_dir):
    """Factory writing a clip file named after its capture time."""

    def _make_clip(captured_at: datetime, payload: bytes = GOOD, directory: Optional[Path] = None) -> Path:
        path = (directory or videos_dir) / encode_clip_name(captured_at)
        path.write_bytes(payload)
        return path

    return _make_clip


@pytest.fixture
def recap_config() -> RecapConfiguration:
    return RecapConfiguration()


@pytest.fixture
def fake_backend() -> FakeMediaBackend:
    return FakeMediaBackend()


@pytest.fixture
def library(videos_dir) -> VideoLibraryIndex:
    return VideoLibraryIndex(videos_dir)


@pytest.fixture
def assembler(fake_backend, recap_config) -> RecapAssembler:
    return RecapAssembler(fake_backend, recap_config)


@pytest.fixture
def orchestrator(library, assembler, recap_config) -> RecapOrchestrator:
    return RecapOrchestrator(library, assembler, RecapNecessityPolicy(recap_config), recap_config)


def files_in(directory: Path) -> Dict[str, bytes]:
    return {p.name: p.read_bytes() for p in sorted(directory.iterdir()) if p.is_file()}
