"""
Recap Assembler for generating recap videos.

This module concatenates a period's daily clips into one recap. Composition is
best-effort over the readable clips; the output is written to a hidden partial
file and only committed to its canonical name once complete, so a failed or
cancelled attempt never leaves a file at the canonical path.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union

from ..path_handler import PathHandler
from ..utils.logger_utils import setup_logging
from .exceptions.recap_exceptions import (
    NoValidClipsComposedError, NoVideosForPeriodError, OutputAlreadyExistsError,
    ParseError, VideoProcessingError
)
from .models.composition_models import CompositionTimeline
from .models.recap_models import DailyClip, MonthPeriod, Recap, RecapConfiguration, WeekPeriod
from .utils.filename_codec import decode_recap_name
from .utils.media_backend import MediaBackend

logger = setup_logging(__name__)

ClipInput = Union[DailyClip, Path, str]


def _clip_path(clip: ClipInput) -> Path:
    return clip.path if isinstance(clip, DailyClip) else Path(clip)


class RecapAssembler:
    """Service for assembling daily clips into a recap video."""

    def __init__(self, media_backend: MediaBackend, config: Optional[RecapConfiguration] = None):
        self.media_backend = media_backend
        self.config = config or RecapConfiguration()

    async def build_timeline(self, clips: Sequence[ClipInput]) -> CompositionTimeline:
        """
        Probe clips in order and lay the readable ones end to end.

        A clip that cannot be opened, has no video stream or reports no
        duration is skipped and logged. Audio is optional per clip.

        Args:
            clips: Clips in the order they should appear

        Returns:
            Timeline with one segment per usable clip
        """
        timeline = CompositionTimeline()
        for clip in clips:
            path = _clip_path(clip)
            try:
                probe = await self.media_backend.probe(path)
            except VideoProcessingError as e:
                logger.warning(f"⚠️ Skipping unreadable clip {path.name}: {e}")
                timeline.skip(path, f"unreadable: {e.message}")
                continue

            if not probe.has_video:
                logger.warning(f"⚠️ Skipping {path.name}: no video stream")
                timeline.skip(path, "no video stream")
                continue
            if probe.duration <= 0:
                logger.warning(f"⚠️ Skipping {path.name}: no playable duration")
                timeline.skip(path, "zero duration")
                continue

            segment = timeline.append(path, probe)
            logger.debug(f"Placed {path.name} at {segment.start:.2f}s ({segment.duration:.2f}s, "
                         f"audio={'yes' if segment.has_audio else 'silence'})")
        return timeline

    async def compose(self,
                      clips: Sequence[ClipInput],
                      output_path: Union[str, Path],
                      period: Optional[Union[WeekPeriod, MonthPeriod]] = None) -> Recap:
        """
        Concatenate clips into a recap at output_path.

        Args:
            clips: Non-empty, already in ascending chronological order
            output_path: Canonical recap path; must not exist
            period: Period of the recap (derived from the output filename if omitted)

        Returns:
            Recap describing the committed file

        Raises:
            NoVideosForPeriodError: if clips is empty
            OutputAlreadyExistsError: if output_path is already taken
            NoValidClipsComposedError: if no clip could be used
            VideoProcessingError: if export or commit fails
        """
        output_path = Path(output_path)
        period = period or self._period_from_name(output_path)
        if period is None:
            raise ParseError(output_path.name, "recap output name does not identify a period")
        period_token = period.token

        if not clips:
            raise NoVideosForPeriodError(period=period_token)
        if output_path.exists():
            raise OutputAlreadyExistsError(str(output_path), period_token)

        logger.info(f"🎬 Composing {output_path.name} from {len(clips)} clip(s)")
        timeline = await self.build_timeline(clips)
        skipped_names = [skipped.path.name for skipped in timeline.skipped]

        if timeline.is_empty:
            logger.error(f"❌ None of the {len(clips)} clip(s) for {output_path.name} could be read")
            raise NoValidClipsComposedError(skipped_names, period_token)

        partial_path = PathHandler.get_partial_export_path(output_path)
        try:
            partial_path.unlink(missing_ok=True)
            await self.media_backend.export(timeline, partial_path)
            self._commit(partial_path, output_path, period_token)
        except OSError as e:
            raise VideoProcessingError(str(e), operation="commit", period=period_token)
        finally:
            # Also runs on cancellation; after a commit only the hard link is removed
            self._discard(partial_path)

        recap = Recap(
            period=period,
            path=output_path,
            source_clips=[segment.clip for segment in timeline.segments],
            skipped_clips=skipped_names,
            duration_seconds=timeline.duration,
            generated_at=datetime.now()
        )
        logger.info(f"✅ Recap ready: {output_path.name} ({len(recap.source_clips)} clip(s), "
                    f"{recap.duration_seconds:.1f}s, {len(skipped_names)} skipped)")
        return recap

    @staticmethod
    def _commit(partial_path: Path, output_path: Path, period_token: Optional[str]) -> None:
        """Publish the finished export under its canonical name without overwriting."""
        try:
            os.link(partial_path, output_path)
            return
        except FileExistsError:
            raise OutputAlreadyExistsError(str(output_path), period_token)
        except OSError as e:
            # Filesystems without hard links
            logger.debug(f"Hard link unavailable ({e}), falling back to rename")

        if output_path.exists():
            raise OutputAlreadyExistsError(str(output_path), period_token)
        os.replace(partial_path, output_path)

    @staticmethod
    def _discard(partial_path: Path) -> None:
        try:
            partial_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"⚠️ Could not remove partial export {partial_path.name}: {e}")

    @staticmethod
    def _period_from_name(output_path: Path) -> Optional[Union[WeekPeriod, MonthPeriod]]:
        try:
            return decode_recap_name(output_path.name)
        except ParseError:
            return None
