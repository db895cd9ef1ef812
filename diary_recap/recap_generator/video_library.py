"""
Video library index.

The storage directory is the database: every scan re-derives which clips and
recaps exist from the filenames in one flat directory. The repository
interface keeps the policy and orchestrator independent of that choice.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from ..path_handler import PathHandler
from ..utils.logger_utils import setup_logging
from .exceptions.recap_exceptions import (
    ParseError, RecapDeletionForbiddenError, StorageUnavailableError
)
from .models.recap_models import (
    DailyClip, LibraryScan, MonthPeriod, Recap, RecapSidecar, WeekPeriod, period_recency_key
)
from .period_selector import DateLike, local_day
from .utils.filename_codec import (
    FileKind, classify_filename, decode_clip_name, decode_recap_name, is_recap_filename
)

logger = setup_logging(__name__)


class VideoRepository(ABC):
    """Storage capabilities the recap pipeline depends on."""

    @abstractmethod
    def scan(self, directory: Optional[Union[str, Path]] = None) -> LibraryScan:
        """Full listing of clips and recaps; never raises for storage problems."""

    @abstractmethod
    def recap_path(self, period: Union[WeekPeriod, MonthPeriod]) -> Path:
        """Canonical output path of a period's recap."""

    @abstractmethod
    def exists(self, period: Union[WeekPeriod, MonthPeriod]) -> bool:
        """Whether the period's recap is already stored."""

    @abstractmethod
    def write_sidecar(self, recap: Recap) -> Path:
        """Persist the audit record of a freshly generated recap."""

    @abstractmethod
    def delete_clip(self, clip_path: Union[str, Path]) -> bool:
        """Remove a daily clip. Recaps are never deletable."""


class VideoLibraryIndex(VideoRepository):
    """Filesystem-backed repository over one flat directory."""

    def __init__(self, videos_dir: Union[str, Path]):
        self.path_handler = PathHandler(videos_dir)
        self._last_scan: Optional[LibraryScan] = None

    @property
    def videos_dir(self) -> Path:
        return self.path_handler.get_videos_dir()

    @property
    def last_scan(self) -> Optional[LibraryScan]:
        """Result of the most recent scan; replaced only by the next full scan."""
        return self._last_scan

    def scan(self, directory: Optional[Union[str, Path]] = None) -> LibraryScan:
        """
        List and classify every entry of the storage directory.

        Hidden entries (partial exports, sidecars) and sub-directories are
        ignored. Names that do not parse are skipped with a warning.

        Args:
            directory: Directory to scan (defaults to the configured videos directory)

        Returns:
            LibraryScan with clips newest first and recaps by period recency;
            on an unreadable directory both lists are empty and storage_error is set
        """
        directory = Path(directory) if directory is not None else self.videos_dir

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            error = StorageUnavailableError(str(directory), e)
            logger.error(f"❌ {error.message}")
            result = LibraryScan(directory=directory, storage_error=error.message)
            self._last_scan = result
            return result

        clips: List[DailyClip] = []
        recaps: List[Recap] = []
        skipped: List[str] = []

        for entry in entries:
            name = entry.name
            if name.startswith('.'):
                logger.debug(f"Ignoring hidden entry {name}")
                continue
            try:
                if entry.is_dir():
                    logger.debug(f"Ignoring sub-directory {name}")
                    continue
            except OSError as e:
                logger.warning(f"⚠️ Cannot stat {name}: {e}")
                skipped.append(name)
                continue

            kind = classify_filename(name)
            try:
                if kind == FileKind.CLIP:
                    clips.append(DailyClip(path=directory / name, captured_at=decode_clip_name(name)))
                elif kind in (FileKind.WEEKLY_RECAP, FileKind.MONTHLY_RECAP):
                    recaps.append(self._load_recap(directory / name, decode_recap_name(name)))
                else:
                    logger.warning(f"⚠️ Skipping unrelated file: {name}")
                    skipped.append(name)
            except ParseError as e:
                logger.warning(f"⚠️ Skipping {name}: {e.reason}")
                skipped.append(name)

        clips.sort(key=lambda c: (c.captured_at, c.path.name), reverse=True)
        recaps.sort(key=lambda r: period_recency_key(r.period), reverse=True)

        result = LibraryScan(directory=directory, clips=clips, recaps=recaps, skipped_entries=skipped)
        logger.info(f"📂 Scanned {directory}: {len(clips)} clip(s), {len(recaps)} recap(s), "
                    f"{len(skipped)} skipped")
        self._last_scan = result
        return result

    def _load_recap(self, path: Path, period: Union[WeekPeriod, MonthPeriod]) -> Recap:
        """Build a Recap record, filling audit fields from its sidecar when present."""
        recap = Recap(period=period, path=path)
        sidecar_path = self.path_handler.get_sidecar_path(path)
        if not sidecar_path.exists():
            return recap

        try:
            sidecar = RecapSidecar.model_validate_json(sidecar_path.read_text(encoding='utf-8'))
        except (OSError, ValidationError) as e:
            logger.warning(f"⚠️ Ignoring unreadable sidecar {sidecar_path.name}: {e}")
            return recap

        if sidecar.period != period.token:
            logger.warning(f"⚠️ Sidecar {sidecar_path.name} describes {sidecar.period}, expected {period.token}")
            return recap

        recap.source_clips = [path.parent / name for name in sidecar.source_clips]
        recap.skipped_clips = sidecar.skipped_clips
        recap.duration_seconds = sidecar.duration_seconds
        recap.generated_at = sidecar.generated_at
        return recap

    def recap_path(self, period: Union[WeekPeriod, MonthPeriod]) -> Path:
        return self.path_handler.get_recap_path(period)

    def exists(self, period: Union[WeekPeriod, MonthPeriod]) -> bool:
        return self.recap_path(period).exists()

    def has_clip_on(self, day: DateLike, clips: Optional[Iterable[DailyClip]] = None) -> bool:
        """
        Whether any clip was captured on the same local calendar day as `day`.

        Uses the given clips, else the last scan, else a fresh scan.
        """
        if clips is None:
            scan = self._last_scan or self.scan()
            clips = scan.clips
        target = local_day(day)
        return any(local_day(clip.captured_at) == target for clip in clips)

    def write_sidecar(self, recap: Recap) -> Path:
        sidecar_path = self.path_handler.get_sidecar_path(recap.path)
        tmp_path = sidecar_path.with_name(sidecar_path.name + ".tmp")
        payload = RecapSidecar.from_recap(recap).model_dump_json(indent=2)
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_path, sidecar_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote sidecar {sidecar_path.name}")
        return sidecar_path

    def delete_clip(self, clip_path: Union[str, Path]) -> bool:
        """
        Delete a daily clip from the storage directory.

        Args:
            clip_path: Clip filename or path; only its name is used

        Returns:
            True if a file was removed, False if it was already gone

        Raises:
            RecapDeletionForbiddenError: for recap files
            ParseError: for names that are not daily clips
            StorageUnavailableError: if the file exists but cannot be removed
        """
        name = Path(clip_path).name
        if is_recap_filename(name):
            logger.warning(f"⚠️ Refusing to delete recap {name}")
            raise RecapDeletionForbiddenError(name)
        decode_clip_name(name)

        target = self.path_handler.get_clip_path(name)
        try:
            os.remove(target)
        except FileNotFoundError:
            logger.info(f"Clip {name} was already deleted")
            return False
        except OSError as e:
            raise StorageUnavailableError(str(self.videos_dir), e)

        logger.info(f"🗑️ Deleted clip {name}")
        return True
