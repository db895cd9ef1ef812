"""
Recap Orchestrator - Main coordinator for recap generation.

Each trigger runs the weekly check to completion, then the monthly check. A
check walks Idle -> Checking -> Skipped | Composing -> Done | Failed against a
fresh library scan. Whole runs are serialized by one run lock, and the
existence check is repeated under a lock keyed by the canonical output path
before composing, so a period is never composed twice by this process.
"""

import asyncio
import inspect
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ..utils.logger_utils import setup_logging
from .exceptions.recap_exceptions import (
    OutputAlreadyExistsError, RecapGenerationError, TooFewClipsError
)
from .models.recap_models import DailyClip, Recap, RecapConfiguration, RecapKind
from .models.run_models import RecapRunResult, RunState, SkipReason
from .necessity_policy import RecapNecessityPolicy
from .period_selector import clips_in_period
from .recap_assembler import RecapAssembler
from .video_library import VideoRepository

logger = setup_logging(__name__)

RecapCallback = Callable[[Recap], Union[None, Awaitable[Any]]]


class RecapOrchestrator:
    """Main orchestrator for the recap generation pipeline."""

    def __init__(self,
                 repository: VideoRepository,
                 assembler: RecapAssembler,
                 policy: Optional[RecapNecessityPolicy] = None,
                 config: Optional[RecapConfiguration] = None):
        """
        Initialize the recap orchestrator.

        Args:
            repository: Storage the clips are read from and recaps written to
            assembler: Composition engine
            policy: Necessity policy (built from config if not provided)
            config: Recap configuration (uses defaults if not provided)
        """
        self.repository = repository
        self.assembler = assembler
        self.config = config or RecapConfiguration()
        self.policy = policy or RecapNecessityPolicy(self.config)

        self._subscribers: List[RecapCallback] = []
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._run_lock: Optional[asyncio.Lock] = None
        self._period_locks: Dict[Path, Tuple[asyncio.Lock, int]] = {}

    def subscribe(self, callback: RecapCallback) -> Callable[[], None]:
        """
        Register a callback for newly generated recaps.

        Returns:
            Function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _ensure_locks(self) -> None:
        # asyncio locks belong to one event loop
        loop = asyncio.get_running_loop()
        if loop is not self._lock_loop:
            self._lock_loop = loop
            self._run_lock = asyncio.Lock()
            self._period_locks = {}

    @asynccontextmanager
    async def _period_lock(self, output_path: Path) -> AsyncIterator[None]:
        """
        Hold the lock keyed by a canonical output path around Checking -> Composing.

        The public entry points already hold the run lock, so this lock only
        contends for callers that drive checks without it. Entries are dropped
        once no holder or waiter remains.
        """
        lock, users = self._period_locks.get(output_path, (asyncio.Lock(), 0))
        self._period_locks[output_path] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._period_locks.get(output_path, (lock, 1))
            if users <= 1:
                self._period_locks.pop(output_path, None)
            else:
                self._period_locks[output_path] = (lock, users - 1)

    async def run(self, now: Optional[datetime] = None) -> List[RecapRunResult]:
        """
        Run the weekly check, then the monthly check.

        Args:
            now: Reference moment (defaults to the current local time)

        Returns:
            One result per kind, weekly first
        """
        now = now or datetime.now()
        self._ensure_locks()
        async with self._run_lock:
            logger.info(f"🎬 Recap check started for {now:%Y-%m-%d %H:%M}")
            weekly = await self._run_kind(RecapKind.WEEKLY, now)
            monthly = await self._run_kind(RecapKind.MONTHLY, now)
        return [weekly, monthly]

    async def run_weekly(self, now: Optional[datetime] = None) -> RecapRunResult:
        now = now or datetime.now()
        self._ensure_locks()
        async with self._run_lock:
            return await self._run_kind(RecapKind.WEEKLY, now)

    async def run_monthly(self, now: Optional[datetime] = None) -> RecapRunResult:
        now = now or datetime.now()
        self._ensure_locks()
        async with self._run_lock:
            return await self._run_kind(RecapKind.MONTHLY, now)

    async def _run_kind(self, kind: RecapKind, now: datetime) -> RecapRunResult:
        result = RecapRunResult(kind=kind)
        result.transition(RunState.CHECKING)
        try:
            scan = await asyncio.to_thread(self.repository.scan)
            if not scan.storage_available:
                logger.error(f"❌ {kind.value} recap check failed: {scan.storage_error}")
                return result.fail(scan.storage_error)

            decision = self.policy.evaluate(kind, now, scan.recaps, scan.clips)
            result.period = decision.candidate
            if decision.skip_reason is not None:
                logger.info(f"⏭️ {kind.value} recap skipped ({decision.skip_reason.value})"
                            + (f" for {decision.candidate.token}" if decision.candidate else ""))
                return result.skip(decision.skip_reason)

            period = decision.candidate
            output_path = self.repository.recap_path(period)

            async with self._period_lock(output_path):
                if await asyncio.to_thread(self.repository.exists, period):
                    logger.info(f"⏭️ Recap {period.token} appeared meanwhile, skipping")
                    return result.skip(SkipReason.ALREADY_EXISTS)

                clips = clips_in_period(period, scan.clips)
                result.clip_count = len(clips)
                try:
                    self._check_clip_count(clips, period.token)
                except TooFewClipsError as e:
                    logger.info(f"⏭️ {period.title}: {e.message}")
                    return result.skip(SkipReason.TOO_FEW_CLIPS)

                result.transition(RunState.COMPOSING)
                try:
                    recap = await self.assembler.compose(clips, output_path, period)
                except OutputAlreadyExistsError:
                    logger.info(f"⏭️ Recap {period.token} already exists")
                    return result.skip(SkipReason.ALREADY_EXISTS)
                except RecapGenerationError as e:
                    logger.error(f"❌ Recap generation failed for {period.token}: {e}")
                    return result.fail(e)

            self._write_sidecar(recap)
            result.done(recap)
            logger.info(f"✅ {recap.title} generated: {recap.path.name}")

        except asyncio.CancelledError:
            if not result.is_terminal:
                result.fail("cancelled")
            logger.warning(f"⚠️ {kind.value} recap run cancelled")
            raise
        except Exception as e:
            logger.error(f"❌ {kind.value} recap run failed: {e}")
            if not result.is_terminal:
                result.fail(e)
            return result

        await self._notify(recap)
        return result

    def _check_clip_count(self, clips: List[DailyClip], period_token: str) -> None:
        required = self.config.min_clips_for_recap
        if len(clips) < required:
            raise TooFewClipsError(len(clips), required, period_token)

    def _write_sidecar(self, recap: Recap) -> None:
        if not self.config.write_sidecar:
            return
        try:
            self.repository.write_sidecar(recap)
        except OSError as e:
            logger.warning(f"⚠️ Could not write sidecar for {recap.path.name}: {e}")

    async def _notify(self, recap: Recap) -> None:
        for callback in list(self._subscribers):
            try:
                outcome = callback(recap)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.warning(f"⚠️ Recap subscriber {getattr(callback, '__name__', callback)} failed: {e}")
