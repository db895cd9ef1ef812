from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..config import config
from ..recap_generator.exceptions.recap_exceptions import (
    ParseError, RecapDeletionForbiddenError, StorageUnavailableError
)
from ..recap_generator.library_service import VideoLibraryService
from ..recap_generator.models.recap_models import (
    DailyClip, LibraryOverview, MonthPeriod, Recap, RecapConfiguration, RecapKind
)
from ..recap_generator.necessity_policy import RecapNecessityPolicy
from ..recap_generator.recap_assembler import RecapAssembler
from ..recap_generator.recap_orchestrator import RecapOrchestrator
from ..recap_generator.utils.ffmpeg_utils import FFmpegUtils
from ..recap_generator.video_library import VideoLibraryIndex
from ..utils.logger_utils import setup_logging

logger = setup_logging(__name__)


# Response models
class ClipResponse(BaseModel):
    id: str
    filename: str
    captured_at: datetime
    day: date

    @classmethod
    def from_clip(cls, clip: DailyClip):
        return cls(id=clip.id, filename=clip.path.name, captured_at=clip.captured_at, day=clip.day)


class RecapResponse(BaseModel):
    id: str
    kind: RecapKind
    period: str
    title: str
    filename: str
    start_date: date
    end_date: date
    source_clips: List[str] = []
    skipped_clips: List[str] = []
    duration_seconds: Optional[float] = None
    generated_at: Optional[datetime] = None

    @classmethod
    def from_recap(cls, recap: Recap):
        return cls(
            id=recap.id,
            kind=recap.kind,
            period=recap.period.token,
            title=recap.title,
            filename=recap.path.name,
            start_date=recap.period.start_date,
            end_date=recap.period.end_date,
            source_clips=[clip.name for clip in recap.source_clips],
            skipped_clips=recap.skipped_clips,
            duration_seconds=recap.duration_seconds,
            generated_at=recap.generated_at
        )


class LibraryResponse(BaseModel):
    year: int
    month: int
    title: str
    clips: List[ClipResponse]
    weekly_recap: Optional[RecapResponse] = None
    monthly_recap: Optional[RecapResponse] = None
    has_recorded_today: bool
    storage_error: Optional[str] = None

    @classmethod
    def from_overview(cls, overview: LibraryOverview):
        return cls(
            year=overview.displayed_month.year,
            month=overview.displayed_month.month,
            title=overview.displayed_month.title,
            clips=[ClipResponse.from_clip(clip) for clip in overview.clips],
            weekly_recap=RecapResponse.from_recap(overview.weekly_recap) if overview.weekly_recap else None,
            monthly_recap=RecapResponse.from_recap(overview.monthly_recap) if overview.monthly_recap else None,
            has_recorded_today=overview.has_recorded_today,
            storage_error=overview.storage_error
        )


class TodayResponse(BaseModel):
    has_recorded_today: bool
    seconds_until_next_recording: float
    next_reminder_at: datetime


class RunRequest(BaseModel):
    kind: Optional[RecapKind] = None
    now: Optional[datetime] = None


class RunAcceptedResponse(BaseModel):
    status: str
    kinds: List[RecapKind]


def build_services(videos_dir: Optional[str] = None):
    """Wire the library service and orchestrator from config.ini settings."""
    recap_config = RecapConfiguration.from_config(config)
    index = VideoLibraryIndex(videos_dir or config.videos_dir)
    policy = RecapNecessityPolicy(recap_config)
    assembler = RecapAssembler(FFmpegUtils(recap_config), recap_config)
    orchestrator = RecapOrchestrator(index, assembler, policy, recap_config)
    service = VideoLibraryService(index, policy, reminder_hour=config.reminder_hour)
    return service, orchestrator


def create_app(service: Optional[VideoLibraryService] = None,
               orchestrator: Optional[RecapOrchestrator] = None) -> FastAPI:
    """Create the API application around the given services."""
    if service is None or orchestrator is None:
        default_service, default_orchestrator = build_services()
        service = service or default_service
        orchestrator = orchestrator or default_orchestrator

    app = FastAPI(title="Video Diary Recap API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = service
    app.state.orchestrator = orchestrator

    @app.get("/api/health")
    def health():
        return {"status": "ok", "videos_dir": str(service.index.videos_dir)}

    @app.get("/api/library", response_model=LibraryResponse)
    def get_library(year: Optional[int] = Query(None, ge=1, le=9999),
                    month: Optional[int] = Query(None, ge=1, le=12)):
        now = datetime.now()
        if (year is None) != (month is None):
            raise HTTPException(status_code=400, detail="year and month must be given together")
        displayed = MonthPeriod(year=year, month=month) if year is not None else None
        overview = service.get_month_overview(displayed, now)
        return LibraryResponse.from_overview(overview)

    @app.get("/api/recaps", response_model=List[RecapResponse])
    def get_recaps():
        return [RecapResponse.from_recap(recap) for recap in service.list_recaps()]

    @app.get("/api/today", response_model=TodayResponse)
    def get_today():
        now = datetime.now()
        remaining: timedelta = service.time_until_next_recording(now)
        return TodayResponse(
            has_recorded_today=remaining > timedelta(0),
            seconds_until_next_recording=remaining.total_seconds(),
            next_reminder_at=service.next_reminder_at(now)
        )

    @app.post("/api/recaps/run", status_code=202, response_model=RunAcceptedResponse)
    async def run_recaps(background_tasks: BackgroundTasks, request: Optional[RunRequest] = None):
        request = request or RunRequest()
        if request.kind == RecapKind.WEEKLY:
            background_tasks.add_task(orchestrator.run_weekly, request.now)
            kinds = [RecapKind.WEEKLY]
        elif request.kind == RecapKind.MONTHLY:
            background_tasks.add_task(orchestrator.run_monthly, request.now)
            kinds = [RecapKind.MONTHLY]
        else:
            background_tasks.add_task(orchestrator.run, request.now)
            kinds = [RecapKind.WEEKLY, RecapKind.MONTHLY]
        logger.info(f"🚀 Recap run queued ({', '.join(k.value for k in kinds)})")
        return RunAcceptedResponse(status="accepted", kinds=kinds)

    @app.delete("/api/clips/{filename}", status_code=204)
    def delete_clip(filename: str):
        try:
            deleted = service.delete_clip(filename)
        except RecapDeletionForbiddenError as e:
            raise HTTPException(status_code=403, detail=e.message)
        except ParseError as e:
            raise HTTPException(status_code=400, detail=e.message)
        except StorageUnavailableError as e:
            logger.error(f"❌ Error deleting clip {filename}: {e}")
            raise HTTPException(status_code=503, detail=e.message)
        if not deleted:
            raise HTTPException(status_code=404, detail="Clip not found")
        return Response(status_code=204)

    return app


app = create_app()
