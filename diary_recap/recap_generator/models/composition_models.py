"""
Composition data models.

Models describing probed clips and the timeline handed to the export step.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class ClipProbe(BaseModel):
    """Container-level facts about one clip, as reported by the media backend."""
    duration: float = Field(description="Total container duration in seconds")
    has_video: bool = Field(description="Whether the clip carries a video stream")
    has_audio: bool = Field(False, description="Whether the clip carries an audio stream")
    width: Optional[int] = None
    height: Optional[int] = None


class TimelineSegment(BaseModel):
    """One clip placed on the composition timeline."""
    clip: Path
    start: float = Field(ge=0.0, description="Cursor position where the segment begins")
    duration: float = Field(gt=0.0, description="Full duration of the source clip")
    has_audio: bool = Field(False, description="False means silence is synthesized for this segment")

    @property
    def end(self) -> float:
        return self.start + self.duration


class SkippedClip(BaseModel):
    """A clip that was left out of a composition."""
    path: Path
    reason: str


class CompositionTimeline(BaseModel):
    """Ordered, gapless sequence of segments."""
    segments: List[TimelineSegment] = Field(default_factory=list)
    skipped: List[SkippedClip] = Field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.segments[-1].end if self.segments else 0.0

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def append(self, clip: Path, probe: ClipProbe) -> TimelineSegment:
        """Place a clip at the running cursor and advance it by the clip duration."""
        segment = TimelineSegment(
            clip=clip,
            start=self.duration,
            duration=probe.duration,
            has_audio=probe.has_audio
        )
        self.segments.append(segment)
        return segment

    def skip(self, clip: Path, reason: str) -> None:
        self.skipped.append(SkippedClip(path=clip, reason=reason))
