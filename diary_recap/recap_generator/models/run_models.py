"""
Recap run state models.

A run evaluates one period kind and walks Idle -> Checking -> Skipped | Composing -> Done | Failed.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .recap_models import RecapKind, RecapPeriod, Recap


class RunState(str, Enum):
    """States of a single recap attempt."""
    IDLE = "idle"
    CHECKING = "checking"
    SKIPPED = "skipped"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RunState.SKIPPED, RunState.DONE, RunState.FAILED})


class SkipReason(str, Enum):
    """Why a recap attempt ended without composing."""
    ALREADY_EXISTS = "already_exists"
    TOO_FEW_CLIPS = "too_few_clips"
    NO_PERIOD_CANDIDATE = "no_period_candidate"


class NecessityDecision(BaseModel):
    """Outcome of the necessity policy for one kind."""
    kind: RecapKind
    candidate: Optional[RecapPeriod] = Field(None, description="The period considered for generation")
    skip_reason: Optional[SkipReason] = None

    @property
    def needed(self) -> bool:
        return self.candidate is not None and self.skip_reason is None


class RecapRunResult(BaseModel):
    """Record of one recap attempt, including every state it passed through."""
    kind: RecapKind
    period: Optional[RecapPeriod] = None
    state: RunState = RunState.IDLE
    history: List[RunState] = Field(default_factory=lambda: [RunState.IDLE])
    skip_reason: Optional[SkipReason] = None
    recap: Optional[Recap] = None
    clip_count: int = 0
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, state: RunState) -> "RecapRunResult":
        """Move to a new state, refusing to leave a terminal one."""
        if self.is_terminal:
            raise ValueError(f"Run already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)
        if state in TERMINAL_STATES:
            self.finished_at = datetime.now()
        return self

    def skip(self, reason: SkipReason) -> "RecapRunResult":
        self.skip_reason = reason
        return self.transition(RunState.SKIPPED)

    def fail(self, error: Union[str, Exception]) -> "RecapRunResult":
        self.error = str(error)
        return self.transition(RunState.FAILED)

    def done(self, recap: Recap) -> "RecapRunResult":
        self.recap = recap
        return self.transition(RunState.DONE)
