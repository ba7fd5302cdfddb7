from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple
from datetime import datetime
from decimal import Decimal
from enum import Enum


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class SavingsFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NoticeType(str, Enum):
    SUCCESS = "success"
    INFO = "info"


class MilestoneDefinition(BaseModel):
    progress_threshold: int = Field(..., ge=0, le=100)
    reward: str

    class Config:
        frozen = True


class MilestoneClaim(BaseModel):
    progress_threshold: int
    reward: str
    claimed: bool = False


class SavingsEntry(BaseModel):
    date: datetime
    amount: Decimal = Field(..., gt=0)
    notes: str = ""


class ChallengeDefinition(BaseModel):
    """Fields shared by catalog templates and the challenges started from them"""
    id: str
    title: str
    description: str
    duration_days: int = Field(..., gt=0)
    target_amount: Decimal = Field(..., gt=0)
    difficulty: Difficulty
    savings_frequency: SavingsFrequency
    tip_amount: Decimal = Decimal("0")
    category: Optional[str] = None
    image: str = ""
    rewards: Tuple[str, ...] = ()
    milestones: Tuple[MilestoneDefinition, ...]

    @field_validator("milestones")
    @classmethod
    def check_milestones(cls, milestones):
        if not milestones:
            raise ValueError("at least one milestone is required")

        thresholds = [m.progress_threshold for m in milestones]
        for previous, current in zip(thresholds, thresholds[1:]):
            if current <= previous:
                raise ValueError(f"milestone thresholds must strictly increase: {thresholds}")

        if thresholds[-1] != 100:
            raise ValueError(f"last milestone must be at 100%, got {thresholds[-1]}")

        return milestones


class ChallengeTemplate(ChallengeDefinition):
    """Catalog blueprint for a challenge"""

    class Config:
        frozen = True


class Challenge(ChallengeDefinition):
    """A user's instance of a template"""
    start_date: datetime
    end_date: datetime
    current_amount: Decimal = Field(Decimal("0.00"), ge=0)
    progress: int = Field(0, ge=0, le=100)
    entries: List[SavingsEntry] = Field(default_factory=list)
    last_updated: datetime
    status: ChallengeStatus = ChallengeStatus.ACTIVE
    milestones_claimed: List[MilestoneClaim] = Field(default_factory=list)
    completed_date: Optional[datetime] = None


class ChallengeCollections(BaseModel):
    active: List[Challenge] = Field(default_factory=list)
    completed: List[Challenge] = Field(default_factory=list)


class ClaimedMilestone(BaseModel):
    threshold_index: int
    reward: str


class ChallengeNotice(BaseModel):
    """User-facing notification (rendered as a toast by the client)"""
    title: str
    message: str
    type: NoticeType = NoticeType.SUCCESS
    duration_ms: int = 5000


class ChallengeStats(BaseModel):
    total_active: int
    total_completed: int
    total_saved: Decimal
    streak_days: int


# ==================== API PAYLOADS ====================

class ChallengeStart(BaseModel):
    template_id: str


class SavingsCreate(BaseModel):
    amount: Decimal
    notes: str = ""


class SavingsRecordedResponse(BaseModel):
    challenge: Challenge
    notices: List[ChallengeNotice]
