from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ....db.session import get_db
from ....core.catalog import default_catalog
from ....core.config import settings
from ....core.lifecycle import ChallengeLifecycle
from ....core.persistence import ChallengeStore, SqlStorage
from ....schemas.challenges import (
    Challenge, ChallengeCollections, ChallengeStart, ChallengeStats,
    ChallengeTemplate, SavingsCreate, SavingsRecordedResponse,
)

router = APIRouter(tags=["challenges"])


def get_lifecycle(user_id: str, db: Session = Depends(get_db)) -> ChallengeLifecycle:
    """Per-request lifecycle loaded from storage for the user in the path"""
    return ChallengeLifecycle(user_id, ChallengeStore(SqlStorage(db))).load()


# ==================== CATALOG ====================

@router.get("/challenges/templates", response_model=List[ChallengeTemplate])
async def list_templates():
    """All challenge templates in catalog order"""
    return list(default_catalog.list_templates())


@router.get("/challenges/templates/{template_id}", response_model=ChallengeTemplate)
async def get_template(template_id: str):
    return default_catalog.get_template(template_id)


@router.get("/challenges/suggestions", response_model=List[ChallengeTemplate])
async def get_suggestions(count: Optional[int] = Query(None, ge=1, le=20)):
    """Random sample of templates to suggest"""
    return default_catalog.sample_suggestions(count or settings.SUGGESTION_COUNT)


# ==================== USER CHALLENGES ====================

@router.get("/users/{user_id}/challenges", response_model=ChallengeCollections)
async def get_challenges(lifecycle: ChallengeLifecycle = Depends(get_lifecycle)):
    """Active and completed challenges for user"""
    return ChallengeCollections(
        active=list(lifecycle.get_active_challenges()),
        completed=list(lifecycle.get_completed_challenges()),
    )


@router.get("/users/{user_id}/challenges/stats", response_model=ChallengeStats)
async def get_stats(
    tz: Optional[str] = Query(None, description="IANA zone used for streak days, UTC by default"),
    lifecycle: ChallengeLifecycle = Depends(get_lifecycle)
):
    if tz:
        try:
            lifecycle.tz = ZoneInfo(tz)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise HTTPException(status_code=400, detail=f"Unknown timezone: {tz}")
    return lifecycle.get_challenge_stats()


@router.get("/users/{user_id}/challenges/{challenge_id}", response_model=Challenge)
async def get_challenge(challenge_id: str, lifecycle: ChallengeLifecycle = Depends(get_lifecycle)):
    return lifecycle.get_challenge_by_id(challenge_id)


@router.post("/users/{user_id}/challenges", response_model=Challenge, status_code=status.HTTP_201_CREATED)
async def start_challenge(payload: ChallengeStart, lifecycle: ChallengeLifecycle = Depends(get_lifecycle)):
    return lifecycle.start_challenge(payload.template_id)


@router.post("/users/{user_id}/challenges/{challenge_id}/savings", response_model=SavingsRecordedResponse)
async def record_savings(
    challenge_id: str,
    payload: SavingsCreate,
    lifecycle: ChallengeLifecycle = Depends(get_lifecycle)
):
    """Record savings and return any milestone / completion notices"""
    notices = []
    lifecycle.notifier = notices.append

    challenge = lifecycle.record_savings(challenge_id, payload.amount, payload.notes)
    return {"challenge": challenge, "notices": notices}


@router.post("/users/{user_id}/challenges/{challenge_id}/complete", response_model=Challenge)
async def complete_challenge(challenge_id: str, lifecycle: ChallengeLifecycle = Depends(get_lifecycle)):
    return lifecycle.complete_challenge(challenge_id)


@router.delete("/users/{user_id}/challenges/{challenge_id}", response_model=Challenge)
async def cancel_challenge(challenge_id: str, lifecycle: ChallengeLifecycle = Depends(get_lifecycle)):
    return lifecycle.cancel_challenge(challenge_id)
