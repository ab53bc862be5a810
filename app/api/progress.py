"""
Profile and progress API endpoints: points, streak, counters, daily / weekly activity
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional
import logging

from app.database import get_db
from app.schemas.activity import (
    TodayIncrementResponse,
    TodayResetResponse,
    WeekResponse,
    WeekResetResponse,
)
from app.schemas.progress import (
    PointsAward,
    PointsResponse,
    StreakResponse,
    CounterResponse,
    ProfileResponse,
)
from app.services.activity_service import activity_service
from app.services.profile_service import profile_service
from app.services.streak_service import streak_service
from app.utils.identity import Identity, require_api_key, require_identity

router = APIRouter(prefix="/api", tags=["progress"])
logger = logging.getLogger(__name__)


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """
    Caller's profile: points, streak (stored pair and display status),
    per-category counters and total questions attempted
    """
    return ProfileResponse(**profile_service.get_profile(db, identity))


@router.post("/progress/points", response_model=PointsResponse)
def award_points(
    award: PointsAward,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Add points to the caller's total"""
    result = profile_service.award_points(db, identity, award.points)
    
    return PointsResponse(
        message=f"Successfully added {award.points} points",
        **result
    )


@router.post("/progress/streak", response_model=StreakResponse)
def update_streak(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """
    Record today's activity for the caller's streak
    
    - Same day: no change (safe to retry)
    - Consecutive day: incremented
    - First ever: started at 1
    - Gap of 2+ days: reset to 1
    """
    update = streak_service.update_streak(db, identity)
    
    if update.changed:
        message = f"Streak {update.action} successfully"
    else:
        message = "Streak already updated today"
    
    return StreakResponse(
        message=message,
        previous_streak=update.previous.streak_length,
        current_streak=update.current.streak_length,
        last_update_date=update.current.last_update_date,
        action=update.action
    )


@router.post("/progress/counters/{column}", response_model=CounterResponse)
def increment_counter(
    column: str,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Increment one allow-listed progress counter by exactly 1"""
    result = profile_service.increment_counter(db, identity, column)
    
    return CounterResponse(
        message=f"{column} incremented successfully",
        **result
    )


@router.post("/progress/today/{column}", response_model=TodayIncrementResponse)
def record_today(
    column: str,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Count one unit of today's activity for an allow-listed column"""
    result = activity_service.record_today(db, identity, column)

    suffix = " (new record created)" if result["action"] == "created_and_incremented" else ""
    return TodayIncrementResponse(
        message=f"{column} incremented successfully{suffix}",
        **result
    )


@router.post("/activity/today/reset", response_model=TodayResetResponse)
def reset_today(
    column: Optional[str] = Query(None),
    api_key: str = Depends(require_api_key),
    db: Session = Depends(get_db)
):
    """
    Zero today's counts for all users (API key required)

    Pass `column` to reset a single counter. The response carries per-column
    total / max / avg from before the reset.
    """
    result = activity_service.reset_today(db, column)
    return TodayResetResponse(timestamp=datetime.now(timezone.utc), **result)


@router.get("/activity/week/{uid}", response_model=WeekResponse)
def get_week(
    uid: str,
    api_key: str = Depends(require_api_key),
    db: Session = Depends(get_db)
):
    """One user's week history with total / average / max / min per column (API key required)"""
    result = activity_service.get_week(db, uid)
    return WeekResponse(timestamp=datetime.now(timezone.utc), **result)


@router.post("/activity/week/reset", response_model=WeekResetResponse)
def reset_week(
    api_key: str = Depends(require_api_key),
    db: Session = Depends(get_db)
):
    """Clear all users' weekly history (API key required)"""
    result = activity_service.reset_week(db)
    return WeekResetResponse(timestamp=datetime.now(timezone.utc), **result)
