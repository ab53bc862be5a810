"""
Leaderboard API endpoint
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from app.config import settings
from app.database import get_db
from app.schemas.leaderboard import LeaderboardResponse
from app.services.leaderboard_service import leaderboard_service

router = APIRouter(prefix="/api", tags=["leaderboard"])
logger = logging.getLogger(__name__)


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    limit: int = Query(settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=settings.LEADERBOARD_MAX_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """
    Users ranked by total points, descending
    
    Rank is positional: offset + index + 1 within the requested page.
    """
    return LeaderboardResponse(**leaderboard_service.get_leaderboard(db, limit=limit, offset=offset))
