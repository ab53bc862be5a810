"""
Leaderboard: users ranked by total points
"""
import logging
from typing import Dict, Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models import UserProgress
from app.services.errors import StoreError, ValidationError
from app.services.streak_service import StreakState
from app.utils.cache import cache_service

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    Ranks are positional within the requested page (offset + index + 1).
    Ties in total_points fall back to id order so pages are stable.
    """
    
    def _validate(self, limit: int, offset: int):
        if limit < 1 or limit > settings.LEADERBOARD_MAX_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {settings.LEADERBOARD_MAX_LIMIT}"
            )
        if offset < 0:
            raise ValidationError("offset must be non-negative")
    
    def _entry(self, user: UserProgress, rank: int) -> Dict[str, Any]:
        coding = user.counter("coding_questions_attempted")
        technical = user.counter("technical_questions_attempted")
        fundamental = user.counter("fundamental_questions_attempted")
        
        return {
            "id": user.id,
            "email": user.email,
            "rank": rank,
            "total_points": user.total_points or 0,
            "current_streak": StreakState.from_column(user.current_streak).to_column(),
            "tech_topics_covered": user.counter("tech_topics_covered"),
            "total_questions_attempted": coding + technical + fundamental,
            "categories": {
                "coding": coding,
                "technical": technical,
                "fundamental": fundamental,
                "aptitude": user.counter("aptitude_questions_attempted"),
            },
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }
    
    def get_leaderboard(self, db: Session, limit: int = None, offset: int = 0) -> Dict[str, Any]:
        """
        One page of the leaderboard
        
        Args:
            db: Database session
            limit: page size (1..LEADERBOARD_MAX_LIMIT)
            offset: rows to skip
            
        Returns:
            {"leaderboard", "stats", "pagination"}
        """
        limit = settings.LEADERBOARD_DEFAULT_LIMIT if limit is None else limit
        self._validate(limit, offset)
        
        key = cache_service.leaderboard_key(limit, offset)
        cached = cache_service.get(key)
        if cached is not None:
            return cached
        
        try:
            users = (
                db.query(UserProgress)
                .order_by(UserProgress.total_points.desc(), UserProgress.id.asc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            total = db.query(func.count(UserProgress.id)).scalar() or 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Leaderboard fetch failed: {str(e)}")
            raise StoreError("Failed to fetch leaderboard")
        
        entries = [self._entry(user, offset + index + 1) for index, user in enumerate(users)]
        has_next = (offset + limit) < total
        
        result = {
            "leaderboard": entries,
            "stats": {
                "total_users": total,
                "users_returned": len(entries),
                "top_score": entries[0]["total_points"] if entries else 0,
                "has_more": has_next,
            },
            "pagination": {
                "limit": limit,
                "offset": offset,
                "total": total,
                "has_next": has_next,
                "has_prev": offset > 0,
            },
        }
        
        logger.info(f"Leaderboard page limit={limit} offset={offset}: {len(entries)} of {total} users")
        
        cache_service.set(key, result, ttl=settings.LEADERBOARD_CACHE_TTL)
        return result


# Global instance
leaderboard_service = LeaderboardService()
