"""
Profile store access: identity -> users row, counter increments and point awards
"""
import logging
from datetime import date
from typing import Dict, Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import UserProgress, COUNTER_COLUMNS, PRIMARY_COUNTERS
from app.services.errors import NotFoundError, StoreError, ValidationError
from app.utils.cache import cache_service
from app.utils.identity import Identity

logger = logging.getLogger(__name__)


class ProfileService:
    """Every store-touching operation resolves its row through resolve_profile"""
    
    def find_profile(
        self,
        db: Session,
        identity: Identity,
        for_update: bool = False
    ) -> Optional[UserProgress]:
        """
        Look the caller up by primary id, then by lower-cased email
        
        Returns:
            The users row, or None when neither key matches
        """
        try:
            query = db.query(UserProgress)
            if for_update:
                query = query.with_for_update()
            
            profile = query.filter(UserProgress.id == identity.user_id).first()
            
            if profile is None and identity.email:
                logger.info(f"No profile for id={identity.user_id}, trying email lookup")
                profile = query.filter(UserProgress.email == identity.email.lower()).first()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Profile lookup failed for id={identity.user_id}: {str(e)}")
            raise StoreError("Failed to fetch profile")
        
        return profile
    
    def resolve_profile(
        self,
        db: Session,
        identity: Identity,
        for_update: bool = False
    ) -> UserProgress:
        """Like find_profile, but a missing row is a NotFoundError"""
        profile = self.find_profile(db, identity, for_update=for_update)
        if profile is None:
            raise NotFoundError(
                "User profile not found",
                user_id=identity.user_id
            )
        return profile
    
    def validate_counter(self, column: str) -> str:
        if column not in COUNTER_COLUMNS:
            raise ValidationError(
                f"Column '{column}' is not allowed for increment",
                allowed_columns=list(COUNTER_COLUMNS)
            )
        return column
    
    def increment_counter(self, db: Session, identity: Identity, column: str) -> Dict[str, Any]:
        """
        Add exactly 1 to one allow-listed counter
        
        The column name is validated before the store is queried. Columns are
        independent, so concurrent increments of different counters never
        conflict.
        
        Returns:
            {"column", "previous_count", "current_count", "user_id"}
        """
        column = self.validate_counter(column)
        profile = self.resolve_profile(db, identity, for_update=True)
        
        previous = profile.counter(column)
        
        try:
            setattr(profile, column, previous + 1)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Counter update failed: user={profile.id}, column={column}: {str(e)}")
            raise StoreError("Failed to update count")
        
        logger.info(f"Counter incremented: user={profile.id}, {column} {previous} -> {previous + 1}")
        
        # Leaderboard pages show per-category counts
        cache_service.clear_prefix("leaderboard:")
        
        return {
            "column": column,
            "previous_count": previous,
            "current_count": profile.counter(column),
            "user_id": profile.id,
        }
    
    def award_points(self, db: Session, identity: Identity, points: int) -> Dict[str, Any]:
        """
        Add a positive number of points to the caller's total
        
        Returns:
            {"previous_points", "new_total", "points_added"}
        """
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise ValidationError("Points must be a valid positive number")
        
        profile = self.resolve_profile(db, identity, for_update=True)
        previous = profile.total_points or 0
        
        try:
            profile.total_points = previous + points
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Points update failed for user={profile.id}: {str(e)}")
            raise StoreError("Failed to update points")
        
        logger.info(f"Awarded {points} points: user={profile.id}, {previous} -> {profile.total_points}")
        
        # Rankings changed
        cache_service.clear_prefix("leaderboard:")
        
        return {
            "previous_points": previous,
            "new_total": profile.total_points,
            "points_added": points,
        }
    
    def get_profile(self, db: Session, identity: Identity, today: Optional[date] = None) -> Dict[str, Any]:
        """Profile summary for the dashboard: points, streak, per-category counters"""
        # Local import: streak_service depends on this module
        from app.services.streak_service import streak_service, StreakState
        
        profile = self.resolve_profile(db, identity)
        today = today or date.today()
        
        state = StreakState.from_column(profile.current_streak)
        status, display_streak = streak_service.display_status(today, state)
        
        counters = {column: profile.counter(column) for column in COUNTER_COLUMNS}
        
        return {
            "id": profile.id,
            "email": profile.email,
            "total_points": profile.total_points or 0,
            "current_streak": state.to_column(),
            "streak": {
                "status": status,
                "display_streak": display_streak,
                "last_update_date": state.last_update_date,
                "streak_length": state.streak_length,
            },
            "counters": counters,
            "total_questions_attempted": sum(counters[c] for c in PRIMARY_COUNTERS),
            "created_at": profile.created_at,
            "updated_at": profile.updated_at,
        }


# Global instance
profile_service = ProfileService()
