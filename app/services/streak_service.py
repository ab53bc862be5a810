"""
Daily streak tracking

The engine is a total function over (today, last_update_date, streak_length):

- same day          -> no_change
- never started     -> started      (length 1)
- yesterday         -> incremented  (length + 1)
- anything else     -> reset        (length 1), including a last date in the future

Calling it again on the same day is always a no-op, so retries are safe.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Literal, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.errors import StoreError, ValidationError
from app.services.profile_service import profile_service
from app.utils.cache import cache_service
from app.utils.identity import Identity

logger = logging.getLogger(__name__)

StreakAction = Literal["no_change", "started", "incremented", "reset"]
StreakStatus = Literal["none", "active", "pending", "broken"]


@dataclass(frozen=True)
class StreakState:
    last_update_date: Optional[date] = None
    streak_length: int = 0
    
    @classmethod
    def from_column(cls, value) -> "StreakState":
        """Parse the stored [date, length] pair; anything unreadable is the never-started state"""
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            return cls()
        
        raw_date, raw_length = value
        if not raw_date:
            return cls()
        
        try:
            last_date = date.fromisoformat(str(raw_date)[:10])
            length = int(raw_length or 0)
        except (TypeError, ValueError):
            logger.warning(f"Unparseable streak {value!r}, treating as never started")
            return cls()

        return cls(last_date, max(length, 0))
    
    def to_column(self) -> list:
        if self.last_update_date is None:
            return [None, 0]
        return [self.last_update_date.isoformat(), self.streak_length]


@dataclass(frozen=True)
class StreakUpdate:
    previous: StreakState
    current: StreakState
    action: StreakAction
    
    @property
    def changed(self) -> bool:
        return self.action != "no_change"


class StreakService:
    """Streak state machine plus its application to the users table"""
    
    def next_state(self, today: date, state: StreakState) -> StreakUpdate:
        """Compute the streak after a qualifying action on ``today``"""
        
        if state.last_update_date == today:
            return StreakUpdate(state, state, "no_change")
        
        if state.last_update_date is None:
            new_length, action = 1, "started"
        elif state.last_update_date == today - timedelta(days=1):
            new_length, action = state.streak_length + 1, "incremented"
        else:
            new_length, action = 1, "reset"
        
        return StreakUpdate(state, StreakState(today, new_length), action)
    
    def display_status(self, today: date, state: StreakState) -> Tuple[StreakStatus, int]:
        """
        Status and the streak number to show for a stored state
        
        A streak last extended yesterday is still alive (pending); anything
        older is broken and displays as 0.
        """
        if state.last_update_date is None:
            return "none", 0
        if state.last_update_date == today:
            return "active", state.streak_length
        if state.last_update_date == today - timedelta(days=1):
            return "pending", state.streak_length
        return "broken", 0
    
    def update_streak(
        self,
        db: Session,
        identity: Identity,
        today: Optional[date] = None
    ) -> StreakUpdate:
        """
        Apply today's qualifying action to the caller's stored streak
        
        Raises:
            NotFoundError: no profile for the identity
            StoreError: the write failed; the stored streak is unchanged
        """
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()
        elif not isinstance(today, date):
            raise ValidationError("today must be a calendar date")
        
        profile = profile_service.resolve_profile(db, identity)
        update = self.next_state(today, StreakState.from_column(profile.current_streak))
        
        if not update.changed:
            logger.info(f"Streak already updated today: user={profile.id}")
            return update
        
        try:
            profile.current_streak = update.current.to_column()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Streak update failed for user={profile.id}: {str(e)}")
            raise StoreError("Failed to update streak")
        
        logger.info(
            f"Streak {update.action}: user={profile.id}, "
            f"{update.previous.streak_length} -> {update.current.streak_length}"
        )
        
        # Leaderboard pages show the streak pair
        cache_service.clear_prefix("leaderboard:")
        
        return update


# Global instance
streak_service = StreakService()
