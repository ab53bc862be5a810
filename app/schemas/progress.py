"""
Pydantic schemas for profile, points, streak and counter endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional, Any
from datetime import date, datetime

from app.services.streak_service import StreakAction, StreakStatus


class PointsAward(BaseModel):
    """Request body for awarding points"""
    points: int = Field(..., gt=0, description="Points to add (positive)")


class PointsResponse(BaseModel):
    success: bool = True
    message: str
    previous_points: int
    new_total: int
    points_added: int


class StreakResponse(BaseModel):
    success: bool = True
    message: str
    previous_streak: int
    current_streak: int
    last_update_date: Optional[date] = None
    action: StreakAction


class CounterResponse(BaseModel):
    success: bool = True
    message: str
    column: str
    previous_count: int
    current_count: int
    user_id: str


class StreakDisplay(BaseModel):
    """Streak as shown on the dashboard"""
    status: StreakStatus
    display_streak: int
    last_update_date: Optional[date] = None
    streak_length: int


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    total_points: int
    current_streak: List[Any]  # [last_update_date | null, streak_length]
    streak: StreakDisplay
    counters: Dict[str, int]
    total_questions_attempted: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
