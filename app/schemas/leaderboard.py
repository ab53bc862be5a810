"""
Pydantic schemas for the leaderboard
"""
from pydantic import BaseModel
from typing import List, Any, Optional
from datetime import datetime


class CategoryCounts(BaseModel):
    coding: int
    technical: int
    fundamental: int
    aptitude: int


class LeaderboardEntry(BaseModel):
    """One ranked user; rank is positional within the requested page"""
    id: str
    email: Optional[str] = None
    rank: int
    total_points: int
    current_streak: List[Any]
    tech_topics_covered: int
    total_questions_attempted: int
    categories: CategoryCounts
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeaderboardStats(BaseModel):
    total_users: int
    users_returned: int
    top_score: int
    has_more: bool


class LeaderboardPagination(BaseModel):
    limit: int
    offset: int
    total: int
    has_next: bool
    has_prev: bool


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]
    stats: LeaderboardStats
    pagination: LeaderboardPagination
