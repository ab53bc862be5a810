"""
Database models package
"""
from app.models.user_progress import UserProgress, COUNTER_COLUMNS, PRIMARY_COUNTERS
from app.models.activity import DailyActivity, WeeklyActivity
from app.models.content import (
    CodingQuestion,
    TechnicalQuestion,
    FundamentalQuestion,
    AptitudeQuestion,
    HRQuestion,
    TechTopic,
    SystemDesignTopic,
    AIMLTopic,
    Algorithm,
    DataStructure,
    ContentTopic,
    ContentCategory,
    CATEGORIES,
)

__all__ = [
    "UserProgress",
    "COUNTER_COLUMNS",
    "PRIMARY_COUNTERS",
    "DailyActivity",
    "WeeklyActivity",
    "CodingQuestion",
    "TechnicalQuestion",
    "FundamentalQuestion",
    "AptitudeQuestion",
    "HRQuestion",
    "TechTopic",
    "SystemDesignTopic",
    "AIMLTopic",
    "Algorithm",
    "DataStructure",
    "ContentTopic",
    "ContentCategory",
    "CATEGORIES",
]
