"""
Pydantic schemas for daily / weekly activity endpoints
"""
from pydantic import BaseModel
from typing import List, Dict, Literal
from datetime import datetime


class TodayIncrementResponse(BaseModel):
    success: bool = True
    message: str
    column: str
    previous_value: int
    current_value: int
    action: Literal["incremented", "created_and_incremented"]
    user_id: str


class ColumnTotals(BaseModel):
    """Per-column figures taken before a today reset"""
    total: int
    max: int
    avg: float


class TodayResetResponse(BaseModel):
    success: bool = True
    message: str
    reset_type: str
    columns_reset: List[str]
    total_records_before: int
    records_updated: int
    statistics_before_reset: Dict[str, ColumnTotals]
    timestamp: datetime


class HistoryStats(BaseModel):
    total: int
    average: float
    max: int
    min: int
    days: int
    daily_values: List[int]


class WeekResponse(BaseModel):
    success: bool = True
    message: str = "Week data fetched successfully"
    uid: str
    raw_data: Dict[str, str]
    statistics: Dict[str, HistoryStats]
    timestamp: datetime


class WeekColumnSummary(BaseModel):
    records_with_data: int
    total_days_tracked: int
    sample_values: List[str]


class WeekResetResponse(BaseModel):
    success: bool = True
    message: str
    reset_type: str
    columns_reset: List[str]
    total_records_before: int
    records_reset: int
    statistics_before_reset: Dict[str, WeekColumnSummary]
    timestamp: datetime
