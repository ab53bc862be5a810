"""
Daily and weekly activity tracking

The today table holds per-user counts for the current day. The week table holds
each counter's recent daily values as a comma-separated history. Both are
cleared in bulk by scheduled jobs, which get the pre-reset statistics back.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import COUNTER_COLUMNS, DailyActivity, WeeklyActivity
from app.services.errors import NotFoundError, StoreError, ValidationError
from app.services.profile_service import profile_service
from app.utils.identity import Identity

logger = logging.getLogger(__name__)

# Week history is reported for every counter plus focus time
WEEK_COLUMNS = COUNTER_COLUMNS + ("focus",)


def parse_history(value: Optional[str]) -> List[int]:
    """'3, 0,5' -> [3, 0, 5]; unreadable entries count as 0"""
    if not value or not value.strip():
        return []

    values = []
    for part in value.split(","):
        try:
            values.append(int(part.strip()))
        except ValueError:
            values.append(0)
    return values


def history_stats(values: List[int]) -> Dict[str, Any]:
    if not values:
        return {"total": 0, "average": 0, "max": 0, "min": 0, "days": 0, "daily_values": []}

    total = sum(values)
    return {
        "total": total,
        "average": round(total / len(values), 2),
        "max": max(values),
        "min": min(values),
        "days": len(values),
        "daily_values": values,
    }


class ActivityService:
    """Per-day counters, week history reads and the bulk resets"""

    def record_today(self, db: Session, identity: Identity, column: str) -> Dict[str, Any]:
        """
        Add 1 to one of the caller's counters for today, creating the row on first use

        Returns:
            {"column", "previous_value", "current_value", "action", "user_id"}
        """
        column = profile_service.validate_counter(column)

        try:
            row = (
                db.query(DailyActivity)
                .with_for_update()
                .filter(DailyActivity.uid == identity.user_id)
                .first()
            )

            if row is None:
                row = DailyActivity(uid=identity.user_id, **{column: 1})
                db.add(row)
                previous, action = 0, "created_and_incremented"
            else:
                previous = row.counter(column)
                setattr(row, column, previous + 1)
                action = "incremented"

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Today update failed: user={identity.user_id}, column={column}: {str(e)}")
            raise StoreError("Failed to update today's activity")

        logger.info(f"Today {action}: user={identity.user_id}, {column} {previous} -> {previous + 1}")

        return {
            "column": column,
            "previous_value": previous,
            "current_value": row.counter(column),
            "action": action,
            "user_id": identity.user_id,
        }

    def reset_today(self, db: Session, column: Optional[str] = None) -> Dict[str, Any]:
        """
        Zero today's counters for every user, either all columns or just one

        Statistics ({total, max, avg} per column) are taken before the reset.
        """
        if column is not None and column not in COUNTER_COLUMNS:
            raise ValidationError(
                f"Column '{column}' is not allowed for reset",
                resettable_columns=list(COUNTER_COLUMNS)
            )
        columns = [column] if column else list(COUNTER_COLUMNS)

        try:
            rows = db.query(DailyActivity).all()

            if not rows:
                return {
                    "message": "No records found to reset",
                    "reset_type": "no_records",
                    "columns_reset": [],
                    "total_records_before": 0,
                    "records_updated": 0,
                    "statistics_before_reset": {},
                }

            statistics = {}
            for name in columns:
                values = [row.counter(name) for row in rows]
                statistics[name] = {
                    "total": sum(values),
                    "max": max(values),
                    "avg": round(sum(values) / len(values), 2),
                }

            updated = (
                db.query(DailyActivity)
                .update({name: 0 for name in columns}, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Today reset failed: {str(e)}")
            raise StoreError("Failed to reset counts for all users")

        logger.info(f"Today reset: {updated} rows, columns={column or 'all'}")

        return {
            "message": (
                f"{column} reset to 0 for all users successfully" if column
                else "All counts reset to 0 for all users successfully"
            ),
            "reset_type": "single_column_all_users" if column else "all_columns_all_users",
            "columns_reset": columns,
            "total_records_before": len(rows),
            "records_updated": updated,
            "statistics_before_reset": statistics,
        }

    def get_week(self, db: Session, uid: str) -> Dict[str, Any]:
        """One user's week history: raw strings plus per-column statistics"""
        if not uid:
            raise ValidationError("uid is required")

        try:
            row = db.query(WeeklyActivity).filter(WeeklyActivity.uid == uid).first()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Week fetch failed for uid={uid}: {str(e)}")
            raise StoreError("Failed to fetch week data")

        if row is None:
            raise NotFoundError(f"No week data found for UID: {uid}", uid=uid)

        raw = {name: getattr(row, name) or "" for name in WEEK_COLUMNS}

        return {
            "uid": row.uid,
            "raw_data": raw,
            "statistics": {name: history_stats(parse_history(value)) for name, value in raw.items()},
        }

    def reset_week(self, db: Session) -> Dict[str, Any]:
        """Clear every user's counter history; focus history is kept"""
        try:
            rows = db.query(WeeklyActivity).all()

            if not rows:
                return {
                    "message": "No week records found to reset",
                    "reset_type": "no_records",
                    "columns_reset": [],
                    "total_records_before": 0,
                    "records_reset": 0,
                    "statistics_before_reset": {},
                }

            statistics = {}
            for name in COUNTER_COLUMNS:
                with_data = [getattr(row, name) for row in rows if (getattr(row, name) or "").strip()]
                statistics[name] = {
                    "records_with_data": len(with_data),
                    "total_days_tracked": sum(len(value.split(",")) for value in with_data),
                    "sample_values": with_data[:3],
                }

            reset = (
                db.query(WeeklyActivity)
                .update({name: "" for name in COUNTER_COLUMNS}, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Week reset failed: {str(e)}")
            raise StoreError("Failed to reset week table")

        logger.info(f"Week history cleared for {reset} rows")

        return {
            "message": "Week table reset successfully - all historical data cleared",
            "reset_type": "full_week_table_reset",
            "columns_reset": list(COUNTER_COLUMNS),
            "total_records_before": len(rows),
            "records_reset": reset,
            "statistics_before_reset": statistics,
        }


# Global instance
activity_service = ActivityService()
