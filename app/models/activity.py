"""
Activity models - per-user counts for the current day and the rolling week history
"""
from sqlalchemy import Column, String, Integer, Text

from app.database import Base


class DailyActivity(Base):
    """
    today table - one row per user, counters for the current day only.
    A scheduled job zeroes every row at the day boundary.
    """
    __tablename__ = "today"

    uid = Column(String(36), primary_key=True)

    coding_questions_attempted = Column(Integer, default=0)
    technical_questions_attempted = Column(Integer, default=0)
    fundamental_questions_attempted = Column(Integer, default=0)
    aptitude_questions_attempted = Column(Integer, default=0)
    hr_questions_attempted = Column(Integer, default=0)
    tech_topics_covered = Column(Integer, default=0)
    artificial_intelligence_topics_covered = Column(Integer, default=0)
    system_design_covered = Column(Integer, default=0)
    java_lang_covered = Column(Integer, default=0)
    python_lang_covered = Column(Integer, default=0)
    sql_lang_covered = Column(Integer, default=0)

    def counter(self, column: str) -> int:
        return getattr(self, column) or 0

    def __repr__(self):
        return f"<DailyActivity(uid={self.uid})>"


class WeeklyActivity(Base):
    """
    week table - one row per user; each column holds that counter's daily
    values as a comma-separated string, oldest first (e.g. "3,0,5").
    """
    __tablename__ = "week"

    uid = Column(String(36), primary_key=True)

    coding_questions_attempted = Column(Text, default="")
    technical_questions_attempted = Column(Text, default="")
    fundamental_questions_attempted = Column(Text, default="")
    aptitude_questions_attempted = Column(Text, default="")
    hr_questions_attempted = Column(Text, default="")
    tech_topics_covered = Column(Text, default="")
    artificial_intelligence_topics_covered = Column(Text, default="")
    system_design_covered = Column(Text, default="")
    java_lang_covered = Column(Text, default="")
    python_lang_covered = Column(Text, default="")
    sql_lang_covered = Column(Text, default="")
    focus = Column(Text, default="")  # daily focus time; read here, never reset

    def __repr__(self):
        return f"<WeeklyActivity(uid={self.uid})>"
