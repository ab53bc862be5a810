"""
UserProgress model - one row per learner in the users table
"""
from sqlalchemy import Column, String, Integer, TIMESTAMP, JSON, text
from app.database import Base


# Counters that the increment endpoint may touch. Anything else is rejected
# before the store is queried.
COUNTER_COLUMNS = (
    "coding_questions_attempted",
    "technical_questions_attempted",
    "fundamental_questions_attempted",
    "aptitude_questions_attempted",
    "hr_questions_attempted",
    "tech_topics_covered",
    "artificial_intelligence_topics_covered",
    "system_design_covered",
    "java_lang_covered",
    "python_lang_covered",
    "sql_lang_covered",
)

# Summed into total_questions_attempted on the profile and leaderboard
PRIMARY_COUNTERS = (
    "coding_questions_attempted",
    "technical_questions_attempted",
    "fundamental_questions_attempted",
)


class UserProgress(Base):
    """
    Users table - points, streak and per-category progress counters.
    Rows are created by the signup flow; this service only mutates them.
    """
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, index=True)
    total_points = Column(Integer, default=0, nullable=False)
    current_streak = Column(JSON)  # ["2024-01-01", 5]
    
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
    
    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(
        TIMESTAMP,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP")
    )
    
    def counter(self, column: str) -> int:
        """Current value of a counter column, treating NULL as 0"""
        return getattr(self, column) or 0
    
    def __repr__(self):
        return f"<UserProgress(id={self.id}, email={self.email}, points={self.total_points})>"
