"""
Static content tables - questions and topics addressed by dense integer ids
"""
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, UniqueConstraint, text
from app.database import Base


class ContentItemMixin:
    """Shared shape of every question/topic table: id, prompt text, optional answer"""
    
    id = Column(Integer, primary_key=True, autoincrement=False)
    question = Column(Text, nullable=False)
    answer = Column(Text)
    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))
    
    def __repr__(self):
        return f"<{type(self).__name__}(id={self.id})>"


class CodingQuestion(Base):
    """Coding questions keep their legacy column names (sr_no / approach)"""
    __tablename__ = "codingquestionrepo"
    
    id = Column("sr_no", Integer, primary_key=True, autoincrement=False)
    question = Column(Text, nullable=False)
    answer = Column("approach", Text)
    created_at = Column(TIMESTAMP, server_default=text("CURRENT_TIMESTAMP"))
    
    def __repr__(self):
        return f"<CodingQuestion(sr_no={self.id})>"


class TechnicalQuestion(ContentItemMixin, Base):
    __tablename__ = "technical_questions"


class FundamentalQuestion(ContentItemMixin, Base):
    __tablename__ = "fundamental_questions"


class AptitudeQuestion(ContentItemMixin, Base):
    __tablename__ = "aptitude_questions"


class HRQuestion(ContentItemMixin, Base):
    __tablename__ = "hrquestionsrepo"


class TechTopic(ContentItemMixin, Base):
    __tablename__ = "tech_topics"


class SystemDesignTopic(ContentItemMixin, Base):
    __tablename__ = "system_design"


class AIMLTopic(ContentItemMixin, Base):
    __tablename__ = "ai_ml"


class Algorithm(ContentItemMixin, Base):
    __tablename__ = "algorithms"


class DataStructure(ContentItemMixin, Base):
    __tablename__ = "data_structure"


class ContentTopic(Base):
    """
    Optional display names for topic windows (e.g. items 51-100 of a category).
    Windows without a row here are still valid, just unnamed.
    """
    __tablename__ = "content_topics"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(50), nullable=False, index=True)
    topic_number = Column(Integer, nullable=False)
    topic_name = Column(String(255), nullable=False)
    description = Column(Text)
    
    __table_args__ = (
        UniqueConstraint("category", "topic_number", name="uq_content_topic"),
    )
    
    def __repr__(self):
        return f"<ContentTopic(category={self.category}, topic_number={self.topic_number})>"


class ContentCategory:
    """A browsable category: its table and the users counter that gates it"""
    
    def __init__(self, slug: str, model, progress_column=None):
        self.slug = slug
        self.model = model
        self.progress_column = progress_column
    
    @property
    def is_gated(self) -> bool:
        return self.progress_column is not None
    
    def __repr__(self):
        return f"<ContentCategory(slug={self.slug}, table={self.model.__tablename__})>"


CATEGORIES = {
    c.slug: c for c in (
        ContentCategory("coding", CodingQuestion, "coding_questions_attempted"),
        ContentCategory("technical", TechnicalQuestion, "technical_questions_attempted"),
        ContentCategory("fundamental", FundamentalQuestion, "fundamental_questions_attempted"),
        ContentCategory("aptitude", AptitudeQuestion, "aptitude_questions_attempted"),
        ContentCategory("hr", HRQuestion, "hr_questions_attempted"),
        ContentCategory("tech-topic", TechTopic, "tech_topics_covered"),
        ContentCategory("system-design", SystemDesignTopic, "system_design_covered"),
        ContentCategory("ai-ml", AIMLTopic, "artificial_intelligence_topics_covered"),
        ContentCategory("algorithms", Algorithm),
        ContentCategory("data-structures", DataStructure),
    )
}
