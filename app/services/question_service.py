"""
Question pager over the static content tables

Content ids are dense and start at 1, so every access mode is plain range
arithmetic on the id: sequential (id, id + 1), windowed ([start, start + W - 1])
and random (uniform over [1, total]).
"""
import logging
import random
from typing import Dict, Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models import CATEGORIES, ContentCategory, ContentTopic
from app.services.errors import ForbiddenError, NotFoundError, StoreError, ValidationError
from app.services.profile_service import profile_service
from app.services.progress_gate import progress_gate
from app.utils.cache import cache_service
from app.utils.identity import Identity

logger = logging.getLogger(__name__)


def serialize_item(item) -> Dict[str, Any]:
    return {
        "id": item.id,
        "question": item.question,
        "answer": item.answer,
        "created_at": item.created_at,
    }


class QuestionService:
    """Sequential, windowed and random retrieval plus topic views"""
    
    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.Random()
    
    def get_category(self, slug: str) -> ContentCategory:
        category = CATEGORIES.get(slug)
        if category is None:
            raise NotFoundError(f"Unknown category '{slug}'", categories=sorted(CATEGORIES))
        return category
    
    def _check_id(self, value: int, name: str = "question_id"):
        if value is None or value < 1:
            raise ValidationError(f"{name} must be a positive integer")
    
    def count_items(self, db: Session, category: ContentCategory) -> int:
        """Number of items in a category (cached; content is static)"""
        key = cache_service.content_count_key(category.slug)
        cached = cache_service.get(key)
        if cached is not None:
            return int(cached)
        
        try:
            total = db.query(func.count(category.model.id)).scalar() or 0
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Count query failed for {category.slug}: {str(e)}")
            raise StoreError("Failed to count questions")
        
        cache_service.set(key, total, ttl=settings.CONTENT_COUNT_CACHE_TTL)
        return total
    
    def _fetch_one(self, db: Session, category: ContentCategory, item_id: int):
        try:
            return db.query(category.model).filter(category.model.id == item_id).first()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Question fetch failed for {category.slug}#{item_id}: {str(e)}")
            raise StoreError("Failed to fetch question")
    
    def _fetch_range(self, db: Session, category: ContentCategory, start: int, end: int) -> list:
        model = category.model
        try:
            return (
                db.query(model)
                .filter(model.id >= start, model.id <= end)
                .order_by(model.id.asc())
                .limit(end - start + 1)
                .all()
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Range fetch failed for {category.slug}[{start}, {end}]: {str(e)}")
            raise StoreError("Failed to fetch questions")
    
    def attempted_count(
        self,
        db: Session,
        category: ContentCategory,
        identity: Optional[Identity]
    ) -> int:
        """Caller's progress counter for a category; 0 when anonymous, ungated or profile-less"""
        if identity is None or not category.is_gated:
            return 0
        
        profile = profile_service.find_profile(db, identity)
        if profile is None:
            logger.info(f"No profile for {identity.user_id}, progress treated as 0")
            return 0
        
        return profile.counter(category.progress_column)

    def _check_access(
        self,
        category: ContentCategory,
        identity: Optional[Identity],
        attempted: int,
        question_id: int
    ):
        """Refuse items beyond attempted + 1 for identified callers in gated categories"""
        if identity is None or not category.is_gated:
            return

        if progress_gate.item(attempted, question_id).locked:
            logger.info(
                f"Locked item refused: user={identity.user_id}, "
                f"{category.slug}#{question_id}, attempted={attempted}"
            )
            raise ForbiddenError(
                f"You can only access questions 1-{attempted + 1}.",
                requested_id=question_id,
                max_accessible=attempted + 1
            )

    def get_sequential(
        self,
        db: Session,
        slug: str,
        identity: Optional[Identity] = None,
        question_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        One item plus the id to move to next
        
        Without an explicit id the caller resumes at attempted + 1
        (item 1 for anonymous callers). Identified callers asking for a
        locked item get a ForbiddenError.
        """
        category = self.get_category(slug)
        attempted = self.attempted_count(db, category, identity)

        if question_id is None:
            question_id = attempted + 1
        self._check_id(question_id)
        self._check_access(category, identity, attempted, question_id)

        item = self._fetch_one(db, category, question_id)
        if item is None:
            if question_id == attempted + 1 and attempted > 0:
                raise NotFoundError(
                    "Congratulations! You have completed all available questions!",
                    last_attempted=attempted,
                    total_completed=attempted
                )
            raise NotFoundError(f"Question #{question_id} not found.", requested_id=question_id)
        
        gate = progress_gate.item(attempted, question_id)
        
        return {
            "category": category.slug,
            "mode": "sequential",
            "question": serialize_item(item),
            "next_question_id": question_id + 1,
            "last_attempted": attempted,
            "progress": {
                "current_question": question_id,
                "questions_completed": attempted,
                "completed": gate.completed if category.is_gated else True,
                "accessible": gate.accessible if category.is_gated else True,
            },
        }
    
    def get_window(
        self,
        db: Session,
        slug: str,
        question_id: Optional[int] = None,
        start: Optional[int] = None,
        window_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Up to window_size consecutive items from start, with pagination hints
        
        The item matching question_id (the one originally asked for) is tagged
        is_current.
        """
        category = self.get_category(slug)
        window_size = window_size or settings.QUESTION_WINDOW_SIZE
        
        if start is None:
            start = question_id if question_id is not None else 1
        if question_id is None:
            question_id = start
        self._check_id(start, "start")
        self._check_id(question_id)
        
        end = start + window_size - 1
        total = self.count_items(db, category)
        items = self._fetch_range(db, category, start, end)
        
        if not items:
            raise NotFoundError(
                f"No questions found starting at #{start}.",
                requested_id=start,
                total_questions=total
            )
        
        questions = []
        for item in items:
            entry = serialize_item(item)
            entry["is_current"] = item.id == question_id
            questions.append(entry)
        
        return {
            "category": category.slug,
            "mode": "window",
            "questions": questions,
            "meta": {
                "start_question_id": start,
                "total_questions": total,
                "questions_fetched": len(questions),
                "range": {
                    "requested_start": start,
                    "requested_end": end,
                    "actual_start": items[0].id,
                    "actual_end": items[-1].id,
                },
                "pagination": {
                    "has_previous": start > 1,
                    "has_next": start + window_size <= total,
                    "previous_start": max(1, start - window_size),
                    "next_start": start + window_size,
                },
            },
        }
    
    def get_random(
        self,
        db: Session,
        slug: str,
        identity: Optional[Identity] = None,
        question_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        A uniformly random item from [1, total]; an explicit id is served as-is.
        Either way a fresh random id is suggested for the next call.

        For identified callers in gated categories the pool shrinks to the
        accessible items [1, attempted + 1], and explicit locked ids are refused.
        """
        category = self.get_category(slug)
        total = self.count_items(db, category)

        if total == 0:
            raise NotFoundError(f"No questions available in '{category.slug}'.")

        attempted = self.attempted_count(db, category, identity)
        upper = total
        if identity is not None and category.is_gated:
            upper = min(total, attempted + 1)

        if question_id is None:
            question_id = self.rng.randint(1, upper)
        self._check_id(question_id)
        self._check_access(category, identity, attempted, question_id)

        item = self._fetch_one(db, category, question_id)
        if item is None:
            raise NotFoundError(f"Question #{question_id} not found.", requested_id=question_id)
        
        return {
            "category": category.slug,
            "mode": "random",
            "question": serialize_item(item),
            "next_question_id": self.rng.randint(1, upper),
            "total_questions": total,
        }
    
    def _topic_names(self, db: Session, category: ContentCategory) -> Dict[int, ContentTopic]:
        try:
            rows = db.query(ContentTopic).filter(ContentTopic.category == category.slug).all()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Topic fetch failed for {category.slug}: {str(e)}")
            raise StoreError("Failed to fetch topics")
        return {row.topic_number: row for row in rows}
    
    def _topic_entry(
        self,
        topic_id: int,
        attempted: int,
        current_topic: int,
        named: Optional[ContentTopic]
    ) -> Dict[str, Any]:
        return {
            "id": topic_id,
            "topic_name": named.topic_name if named else f"Topic {topic_id}",
            "description": named.description if named else None,
            "is_current": topic_id == current_topic,
            "completed": progress_gate.topic_completed(attempted, topic_id),
            "accessible": progress_gate.topic_accessible(attempted, topic_id),
            "questions_range": progress_gate.topic_range(topic_id),
            "progress": progress_gate.topic_progress(attempted, topic_id),
        }
    
    def list_topics(
        self,
        db: Session,
        slug: str,
        identity: Optional[Identity] = None
    ) -> Dict[str, Any]:
        """Every topic window of a category with the caller's progress through it"""
        category = self.get_category(slug)
        attempted = self.attempted_count(db, category, identity)
        total = self.count_items(db, category)
        
        total_topics = progress_gate.topic_of(total) if total else 0
        if total_topics == 0:
            raise NotFoundError(f"No topics found for '{category.slug}'.")
        
        current_topic = progress_gate.current_topic(attempted)
        names = self._topic_names(db, category)
        
        topics = [
            self._topic_entry(topic_id, attempted, current_topic, names.get(topic_id))
            for topic_id in range(1, total_topics + 1)
        ]
        
        return {
            "category": category.slug,
            "topics": topics,
            "meta": {
                "total_topics": total_topics,
                "current_topic_id": current_topic,
                "total_attempted": attempted,
                "questions_per_topic": progress_gate.page_size,
                "current_topic_progress": attempted % progress_gate.page_size,
            },
        }
    
    def current_topic(
        self,
        db: Session,
        slug: str,
        identity: Optional[Identity] = None
    ) -> Dict[str, Any]:
        """The topic the caller is working through, i.e. the one holding item attempted + 1"""
        category = self.get_category(slug)
        attempted = self.attempted_count(db, category, identity)
        total = self.count_items(db, category)
        
        topic_id = progress_gate.current_topic(attempted)
        total_topics = progress_gate.topic_of(total) if total else 0
        
        if topic_id > total_topics:
            raise NotFoundError(
                f"No more topics available. You have completed {attempted} questions.",
                completed=True,
                total_attempted=attempted
            )
        
        names = self._topic_names(db, category)
        entry = self._topic_entry(topic_id, attempted, topic_id, names.get(topic_id))
        entry["current_question_in_topic"] = (attempted % progress_gate.page_size) + 1
        entry["total_questions_in_topic"] = progress_gate.page_size
        
        return {
            "category": category.slug,
            "current_topic": entry,
            "meta": {
                "total_attempted": attempted,
                "current_topic_number": topic_id,
            },
        }
    
    def topic_grid(
        self,
        db: Session,
        slug: str,
        topic_id: int,
        identity: Optional[Identity] = None
    ) -> Dict[str, Any]:
        """Completed / accessible / locked flags for each item of one topic"""
        category = self.get_category(slug)
        self._check_id(topic_id, "topic_id")
        
        attempted = self.attempted_count(db, category, identity)
        total = self.count_items(db, category)
        total_topics = progress_gate.topic_of(total) if total else 0
        
        if topic_id > total_topics:
            raise NotFoundError(f"Topic #{topic_id} not found.", requested_id=topic_id)
        
        names = self._topic_names(db, category)
        entry = self._topic_entry(
            topic_id, attempted, progress_gate.current_topic(attempted), names.get(topic_id)
        )
        entry["items"] = progress_gate.topic_grid(attempted, topic_id, last_item_id=total)
        
        return {
            "category": category.slug,
            "topic": entry,
            "meta": {
                "total_attempted": attempted,
                "total_questions": total,
            },
        }


# Global instance
question_service = QuestionService()
