"""
Question retrieval API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional, Union
import logging

from app.database import get_db
from app.schemas.question import (
    SequentialQuestionResponse,
    WindowQuestionResponse,
    RandomQuestionResponse,
    TopicListResponse,
    CurrentTopicResponse,
    TopicGridResponse,
)
from app.services.question_service import question_service
from app.utils.identity import Identity, get_identity

router = APIRouter(prefix="/api/questions", tags=["questions"])
logger = logging.getLogger(__name__)


@router.get(
    "/{category}",
    response_model=Union[SequentialQuestionResponse, WindowQuestionResponse, RandomQuestionResponse]
)
def get_questions(
    category: str,
    mode: str = Query("sequential", pattern="^(sequential|window|random)$"),
    question_id: Optional[int] = Query(None, ge=1),
    start: Optional[int] = Query(None, ge=1),
    identity: Optional[Identity] = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """
    Fetch questions from a category
    
    - sequential: one question; defaults to the caller's next unattempted one
    - window: up to 10 consecutive questions from `start` (or `question_id`),
      with the requested one tagged as current
    - random: a random question, or `question_id` directly, plus a new random suggestion
    """
    logger.info(f"Question fetch: category={category}, mode={mode}, question_id={question_id}")
    
    if mode == "window":
        return WindowQuestionResponse(
            **question_service.get_window(db, category, question_id=question_id, start=start)
        )
    if mode == "random":
        return RandomQuestionResponse(
            **question_service.get_random(db, category, identity, question_id=question_id)
        )
    return SequentialQuestionResponse(
        **question_service.get_sequential(db, category, identity, question_id=question_id)
    )


@router.get("/{category}/topics", response_model=TopicListResponse)
def list_topics(
    category: str,
    identity: Optional[Identity] = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """All topic windows of a category with the caller's progress and lock state"""
    return TopicListResponse(**question_service.list_topics(db, category, identity))


@router.get("/{category}/topics/current", response_model=CurrentTopicResponse)
def get_current_topic(
    category: str,
    identity: Optional[Identity] = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """The topic holding the caller's next question"""
    return CurrentTopicResponse(**question_service.current_topic(db, category, identity))


@router.get("/{category}/topics/{topic_id}/grid", response_model=TopicGridResponse)
def get_topic_grid(
    category: str,
    topic_id: int,
    identity: Optional[Identity] = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Completed / accessible / locked state of every question in one topic"""
    return TopicGridResponse(**question_service.topic_grid(db, category, topic_id, identity))
