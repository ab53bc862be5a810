"""
Pydantic schemas for question retrieval and topic views
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class QuestionItem(BaseModel):
    id: int
    question: str
    answer: Optional[str] = None
    created_at: Optional[datetime] = None


class WindowQuestion(QuestionItem):
    is_current: bool


class SequentialProgress(BaseModel):
    current_question: int
    questions_completed: int
    completed: bool
    accessible: bool


class SequentialQuestionResponse(BaseModel):
    success: bool = True
    category: str
    mode: str
    question: QuestionItem
    next_question_id: int
    last_attempted: int
    progress: SequentialProgress


class RandomQuestionResponse(BaseModel):
    success: bool = True
    category: str
    mode: str
    question: QuestionItem
    next_question_id: int
    total_questions: int


class WindowRange(BaseModel):
    requested_start: int
    requested_end: int
    actual_start: int
    actual_end: int


class WindowPagination(BaseModel):
    has_previous: bool
    has_next: bool
    previous_start: int
    next_start: int


class WindowMeta(BaseModel):
    start_question_id: int
    total_questions: int
    questions_fetched: int
    range: WindowRange
    pagination: WindowPagination


class WindowQuestionResponse(BaseModel):
    success: bool = True
    category: str
    mode: str
    questions: List[WindowQuestion]
    meta: WindowMeta


class QuestionRange(BaseModel):
    start: int
    end: int


class TopicProgress(BaseModel):
    attempted: int
    total: int
    percentage: int


class TopicItem(BaseModel):
    id: int
    topic_name: str
    description: Optional[str] = None
    is_current: bool
    completed: bool
    accessible: bool
    questions_range: QuestionRange
    progress: TopicProgress


class TopicListMeta(BaseModel):
    total_topics: int
    current_topic_id: int
    total_attempted: int
    questions_per_topic: int
    current_topic_progress: int


class TopicListResponse(BaseModel):
    success: bool = True
    category: str
    topics: List[TopicItem]
    meta: TopicListMeta


class CurrentTopic(TopicItem):
    current_question_in_topic: int
    total_questions_in_topic: int


class CurrentTopicMeta(BaseModel):
    total_attempted: int
    current_topic_number: int


class CurrentTopicResponse(BaseModel):
    success: bool = True
    category: str
    current_topic: CurrentTopic
    meta: CurrentTopicMeta


class GridItem(BaseModel):
    item_id: int
    position_in_topic: int
    completed: bool
    accessible: bool
    locked: bool


class TopicWithGrid(TopicItem):
    items: List[GridItem]


class TopicGridMeta(BaseModel):
    total_attempted: int
    total_questions: int


class TopicGridResponse(BaseModel):
    success: bool = True
    category: str
    topic: TopicWithGrid
    meta: TopicGridMeta
