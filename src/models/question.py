"""Q&A forum models: questions from patients, answers from doctors."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QuestionStatus(str, Enum):
    OPEN = "open"
    ANSWERED = "answered"
    CLOSED = "closed"


class AuthorSummary(BaseModel):
    """Embedded profile snippet shown next to a question or answer."""

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    role: str = "patient"
    avatar_url: str | None = None


class Question(BaseModel):
    """A forum question."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    slug: str
    author_id: str | None = None
    author: AuthorSummary | None = None
    category_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    status: QuestionStatus = QuestionStatus.OPEN
    views_count: int = 0
    votes_count: int = 0
    answers_count: int = 0
    best_answer_id: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Answer(BaseModel):
    """A doctor's answer to a question."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    question_id: str
    author_id: str
    author: AuthorSummary | None = None
    is_best_answer: bool = False
    votes_count: int = 0
    helpful_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateQuestionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category_id: str | None = None
    tags: list[str] = Field(default_factory=list)
    meta_title: str | None = None
    meta_description: str | None = None


class CreateAnswerData(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)
    question_id: str
