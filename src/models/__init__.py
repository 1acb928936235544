"""Revmohelp domain models, re-exported for convenience.

    - category.py  -- Navigation categories
    - cache.py     -- Cache-core records (entries, breaker state, invalidation targets)
    - disease.py   -- Disease encyclopedia content and its translations
    - question.py  -- Q&A forum questions, answers, and write payloads
"""

from __future__ import annotations

from src.models.category import Category, CreateCategoryData, UpdateCategoryData
from src.models.cache import (
    KEY_SEPARATOR,
    BreakerState,
    CacheEntry,
    HealthSnapshot,
    InvalidationTarget,
)
from src.models.disease import (
    CreateDiseaseData,
    Disease,
    DiseaseTranslation,
    Language,
    UpdateDiseaseData,
)
from src.models.question import (
    Answer,
    AuthorSummary,
    CreateAnswerData,
    CreateQuestionData,
    Question,
    QuestionStatus,
)

__all__ = [
    # category
    "Category",
    "CreateCategoryData",
    "UpdateCategoryData",
    # cache
    "KEY_SEPARATOR",
    "BreakerState",
    "CacheEntry",
    "HealthSnapshot",
    "InvalidationTarget",
    # disease
    "CreateDiseaseData",
    "Disease",
    "DiseaseTranslation",
    "Language",
    "UpdateDiseaseData",
    # question
    "Answer",
    "AuthorSummary",
    "CreateAnswerData",
    "CreateQuestionData",
    "Question",
    "QuestionStatus",
]
