"""Q&A forum data access: questions, answers, and their cache namespaces.

Cached reads:

    get_questions(options)         questions.<options-json>   (volatile list)
    get_question_by_slug(slug)     question.<slug>
    get_answers(question_id)       answers.<question_id>

Writes invalidate synchronously after the backend confirms them.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Mapping

import structlog

from src.interfaces.backend_client import IBackendClient
from src.models.question import Answer, CreateAnswerData, CreateQuestionData, Question
from src.services import cache_keys, offline_content
from src.services.invalidation import InvalidationCascade
from src.services.read_through_cache import ReadThroughCache

logger = structlog.get_logger(logger_name=__name__)

_QUESTIONS_TABLE = "questions"
_ANSWERS_TABLE = "answers"
_AUTHOR = "author:profiles(id,full_name,role,avatar_url)"

DEFAULT_LIST_TTL = 120.0
DEFAULT_DETAIL_TTL = 300.0

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Lower-case ASCII slug, e.g. "Revmatoid artrit belgilari?" -> "revmatoid-artrit-belgilari"."""
    ascii_title = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG_CHARS.sub("-", ascii_title.lower()).strip("-")


class QuestionService:
    """Cached reads and invalidating writes for forum questions and answers."""

    def __init__(
        self,
        backend: IBackendClient,
        cache: ReadThroughCache,
        invalidation: InvalidationCascade,
        list_ttl: float = DEFAULT_LIST_TTL,
        detail_ttl: float = DEFAULT_DETAIL_TTL,
    ) -> None:
        self._backend = backend
        self._breaker = cache.breaker
        self._invalidation = invalidation

        self.get_questions = cache.wrap(
            self._fetch_questions, cache_keys.questions, list_ttl, fallback=self._offline_questions
        )
        self.get_question_by_slug = cache.wrap(
            self._fetch_question_by_slug,
            cache_keys.question_by_slug,
            detail_ttl,
            fallback=self._offline_question_by_slug,
        )
        self.get_answers = cache.wrap(
            self._fetch_answers, cache_keys.answers, list_ttl, fallback=self._offline_answers
        )

    # ── Raw fetches ────────────────────────────────────────────────────

    async def _fetch_questions(self, options: Mapping[str, Any] | None = None) -> list[Question]:
        opts = options or {}
        filters: dict[str, Any] = {}
        if opts.get("status") and opts["status"] != "all":
            filters["status"] = opts["status"]
        for column in ("category_id", "author_id"):
            if opts.get(column):
                filters[column] = opts[column]

        rows = await self._backend.select(
            _QUESTIONS_TABLE,
            columns=f"*,{_AUTHOR}",
            filters=filters,
            order=[("created_at", False)],
            limit=opts.get("limit"),
            offset=opts.get("offset"),
        )
        return [Question.model_validate(row) for row in rows]

    async def _fetch_question_by_slug(self, slug: str) -> Question | None:
        row = await self._backend.select_one(
            _QUESTIONS_TABLE, columns=f"*,{_AUTHOR}", filters={"slug": slug}
        )
        return Question.model_validate(row) if row else None

    async def _fetch_answers(self, question_id: str) -> list[Answer]:
        rows = await self._backend.select(
            _ANSWERS_TABLE,
            columns=f"*,{_AUTHOR}",
            filters={"question_id": question_id},
            order=[("is_best_answer", False), ("votes_count", False), ("created_at", True)],
        )
        return [Answer.model_validate(row) for row in rows]

    # ── Fallbacks ──────────────────────────────────────────────────────

    async def _offline_questions(self, options: Mapping[str, Any] | None = None) -> list[Question]:
        return offline_content.offline_questions(options)

    async def _offline_question_by_slug(self, slug: str) -> Question | None:
        return offline_content.offline_question_by_slug(slug)

    async def _offline_answers(self, question_id: str) -> list[Answer]:
        return offline_content.offline_answers(question_id)

    # ── Mutations ──────────────────────────────────────────────────────

    async def create_question(self, data: CreateQuestionData, author_id: str) -> Question:
        slug = slugify(data.title)
        row = await self._breaker.call(
            self._backend.insert,
            _QUESTIONS_TABLE,
            {**data.model_dump(), "slug": slug, "author_id": author_id},
        )
        question = Question.model_validate(row)
        self._invalidation.invalidate(cache_keys.QUESTIONS)
        # A "not found" for this slug may have been cached before it existed.
        self._invalidation.invalidate(cache_keys.QUESTION, question.slug)
        logger.info("question_created", question_id=question.id, slug=question.slug)
        return question

    async def create_answer(self, data: CreateAnswerData, author_id: str) -> Answer:
        row = await self._breaker.call(
            self._backend.insert,
            _ANSWERS_TABLE,
            {**data.model_dump(), "author_id": author_id},
        )
        answer = Answer.model_validate(row)
        # answers.<id> plus questions.* (answers_count changed), then detail views.
        self._invalidation.invalidate(cache_keys.ANSWERS, data.question_id)
        self._invalidation.invalidate(cache_keys.QUESTION)
        return answer

    async def delete_question(self, question_id: str) -> None:
        await self._breaker.call(self._backend.delete, _QUESTIONS_TABLE, {"id": question_id})
        self._invalidation.invalidate(cache_keys.QUESTION)
        self._invalidation.invalidate(cache_keys.ANSWERS, question_id)
