"""Cache key generators for every cached data-access function.

Each generator is a pure, deterministic function of the wrapped
function's arguments.  Option mappings are serialised as canonical JSON
(sorted keys, no whitespace, ``None`` values dropped), so
``{"active": True, "limit": 5}`` and ``{"limit": 5, "active": True}`` map
to the same key while any differing value yields a different key.

Namespace constants double as invalidation prefixes.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from src.models.cache import KEY_SEPARATOR

DISEASES = "diseases"
DISEASE = "disease"
QUESTIONS = "questions"
QUESTION = "question"
ANSWERS = "answers"
CATEGORIES = "categories"


def canonical_options(options: Mapping[str, Any] | None) -> str:
    """Serialise an options mapping into a stable key segment.

    ``None`` and an empty mapping both serialise to ``{}``; keys whose value
    is ``None`` are treated as "not given".
    """
    cleaned = {k: v for k, v in (options or {}).items() if v is not None}
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def join(*segments: Any) -> str:
    """Join key segments with the key separator."""
    return KEY_SEPARATOR.join(str(segment) for segment in segments)


def diseases(language: str = "uz", options: Mapping[str, Any] | None = None) -> str:
    return join(DISEASES, language, canonical_options(options))


def disease_by_slug(slug: str, language: str = "uz") -> str:
    return join(DISEASE, slug, language)


def questions(options: Mapping[str, Any] | None = None) -> str:
    return join(QUESTIONS, canonical_options(options))


def question_by_slug(slug: str) -> str:
    return join(QUESTION, slug)


def answers(question_id: str) -> str:
    return join(ANSWERS, question_id)


def categories() -> str:
    return join(CATEGORIES, "all")


# Namespace -> list-view prefixes that derive from it.  Trailing separators
# keep "disease" from swallowing "diseases" and vice versa.
RELATED_NAMESPACES: dict[str, tuple[str, ...]] = {
    DISEASE: (DISEASES + KEY_SEPARATOR,),
    QUESTION: (QUESTIONS + KEY_SEPARATOR,),
    ANSWERS: (QUESTIONS + KEY_SEPARATOR,),
}
