"""Degraded/offline payloads served while the backend is marked unhealthy.

These are the data-access services' fallbacks, kept out of the cache core.
They are small static samples so the public pages still render something
useful during an outage; they are never written to the cache.
"""

from __future__ import annotations

from typing import Any, Mapping

from src.models.category import Category
from src.models.disease import Disease, Language
from src.models.question import Answer, AuthorSummary, Question, QuestionStatus

_DISEASE_NAMES: dict[str, dict[str, tuple[str, str]]] = {
    "1": {
        "uz": ("Aksiyal spondiloartrit", "aksiyal-spondiloartrit-uz"),
        "ru": ("Аксиальный спондилоартрит", "aksialniy-spondiloartrit-ru"),
        "en": ("Axial Spondyloarthritis", "axial-spondyloarthritis-en"),
    },
    "2": {
        "uz": ("Revmatoid artrit", "revmatoid-artrit-uz"),
        "ru": ("Ревматоидный артрит", "revmatoidniy-artrit-ru"),
        "en": ("Rheumatoid Arthritis", "rheumatoid-arthritis-en"),
    },
}


def offline_diseases(language: str = "uz", options: Mapping[str, Any] | None = None) -> list[Disease]:
    """Static disease list for *language*, honouring the ``limit`` option."""
    lang = language if language in {item.value for item in Language} else Language.UZ.value
    diseases = [
        Disease(
            id=disease_id,
            name=names[lang][0],
            slug=names[lang][1],
            order_index=index,
            featured=index == 0,
            current_language=Language(lang),
        )
        for index, (disease_id, names) in enumerate(_DISEASE_NAMES.items())
    ]
    opts = options or {}
    if opts.get("featured") is not None:
        diseases = [d for d in diseases if d.featured == opts["featured"]]
    if opts.get("limit"):
        diseases = diseases[: opts["limit"]]
    return diseases


def offline_disease_by_slug(slug: str, language: str = "uz") -> Disease | None:
    for disease in offline_diseases(language):
        if disease.slug == slug:
            return disease
    return None


_QUESTIONS = (
    Question(
        id="1",
        title="Revmatoid artrit belgilari qanday?",
        content="Menda qo'llarimda og'riq va shishish bor. Bu revmatoid artrit belgisi bo'lishi mumkinmi?",
        slug="revmatoid-artrit-belgilari",
        author_id="user1",
        author=AuthorSummary(id="user1", full_name="Aziza Karimova"),
        tags=["revmatoid", "artrit"],
        status=QuestionStatus.ANSWERED,
        answers_count=1,
        best_answer_id="ans1",
    ),
    Question(
        id="2",
        title="Osteoartroz uchun qanday mashqlar foydali?",
        content="Tizzalarimda osteoartroz tashxisi qo'yilgan. Qanday jismoniy mashqlar qilishim mumkin?",
        slug="osteoartroz-mashqlar",
        author_id="user2",
        author=AuthorSummary(id="user2", full_name="Bobur Rahimov"),
        tags=["osteoartroz", "mashqlar"],
    ),
)

_ANSWERS = (
    Answer(
        id="ans1",
        content="Ertalabki qotishish, simmetrik bo'g'im og'riqlari va shishish. Revmatolog bilan maslahatlashing.",
        question_id="1",
        author_id="doc1",
        author=AuthorSummary(id="doc1", full_name="Dr. Revmatolog", role="doctor"),
        is_best_answer=True,
    ),
)


def offline_questions(options: Mapping[str, Any] | None = None) -> list[Question]:
    opts = options or {}
    questions = list(_QUESTIONS)
    status = opts.get("status")
    if status and status != "all":
        questions = [q for q in questions if q.status.value == status]
    if opts.get("limit"):
        questions = questions[: opts["limit"]]
    return questions


def offline_question_by_slug(slug: str) -> Question | None:
    return next((q for q in _QUESTIONS if q.slug == slug), None)


def offline_answers(question_id: str) -> list[Answer]:
    return [a for a in _ANSWERS if a.question_id == question_id]


_CATEGORIES = (
    Category(id="1", name="Artrit", slug="artrit", color="#3B82F6"),
    Category(id="2", name="Artroz", slug="artroz", color="#10B981"),
    Category(id="3", name="Jismoniy tarbiya", slug="jismoniy-tarbiya", color="#F59E0B"),
    Category(id="4", name="Dorilar", slug="dorilar", color="#EC4899"),
    Category(id="5", name="Profilaktika", slug="profilaktika", color="#8B5CF6"),
    Category(id="6", name="Diagnostika", slug="diagnostika", color="#06B6D4"),
)


def offline_categories() -> list[Category]:
    return list(_CATEGORIES)
