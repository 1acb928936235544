"""Disease encyclopedia data access.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (data access).
# Depends on: IBackendClient, ReadThroughCache, CircuitBreaker,
#             InvalidationCascade.
#
# Reads are declared as raw fetches and wrapped once in ``__init__``:
#
#   get_diseases(language, options)   diseases.<lang>.<options-json>
#   get_disease_by_slug(slug, lang)   disease.<slug>.<lang>
#
# While the breaker is open, reads fall back to the static offline payload.
# Writes go through ``CircuitBreaker.call`` without a fallback (an outage
# surfaces as BackendUnavailableError) and invalidate the ``disease``
# namespace right after the backend confirms them.  "disease" is a prefix
# of "diseases", so one invalidation clears detail and list views.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from src.interfaces.backend_client import IBackendClient
from src.models.disease import CreateDiseaseData, Disease, UpdateDiseaseData
from src.services import cache_keys, offline_content
from src.services.invalidation import InvalidationCascade
from src.services.read_through_cache import ReadThroughCache

logger = structlog.get_logger(logger_name=__name__)

_TABLE = "diseases"
_TRANSLATIONS_TABLE = "disease_translations"
_WITH_TRANSLATIONS = "*,translations:disease_translations(*)"

# Defaults used when no configuration is supplied.
DEFAULT_LIST_TTL = 300.0
DEFAULT_DETAIL_TTL = 600.0


class DiseaseService:
    """Cached reads and invalidating writes for disease records."""

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

        self.get_diseases = cache.wrap(
            self._fetch_diseases,
            cache_keys.diseases,
            list_ttl,
            fallback=self._offline_diseases,
        )
        self.get_disease_by_slug = cache.wrap(
            self._fetch_disease_by_slug,
            cache_keys.disease_by_slug,
            detail_ttl,
            fallback=self._offline_disease_by_slug,
        )

    # ── Raw fetches ────────────────────────────────────────────────────

    async def _fetch_diseases(
        self, language: str = "uz", options: Mapping[str, Any] | None = None
    ) -> list[Disease]:
        opts = options or {}
        filters = {
            column: opts[column]
            for column in ("active", "featured")
            if opts.get(column) is not None
        }
        rows = await self._backend.select(
            _TABLE,
            columns=_WITH_TRANSLATIONS,
            filters=filters,
            order=[("order_index", True)],
            limit=opts.get("limit"),
        )
        diseases = [Disease.model_validate(row).localized(language) for row in rows]
        logger.info("diseases_loaded", language=language, count=len(diseases))
        return diseases

    async def _fetch_disease_by_slug(self, slug: str, language: str = "uz") -> Disease | None:
        # Translated slugs live on the translation rows; try those first.
        translation = await self._backend.select_one(
            _TRANSLATIONS_TABLE,
            columns=f"*,disease:diseases({_WITH_TRANSLATIONS})",
            filters={"slug": slug, "language": language},
        )
        if translation and translation.get("disease"):
            return Disease.model_validate(translation["disease"]).localized(language)

        row = await self._backend.select_one(
            _TABLE, columns=_WITH_TRANSLATIONS, filters={"slug": slug}
        )
        if row is None:
            logger.info("disease_not_found", slug=slug, language=language)
            return None
        return Disease.model_validate(row).localized(language)

    # ── Fallbacks ──────────────────────────────────────────────────────

    async def _offline_diseases(
        self, language: str = "uz", options: Mapping[str, Any] | None = None
    ) -> list[Disease]:
        return offline_content.offline_diseases(language, options)

    async def _offline_disease_by_slug(self, slug: str, language: str = "uz") -> Disease | None:
        return offline_content.offline_disease_by_slug(slug, language)

    # ── Mutations ──────────────────────────────────────────────────────

    async def create_disease(self, data: CreateDiseaseData) -> Disease:
        row = await self._breaker.call(self._backend.insert, _TABLE, data.model_dump())
        self._invalidation.invalidate(cache_keys.DISEASE)
        return Disease.model_validate(row)

    async def update_disease(self, disease_id: str, data: UpdateDiseaseData) -> Disease | None:
        values = data.model_dump(exclude_none=True)
        rows = await self._breaker.call(
            self._backend.update, _TABLE, values, {"id": disease_id}
        )
        self._invalidation.invalidate(cache_keys.DISEASE)
        return Disease.model_validate(rows[0]) if rows else None

    async def delete_disease(self, disease_id: str) -> None:
        await self._breaker.call(self._backend.delete, _TABLE, {"id": disease_id})
        self._invalidation.invalidate(cache_keys.DISEASE)
