"""Category data access.

Categories change only through the admin panel, so the list is cached
under the long ``static`` TTL as a single ``categories.all`` entry.  Every
write clears the whole ``categories`` namespace.
"""

from __future__ import annotations

import structlog

from src.interfaces.backend_client import IBackendClient
from src.models.category import Category, CreateCategoryData, UpdateCategoryData
from src.services import cache_keys, offline_content
from src.services.invalidation import InvalidationCascade
from src.services.read_through_cache import ReadThroughCache

logger = structlog.get_logger(logger_name=__name__)

_TABLE = "categories"

DEFAULT_STATIC_TTL = 900.0


class CategoryService:
    """Cached category list and invalidating admin writes."""

    def __init__(
        self,
        backend: IBackendClient,
        cache: ReadThroughCache,
        invalidation: InvalidationCascade,
        static_ttl: float = DEFAULT_STATIC_TTL,
    ) -> None:
        self._backend = backend
        self._breaker = cache.breaker
        self._invalidation = invalidation

        self.get_categories = cache.wrap(
            self._fetch_categories,
            cache_keys.categories,
            static_ttl,
            fallback=self._offline_categories,
        )

    async def _fetch_categories(self) -> list[Category]:
        rows = await self._backend.select(_TABLE, order=[("name", True)])
        return [Category.model_validate(row) for row in rows]

    async def _offline_categories(self) -> list[Category]:
        return offline_content.offline_categories()

    async def is_slug_unique(self, slug: str, exclude_id: str | None = None) -> bool:
        """Return ``True`` if no other category uses *slug*.  Never cached."""
        rows = await self._breaker.call(
            self._backend.select, _TABLE, columns="id", filters={"slug": slug}
        )
        return all(row["id"] == exclude_id for row in rows)

    async def create_category(self, data: CreateCategoryData) -> Category:
        row = await self._breaker.call(self._backend.insert, _TABLE, data.model_dump())
        self._invalidation.invalidate(cache_keys.CATEGORIES)
        logger.info("category_created", category_id=row.get("id"), slug=data.slug)
        return Category.model_validate(row)

    async def update_category(self, category_id: str, data: UpdateCategoryData) -> Category | None:
        rows = await self._breaker.call(
            self._backend.update,
            _TABLE,
            data.model_dump(exclude_none=True),
            {"id": category_id},
        )
        self._invalidation.invalidate(cache_keys.CATEGORIES)
        return Category.model_validate(rows[0]) if rows else None

    async def delete_category(self, category_id: str) -> None:
        await self._breaker.call(self._backend.delete, _TABLE, {"id": category_id})
        self._invalidation.invalidate(cache_keys.CATEGORIES)
