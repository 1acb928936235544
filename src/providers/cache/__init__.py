"""Cache providers.

In-memory TTL store shared by every cached data-access function (disease
listings, Q&A threads, doctor profiles).  MemoryCacheProvider is a
process-local map with per-entry expiry, not shared across processes.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
