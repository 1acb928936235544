"""Public interface definitions for the data layer's collaborators.

The cache core and the data-access services only ever talk to these
abstract base classes; concrete adapters live in ``src/providers/`` and are
wired together in ``src/main.py``.  Tests inject in-memory fakes.

CONCRETE PROVIDER MAP:
    Interface          ->  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    ICacheProvider     ->  MemoryCacheProvider
    IBackendClient     ->  PostgrestBackendClient
"""

from src.interfaces.backend_client import IBackendClient, Row
from src.interfaces.cache_provider import ICacheProvider

__all__ = [
    "IBackendClient",
    "ICacheProvider",
    "Row",
]
