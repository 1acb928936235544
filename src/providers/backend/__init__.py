"""Hosted-backend clients.

PostgrestBackendClient speaks the backend's REST API over httpx and is the
only place where raw HTTP failures are turned into TransportError /
ApplicationError.
"""

from src.providers.backend.postgrest_client import PostgrestBackendClient

__all__ = ["PostgrestBackendClient"]
