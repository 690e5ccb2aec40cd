"""
Principal directory (persistence).

Read-only lookups against the users table owned by the Principal/User
subsystem. Only existence is checked here: credentials and profile data are
never selected.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client  # type: ignore[import-not-found]

from domain.errors import PersistenceError
from repositories.client import USERS_TABLE, get_supabase

logger = logging.getLogger(__name__)


class PrincipalDirectory(Protocol):
    def principal_exists(self, principal_id: UUID) -> bool:
        """True if a principal with this id is registered."""


class SupabasePrincipalDirectory:
    def __init__(self, client: Optional[Client] = None, table: str = USERS_TABLE) -> None:
        self._client = client
        self._table = table

    def principal_exists(self, principal_id: UUID) -> bool:
        client = self._client or get_supabase()
        try:
            response = (
                client.table(self._table)
                .select("id")
                .eq("id", str(principal_id))
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            logger.error("Principal lookup failed: %s", e)
            raise PersistenceError("Failed to look up user") from e

        error = getattr(response, "error", None)
        if error:
            logger.error("Principal lookup returned error: %s", error)
            raise PersistenceError("Failed to look up user")

        rows = getattr(response, "data", None) or []
        return bool(rows)


__all__ = ["PrincipalDirectory", "SupabasePrincipalDirectory"]
