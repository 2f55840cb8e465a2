"""
Supabase client wrapper shared by the prompt and campaign stores
"""

import logging
from typing import Any, Optional

import httpx
from supabase import AsyncClient, PostgrestAPIError, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from .. import config
from ..exceptions import StoreError

logger = logging.getLogger(__name__)


class SupabaseDB:
    """
    Lazily connected async Supabase client.

    Queries are built with the client's table builder and sent through
    ``execute`` so every backend failure surfaces as ``StoreError``.
    """

    def __init__(
        self,
        client: Optional[AsyncClient] = None,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._client = client
        self.url = url or config.SUPABASE_URL
        self.service_key = service_key or config.SUPABASE_SERVICE_ROLE_KEY
        self.timeout = timeout or config.SUPABASE_TIMEOUT

        if client is None:
            if not self.url:
                raise StoreError("SUPABASE_URL not configured")
            if not self.service_key:
                raise StoreError("SUPABASE_SERVICE_ROLE_KEY not configured")

    async def connect(self) -> AsyncClient:
        if self._client is None:
            self._client = await acreate_client(
                self.url,
                self.service_key,
                options=AsyncClientOptions(postgrest_client_timeout=self.timeout),
            )
        return self._client

    async def send(self, query: Any, description: str):
        """Execute a built query, mapping backend failures to StoreError"""
        try:
            return await query.execute()
        except PostgrestAPIError as e:
            logger.error("Supabase %s failed: %s", description, e.message)
            raise StoreError(f"Supabase {description} failed: {e.message}") from e
        except httpx.HTTPError as e:
            logger.error("Supabase %s request error: %s", description, e)
            raise StoreError(f"Supabase {description} request error: {e}") from e

    async def execute(self, query: Any, description: str) -> list[dict]:
        """
        Run a built query

        Returns:
            The rows returned by Supabase (always a list)
        """
        data = (await self.send(query, description)).data
        if not data:
            return []
        return data if isinstance(data, list) else [data]

    async def count(self, query: Any, description: str) -> tuple[list[dict], int]:
        """Run a query built with ``count="exact"``; returns (rows, total)"""
        response = await self.send(query, description)
        rows = response.data or []
        return rows, response.count if response.count is not None else len(rows)
