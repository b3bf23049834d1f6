"""Supabase client factory."""

from __future__ import annotations

import logging

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from registry.core.config import Settings

logger = logging.getLogger(__name__)


async def create_supabase_client(settings: Settings) -> AsyncClient | None:
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("Supabase credentials missing — running without auth and record store")
        return None

    options = AsyncClientOptions(
        postgrest_client_timeout=settings.SUPABASE_TIMEOUT,
        storage_client_timeout=settings.SUPABASE_TIMEOUT,
    )
    client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY, options=options)
    logger.info("Supabase client initialized (%s)", settings.SUPABASE_URL)
    return client
