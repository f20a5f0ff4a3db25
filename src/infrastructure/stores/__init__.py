from __future__ import annotations

import logging

from infrastructure.settings import Settings
from infrastructure.stores.memory_store import MemoryStore
from infrastructure.stores.postgrest_store import PostgrestStore
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)

LOCAL_USER_ID = "local-user"


def build_store(settings: Settings) -> DataStore:
    if settings.store == "postgrest":
        logger.info("Using PostgREST store base_url=%s", settings.supabase_url)
        return PostgrestStore.from_settings(settings)
    if settings.store != "memory":
        raise StoreError(f"Unknown FINFLOW_STORE: {settings.store!r}")
    logger.info("Using in-memory store user_id=%s", LOCAL_USER_ID)
    return MemoryStore(user_id=LOCAL_USER_ID)


__all__ = ["DataStore", "MemoryStore", "PostgrestStore", "StoreError", "build_store"]
