from functools import lru_cache
from supabase import create_client, Client
from studysync.core.config import settings


@lru_cache(maxsize=None)
def _client(key: str) -> Client:
    return create_client(settings.supabase_url, key)

# Dependency for getting database client
async def get_database() -> Client:
    return _client(settings.supabase_key)

# Service-role client, bypasses row-level security (invite code lookups)
async def get_admin_database() -> Client:
    return _client(settings.supabase_service_role_key or settings.supabase_key)
