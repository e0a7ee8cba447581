from functools import lru_cache

from supabase import create_client, Client
from app.core.config import settings


@lru_cache(maxsize=1)
def _get_client() -> Client:
    # Built on first use so importing the app never needs a live project
    return create_client(settings.supabase_url, settings.supabase_key)

# Dependency for getting database client
async def get_database() -> Client:
    return _get_client()
