from functools import lru_cache

from supabase import create_client, Client

from talentbridge.config import load_settings


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
  settings = load_settings()
  if not settings.supabase_url or not settings.supabase_key:
    raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")

  return create_client(settings.supabase_url, settings.supabase_key)
