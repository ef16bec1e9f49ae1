import logging

from supabase import create_client, Client
from groupchat.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Service-role client when configured; callers identify themselves in the request body, so RLS has no user to apply."""
        if cls._client is None:
            key = settings.supabase_service_role_key or settings.supabase_key
            if not settings.supabase_url or not key:
                raise RuntimeError("SUPABASE_URL and a Supabase key must be configured")
            cls._client = create_client(settings.supabase_url, key)
            logger.info("Supabase client initialised for %s", settings.supabase_url)
        return cls._client

    @classmethod
    def reset_client(cls):
        cls._client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
