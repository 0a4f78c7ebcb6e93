"""Shared Supabase client for the auth provider and the storage image provider"""
import logging
from typing import Optional
from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions
from upcycle_hub.config import settings

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get the Supabase client singleton"""
    global _supabase_client
    if _supabase_client is None:
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")
        _supabase_client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
            options=ClientOptions(
                headers={"x-client-info": "upcycle-hub"},
                auto_refresh_token=False,
                persist_session=False,
            ),
        )
        logger.info("Supabase client initialized")
    return _supabase_client
