"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    create_supabase_client: Build a Supabase client from settings
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    create_supabase_client,
    check_connection,
    SupabaseConnectionError
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "create_supabase_client",
    "check_connection",
    "SupabaseConnectionError",
]
