"""
Data store backends: Supabase REST or direct PostgreSQL.
"""

from tabletads.store.base import AdStore
from tabletads.store.factory import get_store
from tabletads.store.postgres import PostgresStore
from tabletads.store.supabase import SupabaseStore, create_supabase_client

__all__ = [
    "AdStore",
    "PostgresStore",
    "SupabaseStore",
    "create_supabase_client",
    "get_store",
]
