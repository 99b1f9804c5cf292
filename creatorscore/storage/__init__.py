"""Storage adapters for platform snapshots and scores."""

from .supabase_client import SupabaseClient

__all__ = ["SupabaseClient"]
