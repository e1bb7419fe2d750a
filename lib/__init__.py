# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - utils.py: Shared utilities (UUID normalization, UTC timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import is_valid_uuid, normalize_uuid, parse_timestamp, utc_now

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "is_valid_uuid",
    "normalize_uuid",
    "parse_timestamp",
    "utc_now",
]
