# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase client factory
# - object_storage_client.py: S3-compatible client factory
# - utils.py: Object path helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.object_storage_client import create_object_storage_client, is_missing_object_error
from lib.supabase_client import SupabaseClientError, create_supabase_client
from lib.utils import parse_object_path, with_trailing_slash

__all__ = [
    # Clients
    "create_object_storage_client",
    "create_supabase_client",
    "is_missing_object_error",
    "SupabaseClientError",
    # Utils
    "parse_object_path",
    "with_trailing_slash",
]
