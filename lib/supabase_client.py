# =============================================================================
# lib/supabase_client.py - Supabase Client Factory
# =============================================================================
# Builds the Supabase client used for the guitar catalog table and the
# access group membership table. The client is created once per process
# (see app.dependencies) and passed to services explicitly.
#
# Usage:
#   from lib.supabase_client import create_supabase_client
#   client = create_supabase_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase client setup.

    Carries a suggestion telling the operator how to fix it.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def create_supabase_client(url: str, service_key: str) -> Client:
    """
    Create a Supabase client.

    Uses the service_role key which bypasses Row Level Security (RLS).
    This is appropriate for server-side operations.

    Raises:
        SupabaseClientError: If client creation fails
    """
    try:
        client = create_client(url, service_key)
    except Exception as e:
        raise SupabaseClientError(
            message=f"Failed to create Supabase client: {e}",
            code="CLIENT_INIT_FAILED",
            suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
        ) from e

    logger.info("Supabase client initialized successfully")
    return client

