"""
Supabase client and backend configuration.

This module contains *only* environment loading and the Supabase connection
setup. The client is created on first use so that the in-memory backend never
needs Supabase credentials.

Environment variables:
- STORE_BACKEND: "memory" (default) or "supabase"
- SUPABASE_URL: Your Supabase project URL (required for the supabase backend)
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
- RECORDS_TABLE: Table holding persisted records (default: "records")
- LOG_LEVEL: Root log level for the API and scripts (default: "INFO")
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from the .env file in the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory").strip().lower()
RECORDS_TABLE: str = os.getenv("RECORDS_TABLE", "records")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Official Supabase Python client instance, created once from the environment."""

    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_key: str | None = os.getenv("SUPABASE_KEY")

    if not supabase_url:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_URL. "
            "Set SUPABASE_URL to your Supabase project URL."
        )

    if not supabase_key:
        raise RuntimeError(
            "Missing environment variable: SUPABASE_KEY. "
            "Set SUPABASE_KEY to your Supabase API key."
        )

    return create_client(supabase_url, supabase_key)


__all__ = ["LOG_LEVEL", "RECORDS_TABLE", "STORE_BACKEND", "get_supabase"]
