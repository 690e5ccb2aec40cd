"""
Supabase client and repository configuration.

This module contains *only* the database connection setup. Other repository
modules call `get_supabase()` to obtain the shared client; it is created on
first use so that importing the API (or running the unit tests) does not
require credentials.

Environment variables:
- SUPABASE_URL: Your Supabase project URL (required on first use)
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
- SALES_TABLE: Table holding sale aggregates (default: sales)
- USERS_TABLE: Table holding principals (default: users)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from the .env file at the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

SALES_TABLE: str = os.getenv("SALES_TABLE", "sales")
USERS_TABLE: str = os.getenv("USERS_TABLE", "users")


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Return the process-wide Supabase client, creating it on first call."""

    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")

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


__all__ = ["get_supabase", "SALES_TABLE", "USERS_TABLE"]
