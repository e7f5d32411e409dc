"""Supabase client for the task tracker backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return client
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Tables used by the tracker:
#
#   users          id, name, email, role, employee_id, phone, last_active, is_active
#   tasks          id, title, pincode, address, map_url, latitude, longitude, notes,
#                  client_name, status, assigned_to, assigned_date, created_by,
#                  created_at, updated_at, completed_at, verified_at,
#                  completed_latitude, completed_longitude
#   activity_logs  id, user_id, user_name, action, task_id, details, created_at
