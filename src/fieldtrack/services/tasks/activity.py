"""Activity log helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from ...config import settings
from ...persistence import database

logger = logging.getLogger(__name__)


def log_activity(
    user_id: Any,
    user_name: str | None,
    action: str,
    task_id: Any = None,
    details: Any = None,
) -> bool:
    """Record an audit entry. Never raises; returns False when nothing was written."""
    if not user_id or not action:
        return False
    entry = {
        "user_id": user_id,
        "user_name": user_name or "System",
        "action": action,
        "task_id": task_id,
        "details": json.dumps(details) if isinstance(details, (dict, list)) else details,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        database.insert_activity_log(entry)
    except Exception as exc:
        logger.warning(f"Activity logging failed for {action}: {exc}")
        return False
    return True


def list_activity(limit: int | None = None) -> list[dict]:
    return database.fetch_activity_logs(limit or settings.activity_log_limit)
