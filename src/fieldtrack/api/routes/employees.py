"""Employee directory endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...persistence.database import DatabaseUnavailableError
from ...services.tasks import list_employees

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[dict], status_code=status.HTTP_200_OK)
def get_employees() -> list[dict]:
    try:
        return list_employees()
    except DatabaseUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error fetching employees: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch users",
        ) from exc
