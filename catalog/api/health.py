"""Service health routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Request

from catalog.db.base import check_database

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request) -> dict[str, str]:
    """Report readiness once the database answers."""
    check_database(request.app.state.session_factory)
    return {"status": "ok"}
