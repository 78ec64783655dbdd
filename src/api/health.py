"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return application, database and item catalog status."""
    service = getattr(request.app.state, "inventory_service", None)
    templates = service.catalog.count() if service is not None else 0
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "templates": templates}
    except Exception:
        return {"status": "error", "database": "disconnected", "templates": templates}
