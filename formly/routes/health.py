"""Liveness endpoint used by deployments and uptime checks."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formly.logging_config import get_logger
from formly.models.database import get_db
from formly.services.errors import ServiceUnavailableError

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    """Report whether the app can reach its database.

    Raises:
        ServiceUnavailableError: If the probe query fails (503)
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database unreachable from health check: {type(e).__name__}")
        raise ServiceUnavailableError("Database unavailable")

    return {"status": "healthy", "database": "connected"}
