"""
Health check endpoint.

Used by load balancers and monitoring to verify the application
is running and can reach its database.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from expense_ledger.logging import get_logger
from expense_ledger.models.base import get_db

router = APIRouter(tags=["Health"])
log = get_logger(__name__)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    A failed connectivity query reports the service as degraded
    instead of raising.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        log.warning("health.database.unreachable", error=str(e))
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "expense-ledger",
        "database": db_status,
    }
