"""
Liveness and health probes.
"""
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chartpaper import __version__
from chartpaper.core.deps import get_db
from chartpaper.models.chart import Chart

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/livez")
def liveness():
    return {"status": "alive"}


@router.get("/healthz")
def health_check(db: Session = Depends(get_db)):
    """Healthy when the database answers and the chart table is readable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return JSONResponse(status_code=500, content={
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        })

    try:
        charts_count = db.query(Chart).filter(Chart.is_latest == True).count()  # noqa: E712
    except SQLAlchemyError as e:
        logger.error(f"Database query failed: {e}")
        return JSONResponse(status_code=500, content={
            "status": "unhealthy",
            "database": "connected",
            "query": "failed",
            "error": str(e),
        })

    return {
        "status": "healthy",
        "database": "connected",
        "charts_count": charts_count,
        "version": __version__,
    }
