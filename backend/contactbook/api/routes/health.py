"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contactbook import __version__
from contactbook.core.database import get_db
from contactbook.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": request.app.state.settings.app_name,
    }


@router.get("/health/detailed")
def detailed_health_check(request: Request, db: Session = Depends(get_db)):
    """
    Detailed health check with store connectivity

    Returns 503 when the store is unreachable. Driver error text is logged,
    never returned.
    """
    settings = request.app.state.settings
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.app_env,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except SQLAlchemyError as e:
        logger.error("Database health check failed", exc_info=True)
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "message": "Database connection failed",
            "error": type(e).__name__,
        }
        return JSONResponse(status_code=503, content=health_status)

    return health_status
