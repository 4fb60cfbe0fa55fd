"""Health check endpoints."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from medibot.core.config import settings
from medibot.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    return {"status": "ok", "app": settings.APP_NAME, "env": settings.ENV}


@router.get("/db")
async def health_db(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "reachable"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", exc_info=e)
        return {"status": "degraded", "database": "unreachable"}
