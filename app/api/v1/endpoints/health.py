from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text, select, func
from datetime import datetime
from typing import Dict, Any

from app.db.database import get_db, engine
from app.db.models import FinancialProfile
from app.core.config import settings

router = APIRouter()


def _service_info() -> Dict[str, Any]:
    return {
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/", response_model=Dict[str, Any])
async def health_check():
    return {"status": "healthy", **_service_info()}


@router.get("/ready", response_model=Dict[str, Any])
async def readiness_check(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        profiles = await db.execute(select(func.count()).select_from(FinancialProfile))
        return {
            "status": "ready",
            "database": "connected",
            "database_backend": engine.dialect.name,
            "profiles": profiles.scalar(),
            **_service_info(),
        }
    except Exception as e:
        return {
            "status": "not_ready",
            "database": "disconnected",
            "database_backend": engine.dialect.name,
            "error": str(e),
            **_service_info(),
        }


@router.get("/live", response_model=Dict[str, Any])
async def liveness_check():
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
    }
