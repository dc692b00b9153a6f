from fastapi import APIRouter
from app.api.v1.endpoints import health, finance, behavior

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(finance.router, prefix="/finance", tags=["finance"])
api_router.include_router(behavior.router, prefix="/behavior", tags=["behavior"])
