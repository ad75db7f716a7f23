from fastapi import APIRouter
from .mentions import router as mentions_router
from .analytics import router as analytics_router
from .integrations import router as integrations_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(mentions_router, prefix="/mentions", tags=["mentions"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(integrations_router, prefix="/integrations", tags=["integrations"])
