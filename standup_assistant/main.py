from fastapi import FastAPI
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uvicorn
import logging

from .config import settings
from .database import init_models
from .api.v1.router import api_router
from .api.deps import get_mention_agent
from .utils.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging(settings.log_level, settings.log_file)
    logger = logging.getLogger(__name__)
    logger.info("Starting Standup Assistant")

    # Create database tables
    await init_models()
    agent = get_mention_agent()

    yield

    # Shutdown
    await agent.linear.close()
    logger.info("Shutting down Standup Assistant")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Answers questions about the team's standups, availability and Linear work",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "standup_assistant.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
