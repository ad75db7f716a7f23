from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ...integrations.base import IntegrationError
from ...services.analytics_service import AnalyticsService
from ...utils.dates import DATE_FORMAT
from ..deps import get_analytics_service

router = APIRouter()


@router.get("/threads/{date}")
async def get_thread_analytics(
    date: str,
    service: AnalyticsService = Depends(get_analytics_service)
) -> Dict[str, Any]:
    """Participation, tasks, blockers, topics and response times for one day's thread"""
    try:
        datetime.strptime(date, DATE_FORMAT)
    except ValueError:
        raise HTTPException(status_code=422, detail="Date must be formatted as YYYY-MM-DD")

    try:
        analytics = await service.analyze_date(date)
    except IntegrationError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch thread replies: {e}")

    if analytics is None:
        raise HTTPException(status_code=404, detail=f"No standup thread found for {date}")

    result = asdict(analytics)
    result["total_tasks"] = analytics.total_tasks
    return result
