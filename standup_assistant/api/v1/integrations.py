from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...agents.context_aggregator import LINEAR_DISABLED_TEXT
from ...integrations.linear_client import LinearClient
from ..deps import get_linear_client

router = APIRouter()


class LinearTestResponse(BaseModel):
    enabled: bool
    success: bool
    message: str


@router.get("/linear/test", response_model=LinearTestResponse)
async def test_linear_connection(
    linear: LinearClient = Depends(get_linear_client)
):
    """Run the Linear connectivity self-test"""
    if not linear.is_enabled:
        return LinearTestResponse(enabled=False, success=False, message=LINEAR_DISABLED_TEXT)

    result = await linear.check_connection()
    return LinearTestResponse(enabled=True, success=result.success, message=result.message)
