from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ...agents.mention_agent import MentionAgent, MentionEvent
from ...integrations.base import IntegrationError
from ...utils.logging import get_logger
from ..deps import get_mention_agent

logger = get_logger(__name__)

router = APIRouter()


class ReplyPayload(BaseModel):
    """One message the assistant sent in reply"""
    thread_ts: str
    text: str
    blocks: Optional[List[Dict[str, Any]]] = None


class MentionResponse(BaseModel):
    replies: List[ReplyPayload]
    delivered: bool = False


class ReplyCollector:
    """A ``say`` capability that records replies instead of sending them"""

    def __init__(self):
        self.replies: List[ReplyPayload] = []

    async def __call__(self, *, thread_ts: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> None:
        self.replies.append(ReplyPayload(thread_ts=thread_ts, text=text, blocks=blocks))


@router.post("", response_model=MentionResponse)
async def handle_mention(
    event: MentionEvent,
    deliver: bool = Query(False, description="Also post the replies to Slack"),
    agent: MentionAgent = Depends(get_mention_agent)
):
    """Answer a mention event and return the replies"""
    collector = ReplyCollector()
    await agent.handle(event, collector)

    delivered = False
    if deliver:
        try:
            for reply in collector.replies:
                await agent.slack.post_message(
                    channel=event.channel,
                    text=reply.text,
                    thread_ts=reply.thread_ts,
                    blocks=reply.blocks
                )
            delivered = True
        except IntegrationError as e:
            logger.error(f"Failed to deliver replies to {event.channel}: {e}")

    return MentionResponse(replies=collector.replies, delivered=delivered)
