"""
Voice study session API routes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from api.models.requests import SessionEndRequest
from api.models.responses import SessionContextResponse, TopicProgressResponse
from core.config import VAPI_ASSISTANT_ID
from services.content_store import content_store
from services.progress.progress_tracker import progress_tracker
from services.session.voice_session import build_assistant_overrides

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{topic_id}", response_model=SessionContextResponse)
def get_session_context(topic_id: str, first_name: Optional[str] = None):
    """Topic details and the assistant variables a client passes when starting a call."""
    topic = content_store.get_unit(topic_id)
    if not topic:
        raise HTTPException(status_code=404, detail="Topic not found")

    overrides = build_assistant_overrides(first_name, topic) if first_name else {}
    return SessionContextResponse(
        topic_id=topic_id,
        title=topic["title"],
        description=topic.get("description"),
        subject=topic.get("subject"),
        class_name=topic.get("class_name"),
        assistant_id=VAPI_ASSISTANT_ID,
        assistant_overrides=overrides,
    )


@router.post("/{topic_id}/end", response_model=TopicProgressResponse)
def end_session(topic_id: str, request: SessionEndRequest):
    """Record progress once a voice study call has ended."""
    if not content_store.get_unit(topic_id):
        raise HTTPException(status_code=404, detail="Topic not found")

    progress = progress_tracker.update_progress(topic_id, request.user_id, request.duration_seconds)
    return TopicProgressResponse(
        user_id=progress["user_id"],
        topic_id=progress["unit_id"],
        status=progress["status"],
        sessions_completed=progress["sessions_completed"],
        total_seconds=progress["total_seconds"],
        last_session_at=str(progress["last_session_at"]) if progress.get("last_session_at") else None,
    )
