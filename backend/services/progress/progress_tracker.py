"""
Per-user lesson and topic progress.
"""
import logging
from typing import Optional, Dict, Any, Set

from models.curriculum_models import ProgressStatus
from services.content_store import content_store, ContentStore

logger = logging.getLogger(__name__)


def _require_ids(user_id: Optional[str], lesson_id: Optional[str]) -> None:
    if not user_id:
        raise ValueError("Missing user id")
    if not lesson_id:
        raise ValueError("Missing lesson id")


class ProgressTracker:
    """Records progress; states only ever move absent -> current -> completed."""

    def __init__(self, store: Optional[ContentStore] = None):
        self.store = store or content_store

    def update_progress(self, topic_id: str, user_id: str, duration_seconds: int = 0) -> Dict[str, Any]:
        """Record that ``user_id`` finished a voice study session on ``topic_id``."""
        if not topic_id:
            raise ValueError("Missing topic id")
        if not user_id:
            raise ValueError("Missing user id")

        progress = self.store.record_topic_session(
            user_id=user_id,
            unit_id=topic_id,
            status=ProgressStatus.COMPLETED.value,
            duration_seconds=max(int(duration_seconds or 0), 0),
        )
        logger.info(
            f"Progress for user {user_id} on topic {topic_id}: "
            f"{progress['sessions_completed']} session(s), {progress['total_seconds']}s"
        )
        return progress

    def start_lesson(self, user_id: str, lesson_id: str) -> Dict[str, Any]:
        _require_ids(user_id, lesson_id)
        return self.store.upsert_lesson_state(user_id, lesson_id, ProgressStatus.CURRENT.value)

    def complete_lesson(self, user_id: str, lesson_id: str) -> Dict[str, Any]:
        _require_ids(user_id, lesson_id)
        return self.store.upsert_lesson_state(user_id, lesson_id, ProgressStatus.COMPLETED.value)

    def completed_lesson_ids(self, user_id: Optional[str]) -> Set[str]:
        if not user_id:
            return set()
        return self.store.completed_lesson_ids(user_id)


# Global progress tracker instance
progress_tracker = ProgressTracker()
