"""
Lesson slide API routes.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException

from api.models.requests import LessonCompleteRequest
from api.models.responses import LessonContentResponse, LessonStateResponse, SlideModel
from core.routes import LESSON_ROUTES, DASHBOARD_ROUTES
from services.content_store import content_store
from services.generation.slide_generator import slide_generator
from services.presentation.slide_viewer import SlideViewer
from services.progress.progress_tracker import progress_tracker

router = APIRouter()


@router.get("/{course_id}/{unit_id}/{lesson_id}", response_model=LessonContentResponse)
def get_lesson_content(course_id: str, unit_id: str, lesson_id: str, user_id: Optional[str] = None):
    """Slides for a lesson, generated on first view and cached afterwards."""
    topic = content_store.get_unit(unit_id)
    topic_title = (topic or {}).get("title") or "General"

    slides = slide_generator.generate_lesson_content(lesson_id, topic_title)

    if user_id and content_store.get_lesson(lesson_id):
        progress_tracker.start_lesson(user_id, lesson_id)

    viewer = SlideViewer(
        slides,
        next_url=LESSON_ROUTES.for_quiz(course_id, unit_id, lesson_id),
        back_url=DASHBOARD_ROUTES.home,
    )

    return LessonContentResponse(
        lesson_id=lesson_id,
        slides=[SlideModel(**slide) for slide in viewer.slides],
        next_url=viewer.next_url,
        back_url=viewer.back_url,
        xp_per_slide=viewer.xp_per_slide,
        total_slides=viewer.total_slides,
    )


@router.post("/{lesson_id}/complete", response_model=LessonStateResponse)
def complete_lesson(lesson_id: str, request: LessonCompleteRequest):
    """Mark a lesson completed for a user."""
    if not content_store.get_lesson(lesson_id):
        raise HTTPException(status_code=404, detail="Lesson not found")

    state = progress_tracker.complete_lesson(request.user_id, lesson_id)
    return LessonStateResponse(
        user_id=state["user_id"],
        lesson_id=state["lesson_id"],
        status=state["status"],
    )
