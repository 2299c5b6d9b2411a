"""
Course-related API routes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from api.models.requests import CourseGenerateRequest
from api.models.responses import CourseGenerateResponse, CourseSummary, CourseMapResponse, MapUnit
from core.llm_client import LLMError
from services.content_store import content_store
from services.generation.outline_generator import (
    outline_generator,
    CourseCreationError,
    OutlineParseError,
)
from services.presentation.course_map import load_course_map, current_level
from services.progress.progress_tracker import progress_tracker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", response_model=CourseGenerateResponse)
def generate_course(request: CourseGenerateRequest):
    """Generate a NERDC syllabus for a subject and level and store it as a new course."""
    try:
        course_id = outline_generator.generate_course_structure(
            topic=request.topic,
            level=request.level,
            user_id=request.user_id,
        )
    except CourseCreationError as e:
        logger.error(f"Course creation failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except OutlineParseError as e:
        logger.error(f"Outline generation returned unusable output: {e}")
        raise HTTPException(status_code=502, detail=f"Outline generation failed: {e}")
    except LLMError as e:
        logger.error(f"Outline generation failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return CourseGenerateResponse(course_id=course_id)


@router.get("", response_model=List[CourseSummary])
def list_courses(user_id: Optional[str] = None):
    """List courses, optionally only those owned by one user."""
    return [CourseSummary(**course) for course in content_store.list_courses(user_id)]


@router.get("/{course_id}/map", response_model=CourseMapResponse)
def get_course_map(course_id: str, user_id: Optional[str] = None):
    """Course map with lesson states derived from the user's progress."""
    course = content_store.get_course(course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    course_map = load_course_map(course_id, user_id, store=content_store, tracker=progress_tracker)
    logger.debug(f"Course {course_id}: {len(course_map)} units")

    current = current_level(course_map)
    return CourseMapResponse(
        course_id=course_id,
        title=course["title"],
        units=[MapUnit(**unit.to_dict()) for unit in course_map],
        current_lesson_id=current.id if current else None,
    )
