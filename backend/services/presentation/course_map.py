"""
Course map derivation: which lesson nodes are completed, current or locked.
"""
from typing import Iterable, List, Dict, Any, Optional, Set

from core.config import DEFAULT_COLOR_THEME
from core.routes import LESSON_ROUTES
from models.curriculum_models import CourseMapLevel, CourseMapUnit, LessonStatus
from services.content_store import content_store, ContentStore
from services.progress.progress_tracker import progress_tracker, ProgressTracker


def build_course_map(
    units: Iterable[Dict[str, Any]],
    completed_ids: Set[str],
    course_id: Optional[str] = None,
) -> List[CourseMapUnit]:
    """
    Derive lesson node states for a course.

    Units are taken in the order given; lessons within a unit are sorted by
    order index. Walking the whole course, completed lessons stay completed,
    the first lesson that is not completed becomes current and every later
    non-completed lesson is locked.
    """
    found_current = False
    course_map = []

    for unit in units:
        unit_id = unit.get("unit_id") or unit.get("id")
        lessons = sorted(unit.get("lessons") or [], key=lambda lesson: lesson["order_index"])

        levels = []
        for lesson in lessons:
            lesson_id = lesson.get("lesson_id") or lesson.get("id")
            if lesson_id in completed_ids:
                status = LessonStatus.COMPLETED
            elif not found_current:
                status = LessonStatus.CURRENT
                found_current = True
            else:
                status = LessonStatus.LOCKED

            levels.append(
                CourseMapLevel(
                    id=lesson_id,
                    order_index=lesson["order_index"],
                    status=status,
                    title=lesson.get("title") or "",
                    href=LESSON_ROUTES.for_level(course_id, unit_id, lesson_id) if course_id else None,
                )
            )

        course_map.append(
            CourseMapUnit(
                id=unit_id,
                title=unit.get("title") or "",
                description=unit.get("description") or "No description",
                color_theme=unit.get("color_theme") or DEFAULT_COLOR_THEME,
                levels=levels,
            )
        )

    return course_map


def current_level(course_map: List[CourseMapUnit]) -> Optional[CourseMapLevel]:
    for unit in course_map:
        for level in unit.levels:
            if level.status == LessonStatus.CURRENT:
                return level
    return None


def load_course_map(
    course_id: str,
    user_id: Optional[str],
    store: Optional[ContentStore] = None,
    tracker: Optional[ProgressTracker] = None,
) -> List[CourseMapUnit]:
    """Read units, lessons and the user's completions, then derive the map."""
    store = store or content_store
    tracker = tracker or progress_tracker

    units = store.list_units_with_lessons(course_id)
    completed = tracker.completed_lesson_ids(user_id)
    return build_course_map(units, completed, course_id=course_id)
