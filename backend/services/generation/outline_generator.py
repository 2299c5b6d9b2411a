"""
Course outline generator: asks a language model for a NERDC syllabus and
writes the course, its units and their lessons into the content store.
"""
import json
import logging
from typing import List, Dict, Any, Optional

from core.config import (
    OUTLINE_UNIT_COUNT,
    OUTLINE_LESSONS_PER_UNIT,
    ATOMIC_OUTLINE_WRITES,
    UNIT_COLOR_THEMES,
)
from core.llm_client import llm, LLMClient
from core.transaction import transaction_manager, TransactionManager
from models.curriculum_models import OutlineUnit, OutlineLesson
from services.content_store import content_store, ContentStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful JSON generator."


class CourseCreationError(Exception):
    """Raised when the course row could not be created."""
    pass


class OutlineParseError(ValueError):
    """Raised when the model response is not a usable outline."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


def parse_outline(raw: str) -> List[OutlineUnit]:
    """
    Parse the model's JSON text into outline units.

    Raises:
        OutlineParseError: if the text is not JSON, has no ``units`` list, or
            a unit's ``lessons`` is not a list
    """
    try:
        structure = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise OutlineParseError(f"Outline is not valid JSON: {e}", raw=raw or "") from e

    units = structure.get("units") if isinstance(structure, dict) else None
    if not isinstance(units, list):
        raise OutlineParseError("Outline JSON has no 'units' list", raw=raw)

    outline = []
    for unit in units:
        if not isinstance(unit, dict):
            raise OutlineParseError("Outline unit is not an object", raw=raw)
        raw_lessons = unit.get("lessons")
        if raw_lessons is None:
            raw_lessons = []
        if not isinstance(raw_lessons, list):
            raise OutlineParseError("Outline unit 'lessons' is not a list", raw=raw)
        lessons = [
            OutlineLesson(title=str(lesson.get("title") or "Untitled lesson"))
            for lesson in raw_lessons
            if isinstance(lesson, dict)
        ]
        outline.append(
            OutlineUnit(
                title=str(unit.get("title") or "Untitled unit"),
                description=str(unit.get("description") or ""),
                lessons=lessons,
            )
        )
    return outline


def validate_outline(
    outline: List[OutlineUnit],
    unit_count: int = OUTLINE_UNIT_COUNT,
    lessons_per_unit: int = OUTLINE_LESSONS_PER_UNIT,
) -> List[str]:
    """Return a list of shape problems; empty when the outline matches the request."""
    problems = []
    if len(outline) != unit_count:
        problems.append(f"expected {unit_count} units, got {len(outline)}")
    for index, unit in enumerate(outline, 1):
        if len(unit.lessons) != lessons_per_unit:
            problems.append(
                f"unit {index} expected {lessons_per_unit} lessons, got {len(unit.lessons)}"
            )
    return problems


class OutlineGenerator:
    """Generates and stores a course syllabus."""

    def __init__(
        self,
        store: Optional[ContentStore] = None,
        client: Optional[LLMClient] = None,
        transactions: Optional[TransactionManager] = None,
        atomic: bool = ATOMIC_OUTLINE_WRITES,
        unit_count: int = OUTLINE_UNIT_COUNT,
        lessons_per_unit: int = OUTLINE_LESSONS_PER_UNIT,
    ):
        self.store = store or content_store
        self.client = client or llm
        self.transactions = transactions or transaction_manager
        self.atomic = atomic
        self.unit_count = unit_count
        self.lessons_per_unit = lessons_per_unit

        from core.prompt_manager import prompt_manager
        self.prompt_template = prompt_manager.get_prompt("course_outline")

    def build_prompt(self, topic: str, level: str) -> str:
        return self.prompt_template.format(
            topic=topic,
            level=level,
            unit_count=self.unit_count,
            lessons_per_unit=self.lessons_per_unit,
        )

    def request_outline(self, topic: str, level: str) -> List[OutlineUnit]:
        """Ask the model for an outline. Parse failures propagate."""
        response = self.client.call_openai(
            self.build_prompt(topic, level),
            system=SYSTEM_PROMPT,
            json_mode=True,
        )
        outline = parse_outline(response)

        problems = validate_outline(outline, self.unit_count, self.lessons_per_unit)
        if problems:
            logger.warning(f"Outline for {topic!r} ({level}) has unexpected shape: {'; '.join(problems)}")
        return outline

    def generate_course_structure(self, topic: str, level: str, user_id: str) -> str:
        """
        Create a course for ``topic`` at ``level`` owned by ``user_id``.

        Returns:
            course_id of the new course

        Raises:
            CourseCreationError: if the course row is not created
            OutlineParseError: if the model output is not a valid outline
        """
        if self.atomic:
            # No write lock may be held during the model call; rows are then
            # written on one connection and rolled back together on failure
            outline = self.request_outline(topic, level)
            with self.transactions.transaction() as conn:
                return self._generate(topic, level, user_id, conn, outline)
        return self._generate(topic, level, user_id, None)

    def _generate(
        self,
        topic: str,
        level: str,
        user_id: str,
        conn,
        outline: Optional[List[OutlineUnit]] = None,
    ) -> str:
        course = self.store.create_course(topic, level, user_id, conn=conn)
        if not course:
            raise CourseCreationError("Failed to create course")
        course_id = course["course_id"]
        logger.info(f"Created course {course_id}: {course['title']}")

        if outline is None:
            outline = self.request_outline(topic, level)
        self.store_outline(course_id, outline, conn=conn)

        return course_id

    def store_outline(self, course_id: str, outline: List[OutlineUnit], conn=None) -> Dict[str, Any]:
        """Insert units and lessons with 1-based sequential order indices."""
        unit_total = 0
        lesson_total = 0
        for unit_index, unit_data in enumerate(outline, 1):
            color_theme = UNIT_COLOR_THEMES[(unit_index - 1) % len(UNIT_COLOR_THEMES)]
            unit = self.store.insert_unit(
                course_id=course_id,
                title=unit_data.title,
                description=unit_data.description,
                order_index=unit_index,
                color_theme=color_theme,
                conn=conn,
            )
            if not unit:
                raise CourseCreationError(f"Failed to create unit {unit_index} for course {course_id}")
            unit_total += 1

            lessons_payload = [
                {"title": lesson.title, "order_index": lesson_index, "type": "lesson"}
                for lesson_index, lesson in enumerate(unit_data.lessons, 1)
            ]
            lesson_total += len(self.store.insert_lessons(unit["unit_id"], lessons_payload, conn=conn))

        logger.info(f"Stored outline for {course_id}: {unit_total} units, {lesson_total} lessons")
        return {"units": unit_total, "lessons": lesson_total}


# Global outline generator instance
outline_generator = OutlineGenerator()
