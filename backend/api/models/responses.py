"""
Pydantic response models for API endpoints.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class CourseGenerateResponse(BaseModel):
    """Response model for syllabus generation."""
    course_id: str


class CourseSummary(BaseModel):
    """Course listing entry."""
    course_id: str
    title: str
    topic: str
    level: str
    user_id: str


class MapLevel(BaseModel):
    """Lesson node on the course map."""
    id: str
    order_index: int
    status: str
    title: str = ""
    stars: int = 0
    href: Optional[str] = None


class MapUnit(BaseModel):
    """Unit section on the course map."""
    id: str
    title: str
    description: str
    color_theme: str
    levels: List[MapLevel] = []


class CourseMapResponse(BaseModel):
    """Course map for one user."""
    course_id: str
    title: str
    units: List[MapUnit] = []
    current_lesson_id: Optional[str] = None


class SlideModel(BaseModel):
    """One lesson slide."""
    type: str
    title: str
    content: str
    emoji: str = ""


class LessonContentResponse(BaseModel):
    """Slides plus navigation for the lesson viewer."""
    lesson_id: str
    slides: List[SlideModel]
    next_url: str
    back_url: str
    xp_per_slide: int
    total_slides: int


class LessonStateResponse(BaseModel):
    """Stored lesson state for a user."""
    user_id: str
    lesson_id: str
    status: str


class SessionContextResponse(BaseModel):
    """Topic context and assistant variables for starting a voice call."""
    topic_id: str
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    class_name: Optional[str] = None
    assistant_id: Optional[str] = None
    assistant_overrides: Dict[str, Any] = {}


class TopicProgressResponse(BaseModel):
    """Progress recorded after a voice session."""
    user_id: str
    topic_id: str
    status: str
    sessions_completed: int
    total_seconds: int
    last_session_at: Optional[str] = None
