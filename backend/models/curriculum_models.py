"""
Data models for courses, units, lessons and slides.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Optional, Any

from core.config import DEFAULT_COLOR_THEME


class LessonStatus(str, Enum):
    """Display state of a lesson node on the course map."""
    LOCKED = "locked"
    CURRENT = "current"
    COMPLETED = "completed"


class ProgressStatus(str, Enum):
    """Stored progress state. Absence of a row means not started."""
    CURRENT = "current"
    COMPLETED = "completed"


# Allowed forward moves; a record never goes back
PROGRESS_RANK = {
    None: 0,
    ProgressStatus.CURRENT.value: 1,
    ProgressStatus.COMPLETED.value: 2,
}


@dataclass
class Slide:
    """One card of lesson content"""
    type: str
    title: str
    content: str
    emoji: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slide":
        return cls(
            type=str(data.get("type") or ""),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            emoji=str(data.get("emoji") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class OutlineLesson:
    """Lesson entry of a generated outline"""
    title: str


@dataclass
class OutlineUnit:
    """Unit entry of a generated outline"""
    title: str
    description: str = ""
    lessons: List[OutlineLesson] = field(default_factory=list)


@dataclass
class CourseMapLevel:
    """Lesson node on the course map"""
    id: str
    order_index: int
    status: LessonStatus
    title: str = ""
    stars: int = 0
    href: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class CourseMapUnit:
    """Unit section of the course map"""
    id: str
    title: str
    description: str = "No description"
    color_theme: str = DEFAULT_COLOR_THEME
    levels: List[CourseMapLevel] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "color_theme": self.color_theme,
            "levels": [level.to_dict() for level in self.levels],
        }
