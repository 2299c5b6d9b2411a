"""
Forward/back paginator over a lesson's slides with an XP counter.
"""
from dataclasses import dataclass
from typing import List, Dict, Any, Optional

from core.config import XP_PER_SLIDE


@dataclass
class Navigation:
    """Where the viewer wants the client to go next."""
    url: str
    reason: str


class SlideViewer:
    """In-memory slide position for one lesson view; discarded on navigation."""

    def __init__(
        self,
        slides: List[Dict[str, Any]],
        next_url: str,
        back_url: str,
        xp_per_slide: int = XP_PER_SLIDE,
    ):
        if not slides:
            raise ValueError("SlideViewer needs at least one slide")
        self.slides = slides
        self.next_url = next_url
        self.back_url = back_url
        self.xp_per_slide = xp_per_slide
        self.current_index = 0
        self.xp_gained = 0

    @property
    def total_slides(self) -> int:
        return len(self.slides)

    @property
    def current_slide(self) -> Dict[str, Any]:
        return self.slides[self.current_index]

    @property
    def can_go_back(self) -> bool:
        return self.current_index > 0

    @property
    def is_last(self) -> bool:
        return self.current_index == self.total_slides - 1

    def advance(self) -> Optional[Navigation]:
        """Move to the next slide and award XP; on the last slide, leave for next_url."""
        if not self.is_last:
            self.current_index += 1
            self.xp_gained += self.xp_per_slide
            return None
        return Navigation(url=self.next_url, reason="finished")

    def back(self) -> None:
        if self.can_go_back:
            self.current_index -= 1

    def exit(self) -> Navigation:
        return Navigation(url=self.back_url, reason="exit")

    def progress_bar(self) -> List[bool]:
        return [index <= self.current_index for index in range(self.total_slides)]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "current_index": self.current_index,
            "total_slides": self.total_slides,
            "xp_gained": self.xp_gained,
            "slide": self.current_slide,
            "progress": self.progress_bar(),
        }
