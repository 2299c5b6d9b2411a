"""
Lesson slide generator with lesson-row caching and an offline fallback.
"""
import copy
import json
import logging
import re
from typing import List, Dict, Any, Optional

from core.llm_client import llm, LLMClient
from models.curriculum_models import Slide
from services.content_store import content_store, ContentStore

logger = logging.getLogger(__name__)

# Returned (never stored) when generation fails
FALLBACK_SLIDES: List[Dict[str, str]] = [
    {
        "type": "error",
        "title": "AI Generation Failed",
        "content": "We are having trouble connecting to the brain. Here is some offline content.",
        "emoji": "🤖",
    },
    {
        "type": "intro",
        "title": "Welcome (Offline Mode)",
        "content": "This is placeholder content to verify your UI works while the AI is resting.",
        "emoji": "🔌",
    },
]

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers (```json ... ```) the model may add."""
    return _FENCE_PATTERN.sub("", text or "").strip()


def normalize_slides(data: Any) -> List[Dict[str, str]]:
    """
    Turn parsed model output into a list of slide dicts.

    Accepts either ``{"slides": [...]}`` or a bare list. Items that are not
    objects are dropped.

    Raises:
        ValueError: if no usable slide remains
    """
    slides = data.get("slides") if isinstance(data, dict) else data
    if not isinstance(slides, list):
        raise ValueError("Slide JSON has no slides list")

    normalized = [Slide.from_dict(item).to_dict() for item in slides if isinstance(item, dict)]
    if not normalized:
        raise ValueError("Slide JSON has no usable slides")
    return normalized


class SlideGenerator:
    """Generates slide content for a lesson once and caches it on the lesson row."""

    def __init__(self, store: Optional[ContentStore] = None, client: Optional[LLMClient] = None):
        self.store = store or content_store
        self.client = client or llm

        from core.prompt_manager import prompt_manager
        self.prompt_template = prompt_manager.get_prompt("lesson_slides")

    def generate_lesson_content(self, lesson_id: str, topic_title: str) -> List[Dict[str, Any]]:
        """
        Return slides for a lesson.

        Cached slides are returned as stored when the list is non-empty. On a
        cache miss the model is asked for an intro/concept/example triple which
        is saved before returning.
        Any failure returns FALLBACK_SLIDES without saving anything, so the next
        call tries again.
        """
        lesson = self.store.get_lesson(lesson_id)

        # An empty stored list is treated as a miss and regenerated
        if lesson and lesson.get("slides"):
            return lesson["slides"]

        try:
            prompt = self.prompt_template.format(
                lesson_title=(lesson or {}).get("title") or "Lesson",
                topic_title=topic_title,
            )
            text = self.client.call_gemini(prompt)
            generated = json.loads(strip_code_fences(text))
            slides = normalize_slides(generated)

            self.store.set_lesson_slides(lesson_id, slides)
            logger.info(f"Generated {len(slides)} slides for lesson {lesson_id}")

            return slides

        except Exception as e:
            logger.error(f"Slide generation failed for lesson {lesson_id}: {e}")
            return copy.deepcopy(FALLBACK_SLIDES)


# Global slide generator instance
slide_generator = SlideGenerator()
