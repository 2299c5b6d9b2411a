"""
Centralized prompt file management with fallback templates.
"""
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

REQUIRED_PROMPTS = ["course_outline", "lesson_slides"]


class PromptManager:
    """Manages prompt file loading with consistent fallback behavior."""

    def __init__(self, prompts_dir: Optional[Path] = None):
        if prompts_dir is None:
            from core.config import PROMPTS_DIR
            prompts_dir = PROMPTS_DIR
        self.prompts_dir = prompts_dir
        self.loaded_prompts: Dict[str, str] = {}

        # Fallback templates
        self.fallback_templates = {
            "course_outline": self._get_course_outline_fallback(),
            "lesson_slides": self._get_lesson_slides_fallback(),
        }

    def get_prompt(self, prompt_name: str) -> str:
        """
        Load prompt by name with fallback.

        Args:
            prompt_name: Name of prompt file (without .txt extension)

        Returns:
            Prompt template string
        """
        if prompt_name in self.loaded_prompts:
            return self.loaded_prompts[prompt_name]

        prompt_file = self.prompts_dir / f"{prompt_name}.txt"

        if prompt_file.exists():
            try:
                with open(prompt_file, "r", encoding="utf-8") as f:
                    template = f.read()

                if not template.strip():
                    raise ValueError(f"Prompt file is empty: {prompt_file}")

                self.loaded_prompts[prompt_name] = template
                return template

            except Exception as e:
                logger.warning(f"Failed to load prompt file {prompt_file}: {e}")
                # Fall through to fallback

        if prompt_name in self.fallback_templates:
            logger.info(f"Using fallback template for: {prompt_name}")
            template = self.fallback_templates[prompt_name]
            self.loaded_prompts[prompt_name] = template
            return template

        raise FileNotFoundError(
            f"Prompt file not found and no fallback available: {prompt_name}.txt. "
            f"Expected at: {prompt_file}"
        )

    def _get_course_outline_fallback(self) -> str:
        """Fallback template for NERDC syllabus generation."""
        return """You are an expert Nigerian teacher using the NERDC curriculum.
Create a structured syllabus for the subject: "{topic}" for level: "{level}" (e.g., JSS1, SS3).

Output strictly in this JSON format:
{{
  "units": [
    {{
      "title": "Unit Title",
      "description": "Short description",
      "lessons": [
        {{ "title": "Lesson 1 Title" }},
        {{ "title": "Lesson 2 Title" }}
      ]
    }}
  ]
}}
Create exactly {unit_count} units, with {lessons_per_unit} lessons each."""

    def _get_lesson_slides_fallback(self) -> str:
        """Fallback template for lesson slide generation."""
        return """You are an educational content generator for Nigerian students.
Create structured slide content for a lesson titled "{lesson_title}"
within the topic "{topic_title}".

Style: Fun, bite-sized, Duolingo-style. Use relevant emojis.

Return ONLY valid JSON. Do not wrap it in markdown code blocks.
The structure must be:
{{
  "slides": [
    {{ "type": "intro", "title": "...", "content": "...", "emoji": "👋" }},
    {{ "type": "concept", "title": "...", "content": "...", "emoji": "💡" }},
    {{ "type": "example", "title": "...", "content": "...", "emoji": "🧪" }}
  ]
}}"""


# Global prompt manager instance
prompt_manager = PromptManager()
