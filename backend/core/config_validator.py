"""
Configuration validation for the Edison backend.
Validates prompt files, model credentials, database, and settings on startup.
"""
import requests
from typing import List, Dict, Any


class ConfigValidator:
    """Validates system configuration before serving requests."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run all validation checks.

        Returns:
            {
                "valid": bool,
                "errors": List[str],
                "warnings": List[str]
            }
        """
        from core.config import VALIDATE_REMOTE_SERVICES

        self.errors = []
        self.warnings = []

        self._validate_prompt_files()
        self._validate_api_keys()
        self._validate_database()
        self._validate_config_values()
        if VALIDATE_REMOTE_SERVICES:
            self._validate_model_endpoints()

        return {
            "valid": len(self.errors) == 0,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def _validate_prompt_files(self):
        """Prompt files are optional (fallbacks exist) but should not be empty."""
        from core.config import PROMPTS_DIR
        from core.prompt_manager import REQUIRED_PROMPTS

        if not PROMPTS_DIR.exists():
            self.warnings.append(
                f"Prompts directory not found: {PROMPTS_DIR}. Built-in templates will be used."
            )
            return

        for prompt_name in REQUIRED_PROMPTS:
            path = PROMPTS_DIR / f"{prompt_name}.txt"
            if not path.exists():
                self.warnings.append(
                    f"Prompt file missing: {path.name}. Built-in template will be used."
                )
            elif path.stat().st_size == 0:
                self.warnings.append(f"Prompt file is empty: {path.name}")

    def _validate_api_keys(self):
        """Missing keys degrade features rather than block startup."""
        from core.config import OPENAI_API_KEY, GOOGLE_API_KEY, VAPI_ASSISTANT_ID

        if not OPENAI_API_KEY:
            self.warnings.append("OPENAI_API_KEY is not set: course generation will fail.")
        if not GOOGLE_API_KEY:
            self.warnings.append("GOOGLE_API_KEY is not set: lessons will show offline slides.")
        if not VAPI_ASSISTANT_ID:
            self.warnings.append("VAPI_ASSISTANT_ID is not set: voice sessions cannot start.")

    def _validate_database(self):
        """Check that database is accessible and schema is initialized."""
        try:
            from core.database import db

            required_tables = [
                "courses",
                "units",
                "lessons",
                "user_lesson_states",
                "topic_progress",
            ]

            for table in required_tables:
                result = db.execute_one(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                    (table,)
                )
                if not result:
                    self.errors.append(
                        f"Required database table missing: {table}. "
                        "Check that db/schema.sql is present."
                    )

        except Exception as e:
            self.errors.append(f"Database connection error: {e}")

    def _validate_config_values(self):
        """Validate configuration value ranges and types."""
        from core.config import (
            OUTLINE_UNIT_COUNT,
            OUTLINE_LESSONS_PER_UNIT,
            LLM_TEMPERATURE,
            XP_PER_SLIDE,
        )

        if OUTLINE_UNIT_COUNT < 1:
            self.errors.append(f"OUTLINE_UNIT_COUNT ({OUTLINE_UNIT_COUNT}) must be >= 1")

        if OUTLINE_LESSONS_PER_UNIT < 1:
            self.errors.append(f"OUTLINE_LESSONS_PER_UNIT ({OUTLINE_LESSONS_PER_UNIT}) must be >= 1")

        if XP_PER_SLIDE < 0:
            self.errors.append(f"XP_PER_SLIDE ({XP_PER_SLIDE}) must not be negative")

        if not (0.0 <= LLM_TEMPERATURE <= 2.0):
            self.warnings.append(
                f"LLM_TEMPERATURE ({LLM_TEMPERATURE}) outside normal range [0.0, 2.0]"
            )

    def _validate_model_endpoints(self):
        """Check that the configured model endpoints accept our keys."""
        from core.config import OPENAI_API_KEY, OPENAI_BASE_URL, GOOGLE_API_KEY, GEMINI_BASE_URL

        checks = []
        if OPENAI_API_KEY:
            checks.append((
                "OpenAI",
                f"{OPENAI_BASE_URL.rstrip('/')}/models",
                {"headers": {"Authorization": f"Bearer {OPENAI_API_KEY}"}},
            ))
        if GOOGLE_API_KEY:
            checks.append((
                "Gemini",
                f"{GEMINI_BASE_URL.rstrip('/')}/models",
                {"params": {"key": GOOGLE_API_KEY}},
            ))

        for name, url, kwargs in checks:
            try:
                response = requests.get(url, timeout=5, **kwargs)
                response.raise_for_status()
            except requests.exceptions.ConnectionError:
                self.errors.append(f"Cannot connect to {name} at {url}.")
            except requests.exceptions.Timeout:
                self.errors.append(f"{name} connection timeout at {url}.")
            except Exception as e:
                self.errors.append(f"{name} endpoint check failed: {e}")


# Global validator instance
config_validator = ConfigValidator()
