"""
Configuration management for the Edison backend.
Loads configuration from environment variables and .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env file in the project root or the backend directory
BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent
ENV_FILE = PROJECT_ROOT / ".env"

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    backend_env = BACKEND_DIR / ".env"
    if backend_env.exists():
        load_dotenv(backend_env)

# Base paths
BASE_DIR = PROJECT_ROOT
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DB_PATH = Path(os.getenv("DB_PATH", str(DATA_DIR / "edison.db")))
PROMPTS_DIR = BACKEND_DIR / "prompts"
SCHEMA_FILE = BACKEND_DIR / "db" / "schema.sql"

DATA_DIR.mkdir(parents=True, exist_ok=True)

# OpenAI (course outlines)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", None)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo-0125")

# Gemini (lesson slides)
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", None)
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")

# LLM settings (can be overridden via env vars)
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Curriculum generation
OUTLINE_UNIT_COUNT = int(os.getenv("OUTLINE_UNIT_COUNT", "3"))
OUTLINE_LESSONS_PER_UNIT = int(os.getenv("OUTLINE_LESSONS_PER_UNIT", "3"))
# Off by default: course, unit and lesson rows are written independently
ATOMIC_OUTLINE_WRITES = os.getenv("ATOMIC_OUTLINE_WRITES", "false").lower() == "true"
DEFAULT_COLOR_THEME = "bg-[#4854F6]"
UNIT_COLOR_THEMES = [
    DEFAULT_COLOR_THEME,
    "bg-emerald-500",
    "bg-orange-500",
]

# Lesson viewer
XP_PER_SLIDE = int(os.getenv("XP_PER_SLIDE", "5"))

# Voice study sessions
VAPI_ASSISTANT_ID = os.getenv("VAPI_ASSISTANT_ID", None)
STATUS_MESSAGE_TTL_SECONDS = float(os.getenv("STATUS_MESSAGE_TTL_SECONDS", "3"))
ERROR_MESSAGE_TTL_SECONDS = float(os.getenv("ERROR_MESSAGE_TTL_SECONDS", "5"))
AI_SPEAKING_RESET_SECONDS = float(os.getenv("AI_SPEAKING_RESET_SECONDS", "3"))

# API configuration
API_V1_PREFIX = "/api/v1"
# CORS origins can be comma-separated list in env var
CORS_ORIGINS_STR = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_STR.split(",")]

# Startup checks
VALIDATE_REMOTE_SERVICES = os.getenv("VALIDATE_REMOTE_SERVICES", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
