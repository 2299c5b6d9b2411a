"""
Shared fixtures: every test gets its own SQLite file.
"""
import json
import os
import tempfile
from pathlib import Path

# Module-level singletons open DB_PATH on import; keep them away from data/
os.environ.setdefault("DB_PATH", str(Path(tempfile.mkdtemp()) / "edison-test.db"))
os.environ.setdefault("VALIDATE_REMOTE_SERVICES", "false")

import pytest
from unittest.mock import Mock

from core.database import Database
from core.llm_client import LLMClient
from core.transaction import TransactionManager
from services.content_store import ContentStore


def make_outline_json(units: int = 3, lessons: int = 3, topic: str = "Algebra") -> str:
    return json.dumps({
        "units": [
            {
                "title": f"{topic} Unit {u}",
                "description": f"Description {u}",
                "lessons": [{"title": f"Lesson {u}.{l}"} for l in range(1, lessons + 1)],
            }
            for u in range(1, units + 1)
        ]
    })


SLIDES_JSON = json.dumps({
    "slides": [
        {"type": "intro", "title": "Hello", "content": "Welcome to algebra", "emoji": "👋"},
        {"type": "concept", "title": "Variables", "content": "x stands for a number", "emoji": "💡"},
        {"type": "example", "title": "Try it", "content": "x + 2 = 5, so x = 3", "emoji": "🧪"},
    ]
})


@pytest.fixture
def database(tmp_path):
    return Database(tmp_path / "test.db")


@pytest.fixture
def store(database):
    return ContentStore(database)


@pytest.fixture
def transactions(database):
    return TransactionManager(database)


@pytest.fixture
def fake_llm():
    return Mock(spec=LLMClient)


@pytest.fixture
def seeded_course(store):
    """A course with 3 units of 3 lessons written straight to the store."""
    course = store.create_course("Algebra", "JSS1", "user_1")
    units = []
    for u in range(1, 4):
        unit = store.insert_unit(course["course_id"], f"Unit {u}", f"About unit {u}", u)
        lessons = store.insert_lessons(
            unit["unit_id"],
            [{"title": f"Lesson {u}.{l}", "order_index": l} for l in range(1, 4)],
        )
        units.append({"unit": unit, "lessons": lessons})
    return {"course": course, "units": units}
