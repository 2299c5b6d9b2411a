"""
Content store for courses, units, lessons and per-user progress.
"""
import json
import logging
import sqlite3
import uuid
from typing import Optional, List, Dict, Any, Set

from core.database import db, Database
from models.curriculum_models import PROGRESS_RANK

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Generate a prefixed row id, e.g. ``unit_3f2a9c01b7de``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}


def _decode_slides(value: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """Slides are stored as JSON text; NULL means not generated yet."""
    if value is None:
        return None
    slides = json.loads(value)
    return slides if isinstance(slides, list) else None


class ContentStore:
    """Reads and writes the curriculum tables."""

    def __init__(self, database: Optional[Database] = None):
        self.db = database or db

    def _write(self, query: str, params: tuple, conn: Optional[sqlite3.Connection] = None) -> int:
        if conn is not None:
            return self.db.execute_write_in_transaction(conn, query, params)
        return self.db.execute_write(query, params)

    def _read_one(
        self,
        query: str,
        params: tuple,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Dict[str, Any]]:
        # Reads inside an open transaction must use that connection to see its writes
        if conn is not None:
            return _row_to_dict(conn.execute(query, params).fetchone())
        return _row_to_dict(self.db.execute_one(query, params))

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def create_course(
        self,
        topic: str,
        level: str,
        user_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Dict[str, Any]]:
        """Insert a course row and return it."""
        course_id = new_id("course")
        self._write(
            """
            INSERT INTO courses (course_id, title, topic, level, user_id)
            VALUES (?, ?, ?, ?, ?)
            """,
            (course_id, f"{topic} for {level}", topic, level, user_id),
            conn,
        )
        return self._read_one("SELECT * FROM courses WHERE course_id = ?", (course_id,), conn)

    def get_course(self, course_id: str) -> Optional[Dict[str, Any]]:
        return _row_to_dict(
            self.db.execute_one("SELECT * FROM courses WHERE course_id = ?", (course_id,))
        )

    def list_courses(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        if user_id:
            rows = self.db.execute(
                "SELECT * FROM courses WHERE user_id = ? ORDER BY created_at, rowid",
                (user_id,),
            )
        else:
            rows = self.db.execute("SELECT * FROM courses ORDER BY created_at, rowid")
        return [_row_to_dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def insert_unit(
        self,
        course_id: str,
        title: str,
        description: Optional[str],
        order_index: int,
        color_theme: Optional[str] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[Dict[str, Any]]:
        """Insert a unit row and return it."""
        unit_id = new_id("unit")
        self._write(
            """
            INSERT INTO units (unit_id, course_id, title, description, order_index, color_theme)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (unit_id, course_id, title, description, order_index, color_theme),
            conn,
        )
        return self._read_one("SELECT * FROM units WHERE unit_id = ?", (unit_id,), conn)

    def get_unit(self, unit_id: str) -> Optional[Dict[str, Any]]:
        """Unit joined with its course, used as the voice-session topic context."""
        return _row_to_dict(
            self.db.execute_one(
                """
                SELECT u.unit_id, u.course_id, u.title, u.description, u.order_index,
                       u.color_theme, c.topic AS subject, c.level AS class_name,
                       c.title AS course_title
                  FROM units u
                  JOIN courses c ON c.course_id = u.course_id
                 WHERE u.unit_id = ?
                """,
                (unit_id,),
            )
        )

    def list_units_with_lessons(self, course_id: str) -> List[Dict[str, Any]]:
        """Units in order, each carrying its lessons sorted by order index."""
        unit_rows = self.db.execute(
            "SELECT * FROM units WHERE course_id = ? ORDER BY order_index ASC",
            (course_id,),
        )
        lesson_rows = self.db.execute(
            """
            SELECT l.lesson_id, l.unit_id, l.title, l.order_index, l.lesson_type
              FROM lessons l
              JOIN units u ON u.unit_id = l.unit_id
             WHERE u.course_id = ?
             ORDER BY l.order_index ASC
            """,
            (course_id,),
        )

        lessons_by_unit: Dict[str, List[Dict[str, Any]]] = {}
        for row in lesson_rows:
            lessons_by_unit.setdefault(row["unit_id"], []).append(_row_to_dict(row))

        units = []
        for row in unit_rows:
            unit = _row_to_dict(row)
            unit["lessons"] = lessons_by_unit.get(unit["unit_id"], [])
            units.append(unit)
        return units

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    def insert_lessons(
        self,
        unit_id: str,
        lessons_payload: List[Dict[str, Any]],
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[Dict[str, Any]]:
        """Insert lesson rows for a unit; each payload item needs title and order_index."""
        inserted = []
        for lesson in lessons_payload:
            lesson_id = new_id("lesson")
            self._write(
                """
                INSERT INTO lessons (lesson_id, unit_id, title, order_index, lesson_type)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    lesson_id,
                    unit_id,
                    lesson["title"],
                    lesson["order_index"],
                    lesson.get("type", "lesson"),
                ),
                conn,
            )
            inserted.append({"lesson_id": lesson_id, "unit_id": unit_id, **lesson})
        return inserted

    def get_lesson(self, lesson_id: str) -> Optional[Dict[str, Any]]:
        lesson = _row_to_dict(
            self.db.execute_one("SELECT * FROM lessons WHERE lesson_id = ?", (lesson_id,))
        )
        if lesson is not None:
            lesson["slides"] = _decode_slides(lesson.get("slides"))
        return lesson

    def set_lesson_slides(self, lesson_id: str, slides: List[Dict[str, Any]]) -> int:
        return self.db.execute_write(
            "UPDATE lessons SET slides = ? WHERE lesson_id = ?",
            (json.dumps(slides, ensure_ascii=False), lesson_id),
        )

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_lesson_state(self, user_id: str, lesson_id: str) -> Optional[Dict[str, Any]]:
        return _row_to_dict(
            self.db.execute_one(
                "SELECT * FROM user_lesson_states WHERE user_id = ? AND lesson_id = ?",
                (user_id, lesson_id),
            )
        )

    def completed_lesson_ids(self, user_id: str) -> Set[str]:
        rows = self.db.execute(
            "SELECT lesson_id FROM user_lesson_states WHERE user_id = ? AND status = 'completed'",
            (user_id,),
        )
        return {row["lesson_id"] for row in rows}

    def upsert_lesson_state(self, user_id: str, lesson_id: str, status: str) -> Dict[str, Any]:
        """Write a lesson state, refusing to move it backward."""
        existing = self.get_lesson_state(user_id, lesson_id)
        current_status = existing["status"] if existing else None
        if PROGRESS_RANK[status] <= PROGRESS_RANK[current_status]:
            return existing

        self.db.execute_write(
            """
            INSERT INTO user_lesson_states (user_id, lesson_id, status, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id, lesson_id) DO UPDATE
              SET status = excluded.status,
                  updated_at = excluded.updated_at
            """,
            (user_id, lesson_id, status),
        )
        return self.get_lesson_state(user_id, lesson_id)

    def get_topic_progress(self, user_id: str, unit_id: str) -> Optional[Dict[str, Any]]:
        return _row_to_dict(
            self.db.execute_one(
                "SELECT * FROM topic_progress WHERE user_id = ? AND unit_id = ?",
                (user_id, unit_id),
            )
        )

    def record_topic_session(
        self,
        user_id: str,
        unit_id: str,
        status: str,
        duration_seconds: int,
    ) -> Dict[str, Any]:
        """Count one finished study session against a topic."""
        existing = self.get_topic_progress(user_id, unit_id)
        if existing and PROGRESS_RANK[existing["status"]] > PROGRESS_RANK[status]:
            status = existing["status"]

        self.db.execute_write(
            """
            INSERT INTO topic_progress
              (user_id, unit_id, status, sessions_completed, total_seconds, last_session_at)
            VALUES (?, ?, ?, 1, ?, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id, unit_id) DO UPDATE
              SET status = excluded.status,
                  sessions_completed = topic_progress.sessions_completed + 1,
                  total_seconds = topic_progress.total_seconds + excluded.total_seconds,
                  last_session_at = excluded.last_session_at
            """,
            (user_id, unit_id, status, duration_seconds),
        )
        return self.get_topic_progress(user_id, unit_id)


# Global content store instance
content_store = ContentStore()
