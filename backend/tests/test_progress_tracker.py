"""
Unit tests for lesson and topic progress.
"""
import sqlite3

import pytest

from services.progress.progress_tracker import ProgressTracker


@pytest.fixture
def tracker(store):
    return ProgressTracker(store=store)


@pytest.fixture
def first_lesson(seeded_course):
    return seeded_course["units"][0]["lessons"][0]["lesson_id"]


class TestLessonStates:
    """Lesson states move absent -> current -> completed only."""

    def test_start_then_complete(self, tracker, store, first_lesson):
        assert store.get_lesson_state("user_1", first_lesson) is None

        assert tracker.start_lesson("user_1", first_lesson)["status"] == "current"
        assert tracker.complete_lesson("user_1", first_lesson)["status"] == "completed"

    def test_complete_without_start(self, tracker, first_lesson):
        assert tracker.complete_lesson("user_1", first_lesson)["status"] == "completed"

    def test_never_moves_backward(self, tracker, store, first_lesson):
        tracker.complete_lesson("user_1", first_lesson)

        state = tracker.start_lesson("user_1", first_lesson)

        assert state["status"] == "completed"
        assert store.get_lesson_state("user_1", first_lesson)["status"] == "completed"

    def test_completed_ids_are_per_user(self, tracker, seeded_course):
        lessons = seeded_course["units"][0]["lessons"]
        tracker.complete_lesson("user_1", lessons[0]["lesson_id"])
        tracker.start_lesson("user_1", lessons[1]["lesson_id"])
        tracker.complete_lesson("user_2", lessons[2]["lesson_id"])

        assert tracker.completed_lesson_ids("user_1") == {lessons[0]["lesson_id"]}
        assert tracker.completed_lesson_ids("user_2") == {lessons[2]["lesson_id"]}

    def test_completed_ids_without_user(self, tracker):
        assert tracker.completed_lesson_ids(None) == set()

    @pytest.mark.parametrize("user_id,lesson_id", [("", "lesson_x"), (None, "lesson_x"), ("user_1", "")])
    def test_lesson_methods_require_ids(self, tracker, user_id, lesson_id):
        with pytest.raises(ValueError):
            tracker.start_lesson(user_id, lesson_id)
        with pytest.raises(ValueError):
            tracker.complete_lesson(user_id, lesson_id)

    def test_state_for_missing_lesson_rejected(self, store):
        with pytest.raises(sqlite3.IntegrityError):
            store.upsert_lesson_state("user_1", "lesson_nope", "current")

        assert store.get_lesson_state("user_1", "lesson_nope") is None


class TestTopicProgress:
    """Voice sessions recorded against topics."""

    def test_first_session_creates_record(self, tracker, seeded_course):
        unit_id = seeded_course["units"][0]["unit"]["unit_id"]

        progress = tracker.update_progress(unit_id, "user_1", duration_seconds=95)

        assert progress["status"] == "completed"
        assert progress["sessions_completed"] == 1
        assert progress["total_seconds"] == 95
        assert progress["last_session_at"] is not None

    def test_sessions_accumulate(self, tracker, seeded_course):
        unit_id = seeded_course["units"][0]["unit"]["unit_id"]

        tracker.update_progress(unit_id, "user_1", duration_seconds=60)
        progress = tracker.update_progress(unit_id, "user_1", duration_seconds=30)

        assert progress["sessions_completed"] == 2
        assert progress["total_seconds"] == 90

    def test_negative_duration_counts_as_zero(self, tracker, seeded_course):
        unit_id = seeded_course["units"][0]["unit"]["unit_id"]

        progress = tracker.update_progress(unit_id, "user_1", duration_seconds=-5)

        assert progress["total_seconds"] == 0

    @pytest.mark.parametrize("topic_id,user_id", [("", "user_1"), ("unit_x", ""), ("unit_x", None)])
    def test_missing_ids_rejected(self, tracker, topic_id, user_id):
        with pytest.raises(ValueError):
            tracker.update_progress(topic_id, user_id)
