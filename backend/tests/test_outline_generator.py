"""
Unit tests for course outline generation.
"""
import pytest
from unittest.mock import Mock

from conftest import make_outline_json
from services.generation.outline_generator import (
    OutlineGenerator,
    CourseCreationError,
    OutlineParseError,
    parse_outline,
    validate_outline,
    SYSTEM_PROMPT,
)


def _count(database, table):
    return database.execute_one(f"SELECT COUNT(*) AS n FROM {table}")["n"]


class TestParseOutline:
    """Test outline JSON parsing."""

    def test_parse_valid_outline(self):
        outline = parse_outline(make_outline_json())

        assert len(outline) == 3
        assert all(len(unit.lessons) == 3 for unit in outline)
        assert outline[0].title == "Algebra Unit 1"
        assert outline[0].lessons[2].title == "Lesson 1.3"

    def test_parse_malformed_json_raises(self):
        with pytest.raises(OutlineParseError) as exc_info:
            parse_outline("not json at all")

        assert exc_info.value.raw == "not json at all"

    def test_parse_missing_units_raises(self):
        with pytest.raises(OutlineParseError):
            parse_outline('{"modules": []}')

    def test_outline_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_outline("{")

    def test_validate_outline_reports_shape_mismatch(self):
        outline = parse_outline(make_outline_json(units=2, lessons=4))

        problems = validate_outline(outline, unit_count=3, lessons_per_unit=3)

        assert "expected 3 units, got 2" in problems
        assert len(problems) == 3

    def test_validate_outline_accepts_expected_shape(self):
        assert validate_outline(parse_outline(make_outline_json())) == []

    def test_non_list_lessons_raises(self):
        with pytest.raises(OutlineParseError):
            parse_outline('{"units": [{"title": "U", "lessons": 5}]}')

    def test_missing_lessons_parses_as_empty(self):
        outline = parse_outline('{"units": [{"title": "U"}]}')
        assert outline[0].lessons == []


class TestGenerateCourseStructure:
    """Test the full generate-and-store flow."""

    def test_algebra_jss1_creates_three_units_of_three_lessons(self, store, database, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        course_id = generator.generate_course_structure("Algebra", "JSS1", "user_1")

        course = store.get_course(course_id)
        assert course["title"] == "Algebra for JSS1"
        assert course["user_id"] == "user_1"

        units = store.list_units_with_lessons(course_id)
        assert _count(database, "units") == 3
        assert _count(database, "lessons") == 9
        assert [unit["order_index"] for unit in units] == [1, 2, 3]
        for unit in units:
            assert [lesson["order_index"] for lesson in unit["lessons"]] == [1, 2, 3]
            assert all(lesson["lesson_type"] == "lesson" for lesson in unit["lessons"])

    def test_prompt_mentions_topic_level_and_shape(self, store, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        generator.generate_course_structure("Basic Science", "SS3", "user_1")

        args, kwargs = fake_llm.call_openai.call_args
        prompt = args[0]
        assert '"Basic Science"' in prompt
        assert '"SS3"' in prompt
        assert "exactly 3 units, with 3 lessons each" in prompt
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["json_mode"] is True

    def test_units_get_color_themes(self, store, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        course_id = generator.generate_course_structure("Algebra", "JSS1", "user_1")

        themes = [unit["color_theme"] for unit in store.list_units_with_lessons(course_id)]
        assert themes == ["bg-[#4854F6]", "bg-emerald-500", "bg-orange-500"]

    def test_course_creation_failure_raises(self, fake_llm):
        failing_store = Mock()
        failing_store.create_course.return_value = None
        generator = OutlineGenerator(store=failing_store, client=fake_llm, atomic=False)

        with pytest.raises(CourseCreationError, match="Failed to create course"):
            generator.generate_course_structure("Algebra", "JSS1", "user_1")

        fake_llm.call_openai.assert_not_called()

    def test_malformed_model_output_propagates(self, store, database, fake_llm):
        fake_llm.call_openai.return_value = "Sure! Here is your syllabus..."
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        with pytest.raises(OutlineParseError):
            generator.generate_course_structure("Algebra", "JSS1", "user_1")

        # Course row is already written; no units follow
        assert _count(database, "courses") == 1
        assert _count(database, "units") == 0

    def test_failure_midway_leaves_partial_course_by_default(self, store, database, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        original_insert_lessons = store.insert_lessons
        calls = {"n": 0}

        def flaky_insert_lessons(unit_id, payload, conn=None):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("connection dropped")
            return original_insert_lessons(unit_id, payload, conn=conn)

        store.insert_lessons = flaky_insert_lessons
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        with pytest.raises(RuntimeError):
            generator.generate_course_structure("Algebra", "JSS1", "user_1")

        assert _count(database, "courses") == 1
        assert _count(database, "units") == 2
        assert _count(database, "lessons") == 3

    def test_atomic_mode_rolls_back_everything(self, store, database, transactions, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        original_insert_lessons = store.insert_lessons
        calls = {"n": 0}

        def flaky_insert_lessons(unit_id, payload, conn=None):
            calls["n"] += 1
            if calls["n"] == 3:
                raise RuntimeError("connection dropped")
            return original_insert_lessons(unit_id, payload, conn=conn)

        store.insert_lessons = flaky_insert_lessons
        generator = OutlineGenerator(
            store=store, client=fake_llm, transactions=transactions, atomic=True
        )

        with pytest.raises(RuntimeError):
            generator.generate_course_structure("Algebra", "JSS1", "user_1")

        assert _count(database, "courses") == 0
        assert _count(database, "units") == 0
        assert _count(database, "lessons") == 0

    def test_atomic_mode_commits_on_success(self, store, database, transactions, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json()
        generator = OutlineGenerator(
            store=store, client=fake_llm, transactions=transactions, atomic=True
        )

        course_id = generator.generate_course_structure("Algebra", "JSS1", "user_1")

        assert store.get_course(course_id) is not None
        assert _count(database, "units") == 3
        assert _count(database, "lessons") == 9

    def test_unexpected_shape_is_stored_as_returned(self, store, database, fake_llm):
        fake_llm.call_openai.return_value = make_outline_json(units=2, lessons=2)
        generator = OutlineGenerator(store=store, client=fake_llm, atomic=False)

        course_id = generator.generate_course_structure("Algebra", "JSS1", "user_1")

        units = store.list_units_with_lessons(course_id)
        assert [unit["order_index"] for unit in units] == [1, 2]
        assert [lesson["order_index"] for lesson in units[1]["lessons"]] == [1, 2]

    def test_atomic_mode_does_not_lock_writes_during_model_call(self, store, database, transactions, fake_llm):
        def call_openai(*args, **kwargs):
            # Another request writing while the model is still answering
            store.create_course("Biology", "SS1", "user_2")
            return make_outline_json()

        fake_llm.call_openai.side_effect = call_openai
        generator = OutlineGenerator(
            store=store, client=fake_llm, transactions=transactions, atomic=True
        )

        generator.generate_course_structure("Algebra", "JSS1", "user_1")

        assert _count(database, "courses") == 2
        assert _count(database, "lessons") == 9

    def test_atomic_mode_writes_nothing_on_unusable_outline(self, store, database, transactions, fake_llm):
        fake_llm.call_openai.return_value = "Sure! Here is your syllabus..."
        generator = OutlineGenerator(
            store=store, client=fake_llm, transactions=transactions, atomic=True
        )

        with pytest.raises(OutlineParseError):
            generator.generate_course_structure("Algebra", "JSS1", "user_1")

        assert _count(database, "courses") == 0
