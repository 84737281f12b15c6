"""
Tests for the JSON course store.
"""

import json

from usersearch.storage import add_course, get_courses, load_store


class TestLoadStore:
    def test_missing_file(self, tmp_path):
        assert load_store(tmp_path / "nope.json") == {"courses": []}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text("")
        assert load_store(path) == {"courses": []}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text("{not json")
        assert load_store(path) == {"courses": []}

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "courses.json"
        path.write_text(json.dumps({"courses": "nope"}))
        assert load_store(path) == {"courses": []}


class TestAddCourse:
    def test_appends_in_order(self, temp_store_file, valid_course):
        second = dict(valid_course, title="Jira basics", product="Jira")
        assert add_course(temp_store_file, valid_course)["success"]
        assert add_course(temp_store_file, second)["success"]

        titles = [c["title"] for c in get_courses(temp_store_file)]
        assert titles == ["Confluence for admins", "Jira basics"]

    def test_creates_parent_directories(self, tmp_path, valid_course):
        path = tmp_path / "nested" / "courses.json"
        assert add_course(path, valid_course) == {"success": True}
        assert path.exists()

    def test_fills_defaults(self, temp_store_file, valid_course):
        del valid_course["level"]
        add_course(temp_store_file, valid_course)
        stored = get_courses(temp_store_file)[0]
        assert stored["level"] == "Beginner"
        assert stored["imageUrl"] == valid_course["imageBase64"]

    def test_invalid_course_not_stored(self, temp_store_file):
        result = add_course(temp_store_file, {"title": "Only a title"})
        assert result["success"] is False
        assert "description" in result["error"]
        assert get_courses(temp_store_file) == []

    def test_non_object_course_not_stored(self, temp_store_file):
        result = add_course(temp_store_file, ["not", "a", "dict"])
        assert result == {"success": False, "error": "Course must be a JSON object"}
        assert get_courses(temp_store_file) == []
