"""Tests for the shared search helpers."""

from baum_db.registry import Room, filter_snapshot, like_pattern, name_clause


ROOMS = [Room(1, "Room A"), Room(2, "Lab 1"), Room(3, "Aula")]
BY_NAME = [lambda r: r.name]


class TestFilterSnapshot:
    def test_case_insensitive_substring(self):
        assert filter_snapshot(ROOMS, "oo", BY_NAME) == [ROOMS[0]]
        assert filter_snapshot(ROOMS, "A", BY_NAME) == ROOMS
        assert filter_snapshot(ROOMS, "zzz", BY_NAME) == []

    def test_empty_term_returns_copy(self):
        result = filter_snapshot(ROOMS, "", BY_NAME)
        assert result == ROOMS
        assert result is not ROOMS
        assert filter_snapshot(ROOMS, None, BY_NAME) == ROOMS

    def test_any_field_matches(self):
        fields = [lambda r: r.name, lambda r: str(r.id)]
        assert filter_snapshot(ROOMS, "3", fields) == [ROOMS[2]]

    def test_none_field_never_matches(self):
        assert filter_snapshot(ROOMS, "x", [lambda r: None]) == []

    def test_whitespace_is_part_of_the_term(self):
        assert filter_snapshot(ROOMS, " 1", BY_NAME) == [ROOMS[1]]
        assert filter_snapshot(ROOMS, "  ", BY_NAME) == []


class TestSqlHelpers:
    def test_like_pattern(self):
        assert like_pattern("Room") == "%room%"
        assert like_pattern(" A ") == "% a %"
        assert like_pattern("") == "%%"

    def test_like_pattern_escapes_wildcards(self):
        assert like_pattern("50%_a\\b") == "%50\\%\\_a\\\\b%"

    def test_name_clause(self):
        assert name_clause(["name"]) == "LOWER(name) LIKE ? ESCAPE '\\'"
        assert name_clause(["name", "surname"]).count(" OR ") == 1
