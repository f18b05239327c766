from datetime import date

import pytest

from task_api.exceptions import ValidationError
from task_api.validators import (
    parse_calendar_date,
    validate_description,
    validate_due_date,
    validate_identifier,
    validate_pagination,
    validate_search_query,
    validate_timezone,
    validate_title,
)

TODAY = date(2025, 6, 15)


class TestTitle:
    def test_two_characters_rejected(self):
        with pytest.raises(ValidationError):
            validate_title("ab")

    def test_regular_title_accepted_and_trimmed(self):
        assert validate_title("Fix bug") == "Fix bug"
        assert validate_title("   Fix bug  ") == "Fix bug"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="required"):
            validate_title("    ")

    def test_length_bounds(self):
        assert validate_title("x" * 200) == "x" * 200
        with pytest.raises(ValidationError):
            validate_title("x" * 201)

    @pytest.mark.parametrize("char", ["<", ">", '"', "'", "&"])
    def test_forbidden_characters(self, char):
        with pytest.raises(ValidationError):
            validate_title(f"Fix {char} bug")


class TestDescription:
    def test_empty_allowed(self):
        assert validate_description("") == ""

    def test_too_long(self):
        assert validate_description("d" * 2000)
        with pytest.raises(ValidationError):
            validate_description("d" * 2001)

    def test_forbidden_characters(self):
        with pytest.raises(ValidationError):
            validate_description("Tom & Jerry")


class TestDates:
    def test_invalid_day_for_february(self):
        with pytest.raises(ValidationError):
            parse_calendar_date("2024-02-30")

    def test_leap_years(self):
        assert parse_calendar_date("2024-02-29") == date(2024, 2, 29)
        with pytest.raises(ValidationError):
            parse_calendar_date("2023-02-29")
        assert parse_calendar_date("2000-02-29") == date(2000, 2, 29)
        with pytest.raises(ValidationError):
            parse_calendar_date("2100-02-29")

    @pytest.mark.parametrize(
        "value",
        ["2024-1-05", "2024/01/05", "20240105", "", "2024-01-05T00:00:00", "1999-12-31", "2101-01-01", "2024-13-01", "2024-00-10", "2024-04-31"],
    )
    def test_malformed_or_out_of_range(self, value):
        with pytest.raises(ValidationError):
            parse_calendar_date(value)

    def test_due_date_window(self):
        assert validate_due_date("2024-06-15", TODAY) == "2024-06-15"
        assert validate_due_date("2035-06-15", TODAY) == "2035-06-15"
        with pytest.raises(ValidationError, match="past"):
            validate_due_date("2024-06-14", TODAY)
        with pytest.raises(ValidationError, match="future"):
            validate_due_date("2035-06-16", TODAY)

    def test_due_date_window_from_leap_day(self):
        leap_day = date(2024, 2, 29)
        assert validate_due_date("2023-02-28", leap_day) == "2023-02-28"
        with pytest.raises(ValidationError):
            validate_due_date("2023-02-27", leap_day)


class TestPagination:
    def test_valid(self):
        assert validate_pagination(1, 1) == (1, 1)
        assert validate_pagination(7, 100) == (7, 100)

    @pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0), (1, 101)])
    def test_invalid(self, page, page_size):
        with pytest.raises(ValidationError):
            validate_pagination(page, page_size)


class TestSearchQuery:
    def test_trimmed(self):
        assert validate_search_query("  ab  ") == "ab"

    def test_length_bounds(self):
        with pytest.raises(ValidationError):
            validate_search_query(" a ")
        with pytest.raises(ValidationError):
            validate_search_query("q" * 101)
        assert validate_search_query("q" * 100)

    @pytest.mark.parametrize(
        "query",
        ["it's", 'say "hi"', "a; b", "a -- b", "/* note", "note */", "drop table", "DELETE me", "Select all", "insert row"],
    )
    def test_blacklisted_tokens(self, query):
        with pytest.raises(ValidationError):
            validate_search_query(query)

    @pytest.mark.parametrize(
        "query", ["updated notes", "selection", "updates due", "deleted items", "preselected", "dropdown fix"]
    )
    def test_keywords_rejected_inside_words(self, query):
        with pytest.raises(ValidationError):
            validate_search_query(query)

    def test_plain_words_accepted(self):
        assert validate_search_query("release notes") == "release notes"


class TestIdentifier:
    def test_uuid_accepted(self):
        assert validate_identifier("5f0c2a9e-6c1d-4a8e-9b47-0d2f3c4b5a61")
        assert validate_identifier("0123456789")

    @pytest.mark.parametrize("value", ["", "abc-123", "zzzzzzzzzzzz", "0123456789 ", "task-0000-0001"])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_identifier(value)


def test_timezone_allow_list():
    assert validate_timezone("Asia/Colombo") == "Asia/Colombo"
    with pytest.raises(ValidationError):
        validate_timezone("Mars/Olympus_Mons")
