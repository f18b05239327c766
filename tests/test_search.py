import pytest

from conftest import ADMIN, USER_A, USER_B, USER_C
from task_api.exceptions import ValidationError
from task_api.schemas import TaskFilterOptions


@pytest.fixture()
def seeded(make_task):
    make_task(USER_A, title="Write release notes", description="Summarize changes", priority="LOW")
    make_task(USER_A, title="Fix login bug", description="Users see a blank page", priority="HIGH")
    make_task(USER_B, title="Review notes draft", description="Shared with A", assigned_to=USER_A, priority="MEDIUM")
    make_task(USER_C, title="Private notes", description="Only for C")


class TestSearchTasks:
    def test_matches_title_or_description_case_insensitively(self, service, seeded):
        by_title = service.search_tasks(USER_A, False, "NOTES")
        assert sorted(t.title for t in by_title.tasks) == ["Review notes draft", "Write release notes"]
        by_description = service.search_tasks(USER_A, False, "blank PAGE")
        assert [t.title for t in by_description.tasks] == ["Fix login bug"]

    def test_results_respect_access_scope(self, service, seeded):
        result = service.search_tasks(USER_C, False, "notes")
        assert [t.title for t in result.tasks] == ["Private notes"]
        assert all(USER_C in (t.created_by, t.assigned_to) for t in result.tasks)

    def test_admin_searches_everything(self, service, seeded):
        assert service.search_tasks(ADMIN, True, "notes").pagination.total_items == 3

    def test_sorted_by_priority_rank(self, service, seeded):
        options = TaskFilterOptions(sort_by="priority", sort_order="asc")
        result = service.search_tasks(ADMIN, True, "notes", options)
        assert [t.priority.value for t in result.tasks] == ["LOW", "MEDIUM", "MEDIUM"]

    def test_totals_come_from_matched_set(self, service, make_task):
        for i in range(5):
            make_task(USER_A, title=f"Alpha {i}")
        for i in range(3):
            make_task(USER_A, title=f"Beta {i}")

        page = service.search_tasks(USER_A, False, "alpha", TaskFilterOptions(page=2, page_size=2))
        assert len(page.tasks) == 2
        assert page.pagination.total_items == 5
        assert page.pagination.total_pages == 3

        last = service.search_tasks(USER_A, False, "alpha", TaskFilterOptions(page=3, page_size=2))
        assert len(last.tasks) == 1
        assert not last.pagination.has_next

    def test_page_past_the_end_is_empty(self, service, seeded):
        result = service.search_tasks(USER_A, False, "notes", TaskFilterOptions(page=9, page_size=10))
        assert result.tasks == []
        assert result.pagination.total_items == 2

    def test_explicit_filters_narrow_candidates(self, service, seeded):
        result = service.search_tasks(USER_A, False, "notes", TaskFilterOptions(created_by=USER_B))
        assert [t.title for t in result.tasks] == ["Review notes draft"]

    def test_stable_order_for_equal_keys(self, service, make_task):
        created = [make_task(USER_A, title=f"Same day {i}", due_date="2025-08-01") for i in range(3)]
        options = TaskFilterOptions(sort_by="dueDate", sort_order="desc")
        result = service.search_tasks(USER_A, False, "same day", options)
        assert [t.id for t in result.tasks] == [t.id for t in created]

    @pytest.mark.parametrize("query", ["", " ", "x", "drop it", "a;b"])
    def test_invalid_queries_rejected(self, service, seeded, query):
        with pytest.raises(ValidationError):
            service.search_tasks(USER_A, False, query)
