import pytest

from task_api.db import SQLiteRepository, compile_filter
from task_api.filters import and_, check_field_name, matches
from task_api.repositories import InMemoryRepository, SortSpec


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "store.db"), "tasks")
    return InMemoryRepository("tasks")


def seed(repo):
    docs = [
        {"id": "t1", "owner": "a", "rank": 2, "due": "2025-01-10"},
        {"id": "t2", "owner": "b", "rank": 1, "due": "2025-01-05", "helper": "a"},
        {"id": "t3", "owner": "a", "rank": 3, "due": "2025-02-01"},
        {"id": "t4", "owner": "c", "rank": 2, "due": "2025-01-10"},
        {"id": "t5", "owner": "a", "rank": 2, "due": "2025-03-01"},
    ]
    for doc in docs:
        repo.insert(doc)


def ids(docs):
    return [d["id"] for d in docs]


class TestFilterLanguage:
    def test_matches(self):
        doc = {"a": 1, "b": "x", "d": "2025-01-10"}
        assert matches(doc, {})
        assert matches(doc, {"a": 1, "b": "x"})
        assert not matches(doc, {"a": 2})
        assert matches(doc, {"$or": [{"a": 2}, {"b": "x"}]})
        assert not matches(doc, {"$and": [{"a": 1}, {"b": "y"}]})
        assert matches(doc, {"d": {"$gte": "2025-01-01", "$lte": "2025-01-10"}})
        assert not matches(doc, {"d": {"$gte": "2025-01-11"}})
        assert not matches(doc, {"missing": {"$gte": "2025-01-01"}})

    def test_and_drops_match_all(self):
        assert and_({}, {}) == {}
        assert and_({"a": 1}, {}) == {"a": 1}
        assert and_({"a": 1}, {"b": 2}) == {"$and": [{"a": 1}, {"b": 2}]}

    def test_field_names_are_checked(self):
        assert check_field_name("due_date") == "due_date"
        for bad in ["a;drop", "a b", "A", "x')", ""]:
            with pytest.raises(ValueError):
                check_field_name(bad)

    def test_compile_filter_is_parameterized(self):
        sql, params = compile_filter({"$or": [{"owner": "a'; DROP TABLE tasks;--"}, {"helper": "a"}]})
        assert "DROP" not in sql
        assert params == ["a'; DROP TABLE tasks;--", "a"]

    def test_compile_empty_filter(self):
        assert compile_filter({}) == ("1=1", [])


class TestDocumentRepository:
    def test_insert_and_find_one(self, repo):
        seed(repo)
        assert repo.find_one({"id": "t3"})["rank"] == 3
        assert repo.find_one({"id": "nope"}) is None

    def test_find_returns_copies(self, repo):
        seed(repo)
        doc = repo.find_one({"id": "t1"})
        doc["owner"] = "mutated"
        assert repo.find_one({"id": "t1"})["owner"] == "a"

    def test_or_filter_and_count(self, repo):
        seed(repo)
        flt = {"$or": [{"owner": "a"}, {"helper": "a"}]}
        assert ids(repo.find(flt)) == ["t1", "t2", "t3", "t5"]
        assert repo.count(flt) == 4
        assert repo.count({}) == 5

    def test_range_filter(self, repo):
        seed(repo)
        flt = {"due": {"$gte": "2025-01-06", "$lte": "2025-02-01"}}
        assert ids(repo.find(flt)) == ["t1", "t3", "t4"]

    def test_sort_is_stable_in_both_directions(self, repo):
        seed(repo)
        asc = ids(repo.find({}, sort=SortSpec("rank")))
        assert asc == ["t2", "t1", "t4", "t5", "t3"]
        desc = ids(repo.find({}, sort=SortSpec("rank", descending=True)))
        assert desc == ["t3", "t1", "t4", "t5", "t2"]

    def test_missing_values_sort_first(self, repo):
        seed(repo)
        assert ids(repo.find({}, sort=SortSpec("helper")))[-1] == "t2"
        assert ids(repo.find({}, sort=SortSpec("helper")))[:4] == ["t1", "t3", "t4", "t5"]

    def test_skip_and_limit(self, repo):
        seed(repo)
        page = ids(repo.find({}, sort=SortSpec("due"), skip=1, limit=2))
        assert page == ["t1", "t4"]
        assert ids(repo.find({}, skip=10)) == []

    def test_update_one(self, repo):
        seed(repo)
        assert repo.update_one({"id": "t2"}, {"rank": 5, "helper": None})
        doc = repo.find_one({"id": "t2"})
        assert doc["rank"] == 5
        assert doc.get("helper") is None
        assert doc["owner"] == "b"
        assert not repo.update_one({"id": "missing"}, {"rank": 1})

    def test_delete_one(self, repo):
        seed(repo)
        assert repo.delete_one({"id": "t4"})
        assert not repo.delete_one({"id": "t4"})
        assert repo.count({}) == 4
