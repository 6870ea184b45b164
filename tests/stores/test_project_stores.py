"""Contract tests shared by the project store implementations."""

from __future__ import annotations

from pathlib import Path

import pytest

from learnmap.stores import PROJECT_CREATED, InMemoryProjectStore, SQLiteProjectStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return InMemoryProjectStore()
    return SQLiteProjectStore(tmp_path / "data" / "learnmap.db")


def _key(index: int) -> str:
    return "learn_" + f"{index:032x}"


def test_create_and_fetch_project(store) -> None:
    project_id = store.create_project(
        "Docs Site",
        _key(1),
        {"main-header": "Site header"},
        scrape_url="https://example.com",
    )

    by_id = store.get_project_by_id(project_id)
    by_key = store.get_project_by_key(_key(1))

    assert by_id == by_key
    assert by_id.project_name == "Docs Site"
    assert by_id.function_map == {"main-header": "Site header"}
    assert by_id.scrape_url == "https://example.com"
    assert by_id.repo_url is None
    assert by_id.created_at.endswith("Z")
    assert by_id.created_at == by_id.updated_at


def test_returned_projects_are_isolated_copies(store) -> None:
    project_id = store.create_project("Docs", _key(1), {"a": "b"}, repo_url="https://git/x")

    fetched = store.get_project_by_id(project_id)
    fetched.function_map["a"] = "mutated"

    assert store.get_project_by_id(project_id).function_map == {"a": "b"}


def test_list_projects_newest_first(store) -> None:
    first = store.create_project("First", _key(1), {"a": "b"}, scrape_url="https://a.example")
    second = store.create_project("Second", _key(2), {"c": "d"}, scrape_url="https://b.example")

    assert [project.id for project in store.list_projects()] == [second, first]


def test_delete_project_revokes_key(store) -> None:
    project_id = store.create_project("Docs", _key(1), {"a": "b"}, scrape_url="https://a.example")

    assert store.delete_project(project_id) is True
    assert store.get_project_by_key(_key(1)) is None
    assert store.get_project_by_id(project_id) is None
    assert store.delete_project(project_id) is False


def test_unknown_lookups_return_none(store) -> None:
    assert store.get_project_by_id(404) is None
    assert store.get_project_by_key(_key(9)) is None


def test_recent_activity_newest_first_and_limited(store) -> None:
    project_id = store.create_project("Docs", _key(1), {"a": "b"}, scrape_url="https://a.example")
    for index in range(12):
        store.log_activity(project_id, f"action {index}")

    records = store.recent_activity()

    assert len(records) == 10
    assert records[0].action == "action 11"
    assert records[-1].action == "action 2"
    assert all(record.project_name == "Docs" for record in records)
    assert [record.action for record in store.recent_activity(limit=2)] == [
        "action 11",
        "action 10",
    ]


def test_activity_survives_project_deletion(store) -> None:
    project_id = store.create_project("Docs", _key(1), {"a": "b"}, scrape_url="https://a.example")
    store.log_activity(project_id, PROJECT_CREATED)
    store.delete_project(project_id)

    (record,) = store.recent_activity()

    assert record.action == PROJECT_CREATED
    assert record.project_id == project_id
    assert record.project_name is None


def test_sqlite_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "learnmap.db"
    project_id = SQLiteProjectStore(path).create_project(
        "Docs", _key(1), {"a": "b"}, repo_url="https://github.com/example/app"
    )

    reopened = SQLiteProjectStore(path).get_project_by_id(project_id)

    assert reopened is not None
    assert reopened.repo_url == "https://github.com/example/app"
    assert reopened.function_map == {"a": "b"}
