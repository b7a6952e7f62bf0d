"""
Unit tests for turning the GET /tasks query string into a TaskQuery.
"""

from __future__ import annotations

import pytest

from taskapi.services.tasks import TaskQuery, build_list_statement, parse_int, parse_task_query


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("abc", None),
        ("10", 10),
        (" 7abc", 7),
        ("-3", -3),
    ],
)
def test_parse_int(raw, expected):
    assert parse_int(raw) == expected


def test_defaults_are_unfiltered_and_unbounded():
    assert parse_task_query() == TaskQuery()


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("false", False), ("yes", False), ("", None)],
)
def test_completed_filter(raw, expected):
    assert parse_task_query(completed=raw).completed is expected


@pytest.mark.parametrize(
    "raw, field, descending",
    [
        ("createdAt:desc", "createdAt", True),
        ("createdAt:asc", "createdAt", False),
        ("description", "description", False),
        ("completed:sideways", "completed", False),
        ("password:desc", None, False),
    ],
)
def test_sort_by(raw, field, descending):
    query = parse_task_query(sort_by=raw)

    assert query.sort_field == field
    assert query.descending is descending


@pytest.mark.parametrize(
    "limit, skip, expected_limit, expected_skip",
    [
        ("5", "10", 5, 10),
        ("0", "0", None, 0),
        ("-2", "-4", None, 0),
        ("many", "few", None, 0),
    ],
)
def test_pagination(limit, skip, expected_limit, expected_skip):
    query = parse_task_query(limit=limit, skip=skip)

    assert query.limit == expected_limit
    assert query.skip == expected_skip


def test_statement_always_filters_by_owner():
    stmt = build_list_statement("owner-1", TaskQuery(completed=True, limit=3, skip=1))

    sql = str(stmt.compile(compile_kwargs={"literal_binds": True}))

    assert "task.owner_id = 'owner-1'" in sql
    assert "task.completed = true" in sql.lower() or "task.completed = 1" in sql
    assert "LIMIT 3" in sql
    assert "OFFSET 1" in sql


def test_statement_falls_back_to_insertion_order():
    stmt = build_list_statement("owner-1", parse_task_query(sort_by="completed:desc"))

    sql = str(stmt.compile(compile_kwargs={"literal_binds": True}))

    assert "ORDER BY task.completed DESC, task.seq ASC" in sql
