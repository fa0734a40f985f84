"""Tests for sorting and pagination."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from orgspend.models import Department, PaginationOptions, Session
from orgspend.services.pagination import field_name, paginate, single_page, sort_items


def _departments(count: int) -> list[Department]:
    return [
        Department(id=f"dept-{i}", name=f"Dept {i:02d}", weekly_budget=100, current_spend=i * 10)
        for i in range(1, count + 1)
    ]


class TestPaginate:
    def test_middle_page(self) -> None:
        page = paginate(
            _departments(10),
            PaginationOptions(page=2, limit=3, sort_by="current_spend", sort_order="asc"),
        )
        assert [d.id for d in page.data] == ["dept-4", "dept-5", "dept-6"]
        info = page.pagination
        assert (info.page, info.limit, info.total, info.total_pages) == (2, 3, 10, 4)
        assert info.has_prev is True
        assert info.has_next is True

    def test_last_and_past_last_page(self) -> None:
        items = _departments(10)
        options = PaginationOptions(page=4, limit=3, sort_by="name", sort_order="asc")
        last = paginate(items, options)
        assert [d.id for d in last.data] == ["dept-10"]
        assert last.pagination.has_next is False

        beyond = paginate(items, PaginationOptions(page=9, limit=3))
        assert beyond.data == []
        assert beyond.pagination.total == 10

    def test_empty_input(self) -> None:
        page = paginate([], PaginationOptions())
        assert page.data == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0
        assert page.pagination.has_next is False
        assert page.pagination.has_prev is False

    def test_camel_case_sort_field_descending(self) -> None:
        page = paginate(
            _departments(5), PaginationOptions(limit=5, sort_by="currentSpend", sort_order="desc")
        )
        spends = [d.current_spend for d in page.data]
        assert spends == sorted(spends, reverse=True)

    def test_without_sort_keeps_order(self) -> None:
        items = list(reversed(_departments(4)))
        page = paginate(items, PaginationOptions(limit=10))
        assert page.data == items

    def test_rejects_non_positive_page_and_limit(self) -> None:
        with pytest.raises(ValidationError):
            PaginationOptions(page=0)
        with pytest.raises(ValidationError):
            PaginationOptions(limit=0)


class TestSortItems:
    def test_unknown_field_leaves_order(self) -> None:
        items = _departments(3)
        assert sort_items(items, "doesNotExist", descending=True) == items

    def test_strings_sort_case_insensitively(self) -> None:
        items = [
            Department(id="b", name="beta", weekly_budget=1),
            Department(id="a", name="Alpha", weekly_budget=1),
            Department(id="c", name="Gamma", weekly_budget=1),
        ]
        assert [d.id for d in sort_items(items, "name", descending=False)] == ["a", "b", "c"]

    def test_datetimes_sort_chronologically(self) -> None:
        base = datetime(2024, 1, 1, tzinfo=UTC)
        sessions = [
            Session(
                id=f"s{i}",
                timestamp=base + timedelta(hours=offset),
                user_id="u",
                agent_id="a",
                agent_name="A",
                cost=1,
                token_count=1,
                duration=1,
            )
            for i, offset in enumerate((5, 1, 3))
        ]
        ordered = sort_items(sessions, "timestamp", descending=True)
        assert [s.id for s in ordered] == ["s0", "s2", "s1"]

    def test_field_name(self) -> None:
        assert field_name("weeklySpend") == "weekly_spend"
        assert field_name("weekly_spend") == "weekly_spend"
        assert field_name("name") == "name"


def test_single_page_holds_everything() -> None:
    items = _departments(3)
    page = single_page(items)
    assert page.data == items
    assert page.pagination.total == 3
    assert page.pagination.total_pages == 1
    assert page.pagination.has_next is False
