# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the class matcher."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from gymstudio.domains.class_.matcher import ClassMatcher
from gymstudio.infrastructure.database.models import ClassDefinition

TODAY = date(2024, 9, 1)


def _class(
    class_id: str,
    capacity: int = 10,
    age_min: int | None = None,
    age_max: int | None = None,
    program_type: str = "boys_competitive",
) -> ClassDefinition:
    return ClassDefinition(
        id=class_id,
        name=f"Class {class_id}",
        program_type=program_type,
        day_of_week="monday",
        start_time="16:00",
        end_time="17:00",
        capacity=capacity,
        age_min=age_min,
        age_max=age_max,
        is_active=True,
        seats_taken=0,
    )


def _born_years_ago(years: int) -> date:
    return date(TODAY.year - years, 3, 15)


@pytest.fixture
def catalog():
    """Create a mock class catalog."""
    return AsyncMock()


@pytest.fixture
def active_counts() -> dict[str, int]:
    """Active relation counts per class id."""
    return {}


@pytest.fixture
def guard(active_counts):
    """Create a mock capacity guard reading from active_counts."""
    guard = AsyncMock()
    guard.count_active.side_effect = lambda class_id: active_counts.get(class_id, 0)
    return guard


@pytest.fixture
def matcher(catalog, guard):
    """Create a matcher over the mocks."""
    return ClassMatcher(catalog, guard)


class TestCandidateSelection:
    """Tests for how candidates are drawn from the catalog."""

    @pytest.mark.asyncio
    async def test_queries_active_classes_of_program(self, matcher, catalog):
        """Test only active classes of the requested program are read."""
        catalog.list_classes.return_value = []

        await matcher.find_best_class("ninja", None, today=TODAY)

        catalog.list_classes.assert_awaited_once_with(program_type="ninja", active_only=True)

    @pytest.mark.asyncio
    async def test_empty_catalog_returns_none(self, matcher, catalog):
        """Test no candidates yields no class."""
        catalog.list_classes.return_value = []

        assert await matcher.find_best_class("ninja", _born_years_ago(8), today=TODAY) is None


class TestAgeBounds:
    """Tests for age filtering."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("age", [5, 13])
    async def test_age_outside_bounds_excluded(self, matcher, catalog, age):
        """Test a 6-12 class is not offered to a 5 or 13 year old."""
        catalog.list_classes.return_value = [_class("c1", age_min=6, age_max=12)]

        assert await matcher.find_best_class("boys_competitive", _born_years_ago(age), today=TODAY) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("age", [6, 9, 12])
    async def test_age_bounds_inclusive(self, matcher, catalog, age):
        """Test both bounds are inclusive."""
        catalog.list_classes.return_value = [_class("c1", age_min=6, age_max=12)]

        best = await matcher.find_best_class("boys_competitive", _born_years_ago(age), today=TODAY)

        assert best.id == "c1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("age", [1, 8, 40])
    async def test_unbounded_class_accepts_any_age(self, matcher, catalog, age):
        """Test a class without bounds fits every age."""
        catalog.list_classes.return_value = [_class("open")]

        best = await matcher.find_best_class("boys_competitive", _born_years_ago(age), today=TODAY)

        assert best.id == "open"

    @pytest.mark.asyncio
    async def test_only_one_bound_set(self, matcher, catalog):
        """Test a class with only a minimum age still caps nothing above."""
        catalog.list_classes.return_value = [_class("teens", age_min=13)]

        assert await matcher.find_best_class("boys_competitive", _born_years_ago(8), today=TODAY) is None
        best = await matcher.find_best_class("boys_competitive", _born_years_ago(30), today=TODAY)
        assert best.id == "teens"

    @pytest.mark.asyncio
    async def test_missing_date_of_birth_skips_age_filter(self, matcher, catalog):
        """Test no date of birth means bounds are not applied."""
        catalog.list_classes.return_value = [_class("c1", age_min=6, age_max=12)]

        best = await matcher.find_best_class("boys_competitive", None, today=TODAY)

        assert best.id == "c1"

    @pytest.mark.asyncio
    async def test_age_uses_calendar_birthday(self, matcher, catalog):
        """Test a child is not a year older until the birthday itself."""
        catalog.list_classes.return_value = [_class("eights", age_min=8)]

        day_before = date(2016, 9, 2)
        on_birthday = date(2016, 9, 1)

        assert await matcher.find_best_class("boys_competitive", day_before, today=TODAY) is None
        best = await matcher.find_best_class("boys_competitive", on_birthday, today=TODAY)
        assert best.id == "eights"


class TestCapacityAndRanking:
    """Tests for capacity filtering and tie-breaking."""

    @pytest.mark.asyncio
    async def test_full_class_never_returned(self, matcher, catalog, active_counts):
        """Test a full class is skipped even when it is the only match."""
        catalog.list_classes.return_value = [_class("full", capacity=2)]
        active_counts["full"] = 2

        assert await matcher.find_best_class("boys_competitive", _born_years_ago(8), today=TODAY) is None

    @pytest.mark.asyncio
    async def test_overfilled_class_never_returned(self, matcher, catalog, active_counts):
        """Test a class whose count exceeds capacity is treated as full."""
        catalog.list_classes.return_value = [_class("over", capacity=2)]
        active_counts["over"] = 3

        assert await matcher.rank_classes("boys_competitive", None, today=TODAY) == []

    @pytest.mark.asyncio
    async def test_more_available_seats_wins(self, matcher, catalog, active_counts):
        """Test a class with 5 seats left beats one with 1 seat left."""
        catalog.list_classes.return_value = [
            _class("one-left", capacity=10),
            _class("five-left", capacity=10),
        ]
        active_counts.update({"one-left": 9, "five-left": 5})

        best = await matcher.find_best_class("boys_competitive", _born_years_ago(8), today=TODAY)

        assert best.id == "five-left"

    @pytest.mark.asyncio
    async def test_ties_keep_catalog_order(self, matcher, catalog, active_counts):
        """Test equal availability is resolved by catalog order."""
        catalog.list_classes.return_value = [
            _class("first", capacity=6),
            _class("second", capacity=8),
            _class("third", capacity=4),
        ]
        active_counts.update({"first": 2, "second": 4, "third": 0})

        ranked = await matcher.rank_classes("boys_competitive", None, today=TODAY)

        assert [class_.id for class_ in ranked] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_ranking_orders_by_remaining_seats(self, matcher, catalog, active_counts):
        """Test the full ranking is descending by remaining seats."""
        catalog.list_classes.return_value = [
            _class("a", capacity=10),
            _class("b", capacity=10),
            _class("c", capacity=10),
            _class("d", capacity=3),
        ]
        active_counts.update({"a": 8, "b": 1, "c": 5, "d": 3})

        ranked = await matcher.rank_classes("boys_competitive", None, today=TODAY)

        assert [class_.id for class_ in ranked] == ["b", "c", "a"]
