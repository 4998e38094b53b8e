# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the student assignment feed."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import AssignmentSettings, Settings
from src.domains.assignment.feed import StudentAssignmentFeed, merge_subject_pages
from src.domains.assignment.service import AssignmentValidationError
from src.models.common import PagedResult

PAGE_SIZE = 10


def _fake_service(assignments_by_subject):
    """Build a service double that paginates in-memory lists."""
    service = MagicMock()
    service.page_size = PAGE_SIZE

    async def find_by_subject_and_grade(subject_id, grade_level, page=1):
        if page < 1:
            raise AssignmentValidationError("Page number must be 1 or greater")
        items = assignments_by_subject.get(subject_id, [])
        start = (page - 1) * PAGE_SIZE
        return PagedResult.from_page(items[start:start + PAGE_SIZE], page, PAGE_SIZE, len(items))

    async def find_by_subjects_and_grade(subject_ids, grade_level, page=1):
        if page < 1:
            raise AssignmentValidationError("Page number must be 1 or greater")
        items = sorted(
            (a for s in subject_ids for a in assignments_by_subject.get(s, [])),
            key=lambda a: (a.created_at, a.id),
            reverse=True,
        )
        start = (page - 1) * PAGE_SIZE
        return PagedResult.from_page(items[start:start + PAGE_SIZE], page, PAGE_SIZE, len(items))

    service.find_by_subject_and_grade = AsyncMock(side_effect=find_by_subject_and_grade)
    service.find_by_subjects_and_grade = AsyncMock(side_effect=find_by_subjects_and_grade)
    return service


@pytest.fixture
def subject_data(dto_series):
    """Twelve math assignments and three physics assignments."""
    return {
        "math": dto_series(12, datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc), subject_id="math"),
        "physics": dto_series(3, datetime(2025, 3, 10, 11, 30, tzinfo=timezone.utc), subject_id="physics"),
    }


@pytest.fixture
def per_subject_settings():
    return Settings(assignment=AssignmentSettings(feed_merge_mode="per_subject"))


@pytest.fixture
def single_query_settings():
    return Settings(assignment=AssignmentSettings(feed_merge_mode="single_query"))


class TestPerSubjectFeed:
    """Tests for the default per-subject merge."""

    @pytest.mark.asyncio
    async def test_first_page_merges_both_subjects(self, subject_data, per_subject_settings):
        """Test 12 + 3 assignments with page size 10 on page 1."""
        feed = StudentAssignmentFeed(_fake_service(subject_data), settings=per_subject_settings)

        result = await feed.fetch(["math", "physics"], grade_level=10, page=1)

        assert len(result.items) == 13
        assert result.total_elements == 15
        assert result.total_pages == 2
        assert result.has_next is True
        assert result.has_previous is False
        assert result.page == 1
        assert result.page_size == PAGE_SIZE

    @pytest.mark.asyncio
    async def test_items_sorted_newest_first(self, subject_data, per_subject_settings):
        """Test the merged page is ordered by created_at descending."""
        feed = StudentAssignmentFeed(_fake_service(subject_data), settings=per_subject_settings)

        result = await feed.fetch(["physics", "math"], grade_level=10, page=1)

        created = [a.created_at for a in result.items]
        assert created == sorted(created, reverse=True)

    @pytest.mark.asyncio
    async def test_second_page(self, subject_data, per_subject_settings):
        """Test page 2 only holds the math overflow."""
        feed = StudentAssignmentFeed(_fake_service(subject_data), settings=per_subject_settings)

        result = await feed.fetch(["math", "physics"], grade_level=10, page=2)

        assert len(result.items) == 2
        assert {a.subject_id for a in result.items} == {"math"}
        assert result.total_elements == 15
        assert result.has_next is False
        assert result.has_previous is True

    @pytest.mark.asyncio
    async def test_duplicate_subjects_fetched_per_occurrence(self, subject_data, per_subject_settings):
        """Test a repeated subject ID is fetched and counted again."""
        service = _fake_service(subject_data)
        feed = StudentAssignmentFeed(service, settings=per_subject_settings)

        result = await feed.fetch(["math", "physics", "math"], grade_level=10, page=1)

        assert service.find_by_subject_and_grade.await_count == 3
        assert [c.args[0] for c in service.find_by_subject_and_grade.await_args_list] == [
            "math",
            "physics",
            "math",
        ]
        assert len(result.items) == 23
        assert result.total_elements == 27
        assert result.total_pages == 2

    @pytest.mark.asyncio
    async def test_empty_subject_list(self, subject_data, per_subject_settings):
        """Test no subjects yields an empty page."""
        service = _fake_service(subject_data)
        feed = StudentAssignmentFeed(service, settings=per_subject_settings)

        result = await feed.fetch([], grade_level=10, page=1)

        assert result.items == []
        assert result.total_elements == 0
        assert result.total_pages == 0
        service.find_by_subject_and_grade.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_page(self, subject_data, per_subject_settings):
        """Test page 0 is rejected."""
        feed = StudentAssignmentFeed(_fake_service(subject_data), settings=per_subject_settings)

        with pytest.raises(AssignmentValidationError):
            await feed.fetch(["math"], grade_level=10, page=0)


class TestSingleQueryFeed:
    """Tests for the opt-in single query mode."""

    @pytest.mark.asyncio
    async def test_pages_never_exceed_page_size(self, subject_data, single_query_settings):
        """Test pages are contiguous slices of one ordering."""
        service = _fake_service(subject_data)
        feed = StudentAssignmentFeed(service, settings=single_query_settings)

        first = await feed.fetch(["math", "physics"], grade_level=10, page=1)
        second = await feed.fetch(["math", "physics"], grade_level=10, page=2)

        assert len(first.items) == 10
        assert len(second.items) == 5
        assert first.total_elements == 15
        assert first.total_pages == 2
        assert {a.id for a in first.items}.isdisjoint({a.id for a in second.items})
        service.find_by_subject_and_grade.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_subjects_collapsed(self, subject_data, single_query_settings):
        """Test a repeated subject ID is queried once."""
        service = _fake_service(subject_data)
        feed = StudentAssignmentFeed(service, settings=single_query_settings)

        result = await feed.fetch(["math", "physics", "math"], grade_level=10, page=1)

        service.find_by_subjects_and_grade.assert_awaited_once_with(["math", "physics"], 10, 1)
        assert result.total_elements == 15

    def test_merge_mode_exposed(self, single_query_settings):
        feed = StudentAssignmentFeed(MagicMock(), settings=single_query_settings)

        assert feed.merge_mode == "single_query"


class TestMergeSubjectPages:
    """Tests for the page merge helper."""

    def test_metadata_aggregation(self, make_dto):
        """Test max pages, summed totals and OR-ed navigation flags."""
        a = PagedResult.from_page([make_dto()], page=2, page_size=10, total_elements=25)
        b = PagedResult.from_page([], page=2, page_size=10, total_elements=4)

        merged = merge_subject_pages([a, b], page=2, page_size=10)

        assert merged.total_pages == 3
        assert merged.total_elements == 29
        assert merged.has_next is True
        assert merged.has_previous is True
        assert len(merged.items) == 1

    def test_stable_for_equal_timestamps(self, make_dto):
        """Test equal created_at values keep subject order."""
        ts = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
        first = make_dto(created_at=ts, subject_id="math")
        second = make_dto(created_at=ts, subject_id="physics")
        pages = [
            PagedResult.from_page([first], 1, 10, 1),
            PagedResult.from_page([second], 1, 10, 1),
        ]

        merged = merge_subject_pages(pages, page=1, page_size=10)

        assert [a.id for a in merged.items] == [first.id, second.id]

    def test_no_pages(self):
        merged = merge_subject_pages([], page=1, page_size=10)

        assert merged.items == []
        assert merged.total_pages == 0
        assert merged.has_next is False
