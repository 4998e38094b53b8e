# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student assignment feed across several subjects.

Two merge modes are available, selected by ASSIGNMENT_FEED_MERGE_MODE:

per_subject (default)
    Every subject is paginated on its own and the pages with the same
    page number are merged: items are concatenated and sorted newest
    first, total_pages is the largest per-subject page count,
    total_elements is the sum, and has_next/has_previous are true when
    any subject has such a page. A merged page can therefore hold up to
    page_size items per subject, and an item's position does not follow
    a single global ordering across pages. Subject IDs are used exactly
    as given, so a repeated ID lists its assignments again and counts
    them again in total_elements. Existing clients depend on this shape.

single_query
    One query over the distinct subjects, paginated once. Pages are
    contiguous and never exceed page_size.
"""

import logging
from typing import Sequence

from src.core.config.settings import Settings, get_settings
from src.domains.assignment.service import AssignmentService
from src.models.assignment import AssignmentDTO
from src.models.common import PagedResult
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class StudentAssignmentFeed:
    """Builds the paginated assignment feed shown to students."""

    def __init__(self, service: AssignmentService, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._service = service
        self._merge_mode = settings.assignment.feed_merge_mode
        if self._merge_mode == "single_query":
            logger.info("Student feed uses single query pagination")

    @property
    def merge_mode(self) -> str:
        return self._merge_mode

    async def fetch(
        self,
        subject_ids: Sequence[str],
        grade_level: int,
        page: int = 1,
    ) -> PagedResult[AssignmentDTO]:
        """Fetch one page of the feed.

        Args:
            subject_ids: Subjects to include. Duplicates only collapse in
                single_query mode.
            grade_level: Grade level of the student.
            page: 1-based page number.

        Returns:
            The merged page.

        Raises:
            AssignmentValidationError: If page is less than 1.
        """
        subjects = [str(s) for s in subject_ids]

        if self._merge_mode == "single_query":
            return await self._service.find_by_subjects_and_grade(
                list(dict.fromkeys(subjects)), grade_level, page
            )

        if not subjects:
            return await self._service.find_by_subjects_and_grade([], grade_level, page)

        pages: list[PagedResult[AssignmentDTO]] = []
        # Sequential: all fetches share the request's session
        for subject_id in subjects:
            pages.append(
                await self._service.find_by_subject_and_grade(subject_id, grade_level, page)
            )

        merged = merge_subject_pages(pages, page, self._service.page_size)

        logger.debug(
            "Merged %d subject pages for grade %d page %d: %d items of %d",
            len(pages),
            grade_level,
            page,
            len(merged.items),
            merged.total_elements,
        )
        return merged


def merge_subject_pages(
    pages: Sequence[PagedResult[AssignmentDTO]],
    page: int,
    page_size: int,
) -> PagedResult[AssignmentDTO]:
    """Combine per-subject pages with the same page number.

    The sort is stable, so items with equal created_at keep the order
    of the subject list.
    """
    items = [item for p in pages for item in p.items]
    items.sort(key=lambda a: ensure_utc(a.created_at), reverse=True)

    return PagedResult[AssignmentDTO](
        items=items,
        page=page,
        page_size=page_size,
        total_elements=sum(p.total_elements for p in pages),
        total_pages=max((p.total_pages for p in pages), default=0),
        has_next=any(p.has_next for p in pages),
        has_previous=any(p.has_previous for p in pages),
    )
