# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment service for publishing and reading homework assignments.

This module provides the AssignmentService class for:
- Assignment creation (document upload, persistence, event publication)
- Partial updates and soft deletion
- Paginated reads by teacher, subject and grade level
- Download URL generation

Retired assignments are never returned by any read method.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Sequence
from uuid import uuid4

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings, get_settings
from src.domains.assignment.events import AssignmentCreatedEvent
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models.assignment import Assignment, AssignmentStatus
from src.infrastructure.events import EventBus, EventTypes
from src.infrastructure.storage import BlobStore, UploadedFile
from src.models.assignment import AssignmentDTO
from src.models.common import PagedResult
from src.utils.datetime import parse_date, utc_now

logger = logging.getLogger(__name__)


class AssignmentServiceError(Exception):
    """Base exception for assignment service errors."""

    pass


class AssignmentValidationError(AssignmentServiceError):
    """Raised when assignment input is invalid."""

    pass


class AssignmentNotFoundError(AssignmentServiceError):
    """Raised when an assignment does not exist or is retired."""

    pass


class AssignmentService:
    """Service for managing assignments.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        blob_store: BlobStore,
        event_bus: EventBus,
        settings: Settings | None = None,
    ) -> None:
        """Initialize assignment service.

        Args:
            db: Async database session.
            blob_store: Store for assignment documents.
            event_bus: Bus that receives assignment events.
            settings: Application settings. Defaults to get_settings().
        """
        settings = settings or get_settings()
        self.db = db
        self._blob_store = blob_store
        self._event_bus = event_bus
        self._config = settings.assignment
        self._storage = settings.storage

    @property
    def page_size(self) -> int:
        """Number of assignments per page."""
        return self._config.page_size

    async def create_assignment(
        self,
        teacher_id: str,
        subject_id: str,
        grade_level: int,
        title: str,
        file: UploadedFile,
        description: str | None = None,
        due_date: date | str | None = None,
    ) -> AssignmentDTO:
        """Publish a new assignment.

        The document is uploaded before anything is written to the
        database. Once the record is committed an assignment.created
        event is published.

        Args:
            teacher_id: Publishing teacher.
            subject_id: Subject the assignment belongs to.
            grade_level: Target grade level.
            title: Assignment title.
            file: PDF document.
            description: Optional description.
            due_date: Optional due date, as a date or an ISO date/datetime string.

        Returns:
            The created assignment.

        Raises:
            AssignmentValidationError: If any input is invalid.
            StorageError: If the document upload fails.
            DatabaseError: If the record cannot be saved.
        """
        title = self._validate_title(title)
        self._validate_grade_level(grade_level)
        description = self._clean_description(description)
        due = self._coerce_due_date(due_date)
        self._validate_file(file)

        file_path = await self._blob_store.upload(file, self._storage.upload_prefix)

        now = utc_now()
        assignment = Assignment(
            id=str(uuid4()),
            teacher_id=str(teacher_id),
            subject_id=str(subject_id),
            grade_level=grade_level,
            title=title,
            description=description,
            file_path=file_path,
            file_name=file.filename.strip(),
            due_date=due,
            status=AssignmentStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )

        try:
            self.db.add(assignment)
            await self.db.commit()
            await self.db.refresh(assignment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to save assignment %r, orphaned storage key %s: %s",
                title,
                file_path,
                str(e),
            )
            raise DatabaseError("Failed to save assignment", e) from e

        dto = self._to_dto(assignment)

        await self._event_bus.publish(
            EventTypes.Assignment.CREATED,
            AssignmentCreatedEvent.from_assignment(dto),
        )

        logger.info(
            "Created assignment: id=%s, teacher=%s, subject=%s, grade=%d",
            dto.id,
            dto.teacher_id,
            dto.subject_id,
            dto.grade_level,
        )

        return dto

    async def get_assignment(self, assignment_id: str) -> AssignmentDTO:
        """Get an active assignment.

        Raises:
            AssignmentNotFoundError: If missing or retired.
        """
        assignment = await self._get_active(assignment_id)
        return self._to_dto(assignment)

    async def update_assignment(
        self,
        assignment_id: str,
        title: str | None = None,
        description: str | None = None,
        due_date: date | str | None = None,
    ) -> AssignmentDTO:
        """Apply a partial update to an active assignment.

        None means "leave unchanged". A title that is blank after
        trimming is ignored. A description that is blank after trimming
        clears the description. updated_at is always refreshed.

        Args:
            assignment_id: Assignment identifier.
            title: New title.
            description: New description.
            due_date: New due date.

        Returns:
            The updated assignment.

        Raises:
            AssignmentNotFoundError: If missing or retired.
            AssignmentValidationError: If a supplied value is invalid.
        """
        assignment = await self._get_active(assignment_id)

        if title is not None and title.strip():
            assignment.title = self._validate_title(title)
        if description is not None:
            assignment.description = self._clean_description(description)
        if due_date is not None:
            assignment.due_date = self._coerce_due_date(due_date)

        assignment.updated_at = utc_now()

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Updated assignment: id=%s", assignment_id)

        return self._to_dto(assignment)

    async def soft_delete(self, assignment_id: str) -> None:
        """Retire an active assignment.

        The record and its stored document are kept.

        Raises:
            AssignmentNotFoundError: If missing or already retired.
        """
        assignment = await self._get_active(assignment_id)

        assignment.retire()
        assignment.updated_at = utc_now()

        await self.db.commit()

        logger.info("Retired assignment: id=%s, file=%s", assignment_id, assignment.file_path)

    async def generate_download_url(self, assignment_id: str) -> str:
        """Return a download URL for an active assignment's document.

        Raises:
            AssignmentNotFoundError: If missing or retired.
            StorageError: If the URL cannot be generated.
        """
        assignment = await self._get_active(assignment_id)
        return await asyncio.to_thread(self._blob_store.url_for, assignment.file_path)

    async def find_active(self, page: int = 1) -> PagedResult[AssignmentDTO]:
        """List all active assignments, newest first."""
        return await self._paginate(self._active_query(), page)

    async def find_by_teacher(
        self,
        teacher_id: str,
        page: int = 1,
        grade_level: int | None = None,
    ) -> PagedResult[AssignmentDTO]:
        """List a teacher's active assignments, optionally for one grade."""
        query = self._active_query().where(Assignment.teacher_id == str(teacher_id))
        if grade_level is not None:
            query = query.where(Assignment.grade_level == grade_level)
        return await self._paginate(query, page)

    async def find_by_subject_and_grade(
        self,
        subject_id: str,
        grade_level: int,
        page: int = 1,
    ) -> PagedResult[AssignmentDTO]:
        """List active assignments of one subject and grade."""
        query = self._active_query().where(
            Assignment.subject_id == str(subject_id),
            Assignment.grade_level == grade_level,
        )
        return await self._paginate(query, page)

    async def find_by_subjects_and_grade(
        self,
        subject_ids: Sequence[str],
        grade_level: int,
        page: int = 1,
    ) -> PagedResult[AssignmentDTO]:
        """List active assignments of several subjects as one result set."""
        if not subject_ids:
            self._validate_page(page)
            return PagedResult.empty(page, self.page_size)

        query = self._active_query().where(
            Assignment.subject_id.in_([str(s) for s in subject_ids]),
            Assignment.grade_level == grade_level,
        )
        return await self._paginate(query, page)

    def _active_query(self) -> Select:
        return select(Assignment).where(Assignment.status == AssignmentStatus.ACTIVE.value)

    async def _paginate(self, query: Select, page: int) -> PagedResult[AssignmentDTO]:
        """Run a query for one page and count the full result set.

        Args:
            query: Filtered select over Assignment.
            page: 1-based page number.

        Returns:
            PagedResult of DTOs.
        """
        self._validate_page(page)
        page_size = self.page_size

        count_stmt = select(func.count()).select_from(query.subquery())
        count_result = await self.db.execute(count_stmt)
        total = count_result.scalar() or 0

        query = query.order_by(Assignment.created_at.desc(), Assignment.id.desc())
        query = query.limit(page_size).offset((page - 1) * page_size)

        result = await self.db.execute(query)
        assignments = result.scalars().all()

        return PagedResult.from_page(
            [self._to_dto(a) for a in assignments],
            page=page,
            page_size=page_size,
            total_elements=total,
        )

    async def _get_active(self, assignment_id: str) -> Assignment:
        """Get an active assignment by ID.

        Raises:
            AssignmentNotFoundError: If not found or retired.
        """
        query = self._active_query().where(Assignment.id == str(assignment_id))
        result = await self.db.execute(query)
        assignment = result.scalar_one_or_none()

        if not assignment:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")

        return assignment

    def _validate_page(self, page: int) -> None:
        if page < 1:
            raise AssignmentValidationError("Page number must be 1 or greater")

    def _validate_grade_level(self, grade_level: int) -> None:
        low, high = self._config.min_grade_level, self._config.max_grade_level
        if not low <= grade_level <= high:
            raise AssignmentValidationError(
                f"Grade level must be between {low} and {high}"
            )

    def _validate_title(self, title: str | None) -> str:
        title = (title or "").strip()
        if not title:
            raise AssignmentValidationError("Title is required")
        if len(title) > self._config.title_max_length:
            raise AssignmentValidationError(
                f"Title must not exceed {self._config.title_max_length} characters"
            )
        return title

    def _clean_description(self, description: str | None) -> str | None:
        if description is None:
            return None
        description = description.strip()
        if len(description) > self._config.description_max_length:
            raise AssignmentValidationError(
                f"Description must not exceed {self._config.description_max_length} characters"
            )
        return description or None

    def _coerce_due_date(self, due_date: date | str | None) -> date | None:
        if isinstance(due_date, datetime):
            return due_date.date()
        if due_date is None or isinstance(due_date, date):
            return due_date
        try:
            return parse_date(due_date)
        except ValueError as e:
            raise AssignmentValidationError(f"Invalid due date: {due_date!r}") from e

    def _validate_file(self, file: UploadedFile | None) -> None:
        """Check the document before it is uploaded.

        Raises:
            AssignmentValidationError: If the document is unacceptable.
        """
        if file is None:
            raise AssignmentValidationError("File is required")
        if not file.filename or not file.filename.strip():
            raise AssignmentValidationError("File name is required")
        if file.size == 0:
            raise AssignmentValidationError("File is empty")
        if file.size > self._storage.max_file_size:
            raise AssignmentValidationError(
                f"File exceeds maximum size of {self._storage.max_file_size} bytes"
            )
        if file.content_type not in self._storage.allowed_content_types:
            raise AssignmentValidationError(
                f"Unsupported file type {file.content_type!r}, only PDF files are accepted"
            )
        if file.extension not in self._storage.allowed_extensions:
            raise AssignmentValidationError(
                f"Unsupported file extension {file.extension!r}, only PDF files are accepted"
            )

    def _to_dto(self, assignment: Assignment) -> AssignmentDTO:
        return AssignmentDTO.model_validate(assignment)
