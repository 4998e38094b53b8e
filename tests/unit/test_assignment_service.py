# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Assignment service."""

import threading
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.core.config import Settings, StorageSettings
from src.domains.assignment.events import AssignmentCreatedEvent
from src.domains.assignment.service import (
    AssignmentNotFoundError,
    AssignmentService,
    AssignmentValidationError,
)
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import Assignment, AssignmentStatus
from src.infrastructure.events import EventTypes
from src.infrastructure.storage import StorageError, UploadedFile


def _scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _count_result(value: int):
    result = MagicMock()
    result.scalar.return_value = value
    return result


def _rows_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


@pytest.fixture
def mock_blob_store():
    """Create mock blob store."""
    store = MagicMock()
    store.upload = AsyncMock(return_value="assignments/0b8e.pdf")
    store.url_for = MagicMock(return_value="https://bucket.s3.amazonaws.com/assignments/0b8e.pdf")
    return store


@pytest.fixture
def mock_event_bus():
    """Create mock event bus."""
    bus = MagicMock()
    bus.publish = AsyncMock()
    return bus


@pytest.fixture
def assignment_service(mock_db, mock_blob_store, mock_event_bus, settings):
    """Create assignment service with mock collaborators."""
    return AssignmentService(
        db=mock_db,
        blob_store=mock_blob_store,
        event_bus=mock_event_bus,
        settings=settings,
    )


class TestAssignmentServiceCreate:
    """Tests for assignment creation."""

    @pytest.mark.asyncio
    async def test_create_assignment_success(
        self,
        assignment_service,
        mock_db,
        mock_blob_store,
        mock_event_bus,
        pdf_file,
        sample_teacher_id,
        sample_subject_id,
    ):
        """Test a valid assignment is uploaded, saved and announced."""
        result = await assignment_service.create_assignment(
            teacher_id=sample_teacher_id,
            subject_id=sample_subject_id,
            grade_level=10,
            title="  Algebra worksheet  ",
            file=pdf_file,
            description="Chapter 4 exercises",
            due_date="2025-03-14",
        )

        assert result.title == "Algebra worksheet"
        assert result.teacher_id == sample_teacher_id
        assert result.subject_id == sample_subject_id
        assert result.grade_level == 10
        assert result.file_path == "assignments/0b8e.pdf"
        assert result.file_name == "algebra-worksheet.pdf"
        assert result.due_date == date(2025, 3, 14)
        assert result.is_active is True
        assert result.created_at.tzinfo is not None

        mock_blob_store.upload.assert_awaited_once_with(pdf_file, "assignments")
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()

        saved = mock_db.add.call_args.args[0]
        assert isinstance(saved, Assignment)
        assert saved.status == AssignmentStatus.ACTIVE.value

    @pytest.mark.asyncio
    async def test_create_publishes_exactly_one_snapshot_event(
        self,
        assignment_service,
        mock_event_bus,
        pdf_file,
    ):
        """Test the created event carries a snapshot of the saved record."""
        result = await assignment_service.create_assignment(
            teacher_id="teacher-1",
            subject_id="math",
            grade_level=11,
            title="Vectors",
            file=pdf_file,
        )

        mock_event_bus.publish.assert_awaited_once()
        event_type, payload = mock_event_bus.publish.call_args.args
        assert event_type == EventTypes.Assignment.CREATED
        assert payload == AssignmentCreatedEvent.from_assignment(result)
        assert payload.assignment_id == result.id
        assert payload.due_date is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("grade_level", [8, 13, 0, -1])
    async def test_grade_level_out_of_range(
        self,
        assignment_service,
        mock_db,
        mock_blob_store,
        mock_event_bus,
        pdf_file,
        grade_level,
    ):
        """Test out-of-range grades are rejected before anything is stored."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=grade_level,
                title="Vectors",
                file=pdf_file,
            )

        mock_blob_store.upload.assert_not_awaited()
        mock_db.add.assert_not_called()
        mock_event_bus.publish.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("grade_level", [9, 12])
    async def test_grade_level_bounds_accepted(self, assignment_service, pdf_file, grade_level):
        """Test the configured bounds themselves are valid."""
        result = await assignment_service.create_assignment(
            teacher_id="teacher-1",
            subject_id="math",
            grade_level=grade_level,
            title="Vectors",
            file=pdf_file,
        )

        assert result.grade_level == grade_level

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "x" * 256])
    async def test_invalid_title(self, assignment_service, mock_blob_store, pdf_file, title):
        """Test blank and overlong titles are rejected."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title=title,
                file=pdf_file,
            )

        mock_blob_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_description_too_long(self, assignment_service, pdf_file):
        """Test descriptions over the limit are rejected."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=pdf_file,
                description="d" * 5001,
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "upload",
        [
            UploadedFile(filename="notes.pdf", content_type="application/pdf", content=b""),
            UploadedFile(filename="notes.docx", content_type="application/pdf", content=b"data"),
            UploadedFile(filename="notes.pdf", content_type="image/png", content=b"data"),
            UploadedFile(filename="  ", content_type="application/pdf", content=b"data"),
        ],
        ids=["empty", "extension", "content-type", "no-filename"],
    )
    async def test_invalid_file(self, assignment_service, mock_blob_store, mock_db, upload):
        """Test unacceptable documents are rejected before upload."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=upload,
            )

        mock_blob_store.upload.assert_not_awaited()
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_file_too_large(self, mock_db, mock_blob_store, mock_event_bus, pdf_file):
        """Test documents above the size limit are rejected."""
        service = AssignmentService(
            db=mock_db,
            blob_store=mock_blob_store,
            event_bus=mock_event_bus,
            settings=Settings(storage=StorageSettings(max_file_size=8)),
        )

        with pytest.raises(AssignmentValidationError):
            await service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=pdf_file,
            )

        mock_blob_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_due_date_from_datetime_string(self, assignment_service, pdf_file):
        """Test only the date part of an ISO datetime is kept."""
        result = await assignment_service.create_assignment(
            teacher_id="teacher-1",
            subject_id="math",
            grade_level=10,
            title="Vectors",
            file=pdf_file,
            due_date="2025-03-14T23:59:00",
        )

        assert result.due_date == date(2025, 3, 14)

    @pytest.mark.asyncio
    async def test_invalid_due_date(self, assignment_service, mock_blob_store, pdf_file):
        """Test malformed due dates are rejected."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=pdf_file,
                due_date="14/03/2025",
            )

        mock_blob_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upload_failure_leaves_store_untouched(
        self,
        assignment_service,
        mock_db,
        mock_blob_store,
        mock_event_bus,
        pdf_file,
    ):
        """Test a storage failure aborts before persistence."""
        mock_blob_store.upload.side_effect = StorageError("bucket unavailable")

        with pytest.raises(StorageError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=pdf_file,
            )

        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_awaited()
        mock_event_bus.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persistence_failure_rolls_back(
        self,
        assignment_service,
        mock_db,
        mock_event_bus,
        pdf_file,
    ):
        """Test a failed commit is rolled back and no event is published."""
        mock_db.commit.side_effect = OperationalError("INSERT", {}, Exception("connection lost"))

        with pytest.raises(DatabaseError):
            await assignment_service.create_assignment(
                teacher_id="teacher-1",
                subject_id="math",
                grade_level=10,
                title="Vectors",
                file=pdf_file,
            )

        mock_db.rollback.assert_awaited_once()
        mock_event_bus.publish.assert_not_awaited()


class TestAssignmentServiceLifecycle:
    """Tests for update, soft delete and single reads."""

    @pytest.mark.asyncio
    async def test_soft_delete_retires_assignment(self, assignment_service, mock_db, mock_blob_store, make_row):
        """Test soft delete keeps the row and document."""
        row = make_row()
        before = row.updated_at
        mock_db.execute.return_value = _scalar_result(row)

        await assignment_service.soft_delete(row.id)

        assert row.status == AssignmentStatus.RETIRED.value
        assert row.is_active is False
        assert row.updated_at > before
        mock_db.commit.assert_awaited_once()
        mock_db.delete.assert_not_called()
        mock_blob_store.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_soft_delete_not_found(self, assignment_service, mock_db):
        """Test retiring a missing or retired assignment."""
        mock_db.execute.return_value = _scalar_result(None)

        with pytest.raises(AssignmentNotFoundError):
            await assignment_service.soft_delete("missing")

        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_update_only_touches_updated_at(self, assignment_service, mock_db, make_row):
        """Test an update without fields changes nothing but updated_at."""
        row = make_row(title="Original", description="Keep me")
        before = row.updated_at
        mock_db.execute.return_value = _scalar_result(row)

        result = await assignment_service.update_assignment(row.id)

        assert result.title == "Original"
        assert result.description == "Keep me"
        assert result.due_date == date(2025, 3, 14)
        assert result.updated_at > before
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_applies_trimmed_values(self, assignment_service, mock_db, make_row):
        """Test supplied fields are trimmed and applied."""
        row = make_row()
        mock_db.execute.return_value = _scalar_result(row)

        result = await assignment_service.update_assignment(
            row.id,
            title="  New title ",
            description="  Read pages 10-12  ",
            due_date=date(2025, 4, 1),
        )

        assert result.title == "New title"
        assert result.description == "Read pages 10-12"
        assert result.due_date == date(2025, 4, 1)

    @pytest.mark.asyncio
    async def test_update_ignores_blank_title(self, assignment_service, mock_db, make_row):
        """Test a blank title leaves the existing title."""
        row = make_row(title="Original")
        mock_db.execute.return_value = _scalar_result(row)

        result = await assignment_service.update_assignment(row.id, title="   ")

        assert result.title == "Original"

    @pytest.mark.asyncio
    async def test_update_not_found(self, assignment_service, mock_db):
        """Test updating a missing or retired assignment."""
        mock_db.execute.return_value = _scalar_result(None)

        with pytest.raises(AssignmentNotFoundError):
            await assignment_service.update_assignment("missing", title="New")

    @pytest.mark.asyncio
    async def test_get_assignment_not_found(self, assignment_service, mock_db):
        """Test reading a missing or retired assignment."""
        mock_db.execute.return_value = _scalar_result(None)

        with pytest.raises(AssignmentNotFoundError):
            await assignment_service.get_assignment("missing")

    @pytest.mark.asyncio
    async def test_generate_download_url(self, assignment_service, mock_db, mock_blob_store, make_row):
        """Test the URL is produced for the stored key."""
        row = make_row(file_path="assignments/abc.pdf")
        mock_db.execute.return_value = _scalar_result(row)

        url = await assignment_service.generate_download_url(row.id)

        mock_blob_store.url_for.assert_called_once_with("assignments/abc.pdf")
        assert url == mock_blob_store.url_for.return_value

    @pytest.mark.asyncio
    async def test_download_url_resolved_on_worker_thread(
        self, assignment_service, mock_db, mock_blob_store, make_row
    ):
        """Test presigning never runs on the event loop thread."""
        mock_db.execute.return_value = _scalar_result(make_row())
        url_threads = []
        mock_blob_store.url_for.side_effect = lambda key: url_threads.append(threading.get_ident()) or key

        await assignment_service.generate_download_url("a1")

        assert url_threads and url_threads[0] != threading.get_ident()


class TestAssignmentServicePagination:
    """Tests for paged reads."""

    @pytest.mark.asyncio
    async def test_find_active_page_metadata(self, assignment_service, mock_db, make_row):
        """Test page metadata is derived from the total count."""
        rows = [make_row() for _ in range(10)]
        mock_db.execute.side_effect = [_count_result(12), _rows_result(rows)]

        result = await assignment_service.find_active(page=1)

        assert len(result.items) == 10
        assert result.page == 1
        assert result.page_size == 10
        assert result.total_elements == 12
        assert result.total_pages == 2
        assert result.has_next is True
        assert result.has_previous is False

    @pytest.mark.asyncio
    async def test_last_page(self, assignment_service, mock_db, make_row):
        """Test the last page has no next page."""
        mock_db.execute.side_effect = [_count_result(12), _rows_result([make_row(), make_row()])]

        result = await assignment_service.find_by_subject_and_grade("math", 10, page=2)

        assert len(result.items) == 2
        assert result.has_next is False
        assert result.has_previous is True

    @pytest.mark.asyncio
    async def test_empty_result(self, assignment_service, mock_db):
        """Test an empty result set has no pages."""
        mock_db.execute.side_effect = [_count_result(0), _rows_result([])]

        result = await assignment_service.find_by_teacher("teacher-1", page=1, grade_level=10)

        assert result.items == []
        assert result.total_pages == 0
        assert result.has_next is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", [0, -3])
    async def test_invalid_page(self, assignment_service, mock_db, page):
        """Test pages below 1 are rejected without querying."""
        with pytest.raises(AssignmentValidationError):
            await assignment_service.find_active(page=page)

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_by_subjects_without_subjects(self, assignment_service, mock_db):
        """Test an empty subject list yields an empty page."""
        result = await assignment_service.find_by_subjects_and_grade([], 10, page=1)

        assert result.items == []
        assert result.total_elements == 0
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_queries_filter_on_active_status(self, assignment_service, mock_db):
        """Test every read query is restricted to active assignments."""
        mock_db.execute.side_effect = [_count_result(0), _rows_result([])]

        await assignment_service.find_active(page=1)

        for call in mock_db.execute.await_args_list:
            compiled = str(call.args[0].compile(compile_kwargs={"literal_binds": True}))
            assert "assignments.status = 'active'" in compiled

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, assignment_service, mock_db, make_row):
        """Test two reads over unchanged data return equal pages."""
        rows = [
            make_row(created_at=datetime(2025, 3, 1, 9, i, tzinfo=timezone.utc))
            for i in range(3)
        ]
        mock_db.execute.side_effect = [
            _count_result(3),
            _rows_result(rows),
            _count_result(3),
            _rows_result(rows),
        ]

        first = await assignment_service.find_active(page=1)
        second = await assignment_service.find_active(page=1)

        assert first == second
