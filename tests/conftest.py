# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator
from datetime import date, datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.core.config import Settings, clear_settings_cache
from src.infrastructure.database.models import Assignment, AssignmentStatus
from src.infrastructure.events import reset_event_bus
from src.infrastructure.storage import UploadedFile
from src.models.assignment import AssignmentDTO


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state() -> Generator[None, None, None]:
    """Reset cached settings and the event bus singleton around each test."""
    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


@pytest.fixture
def settings() -> Settings:
    """Provide settings with test defaults."""
    return Settings(environment="development", debug=True)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def sample_teacher_id() -> str:
    """Provide a sample teacher ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440010"


@pytest.fixture
def sample_subject_id() -> str:
    """Provide a sample subject ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440020"


@pytest.fixture
def pdf_file() -> UploadedFile:
    """Provide a small valid PDF upload."""
    return UploadedFile(
        filename="algebra-worksheet.pdf",
        content_type="application/pdf",
        content=b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF",
    )


def _make_assignment_dto(
    created_at: datetime | None = None,
    **overrides: Any,
) -> AssignmentDTO:
    created = created_at or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
    data: dict[str, Any] = {
        "id": str(uuid4()),
        "teacher_id": "teacher-1",
        "subject_id": "math",
        "grade_level": 10,
        "title": "Quadratic equations",
        "description": None,
        "file_path": f"assignments/{uuid4()}.pdf",
        "file_name": "quadratics.pdf",
        "due_date": date(2025, 3, 14),
        "created_at": created,
        "updated_at": created,
        "is_active": True,
    }
    data.update(overrides)
    return AssignmentDTO(**data)


def _make_assignment_row(**overrides: Any) -> Assignment:
    dto = _make_assignment_dto(**overrides)
    fields = dto.model_dump(exclude={"is_active"})
    return Assignment(
        **fields,
        status=AssignmentStatus.ACTIVE.value if dto.is_active else AssignmentStatus.RETIRED.value,
    )


def _dto_series(count: int, start: datetime, **overrides: Any) -> list[AssignmentDTO]:
    return [
        _make_assignment_dto(created_at=start - timedelta(minutes=i), **overrides)
        for i in range(count)
    ]


@pytest.fixture
def make_dto():
    """Factory for AssignmentDTO objects."""
    return _make_assignment_dto


@pytest.fixture
def make_row():
    """Factory for unsaved ORM Assignment rows."""
    return _make_assignment_row


@pytest.fixture
def dto_series():
    """Factory for DTO lists spaced one minute apart, newest first."""
    return _dto_series
