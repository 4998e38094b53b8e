# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment request and response models."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class AssignmentDTO(BaseModel):
    """Read model of an assignment returned by the service layer."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    teacher_id: str
    subject_id: str
    grade_level: int
    title: str
    description: str | None = None
    file_path: str
    file_name: str
    due_date: date | None = None
    created_at: datetime
    updated_at: datetime
    is_active: bool


class AssignmentResponse(BaseModel):
    """Assignment as exposed over HTTP (storage key omitted)."""

    id: str
    teacher_id: str
    subject_id: str
    grade_level: int
    title: str
    description: str | None = None
    file_name: str
    due_date: date | None = None
    created_at: datetime
    updated_at: datetime
    is_active: bool

    @classmethod
    def from_dto(cls, dto: AssignmentDTO) -> "AssignmentResponse":
        """Build the HTTP representation of an assignment."""
        return cls(**dto.model_dump(exclude={"file_path"}))


class UpdateAssignmentRequest(BaseModel):
    """Partial update; omitted or null fields are left untouched."""

    title: str | None = Field(None, description="New title, trimmed; blank values are ignored")
    description: str | None = Field(None, description="New description, trimmed")
    due_date: date | None = Field(None, description="New due date")


class AssignmentListResponse(BaseModel):
    """Page of assignments."""

    assignments: list[AssignmentResponse]
    current_page: int
    page_size: int
    total_pages: int
    total_elements: int
    has_next: bool
    has_previous: bool


class StudentAssignmentFeedResponse(AssignmentListResponse):
    """Page of the student feed across several subjects."""

    grade_level: int
    requested_subjects: list[str]
