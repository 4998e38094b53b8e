# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain events emitted by the assignment service."""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any

from src.models.assignment import AssignmentDTO


@dataclass(frozen=True)
class AssignmentCreatedEvent:
    """Snapshot of a newly persisted assignment.

    The event is a value copy taken after commit, so later changes to
    the stored record are never visible to subscribers.
    """

    assignment_id: str
    teacher_id: str
    subject_id: str
    grade_level: int
    title: str
    description: str | None
    file_name: str
    due_date: date | None
    created_at: datetime

    @classmethod
    def from_assignment(cls, assignment: AssignmentDTO) -> "AssignmentCreatedEvent":
        """Build the event from a persisted assignment."""
        return cls(
            assignment_id=assignment.id,
            teacher_id=assignment.teacher_id,
            subject_id=assignment.subject_id,
            grade_level=assignment.grade_level,
            title=assignment.title,
            description=assignment.description,
            file_name=assignment.file_name,
            due_date=assignment.due_date,
            created_at=assignment.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["due_date"] = self.due_date.isoformat() if self.due_date else None
        data["created_at"] = self.created_at.isoformat()
        return data
