# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment model.

An assignment is a homework document published by a teacher for one
subject and grade level. Assignments are never physically deleted:
retiring one moves it out of the ACTIVE state while the row and the
stored document are kept.
"""

from datetime import date
from enum import Enum
from uuid import uuid4

from sqlalchemy import Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class AssignmentStatus(str, Enum):
    """Lifecycle state of an assignment."""

    ACTIVE = "active"
    RETIRED = "retired"


class Assignment(Base, TimestampMixin):
    """Published homework assignment."""

    __tablename__ = "assignments"
    __table_args__ = (
        Index("ix_assignments_subject_grade_status", "subject_id", "grade_level", "status"),
        Index("ix_assignments_teacher_status", "teacher_id", "status"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AssignmentStatus.ACTIVE.value,
        server_default=AssignmentStatus.ACTIVE.value,
    )

    @property
    def is_active(self) -> bool:
        """Whether the assignment is visible through normal reads."""
        return self.status == AssignmentStatus.ACTIVE.value

    def retire(self) -> None:
        """Move the assignment out of the active state."""
        self.status = AssignmentStatus.RETIRED.value

    def __repr__(self) -> str:
        return f"<Assignment(id={self.id}, title={self.title!r}, status={self.status})>"
