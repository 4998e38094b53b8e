# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models."""

from src.infrastructure.database.models.assignment import Assignment, AssignmentStatus
from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.user import User, UserSubject

__all__ = [
    "Base",
    "TimestampMixin",
    "Assignment",
    "AssignmentStatus",
    "User",
    "UserSubject",
]
