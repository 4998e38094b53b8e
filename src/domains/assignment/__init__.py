# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment domain package.

This package provides assignment management functionality including:
- Publishing assignments with an attached PDF
- Soft deletion and partial updates
- Paginated reads and the multi-subject student feed
- The assignment.created domain event
"""

from src.domains.assignment.events import AssignmentCreatedEvent
from src.domains.assignment.feed import StudentAssignmentFeed, merge_subject_pages
from src.domains.assignment.service import (
    AssignmentNotFoundError,
    AssignmentService,
    AssignmentServiceError,
    AssignmentValidationError,
)

__all__ = [
    "AssignmentService",
    "AssignmentServiceError",
    "AssignmentValidationError",
    "AssignmentNotFoundError",
    "AssignmentCreatedEvent",
    "StudentAssignmentFeed",
    "merge_subject_pages",
]
