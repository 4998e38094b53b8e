# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request, response and read models."""

from src.models.assignment import (
    AssignmentDTO,
    AssignmentListResponse,
    AssignmentResponse,
    StudentAssignmentFeedResponse,
    UpdateAssignmentRequest,
)
from src.models.common import PagedResult

__all__ = [
    "AssignmentDTO",
    "AssignmentListResponse",
    "AssignmentResponse",
    "PagedResult",
    "StudentAssignmentFeedResponse",
    "UpdateAssignmentRequest",
]
