# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Identify the calling user
- Get service instances

Caller identity is taken from the X-User-Id and X-User-Type headers,
which are set by the gateway in front of this service and trusted as
supplied.

Example:
    @router.get("/teacher")
    async def list_my_assignments(
        current_user: CurrentUser = Depends(require_teacher),
        service: AssignmentService = Depends(get_assignment_service),
    ):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.domains.assignment import AssignmentService, StudentAssignmentFeed
from src.infrastructure.database.connection import get_session
from src.infrastructure.events import EventBus, get_event_bus
from src.infrastructure.storage import BlobStore, S3BlobStore
from src.utils.logging import bind_context

logger = logging.getLogger(__name__)

TEACHER = "teacher"
STUDENT = "student"

# Blob store singleton
_blob_store: BlobStore | None = None


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the calling user.

    Attributes:
        id: User ID.
        user_type: Type of user (teacher, student, admin).
    """

    id: str
    user_type: str

    @property
    def is_teacher(self) -> bool:
        return self.user_type == TEACHER

    @property
    def is_student(self) -> bool:
        return self.user_type == STUDENT


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    The session commits when the request succeeds and rolls back
    otherwise.

    Yields:
        AsyncSession for the request.
    """
    async with get_session() as session:
        yield session


def get_bus() -> EventBus:
    """Get the process event bus."""
    return get_event_bus()


def get_blob_store() -> BlobStore:
    """Get the blob store used for assignment documents."""
    global _blob_store
    if _blob_store is None:
        _blob_store = S3BlobStore(get_settings().storage)
    return _blob_store


# =========================================================================
# Identity Dependencies
# =========================================================================


def get_current_user(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_type: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Identify the caller from trusted headers.

    Args:
        x_user_id: Value of the X-User-Id header.
        x_user_type: Value of the X-User-Type header.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If the caller is not identified.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = CurrentUser(
        id=x_user_id.strip(),
        user_type=(x_user_type or "").strip().lower(),
    )
    bind_context(user_id=user.id, user_type=user.user_type)
    return user


def require_teacher(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require a teacher.

    Raises:
        HTTPException: If the caller is not a teacher.
    """
    if not current_user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher access required",
        )
    return current_user


def require_student(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require a student.

    Raises:
        HTTPException: If the caller is not a student.
    """
    if not current_user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )
    return current_user


# =========================================================================
# Service Dependencies
# =========================================================================


def get_assignment_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    event_bus: EventBus = Depends(get_bus),
) -> AssignmentService:
    """Get assignment service instance.

    Args:
        db: Database session.
        blob_store: Document store.
        event_bus: Event bus.

    Returns:
        Configured AssignmentService instance.
    """
    return AssignmentService(
        db=db,
        blob_store=blob_store,
        event_bus=event_bus,
        settings=get_settings(),
    )


def get_assignment_feed(
    service: AssignmentService = Depends(get_assignment_service),
) -> StudentAssignmentFeed:
    """Get student assignment feed instance."""
    return StudentAssignmentFeed(service, settings=get_settings())
