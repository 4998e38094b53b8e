# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment directory for resolving students and user names.

The directory answers exactly two questions for the notification
fan-out: which students are enrolled in a subject at a grade level,
and what a user's display name is.

SqlEnrollmentDirectory opens a fresh session per call, because it runs
in event handlers after the request that published the event has
already closed its session.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models.user import User, UserSubject

logger = logging.getLogger(__name__)

STUDENT_USER_TYPE = "student"


@dataclass(frozen=True)
class StudentContact:
    """Contact details of an enrolled student.

    Attributes:
        user_id: Student's user ID.
        email: Email address.
        full_name: Display name, may be empty.
    """

    user_id: str
    email: str
    full_name: str


class EnrollmentDirectory(ABC):
    """Read-only view of enrollments and user names."""

    @abstractmethod
    async def find_students(self, subject_id: str, grade_level: int) -> list[StudentContact]:
        """Return active students enrolled in a subject at a grade level."""
        ...

    @abstractmethod
    async def full_name(self, user_id: str) -> str:
        """Return a user's display name."""
        ...


class SqlEnrollmentDirectory(EnrollmentDirectory):
    """EnrollmentDirectory backed by the users and user_subjects tables."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        fallback_name: str = "Teacher",
    ) -> None:
        """Initialize the directory.

        Args:
            sessionmaker: Factory for database sessions.
            fallback_name: Name returned when a user cannot be resolved.
        """
        self._sessionmaker = sessionmaker
        self._fallback_name = fallback_name

    async def find_students(self, subject_id: str, grade_level: int) -> list[StudentContact]:
        """Return active students enrolled in a subject at a grade level.

        Args:
            subject_id: Subject identifier.
            grade_level: Grade level.

        Returns:
            Students ordered by user ID, without duplicates.

        Raises:
            DatabaseError: If the lookup fails.
        """
        query = (
            select(User)
            .join(UserSubject, UserSubject.user_id == User.id)
            .where(
                UserSubject.subject_id == str(subject_id),
                UserSubject.grade_level == grade_level,
                User.user_type == STUDENT_USER_TYPE,
                User.is_active.is_(True),
            )
            .order_by(User.id)
            .distinct()
        )

        try:
            async with self._sessionmaker() as session:
                result = await session.execute(query)
                users = result.scalars().all()
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to load enrolled students", e) from e

        return [
            StudentContact(user_id=u.id, email=u.email, full_name=u.full_name)
            for u in users
        ]

    async def full_name(self, user_id: str) -> str:
        """Return a user's display name.

        Never raises: unknown users, blank names and database errors
        all yield the fallback name.
        """
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(select(User).where(User.id == str(user_id)))
                user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning("Could not resolve name of user %s: %s", user_id, str(e))
            return self._fallback_name

        if user is None or not user.full_name:
            return self._fallback_name
        return user.full_name
