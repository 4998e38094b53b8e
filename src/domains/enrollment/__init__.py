# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

Read-only lookups of subject enrollments and user names.
"""

from src.domains.enrollment.directory import (
    EnrollmentDirectory,
    SqlEnrollmentDirectory,
    StudentContact,
)

__all__ = [
    "EnrollmentDirectory",
    "SqlEnrollmentDirectory",
    "StudentContact",
]
