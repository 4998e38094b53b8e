# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.

Modules:
    assignments: Assignment publishing, listing and the student feed.
"""

from fastapi import APIRouter

from src.api.v1 import assignments

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])

__all__ = ["router"]
