"""Shiksha Assignments Backend.

Assignment publishing for a school-management backend: teachers publish
homework documents, enrolled students are notified asynchronously, and
students browse assignments across their subjects.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
