# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package.

Pydantic-based settings loaded from environment variables.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.storage.upload_prefix
    'assignments'
"""

from src.core.config.settings import (
    APISettings,
    AssignmentSettings,
    DatabaseSettings,
    NotificationSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "StorageSettings",
    "AssignmentSettings",
    "NotificationSettings",
    "APISettings",
]
