# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

This package contains domain services that encapsulate business logic.

Domains:
    assignment: Assignment store, domain events and the student feed.
    enrollment: Read-only lookup of enrolled students and user names.
    notification: Fan-out of new assignment notifications.
"""
