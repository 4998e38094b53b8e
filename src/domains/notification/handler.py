# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment notification fan-out.

Listens for assignment.created events and sends one personalised
notification to every student enrolled in the assignment's subject and
grade level. A failure for one student never stops delivery to the
others. Nothing is persisted and failed deliveries are not retried.
"""

import logging
from dataclasses import dataclass, field

from src.core.config.settings import NotificationSettings
from src.domains.assignment.events import AssignmentCreatedEvent
from src.domains.enrollment.directory import EnrollmentDirectory, StudentContact
from src.infrastructure.events import EventBus, EventData, EventTypes
from src.infrastructure.notifications import NotificationPayload, NotificationService

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATE = """\
Dear {recipient_name},

A new assignment has been posted for {subject_label} by {teacher_name}.

Assignment: {title}
Due Date: {due_date}

Please log in to the student portal to download and complete the assignment.

Best regards,
{platform_name}
"""


@dataclass
class FanOutResult:
    """Outcome of notifying the students of one assignment.

    Attributes:
        assignment_id: Assignment the notifications were about.
        recipients: Number of students found.
        delivered: Number of students notified successfully.
        errors: One message per failed student or lookup.
    """

    assignment_id: str
    recipients: int = 0
    delivered: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.recipients - self.delivered


class AssignmentNotificationHandler:
    """Notifies enrolled students about new assignments."""

    def __init__(
        self,
        directory: EnrollmentDirectory,
        notification_service: NotificationService,
        settings: NotificationSettings | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            directory: Source of enrolled students and teacher names.
            notification_service: Service used to deliver notifications.
            settings: Notification settings.
        """
        self._directory = directory
        self._notifications = notification_service
        self._settings = settings or NotificationSettings()

    def register(self, bus: EventBus) -> None:
        """Subscribe the handler to assignment.created events."""
        bus.subscribe(EventTypes.Assignment.CREATED, self.handle)
        logger.info("Assignment notification handler registered")

    def unregister(self, bus: EventBus) -> None:
        """Remove the subscription added by register."""
        if bus.unsubscribe(EventTypes.Assignment.CREATED, self.handle):
            logger.info("Assignment notification handler unregistered")

    async def handle(self, event: EventData) -> FanOutResult:
        """Handle an assignment.created event.

        Args:
            event: Event whose payload is an AssignmentCreatedEvent.

        Returns:
            FanOutResult with delivery counts.
        """
        assignment: AssignmentCreatedEvent = event.payload
        result = FanOutResult(assignment_id=assignment.assignment_id)

        logger.info(
            "Processing %s for assignment %s (%r)",
            event.event_type,
            assignment.assignment_id,
            assignment.title,
        )

        try:
            students = await self._directory.find_students(
                assignment.subject_id,
                assignment.grade_level,
            )
        except Exception as e:
            logger.error(
                "Could not load students for assignment %s: %s",
                assignment.assignment_id,
                str(e),
                exc_info=True,
            )
            result.errors.append(f"Student lookup failed: {e}")
            return result

        result.recipients = len(students)
        if not students:
            logger.info("No students to notify for assignment %s", assignment.assignment_id)
            return result

        teacher_name = await self._teacher_name(assignment.teacher_id)

        for student in students:
            try:
                await self._notifications.send(
                    self._build_payload(student, assignment, teacher_name)
                )
                result.delivered += 1
            except Exception as e:
                logger.error(
                    "Failed to notify student %s about assignment %s: %s",
                    student.user_id,
                    assignment.assignment_id,
                    str(e),
                )
                result.errors.append(f"{student.user_id}: {e}")

        logger.info(
            "Notified %d of %d students about assignment %s",
            result.delivered,
            result.recipients,
            assignment.assignment_id,
        )
        return result

    async def _teacher_name(self, teacher_id: str) -> str:
        try:
            name = await self._directory.full_name(teacher_id)
        except Exception as e:
            logger.warning("Could not resolve teacher %s: %s", teacher_id, str(e))
            return self._settings.fallback_sender_name
        return name or self._settings.fallback_sender_name

    def _build_payload(
        self,
        student: StudentContact,
        assignment: AssignmentCreatedEvent,
        teacher_name: str,
    ) -> NotificationPayload:
        """Compose the notification for one student."""
        recipient_name = student.full_name or self._settings.fallback_recipient_name
        subject_label = self._settings.subject_label_template.format(
            subject_id=assignment.subject_id
        )
        due_date = (
            assignment.due_date.isoformat()
            if assignment.due_date
            else self._settings.no_due_date_label
        )

        return NotificationPayload(
            recipient_id=student.user_id,
            recipient_email=student.email,
            recipient_name=recipient_name,
            title=f"New Assignment: {assignment.title}",
            message=MESSAGE_TEMPLATE.format(
                recipient_name=recipient_name,
                subject_label=subject_label,
                teacher_name=teacher_name,
                title=assignment.title,
                due_date=due_date,
                platform_name=self._settings.platform_name,
            ),
            data={
                "assignment_id": assignment.assignment_id,
                "assignment_title": assignment.title,
                "teacher_name": teacher_name,
                "subject": subject_label,
                "due_date": due_date,
            },
        )
