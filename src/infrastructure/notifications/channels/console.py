# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel that writes to the log.

The channel renders the complete email (headers and plain text body)
exactly as it would be sent, then logs it instead of handing it to an
SMTP server. It is the default email channel of the service.
"""

import logging
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


def _header_value(value: str) -> str:
    """Collapse line breaks and whitespace runs into single spaces.

    Header values may not contain CR or LF characters.
    """
    return " ".join((value or "").split())


class ConsoleEmailChannel(BaseChannel):
    """Email channel that logs rendered messages."""

    def __init__(self, from_name: str = "Shiksha LMS", from_email: str = "no-reply@shiksha.local") -> None:
        """Initialize the channel.

        Args:
            from_name: Sender display name.
            from_email: Sender address.
        """
        super().__init__()
        self._from_name = from_name
        self._from_email = from_email

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.EMAIL

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Render the email and write it to the log.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self.build_message(payload)
        self.logger.info(
            "Email to %s (%s)\n%s",
            payload.recipient_email,
            payload.recipient_name,
            message.as_string(),
        )
        return self.create_success_result(message_id=message["Message-ID"])

    def build_message(self, payload: NotificationPayload) -> EmailMessage:
        """Build the plain text email message.

        Args:
            payload: Notification payload.

        Returns:
            EmailMessage with headers and body set.
        """
        message = EmailMessage()
        message["From"] = formataddr((self._from_name, self._from_email))
        message["To"] = formataddr((_header_value(payload.recipient_name), payload.recipient_email))
        message["Subject"] = _header_value(payload.title)
        message["Message-ID"] = make_msgid(domain=self._from_email.partition("@")[2] or None)
        message.set_content(payload.message)
        return message
