"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging activation links to stdout for development.
"""

import logging

from src.domain.models import DeviceKey

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For development purposes - prints activation links instead of mailing them.
    """

    def send_activation_email(self, device_key: DeviceKey, activation_link: str) -> None:
        """
        Log the activation link to console (simulates email delivery).

        The link is logged at INFO level to be visible in server logs.

        Args:
            device_key: Pending device key (recipient is its email)
            activation_link: URL that activates the key
        """
        logger.info(
            "[ACTIVATION] Email: %s Device: %s Link: %s",
            device_key.email,
            device_key.device_name,
            activation_link,
        )
