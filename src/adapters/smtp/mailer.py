"""
SMTP email sender adapter - Implements EmailSender protocol.

Renders the activation email from templates/activate.txt and delivers it
through an SMTP server. The template is read once when the sender is
constructed.
"""

import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from string import Template

from src.config.settings import Settings
from src.domain.exceptions import MailError
from src.domain.models import DeviceKey

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / "activate.txt"


def load_template(path: Path = DEFAULT_TEMPLATE_PATH) -> Template:
    """Read an activation email template ($email, $device_name, $activation_link)."""
    return Template(path.read_text(encoding="utf-8"))


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Opens one SMTP connection per email; callers run it off the request path.
    """

    def __init__(self, settings: Settings, template: Template | None = None) -> None:
        """
        Initialize sender from settings.

        Args:
            settings: Application settings (server, port, credentials, subject)
            template: Pre-parsed body template; defaults to templates/activate.txt
        """
        self._settings = settings
        self._template = template if template is not None else load_template()

    def render(self, device_key: DeviceKey, activation_link: str) -> str:
        return self._template.safe_substitute(
            email=device_key.email,
            device_name=device_key.device_name,
            activation_link=activation_link,
        )

    def send_activation_email(self, device_key: DeviceKey, activation_link: str) -> None:
        """
        Render and send the activation email.

        Raises:
            MailError: If connecting, authenticating or sending fails
        """
        settings = self._settings

        message = EmailMessage()
        message["Subject"] = settings.email_subject
        message["From"] = settings.sender_address
        message["To"] = device_key.email
        message.set_content(self.render(device_key, activation_link))

        try:
            with smtplib.SMTP(
                settings.email_server, settings.email_port, timeout=settings.smtp_timeout
            ) as smtp:
                if settings.email_use_tls:
                    smtp.starttls()
                if settings.email_username:
                    smtp.login(settings.email_username, settings.email_password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"could not send activation email to {device_key.email}: {e}") from e

        logger.info("Activation email sent to %s", device_key.email)
